"""
Tests for the FastAPI mock backend (content_admin.mock_backend).

These tests stay offline; the store is in memory.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from content_admin.mock_backend import MemoryStore, create_app, seed


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def client(store) -> TestClient:
    return TestClient(create_app(store=store))


def test_health(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert "articles" in body["resources"]
    assert "admins" not in body["resources"]
    assert "X-Request-ID" in resp.headers


def test_seed_runs_on_startup():
    store = MemoryStore()

    with TestClient(create_app(store=store, seed_data=True)) as client:
        resp = client.get("/api/languages/language")

    assert [r["language"] for r in resp.json()] == ["English", "Urdu", "Roman Urdu"]


def test_json_crud_cycle(client):
    resp = client.post("/api/tags", json={"tag": "fiqh"})
    assert resp.status_code == 201
    created = resp.json()
    assert created["tag"] == "fiqh"
    assert created["createdOn"]

    resp = client.put(f"/api/tags/{created['id']}", json={"tag": "usul", "id": 999})
    assert resp.status_code == 200
    assert resp.json()["tag"] == "usul"
    assert resp.json()["id"] == created["id"]

    assert client.get(f"/api/tags/{created['id']}").json()["tag"] == "usul"

    resp = client.delete(f"/api/tags/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Deleted successfully", "id": created["id"]}

    assert client.get("/api/tags").json() == []


def test_patch_updates(client):
    created = client.post("/api/articles", json={"title": "x", "topic": "t", "writers": "w", "language": "English", "date": "2024-01-01"}).json()

    resp = client.patch(f"/api/articles/{created['id']}", json={"views": 3})

    assert resp.json()["views"] == 3
    assert resp.json()["title"] == "x"


def test_missing_required_field_returns_400(client):
    resp = client.post("/api/tags", json={})

    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "The following fields are required: Tag"
    assert body["error"] == "missing_required_fields"


def test_shared_collection_requires_common_fields_only(client):
    resp = client.post("/api/topics", json={"topic": "Hajj"})

    assert resp.status_code == 201


def test_unknown_record_returns_404_with_message(client):
    resp = client.get("/api/articles/42")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Article not found"
    assert resp.json()["error"] == "not_found"


def test_delete_unknown_returns_404(client):
    assert client.delete("/api/articles/42").status_code == 404


def test_read_only_collection_returns_405(client, store):
    store.create("feedback", {"name": "Bilal", "message": "Hi"})

    resp = client.delete("/api/feedback/1")

    assert resp.status_code == 405
    assert resp.json()["message"] == "Feedback cannot be modified"
    assert len(client.get("/api/feedback").json()) == 1


def test_malformed_json_returns_400(client):
    resp = client.post("/api/tags", content=b"{not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


def test_multipart_create_stores_image(client, png_bytes):
    resp = client.post(
        "/api/events",
        data={"title": "Night of Power", "topic": "Ramadan", "language": "English", "eventDate": "2024-04-05", "venue": "Hall", "isPublished": "true"},
        files={"image": ("night.png", png_bytes, "image/png")},
    )

    assert resp.status_code == 201
    record = resp.json()
    assert record["image"] == "night.png"
    assert record["isPublished"] is True

    image = client.get(f"/api/events/image/{record['id']}")
    assert image.status_code == 200
    assert image.content == png_bytes
    assert image.headers["content-type"] == "image/png"
    assert image.headers["cache-control"] == "no-store"


def test_book_cover_and_attachment_routes(client, png_bytes):
    resp = client.post(
        "/api/books",
        data={"title": "Kitab", "author": "Ahmed", "language": "Urdu"},
        files=[
            ("coverImage", ("cover.png", png_bytes, "image/png")),
            ("attachment", ("kitab.pdf", b"%PDF-1.7", "application/pdf")),
        ],
    )
    book_id = resp.json()["id"]

    assert client.get(f"/api/books/cover/{book_id}").content == png_bytes
    assert client.get(f"/api/books/attachment/{book_id}").content == b"%PDF-1.7"


def test_replacing_image_on_update(client, png_bytes):
    created = client.post(
        "/api/translators",
        data={"name": "Sara"},
        files={"image": ("a.png", png_bytes, "image/png")},
    ).json()

    client.put(
        f"/api/translators/{created['id']}",
        data={"name": "Sara Khan"},
        files={"image": ("b.png", b"new-bytes", "image/png")},
    )

    assert client.get(f"/api/translators/image/{created['id']}").content == b"new-bytes"


def test_missing_image_returns_404(client, store):
    store.create("writers", {"name": "Ahmed"})

    assert client.get("/api/writers/image/1").status_code == 404


def test_gallery_images(client, png_bytes):
    resp = client.post(
        "/api/galleries",
        data={"title": "Conference", "date": "2024-05-01"},
        files=[
            ("images", ("one.png", png_bytes, "image/png")),
            ("images", ("two.png", b"second", "image/png")),
        ],
    )

    images = resp.json()["images"]
    assert [img["name"] for img in images] == ["one.png", "two.png"]
    assert client.get(f"/api/galleries/image/{images[1]['id']}").content == b"second"


def test_deleting_record_drops_its_files(client, store, png_bytes):
    created = client.post(
        "/api/translators", data={"name": "Sara"}, files={"image": ("a.png", png_bytes, "image/png")}
    ).json()

    client.delete(f"/api/translators/{created['id']}")

    assert client.get(f"/api/translators/image/{created['id']}").status_code == 404


def test_repeated_form_keys_become_lists(client):
    resp = client.post("/api/topics", data={"topic": "Hajj", "title": "Hajj", "tags": ["a", "b"]})

    assert resp.json()["tags"] == ["a", "b"]


def test_count_endpoints(client, store):
    seed(store)

    combined = client.get("/api/books/count").json()
    assert combined == {
        "writerCount": 1,
        "translatorCount": 1,
        "bookCount": 1,
        "articleCount": 1,
        "feedbackCount": 1,
        "adminCount": 0,
    }
    assert client.get("/api/books/count-only").json() == {"count": 1}
    assert client.get("/api/articles/count").json() == {"count": 1}
    assert client.get("/api/admin/count").json() == {"count": 0}


def test_non_integer_id_rejected(client):
    assert client.get("/api/articles/abc").status_code == 422
