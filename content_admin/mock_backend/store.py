"""
In-memory record store behind the mock backend.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass
from typing import Any

from content_admin.exceptions import ResourceNotFoundError
from content_admin.text_utils import utc_now_iso


@dataclass(frozen=True)
class StoredFile:
    filename: str
    content: bytes
    content_type: str


class MemoryStore:
    """
    Collections of records keyed by integer id, plus their uploaded files.

    Records are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self) -> None:
        self._records: dict[str, dict[int, dict[str, Any]]] = {}
        self._files: dict[tuple[str, int, str], StoredFile] = {}
        self._gallery_images: dict[int, StoredFile] = {}
        self._next_id: dict[str, int] = {}
        self._next_image_id = 1
        self._lock = threading.Lock()

    def _collection(self, name: str) -> dict[int, dict[str, Any]]:
        return self._records.setdefault(name, {})

    def list(self, collection: str) -> list[dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._collection(collection).values()]

    def get(self, collection: str, record_id: int) -> dict[str, Any]:
        with self._lock:
            record = self._collection(collection).get(record_id)
            if record is None:
                raise ResourceNotFoundError(collection, record_id)
            return copy.deepcopy(record)

    def create(self, collection: str, values: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            record_id = self._next_id.get(collection, 1)
            self._next_id[collection] = record_id + 1
            now = utc_now_iso()
            record = {**values, "id": record_id}
            record.setdefault("createdOn", now)
            record["modifiedOn"] = now
            self._collection(collection)[record_id] = record
            return copy.deepcopy(record)

    def update(self, collection: str, record_id: int, values: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            record = self._collection(collection).get(record_id)
            if record is None:
                raise ResourceNotFoundError(collection, record_id)
            record.update({k: v for k, v in values.items() if k not in ("id", "createdOn")})
            record["modifiedOn"] = utc_now_iso()
            return copy.deepcopy(record)

    def delete(self, collection: str, record_id: int) -> None:
        with self._lock:
            if self._collection(collection).pop(record_id, None) is None:
                raise ResourceNotFoundError(collection, record_id)
            for key in [k for k in self._files if k[0] == collection and k[1] == record_id]:
                del self._files[key]

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._collection(collection))

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def put_file(self, collection: str, record_id: int, field_name: str, stored: StoredFile) -> None:
        with self._lock:
            self._files[(collection, record_id, field_name)] = stored

    def get_file(self, collection: str, record_id: int, field_name: str) -> StoredFile:
        with self._lock:
            stored = self._files.get((collection, record_id, field_name))
        if stored is None:
            raise ResourceNotFoundError(f"{collection} {field_name}", record_id)
        return stored

    def add_gallery_image(self, stored: StoredFile) -> int:
        with self._lock:
            image_id = self._next_image_id
            self._next_image_id += 1
            self._gallery_images[image_id] = stored
            return image_id

    def get_gallery_image(self, image_id: int) -> StoredFile:
        with self._lock:
            stored = self._gallery_images.get(image_id)
        if stored is None:
            raise ResourceNotFoundError("gallery images", image_id)
        return stored


def seed(store: MemoryStore) -> None:
    """Sample data so the panel has something to show on first run."""
    for language in ("English", "Urdu", "Roman Urdu"):
        store.create("languages/language", {"language": language})
    for name in ("Fiqh", "Aqeedah", "Seerah"):
        store.create("categories", {"name": name})
    for tag in ("fasting", "prayer", "zakat"):
        store.create("tags", {"tag": tag})
    store.create("topics", {"topic": "Fasting", "title": "Fasting", "about": "<p>Rulings on fasting</p>", "category": "Fiqh", "tags": ["fasting"]})
    store.create("topics", {"topic": "Prayer", "title": "Prayer", "about": "<p>Rulings on prayer</p>", "category": "Fiqh", "tags": ["prayer"]})
    store.create(
        "writers",
        {"name": "Ahmed Raza", "designation": "Mufti", "email": "ahmed@example.com", "status": "Active", "joinedDate": "2023-01-10"},
    )
    store.create("translators", {"name": "Sara Khan", "designation": "Translator"})
    store.create(
        "articles",
        {
            "title": "The Virtues of Fasting",
            "topic": "Fasting",
            "writers": "Ahmed Raza",
            "language": "English",
            "date": "2024-03-12",
            "englishDescription": "<p>Fasting teaches patience.</p>",
            "isPublished": "true",
            "views": 42,
        },
    )
    store.create(
        "books",
        {"title": "Kitab al-Sawm", "author": "Ahmed Raza", "language": "Urdu", "status": "published", "bookDate": "2022-06-01"},
    )
    store.create(
        "questions",
        {
            "slug": "is-fasting-obligatory",
            "questionEnglish": "Is fasting obligatory?",
            "writer": "Ahmed Raza",
            "date": "2024-02-01",
            "language": "English",
            "topic": "Fasting",
            "answeredStatus": "yes",
            "answerEnglish": "<p>Yes, during Ramadan.</p>",
        },
    )
    store.create("feedback", {"name": "Bilal", "email": "bilal@example.com", "message": "Great site!"})
