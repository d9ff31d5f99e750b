"""
CRUD routes generated from the resource registry.

Each REST collection gets the same contract the panel's client speaks:
list, count, detail, create, update (PUT and PATCH), delete, and the
binary routes for its image, cover or attachment.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Request, Response
from starlette.datastructures import UploadFile

from content_admin.exceptions import MissingRequiredFieldError, UnsupportedOperationError, ValidationError
from content_admin.logging_config import get_logger
from content_admin.mock_backend.models import CombinedCountResponse, CountResponse, DeleteResponse
from content_admin.mock_backend.store import MemoryStore, StoredFile
from content_admin.resources import ADMIN, IMAGES, REGISTRY, ResourceSpec

logger = get_logger(__name__)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def get_store(request: Request) -> MemoryStore:
    return request.app.state.store


def rest_resources() -> dict[str, list[ResourceSpec]]:
    """Specs grouped by endpoint; several screens may share one collection."""
    grouped: dict[str, list[ResourceSpec]] = {}
    for spec in REGISTRY.values():
        if spec.key == ADMIN.key:
            continue
        grouped.setdefault(spec.endpoint, []).append(spec)
    return grouped


def _required_labels(specs: list[ResourceSpec]) -> dict[str, str]:
    """Scalar fields every screen of the collection requires on create."""
    per_spec = [
        {f.name: f.label for f in spec.scalar_fields if f.is_required(editing=False)}
        for spec in specs
    ]
    common = set(per_spec[0]).intersection(*per_spec[1:])
    return {name: label for name, label in per_spec[0].items() if name in common}


def _coerce(value: str) -> Any:
    if value == "true":
        return True
    if value == "false":
        return False
    return value


async def read_body(request: Request) -> tuple[dict[str, Any], dict[str, list[StoredFile]]]:
    """Scalar values and uploaded files from a multipart or JSON body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        values: dict[str, list[Any]] = {}
        files: dict[str, list[StoredFile]] = {}
        for key, item in form.multi_items():
            if isinstance(item, UploadFile):
                content = await item.read()
                files.setdefault(key, []).append(
                    StoredFile(
                        filename=item.filename or key,
                        content=content,
                        content_type=item.content_type or "application/octet-stream",
                    )
                )
            else:
                values.setdefault(key, []).append(_coerce(item))
        return {k: v[0] if len(v) == 1 else v for k, v in values.items()}, files

    raw = await request.body()
    if not raw:
        return {}, {}
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise ValidationError(f"Malformed JSON body: {e}") from e
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body, {}


def _file_response(stored: StoredFile) -> Response:
    return Response(
        content=stored.content,
        media_type=stored.content_type,
        headers={"Cache-Control": "no-store", "Content-Disposition": f'inline; filename="{stored.filename}"'},
    )


def build_router(endpoint: str, specs: list[ResourceSpec]) -> APIRouter:
    """Routes for one collection. `/count` and binary routes precede `/{record_id}`."""
    spec = specs[0]
    required = _required_labels(specs)
    read_only = all(s.read_only for s in specs)
    gallery_field = spec.image_field if spec.image_field and spec.get_field(spec.image_field).kind == IMAGES else None

    router = APIRouter(prefix=f"/api/{endpoint}", tags=[spec.key])

    def _store_files(store: MemoryStore, record_id: int, files: dict[str, list[StoredFile]]) -> dict[str, Any]:
        patch: dict[str, Any] = {}
        for name, uploads in files.items():
            if name == gallery_field:
                patch[name] = [{"id": store.add_gallery_image(f), "name": f.filename} for f in uploads]
                continue
            store.put_file(endpoint, record_id, name, uploads[0])
            patch[name] = uploads[0].filename
        return patch

    def _ensure_writable() -> None:
        if read_only:
            raise UnsupportedOperationError(f"{spec.label} cannot be modified")

    @router.get("")
    def list_records(request: Request) -> list[dict]:
        records = get_store(request).list(endpoint)
        request.state.result_count = len(records)
        return records

    if endpoint != "books":

        @router.get("/count", response_model=CountResponse)
        def count_records(request: Request) -> dict:
            return {"count": get_store(request).count(endpoint)}

    if spec.image_field:

        @router.get(f"/{spec.image_route}/{{record_id}}")
        def record_image(record_id: int, request: Request) -> Response:
            store = get_store(request)
            if gallery_field:
                return _file_response(store.get_gallery_image(record_id))
            return _file_response(store.get_file(endpoint, record_id, spec.image_field))

    if spec.attachment_field:

        @router.get(f"/{spec.attachment_route}/{{record_id}}")
        def record_attachment(record_id: int, request: Request) -> Response:
            return _file_response(get_store(request).get_file(endpoint, record_id, spec.attachment_field))

    @router.get("/{record_id}")
    def get_record(record_id: int, request: Request) -> dict:
        return get_store(request).get(endpoint, record_id)

    @router.post("", status_code=201)
    async def create_record(request: Request) -> dict:
        _ensure_writable()
        values, files = await read_body(request)
        missing = [label for name, label in required.items() if values.get(name) in (None, "", [])]
        if missing:
            raise MissingRequiredFieldError(missing)
        store = get_store(request)
        record = store.create(endpoint, values)
        if files:
            record = store.update(endpoint, record["id"], _store_files(store, record["id"], files))
        logger.info("record_created", extra={"resource": endpoint, "record_id": record["id"]})
        return record

    async def _update(record_id: int, request: Request) -> dict:
        _ensure_writable()
        values, files = await read_body(request)
        store = get_store(request)
        store.get(endpoint, record_id)
        values.update(_store_files(store, record_id, files))
        record = store.update(endpoint, record_id, values)
        logger.info("record_updated", extra={"resource": endpoint, "record_id": record_id})
        return record

    router.add_api_route("/{record_id}", _update, methods=["PUT"], name=f"update_{spec.key}")
    router.add_api_route("/{record_id}", _update, methods=["PATCH"], name=f"patch_{spec.key}")

    @router.delete("/{record_id}", response_model=DeleteResponse)
    def delete_record(record_id: int, request: Request) -> dict:
        _ensure_writable()
        get_store(request).delete(endpoint, record_id)
        logger.info("record_deleted", extra={"resource": endpoint, "record_id": record_id})
        return {"message": "Deleted successfully", "id": record_id}

    return router


def build_count_router() -> APIRouter:
    """Dashboard counters. Included before the collection routers."""
    router = APIRouter(prefix="/api", tags=["dashboard"])

    @router.get("/books/count", response_model=CombinedCountResponse)
    def combined_count(request: Request) -> dict:
        store = get_store(request)
        return {
            "writerCount": store.count("writers"),
            "translatorCount": store.count("translators"),
            "bookCount": store.count("books"),
            "articleCount": store.count("articles"),
            "feedbackCount": store.count("feedback"),
            # admin accounts are not held by this backend
            "adminCount": 0,
        }

    @router.get("/books/count-only", response_model=CountResponse)
    def book_count(request: Request) -> dict:
        return {"count": get_store(request).count("books")}

    @router.get("/admin/count", response_model=CountResponse)
    def admin_count() -> dict:
        return {"count": 0}

    return router
