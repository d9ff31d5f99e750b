"""
HTTP client for the publishing platform's REST backend.

All resources follow the same contract:

    GET    /api/<resource>            list
    GET    /api/<resource>/<id>       detail
    POST   /api/<resource>            create (multipart with files, JSON otherwise)
    PUT    /api/<resource>/<id>       update (some resources use PATCH)
    DELETE /api/<resource>/<id>       delete
    GET    /api/<resource>/image/<id> image bytes

Every failure is raised as a `ContentAdminError` subclass carrying the
best message the response body offers.
"""

from __future__ import annotations

import io
import logging
import time
from typing import Any, Callable
from urllib.parse import quote

import requests
from urllib3.filepost import encode_multipart_formdata

from content_admin.config import settings
from content_admin.exceptions import APIConnectionError, APITimeoutError, BackendError, NotFoundError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

SERVICE = "backend"


class ProgressReader(io.RawIOBase):
    """
    File-like view over an encoded request body that reports bytes read.

    `requests` streams file-like bodies in chunks, so each `read()` is one
    chunk on the wire and the callback sees real transfer progress.
    `__len__` minus `tell()` is the remaining length, which `requests`
    sends as `Content-Length`.
    """

    def __init__(self, body: bytes, callback: ProgressCallback | None = None) -> None:
        super().__init__()
        self._buffer = io.BytesIO(body)
        self._total = len(body)
        self._callback = callback
        self._sent = 0

    def __len__(self) -> int:
        return self._total

    def tell(self) -> int:
        return self._sent

    @property
    def sent(self) -> int:
        return self._sent

    def readable(self) -> bool:
        return True

    def readinto(self, b: Any) -> int:
        chunk = self._buffer.read(len(b))
        n = len(chunk)
        b[:n] = chunk
        self._advance(n)
        return n

    def read(self, size: int = -1) -> bytes:
        chunk = self._buffer.read(size)
        self._advance(len(chunk))
        return chunk

    def _advance(self, n: int) -> None:
        if not n:
            return
        self._sent += n
        if self._callback is not None:
            self._callback(self._sent, self._total)


def extract_error_message(response: requests.Response) -> str:
    """Best-effort message from an error response: message, error, detail, then reason."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, list) and value:
                parts = [str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in value]
                return "; ".join(parts)
    elif isinstance(body, str) and body.strip():
        return body.strip()

    return response.reason or f"Request failed with status {response.status_code}"


def normalize_list(data: Any) -> list[dict]:
    """Backends answer lists bare or wrapped in `data`/`items`/`results`."""
    if isinstance(data, list):
        return [r for r in data if isinstance(r, dict)]
    if isinstance(data, dict):
        for key in ("data", "items", "results", "rows"):
            if isinstance(data.get(key), list):
                return [r for r in data[key] if isinstance(r, dict)]
    return []


class BackendClient:
    """
    Thin wrapper around a `requests.Session` bound to one backend.

    No retries: a failure surfaces immediately to the caller.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.session = session or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}/api/{path.lstrip('/')}"

    @staticmethod
    def _record_path(endpoint: str, record_id: str | int) -> str:
        return f"{endpoint.strip('/')}/{quote(str(record_id), safe='')}"

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        data: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = self.url(path)
        start = time.perf_counter()
        try:
            response = self.session.request(
                method,
                url,
                json=json,
                data=data,
                headers=headers,
                params=params,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.warning("Backend timeout", extra={"method": method, "path": path, "error": str(e)})
            raise APITimeoutError(SERVICE, timeout_seconds=self.timeout) from e
        except requests.ConnectionError as e:
            logger.warning("Backend unreachable", extra={"method": method, "path": path, "error": str(e)})
            raise APIConnectionError(SERVICE, reason=str(e)) from e
        except requests.RequestException as e:
            logger.warning("Backend request failed", extra={"method": method, "path": path, "error": str(e)})
            raise APIConnectionError(SERVICE, reason=str(e)) from e

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "Backend request",
            extra={"method": method, "path": path, "status": response.status_code, "duration_ms": duration_ms},
        )

        if response.status_code == 404:
            raise NotFoundError(extract_error_message(response), resource_type=path)
        if response.status_code >= 400:
            raise BackendError(
                extract_error_message(response),
                status_code=response.status_code,
                method=method,
                path=path,
            )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _send(
        self,
        method: str,
        path: str,
        payload: Any,
        on_progress: ProgressCallback | None = None,
    ) -> Any:
        if not payload.is_multipart:
            return self.request(method, path, json=payload.fields)

        parts: list[tuple[str, Any]] = list(payload.form_fields())
        for name, upload in payload.files:
            parts.append((name, (upload.name, upload.content, upload.mime_type)))
        body, content_type = encode_multipart_formdata(parts)
        reader = ProgressReader(body, on_progress)
        return self.request(method, path, data=reader, headers={"Content-Type": content_type})

    # -------------------------------------------------------------------------
    # Resource operations
    # -------------------------------------------------------------------------

    def list(self, endpoint: str, **params: Any) -> list[dict]:
        return normalize_list(self.request("GET", endpoint, params=params or None))

    def get(self, endpoint: str, record_id: str | int) -> dict:
        data = self.request("GET", self._record_path(endpoint, record_id))
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            return data["data"]
        return data if isinstance(data, dict) else {}

    def create(self, endpoint: str, payload: Any, *, on_progress: ProgressCallback | None = None) -> Any:
        return self._send("POST", endpoint, payload, on_progress)

    def update(
        self,
        endpoint: str,
        record_id: str | int,
        payload: Any,
        *,
        method: str = "PUT",
        on_progress: ProgressCallback | None = None,
    ) -> Any:
        method = method.upper()
        if method not in ("PUT", "PATCH"):
            raise ValueError(f"Unsupported update method: {method}")
        return self._send(method, self._record_path(endpoint, record_id), payload, on_progress)

    def delete(self, endpoint: str, record_id: str | int) -> Any:
        return self.request("DELETE", self._record_path(endpoint, record_id))

    def count(self, path: str) -> Any:
        return self.request("GET", path)

    def image_url(self, endpoint: str, record_id: str | int, route: str = "image", *, bust: str | None = None) -> str:
        """Address of a record's image/cover/attachment; `bust` defeats browser caching."""
        url = self.url(f"{endpoint.strip('/')}/{route}/{quote(str(record_id), safe='')}")
        return f"{url}?ts={bust}" if bust else url

    def close(self) -> None:
        self.session.close()


_client: BackendClient | None = None


def get_client() -> BackendClient:
    """Get the global backend client instance."""
    global _client
    if _client is None:
        _client = BackendClient()
    return _client
