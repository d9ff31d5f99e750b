"""
Request tracking for the mock backend.

Every request gets an id (taken from `X-Request-ID` when the caller sends
one) that is echoed on the response and attached to the structured log lines.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from content_admin.logging_config import PerformanceTracker, get_logger

_request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

logger = get_logger(__name__)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str | None:
    """Get the current request ID from context."""
    return _request_id_ctx.get()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs `request_started` / `request_completed` with timing and status.

    Requests slower than `slow_request_threshold_ms` are logged as warnings.
    """

    def __init__(self, app: ASGIApp, *, slow_request_threshold_ms: float = 1000.0) -> None:
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or generate_request_id()
        _request_id_ctx.set(request_id)
        start = time.perf_counter()

        request_meta: dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "content_type": request.headers.get("content-type"),
        }
        logger.info("request_started", extra=request_meta)

        with PerformanceTracker("mock_request", endpoint=f"{request.method} {request.url.path}", request_id=request_id):
            response = await call_next(request)

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        response_meta: dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
        if duration_ms >= self.slow_request_threshold_ms:
            response_meta["slow_request"] = True
            logger.warning("request_completed_slow", extra=response_meta)
        else:
            logger.info("request_completed", extra=response_meta)
        return response
