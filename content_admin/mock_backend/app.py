"""
FastAPI application factory for the local mock backend.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from content_admin.exceptions import ContentAdminError, exception_to_http_status
from content_admin.logging_config import get_logger
from content_admin.mock_backend.models import HealthResponse
from content_admin.mock_backend.observability import RequestLoggingMiddleware, generate_request_id, get_request_id
from content_admin.mock_backend.routes import build_count_router, build_router, rest_resources
from content_admin.mock_backend.store import MemoryStore, seed

logger = get_logger(__name__)


def create_app(store: MemoryStore | None = None, *, seed_data: bool = False) -> FastAPI:
    store = store if store is not None else MemoryStore()
    resources = rest_resources()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if seed_data:
            seed(store)
        logger.info("mock_backend_started", extra={"resources": len(resources), "seeded": seed_data})
        yield

    app = FastAPI(
        title="Content Admin Mock Backend",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/api/health", response_model=HealthResponse)
    def health(response: Response) -> dict:
        response.headers["Cache-Control"] = "no-store"
        return {"ok": True, "resources": sorted(resources)}

    # Fixed count paths must win over `/{record_id}` of the same prefix.
    app.include_router(build_count_router())
    for endpoint, specs in resources.items():
        app.include_router(build_router(endpoint, specs))

    def _error_headers(request: Request) -> dict[str, str]:
        rid = request.headers.get("x-request-id") or get_request_id() or generate_request_id()
        return {"X-Request-ID": rid, "Cache-Control": "no-store"}

    @app.exception_handler(ContentAdminError)
    def _content_admin_error(request: Request, exc: ContentAdminError) -> JSONResponse:
        return JSONResponse(
            status_code=exception_to_http_status(exc),
            content={"message": exc.message, "error": exc.error_code},
            headers=_error_headers(request),
        )

    return app


app = create_app(seed_data=True)
