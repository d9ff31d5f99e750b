"""
CLI entrypoint for the mock backend.

Usage:
  content-admin-mock-backend --host 0.0.0.0 --port 5000
"""

from __future__ import annotations

import argparse

from content_admin.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the in-memory content admin backend")
    parser.add_argument("--host", default=settings.mock_backend_host)
    parser.add_argument("--port", type=int, default=settings.mock_backend_port)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    import uvicorn

    from content_admin.logging_config import configure_logging

    configure_logging()
    uvicorn.run("content_admin.mock_backend:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
