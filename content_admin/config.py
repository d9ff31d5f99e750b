"""
Content Admin - Configuration Management
========================================
Centralized configuration with environment variable support and validation.

Usage:
    from content_admin.config import settings

    base_url = settings.api_base_url
    page_size = settings.default_page_size
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Application settings with environment variable overrides."""

    # Backend REST API
    api_base_url: str = "http://localhost:5000"
    request_timeout_seconds: int = 15

    # List views
    default_page_size: int = 10
    page_size_options: tuple[int, ...] = (5, 10, 20, 50)

    # Uploads
    max_upload_bytes: int = 5 * 1024 * 1024
    allowed_image_types: set[str] = field(default_factory=lambda: {"png", "jpg", "jpeg", "gif", "webp", "svg"})
    allowed_attachment_types: set[str] = field(default_factory=lambda: {"pdf"})

    # Persisted UI hints
    suggestion_store_path: Path = field(default_factory=lambda: Path("data/.image_suggestion.json"))

    # Admin accounts (document store + auth provider)
    admin_db_url: str | None = None
    auth_url: str | None = None
    admin_roles: tuple[str, ...] = ("admin", "superadmin")
    min_password_length: int = 6
    bootstrap_admin_email: str | None = None

    # Mock backend (local development)
    mock_backend_host: str = "127.0.0.1"
    mock_backend_port: int = 5000

    # Branding
    site_name: str = "Minara Admin"

    # Feature flags
    debug_mode: bool = False

    def __post_init__(self):
        """Load overrides from environment variables."""
        self._load_env_overrides()

    def _load_env_overrides(self):
        """Load configuration from environment variables."""
        # Backend
        if api_url := os.environ.get("CONTENT_ADMIN_API_URL", "").strip():
            self.api_base_url = api_url.rstrip("/")
        if timeout := os.environ.get("CONTENT_ADMIN_TIMEOUT"):
            self.request_timeout_seconds = int(timeout)

        # List views
        if page_size := os.environ.get("CONTENT_ADMIN_PAGE_SIZE"):
            self.default_page_size = max(1, int(page_size))

        # Uploads
        if max_upload := os.environ.get("CONTENT_ADMIN_MAX_UPLOAD_BYTES"):
            self.max_upload_bytes = int(max_upload)

        # Persisted UI hints
        if suggestion_path := os.environ.get("CONTENT_ADMIN_SUGGESTION_PATH"):
            self.suggestion_store_path = Path(suggestion_path)

        # Admin accounts
        if db_url := os.environ.get("CONTENT_ADMIN_DB_URL"):
            self.admin_db_url = db_url
        if auth_url := os.environ.get("CONTENT_ADMIN_AUTH_URL", "").strip():
            self.auth_url = auth_url.rstrip("/")
        if bootstrap_email := os.environ.get("CONTENT_ADMIN_BOOTSTRAP_EMAIL", "").strip():
            self.bootstrap_admin_email = bootstrap_email

        # Mock backend
        if host := os.environ.get("MOCK_BACKEND_HOST"):
            self.mock_backend_host = host
        if port := os.environ.get("MOCK_BACKEND_PORT"):
            self.mock_backend_port = int(port)

        # Branding
        if site_name := os.environ.get("CONTENT_ADMIN_SITE_NAME"):
            self.site_name = site_name

        # Feature flags
        if os.environ.get("DEBUG", "").lower() in ("1", "true"):
            self.debug_mode = True

    @property
    def auth_api_key(self) -> str | None:
        """Get the auth provider API key from environment (never stored in config)."""
        return os.environ.get("CONTENT_ADMIN_AUTH_KEY")

    @property
    def bootstrap_admin_password(self) -> str | None:
        """Password for the seeded local superadmin (never stored in config)."""
        return os.environ.get("CONTENT_ADMIN_BOOTSTRAP_PASSWORD")


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
        if _settings.debug_mode:
            logger.info("Settings loaded with debug mode enabled")
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from environment."""
    global _settings
    _settings = Settings()
    return _settings


# Convenience alias
settings = get_settings()


ROLE_LABELS = {
    "superadmin": "Super Admin",
    "admin": "Admin",
}

RESOURCE_ICONS = {
    "dashboard": "📊",
    "admins": "🛡️",
    "writers": "✍️",
    "translators": "🈯",
    "languages": "🌐",
    "topics": "📑",
    "articles": "📰",
    "events": "📅",
    "books": "📚",
    "questions": "❓",
    "homebookslider": "🎞️",
    "about": "ℹ️",
    "tags": "🏷️",
    "feedback": "💬",
    "galleries": "🖼️",
    "topictags": "🔖",
    "profile": "👤",
}
