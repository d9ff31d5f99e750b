"""
In-memory stand-in for the publishing platform's REST backend.
"""

from content_admin.mock_backend.app import app, create_app
from content_admin.mock_backend.store import MemoryStore, StoredFile, seed

__all__ = ["MemoryStore", "StoredFile", "app", "create_app", "seed"]
