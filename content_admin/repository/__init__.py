"""
Repository module for data persistence.
"""

from __future__ import annotations

from content_admin.api_client import BackendClient
from content_admin.repository.admins import AdminRepository, AdminStore, get_admin_repo
from content_admin.repository.base import PASSWORD_RESET_REQUIRED, Repository, RestRepository, SaveResult
from content_admin.resources import ADMIN, ResourceSpec

__all__ = [
    "AdminRepository",
    "AdminStore",
    "PASSWORD_RESET_REQUIRED",
    "Repository",
    "RestRepository",
    "SaveResult",
    "get_repository",
]


def get_repository(spec: ResourceSpec, client: BackendClient, *, current_uid: str | None = None) -> Repository:
    """Admins go to the document store; everything else to the REST backend."""
    if spec.key == ADMIN.key:
        return get_admin_repo(current_uid)
    return RestRepository(spec, client)
