"""
Shared data-access interface.

Every screen talks to a `Repository`. REST-backed resources use
`RestRepository`; admin accounts use `AdminRepository` over the document
store, so screens never care where a record lives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from content_admin.api_client import BackendClient
from content_admin.exceptions import UnsupportedOperationError
from content_admin.forms import FormState, submit
from content_admin.listing import exclude_deleted
from content_admin.resources import ResourceSpec

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

PASSWORD_RESET_REQUIRED = "password_reset_required"


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a create or update, with notices for the user."""

    record: dict
    notices: tuple[str, ...] = ()


class Repository(Protocol):
    spec: ResourceSpec

    def list(self) -> list[dict]: ...

    def get(self, record_id: str | int) -> dict: ...

    def create(self, form: FormState, *, on_progress: ProgressCallback | None = None) -> SaveResult: ...

    def update(
        self, record_id: str | int, form: FormState, *, on_progress: ProgressCallback | None = None
    ) -> SaveResult: ...

    def delete(self, record_id: str | int) -> None: ...


class RestRepository:
    """Repository for one resource of the REST backend."""

    def __init__(self, spec: ResourceSpec, client: BackendClient) -> None:
        self.spec = spec
        self.client = client

    def list(self) -> list[dict]:
        return exclude_deleted(self.client.list(self.spec.endpoint))

    def get(self, record_id: str | int) -> dict:
        return self.client.get(self.spec.endpoint, record_id)

    def _ensure_writable(self, action: str) -> None:
        if self.spec.read_only:
            raise UnsupportedOperationError(f"{self.spec.label} cannot be {action} from the panel")

    def create(self, form: FormState, *, on_progress: ProgressCallback | None = None) -> SaveResult:
        self._ensure_writable("created")
        form.record_id = None
        data = submit(self.client, form, on_progress=on_progress)
        return SaveResult(record=data if isinstance(data, dict) else {})

    def update(
        self, record_id: str | int, form: FormState, *, on_progress: ProgressCallback | None = None
    ) -> SaveResult:
        self._ensure_writable("edited")
        data = submit(self.client, form, record_id, on_progress=on_progress)
        return SaveResult(record=data if isinstance(data, dict) else {})

    def delete(self, record_id: str | int) -> None:
        self._ensure_writable("deleted")
        self.client.delete(self.spec.endpoint, record_id)
        logger.info("Record deleted", extra={"resource": self.spec.key, "record_id": record_id})
