"""
Per-screen state machines for list fetches and modal dialogs.

List views move through `idle → loading → {ready | error}` and back to
`loading` on refresh. A view has at most one active fetch: starting a new
one supersedes the previous ticket and its late result is discarded.

Modals are independent of each other and of the list:
`closed → open → submitting → closed`, with `submitting → open` on failure.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from content_admin.exceptions import ContentAdminError, user_message

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ModalStatus(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


class InvalidTransition(RuntimeError):
    """Raised when a state machine is driven along an edge it does not have."""


@dataclass(frozen=True)
class FetchTicket:
    """Handle for one in-flight fetch."""

    generation: int
    resource: str


class FetchGuard:
    """
    Generation counter enforcing one active fetch per view.

    `start()` hands out a new ticket and cancels every earlier one. A caller
    holding a superseded ticket must drop its result.
    """

    def __init__(self, resource: str = "") -> None:
        self.resource = resource
        self._generation = 0
        self._lock = threading.Lock()

    def start(self) -> FetchTicket:
        with self._lock:
            self._generation += 1
            return FetchTicket(self._generation, self.resource)

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1

    def is_current(self, ticket: FetchTicket) -> bool:
        return ticket.generation == self._generation

    @property
    def generation(self) -> int:
        return self._generation


@dataclass
class FetchState:
    """Lifecycle of one list view's data."""

    resource: str = ""
    status: FetchStatus = FetchStatus.IDLE
    records: list[dict] = field(default_factory=list)
    error: str | None = None
    guard: FetchGuard = field(default_factory=FetchGuard)

    def __post_init__(self) -> None:
        if not self.guard.resource:
            self.guard.resource = self.resource

    @property
    def is_loading(self) -> bool:
        return self.status is FetchStatus.LOADING

    @property
    def is_empty(self) -> bool:
        return self.status is FetchStatus.READY and not self.records

    def begin(self) -> FetchTicket:
        """Enter `loading`, superseding any fetch already in flight."""
        ticket = self.guard.start()
        self.status = FetchStatus.LOADING
        self.error = None
        return ticket

    def resolve(self, ticket: FetchTicket, records: list[dict]) -> bool:
        """Apply a result. Returns False when the ticket was superseded."""
        if not self.guard.is_current(ticket):
            logger.debug(
                "Discarding superseded fetch result",
                extra={"resource": self.resource, "generation": ticket.generation},
            )
            return False
        self.records = list(records)
        self.status = FetchStatus.READY
        self.error = None
        return True

    def fail(self, ticket: FetchTicket, message: str) -> bool:
        """Record a failure. Returns False when the ticket was superseded."""
        if not self.guard.is_current(ticket):
            return False
        self.status = FetchStatus.ERROR
        self.error = message
        return True

    def invalidate(self) -> None:
        """Mark the data stale so the next render fetches again."""
        self.guard.cancel()
        self.status = FetchStatus.IDLE

    def load(
        self,
        fetcher: Callable[[], list[dict]],
        on_error: Callable[[Exception], str] = user_message,
    ) -> bool:
        """
        Run a blocking fetch under a fresh ticket.

        Content Admin errors become the error banner text. Anything else
        also ends the load in ERROR, then propagates.
        """
        ticket = self.begin()
        try:
            records = fetcher()
        except ContentAdminError as exc:
            exc.log(logging.WARNING)
            return self.fail(ticket, on_error(exc))
        except Exception as exc:
            self.fail(ticket, on_error(exc))
            raise
        return self.resolve(ticket, records)


@dataclass
class ModalState:
    """One dialog's lifecycle, independent of every other dialog."""

    name: str = ""
    status: ModalStatus = ModalStatus.CLOSED
    record: dict[str, Any] | None = None
    error: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status is not ModalStatus.CLOSED

    @property
    def is_submitting(self) -> bool:
        return self.status is ModalStatus.SUBMITTING

    def open(self, record: dict[str, Any] | None = None) -> None:
        if self.status is ModalStatus.SUBMITTING:
            raise InvalidTransition(f"{self.name or 'modal'} is submitting")
        self.status = ModalStatus.OPEN
        self.record = record
        self.error = None

    def submit(self) -> None:
        if self.status is not ModalStatus.OPEN:
            raise InvalidTransition(f"cannot submit {self.name or 'modal'} from {self.status.value}")
        self.status = ModalStatus.SUBMITTING
        self.error = None

    def succeed(self) -> None:
        if self.status is not ModalStatus.SUBMITTING:
            raise InvalidTransition(f"{self.name or 'modal'} is not submitting")
        self.close()

    def fail(self, message: str) -> None:
        """Return to `open`, keeping the record so the user can retry."""
        if self.status is not ModalStatus.SUBMITTING:
            raise InvalidTransition(f"{self.name or 'modal'} is not submitting")
        self.status = ModalStatus.OPEN
        self.error = message

    def close(self) -> None:
        self.status = ModalStatus.CLOSED
        self.record = None
        self.error = None
