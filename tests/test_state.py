"""
Tests for content_admin.state.

Covers:
- One active fetch per view; superseded results are dropped
- Error path of a blocking load
- Modal transitions
"""

import pytest
import requests

from content_admin.api_client import BackendClient
from content_admin.exceptions import BackendError
from content_admin.state import (
    FetchGuard,
    FetchState,
    FetchStatus,
    InvalidTransition,
    ModalState,
    ModalStatus,
)


class TestFetchGuard:
    def test_new_ticket_supersedes_old(self):
        guard = FetchGuard("articles")

        first = guard.start()
        second = guard.start()

        assert not guard.is_current(first)
        assert guard.is_current(second)
        assert second.resource == "articles"

    def test_cancel_invalidates_current(self):
        guard = FetchGuard()
        ticket = guard.start()

        guard.cancel()

        assert not guard.is_current(ticket)


class TestFetchState:
    def test_starts_idle(self):
        state = FetchState("articles")

        assert state.status is FetchStatus.IDLE
        assert state.guard.resource == "articles"
        assert not state.is_empty

    def test_resolve(self):
        state = FetchState("articles")
        ticket = state.begin()
        assert state.is_loading

        assert state.resolve(ticket, [{"id": 1}])
        assert state.status is FetchStatus.READY
        assert state.records == [{"id": 1}]

    def test_late_result_is_discarded(self):
        state = FetchState("articles")
        stale = state.begin()
        fresh = state.begin()

        assert state.resolve(fresh, [{"id": 2}])
        assert not state.resolve(stale, [{"id": 1}])
        assert not state.fail(stale, "late error")

        assert state.records == [{"id": 2}]
        assert state.status is FetchStatus.READY

    def test_fail_keeps_message(self):
        state = FetchState("books")
        ticket = state.begin()

        state.fail(ticket, "Server exploded")

        assert state.status is FetchStatus.ERROR
        assert state.error == "Server exploded"

    def test_begin_clears_error(self):
        state = FetchState("books")
        state.fail(state.begin(), "boom")

        state.begin()

        assert state.error is None
        assert state.is_loading

    def test_invalidate_returns_to_idle(self):
        state = FetchState("books")
        ticket = state.begin()

        state.invalidate()

        assert state.status is FetchStatus.IDLE
        assert not state.resolve(ticket, [])

    def test_empty_only_when_ready(self):
        state = FetchState("tags")
        state.resolve(state.begin(), [])

        assert state.is_empty

    def test_load_success(self):
        state = FetchState("tags")

        assert state.load(lambda: [{"id": 1, "tag": "fiqh"}])
        assert state.records == [{"id": 1, "tag": "fiqh"}]

    def test_load_error_becomes_banner_text(self):
        state = FetchState("tags")

        def fetcher():
            raise BackendError("Database unavailable", status_code=500)

        assert state.load(fetcher)
        assert state.status is FetchStatus.ERROR
        assert state.error == "Database unavailable"

    def test_load_propagates_programming_errors(self):
        state = FetchState("tags")

        def fetcher():
            raise KeyError("oops")

        with pytest.raises(KeyError):
            state.load(fetcher)

        assert state.status is FetchStatus.ERROR
        assert not state.is_loading

    def test_load_with_unreachable_backend_ends_in_error(self):
        client = BackendClient("localhost:5000", timeout=1, session=requests.Session())
        state = FetchState("tags")

        assert state.load(lambda: client.list("tags"))
        assert state.status is FetchStatus.ERROR
        assert state.error


class TestModalState:
    def test_happy_path(self):
        modal = ModalState("articles:form")

        modal.open({"id": 3})
        assert modal.is_open and modal.record == {"id": 3}

        modal.submit()
        assert modal.is_submitting

        modal.succeed()
        assert modal.status is ModalStatus.CLOSED
        assert modal.record is None

    def test_failure_returns_to_open_with_record(self):
        modal = ModalState("articles:form")
        modal.open({"id": 3})
        modal.submit()

        modal.fail("Title already exists")

        assert modal.status is ModalStatus.OPEN
        assert modal.record == {"id": 3}
        assert modal.error == "Title already exists"

    def test_submit_clears_previous_error(self):
        modal = ModalState()
        modal.open()
        modal.submit()
        modal.fail("nope")

        modal.submit()

        assert modal.error is None

    def test_cannot_submit_when_closed(self):
        with pytest.raises(InvalidTransition):
            ModalState().submit()

    def test_cannot_submit_twice(self):
        modal = ModalState()
        modal.open()
        modal.submit()

        with pytest.raises(InvalidTransition):
            modal.submit()

    def test_cannot_reopen_while_submitting(self):
        modal = ModalState()
        modal.open()
        modal.submit()

        with pytest.raises(InvalidTransition):
            modal.open()

    @pytest.mark.parametrize("action", ["succeed", "fail"])
    def test_outcome_requires_submitting(self, action):
        modal = ModalState()
        modal.open()

        with pytest.raises(InvalidTransition):
            if action == "fail":
                modal.fail("x")
            else:
                modal.succeed()

    def test_modals_are_independent(self):
        form = ModalState("form")
        delete = ModalState("delete")
        form.open()
        form.submit()

        delete.open({"id": 1})

        assert form.is_submitting
        assert delete.status is ModalStatus.OPEN
