"""
Tests for content_admin.logging_config.
"""

import json
import logging

import pytest

from content_admin.logging_config import ConsoleFormatter, LogContext, StructuredFormatter


@pytest.fixture(autouse=True)
def clean_context():
    LogContext.clear()
    yield
    LogContext.clear()


def make_record(message="Record deleted", **extra):
    record = logging.LogRecord("content_admin.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_json_fields(self):
        entry = json.loads(StructuredFormatter(environment="test").format(make_record(resource_id=7)))

        assert entry["message"] == "Record deleted"
        assert entry["level"] == "INFO"
        assert entry["service"] == "content-admin"
        assert entry["environment"] == "test"
        assert entry["resource_id"] == 7

    def test_session_context_included(self):
        LogContext.set_session_id("sess-1")
        LogContext.set_resource("books")

        entry = json.loads(StructuredFormatter().format(make_record()))

        assert entry["session_id"] == "sess-1"
        assert entry["resource"] == "books"
        assert "user_id" not in entry

    def test_unicode_kept(self):
        entry = StructuredFormatter().format(make_record("روزہ"))

        assert "روزہ" in entry


class TestConsoleFormatter:
    def test_session_id_shown(self):
        LogContext.set_session_id("sess-2")

        line = ConsoleFormatter().format(make_record())

        assert "[sess-2]" in line
        assert "Record deleted" in line


def test_clear_resets_everything():
    LogContext.set_user_id("u1")
    LogContext.clear()

    assert LogContext.get_all() == {"session_id": None, "user_id": None, "resource": None}
