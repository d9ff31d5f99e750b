"""
Tests for content_admin.exceptions module.

Covers:
- Messages and error codes
- Serialization
- HTTP status mapping
- Error dialog text
"""

import pytest

from content_admin.exceptions import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    BackendError,
    ConfigurationError,
    ContentAdminError,
    DataStoreError,
    InvalidFieldError,
    MissingRequiredFieldError,
    NotFoundError,
    PermissionDeniedError,
    ResourceNotFoundError,
    UnsupportedOperationError,
    ValidationError,
    exception_to_http_status,
    user_message,
)


class TestContentAdminError:
    def test_defaults(self):
        exc = ContentAdminError("Boom")

        assert exc.message == "Boom"
        assert exc.error_code == "content_admin_contentadminerror"
        assert exc.request_id
        assert str(exc) == "Boom"

    def test_detail_in_str(self):
        assert str(ContentAdminError("Boom", detail="disk full")) == "Boom: disk full"

    def test_to_dict(self):
        exc = ContentAdminError("Boom", detail="why", request_id="req-1")

        assert exc.to_dict() == {
            "error": "content_admin_contentadminerror",
            "message": "Boom",
            "detail": "why",
            "request_id": "req-1",
        }

    def test_log(self, caplog):
        exc = ContentAdminError("Logged failure")

        with caplog.at_level("WARNING"):
            exc.log(30)

        assert "Logged failure" in caplog.text


class TestValidationErrors:
    def test_field_prefix(self):
        exc = ValidationError("must not be empty", field="Title")

        assert exc.message == "Title: must not be empty"
        assert exc.field == "Title"
        assert exc.error_code == "validation_error"

    def test_missing_fields_listed(self):
        exc = MissingRequiredFieldError(["Title", "Language"])

        assert exc.fields == ["Title", "Language"]
        assert exc.message == "The following fields are required: Title, Language"
        assert exc.detail == "• Title\n• Language"
        assert exc.error_code == "missing_required_fields"

    def test_missing_single_field(self):
        assert MissingRequiredFieldError("Email").fields == ["Email"]

    def test_invalid_field(self):
        exc = InvalidFieldError("Email", reason="Please enter a valid email address")

        assert exc.message == "Email: Please enter a valid email address"
        assert isinstance(exc, ValidationError)


class TestNotFound:
    def test_resource_not_found(self):
        exc = ResourceNotFoundError("articles", 7)

        assert exc.message == "Article not found"
        assert exc.detail == "articles with ID '7' not found"
        assert exc.error_code == "not_found"


class TestExternalErrors:
    def test_backend_error(self):
        exc = BackendError("Title already exists", status_code=409, method="POST", path="articles")

        assert exc.message == "Title already exists"
        assert exc.status_code == 409
        assert exc.detail == "Service: backend; Status: 409"
        assert exc.error_code == "backend_error"

    def test_timeout(self):
        exc = APITimeoutError("backend", timeout_seconds=15)

        assert exc.message == "Request to backend timed out"
        assert exc.detail == "Timeout after 15s"

    def test_connection(self):
        assert APIConnectionError("auth").detail == "Could not establish connection"
        assert APIConnectionError("auth", reason="refused").detail == "refused"


class TestHttpStatus:
    @pytest.mark.parametrize(
        "exc,status",
        [
            (MissingRequiredFieldError(["Title"]), 400),
            (InvalidFieldError("Email", reason="bad"), 400),
            (ResourceNotFoundError("tags", 1), 404),
            (NotFoundError("gone"), 404),
            (PermissionDeniedError("no"), 403),
            (UnsupportedOperationError("no"), 405),
            (AuthenticationError("no"), 401),
            (APITimeoutError("backend"), 504),
            (APIConnectionError("backend"), 503),
            (BackendError("bad gateway"), 502),
            (ConfigurationError("bad"), 500),
            (DataStoreError("bad"), 500),
            (ContentAdminError("bad"), 500),
        ],
    )
    def test_mapping(self, exc, status):
        assert exception_to_http_status(exc) == status


class TestUserMessage:
    def test_domain_error_message(self):
        assert user_message(BackendError("Slug must be unique")) == "Slug must be unique"

    def test_builtin_timeout(self):
        assert user_message(TimeoutError()) == "The request timed out. Please try again."

    def test_builtin_connection(self):
        assert user_message(ConnectionRefusedError()) == "Could not reach the server. Please try again."

    def test_unexpected_error_is_generic(self, caplog):
        with caplog.at_level("ERROR"):
            message = user_message(KeyError("secret"))

        assert message == "Something went wrong. Please try again."
        assert "Unhandled exception" in caplog.text
