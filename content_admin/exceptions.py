"""
Centralized exception hierarchy for Content Admin.

Every failure a screen can hit maps onto one of these types so the UI can
show a single error dialog with a readable message and keep its state for
a retry.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# Base Exception
# =============================================================================


class ContentAdminError(RuntimeError):
    """
    Base exception for all Content Admin errors.

    Attributes:
        message: Human-readable error message.
        detail: Additional error details (optional).
        error_code: Machine-readable error code.
        request_id: Unique identifier for the failing action (optional).
    """

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        error_code: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.error_code = error_code or self._default_error_code()
        self.request_id = request_id or self._generate_request_id()

    def _default_error_code(self) -> str:
        """Generate default error code from class name."""
        return f"content_admin_{self.__class__.__name__.lower()}"

    def _generate_request_id(self) -> str:
        return str(uuid.uuid4())

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable error envelope."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.detail:
            result["detail"] = self.detail
        if self.request_id:
            result["request_id"] = self.request_id
        return result

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message

    def log(self, level: int = logging.ERROR) -> None:
        """Log the exception with structured data."""
        logger.log(
            level,
            self.message,
            extra={
                "error_code": self.error_code,
                "detail": self.detail,
                "request_id": self.request_id,
                "exception_type": self.__class__.__name__,
            },
        )


# =============================================================================
# Input Validation Errors
# =============================================================================


class ValidationError(ContentAdminError):
    """
    Raised when form input fails validation.

    Always raised before any network call.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        detail: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.field = field
        full_message = f"{field}: {message}" if field else message
        super().__init__(
            full_message,
            detail=detail,
            error_code="validation_error",
            request_id=request_id,
        )


class MissingRequiredFieldError(ValidationError):
    """Raised when one or more required fields are empty."""

    def __init__(
        self,
        fields: list[str] | str,
        *,
        request_id: str | None = None,
    ) -> None:
        if isinstance(fields, str):
            fields = [fields]
        self.fields = list(fields)
        super().__init__(
            message="The following fields are required: " + ", ".join(self.fields),
            detail="\n".join(f"• {name}" for name in self.fields),
            request_id=request_id,
        )
        self.error_code = "missing_required_fields"


class InvalidFieldError(ValidationError):
    """Raised when a field has a value of the wrong shape (email, size, type)."""

    def __init__(
        self,
        field_name: str,
        *,
        reason: str,
        request_id: str | None = None,
    ) -> None:
        super().__init__(
            message=reason,
            field=field_name,
            request_id=request_id,
        )


# =============================================================================
# Not Found Errors
# =============================================================================


class NotFoundError(ContentAdminError):
    """
    Raised when a requested record is not found.

    HTTP Status: 404 Not Found
    """

    def __init__(
        self,
        message: str,
        *,
        resource_type: str | None = None,
        resource_id: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        detail = None
        if resource_type and resource_id:
            detail = f"{resource_type} with ID {resource_id!r} not found"
        super().__init__(
            message,
            detail=detail,
            error_code="not_found",
            request_id=request_id,
        )


class ResourceNotFoundError(NotFoundError):
    """Raised when a record of a named resource is missing."""

    def __init__(
        self,
        resource: str,
        record_id: str | int,
        *,
        request_id: str | None = None,
    ) -> None:
        super().__init__(
            message=f"{resource.rstrip('s').title()} not found",
            resource_type=resource,
            resource_id=str(record_id),
            request_id=request_id,
        )


# =============================================================================
# Permission Errors
# =============================================================================


class PermissionDeniedError(ContentAdminError):
    """Raised when the signed-in account may not perform an action."""

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(
            message,
            detail=detail,
            error_code="permission_denied",
            request_id=request_id,
        )


class UnsupportedOperationError(ContentAdminError):
    """Raised for actions the panel deliberately routes elsewhere (e.g. password change)."""

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(
            message,
            detail=detail,
            error_code="unsupported_operation",
            request_id=request_id,
        )


# =============================================================================
# External API Errors
# =============================================================================


class ExternalAPIError(ContentAdminError):
    """
    Base class for failures talking to the backend or the auth provider.
    """

    def __init__(
        self,
        message: str,
        *,
        service: str | None = None,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        detail_parts = []
        if service:
            detail_parts.append(f"Service: {service}")
        if status_code:
            detail_parts.append(f"Status: {status_code}")
        detail = "; ".join(detail_parts) if detail_parts else None
        super().__init__(
            message,
            detail=detail,
            error_code="external_api_error",
            request_id=request_id,
        )


class BackendError(ExternalAPIError):
    """Raised when the REST backend answers with an error status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str | None = None,
        path: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.method = method
        self.path = path
        super().__init__(
            message,
            service="backend",
            status_code=status_code,
            request_id=request_id,
        )
        self.error_code = "backend_error"


class AuthenticationError(ExternalAPIError):
    """Raised when the auth provider rejects a sign-up or sign-in."""

    def __init__(
        self,
        message: str = "Authentication failed",
        *,
        reason: str | None = None,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            message,
            service="auth",
            status_code=status_code,
            request_id=request_id,
        )
        self.error_code = "authentication_error"


class APITimeoutError(ExternalAPIError):
    """Raised when a request times out."""

    def __init__(
        self,
        service: str,
        *,
        timeout_seconds: int | None = None,
        request_id: str | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        detail = f"Timeout after {timeout_seconds}s" if timeout_seconds else None
        super().__init__(
            message=f"Request to {service} timed out",
            service=service,
            request_id=request_id,
        )
        self.error_code = "api_timeout"
        if detail:
            self.detail = detail


class APIConnectionError(ExternalAPIError):
    """Raised when a connection cannot be established."""

    def __init__(
        self,
        service: str,
        *,
        reason: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            message=f"Connection to {service} failed",
            service=service,
            request_id=request_id,
        )
        self.error_code = "api_connection_error"
        self.detail = reason if reason else "Could not establish connection"


# =============================================================================
# Configuration / Data Store Errors
# =============================================================================


class ConfigurationError(ContentAdminError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        *,
        setting_name: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.setting_name = setting_name
        detail = f"Missing or invalid setting: {setting_name}" if setting_name else None
        super().__init__(
            message,
            detail=detail,
            error_code="configuration_error",
            request_id=request_id,
        )


class DataStoreError(ContentAdminError):
    """Raised when a document store operation fails."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        collection: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.operation = operation
        self.collection = collection
        detail_parts = []
        if operation:
            detail_parts.append(f"Operation: {operation}")
        if collection:
            detail_parts.append(f"Collection: {collection}")
        detail = "; ".join(detail_parts) if detail_parts else None
        super().__init__(
            message,
            detail=detail,
            error_code="data_store_error",
            request_id=request_id,
        )


# =============================================================================
# Helpers
# =============================================================================


def exception_to_http_status(exc: ContentAdminError) -> int:
    """
    Map exception to the HTTP status the mock backend answers with.
    """
    status_map = {
        MissingRequiredFieldError: 400,
        InvalidFieldError: 400,
        ValidationError: 400,
        ResourceNotFoundError: 404,
        NotFoundError: 404,
        PermissionDeniedError: 403,
        UnsupportedOperationError: 405,
        AuthenticationError: 401,
        APITimeoutError: 504,
        APIConnectionError: 503,
        BackendError: 502,
        ExternalAPIError: 502,
        ConfigurationError: 500,
        DataStoreError: 500,
    }

    for exc_class, status in status_map.items():
        if isinstance(exc, exc_class):
            return status
    return 500


def user_message(exc: Exception) -> str:
    """
    Text shown in the generic error dialog.

    Validation errors list every offending field. Backend errors carry the
    message extracted from the response body.
    """
    if isinstance(exc, ContentAdminError):
        return exc.message
    if isinstance(exc, TimeoutError):
        return "The request timed out. Please try again."
    if isinstance(exc, ConnectionError):
        return "Could not reach the server. Please try again."
    logger.error(
        "Unhandled exception",
        extra={
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=exc,
    )
    return "Something went wrong. Please try again."
