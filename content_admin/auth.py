"""
Auth provider for admin accounts.

Production talks to a Supabase/GoTrue-compatible REST API:

    POST /auth/v1/signup                       create an account
    POST /auth/v1/token?grant_type=password    sign in
    POST /auth/v1/recover                      send a password reset email

Without `CONTENT_ADMIN_AUTH_URL` an in-memory provider is used so the panel
runs locally, the same way the admin store falls back to memory.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from content_admin.config import settings
from content_admin.exceptions import APIConnectionError, APITimeoutError, AuthenticationError, ConfigurationError
from content_admin.text_utils import is_valid_email

logger = logging.getLogger(__name__)

SERVICE = "auth"

EMAIL_IN_USE = "email-already-in-use"
INVALID_EMAIL = "invalid-email"
WEAK_PASSWORD = "weak-password"
INVALID_CREDENTIALS = "invalid-credentials"

FRIENDLY_MESSAGES = {
    EMAIL_IN_USE: "Email already in use",
    INVALID_EMAIL: "Invalid email address",
    WEAK_PASSWORD: "Password is too weak",
    INVALID_CREDENTIALS: "Invalid email or password",
}

# GoTrue error codes and message fragments mapped to the reasons above.
_CODE_REASONS = {
    "user_already_exists": EMAIL_IN_USE,
    "email_exists": EMAIL_IN_USE,
    "email_address_invalid": INVALID_EMAIL,
    "weak_password": WEAK_PASSWORD,
    "invalid_grant": INVALID_CREDENTIALS,
    "invalid_credentials": INVALID_CREDENTIALS,
}
_MESSAGE_REASONS = (
    ("already registered", EMAIL_IN_USE),
    ("already been registered", EMAIL_IN_USE),
    ("invalid format", INVALID_EMAIL),
    ("invalid email", INVALID_EMAIL),
    ("password should be", WEAK_PASSWORD),
    ("weak password", WEAK_PASSWORD),
    ("invalid login credentials", INVALID_CREDENTIALS),
)


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str
    access_token: str | None = None


class AuthProvider(Protocol):
    def sign_up(self, email: str, password: str) -> AuthUser: ...

    def sign_in(self, email: str, password: str) -> AuthUser: ...

    def send_password_reset(self, email: str) -> None: ...


def auth_error(reason: str | None, *, status_code: int | None = None, fallback: str = "Authentication failed") -> AuthenticationError:
    return AuthenticationError(FRIENDLY_MESSAGES.get(reason or "", fallback), reason=reason, status_code=status_code)


def classify_error(body: Any) -> tuple[str | None, str]:
    """Map a GoTrue error body to (reason, raw message)."""
    if not isinstance(body, dict):
        return None, ""
    message = str(body.get("msg") or body.get("error_description") or body.get("message") or body.get("error") or "")
    for key in ("error_code", "error", "code"):
        code = body.get(key)
        if isinstance(code, str) and code in _CODE_REASONS:
            return _CODE_REASONS[code], message
    lowered = message.lower()
    for fragment, reason in _MESSAGE_REASONS:
        if fragment in lowered:
            return reason, message
    return None, message


class GoTrueAuth:
    """Auth provider over a GoTrue REST API using `requests`."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        url = base_url or settings.auth_url
        if not url:
            raise ConfigurationError("Auth provider URL is not configured", setting_name="CONTENT_ADMIN_AUTH_URL")
        self.base_url = url.rstrip("/")
        self.api_key = api_key if api_key is not None else settings.auth_api_key
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post(self, path: str, body: dict[str, Any], *, params: dict[str, str] | None = None) -> Any:
        url = f"{self.base_url}/auth/v1/{path}"
        try:
            response = self.session.post(url, json=body, params=params, headers=self._headers(), timeout=self.timeout)
        except requests.Timeout as e:
            raise APITimeoutError(SERVICE, timeout_seconds=self.timeout) from e
        except requests.ConnectionError as e:
            raise APIConnectionError(SERVICE, reason=str(e)) from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        if response.status_code >= 400:
            reason, raw = classify_error(data)
            logger.warning(
                "Auth request rejected",
                extra={"path": path, "status": response.status_code, "reason": reason, "detail": raw},
            )
            raise auth_error(reason, status_code=response.status_code, fallback=raw or "Authentication failed")
        return data

    @staticmethod
    def _user_from(data: Any, email: str) -> AuthUser:
        user = data.get("user") if isinstance(data, dict) and isinstance(data.get("user"), dict) else data
        uid = user.get("id") if isinstance(user, dict) else None
        if not uid:
            raise AuthenticationError("Auth provider returned no user id", reason="missing-user-id")
        return AuthUser(uid=str(uid), email=str(user.get("email") or email), access_token=data.get("access_token"))

    def sign_up(self, email: str, password: str) -> AuthUser:
        data = self._post("signup", {"email": email, "password": password})
        user = self._user_from(data, email)
        logger.info("Auth account created", extra={"uid": user.uid})
        return user

    def sign_in(self, email: str, password: str) -> AuthUser:
        data = self._post("token", {"email": email, "password": password}, params={"grant_type": "password"})
        return self._user_from(data, email)

    def send_password_reset(self, email: str) -> None:
        self._post("recover", {"email": email})
        logger.info("Password reset requested", extra={"email": email})


class InMemoryAuth:
    """
    Process-local auth provider for development and tests.

    Passwords are stored as salted PBKDF2 hashes.
    """

    def __init__(self, *, min_password_length: int | None = None) -> None:
        self.min_password_length = min_password_length or settings.min_password_length
        self._users: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()
        self.reset_requests: list[str] = []

    @staticmethod
    def _hash(password: str, salt: str) -> str:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), 100_000).hex()

    def sign_up(self, email: str, password: str) -> AuthUser:
        key = (email or "").strip().lower()
        if not is_valid_email(key):
            raise auth_error(INVALID_EMAIL, status_code=422)
        if len(password or "") < self.min_password_length:
            raise auth_error(WEAK_PASSWORD, status_code=422)
        with self._lock:
            if key in self._users:
                raise auth_error(EMAIL_IN_USE, status_code=422)
            salt = secrets.token_hex(8)
            uid = str(uuid.uuid4())
            self._users[key] = {"uid": uid, "salt": salt, "hash": self._hash(password, salt)}
        return AuthUser(uid=uid, email=key)

    def sign_in(self, email: str, password: str) -> AuthUser:
        key = (email or "").strip().lower()
        entry = self._users.get(key)
        if entry is None or not secrets.compare_digest(entry["hash"], self._hash(password or "", entry["salt"])):
            raise auth_error(INVALID_CREDENTIALS, status_code=400)
        return AuthUser(uid=entry["uid"], email=key, access_token=secrets.token_urlsafe(16))

    def send_password_reset(self, email: str) -> None:
        self.reset_requests.append((email or "").strip().lower())

    def uid_for(self, email: str) -> str | None:
        entry = self._users.get((email or "").strip().lower())
        return entry["uid"] if entry else None


_provider: AuthProvider | None = None


def get_auth_provider() -> AuthProvider:
    """Get the global auth provider; in-memory when no auth URL is configured."""
    global _provider
    if _provider is None:
        if settings.auth_url:
            _provider = GoTrueAuth()
        else:
            logger.warning("No auth URL configured, using in-memory auth provider")
            _provider = InMemoryAuth()
    return _provider
