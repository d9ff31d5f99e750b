"""
Admin accounts: document store + injected auth provider.

Documents live in PostgreSQL as one JSONB row per auth uid
(`content_admin.admins`). When the database is unreachable the store falls
back to in-memory storage so the panel still runs.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import psycopg
from psycopg import OperationalError
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from content_admin.auth import AuthProvider, InMemoryAuth, get_auth_provider
from content_admin.config import settings
from content_admin.exceptions import (
    AuthenticationError,
    DataStoreError,
    InvalidFieldError,
    MissingRequiredFieldError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from content_admin.forms import FormState, missing_fields
from content_admin.listing import exclude_deleted
from content_admin.repository.base import PASSWORD_RESET_REQUIRED, ProgressCallback, SaveResult
from content_admin.resources import ADMIN
from content_admin.text_utils import is_valid_email, utc_now_iso

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE SCHEMA IF NOT EXISTS content_admin;
CREATE TABLE IF NOT EXISTS content_admin.admins (
    uid TEXT PRIMARY KEY,
    doc JSONB NOT NULL
);
"""

DOCUMENT_FIELDS = ("fname", "lname", "email", "role")


class AdminStore:
    """
    `admins` collection keyed by auth uid.

    Uses PostgreSQL when `db_url` is reachable. Falls back to in-memory
    storage otherwise, and on connection loss mid-session.
    """

    def __init__(self, db_url: str | None = None) -> None:
        self._db_url = db_url if db_url is not None else settings.admin_db_url
        self._memory: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._use_db = bool(self._db_url) and self._test_connection()

    @property
    def uses_database(self) -> bool:
        return self._use_db

    def _test_connection(self) -> bool:
        """Test database connection and create the table; fall back to in-memory if failed."""
        try:
            with psycopg.connect(self._db_url, autocommit=True) as conn:
                with conn.cursor() as cur:
                    cur.execute(SCHEMA_SQL)
            logger.info("AdminStore: Connected to PostgreSQL for admin documents")
            return True
        except OperationalError as e:
            logger.warning("AdminStore: DB connection failed, using in-memory storage: %s", e)
            return False
        except OSError as e:
            logger.warning("AdminStore: Network error, using in-memory storage: %s", e)
            return False
        except psycopg.Error as e:
            logger.warning("AdminStore: Schema setup failed, using in-memory storage: %s", e)
            return False

    def _execute(self, sql: str, params: tuple = (), fetch: bool = False) -> list[dict] | None:
        """
        Execute SQL with connection management.

        Returns None when the database is unavailable. Query errors raise
        DataStoreError.
        """
        if not self._use_db:
            return None

        try:
            with psycopg.connect(self._db_url, row_factory=dict_row, autocommit=True) as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    if fetch:
                        return cur.fetchall()
                    return [{"rowcount": cur.rowcount}]
        except OperationalError as e:
            logger.warning("AdminStore: DB connection lost, falling back to in-memory: %s", e)
            self._use_db = False
            return None
        except OSError as e:
            logger.warning("AdminStore: Network error, falling back to in-memory: %s", e)
            self._use_db = False
            return None
        except psycopg.Error as e:
            logger.error("AdminStore: Query failed: %s", e)
            raise DataStoreError(
                "Could not access admin accounts", operation=sql.split(None, 1)[0], collection="admins"
            ) from e

    @staticmethod
    def _with_id(uid: str, doc: dict[str, Any]) -> dict[str, Any]:
        return {**doc, "id": uid}

    def all(self) -> list[dict[str, Any]]:
        rows = self._execute("SELECT uid, doc FROM content_admin.admins", fetch=True)
        if rows is None:
            with self._lock:
                return [self._with_id(uid, dict(doc)) for uid, doc in self._memory.items()]
        return [self._with_id(row["uid"], row["doc"]) for row in rows]

    def get(self, uid: str) -> dict[str, Any] | None:
        rows = self._execute("SELECT uid, doc FROM content_admin.admins WHERE uid = %s", (uid,), fetch=True)
        if rows is None:
            with self._lock:
                doc = self._memory.get(uid)
            return self._with_id(uid, dict(doc)) if doc is not None else None
        return self._with_id(rows[0]["uid"], rows[0]["doc"]) if rows else None

    def put(self, uid: str, doc: dict[str, Any]) -> None:
        result = self._execute(
            "INSERT INTO content_admin.admins (uid, doc) VALUES (%s, %s) "
            "ON CONFLICT (uid) DO UPDATE SET doc = excluded.doc",
            (uid, Jsonb(doc)),
        )
        if result is None:
            with self._lock:
                self._memory[uid] = dict(doc)

    def merge(self, uid: str, patch: dict[str, Any]) -> bool:
        """Shallow-merge `patch` into a document. Returns False when it does not exist."""
        result = self._execute(
            "UPDATE content_admin.admins SET doc = doc || %s WHERE uid = %s",
            (Jsonb(patch), uid),
        )
        if result is None:
            with self._lock:
                if uid not in self._memory:
                    return False
                self._memory[uid].update(patch)
                return True
        return result[0]["rowcount"] > 0

    def delete(self, uid: str) -> bool:
        result = self._execute("DELETE FROM content_admin.admins WHERE uid = %s", (uid,))
        if result is None:
            with self._lock:
                return self._memory.pop(uid, None) is not None
        return result[0]["rowcount"] > 0

    def count(self) -> int:
        return len(exclude_deleted(self.all()))


def validate_admin(form: FormState, editing: bool | None = None) -> None:
    """Required fields, email shape, role, and password rules for new accounts."""
    editing = form.editing if editing is None else editing
    missing = missing_fields(form, editing)
    if missing:
        raise MissingRequiredFieldError(missing)

    values = form.values
    if not is_valid_email(str(values.get("email") or "")):
        raise InvalidFieldError("Email", reason="Please enter a valid email address")
    if values.get("role") not in settings.admin_roles:
        raise InvalidFieldError("Role", reason="Role must be admin or superadmin")
    if editing:
        return

    password = str(values.get("password") or "")
    if len(password) < settings.min_password_length:
        raise InvalidFieldError(
            "Password",
            reason=f"Password must be at least {settings.min_password_length} characters",
        )
    if password != str(values.get("confirmPassword") or ""):
        raise InvalidFieldError("Confirm Password", reason="Passwords do not match")


class AdminRepository:
    """
    `Repository` for admin accounts.

    The auth provider is injected. `current_uid` is the signed-in account,
    which may never delete itself.
    """

    spec = ADMIN

    def __init__(
        self,
        store: AdminStore,
        auth: AuthProvider,
        *,
        current_uid: str | None = None,
    ) -> None:
        self.store = store
        self.auth = auth
        self.current_uid = current_uid

    def list(self) -> list[dict]:
        return exclude_deleted(self.store.all())

    def get(self, record_id: str | int) -> dict:
        doc = self.store.get(str(record_id))
        if doc is None:
            raise ResourceNotFoundError("admins", record_id)
        return doc

    def _document(self, form: FormState) -> dict[str, Any]:
        doc = {name: str(form.values.get(name) or "").strip() for name in DOCUMENT_FIELDS}
        doc["email"] = doc["email"].lower()
        return doc

    def create(self, form: FormState, *, on_progress: ProgressCallback | None = None) -> SaveResult:
        form.record_id = None
        validate_admin(form, editing=False)
        doc = self._document(form)
        user = self.auth.sign_up(doc["email"], str(form.values.get("password")))
        now = utc_now_iso()
        doc.update(uid=user.uid, createdOn=now, modifiedOn=now, deleted=False)
        self.store.put(user.uid, doc)
        logger.info("Admin created", extra={"uid": user.uid, "role": doc["role"]})
        return SaveResult(record={**doc, "id": user.uid})

    def update(
        self, record_id: str | int, form: FormState, *, on_progress: ProgressCallback | None = None
    ) -> SaveResult:
        form.record_id = record_id
        validate_admin(form, editing=True)
        uid = str(record_id)
        patch = {**self._document(form), "modifiedOn": utc_now_iso()}
        if not self.store.merge(uid, patch):
            raise ResourceNotFoundError("admins", record_id)

        notices: tuple[str, ...] = ()
        if str(form.values.get("password") or ""):
            notices = (PASSWORD_RESET_REQUIRED,)
            logger.info("Inline password change ignored", extra={"uid": uid})
        return SaveResult(record=self.get(uid), notices=notices)

    def delete(self, record_id: str | int) -> None:
        uid = str(record_id)
        if self.current_uid is not None and uid == self.current_uid:
            raise PermissionDeniedError("You cannot delete your own account")
        if not self.store.delete(uid):
            raise ResourceNotFoundError("admins", record_id)
        logger.info("Admin deleted", extra={"uid": uid})

    def send_password_reset(self, email: str) -> None:
        self.auth.send_password_reset(email)

    def authenticate(self, email: str, password: str) -> dict:
        """Sign in and return the admin document; non-admins are rejected."""
        user = self.auth.sign_in(email, password)
        doc = self.store.get(user.uid)
        if doc is None or doc.get("deleted") is True:
            raise AuthenticationError("This account does not have admin access", reason="not-an-admin")
        if doc.get("role") not in settings.admin_roles:
            raise AuthenticationError("This account does not have admin access", reason="invalid-role")
        return doc


def ensure_bootstrap_admin(store: AdminStore, auth: AuthProvider) -> None:
    """Seed one superadmin when the store is empty and bootstrap credentials are set."""
    email = settings.bootstrap_admin_email
    password = settings.bootstrap_admin_password
    if not email or not password or store.all():
        return

    if isinstance(auth, InMemoryAuth) and auth.uid_for(email):
        uid = auth.uid_for(email)
    else:
        uid = auth.sign_up(email, password).uid
    now = utc_now_iso()
    store.put(
        uid,
        {
            "fname": "Super",
            "lname": "Admin",
            "email": email.lower(),
            "role": "superadmin",
            "uid": uid,
            "createdOn": now,
            "modifiedOn": now,
            "deleted": False,
        },
    )
    logger.info("Seeded bootstrap superadmin", extra={"uid": uid})


# Singleton instance
_admin_store: AdminStore | None = None


def get_admin_store() -> AdminStore:
    """Get the global admin store, seeding the bootstrap account once."""
    global _admin_store
    if _admin_store is None:
        _admin_store = AdminStore()
        ensure_bootstrap_admin(_admin_store, get_auth_provider())
    return _admin_store


def get_admin_repo(current_uid: str | None = None) -> AdminRepository:
    """Admin repository bound to the signed-in account."""
    return AdminRepository(get_admin_store(), get_auth_provider(), current_uid=current_uid)
