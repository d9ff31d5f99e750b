"""
Session state helpers for the Streamlit UI.

Everything a page needs to survive a rerun lives under a `_`-prefixed key
of `st.session_state`: the signed-in admin, one `FetchState` per list view,
one `ModalState` per dialog, open forms and list queries.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import Any

import streamlit as st

from content_admin.api_client import get_client
from content_admin.forms import FormState
from content_admin.listing import ListQuery
from content_admin.logging_config import LogContext
from content_admin.repository import Repository, get_repository
from content_admin.repository.admins import get_admin_repo
from content_admin.resources import ResourceSpec
from content_admin.state import FetchState, ModalState

logger = logging.getLogger(__name__)


def init_session_state() -> None:
    if "_session_id" not in st.session_state:
        st.session_state["_session_id"] = str(uuid.uuid4())
    if "_admin" not in st.session_state:
        st.session_state["_admin"] = None
    for key in ("_fetch_states", "_modals", "_forms", "_list_queries"):
        if key not in st.session_state:
            st.session_state[key] = {}
    bind_log_context()


def get_session_id() -> str:
    return st.session_state.get("_session_id", "default")


def bind_log_context(resource: str | None = None) -> None:
    LogContext.set_session_id(get_session_id())
    LogContext.set_user_id(current_uid())
    LogContext.set_resource(resource)


# =============================================================================
# Authentication
# =============================================================================


def current_admin() -> dict | None:
    return st.session_state.get("_admin")


def current_uid() -> str | None:
    admin = current_admin()
    return str(admin["id"]) if admin and admin.get("id") is not None else None


def current_role() -> str | None:
    admin = current_admin()
    return admin.get("role") if admin else None


def sign_in(email: str, password: str) -> dict:
    """Authenticate and keep the admin document in the session. Raises on failure."""
    admin = get_admin_repo().authenticate(email.strip(), password)
    st.session_state["_admin"] = admin
    bind_log_context()
    logger.info("Admin signed in", extra={"role": admin.get("role")})
    return admin


def sign_out() -> None:
    logger.info("Admin signed out")
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    LogContext.clear()
    init_session_state()


# =============================================================================
# Per-view state
# =============================================================================


def get_repo(spec: ResourceSpec) -> Repository:
    return get_repository(spec, get_client(), current_uid=current_uid())


def get_fetch_state(resource: str) -> FetchState:
    states: dict[str, FetchState] = st.session_state["_fetch_states"]
    if resource not in states:
        states[resource] = FetchState(resource=resource)
    return states[resource]


def get_modal(resource: str, name: str) -> ModalState:
    modals: dict[str, ModalState] = st.session_state["_modals"]
    key = f"{resource}:{name}"
    if key not in modals:
        modals[key] = ModalState(name=key)
    return modals[key]


def open_form(spec: ResourceSpec, record: dict | None = None) -> FormState:
    """Start a fresh form: blank for add, pre-filled for edit."""
    form = FormState.from_record(spec, record) if record else FormState.blank(spec)
    st.session_state["_forms"][spec.key] = form
    return form


def get_form(spec: ResourceSpec) -> FormState:
    """The open form for a resource; kept across reruns so a failed submit loses nothing."""
    forms: dict[str, FormState] = st.session_state["_forms"]
    if spec.key not in forms:
        forms[spec.key] = FormState.blank(spec)
    return forms[spec.key]


def discard_form(spec: ResourceSpec) -> None:
    st.session_state["_forms"].pop(spec.key, None)


def get_list_query(resource: str) -> ListQuery:
    queries: dict[str, ListQuery] = st.session_state["_list_queries"]
    return queries.get(resource) or ListQuery()


def update_list_query(resource: str, **changes: Any) -> ListQuery:
    """Replace query fields; a new search, facet or page size starts again at page 1."""
    current = get_list_query(resource)
    if any(name in changes for name in ("search", "facets", "page_size")) and "page" not in changes:
        changes["page"] = 1
    query = dataclasses.replace(current, **changes)
    st.session_state["_list_queries"][resource] = query
    return query


# =============================================================================
# Flash messages
# =============================================================================


def flash(message: str, *, icon: str = "✅") -> None:
    """Queue a toast for the next run (a dialog closes by rerunning the page)."""
    st.session_state.setdefault("_flash", []).append((message, icon))


def render_flashes() -> None:
    for message, icon in st.session_state.pop("_flash", []):
        st.toast(message, icon=icon)
