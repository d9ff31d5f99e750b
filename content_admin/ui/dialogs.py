"""
Modal dialogs drawn over a list view: view, add/edit, delete and error.

Each dialog has its own `ModalState`. Interactions inside a dialog rerun
only the dialog; closing it after a save reruns the page so the list is
fetched again.
"""

from __future__ import annotations

import logging

import streamlit as st

from content_admin.api_client import get_client
from content_admin.exceptions import ContentAdminError, user_message
from content_admin.repository import PASSWORD_RESET_REQUIRED
from content_admin.resources import ResourceSpec
from content_admin.ui.components import render_field_value, render_record_images, render_timestamps
from content_admin.ui.forms import render_form_fields, save_form
from content_admin.ui.image_picker import advance_suggestion
from content_admin.ui.session import discard_form, flash, get_fetch_state, get_form, get_modal, get_repo, open_form

logger = logging.getLogger(__name__)


def _finish(spec: ResourceSpec) -> None:
    get_fetch_state(spec.key).invalidate()
    st.rerun()


def _view(spec: ResourceSpec, record: dict) -> None:
    render_record_images(get_client(), spec, record)
    for f in spec.fields:
        if f.is_file:
            continue
        render_field_value(f, record.get(f.name))
    render_timestamps(record)
    if st.button("Close", use_container_width=True):
        get_modal(spec.key, "view").close()
        st.rerun()


def open_view_dialog(spec: ResourceSpec, record: dict) -> None:
    get_modal(spec.key, "view").open(record)
    st.dialog(f"{spec.singular}: {spec.display_title(record)}", width="large")(_view)(spec, record)


def _edit(spec: ResourceSpec) -> None:
    modal = get_modal(spec.key, "form")
    form = get_form(spec)
    key = f"form_{spec.key}_{form.record_id or 'new'}"

    if modal.error:
        st.error(modal.error, icon="⚠️")

    with st.form(key, border=False):
        render_form_fields(form, key=key)
        col1, col2 = st.columns(2)
        with col1:
            submitted = st.form_submit_button(
                "Update" if form.editing else "Create",
                type="primary",
                use_container_width=True,
            )
        with col2:
            cancelled = st.form_submit_button("Cancel", use_container_width=True)

    if cancelled:
        modal.close()
        discard_form(spec)
        st.rerun()
    if not submitted:
        return

    editing = form.editing
    result = save_form(get_repo(spec), form, modal)
    if result is None:
        st.error(modal.error or "Save failed", icon="⚠️")
        return

    if not editing:
        advance_suggestion(spec)
    discard_form(spec)
    flash(f"{spec.singular} {'updated' if editing else 'created'}")
    if PASSWORD_RESET_REQUIRED in result.notices:
        flash("Password was not changed. Send a password reset email instead.", icon="🔑")
    _finish(spec)


def open_form_dialog(spec: ResourceSpec, record: dict | None = None) -> None:
    """Add when `record` is None, edit otherwise."""
    open_form(spec, record)
    get_modal(spec.key, "form").open(record)
    title = f"Edit {spec.singular}" if record else f"Add {spec.singular}"
    st.dialog(title, width="large")(_edit)(spec)


def _confirm_delete(spec: ResourceSpec, record: dict) -> None:
    modal = get_modal(spec.key, "delete")
    st.write(f"Delete **{spec.display_title(record)}**? This cannot be undone.")
    if modal.error:
        st.error(modal.error, icon="⚠️")

    col1, col2 = st.columns(2)
    with col1:
        confirmed = st.button("Delete", type="primary", use_container_width=True)
    with col2:
        if st.button("Cancel", use_container_width=True):
            modal.close()
            st.rerun()
    if not confirmed:
        return

    modal.submit()
    try:
        with st.spinner("Deleting…"):
            get_repo(spec).delete(record["id"])
    except ContentAdminError as exc:
        exc.log(logging.WARNING)
        modal.fail(user_message(exc))
        st.rerun(scope="fragment")
        return
    modal.succeed()
    flash(f"{spec.singular} deleted", icon="🗑️")
    _finish(spec)


def open_delete_dialog(spec: ResourceSpec, record: dict) -> None:
    get_modal(spec.key, "delete").open(record)
    st.dialog(f"Delete {spec.singular}")(_confirm_delete)(spec, record)


def _error(message: str) -> None:
    st.error(message, icon="⚠️")
    if st.button("OK", use_container_width=True):
        st.rerun()


def open_error_dialog(message: str, *, title: str = "Something went wrong") -> None:
    st.dialog(title)(_error)(message)
