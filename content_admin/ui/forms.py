"""
Form rendering and submission for the add/edit dialogs.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import streamlit as st

from content_admin.api_client import get_client
from content_admin.exceptions import ContentAdminError, user_message
from content_admin.forms import FormState, UploadedFile
from content_admin.listing import exclude_deleted
from content_admin.repository import Repository, SaveResult
from content_admin.resources import (
    BOOLEAN,
    DATE,
    EMAIL,
    IMAGE,
    IMAGES,
    MULTISELECT,
    PASSWORD,
    RICHTEXT,
    SELECT,
    TEXTAREA,
    FieldSpec,
    LookupSpec,
    get_resource,
)
from content_admin.state import ModalState
from content_admin.text_utils import parse_datetime
from content_admin.ui.components import file_types
from content_admin.ui.image_picker import render_image_picker

logger = logging.getLogger(__name__)


@st.cache_data(show_spinner=False, ttl=60)
def fetch_lookup_options(resource: str, label_field: str, value_field: str | None) -> list[tuple[str, str]]:
    spec = get_resource(resource)
    records = exclude_deleted(get_client().list(spec.endpoint))
    return LookupSpec(resource, label_field, value_field).options(records)


def lookup_options(lookup: LookupSpec) -> list[tuple[str, str]]:
    """Options for a lookup select; a failed fetch leaves the select empty with a warning."""
    try:
        return fetch_lookup_options(lookup.resource, lookup.label_field, lookup.value_field)
    except ContentAdminError as exc:
        exc.log(logging.WARNING)
        st.warning(f"Could not load {lookup.resource}: {user_message(exc)}")
        return []


def _date_value(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def _select_options(f: FieldSpec, current: Any) -> tuple[list[str], dict[str, str]]:
    if f.lookup is not None:
        pairs = lookup_options(f.lookup)
    else:
        pairs = [(o, o) for o in f.options]
    labels = dict(pairs)
    values = [v for v, _ in pairs]
    # Keep a stored value the lookup no longer offers.
    for item in current if isinstance(current, list) else [current]:
        if item not in (None, "") and str(item) not in labels:
            values.insert(0, str(item))
            labels[str(item)] = str(item)
    return values, labels


def render_field(f: FieldSpec, form: FormState, *, key: str) -> None:
    """One input widget, written back into the form state."""
    label = f"{f.label} *" if f.is_required(form.editing) else f.label
    current = form.values.get(f.name)
    widget_key = f"{key}_{f.name}"

    if f.kind in (SELECT, MULTISELECT):
        values, labels = _select_options(f, current)
        if f.kind == MULTISELECT:
            default = [str(v) for v in (current or []) if str(v) in labels] if isinstance(current, list) else []
            form.set(f.name, st.multiselect(label, values, default=default, format_func=labels.get, key=widget_key, help=f.help))
        else:
            options = ["", *values]
            index = options.index(str(current)) if current not in (None, "") and str(current) in options else 0
            chosen = st.selectbox(
                label,
                options,
                index=index,
                format_func=lambda v: labels.get(v, "Select…") if v else "Select…",
                key=widget_key,
                help=f.help,
            )
            form.set(f.name, chosen)
    elif f.kind == BOOLEAN:
        form.set(f.name, st.toggle(label, value=bool(current), key=widget_key, help=f.help))
    elif f.kind == DATE:
        form.set(f.name, st.date_input(label, value=_date_value(current), key=widget_key, format="YYYY-MM-DD"))
    elif f.kind in (TEXTAREA, RICHTEXT):
        height = 220 if f.kind == RICHTEXT else 120
        help_text = f.help or ("HTML formatting is kept as written." if f.kind == RICHTEXT else None)
        with st.container(key=f"rtl-{widget_key}" if f.rtl else None):
            form.set(f.name, st.text_area(label, value=str(current or ""), height=height, key=widget_key, help=help_text))
    elif f.kind == PASSWORD:
        form.set(f.name, st.text_input(label, value="", type="password", key=widget_key, help=f.help))
    elif f.kind in (IMAGE, IMAGES) or f.is_file:
        uploads = st.file_uploader(
            label,
            type=file_types(f),
            accept_multiple_files=f.kind == IMAGES,
            key=widget_key,
            help=f.help,
        )
        if f.kind == IMAGES:
            form.set_file(f.name, [UploadedFile.from_upload(u) for u in uploads or []] or None)
        else:
            form.set_file(f.name, UploadedFile.from_upload(uploads) if uploads is not None else None)
        if form.editing and f.kind != IMAGES:
            st.caption("Leave empty to keep the current file.")
    else:
        placeholder = "name@example.com" if f.kind == EMAIL else None
        if f.slug_source:
            placeholder = f"Generated from {form.spec.get_field(f.slug_source).label} when empty"
        with st.container(key=f"rtl-{widget_key}" if f.rtl else None):
            form.set(
                f.name,
                st.text_input(label, value=str(current or ""), key=widget_key, placeholder=placeholder, help=f.help),
            )


def render_form_fields(form: FormState, *, key: str) -> None:
    spec = form.spec
    for f in spec.fields:
        if f.name == spec.image_field and spec.suggestion_key:
            form.image_choice = render_image_picker(spec, form, key=f"{key}_picker")
            continue
        render_field(f, form, key=key)


def save_form(repo: Repository, form: FormState, modal: ModalState) -> SaveResult | None:
    """
    Submit with a spinner, or a real progress bar when files are uploaded.

    On failure the modal returns to `open` with the error and the form is
    left as it was.
    """
    modal.submit()
    progress = st.progress(0.0, text="Uploading…") if form.has_files or form.image_choice is not None else None

    def on_progress(sent: int, total: int) -> None:
        if progress is not None and total:
            progress.progress(min(sent / total, 1.0), text=f"Uploading… {sent * 100 // total}%")

    try:
        with st.spinner("Saving…"):
            if form.editing:
                result = repo.update(form.record_id, form, on_progress=on_progress)
            else:
                result = repo.create(form, on_progress=on_progress)
    except ContentAdminError as exc:
        exc.log(logging.WARNING)
        modal.fail(user_message(exc))
        return None
    finally:
        if progress is not None:
            progress.empty()

    modal.succeed()
    return result
