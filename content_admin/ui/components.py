"""
Reusable UI components (skeletons, banners, pagination, record values).
"""

from __future__ import annotations

import html
import logging
from typing import Any

import streamlit as st

from content_admin.api_client import BackendClient
from content_admin.config import ROLE_LABELS, settings
from content_admin.listing import Page
from content_admin.resources import BOOLEAN, DATE, FILE, IMAGE, IMAGES, MULTISELECT, PASSWORD, RICHTEXT, FieldSpec, ResourceSpec
from content_admin.text_utils import EMPTY_DISPLAY, excerpt, format_date, format_datetime, initials, timestamp_of

logger = logging.getLogger(__name__)


def render_table_skeleton(rows: int = 5) -> None:
    """Placeholder rows while a list is loading."""
    st.markdown("".join('<div class="skeleton-row"></div>' for _ in range(rows)), unsafe_allow_html=True)


def render_error_with_retry(message: str, *, key: str) -> bool:
    """Error banner for a failed fetch. Returns True when Retry was clicked."""
    st.error(f"**Could not load data.** {message}", icon="⚠️")
    return st.button("Retry", key=f"retry_{key}", type="primary")


def render_empty_state(spec: ResourceSpec, *, searching: bool) -> None:
    if searching:
        text = f"No {spec.label.lower()} match your search. Try different keywords."
    else:
        text = f"No {spec.label.lower()} yet."
        if not spec.read_only:
            text += f" Use “Add {spec.singular}” to create one."
    st.markdown(f'<div class="empty-state">{html.escape(text)}</div>', unsafe_allow_html=True)


def render_pagination(page: Page, *, key: str) -> int | None:
    """Prev/Next controls. Returns the page to move to, or None."""
    col1, col2, col3 = st.columns([1, 3, 1])
    target: int | None = None
    with col1:
        if st.button("← Prev", key=f"prev_{key}", disabled=not page.has_previous, use_container_width=True):
            target = page.page - 1
    with col2:
        st.caption(f"{page.label()} · Page {page.page} / {page.page_count}")
    with col3:
        if st.button("Next →", key=f"next_{key}", disabled=not page.has_next, use_container_width=True):
            target = page.page + 1
    return target


def render_avatar(first: str | None, last: str | None) -> None:
    st.markdown(f'<span class="avatar">{html.escape(initials(first, last))}</span>', unsafe_allow_html=True)


def render_role_badge(role: str | None) -> None:
    label = ROLE_LABELS.get(role or "", role or "unknown")
    st.markdown(f'<span class="role-badge">{html.escape(label)}</span>', unsafe_allow_html=True)


def cell_text(field_spec: FieldSpec, value: Any) -> str:
    """Short plain-text rendering for a table cell."""
    if value is None or value == "" or value == []:
        return EMPTY_DISPLAY
    if field_spec.kind == BOOLEAN:
        return "Yes" if value in (True, "true", 1, "1") else "No"
    if field_spec.kind == DATE:
        return format_date(value)
    if field_spec.kind == MULTISELECT and isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return excerpt(value, max_chars=80) or EMPTY_DISPLAY


def render_field_value(field_spec: FieldSpec, value: Any) -> None:
    """Full rendering of one value in the view dialog."""
    st.markdown(f"**{field_spec.label}**")
    if field_spec.kind == PASSWORD:
        return
    if value is None or value == "" or value == []:
        st.caption(EMPTY_DISPLAY)
        return
    if field_spec.kind == RICHTEXT:
        css = ' class="rtl-text"' if field_spec.rtl else ""
        # Rich text is stored as editor HTML and shown as-is.
        st.markdown(f"<div{css}>{value}</div>", unsafe_allow_html=True)
        return
    if field_spec.rtl:
        st.markdown(f'<div class="rtl-text">{html.escape(str(value))}</div>', unsafe_allow_html=True)
        return
    if field_spec.kind in (BOOLEAN, DATE, MULTISELECT):
        st.write(cell_text(field_spec, value))
    else:
        st.text(str(value))


def render_record_images(client: BackendClient, spec: ResourceSpec, record: dict) -> None:
    """Image, gallery images and attachment link of a record, when it has them."""
    record_id = record.get("id")
    if record_id is None:
        return
    stamp = timestamp_of(record.get("modifiedOn") or record.get("updatedOn"))
    bust = str(int(stamp)) if stamp else None

    image_field = spec.get_field(spec.image_field) if spec.image_field else None
    if image_field is not None and image_field.kind == IMAGES:
        images = [img for img in record.get(image_field.name) or [] if isinstance(img, dict) and img.get("id")]
        if images:
            st.image(
                [client.image_url(spec.endpoint, img["id"], spec.image_route) for img in images],
                width=160,
            )
    elif image_field is not None and image_field.kind == IMAGE:
        if record.get("imageUrl"):
            st.image(record["imageUrl"], width=240)
        elif record.get(image_field.name):
            st.image(client.image_url(spec.endpoint, record_id, spec.image_route, bust=bust), width=240)

    if spec.attachment_field and record.get(spec.attachment_field):
        attachment = spec.get_field(spec.attachment_field)
        url = client.image_url(spec.endpoint, record_id, spec.attachment_route, bust=bust)
        st.link_button(f"Open {attachment.label}", url)


def render_timestamps(record: dict) -> None:
    created = record.get("createdOn") or record.get("createdAt")
    modified = record.get("modifiedOn") or record.get("updatedOn")
    parts = []
    if created:
        parts.append(f"Created {format_datetime(created)}")
    if modified:
        parts.append(f"Modified {format_datetime(modified)}")
    if parts:
        st.caption(" · ".join(parts))


def file_types(field_spec: FieldSpec) -> list[str]:
    """Extensions for a file uploader."""
    if field_spec.kind == FILE:
        return sorted(field_spec.accept or settings.allowed_attachment_types)
    return sorted(settings.allowed_image_types)
