"""
Image picker: a suggested preset, an uploaded file, or an external URL.
"""

from __future__ import annotations

import streamlit as st

from content_admin.config import settings
from content_admin.forms import FormState, UploadedFile
from content_admin.resources import ResourceSpec
from content_admin.suggestions import PRESET_IMAGES, ImageChoice, choose_image, get_suggestion_store


def suggested_index(spec: ResourceSpec) -> int:
    if not spec.suggestion_key:
        return 0
    return get_suggestion_store().read(spec.suggestion_key, size=len(PRESET_IMAGES))


def advance_suggestion(spec: ResourceSpec) -> None:
    """Rotate the hint; call only after the record was saved."""
    if spec.suggestion_key:
        get_suggestion_store().advance(spec.suggestion_key, size=len(PRESET_IMAGES))


def render_image_picker(spec: ResourceSpec, form: FormState, *, key: str) -> ImageChoice | None:
    """
    Three sources in tabs. Returns None when editing and nothing new was
    picked, so the stored image is kept.
    """
    field_spec = spec.get_field(spec.image_field) if spec.image_field else None
    label = field_spec.label if field_spec else "Image"
    st.markdown(f"**{label}**")

    hint = suggested_index(spec)
    tab_preset, tab_upload, tab_url = st.tabs(["Suggested", "Upload", "Image URL"])

    with tab_preset:
        use_preset = st.checkbox(
            "Use a preset image",
            value=not form.editing,
            key=f"{key}_use_preset",
            help="Presets rotate so consecutive posts get different images.",
        )
        cols = st.columns(len(PRESET_IMAGES))
        for i, preset in enumerate(PRESET_IMAGES):
            with cols[i]:
                st.image(str(preset.path), caption=f"{preset.label}{' ★' if i == hint else ''}", use_container_width=True)
        preset_index = st.selectbox(
            "Preset",
            options=list(range(len(PRESET_IMAGES))),
            index=hint,
            format_func=lambda i: PRESET_IMAGES[i].label,
            key=f"{key}_preset",
        )

    with tab_upload:
        upload = st.file_uploader(
            "Upload image",
            type=sorted(settings.allowed_image_types),
            key=f"{key}_upload",
            help=field_spec.help if field_spec else None,
        )

    with tab_url:
        url = st.text_input("Image URL", key=f"{key}_url", placeholder="https://…")

    file = UploadedFile.from_upload(upload) if upload is not None else None
    if file is None and not (url or "").strip() and not use_preset:
        return None
    return choose_image(file=file, url=url, preset_index=preset_index, suggested_index=hint)
