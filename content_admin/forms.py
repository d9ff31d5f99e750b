"""
Form model shared by every create/edit dialog.

`FormState` holds one value per field of a `ResourceSpec`. `validate()` runs
before any network call and raises with every offending field at once.
`build_payload()` turns the state into what the backend expects: multipart
form data when a file was selected, JSON otherwise. `submit()` ties the two
together and picks create or update.
"""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from content_admin.config import settings
from content_admin.exceptions import InvalidFieldError, MissingRequiredFieldError
from content_admin.resources import BOOLEAN, EMAIL, IMAGE, IMAGES, RICHTEXT, FieldSpec, ResourceSpec
from content_admin.suggestions import FILE, PRESET, URL, ImageChoice
from content_admin.text_utils import is_valid_email, slugify, strip_html, utc_now_iso

if TYPE_CHECKING:
    from content_admin.api_client import BackendClient

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class UploadedFile:
    """A file picked in the browser, held in memory until submit."""

    name: str
    content: bytes = field(repr=False)
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lower().lstrip(".")

    @property
    def mime_type(self) -> str:
        return self.content_type or mimetypes.guess_type(self.name)[0] or "application/octet-stream"

    @classmethod
    def from_upload(cls, upload: Any) -> UploadedFile:
        """Wrap a Streamlit `UploadedFile` (anything with name/getvalue/type)."""
        return cls(name=upload.name, content=upload.getvalue(), content_type=getattr(upload, "type", None))

    @classmethod
    def from_path(cls, path: Path) -> UploadedFile:
        return cls(name=path.name, content=path.read_bytes(), content_type=mimetypes.guess_type(path.name)[0])


FileValue = UploadedFile | list[UploadedFile] | None


@dataclass(frozen=True)
class Payload:
    """Request body for a create or update call."""

    fields: dict[str, Any]
    files: list[tuple[str, UploadedFile]] = field(default_factory=list)

    @property
    def is_multipart(self) -> bool:
        return bool(self.files)

    def form_fields(self) -> list[tuple[str, str]]:
        """Fields flattened for multipart encoding; list values repeat their key."""
        out: list[tuple[str, str]] = []
        for key, value in self.fields.items():
            if isinstance(value, (list, tuple)):
                out.extend((key, str(v)) for v in value)
            else:
                out.append((key, str(value)))
        return out


@dataclass
class FormState:
    """Values of one open form. Survives a failed submit untouched."""

    spec: ResourceSpec
    values: dict[str, Any] = field(default_factory=dict)
    files: dict[str, FileValue] = field(default_factory=dict)
    record_id: str | int | None = None
    image_choice: ImageChoice | None = None

    @classmethod
    def blank(cls, spec: ResourceSpec) -> FormState:
        values = {f.name: f.initial_value() for f in spec.scalar_fields}
        return cls(spec=spec, values=values)

    @classmethod
    def from_record(cls, spec: ResourceSpec, record: dict) -> FormState:
        """Pre-fill from a backend record; files start empty and are only sent if replaced."""
        values: dict[str, Any] = {}
        for f in spec.scalar_fields:
            raw = record.get(f.name)
            if raw is None:
                values[f.name] = f.initial_value()
            elif f.kind == BOOLEAN:
                values[f.name] = coerce_bool(raw)
            else:
                values[f.name] = raw
        return cls(spec=spec, values=values, record_id=record.get("id"))

    @property
    def editing(self) -> bool:
        return self.record_id is not None

    @property
    def has_files(self) -> bool:
        return any(_file_list(v) for v in self.files.values())

    def set(self, name: str, value: Any) -> None:
        self.values[name] = value

    def set_file(self, name: str, value: FileValue) -> None:
        self.files[name] = value

    def generated_slugs(self) -> dict[str, str]:
        """Slugs for empty slug fields, derived from their source title. `values` is untouched."""
        return {
            f.name: slugify(strip_html(self.values.get(f.slug_source)))
            for f in self.spec.fields
            if f.slug_source and not str(self.values.get(f.name) or "").strip()
        }

    def reset(self) -> None:
        fresh = FormState.blank(self.spec)
        self.values = fresh.values
        self.files = {}
        self.record_id = None
        self.image_choice = None


def coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _file_list(value: FileValue) -> list[UploadedFile]:
    if value is None:
        return []
    if isinstance(value, UploadedFile):
        return [value]
    return [v for v in value if v is not None]


def is_blank(field_spec: FieldSpec, value: Any) -> bool:
    if field_spec.kind == BOOLEAN:
        return False
    if value is None:
        return True
    if isinstance(value, str):
        text = strip_html(value) if field_spec.kind == RICHTEXT else value
        return not text.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


# =============================================================================
# Validation
# =============================================================================


def missing_fields(form: FormState, editing: bool | None = None) -> list[str]:
    """Labels of empty required fields, in declaration order."""
    editing = form.editing if editing is None else editing
    missing: list[str] = []
    for f in form.spec.fields:
        if not f.is_required(editing):
            continue
        if f.is_file:
            has_image_choice = f.name == form.spec.image_field and form.image_choice is not None
            if not _file_list(form.files.get(f.name)) and not has_image_choice:
                missing.append(f.label)
        elif is_blank(f, form.values.get(f.name)):
            missing.append(f.label)
    return missing


def _check_file(f: FieldSpec, upload: UploadedFile) -> None:
    if upload.size > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes / (1024 * 1024)
        raise InvalidFieldError(f.label, reason=f"{upload.name} is larger than {limit_mb:g}MB")
    if upload.size == 0:
        raise InvalidFieldError(f.label, reason=f"{upload.name} is empty")
    if f.kind in (IMAGE, IMAGES):
        if upload.extension not in settings.allowed_image_types:
            raise InvalidFieldError(f.label, reason="Please upload an image file")
    elif f.accept:
        is_pdf_mime = upload.mime_type == "application/pdf"
        if upload.extension not in f.accept and not ("pdf" in f.accept and is_pdf_mime):
            kinds = ", ".join(sorted(a.upper() for a in f.accept))
            raise InvalidFieldError(f.label, reason=f"Only {kinds} files are allowed")


def validate(form: FormState, editing: bool | None = None) -> None:
    """
    Check the form before anything is sent.

    Raises:
        MissingRequiredFieldError: listing every empty required field.
        InvalidFieldError: for the first malformed email or file.
    """
    missing = missing_fields(form, editing)
    if missing:
        raise MissingRequiredFieldError(missing)

    for f in form.spec.fields:
        if f.kind == EMAIL:
            value = str(form.values.get(f.name) or "").strip()
            if value and not is_valid_email(value):
                raise InvalidFieldError(f.label, reason="Please enter a valid email address")
        elif f.options and not f.lookup:
            value = form.values.get(f.name)
            if value not in (None, "") and value not in f.options:
                raise InvalidFieldError(f.label, reason=f"Please select a valid {f.label.lower()}")
        elif f.is_file:
            for upload in _file_list(form.files.get(f.name)):
                _check_file(f, upload)

    choice = form.image_choice
    if choice is not None and choice.type == FILE and form.spec.image_field:
        _check_file(form.spec.get_field(form.spec.image_field), form.image_choice.value)


# =============================================================================
# Payload
# =============================================================================


def serialize_value(value: Any) -> Any:
    """Form-field representation: booleans as "true"/"false", dates as ISO."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        return [serialize_value(v) for v in value]
    return value


def _apply_image_choice(form: FormState, fields: dict[str, Any], files: list[tuple[str, UploadedFile]]) -> None:
    choice = form.image_choice
    target = form.spec.image_field
    if choice is None or target is None:
        return
    if any(name == target for name, _ in files):
        return
    if choice.type == FILE:
        files.append((target, choice.value))
    elif choice.type == URL:
        fields["imageUrl"] = choice.value
    elif choice.type == PRESET:
        files.append((target, UploadedFile.from_path(Path(choice.value))))
        fields["coverPresetLabel"] = choice.label or f"img{(choice.index or 0) + 1}"


def build_payload(form: FormState) -> Payload:
    """
    Serialize the form.

    Empty optional values are left out of a create. On edit they are sent
    empty so the user can clear a field. Files are included only when
    selected or replaced.
    """
    values = {**form.values, **form.generated_slugs()}
    fields: dict[str, Any] = {}
    for f in form.spec.scalar_fields:
        value = values.get(f.name)
        if f.kind != BOOLEAN and is_blank(f, value):
            if f.required or form.editing:
                fields[f.name] = "" if not isinstance(value, list) else []
            continue
        if isinstance(value, str):
            value = value.strip() if f.kind != RICHTEXT else value
        fields[f.name] = serialize_value(value)

    if form.editing and form.spec.updated_stamp:
        fields[form.spec.updated_stamp] = utc_now_iso()
    if not form.editing and form.spec.created_stamp:
        fields[form.spec.created_stamp] = utc_now_iso()

    files: list[tuple[str, UploadedFile]] = []
    for f in form.spec.file_fields:
        for upload in _file_list(form.files.get(f.name)):
            files.append((f.name, upload))

    _apply_image_choice(form, fields, files)
    return Payload(fields=fields, files=files)


def submit(
    client: BackendClient,
    form: FormState,
    record_id: str | int | None = None,
    *,
    on_progress: ProgressCallback | None = None,
) -> Any:
    """
    Validate, then create or update. Returns the decoded response body, or
    None when the backend answers with an empty body.

    The form is left intact on failure so the user can retry.
    """
    if record_id is not None:
        form.record_id = record_id
    validate(form)
    payload = build_payload(form)
    spec = form.spec

    if form.editing:
        logger.info(
            "Updating record",
            extra={"resource": spec.key, "record_id": form.record_id, "multipart": payload.is_multipart},
        )
        return client.update(
            spec.endpoint,
            form.record_id,
            payload,
            method=spec.update_method,
            on_progress=on_progress,
        )

    logger.info("Creating record", extra={"resource": spec.key, "multipart": payload.is_multipart})
    return client.create(spec.endpoint, payload, on_progress=on_progress)
