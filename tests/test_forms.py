"""
Tests for content_admin.forms.

Covers:
- Required-field validation before any network call
- Email, option and file checks
- Payload serialization (JSON vs multipart, booleans, dates, slugs)
- Image picker choices
- Create vs update dispatch
"""

from datetime import date
from unittest import mock

import pytest

from content_admin.config import settings
from content_admin.exceptions import InvalidFieldError, MissingRequiredFieldError
from content_admin.forms import (
    FormState,
    Payload,
    UploadedFile,
    build_payload,
    coerce_bool,
    is_blank,
    missing_fields,
    serialize_value,
    submit,
    validate,
)
from content_admin.resources import ARTICLE, BOOK, EVENT, QUESTION, RICHTEXT, TAG, TOPIC, WRITER, FieldSpec
from content_admin.suggestions import choose_image


@pytest.fixture
def cover(png_bytes) -> UploadedFile:
    return UploadedFile("cover.png", png_bytes, "image/png")


@pytest.fixture
def book_form(cover) -> FormState:
    form = FormState.blank(BOOK)
    form.set("title", "Riyad as-Salihin")
    form.set("author", "Imam Nawawi")
    form.set("language", "English")
    form.set_file("coverImage", cover)
    return form


@pytest.fixture
def event_form() -> FormState:
    form = FormState.blank(EVENT)
    form.set("title", "Night of Power")
    form.set("topic", "Ramadan")
    form.set("language", "English")
    form.set("venue", "Main Hall")
    return form


class TestFormState:
    def test_blank_uses_defaults(self):
        form = FormState.blank(ARTICLE)

        assert form.values["isPublished"] is True
        assert form.values["title"] == ""
        assert form.values["date"] == date.today().isoformat()
        assert not form.editing

    def test_from_record(self):
        record = {"id": 9, "title": "Old", "isPublished": "false", "coverImage": "cover.png"}

        form = FormState.from_record(BOOK, record)

        assert form.editing
        assert form.record_id == 9
        assert form.values["title"] == "Old"
        assert form.values["isPublished"] is False
        assert form.values["author"] == ""
        assert form.files == {}

    def test_reset(self, book_form):
        book_form.record_id = 3
        book_form.reset()

        assert book_form.values["title"] == ""
        assert book_form.files == {}
        assert not book_form.editing

    def test_has_files(self, book_form):
        assert book_form.has_files
        assert not FormState.blank(BOOK).has_files


class TestHelpers:
    @pytest.mark.parametrize("value,expected", [("true", True), ("1", True), ("no", False), (0, False), (True, True)])
    def test_coerce_bool(self, value, expected):
        assert coerce_bool(value) is expected

    def test_rich_text_markup_only_is_blank(self):
        field = FieldSpec("body", "Body", RICHTEXT)

        assert is_blank(field, "<p><br></p>")
        assert not is_blank(field, "<p>text</p>")

    def test_serialize_value(self):
        assert serialize_value(True) == "true"
        assert serialize_value(False) == "false"
        assert serialize_value(date(2024, 3, 12)) == "2024-03-12"
        assert serialize_value(["a", True]) == ["a", "true"]
        assert serialize_value(7) == 7

    def test_form_fields_repeat_list_keys(self):
        payload = Payload(fields={"tags": ["a", "b"], "title": "x"})

        assert payload.form_fields() == [("tags", "a"), ("tags", "b"), ("title", "x")]


class TestValidate:
    def test_lists_every_missing_field(self):
        form = FormState.blank(BOOK)

        with pytest.raises(MissingRequiredFieldError) as exc_info:
            validate(form)

        assert exc_info.value.fields == ["Title", "Author", "Language", "Cover Image"]

    def test_image_not_required_on_edit(self, book_form):
        book_form.files = {}
        book_form.record_id = 4

        assert missing_fields(book_form) == []

    def test_image_choice_satisfies_required_image(self, book_form):
        book_form.files = {}
        assert missing_fields(book_form) == ["Cover Image"]

        book_form.image_choice = choose_image(url="https://example.org/c.png")

        assert missing_fields(book_form) == []

    def test_invalid_email(self):
        form = FormState.blank(WRITER)
        form.set("name", "Sara Khan")
        form.set("email", "sara@")

        with pytest.raises(InvalidFieldError, match="valid email"):
            validate(form)

    def test_unknown_fixed_option(self):
        form = FormState.blank(QUESTION)
        form.values.update(
            questionEnglish="Is it valid?",
            slug="is-it-valid",
            writer="Sara",
            language="English",
            topic="Fiqh",
            answeredStatus="maybe",
        )

        with pytest.raises(InvalidFieldError, match="Answered Status"):
            validate(form)

    def test_oversized_image(self, book_form):
        with mock.patch.object(settings, "max_upload_bytes", 16):
            with pytest.raises(InvalidFieldError, match="larger than"):
                validate(book_form)

    def test_non_image_rejected(self, book_form):
        book_form.set_file("coverImage", UploadedFile("notes.txt", b"hello"))

        with pytest.raises(InvalidFieldError, match="image file"):
            validate(book_form)

    def test_attachment_must_be_pdf(self, book_form):
        book_form.set_file("attachment", UploadedFile("book.docx", b"PK\x03\x04"))

        with pytest.raises(InvalidFieldError, match="Only PDF"):
            validate(book_form)

    def test_pdf_attachment_accepted(self, book_form):
        book_form.set_file("attachment", UploadedFile("book.pdf", b"%PDF-1.7"))

        validate(book_form)


class TestBuildPayload:
    def test_json_when_no_files(self):
        form = FormState.blank(TAG)
        form.set("tag", "  fiqh ")

        payload = build_payload(form)

        assert not payload.is_multipart
        assert payload.fields == {"tag": "fiqh"}

    def test_multipart_when_file_attached(self, book_form, cover):
        payload = build_payload(book_form)

        assert payload.is_multipart
        assert payload.files == [("coverImage", cover)]

    def test_booleans_and_dates(self, book_form):
        book_form.set("bookDate", date(2024, 3, 12))

        fields = build_payload(book_form).fields

        assert fields["isPublished"] == "true"
        assert fields["bookDate"] == "2024-03-12"

    def test_empty_optional_left_out_of_create(self, book_form):
        fields = build_payload(book_form).fields

        assert "isbn" not in fields
        assert "status" not in fields

    def test_empty_optional_sent_on_edit(self, book_form):
        book_form.record_id = 5

        fields = build_payload(book_form).fields

        assert fields["isbn"] == ""

    def test_slug_generated_from_title(self, event_form):
        assert build_payload(event_form).fields["slug"] == "night-of-power"

    def test_generated_slug_not_written_back(self, event_form):
        build_payload(event_form)

        assert not event_form.values.get("slug")

    def test_explicit_slug_kept(self, event_form):
        event_form.set("slug", "laylat-al-qadr")

        assert build_payload(event_form).fields["slug"] == "laylat-al-qadr"

    def test_rich_text_kept_verbatim(self, event_form):
        event_form.set("urduDescription", "<p dir='rtl'>شب قدر</p>")

        assert build_payload(event_form).fields["urduDescription"] == "<p dir='rtl'>شب قدر</p>"

    def test_created_and_updated_stamps(self):
        article = FormState.blank(ARTICLE)
        article.set("title", "x")
        assert "createdAt" in build_payload(article).fields

        topic = FormState.from_record(TOPIC, {"id": 1, "topic": "Salah"})
        assert "updatedOn" in build_payload(topic).fields

    def test_url_choice(self, event_form):
        event_form.image_choice = choose_image(url="https://example.org/e.png")

        payload = build_payload(event_form)

        assert payload.fields["imageUrl"] == "https://example.org/e.png"
        assert not payload.is_multipart

    def test_preset_choice_uploads_the_preset(self, event_form):
        event_form.image_choice = choose_image(preset_index=2)

        payload = build_payload(event_form)

        assert payload.fields["coverPresetLabel"] == "img3"
        [(name, upload)] = payload.files
        assert name == "image"
        assert upload.name == "img3.svg"

    def test_file_choice(self, event_form, cover):
        event_form.image_choice = choose_image(file=cover)

        assert build_payload(event_form).files == [("image", cover)]

    def test_explicit_upload_beats_choice(self, event_form, cover):
        event_form.set_file("image", cover)
        event_form.image_choice = choose_image(preset_index=0)

        payload = build_payload(event_form)

        assert payload.files == [("image", cover)]
        assert "coverPresetLabel" not in payload.fields


class TestSubmit:
    def test_validation_runs_before_network(self):
        client = mock.Mock()

        with pytest.raises(MissingRequiredFieldError):
            submit(client, FormState.blank(BOOK))

        assert client.method_calls == []

    def test_create(self, book_form):
        client = mock.Mock()
        client.create.return_value = {"id": 11}
        progress = mock.Mock()

        result = submit(client, book_form, on_progress=progress)

        assert result == {"id": 11}
        endpoint, payload = client.create.call_args.args
        assert endpoint == "books"
        assert payload.is_multipart
        assert client.create.call_args.kwargs == {"on_progress": progress}
        client.update.assert_not_called()

    def test_update_uses_resource_method(self, book_form):
        client = mock.Mock()

        submit(client, book_form, record_id=5)

        args, kwargs = client.update.call_args
        assert args[:2] == ("books", 5)
        assert kwargs["method"] == "PATCH"
        client.create.assert_not_called()

    def test_form_survives_failure(self, book_form):
        client = mock.Mock()
        client.create.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            submit(client, book_form)

        assert book_form.values["title"] == "Riyad as-Salihin"
        assert book_form.has_files

    def test_empty_response_body(self, book_form):
        client = mock.Mock()
        client.create.return_value = None

        assert submit(client, book_form) is None
