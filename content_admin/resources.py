"""
Declarative description of every backend resource the panel manages.

A `ResourceSpec` tells the generic list controller what to search and sort
on, tells the form model which fields exist and which are required, and
tells the API client which endpoint and update verb to use. Screens never
hard-code field names; they read them from here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from content_admin.exceptions import ConfigurationError
from content_admin.listing import ListController, SortKey, date_key, number_key, text_key
from content_admin.text_utils import today_iso

# Field kinds understood by the form renderer.
TEXT = "text"
TEXTAREA = "textarea"
RICHTEXT = "richtext"
EMAIL = "email"
PASSWORD = "password"
DATE = "date"
SELECT = "select"
MULTISELECT = "multiselect"
BOOLEAN = "boolean"
IMAGE = "image"
IMAGES = "images"
FILE = "file"

FILE_KINDS = frozenset({IMAGE, IMAGES, FILE})

SUPERADMIN_ONLY = ("superadmin",)
ALL_ROLES = ("superadmin", "admin")


@dataclass(frozen=True)
class LookupSpec:
    """Options for a select field, fetched from another resource."""

    resource: str
    label_field: str
    value_field: str | None = None

    def options(self, records: list[dict]) -> list[tuple[str, str]]:
        """(value, label) pairs, de-duplicated and in backend order."""
        seen: set[str] = set()
        out: list[tuple[str, str]] = []
        for record in records:
            label = str(record.get(self.label_field) or "").strip()
            value = str(record.get(self.value_field or self.label_field) or "").strip()
            if not label or value in seen:
                continue
            seen.add(value)
            out.append((value, label))
        return out


@dataclass(frozen=True)
class FieldSpec:
    """One form field of a resource."""

    name: str
    label: str
    kind: str = TEXT
    required: bool = False
    required_on_edit: bool = True
    options: tuple[str, ...] = ()
    lookup: LookupSpec | None = None
    accept: frozenset[str] = frozenset()
    rtl: bool = False
    slug_source: str | None = None
    default: Callable[[], Any] | Any = None
    help: str | None = None
    in_table: bool = False

    @property
    def is_file(self) -> bool:
        return self.kind in FILE_KINDS

    def is_required(self, editing: bool) -> bool:
        if not self.required:
            return False
        return self.required_on_edit or not editing

    def initial_value(self) -> Any:
        if callable(self.default):
            return self.default()
        if self.default is not None:
            return self.default
        if self.kind == BOOLEAN:
            return False
        if self.kind in (MULTISELECT, IMAGES):
            return []
        return None if self.is_file else ""


@dataclass(frozen=True)
class ResourceSpec:
    """Everything the generic screens need to know about one resource."""

    key: str
    label: str
    singular: str
    endpoint: str
    fields: tuple[FieldSpec, ...]
    search_fields: tuple[str, ...]
    sorters: dict[str, SortKey] = field(default_factory=dict)
    default_sort: str | None = None
    title_field: str = "title"
    image_field: str | None = "image"
    image_route: str = "image"
    attachment_field: str | None = None
    attachment_route: str = "attachment"
    update_method: str = "PUT"
    json_only: bool = False
    read_only: bool = False
    facets: tuple[str, ...] = ()
    suggestion_key: str | None = None
    created_stamp: str | None = None
    updated_stamp: str | None = None
    roles: tuple[str, ...] = ALL_ROLES
    in_nav: bool = True

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    @property
    def file_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.is_file)

    @property
    def scalar_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if not f.is_file)

    @property
    def table_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.in_table)

    @property
    def lookups(self) -> tuple[LookupSpec, ...]:
        return tuple(f.lookup for f in self.fields if f.lookup is not None)

    def controller(self, page_size: int | None = None) -> ListController:
        kwargs: dict[str, Any] = {
            "search_fields": self.search_fields,
            "sorters": self.sorters,
            "default_sort": self.default_sort,
        }
        if page_size:
            kwargs["page_size"] = page_size
        return ListController(**kwargs)

    def allows(self, role: str | None) -> bool:
        return role in self.roles

    def display_title(self, record: dict) -> str:
        value = record.get(self.title_field)
        return str(value) if value not in (None, "") else f"{self.singular} #{record.get('id', '?')}"


# =============================================================================
# Shared lookups
# =============================================================================

WRITERS = LookupSpec("writers", "name")
TRANSLATORS = LookupSpec("translators", "name")
LANGUAGES = LookupSpec("languages", "language")
TOPICS = LookupSpec("topics", "topic")
TAGS = LookupSpec("tags", "tag")
CATEGORIES = LookupSpec("categories", "name")

_NEWEST = {"createdOn": date_key("createdOn")}


def _bilingual(label: str = "Description") -> tuple[FieldSpec, ...]:
    return (
        FieldSpec(f"english{label}", f"English {label}", RICHTEXT),
        FieldSpec(f"urdu{label}", f"Urdu {label}", RICHTEXT, rtl=True),
    )


def _image(name: str = "image", label: str = "Image", *, required: bool = False) -> FieldSpec:
    return FieldSpec(name, label, IMAGE, required=required, required_on_edit=False, help="PNG/JPG up to 5MB.")


# =============================================================================
# Registry
# =============================================================================

ABOUT = ResourceSpec(
    key="about",
    label="About Content",
    singular="About Content",
    endpoint="about",
    fields=(
        FieldSpec("englishTitle", "English Title", required=True, in_table=True),
        FieldSpec("urduTitle", "Urdu Title", rtl=True, in_table=True),
        *_bilingual(),
        _image(required=True),
    ),
    search_fields=("englishTitle", "urduTitle", "englishDescription", "urduDescription"),
    sorters={**_NEWEST, "title": text_key("englishTitle")},
    title_field="englishTitle",
    roles=SUPERADMIN_ONLY,
)

TOPIC = ResourceSpec(
    key="topics",
    label="Topics",
    singular="Topic",
    endpoint="topics",
    fields=(
        FieldSpec("topic", "Topic", required=True, in_table=True),
        FieldSpec("about", "About", RICHTEXT),
        _image(),
    ),
    search_fields=("topic", "title", "about"),
    sorters={**_NEWEST, "topic": text_key("topic")},
    title_field="topic",
    updated_stamp="updatedOn",
)

TOPIC_TAGS = ResourceSpec(
    key="topictags",
    label="Topic Tags",
    singular="Topic",
    endpoint="topics",
    fields=(
        FieldSpec("title", "Topic Title", required=True, in_table=True),
        FieldSpec("category", "Category", SELECT, required=True, lookup=CATEGORIES, in_table=True),
        FieldSpec("tags", "Tags", MULTISELECT, lookup=TAGS, in_table=True),
    ),
    search_fields=("title", "topic", "tags"),
    sorters={**_NEWEST, "title": text_key("title")},
    image_field=None,
    json_only=True,
)

QUESTION = ResourceSpec(
    key="questions",
    label="Questions",
    singular="Question",
    endpoint="questions",
    fields=(
        FieldSpec("questionEnglish", "English Question", TEXTAREA, in_table=True),
        FieldSpec("questionUrdu", "Urdu Question", TEXTAREA, rtl=True, in_table=True),
        FieldSpec("questionRoman", "Roman Urdu Question", TEXTAREA),
        FieldSpec("questionHindi", "Hindi Question", TEXTAREA),
        FieldSpec("slug", "Slug", required=True, slug_source="questionEnglish", in_table=True),
        FieldSpec("writer", "Writer", SELECT, required=True, lookup=WRITERS, in_table=True),
        FieldSpec("writerDesignation", "Writer Designation"),
        FieldSpec("date", "Date", DATE, required=True, default=today_iso, in_table=True),
        FieldSpec("language", "Language", SELECT, required=True, lookup=LANGUAGES),
        FieldSpec("topic", "Topic", SELECT, required=True, lookup=TOPICS),
        FieldSpec("answeredStatus", "Answered Status", SELECT, required=True, options=("yes", "no", "in progress")),
        FieldSpec("translator", "Translator", SELECT, lookup=TRANSLATORS),
        FieldSpec("tags", "Tag", SELECT, lookup=TAGS),
        FieldSpec("answerEnglish", "English Answer", RICHTEXT),
        FieldSpec("answerUrdu", "Urdu Answer", RICHTEXT, rtl=True),
        FieldSpec("answerRoman", "Roman Urdu Answer", RICHTEXT),
        FieldSpec("answerHindi", "Hindi Answer", RICHTEXT),
        FieldSpec("isPublished", "Publish", BOOLEAN, default=True),
        _image(),
    ),
    search_fields=("questionEnglish", "questionUrdu", "answerEnglish", "answerUrdu", "slug", "writer"),
    sorters={**_NEWEST, "title": text_key("questionEnglish"), "writer": text_key("writer")},
    title_field="questionEnglish",
    facets=("language",),
    suggestion_key="questions",
)

ARTICLE = ResourceSpec(
    key="articles",
    label="Articles",
    singular="Article",
    endpoint="articles",
    fields=(
        FieldSpec("title", "Article Title", required=True, in_table=True),
        FieldSpec("topic", "Topic", SELECT, required=True, lookup=TOPICS),
        FieldSpec("writers", "Writer", SELECT, required=True, lookup=WRITERS, in_table=True),
        FieldSpec("writerDesignation", "Writer Designation"),
        FieldSpec("language", "Language", SELECT, required=True, lookup=LANGUAGES, in_table=True),
        FieldSpec("date", "Publication Date", DATE, required=True, default=today_iso),
        FieldSpec("translator", "Translator", SELECT, lookup=TRANSLATORS),
        FieldSpec("tags", "Tag", SELECT, lookup=TAGS),
        *_bilingual(),
        FieldSpec("isPublished", "Publish", BOOLEAN, default=True),
        _image(),
    ),
    search_fields=("title", "writers", "language", "urduDescription", "englishDescription"),
    sorters={**_NEWEST, "title": text_key("title"), "views": number_key("views")},
    update_method="PATCH",
    facets=("language",),
    suggestion_key="articles",
    created_stamp="createdAt",
)

EVENT = ResourceSpec(
    key="events",
    label="Events",
    singular="Event",
    endpoint="events",
    fields=(
        FieldSpec("title", "Event Title", required=True, in_table=True),
        FieldSpec("slug", "Slug", slug_source="title"),
        FieldSpec("topic", "Topic", SELECT, required=True, lookup=TOPICS),
        FieldSpec("language", "Language", SELECT, required=True, lookup=LANGUAGES),
        FieldSpec("eventDate", "Event Date", DATE, required=True, default=today_iso, in_table=True),
        FieldSpec("venue", "Location/Venue", required=True, in_table=True),
        *_bilingual(),
        FieldSpec("isPublished", "Publish", BOOLEAN, default=True),
        _image(),
    ),
    search_fields=("title", "venue", "topic", "englishDescription"),
    sorters={"eventDate": date_key("eventDate"), **_NEWEST, "title": text_key("title")},
    facets=("language",),
    suggestion_key="events",
)

BOOK = ResourceSpec(
    key="books",
    label="Books",
    singular="Book",
    endpoint="books",
    fields=(
        FieldSpec("title", "Title", required=True, in_table=True),
        FieldSpec("author", "Author", required=True, in_table=True),
        FieldSpec("translator", "Translator", SELECT, lookup=TRANSLATORS),
        FieldSpec("language", "Language", SELECT, required=True, lookup=LANGUAGES, in_table=True),
        FieldSpec("category", "Category", SELECT, lookup=CATEGORIES),
        FieldSpec("isbn", "ISBN"),
        FieldSpec("description", "Description", RICHTEXT),
        FieldSpec("status", "Status", SELECT, options=("draft", "published", "archived")),
        FieldSpec("isPublished", "Publish", BOOLEAN, default=True),
        FieldSpec("bookDate", "Book Date", DATE, in_table=True),
        _image("coverImage", "Cover Image", required=True),
        FieldSpec("attachment", "Attachment (PDF)", FILE, accept=frozenset({"pdf"}), help="PDF only."),
    ),
    search_fields=("title", "author", "translator", "language", "isbn"),
    sorters={
        **_NEWEST,
        "bookDate": date_key("bookDate"),
        "title": text_key("title"),
        "author": text_key("author"),
        "id": number_key("id"),
    },
    image_field="coverImage",
    image_route="cover",
    attachment_field="attachment",
    update_method="PATCH",
    facets=("language",),
)

WRITER = ResourceSpec(
    key="writers",
    label="Writers",
    singular="Writer",
    endpoint="writers",
    fields=(
        FieldSpec("name", "Name", required=True, in_table=True),
        FieldSpec("designation", "Designation", in_table=True),
        FieldSpec("email", "Email", EMAIL, required=True, in_table=True),
        FieldSpec("joinedDate", "Joined Date", DATE, required=True, default=today_iso),
        FieldSpec("status", "Status", SELECT, required=True, options=("Active", "InActive"), default="Active", in_table=True),
        *_bilingual(),
        FieldSpec("isTeamMember", "Team Member", BOOLEAN),
        _image(label="Profile Picture"),
    ),
    search_fields=("name", "designation", "email"),
    sorters={**_NEWEST, "name": text_key("name")},
    title_field="name",
    roles=SUPERADMIN_ONLY,
)

TRANSLATOR = ResourceSpec(
    key="translators",
    label="Translators",
    singular="Translator",
    endpoint="translators",
    fields=(
        FieldSpec("name", "Name", required=True, in_table=True),
        FieldSpec("designation", "Designation", in_table=True),
        *_bilingual(),
        _image(),
    ),
    search_fields=("name", "designation", "englishDescription", "urduDescription"),
    sorters={**_NEWEST, "name": text_key("name")},
    title_field="name",
    created_stamp="createdAt",
    roles=SUPERADMIN_ONLY,
)

TAG = ResourceSpec(
    key="tags",
    label="Tags",
    singular="Tag",
    endpoint="tags",
    fields=(FieldSpec("tag", "Tag", required=True, in_table=True),),
    search_fields=("tag",),
    sorters={**_NEWEST, "tag": text_key("tag")},
    title_field="tag",
    image_field=None,
    json_only=True,
    roles=SUPERADMIN_ONLY,
)

LANGUAGE = ResourceSpec(
    key="languages",
    label="Languages",
    singular="Language",
    endpoint="languages/language",
    fields=(FieldSpec("language", "Language", required=True, in_table=True),),
    search_fields=("language",),
    sorters={**_NEWEST, "language": text_key("language")},
    title_field="language",
    image_field=None,
    json_only=True,
    created_stamp="createdOn",
    roles=SUPERADMIN_ONLY,
)

GALLERY = ResourceSpec(
    key="galleries",
    label="Galleries",
    singular="Gallery",
    endpoint="galleries",
    fields=(
        FieldSpec("title", "Title", required=True, in_table=True),
        FieldSpec("description", "Description", TEXTAREA),
        FieldSpec("date", "Date", DATE, required=True, default=today_iso, in_table=True),
        FieldSpec("images", "Images", IMAGES, help="Select one or more images, up to 5MB each."),
    ),
    search_fields=("title", "description"),
    sorters={"date": date_key("date"), **_NEWEST, "title": text_key("title")},
    image_field="images",
)

FEEDBACK = ResourceSpec(
    key="feedback",
    label="Feedback",
    singular="Feedback",
    endpoint="feedback",
    fields=(
        FieldSpec("name", "Name", in_table=True),
        FieldSpec("email", "Email", EMAIL, in_table=True),
        FieldSpec("message", "Message", TEXTAREA, in_table=True),
    ),
    search_fields=("name", "email", "message"),
    sorters={**_NEWEST, "name": text_key("name")},
    title_field="name",
    image_field=None,
    read_only=True,
)

HOME_BOOK_SLIDER = ResourceSpec(
    key="homebookslider",
    label="Home Books Slider",
    singular="Slider Book",
    endpoint="homebookslider",
    fields=(
        FieldSpec("bookName", "Book Name", required=True, in_table=True),
        _image("bookImage", "Book Image", required=True),
    ),
    search_fields=("bookName",),
    sorters={**_NEWEST, "bookName": text_key("bookName")},
    title_field="bookName",
    image_field="bookImage",
    roles=SUPERADMIN_ONLY,
)

CATEGORY = ResourceSpec(
    key="categories",
    label="Categories",
    singular="Category",
    endpoint="categories",
    fields=(FieldSpec("name", "Name", required=True, in_table=True),),
    search_fields=("name",),
    sorters={"name": text_key("name")},
    title_field="name",
    image_field=None,
    json_only=True,
    read_only=True,
    in_nav=False,
)

# Admin accounts live in the document store, not the REST backend.
ADMIN = ResourceSpec(
    key="admins",
    label="Admins",
    singular="Admin",
    endpoint="admins",
    fields=(
        FieldSpec("fname", "First Name", required=True, in_table=True),
        FieldSpec("lname", "Last Name", required=True, in_table=True),
        FieldSpec("email", "Email", EMAIL, required=True, in_table=True),
        FieldSpec("role", "Role", SELECT, required=True, options=("admin", "superadmin"), default="admin", in_table=True),
        FieldSpec("password", "Password", PASSWORD, required=True, required_on_edit=False),
        FieldSpec("confirmPassword", "Confirm Password", PASSWORD, required=True, required_on_edit=False),
    ),
    search_fields=("fname", "lname", "email", "role"),
    sorters={**_NEWEST, "name": text_key("fname"), "email": text_key("email")},
    title_field="email",
    image_field=None,
    json_only=True,
    roles=SUPERADMIN_ONLY,
)

REGISTRY: dict[str, ResourceSpec] = {
    spec.key: spec
    for spec in (
        ADMIN,
        WRITER,
        TRANSLATOR,
        LANGUAGE,
        TOPIC,
        TOPIC_TAGS,
        ARTICLE,
        EVENT,
        BOOK,
        QUESTION,
        HOME_BOOK_SLIDER,
        ABOUT,
        TAG,
        GALLERY,
        FEEDBACK,
        CATEGORY,
    )
}


def get_resource(key: str) -> ResourceSpec:
    try:
        return REGISTRY[key]
    except KeyError:
        raise ConfigurationError(f"Unknown resource: {key}", setting_name="resource") from None


def nav_resources(role: str | None) -> list[ResourceSpec]:
    """Resources the given role may open from the sidebar, in menu order."""
    return [spec for spec in REGISTRY.values() if spec.in_nav and spec.allows(role)]
