"""
Tests for content_admin.resources.
"""

import pytest

from content_admin.exceptions import ConfigurationError
from content_admin.resources import (
    ADMIN,
    BOOK,
    CATEGORY,
    FEEDBACK,
    LANGUAGE,
    REGISTRY,
    TOPIC,
    TOPIC_TAGS,
    WRITERS,
    FieldSpec,
    get_resource,
    nav_resources,
)


class TestRegistry:
    def test_keys_match_specs(self):
        for key, spec in REGISTRY.items():
            assert spec.key == key

    def test_get_resource(self):
        assert get_resource("books") is BOOK

    def test_unknown_resource(self):
        with pytest.raises(ConfigurationError, match="Unknown resource"):
            get_resource("nope")

    def test_every_spec_is_searchable_and_sortable(self):
        for spec in REGISTRY.values():
            assert spec.search_fields, spec.key
            assert spec.sorters, spec.key
            assert spec.table_fields, spec.key

    def test_image_fields_exist(self):
        for spec in REGISTRY.values():
            if spec.image_field:
                assert spec.get_field(spec.image_field).is_file, spec.key

    def test_topic_views_share_an_endpoint(self):
        assert TOPIC.endpoint == TOPIC_TAGS.endpoint == "topics"

    def test_language_endpoint(self):
        assert LANGUAGE.endpoint == "languages/language"

    def test_update_methods(self):
        assert BOOK.update_method == "PATCH"
        assert TOPIC.update_method == "PUT"

    def test_read_only(self):
        assert FEEDBACK.read_only
        assert CATEGORY.read_only and not CATEGORY.in_nav


class TestNavigation:
    def test_superadmin_sees_everything_in_nav(self):
        keys = [spec.key for spec in nav_resources("superadmin")]

        assert keys[0] == "admins"
        assert "categories" not in keys
        assert len(keys) == sum(1 for spec in REGISTRY.values() if spec.in_nav)

    def test_admin_sees_content_only(self):
        keys = {spec.key for spec in nav_resources("admin")}

        assert keys == {"topics", "topictags", "articles", "events", "books", "questions", "galleries", "feedback"}

    def test_unknown_role_sees_nothing(self):
        assert nav_resources(None) == []
        assert nav_resources("editor") == []


class TestFieldSpec:
    def test_required_on_create_only(self):
        password = ADMIN.get_field("password")

        assert password.is_required(editing=False)
        assert not password.is_required(editing=True)

    def test_initial_values(self):
        assert FieldSpec("x", "X", "boolean").initial_value() is False
        assert FieldSpec("x", "X", "multiselect").initial_value() == []
        assert FieldSpec("x", "X", "image").initial_value() is None
        assert FieldSpec("x", "X", default=lambda: "now").initial_value() == "now"

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            BOOK.get_field("missing")

    def test_lookup_options_dedupe(self):
        records = [{"name": "Sara"}, {"name": "Bilal"}, {"name": "Sara"}, {"name": ""}]

        assert WRITERS.options(records) == [("Sara", "Sara"), ("Bilal", "Bilal")]

    def test_display_title(self):
        assert BOOK.display_title({"id": 2, "title": "Sahih"}) == "Sahih"
        assert BOOK.display_title({"id": 2}) == "Book #2"
