"""
Tests for content_admin.listing.

Covers:
- Case-insensitive, HTML-aware search
- Stable sorting in both directions
- Pagination bounds and clamping
- Soft-delete exclusion
"""

import pytest

from content_admin.listing import (
    ASC,
    DESC,
    ListController,
    ListQuery,
    date_key,
    exclude_deleted,
    is_deleted,
    number_key,
    text_key,
)


@pytest.fixture
def controller() -> ListController:
    return ListController(
        search_fields=("title", "writers", "englishDescription", "tags"),
        sorters={
            "createdOn": date_key("createdOn"),
            "title": text_key("title"),
            "views": number_key("views"),
        },
        page_size=10,
    )


class TestFilter:
    def test_single_letter_tags(self):
        controller = ListController(search_fields=("tag",))
        records = [{"tag": "a"}, {"tag": "b"}, {"tag": "c"}]

        assert controller.filter(records, "b") == [{"tag": "b"}]

    def test_case_insensitive_substring(self, controller, sample_articles):
        result = controller.filter(sample_articles, "FASTING")
        assert [r["id"] for r in result] == [1]

    def test_matches_any_configured_field(self, controller, sample_articles):
        result = controller.filter(sample_articles, "ahmed")
        assert [r["id"] for r in result] == [1, 3]

    def test_html_stripped_before_matching(self, controller, sample_articles):
        assert [r["id"] for r in controller.filter(sample_articles, "teaches patience")] == [1]
        # tag names are not content
        assert controller.filter(sample_articles, "strong") == []
        # entities are decoded
        assert [r["id"] for r in controller.filter(sample_articles, "nisab & rates")] == [3]

    def test_whitespace_trimmed(self, controller, sample_articles):
        assert [r["id"] for r in controller.filter(sample_articles, "   zakat  ")] == [3]

    def test_empty_query_returns_everything(self, controller, sample_articles):
        assert controller.filter(sample_articles, "") == sample_articles
        assert controller.filter(sample_articles, "   ") == sample_articles
        assert controller.filter(sample_articles, None) == sample_articles

    def test_list_values_are_searched(self, controller):
        records = [{"title": "x", "tags": ["prayer", "fasting"]}, {"title": "y", "tags": []}]
        assert controller.filter(records, "fast") == [records[0]]

    def test_every_match_and_only_matches(self, controller, sample_articles):
        needle = "on"
        result = controller.filter(sample_articles, needle)
        for record in sample_articles:
            assert (record in result) == controller.matches(record, needle)


class TestFacets:
    def test_exact_case_insensitive(self, sample_articles):
        result = ListController.filter_facets(sample_articles, {"language": "urdu"})
        assert [r["id"] for r in result] == [2]

    def test_empty_facet_ignored(self, sample_articles):
        assert ListController.filter_facets(sample_articles, {"language": ""}) == sample_articles

    def test_facet_values_sorted_distinct(self, sample_articles):
        assert ListController.facet_values(sample_articles, "language") == ["English", "Urdu"]


class TestSort:
    def test_text_ascending(self, controller, sample_articles):
        result = controller.sort(sample_articles, "title", ASC)
        assert [r["id"] for r in result] == [2, 4, 1, 3]

    def test_dates_descending(self, controller, sample_articles):
        result = controller.sort(sample_articles, "createdOn", DESC)
        assert [r["id"] for r in result] == [1, 3, 2, 4]

    def test_none_sorts_as_zero(self, controller, sample_articles):
        result = controller.sort(sample_articles, "views", ASC)
        assert [r["id"] for r in result] == [3, 4, 2, 1]

    def test_unknown_key_falls_back_to_default(self, controller, sample_articles):
        assert controller.sort(sample_articles, "nope", DESC) == controller.sort(sample_articles, "createdOn", DESC)

    @pytest.mark.parametrize("direction", [ASC, DESC])
    def test_stable_for_equal_keys(self, direction):
        controller = ListController(search_fields=(), sorters={"group": text_key("group")})
        records = [{"group": "a", "n": i} for i in range(5)] + [{"group": "b", "n": i} for i in range(5, 8)]

        result = controller.sort(records, "group", direction)

        a_order = [r["n"] for r in result if r["group"] == "a"]
        assert a_order == [0, 1, 2, 3, 4]

    def test_idempotent(self, controller, sample_articles):
        once = controller.sort(sample_articles, "title", ASC)
        assert controller.sort(once, "title", ASC) == once

    def test_no_sorters_keeps_order(self, sample_articles):
        controller = ListController(search_fields=("title",))
        assert controller.sort(sample_articles) == sample_articles

    def test_unknown_default_rejected(self):
        with pytest.raises(ValueError):
            ListController(search_fields=(), sorters={"a": text_key("a")}, default_sort="b")


class TestPaginate:
    def test_23_records_page_size_10(self, controller, numbered_records):
        assert ListController.page_count(23, 10) == 3

        page = controller.paginate(numbered_records, page=3, page_size=10)

        assert page.page_count == 3
        assert len(page.items) == 3
        assert page.start_index == 20
        assert page.label() == "Showing 21 to 23 of 23 entries"

    def test_pages_concatenate_to_the_list(self, controller, numbered_records):
        page_count = ListController.page_count(len(numbered_records), 10)
        collected = []
        for n in range(1, page_count + 1):
            collected.extend(controller.paginate(numbered_records, page=n).items)

        assert collected == numbered_records

    def test_out_of_range_pages_are_clamped(self, controller, numbered_records):
        assert controller.paginate(numbered_records, page=99).page == 3
        assert controller.paginate(numbered_records, page=0).page == 1
        assert controller.paginate(numbered_records, page=-4).page == 1

    def test_empty_list_shows_one_page(self, controller):
        page = controller.paginate([], page=2)

        assert ListController.page_count(0, 10) == 0
        assert page.page == 1
        assert page.page_count == 1
        assert page.items == []
        assert page.is_empty
        assert page.label() == "No entries"

    def test_navigation_flags(self, controller, numbered_records):
        first = controller.paginate(numbered_records, page=1)
        last = controller.paginate(numbered_records, page=3)

        assert not first.has_previous and first.has_next
        assert last.has_previous and not last.has_next

    def test_invalid_page_size(self, controller):
        with pytest.raises(ValueError):
            controller.paginate([], page=1, page_size=0)
        with pytest.raises(ValueError):
            ListController(search_fields=(), page_size=0)


class TestApply:
    def test_filter_then_sort_then_paginate(self, controller, numbered_records):
        query = ListQuery(search="record 1", sort_key="title", direction=ASC, page=2, page_size=5)

        page = controller.apply(numbered_records, query)

        # "Record 1x" matches 10..19 → 10 records, page 2 holds 15..19
        assert page.total == 10
        assert [r["id"] for r in page.items] == [15, 16, 17, 18, 19]

    def test_facets_applied(self, controller, sample_articles):
        page = controller.apply(sample_articles, ListQuery(facets={"language": "English"}, sort_key="title", direction=ASC))
        assert [r["id"] for r in page.items] == [4, 1, 3]

    def test_defaults(self, controller, numbered_records):
        page = controller.apply(numbered_records)
        assert page.page == 1
        assert page.items[0]["id"] == 23


class TestSoftDelete:
    @pytest.mark.parametrize(
        "record,expected",
        [
            ({}, False),
            ({"deleted": False}, False),
            ({"deleted": True}, True),
            ({"isDeleted": 1}, True),
            ({"isDeleted": "true"}, True),
            ({"isDeleted": {"type": "Buffer", "data": [1]}}, True),
            ({"isDeleted": {"type": "Buffer", "data": [0]}}, False),
        ],
    )
    def test_is_deleted(self, record, expected):
        assert is_deleted(record) is expected

    def test_exclude_deleted(self, sample_articles):
        assert [r["id"] for r in exclude_deleted(sample_articles)] == [1, 2, 3]
