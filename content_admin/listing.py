"""
Generic list controller: filter, sort and paginate a fetched collection.

Every list screen is one `ListController` configured with the fields to
search, the sort keys it offers and a page size. The controller never talks
to the network; it derives a view from records already in memory.

Usage:
    controller = ListController(
        search_fields=("name", "email"),
        sorters={"name": text_key("name"), "newest": date_key("createdOn")},
        default_sort="newest",
    )
    page = controller.apply(records, ListQuery(search="ali", page=2))
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Sequence

from content_admin.config import settings
from content_admin.text_utils import strip_html, timestamp_of

SortKey = Callable[[dict], Any]

ASC = "asc"
DESC = "desc"


def text_key(field_name: str) -> SortKey:
    """Case-insensitive text key; HTML is stripped and None sorts as ''."""

    def key(record: dict) -> str:
        return strip_html(record.get(field_name)).lower()

    return key


def number_key(field_name: str) -> SortKey:
    """Numeric key; missing or non-numeric values sort as 0."""

    def key(record: dict) -> float:
        value = record.get(field_name)
        if isinstance(value, bool):
            return float(value)
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    return key


def date_key(field_name: str) -> SortKey:
    """Timestamp key; unparseable dates sort as the epoch."""

    def key(record: dict) -> float:
        return timestamp_of(record.get(field_name))

    return key


def _flag_set(value: Any) -> bool:
    # MySQL BIT columns arrive as {"type": "Buffer", "data": [0|1]}.
    if isinstance(value, dict) and isinstance(value.get("data"), list):
        return any(value["data"])
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true")
    return value is True or (isinstance(value, int) and value == 1)


def is_deleted(record: dict) -> bool:
    """True when a record carries a set `deleted` or `isDeleted` flag."""
    return _flag_set(record.get("deleted")) or _flag_set(record.get("isDeleted"))


def exclude_deleted(records: Iterable[dict]) -> list[dict]:
    """Drop soft-deleted records; a missing flag means live."""
    return [r for r in records if not is_deleted(r)]


@dataclass(frozen=True)
class ListQuery:
    """User-controlled view parameters for one list screen."""

    search: str = ""
    sort_key: str | None = None
    direction: str = DESC
    page: int = 1
    page_size: int | None = None
    facets: Mapping[str, str] = field(default_factory=dict)


@dataclass
class Page:
    """One page of a derived list view."""

    items: list[dict]
    page: int
    page_count: int
    total: int
    start_index: int = 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def label(self) -> str:
        if self.total == 0:
            return "No entries"
        first = self.start_index + 1
        last = self.start_index + len(self.items)
        return f"Showing {first} to {last} of {self.total} entries"


@dataclass
class ListController:
    """
    Search predicate + comparator + page size → derived view.

    Attributes:
        search_fields: Record keys matched by free-text search.
        sorters: Named sort-key functions offered by the screen.
        default_sort: Key used when the requested one is unknown.
        page_size: Rows per page.
    """

    search_fields: Sequence[str]
    sorters: Mapping[str, SortKey] = field(default_factory=dict)
    default_sort: str | None = None
    page_size: int = field(default_factory=lambda: settings.default_page_size)

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")
        if self.default_sort is None and self.sorters:
            self.default_sort = next(iter(self.sorters))
        if self.default_sort is not None and self.default_sort not in self.sorters:
            raise ValueError(f"Unknown default sort key: {self.default_sort}")

    # -------------------------------------------------------------------------
    # Filter
    # -------------------------------------------------------------------------

    def matches(self, record: dict, needle: str) -> bool:
        for name in self.search_fields:
            value = record.get(name)
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                haystack = " ".join(strip_html(v) for v in value)
            else:
                haystack = strip_html(value)
            if needle in haystack.lower():
                return True
        return False

    def filter(self, records: Iterable[dict], query: str | None) -> list[dict]:
        """Case-insensitive substring match across `search_fields`."""
        needle = (query or "").strip().lower()
        if not needle:
            return list(records)
        return [r for r in records if self.matches(r, needle)]

    @staticmethod
    def filter_facets(records: Iterable[dict], facets: Mapping[str, str] | None) -> list[dict]:
        """Exact, case-insensitive match on dropdown filters such as language."""
        active = {k: str(v).strip().lower() for k, v in (facets or {}).items() if v not in (None, "")}
        if not active:
            return list(records)
        return [
            r for r in records
            if all(str(r.get(k) or "").strip().lower() == v for k, v in active.items())
        ]

    @staticmethod
    def facet_values(records: Iterable[dict], field_name: str) -> list[str]:
        """Distinct non-empty values of a field, sorted, for a filter dropdown."""
        return sorted({str(r.get(field_name)).strip() for r in records if r.get(field_name)})

    # -------------------------------------------------------------------------
    # Sort
    # -------------------------------------------------------------------------

    def sort(self, records: Iterable[dict], key: str | None = None, direction: str = DESC) -> list[dict]:
        """
        Stable sort by a registered key.

        Descending order reverses the comparison, not the result, so records
        with equal keys keep their input order in both directions.
        """
        items = list(records)
        name = key if key in self.sorters else self.default_sort
        if name is None:
            return items
        key_fn = self.sorters[name]
        return sorted(items, key=key_fn, reverse=(direction == DESC))

    # -------------------------------------------------------------------------
    # Paginate
    # -------------------------------------------------------------------------

    @staticmethod
    def page_count(total: int, page_size: int) -> int:
        return math.ceil(total / page_size) if total else 0

    def paginate(self, records: Sequence[dict], page: int = 1, page_size: int | None = None) -> Page:
        size = self.page_size if page_size is None else page_size
        if size < 1:
            raise ValueError("page_size must be at least 1")
        total = len(records)
        display_pages = max(1, self.page_count(total, size))
        current = max(1, min(int(page or 1), display_pages))
        start = (current - 1) * size
        return Page(
            items=list(records[start:start + size]),
            page=current,
            page_count=display_pages,
            total=total,
            start_index=start,
        )

    def apply(self, records: Iterable[dict], query: ListQuery | None = None) -> Page:
        """Filter, then sort, then paginate."""
        query = query or ListQuery()
        filtered = self.filter(self.filter_facets(records, query.facets), query.search)
        ordered = self.sort(filtered, query.sort_key, query.direction)
        return self.paginate(ordered, query.page, query.page_size)
