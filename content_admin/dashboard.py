"""
Dashboard counters.

The combined `/api/books/count` endpoint is tried first. Any count it does
not provide (or reports as zero) is fetched from its own endpoint. A failed
request counts as 0 and marks the result partial; it never fails the page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from content_admin.api_client import BackendClient
from content_admin.exceptions import ContentAdminError

logger = logging.getLogger(__name__)

COMBINED_PATH = "books/count"

# count key → granular fallback endpoint
FALLBACK_PATHS: dict[str, str] = {
    "writerCount": "writers/count",
    "translatorCount": "translators/count",
    "bookCount": "books/count-only",
    "articleCount": "articles/count",
    "feedbackCount": "feedback/count",
    "adminCount": "admin/count",
}

CARDS: tuple[tuple[str, str, str], ...] = (
    ("writerCount", "Writers", "Authors contributing content"),
    ("translatorCount", "Translators", "Language experts on the team"),
    ("bookCount", "Books", "Titles in the library"),
    ("articleCount", "Articles", "Published and draft articles"),
    ("feedbackCount", "Feedback", "Messages from readers"),
    ("adminCount", "Admins", "Admin & moderator accounts"),
)


@dataclass
class DashboardCounts:
    counts: dict[str, int] = field(default_factory=lambda: {key: 0 for key in FALLBACK_PATHS})
    partial: bool = False

    def __getitem__(self, key: str) -> int:
        return self.counts.get(key, 0)


def normalize_count(data: Any) -> int:
    """Read `{count}`, `{total}`, or the first numeric value of a response."""
    if isinstance(data, bool):
        return 0
    if isinstance(data, (int, float)):
        return int(data)
    if isinstance(data, dict):
        for key in ("count", "total"):
            value = data.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return int(value)
        for value in data.values():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return int(value)
    return 0


def pick(data: Any, key: str) -> int:
    """One counter from the combined response; anything non-numeric is 0."""
    if not isinstance(data, dict):
        return 0
    value = data.get(key)
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


def load_counts(
    client: BackendClient,
    *,
    admin_counter: Callable[[], int] | None = None,
) -> DashboardCounts:
    """
    Fetch every dashboard counter.

    `admin_counter` counts admins locally when the backend reports none,
    since admin accounts live in the document store.
    """
    result = DashboardCounts()

    try:
        combined = client.count(COMBINED_PATH)
    except ContentAdminError as e:
        logger.warning("Combined count request failed: %s", e)
        combined = None

    if isinstance(combined, dict) and isinstance(combined.get("data"), dict):
        combined = combined["data"]
    for key in FALLBACK_PATHS:
        result.counts[key] = pick(combined, key)

    for key, path in FALLBACK_PATHS.items():
        if result.counts[key]:
            continue
        try:
            result.counts[key] = normalize_count(client.count(path))
        except ContentAdminError as e:
            logger.warning("Count request failed", extra={"path": path, "error": str(e)})
            result.partial = True

    if admin_counter is not None and not result.counts["adminCount"]:
        try:
            result.counts["adminCount"] = admin_counter()
        except ContentAdminError as e:
            logger.warning("Local admin count failed: %s", e)
            result.partial = True

    return result
