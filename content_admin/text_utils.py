"""
String helpers shared by list views and forms: slugs, dates, HTML stripping.
"""

from __future__ import annotations

import html
import re
from datetime import date, datetime, timezone
from typing import Any

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

EMPTY_DISPLAY = "—"


def slugify(value: str | None, *, max_length: int = 120) -> str:
    """Generate a URL slug from a title.

    Word characters in any script are kept, so Urdu titles produce Urdu slugs.

    Examples:
        >>> slugify("What is Zakat?")
        'what-is-zakat'
        >>> slugify("  Fasting --  rules ")
        'fasting-rules'
    """
    if not value:
        return ""

    value = value.lower().strip()
    value = re.sub(r"[^\w\s-]", "", value)
    value = re.sub(r"[_\s]+", "-", value)
    value = re.sub(r"-{2,}", "-", value)
    value = value.strip("-")

    if len(value) > max_length:
        last_hyphen = value.rfind("-", 0, max_length)
        value = value[:last_hyphen] if last_hyphen > max_length // 2 else value[:max_length].rstrip("-")
    return value


def strip_html(text: Any) -> str:
    """Strip HTML tags and entities from rich-text editor output."""
    if text is None:
        return ""
    plain = _TAG_RE.sub(" ", str(text))
    plain = html.unescape(plain)
    return _WS_RE.sub(" ", plain).strip()


def excerpt(text: Any, *, max_chars: int = 120) -> str:
    """Plain-text preview of a rich-text field, cut at a word boundary."""
    plain = strip_html(text)
    if len(plain) <= max_chars:
        return plain
    cut = plain.rfind(" ", 0, max_chars)
    if cut < max_chars // 2:
        cut = max_chars
    return plain[:cut].rstrip() + "…"


def parse_datetime(value: Any) -> datetime | None:
    """
    Parse the timestamp shapes the backend returns.

    Accepts ISO-8601 strings (with or without `Z`), `YYYY-MM-DD`, epoch
    seconds or milliseconds, and datetime/date objects. Returns None for
    anything unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 10**11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def timestamp_of(value: Any) -> float:
    """Sortable epoch seconds; unparseable values sort as the epoch."""
    parsed = parse_datetime(value)
    return parsed.timestamp() if parsed else 0.0


def format_date(value: Any) -> str:
    """Display a date as `12 Mar 2024`, or an em dash when missing."""
    parsed = parse_datetime(value)
    if parsed is None:
        return EMPTY_DISPLAY
    return f"{parsed.day} {parsed.strftime('%b %Y')}"


def format_datetime(value: Any) -> str:
    parsed = parse_datetime(value)
    if parsed is None:
        return EMPTY_DISPLAY
    return f"{parsed.day} {parsed.strftime('%b %Y, %H:%M')}"


def today_iso() -> str:
    """Today's date as `YYYY-MM-DD`, the default for publication dates."""
    return date.today().isoformat()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def is_valid_email(value: str | None) -> bool:
    return bool(value) and bool(_EMAIL_RE.match(value.strip()))


def initials(first: str | None = "", last: str | None = "") -> str:
    """Avatar initials for a person; `A` when both names are empty."""
    letters = f"{(first or '')[:1]}{(last or '')[:1]}".upper()
    return letters or "A"


def format_count(value: Any) -> str:
    return f"{value:,}" if isinstance(value, int) and not isinstance(value, bool) else "0"
