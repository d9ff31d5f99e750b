"""
Pytest configuration and shared fixtures for content-admin tests.
"""

from pathlib import Path
from typing import Any, Dict

import pytest


# Add the repo root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def sample_articles() -> list[Dict[str, Any]]:
    """Sample article records as the backend returns them."""
    return [
        {
            "id": 1,
            "title": "The Virtues of Fasting",
            "writers": "Ahmed Raza",
            "language": "English",
            "topic": "Fasting",
            "englishDescription": "<p>Fasting teaches <strong>patience</strong>.</p>",
            "urduDescription": "<p>روزہ صبر سکھاتا ہے</p>",
            "isPublished": "true",
            "views": 120,
            "createdOn": "2024-03-12T08:00:00Z",
        },
        {
            "id": 2,
            "title": "Etiquette of Prayer",
            "writers": "Sara Khan",
            "language": "Urdu",
            "topic": "Prayer",
            "englishDescription": "<p>Facing the qibla</p>",
            "urduDescription": "",
            "isPublished": "false",
            "views": 15,
            "createdOn": "2024-01-05T10:30:00Z",
        },
        {
            "id": 3,
            "title": "Zakat on Gold",
            "writers": "Ahmed Raza",
            "language": "English",
            "topic": "Zakat",
            "englishDescription": "<p>Nisab &amp; rates</p>",
            "urduDescription": "",
            "isPublished": "true",
            "views": None,
            "createdOn": "2024-02-20T12:00:00Z",
            "isDeleted": {"type": "Buffer", "data": [0]},
        },
        {
            "id": 4,
            "title": "Removed Draft",
            "writers": "Bilal",
            "language": "English",
            "topic": "Fasting",
            "englishDescription": "",
            "views": 3,
            "createdOn": "2023-12-01T09:00:00Z",
            "isDeleted": {"type": "Buffer", "data": [1]},
        },
    ]


@pytest.fixture
def numbered_records() -> list[Dict[str, Any]]:
    """23 records with distinct ids and titles."""
    return [
        {"id": n, "title": f"Record {n:02d}", "createdOn": f"2024-01-{n:02d}T00:00:00Z"}
        for n in range(1, 24)
    ]


@pytest.fixture
def png_bytes() -> bytes:
    """Tiny payload standing in for an image upload."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def suggestion_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / ".image_suggestion.json"
