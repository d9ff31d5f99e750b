"""
Suggested-image store and image choice model for the image picker.

The picker highlights one of nine preset images as a default. Which one is
suggested rotates round-robin: the index for a key advances only after the
parent form was saved successfully. The index lives in a small keyed JSON
file so it survives restarts; nothing depends on it for correctness.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from content_admin.config import settings

logger = logging.getLogger(__name__)

PRESET_DIR = Path(__file__).resolve().parent / "assets" / "presets"


@dataclass(frozen=True)
class PresetImage:
    id: str
    label: str
    path: Path


PRESET_IMAGES: tuple[PresetImage, ...] = tuple(
    PresetImage(id=f"img{n}", label=f"img{n}", path=PRESET_DIR / f"img{n}.svg") for n in range(1, 10)
)

PRESET = "preset"
FILE = "file"
URL = "url"


@dataclass(frozen=True)
class ImageChoice:
    """
    What the user picked in the image picker.

    `value` is the uploaded file for `file`, the address for `url` and the
    preset path for `preset`. `index` and `label` are set for presets only.
    """

    type: str
    value: Any
    index: int | None = None
    label: str | None = None

    @property
    def is_preset(self) -> bool:
        return self.type == PRESET


def choose_image(
    *,
    file: Any = None,
    url: str | None = None,
    preset_index: int | None = None,
    suggested_index: int = 0,
) -> ImageChoice:
    """
    Resolve the picker's inputs to one choice.

    An uploaded file beats a URL and a URL beats a preset. With nothing
    selected the suggested preset is used.
    """
    if file is not None:
        return ImageChoice(FILE, file)
    if url and url.strip():
        return ImageChoice(URL, url.strip())
    index = preset_index if preset_index is not None else suggested_index
    if not 0 <= index < len(PRESET_IMAGES):
        index = 0
    preset = PRESET_IMAGES[index]
    return ImageChoice(PRESET, preset.path, index=index, label=preset.label)


class SuggestionStore:
    """
    Keyed JSON file holding a rotating index per key.

    Example:
        store = SuggestionStore(Path("data/.image_suggestion.json"))
        idx = store.read("articles", size=9)
        ...  # after a successful save
        store.advance("articles", size=9)
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else settings.suggestion_store_path
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Could not read suggestion store %s: %s", self.path, e)
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Suggestion store %s is corrupt, starting fresh", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=self.path.parent,
            delete=False,
            encoding="utf-8",
            suffix=".tmp",
            prefix=".suggestion_",
        ) as tmp:
            json.dump(data, tmp, indent=2)
            tmp_name = tmp.name
        os.replace(tmp_name, self.path)

    @staticmethod
    def _coerce(value: Any, size: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            return 0
        return value if 0 <= value < size else 0

    def read(self, key: str, size: int = len(PRESET_IMAGES)) -> int:
        """Current index for `key`; invalid or out-of-range values read as 0."""
        if size < 1:
            raise ValueError("size must be at least 1")
        with self._lock:
            return self._coerce(self._load().get(key), size)

    def advance(self, key: str, size: int = len(PRESET_IMAGES)) -> int:
        """Store and return `(current + 1) % size`."""
        if size < 1:
            raise ValueError("size must be at least 1")
        with self._lock:
            data = self._load()
            nxt = (self._coerce(data.get(key), size) + 1) % size
            data[key] = nxt
            self._save(data)
        logger.debug("Advanced suggestion index", extra={"key": key, "index": nxt})
        return nxt


_store: SuggestionStore | None = None


def get_suggestion_store() -> SuggestionStore:
    """Get the global suggestion store instance."""
    global _store
    if _store is None:
        _store = SuggestionStore()
    return _store
