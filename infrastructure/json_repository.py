"""JSON file persistence for the catalog document.

The whole document is stored as one JSON file and replaced wholesale on every
save; there is no partial update. Writes go to a temporary sibling file first
and are moved into place so readers never see a half-written document.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
from typing import Any

from loguru import logger

from core.models import Document


def read_json(path: Path) -> Any | None:
    """Return decoded JSON at `path`, or None when the file does not exist.

    Raises:
        ValueError: The file exists but is not valid JSON.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as ex:
        logger.error("Invalid JSON in {}: {}", path, ex)
        raise ValueError(f"Invalid JSON in {path}: {ex}") from ex


def write_json_atomic(path: Path, data: Any) -> None:
    """Write `data` as UTF-8 JSON to `path` via a temp file and `os.replace`."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


class JsonGalleryRepository:
    """Load and replace the catalog document stored in a JSON file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Any | None:
        """Return the raw stored document, or None when nothing is stored."""
        raw = read_json(self._path)
        if raw is None:
            logger.info("No catalog document at {}", self._path)
        return raw

    def replace(self, document: Document) -> None:
        """Replace the stored document with `document`."""
        write_json_atomic(self._path, document.to_dict())
        logger.info(
            "Catalog saved: {} ({} groups, {} products)",
            self._path,
            len(document.groups),
            document.product_count,
        )

    def clear(self) -> None:
        """Remove the stored document, if any."""
        try:
            self._path.unlink()
            logger.info("Catalog document removed: {}", self._path)
        except FileNotFoundError:
            return
