"""Catalog configuration loaded from `settings.json`.

Keys are addressed with dots (`storage.document_path`). Relative paths are
resolved against the directory holding the settings file, so a catalog can be
moved together with its data directory.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class JsonSettings:
    """Read-only view over the catalog settings file."""

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        try:
            with self._path.open("r", encoding="utf-8") as f:
                self._data: dict[str, Any] = json.load(f)
        except FileNotFoundError as ex:
            raise FileNotFoundError(f"Catalog settings not found: {self._path}") from ex

    @property
    def base_dir(self) -> Path:
        """Directory holding the settings file."""
        return self._path.parent

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value at dotted `key`, or `default` when any segment is missing."""
        node: Any = self._data
        for segment in key.split("."):
            if not isinstance(node, dict) or segment not in node:
                return default
            node = node[segment]
        return node

    def get_str(self, key: str, default: str) -> str:
        """Return dotted `key` as text; null or missing values give `default`."""
        value = self.get(key)
        return default if value is None else str(value)

    def get_path(self, key: str, default: str | None = None) -> Path | None:
        """Return dotted `key` as a path, or None when unset.

        Relative values resolve against `base_dir`; `~` is expanded.
        """
        value = self.get(key, default)
        if not value:
            return None
        path = Path(str(value)).expanduser()
        return path if path.is_absolute() else self.base_dir / path
