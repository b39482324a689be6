"""Canonicalize raw catalog documents.

`normalize` accepts whatever the persistence layer decoded (usually a dict
loaded from JSON) and returns a `Document` that respects the model
invariants. It is total: malformed fields degrade to safe defaults instead of
failing the whole document, and it is idempotent.
"""

from __future__ import annotations

from collections.abc import Mapping
import math
from typing import Any

from core.dates import normalize_date_string
from core.models import (
    EMPTY_DOCUMENT,
    PRODUCT_STATUSES,
    STATUS_ON,
    Document,
    Group,
    Product,
)


def normalize_status(value: object) -> str:
    """Return a known product status; anything else becomes `on`."""
    if isinstance(value, str) and value in PRODUCT_STATUSES:
        return value
    return STATUS_ON


def normalize_heat(value: object) -> int:
    """Return a non-negative integral heat; malformed input becomes 0."""
    if isinstance(value, bool) or value is None:
        return 0
    # JSON integers may exceed float range
    if isinstance(value, int):
        return max(value, 0)
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(parsed) or parsed < 0:
        return 0
    return int(math.floor(parsed))


def merge_shots(cover: object, shots: object, url: object = None) -> tuple[str, ...]:
    """Union of `[cover or url, *shots]`, trimmed, blanks dropped, first-seen order."""
    head = _text(cover).strip() or _text(url).strip()
    merged: list[str] = []
    seen: set[str] = set()
    for raw in (head, *_as_list(shots)):
        shot = _text(raw).strip()
        if shot and shot not in seen:
            seen.add(shot)
            merged.append(shot)
    return tuple(merged)


def normalize(raw: Any) -> Document:
    """Return the canonical `Document` for a raw decoded document.

    Accepts a `Document` too, in which case it is re-normalized from its JSON
    shape.
    """
    if isinstance(raw, Document):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        return EMPTY_DOCUMENT

    doc_date = normalize_date_string(raw.get("updatedAt"))
    groups = tuple(
        _normalize_group(g, doc_date)
        for g in _as_list(raw.get("groups"))
        if isinstance(g, Mapping)
    )
    return Document(updated_at=doc_date, groups=groups)


def resolve(base: Any, override: Any = None) -> Document:
    """Two-tier document resolution: a usable `override` wins over `base`.

    An override is usable when it is a mapping holding a `groups` list (or a
    `Document`). Anything else, including None, falls back to `base`.
    """
    if isinstance(override, Document):
        return normalize(override)
    if isinstance(override, Mapping) and isinstance(override.get("groups"), list):
        return normalize(override)
    return normalize(base)


def _normalize_group(raw: Mapping[str, Any], doc_date: str) -> Group:
    group_date = normalize_date_string(raw.get("updatedAt"))
    fallback_date = group_date or doc_date
    images = tuple(
        _normalize_product(p, fallback_date)
        for p in _as_list(raw.get("images"))
        if isinstance(p, Mapping)
    )
    return Group(
        category=_text(raw.get("category")),
        description=_text(raw.get("description")),
        updated_at=group_date,
        images=images,
    )


def _normalize_product(raw: Mapping[str, Any], fallback_date: str) -> Product:
    url = raw.get("url")
    shots = merge_shots(raw.get("coverUrl"), raw.get("shots"), url)
    cover = _text(raw.get("coverUrl")).strip() or _text(url).strip() or (shots[0] if shots else "")
    description = raw.get("description")
    return Product(
        id=_text(raw.get("id")),
        name=_text(raw.get("name")),
        uploaded_at=normalize_date_string(_text(raw.get("uploadedAt")).strip() or fallback_date),
        cover_url=cover,
        shots=shots,
        description=None if description is None else _text(description),
        status=normalize_status(raw.get("status")),
        heat=normalize_heat(raw.get("heat")),
        url=None if url is None else _text(url),
    )


def _text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_list(value: object) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []
