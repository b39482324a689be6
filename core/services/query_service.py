"""Filtering and sorting service for projected catalog items.

The service filters by category, name text and status, then sorts by one of
the listing modes. Every non-name mode breaks exact ties on name ascending.
Input sequences are never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
import unicodedata

from pypinyin import Style, lazy_pinyin

from core.dates import to_sortable_date_value
from core.models import STATUS_OFF, ProjectedItem
from core.services.projection_service import ALL_CATEGORIES

SORT_TIME_DESC = "time-desc"
SORT_TIME_ASC = "time-asc"
SORT_NAME_ASC = "name-asc"
SORT_NAME_DESC = "name-desc"
SORT_HEAT = "heat"
SORT_MODES: tuple[str, ...] = (
    SORT_TIME_DESC,
    SORT_TIME_ASC,
    SORT_NAME_ASC,
    SORT_NAME_DESC,
    SORT_HEAT,
)
DEFAULT_SORT_MODE = SORT_TIME_DESC

PUBLIC_EXCLUDED_STATUSES: frozenset[str] = frozenset({STATUS_OFF})


@dataclass(frozen=True)
class QueryOptions:
    """Listing parameters.

    Attributes:
        category: Exact category to keep; None or ALL_CATEGORIES keeps all.
        search_text: Case-insensitive substring matched against names.
        exclude_statuses: Statuses dropped from the result.
        sort_mode: One of SORT_MODES.
        search_ids: Also match `search_text` against product ids (admin lists).
    """

    category: str | None = None
    search_text: str = ""
    exclude_statuses: frozenset[str] = frozenset()
    sort_mode: str = DEFAULT_SORT_MODE
    search_ids: bool = False


def parse_sort_mode(value: str | None) -> str:
    """Return `value` when it is a known sort mode, else the default."""
    if value in SORT_MODES:
        return value  # type: ignore[return-value]
    return DEFAULT_SORT_MODE


@lru_cache(maxsize=4096)
def _collation_unit(char: str) -> tuple[int, str]:
    # Han sorts after Latin/digits, by tone-numbered pinyin
    readings = lazy_pinyin(char, style=Style.TONE3)
    syllable = readings[0] if readings else char
    if syllable != char:
        return 1, syllable
    return 0, char.casefold()


def name_key(name: str) -> tuple[tuple[tuple[int, str], ...], tuple[int, ...], str]:
    """Collation key for display names in zh-CN order.

    Compares by pinyin/casefolded text first, then lowercase before uppercase,
    then the raw name so the order is total.
    """
    text = unicodedata.normalize("NFKC", name)
    primary = tuple(_collation_unit(char) for char in text)
    cases = tuple(1 if char.isupper() else 0 for char in text)
    return primary, cases, name


class QueryService:
    """Provides filter and sort utilities for `ProjectedItem` lists."""

    def query(self, items: Iterable[ProjectedItem], options: QueryOptions) -> list[ProjectedItem]:
        """Return the filtered, sorted listing for `options`."""
        return self.sort(self.filter(items, options), options.sort_mode)

    def filter(self, items: Iterable[ProjectedItem], options: QueryOptions) -> list[ProjectedItem]:
        """Apply status, category and text filters, preserving input order."""
        query = options.search_text.strip().casefold()
        use_category = options.category is not None and options.category != ALL_CATEGORIES
        result: list[ProjectedItem] = []
        for item in items:
            if item.status in options.exclude_statuses:
                continue
            if use_category and item.category != options.category:
                continue
            if query and not self._matches(item, query, options.search_ids):
                continue
            result.append(item)
        return result

    def sort(self, items: Iterable[ProjectedItem], sort_mode: str) -> list[ProjectedItem]:
        """Return a new list ordered by `sort_mode`.

        Unknown modes fall back to the default mode.
        """
        mode = parse_sort_mode(sort_mode)
        items = list(items)
        if mode == SORT_NAME_ASC:
            return sorted(items, key=lambda it: name_key(it.name))
        if mode == SORT_NAME_DESC:
            return sorted(items, key=lambda it: name_key(it.name), reverse=True)
        if mode == SORT_HEAT:
            return sorted(items, key=lambda it: (-it.heat, name_key(it.name)))
        if mode == SORT_TIME_ASC:
            return sorted(
                items, key=lambda it: (to_sortable_date_value(it.uploaded_at), name_key(it.name))
            )
        return sorted(
            items, key=lambda it: (-to_sortable_date_value(it.uploaded_at), name_key(it.name))
        )

    @staticmethod
    def _matches(item: ProjectedItem, query: str, search_ids: bool) -> bool:
        if query in item.name.casefold():
            return True
        return search_ids and query in item.id.casefold()
