"""Date normalization helpers for catalog date strings.

Catalog dates are plain text in `YYYY/MM/DD` form. Parsing is best-effort and
never raises: text that does not look like a date is kept (trimmed) and sorts
as the minimum value.
"""

from __future__ import annotations

from datetime import date
import re

CATALOG_DATE_FMT = "%Y/%m/%d"

_DATE_RX = re.compile(r"^(\d{4})[/-](\d{1,2})[/-](\d{1,2})$")
_CANONICAL_RX = re.compile(r"^(\d{4})/(\d{2})/(\d{2})$")


def normalize_date_string(value: object) -> str:
    """Return `value` as `YYYY/MM/DD` when it parses, else the trimmed text."""
    text = "" if value is None else str(value).strip()
    matched = _DATE_RX.match(text)
    if not matched:
        return text
    year, month, day = matched.groups()
    return f"{year}/{month.zfill(2)}/{day.zfill(2)}"


def to_sortable_date_value(value: object) -> int:
    """Return a comparable ordinal for a catalog date; 0 when unparseable."""
    matched = _CANONICAL_RX.match(normalize_date_string(value))
    if not matched:
        return 0
    try:
        return date(int(matched[1]), int(matched[2]), int(matched[3])).toordinal()
    except ValueError:
        return 0


def today_text() -> str:
    """Today's date in catalog format."""
    return date.today().strftime(CATALOG_DATE_FMT)
