"""Report month keys.

A report month is always the canonical string ``YYYY-MM-01``. Lexical
order of canonical keys equals chronological order, so keys are compared
and sorted as plain strings everywhere.

Usage:
    from headcount.domain.months import parse_month, previous_month

    key = parse_month("2026-03")        # -> "2026-03-01"
    previous_month(key)                 # -> "2026-02-01"
"""

import re
from datetime import date, datetime
from typing import List, Union

from headcount.errors import ValidationError

_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})(?:-(\d{1,2}))?$")


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}-01"


def parse_month(value: Union[str, date, datetime, None], field: str = "report_month") -> str:
    """Normalize *value* to a canonical month key.

    Accepts ``YYYY-MM-01``, ``YYYY-MM`` or a date. A full date string must
    name the first of the month; anything else is a ValidationError.
    """
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return month_key(value.year, value.month)
    if not isinstance(value, str):
        raise ValidationError("Report month is required", field=field)

    m = _MONTH_RE.match(value.strip())
    if not m:
        raise ValidationError(
            f"Malformed month key: {value!r} (expected YYYY-MM-01)",
            field=field,
            details={"value": value},
        )
    year, month, day = int(m.group(1)), int(m.group(2)), m.group(3)
    if not 1 <= month <= 12:
        raise ValidationError(f"Month out of range: {value!r}", field=field, details={"value": value})
    if day is not None and int(day) != 1:
        raise ValidationError(
            f"Month key must be the first day of the month: {value!r}",
            field=field,
            details={"value": value},
        )
    return month_key(year, month)


def current_month(today: Union[date, datetime, None] = None) -> str:
    """Month key of *today* (defaults to the local date)."""
    return parse_month(today or date.today())


def year_of(key: str) -> int:
    return int(key[:4])


def month_of(key: str) -> int:
    return int(key[5:7])


def quarter_of(key: str) -> int:
    return (month_of(key) - 1) // 3 + 1


def previous_month(key: str) -> str:
    year, month = year_of(key), month_of(key)
    if month == 1:
        return month_key(year - 1, 12)
    return month_key(year, month - 1)


def next_month(key: str) -> str:
    year, month = year_of(key), month_of(key)
    if month == 12:
        return month_key(year + 1, 1)
    return month_key(year, month + 1)


def month_range(start: str, end: str) -> List[str]:
    """Every month key from *start* to *end* inclusive (empty when start > end)."""
    out: List[str] = []
    cursor = start
    while cursor <= end:
        out.append(cursor)
        cursor = next_month(cursor)
    return out
