"""Month-precision date handling.

Every month in the system is a ``date`` pinned to the first day of the
month. Inputs arrive as ``YYYY-MM`` labels from query strings and
spreadsheets, as ``YYYY-MM-DD`` strings or as date/datetime cells; they all
go through :func:`parse_month` so that range filters compare dates and never
strings.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime

_MONTH_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})(?:-(\d{1,2}))?(?:[T ].*)?\s*$")


def parse_month(value) -> date:
    """Normalise *value* to the first day of its month.

    Raises ``ValueError`` for anything that is not a recognisable month.
    """
    if isinstance(value, datetime):
        return value.date().replace(day=1)
    if isinstance(value, date):
        return value.replace(day=1)
    if value is None:
        raise ValueError("Month is required.")

    match = _MONTH_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid month {value!r} (expected YYYY-MM).")
    year, month = int(match.group(1)), int(match.group(2))
    day = int(match.group(3) or 1)
    try:
        date(year, month, day)
    except ValueError:
        raise ValueError(f"Invalid month {value!r} (expected YYYY-MM).")
    return date(year, month, 1)


def format_month(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


@dataclass(frozen=True)
class MonthRange:
    """Inclusive month bounds; ``None`` leaves that side open.

    No ordering check is made here: an inverted range simply matches nothing.
    """

    start: date | None = None
    end: date | None = None

    @classmethod
    def from_bounds(cls, start=None, end=None) -> "MonthRange | None":
        if start in (None, "") and end in (None, ""):
            return None
        return cls(
            start=parse_month(start) if start not in (None, "") else None,
            end=parse_month(end) if end not in (None, "") else None,
        )

    def as_filter(self, field: str = "month") -> dict:
        lookups = {}
        if self.start is not None:
            lookups[f"{field}__gte"] = self.start
        if self.end is not None:
            lookups[f"{field}__lte"] = self.end
        return lookups
