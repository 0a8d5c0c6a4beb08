"""Calendar helpers: partial dates, half-open intervals, filter arguments.

A *partial date* is ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``. Resolving one
into a :class:`DateRange` uses the unit the user typed:

====================  =================================================
input                 interval
====================  =================================================
``2025``              ``[2025-01-01, 2026-01-01)``
``2025-06``           ``[2025-06-01, 2025-07-01)``
``2025-06-15``        ``[2025-06-15, 2025-06-16)``
start + end           ``[start, next unit after end)`` (end at its own
                      granularity, e.g. ``2025-06`` -> ``2025-07-01``)
nothing               the current calendar month
====================  =================================================
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

_PARTIAL_DATE_RE = re.compile(r"^(\d{4})(?:-(\d{2})(?:-(\d{2}))?)?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, slots=True)
class PartialDate:
    year: int
    month: int | None = None
    day: int | None = None

    def __post_init__(self) -> None:
        if self.day is not None and self.month is None:
            raise ValueError("a day requires a month")
        # Raises ValueError for impossible calendar values (month 13, Feb 30).
        date(self.year, _or_one(self.month), _or_one(self.day))

    @property
    def start(self) -> date:
        """First calendar day covered by this partial date."""

        return date(self.year, _or_one(self.month), _or_one(self.day))

    @property
    def next_unit(self) -> date:
        """First day after the unit this partial date names."""

        if self.month is None:
            return date(self.year + 1, 1, 1)
        if self.day is None:
            return next_month(self.start)
        return self.start + timedelta(days=1)


def _or_one(value: int | None) -> int:
    return 1 if value is None else value


@dataclass(frozen=True, slots=True)
class DateRange:
    """Half-open interval ``[start, end)`` of calendar days."""

    start: date
    end: date

    def __contains__(self, value: object) -> bool:
        return isinstance(value, date) and self.start <= value < self.end

    @property
    def last_day(self) -> date:
        """Last day inside the interval (``end - 1 day``)."""

        return self.end - timedelta(days=1)

    @property
    def empty(self) -> bool:
        return self.end <= self.start


@dataclass(frozen=True, slots=True)
class FilterArgs:
    category: str | None
    interval: DateRange


def next_month(d: date) -> date:
    """First day of the month after ``d``."""

    if d.month == 12:
        return date(d.year + 1, 1, 1)
    return date(d.year, d.month + 1, 1)


def parse_partial_date(text: str) -> PartialDate | None:
    """Parse ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``.

    Returns ``None`` when ``text`` does not have one of those shapes; raises
    ``ValueError`` when it has the shape but names an impossible date.
    """

    m = _PARTIAL_DATE_RE.match(text.strip())
    if not m:
        return None
    year, month, day = m.groups()
    return PartialDate(
        int(year),
        int(month) if month is not None else None,
        int(day) if day is not None else None,
    )


def parse_iso_date(text: str) -> date | None:
    """Strict ``YYYY-MM-DD`` parse; ``None`` when the text is not a valid date."""

    text = text.strip()
    if not _ISO_DATE_RE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def resolve_range(
    start: PartialDate | None,
    end: PartialDate | None = None,
    *,
    today: date,
) -> DateRange:
    """Turn up to two partial dates into a concrete ``[start, end)`` range."""

    if start is None:
        first = date(today.year, today.month, 1)
        upper = end.next_unit if end is not None else next_month(first)
        return DateRange(first, upper)
    upper = end.next_unit if end is not None else start.next_unit
    return DateRange(start.start, upper)


def parse_filter_args(args: Sequence[str], *, today: date) -> FilterArgs:
    """Interpret ``[CAT] [DATE [DATE]]`` command arguments.

    The first argument that is not a date becomes the category filter; it
    must come before any date. Up to two dates are taken; anything after the
    second date (or a non-date after the first) is ignored.
    """

    category: str | None = None
    dates: list[PartialDate] = []
    for arg in args:
        pd = parse_partial_date(arg)
        if pd is None:
            if category is None and not dates:
                category = arg
            continue
        dates.append(pd)
        if len(dates) == 2:
            break

    start = dates[0] if dates else None
    end = dates[1] if len(dates) > 1 else None
    return FilterArgs(category=category, interval=resolve_range(start, end, today=today))


def month_range(year: int, month: int) -> DateRange:
    first = date(year, month, 1)
    return DateRange(first, next_month(first))


def year_range(year: int) -> DateRange:
    return DateRange(date(year, 1, 1), date(year + 1, 1, 1))


__all__ = [
    "PartialDate",
    "DateRange",
    "FilterArgs",
    "next_month",
    "parse_partial_date",
    "parse_iso_date",
    "resolve_range",
    "parse_filter_args",
    "month_range",
    "year_range",
]
