"""Date-range queries and aggregations over a date-sorted store.

All functions here assume the store's records are non-decreasing by date
(``ExpenseStore.sort_by_date`` or a session load). Matching records for a
half-open interval therefore form one contiguous run, which
:func:`locate_range` finds with a single scan that stops at the first record
past the interval.

Empty results are ordinary return values: ``locate_range`` returns ``None``,
listings come back with no rows, and reports with no entries and a zero total.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, timedelta

from .arena import Arena
from .dates import DateRange
from .expenses import ExpenseStore, compare_by_date
from .logging_setup import get_logger
from .table import AggregateEntry, compare_entry_value_desc, new_entry_table

_logger = get_logger("exptrack.query")


@dataclass(frozen=True, slots=True)
class ListingRow:
    """One rendered-ready expense line plus the running total so far."""

    recno: int
    date: date
    description: str
    amount: float
    category: str
    running_total: float


@dataclass(frozen=True, slots=True)
class ExpenseListing:
    """Rows of one listing.

    ``in_range`` is true when some record falls inside ``interval``, even if
    the category filter then rejected all of them.
    """

    interval: DateRange
    category: str | None
    rows: tuple[ListingRow, ...]
    total: float
    in_range: bool = False

    @property
    def empty(self) -> bool:
        return not self.rows


@dataclass(frozen=True, slots=True)
class AggregateReport:
    """Label/value entries plus a grand total.

    ``entries`` is ordered as the producing function documents (descending by
    value for category reports, chronological for year-to-date).
    """

    interval: DateRange
    entries: tuple[AggregateEntry, ...]
    total: float

    @property
    def empty(self) -> bool:
        return not self.entries


def locate_range(store: ExpenseStore, interval: DateRange) -> tuple[int, int] | None:
    """Return ``(first, stop)`` indices of records dated inside ``interval``.

    ``stop`` is exclusive. Returns ``None`` when no record qualifies.
    """

    first = -1
    stop = -1
    for idx, expense in enumerate(store):
        if expense.date < interval.start:
            continue
        if expense.date >= interval.end:
            break
        if first == -1:
            first = idx
        stop = idx + 1
    if first == -1:
        return None
    return first, stop


def iter_listing(
    store: ExpenseStore,
    interval: DateRange,
    category: str | None = None,
) -> Iterator[ListingRow]:
    """Yield rows for records in ``interval``, optionally one category only.

    ``category`` must match the category name exactly. Record numbers are the
    1-based positions in the store.
    """

    bounds = locate_range(store, interval)
    if bounds is None:
        return iter(())
    return _listing_rows(store, *bounds, category)


def _listing_rows(
    store: ExpenseStore, first: int, stop: int, category: str | None
) -> Iterator[ListingRow]:
    running = 0.0
    for idx in range(first, stop):
        expense = store.get(idx)
        if expense is None:
            break
        catname = store.category_of(expense).text
        if category and catname != category:
            continue
        running += expense.amount
        yield ListingRow(
            recno=idx + 1,
            date=expense.date,
            description=store.description_of(expense).text,
            amount=expense.amount,
            category=catname,
            running_total=running,
        )


def list_expenses(
    store: ExpenseStore,
    interval: DateRange,
    category: str | None = None,
) -> ExpenseListing:
    bounds = locate_range(store, interval)
    rows = tuple(_listing_rows(store, *bounds, category)) if bounds is not None else ()
    total = rows[-1].running_total if rows else 0.0
    return ExpenseListing(
        interval=interval,
        category=category or None,
        rows=rows,
        total=total,
        in_range=bounds is not None,
    )


def aggregate_by_category(
    store: ExpenseStore,
    interval: DateRange,
    scratch: Arena,
) -> AggregateReport:
    """Per-category subtotals for ``interval``, largest first.

    Only the located sub-range is re-sorted by category name so the
    subtotals can be built in one adjacency pass; records outside the interval
    are not touched. The sub-range is put back in date order before returning,
    although records sharing a date may come back in a different order.
    """

    bounds = locate_range(store, interval)
    if bounds is None:
        return AggregateReport(interval=interval, entries=(), total=0.0)
    first, stop = bounds

    store.sort_by_category(first, stop)

    entries = new_entry_table(scratch, name="category-subtotals")
    total = 0.0
    subtotal = 0.0
    current: int | None = None
    for idx in range(first, stop):
        expense = store.get(idx)
        if expense is None:
            break
        total += expense.amount
        if current is not None and expense.category_id != current:
            entries.add(AggregateEntry(store.categories.get(current), subtotal))
            subtotal = 0.0
        current = expense.category_id
        subtotal += expense.amount
    if current is not None:
        entries.add(AggregateEntry(store.categories.get(current), subtotal))

    store.sort(compare_by_date, first, stop)
    entries.sort(compare_entry_value_desc)
    _logger.debug(
        "aggregated %d records into %d categories for %s..%s",
        stop - first,
        len(entries),
        interval.start.isoformat(),
        interval.last_day.isoformat(),
    )
    return AggregateReport(interval=interval, entries=tuple(entries), total=total)


def year_to_date(
    store: ExpenseStore,
    year: int,
    scratch: Arena,
    *,
    today: date,
) -> AggregateReport:
    """Monthly totals for ``year``, stopping after ``today`` for the current year.

    Entries are chronological and labeled ``YYYY-MM``; months without any
    records are omitted.
    """

    start = date(year, 1, 1)
    end = date(year + 1, 1, 1)
    if start <= today < end:
        end = today + timedelta(days=1)
    interval = DateRange(start, end)

    bounds = locate_range(store, interval)
    if bounds is None:
        return AggregateReport(interval=interval, entries=(), total=0.0)
    first, stop = bounds

    entries = new_entry_table(scratch, 12, name="monthly-totals")
    total = 0.0
    subtotal = 0.0
    current: tuple[int, int] | None = None
    for idx in range(first, stop):
        expense = store.get(idx)
        if expense is None:
            break
        month = (expense.date.year, expense.date.month)
        total += expense.amount
        if current is not None and month != current:
            entries.add(AggregateEntry(scratch.intern(_month_label(current)), subtotal))
            subtotal = 0.0
        current = month
        subtotal += expense.amount
    if current is not None:
        entries.add(AggregateEntry(scratch.intern(_month_label(current)), subtotal))

    return AggregateReport(interval=interval, entries=tuple(entries), total=total)


def _month_label(month: tuple[int, int]) -> str:
    return f"{month[0]:04d}-{month[1]:02d}"


__all__ = [
    "ListingRow",
    "ExpenseListing",
    "AggregateReport",
    "locate_range",
    "iter_listing",
    "list_expenses",
    "aggregate_by_category",
    "year_to_date",
]
