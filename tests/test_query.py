from __future__ import annotations

from datetime import date

import pytest

from exptrack.arena import Arena
from exptrack.dates import DateRange, month_range, year_range
from exptrack.expenses import ExpenseStore
from exptrack.query import (
    aggregate_by_category,
    list_expenses,
    locate_range,
    year_to_date,
)


def _store(*rows: tuple[date, str, float, str]) -> ExpenseStore:
    store = ExpenseStore(Arena(64 * 1024))
    for when, desc, amount, cat in rows:
        store.add(store.new_expense(when, desc, amount, cat))
    store.sort_by_date()
    return store


@pytest.fixture
def june_store() -> ExpenseStore:
    return _store(
        (date(2025, 5, 31), "before", 100.0, "rent"),
        (date(2025, 6, 1), "first", 10.0, "A"),
        (date(2025, 6, 15), "middle", 5.0, "B"),
        (date(2025, 6, 30), "last", 3.0, "A"),
        (date(2025, 7, 1), "after", 200.0, "rent"),
    )


def test_locate_range_returns_contiguous_bounds(june_store: ExpenseStore):
    assert locate_range(june_store, month_range(2025, 6)) == (1, 4)
    assert locate_range(june_store, DateRange(date(2025, 6, 15), date(2025, 6, 16))) == (2, 3)


def test_locate_range_without_matches_returns_none(june_store: ExpenseStore):
    assert locate_range(june_store, month_range(2025, 8)) is None
    assert locate_range(ExpenseStore(Arena(64 * 1024)), month_range(2025, 6)) is None


def test_listing_includes_start_and_excludes_end(june_store: ExpenseStore):
    listing = list_expenses(june_store, month_range(2025, 6))
    assert [r.description for r in listing.rows] == ["first", "middle", "last"]
    assert [r.recno for r in listing.rows] == [2, 3, 4]
    assert [r.running_total for r in listing.rows] == [10.0, 15.0, 18.0]
    assert listing.total == 18.0


def test_listing_category_filter_is_exact(june_store: ExpenseStore):
    listing = list_expenses(june_store, month_range(2025, 6), "A")
    assert [r.description for r in listing.rows] == ["first", "last"]
    assert listing.total == 13.0
    assert list_expenses(june_store, month_range(2025, 6), "a").empty


def test_empty_listing_has_zero_total(june_store: ExpenseStore):
    listing = list_expenses(june_store, month_range(2024, 1))
    assert listing.empty
    assert listing.total == 0.0


def test_category_subtotals_are_largest_first(june_store: ExpenseStore):
    report = aggregate_by_category(june_store, month_range(2025, 6), Arena(4096))
    assert [(e.label.text, e.value) for e in report.entries] == [("A", 13.0), ("B", 5.0)]
    assert report.total == 18.0


def test_category_subtotals_leave_store_date_ordered(june_store: ExpenseStore):
    before = list(june_store)
    aggregate_by_category(june_store, month_range(2025, 6), Arena(4096))
    after = list(june_store)
    assert [e.date for e in after] == [e.date for e in before]
    # Records outside the interval are not moved at all.
    assert after[0] == before[0]
    assert after[-1] == before[-1]


def test_category_subtotals_merge_names_ignoring_order():
    store = _store(
        (date(2025, 1, 3), "a", 1.0, "food"),
        (date(2025, 1, 4), "b", 2.0, "travel"),
        (date(2025, 1, 5), "c", 4.0, "food"),
        (date(2025, 1, 6), "d", 8.0, ""),
    )
    report = aggregate_by_category(store, year_range(2025), Arena(4096))
    values = {e.label.text: e.value for e in report.entries}
    assert values == {"food": 5.0, "travel": 2.0, "": 8.0}
    assert report.entries[0].label.text == ""
    assert report.total == 15.0


def test_category_report_for_empty_interval(june_store: ExpenseStore):
    report = aggregate_by_category(june_store, month_range(2030, 1), Arena(4096))
    assert report.empty
    assert report.total == 0.0


def test_year_to_date_stops_at_today():
    store = _store(
        (date(2025, 1, 5), "a", 10.0, "x"),
        (date(2025, 1, 20), "b", 5.0, "y"),
        (date(2025, 3, 1), "c", 7.5, "x"),
        (date(2025, 6, 10), "d", 1.0, "x"),
        (date(2025, 6, 11), "future", 99.0, "x"),
        (date(2024, 12, 31), "old", 50.0, "x"),
    )
    report = year_to_date(store, 2025, Arena(4096), today=date(2025, 6, 10))
    assert [(e.label.text, e.value) for e in report.entries] == [
        ("2025-01", 15.0),
        ("2025-03", 7.5),
        ("2025-06", 1.0),
    ]
    assert report.total == 23.5
    assert report.interval == DateRange(date(2025, 1, 1), date(2025, 6, 11))


def test_year_to_date_for_past_year_covers_whole_year():
    store = _store(
        (date(2024, 2, 1), "a", 4.0, ""),
        (date(2024, 12, 31), "b", 6.0, ""),
    )
    report = year_to_date(store, 2024, Arena(4096), today=date(2025, 6, 10))
    assert [e.label.text for e in report.entries] == ["2024-02", "2024-12"]
    assert report.total == 10.0
    assert report.interval == year_range(2024)


def test_category_filter_without_match_keeps_range_found(june_store: ExpenseStore):
    listing = list_expenses(june_store, month_range(2025, 6), "nomatch")
    assert listing.empty
    assert listing.in_range
    assert listing.total == 0.0

    outside = list_expenses(june_store, month_range(2025, 8), "A")
    assert not outside.in_range
