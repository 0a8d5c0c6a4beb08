from __future__ import annotations

from datetime import date

import pytest

from exptrack.arena import Arena
from exptrack.errors import CapacityExceeded
from exptrack.expenses import (
    DESCRIPTION_BUDGET,
    Expense,
    ExpenseStore,
    compare_by_date,
    ledger_footprint,
)
from exptrack.table import MAX_ID


@pytest.fixture
def store() -> ExpenseStore:
    return ExpenseStore(Arena(64 * 1024))


def test_new_expense_interns_description_and_category(store: ExpenseStore):
    e = store.new_expense(date(2025, 6, 3), "Lunch", 12.5, "food")
    assert store.description_of(e) == "Lunch"
    assert store.category_of(e) == "food"
    assert e.amount == 12.5
    idx = store.add(e)
    assert store.get(idx) == e
    assert len(store) == 1


def test_category_names_are_stored_once(store: ExpenseStore):
    a = store.new_expense(date(2025, 6, 3), "Lunch", 12.5, "food")
    b = store.new_expense(date(2025, 6, 4), "Dinner", 20, " food ")
    assert a.category_id == b.category_id
    assert store.category_names() == ["food"]
    # Descriptions are never looked up, so repeats get fresh IDs.
    c = store.new_expense(date(2025, 6, 5), "Lunch", 9, "food")
    assert c.description_id != a.description_id


def test_blank_category_is_uncategorized(store: ExpenseStore):
    e = store.new_expense(date(2025, 6, 3), "Stamp", 1.0)
    assert e.category_id == 0
    assert store.intern_category("   ") == 0
    assert store.category_of(e) == ""
    assert store.category_names() == []


def test_get_out_of_range_returns_none(store: ExpenseStore):
    assert store.get(0) is None
    store.add(store.new_expense(date(2025, 1, 1), "x", 1))
    assert store.get(1) is None


def test_delete_keeps_relative_order(store: ExpenseStore):
    for day in (1, 2, 3, 4):
        store.add(store.new_expense(date(2025, 1, day), f"d{day}", day))
    removed = store.delete(1)
    assert removed.date == date(2025, 1, 2)
    assert [e.date.day for e in store] == [1, 3, 4]


def test_replace_overwrites_in_place(store: ExpenseStore):
    e = store.new_expense(date(2025, 1, 1), "Taxi", 30)
    store.add(e)
    store.replace(0, e.with_changes(amount=25.0))
    assert store.get(0).amount == 25.0
    with pytest.raises(IndexError):
        store.replace(1, e)


def test_sort_by_date(store: ExpenseStore):
    for d in (date(2025, 3, 1), date(2025, 1, 1), date(2025, 2, 1)):
        store.add(store.new_expense(d, "x", 1))
    store.sort_by_date()
    assert [e.date.month for e in store] == [1, 2, 3]


def test_compare_by_date_is_three_way():
    a = Expense(date(2025, 1, 1), 1, 1.0)
    b = Expense(date(2025, 1, 2), 1, 1.0)
    assert compare_by_date(a, b) < 0
    assert compare_by_date(b, a) > 0
    assert compare_by_date(a, a.with_changes(amount=99.0)) == 0


def test_sort_by_category_is_case_insensitive(store: ExpenseStore):
    for cat in ("rent", "Food", "bills"):
        store.add(store.new_expense(date(2025, 1, 1), "x", 1, cat))
    store.sort_by_category()
    assert [store.category_of(e).text for e in store] == ["bills", "Food", "rent"]


def test_sort_by_category_sub_range(store: ExpenseStore):
    for cat in ("z", "c", "b", "a", "y"):
        store.add(store.new_expense(date(2025, 1, 1), "x", 1, cat))
    store.sort_by_category(1, 4)
    assert [store.category_of(e).text for e in store] == ["z", "a", "b", "c", "y"]


def test_normalize_categories_orders_table_and_remaps_records(store: ExpenseStore):
    for cat in ("zeta", "Alpha", "mid", "", "zeta"):
        store.add(store.new_expense(date(2025, 1, 1), cat or "none", 1, cat))
    before = [store.category_of(e).text for e in store]

    store.normalize_categories(Arena(4096))

    assert store.category_names() == ["Alpha", "mid", "zeta"]
    assert [store.category_of(e).text for e in store] == before
    assert [e.category_id for e in store] == [3, 1, 2, 0, 3]


def test_record_capacity_limit_is_fatal():
    store = ExpenseStore(Arena(64 * 1024), 2, max_len=4)
    for day in range(1, 5):
        store.add(Expense(date(2025, 1, day), 0, 1.0))
    with pytest.raises(CapacityExceeded):
        store.add(Expense(date(2025, 1, 5), 0, 1.0))
    assert len(store) == 4


def test_ledger_footprint_covers_full_tables():
    # Filling every record and description slot at the budgeted description
    # length hits the table ceiling, not the arena.
    arena = Arena(ledger_footprint())
    store = ExpenseStore(arena)
    description = "x" * DESCRIPTION_BUDGET
    when = date(2025, 1, 1)
    for _ in range(MAX_ID - 1):
        store.add(store.new_expense(when, description, 1.0, "food"))
    assert len(store.descriptions) == MAX_ID
    with pytest.raises(CapacityExceeded):
        store.add(store.new_expense(when, description, 1.0, "food"))
    assert arena.remaining > 0


def test_ledger_footprint_grows_with_limits():
    small = ledger_footprint(100)
    assert small < ledger_footprint(1000)
    assert ledger_footprint(100, description_bytes=0) < small
