from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from exptrack.config import Settings
from exptrack.dates import month_range
from exptrack.errors import ArenaExhausted, CapacityExceeded, ExpenseLineError, StaleReferenceError
from exptrack.session import LedgerSession

LINES = [
    "2025-06-15; 00:00; Groceries; 40.00; food",
    "2025-06-01; 00:00; Rent; 900.00; Housing",
    "2025-05-20; 00:00; Dinner; 35.50; food",
    "2025-06-02; 00:00; Bus; 2.75; ",
]


@pytest.fixture
def session(expense_file: Path):
    with LedgerSession(Settings(expense_file=expense_file)) as s:
        yield s


def test_load_lines_sorts_by_date_and_normalizes_categories(session: LedgerSession):
    store = session.load_lines(LINES)
    assert [e.date for e in store] == [
        date(2025, 5, 20),
        date(2025, 6, 1),
        date(2025, 6, 2),
        date(2025, 6, 15),
    ]
    assert store.category_names() == ["food", "Housing"]
    assert [store.category_of(e).text for e in store] == ["food", "Housing", "", "food"]


def test_load_creates_missing_file(session: LedgerSession, expense_file: Path):
    assert not expense_file.exists()
    store = session.load()
    assert expense_file.exists()
    assert len(store) == 0


def test_load_reports_bad_line_number(session: LedgerSession, expense_file: Path):
    expense_file.write_text(LINES[0] + "\n\n2025-06-xx; 00:00; bad; 1; x\n", encoding="utf-8")
    with pytest.raises(ExpenseLineError) as excinfo:
        session.load()
    assert excinfo.value.line_no == 3
    assert not session.loaded


def test_save_writes_date_order_and_backup(session: LedgerSession, expense_file: Path):
    expense_file.write_text("\n".join(LINES) + "\n", encoding="utf-8")
    store = session.load()
    store.add(store.new_expense(date(2025, 1, 1), "New year", 1, "misc"))
    path = session.save()

    assert path == expense_file
    assert expense_file.read_text(encoding="utf-8").splitlines() == [
        "2025-01-01; 00:00; New year; 1.00; misc",
        "2025-05-20; 00:00; Dinner; 35.50; food",
        "2025-06-01; 00:00; Rent; 900.00; Housing",
        "2025-06-02; 00:00; Bus; 2.75; ",
        "2025-06-15; 00:00; Groceries; 40.00; food",
    ]
    assert expense_file.with_name("expenses.bak").read_text(encoding="utf-8").splitlines() == LINES


def test_reload_invalidates_previous_store(session: LedgerSession):
    first = session.load_lines(LINES)
    session.load_lines(LINES[:1])
    with pytest.raises(StaleReferenceError):
        len(first)
    assert len(session.store) == 1


def test_store_requires_load(session: LedgerSession):
    with pytest.raises(RuntimeError):
        _ = session.store


def test_reports_use_scratch_arena(session: LedgerSession):
    session.load_lines(LINES)
    report = session.category_report(month_range(2025, 6))
    assert [(e.label.text, e.value) for e in report.entries] == [
        ("Housing", 900.0),
        ("food", 40.0),
        ("", 2.75),
    ]
    labels = report.entries
    session.category_report(month_range(2025, 6))
    # The previous report's labels live in the ledger arena and stay readable.
    assert labels[0].label.text == "Housing"

    ytd = session.ytd_report(2025, today=date(2025, 6, 20))
    assert [e.label.text for e in ytd.entries] == ["2025-05", "2025-06"]
    assert ytd.total == pytest.approx(978.25)


def test_listing_with_category(session: LedgerSession):
    session.load_lines(LINES)
    listing = session.listing(month_range(2025, 6), "food")
    assert [r.description for r in listing.rows] == ["Groceries"]
    assert listing.total == 40.0


def test_small_ledger_arena_is_fatal(expense_file: Path):
    with LedgerSession(Settings(expense_file=expense_file, ledger_arena_size=64)) as s:
        with pytest.raises(ArenaExhausted):
            s.load_lines(LINES)


def test_record_limit_is_fatal(expense_file: Path):
    with LedgerSession(Settings(expense_file=expense_file), max_records=3) as s:
        with pytest.raises(CapacityExceeded):
            s.load_lines(LINES)


def test_close_destroys_arenas(expense_file: Path):
    s = LedgerSession(Settings(expense_file=expense_file))
    store = s.load_lines(LINES)
    s.close()
    assert s.ledger.destroyed and s.scratch.destroyed
    assert not s.loaded
    with pytest.raises(StaleReferenceError):
        list(store)
