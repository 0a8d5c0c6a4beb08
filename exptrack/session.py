"""Per-invocation owner of arenas and the loaded expense store.

A :class:`LedgerSession` is constructed once per command and passed to the
operations that need it; there is no module-level state. It holds two arenas:

- the *ledger* arena, reset at the start of every load, which backs the
  :class:`~exptrack.expenses.ExpenseStore` and its string tables;
- the *scratch* arena, reset before every report, which backs transient
  tables such as category subtotals.

Usage::

    with LedgerSession(load_settings()) as session:
        session.load()
        report = session.category_report(interval)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from pathlib import Path

from .arena import Arena
from .config import Settings, load_settings
from .dates import DateRange
from .expenses import ExpenseStore
from .expfile import read_lines, touch_expense_file, write_lines
from .lines import format_expense, read_expense
from .logging_setup import get_logger
from .query import (
    AggregateReport,
    ExpenseListing,
    aggregate_by_category,
    list_expenses,
    year_to_date,
)
from .table import MAX_ID

_logger = get_logger("exptrack.session")


class LedgerSession:
    def __init__(self, settings: Settings | None = None, *, max_records: int = MAX_ID) -> None:
        self.settings = settings if settings is not None else load_settings()
        self.ledger = Arena(self.settings.ledger_arena_size)
        self.scratch = Arena(self.settings.scratch_arena_size)
        self.max_records = max_records
        self._store: ExpenseStore | None = None

    def __enter__(self) -> LedgerSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def path(self) -> Path:
        return self.settings.resolve_expense_file()

    @property
    def store(self) -> ExpenseStore:
        if self._store is None:
            raise RuntimeError("no expenses loaded; call load() first")
        return self._store

    @property
    def loaded(self) -> bool:
        return self._store is not None

    # ---- loading / saving -------------------------------------------------

    def load_lines(self, lines: Iterable[str | tuple[int, str]]) -> ExpenseStore:
        """Build a fresh date-sorted store from raw lines.

        ``lines`` may be plain strings or ``(line_no, text)`` pairs; blank
        strings are skipped. The ledger arena is reset first, so any handle
        from a previous load becomes stale.
        """

        self._store = None
        self.ledger.reset()
        self.scratch.reset()
        store = ExpenseStore(self.ledger, max_len=self.max_records)
        for n, item in enumerate(lines, start=1):
            line_no, text = item if isinstance(item, tuple) else (n, item)
            if not text.strip():
                continue
            store.add(read_expense(text, store, line_no=line_no))
        store.normalize_categories(self.scratch)
        store.sort_by_date()
        self._store = store
        _logger.info(
            "loaded %d expenses, %d categories (%d of %d ledger bytes used)",
            len(store),
            len(store.categories) - 1,
            self.ledger.offset,
            self.ledger.capacity,
        )
        return store

    def load(self) -> ExpenseStore:
        """Load the configured expense file, creating it when missing."""

        path = self.path
        touch_expense_file(path)
        return self.load_lines(read_lines(path))

    def save(self) -> Path:
        """Write the store back in date order, keeping a ``.bak`` copy."""

        store = self.store
        store.sort_by_date()
        path = self.path
        write_lines(path, (format_expense(store, e) for e in store))
        return path

    def close(self) -> None:
        self._store = None
        self.ledger.destroy()
        self.scratch.destroy()

    # ---- reports ----------------------------------------------------------

    def listing(self, interval: DateRange, category: str | None = None) -> ExpenseListing:
        return list_expenses(self.store, interval, category)

    def category_report(self, interval: DateRange) -> AggregateReport:
        self.scratch.reset()
        return aggregate_by_category(self.store, interval, self.scratch)

    def ytd_report(self, year: int, *, today: date) -> AggregateReport:
        self.scratch.reset()
        return year_to_date(self.store, year, self.scratch, today=today)


__all__ = ["LedgerSession"]
