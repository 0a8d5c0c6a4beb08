"""Expense records and the store that owns them.

An :class:`ExpenseStore` is one "generation" of loaded data: a
:class:`~exptrack.table.Table` of :class:`Expense` records plus two
:class:`~exptrack.strtable.StringTable` instances (descriptions and
categories), all charged to the same arena. Records refer to strings by ID
only; resetting the arena discards the whole store at once.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from datetime import date

from .arena import Arena, InternedStr
from .logging_setup import get_logger
from .sorting import Comparator
from .strtable import SLOT_SIZE, StringTable, compare_casefold
from .table import MAX_ID, Table, block_footprint

# Bytes charged per record: timestamp, two 16-bit IDs and a float, padded.
RECORD_SIZE = 24

DEFAULT_CAPACITY = 100
DESCRIPTION_CAPACITY = 512
CATEGORY_CAPACITY = 8

# Average string lengths the default ledger arena is sized for.
DESCRIPTION_BUDGET = 128
CATEGORY_BUDGET = 32

_logger = get_logger("exptrack.expenses")


@dataclass(frozen=True, slots=True)
class Expense:
    """One line item.

    ``description_id`` and ``category_id`` index the owning store's string
    tables; ``category_id == 0`` means uncategorized. Negative ``amount``
    values are refunds/credits.
    """

    date: date
    description_id: int
    amount: float
    category_id: int = 0

    def with_changes(self, **changes) -> Expense:
        return replace(self, **changes)


def ledger_footprint(
    max_len: int = MAX_ID,
    *,
    description_bytes: int = DESCRIPTION_BUDGET,
    category_bytes: int = CATEGORY_BUDGET,
) -> int:
    """Bytes a store needs to reach ``max_len`` in every table.

    Counts each table's full growth series plus one interned copy per slot
    (string bytes and the terminator) at the given average lengths.
    """

    strings = max_len - 1
    return (
        block_footprint(DEFAULT_CAPACITY, RECORD_SIZE, max_len)
        + block_footprint(DESCRIPTION_CAPACITY, SLOT_SIZE, max_len)
        + block_footprint(CATEGORY_CAPACITY, SLOT_SIZE, max_len)
        + strings * (description_bytes + 1)
        + strings * (category_bytes + 1)
    )


def compare_by_date(a: Expense, b: Expense) -> int:
    if a.date < b.date:
        return -1
    if a.date > b.date:
        return 1
    return 0


class ExpenseStore:
    """Growable array of :class:`Expense` plus its description/category tables."""

    def __init__(
        self,
        arena: Arena,
        capacity: int = DEFAULT_CAPACITY,
        *,
        max_len: int = MAX_ID,
    ) -> None:
        self.arena = arena
        self._records: Table[Expense] = Table(
            arena, capacity, item_size=RECORD_SIZE, max_len=max_len, name="expenses"
        )
        self.descriptions = StringTable(
            arena, DESCRIPTION_CAPACITY, max_len=max_len, name="descriptions"
        )
        self.categories = StringTable(arena, CATEGORY_CAPACITY, max_len=max_len, name="categories")

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Expense]:
        return iter(self._records)

    # ---- record operations ------------------------------------------------

    def add(self, expense: Expense) -> int:
        return self._records.add(expense)

    def replace(self, idx: int, expense: Expense) -> None:
        self._records.replace(idx, expense)

    def get(self, idx: int) -> Expense | None:
        return self._records.get(idx)

    def delete(self, idx: int) -> Expense:
        """Remove record ``idx``; later records keep their relative order."""

        removed = self._records.delete(idx)
        _logger.debug("deleted record %d (%s)", idx, removed.date.isoformat())
        return removed

    def new_expense(
        self,
        when: date,
        description: str | bytes,
        amount: float,
        category: str | bytes = "",
    ) -> Expense:
        """Intern ``description`` and ``category`` and build a record.

        Descriptions are always interned fresh (no lookup); categories are
        looked up first so each name is stored once.
        """

        return Expense(
            date=when,
            description_id=self.descriptions.add(description),
            amount=float(amount),
            category_id=self.intern_category(category),
        )

    # ---- string helpers ---------------------------------------------------

    def intern_category(self, name: str | bytes | InternedStr) -> int:
        """Return the ID for ``name``, adding it on first appearance.

        Blank names map to 0 (uncategorized).
        """

        if isinstance(name, InternedStr):
            name = name.data
        if isinstance(name, bytes):
            name = name.decode("utf-8", errors="replace")
        name = name.strip()
        if not name:
            return 0
        catid = self.categories.find(name)
        if catid == 0:
            catid = self.categories.add(name)
        return catid

    def description_of(self, expense: Expense) -> InternedStr:
        return self.descriptions.get(expense.description_id)

    def category_of(self, expense: Expense) -> InternedStr:
        return self.categories.get(expense.category_id)

    def category_names(self) -> list[str]:
        """All category names in table order, without the sentinel."""

        return [s.text for s in list(self.categories)[1:]]

    # ---- ordering ---------------------------------------------------------

    def category_comparator(self) -> Comparator[Expense]:
        """Case-insensitive comparator on each record's category name.

        Names are resolved once into sort keys, so the comparator does not
        consult the category table while sorting.
        """

        keys = [s.text.casefold() for s in self.categories]

        def key(catid: int) -> str:
            return keys[catid] if 0 <= catid < len(keys) else ""

        def compare(a: Expense, b: Expense) -> int:
            ka, kb = key(a.category_id), key(b.category_id)
            if ka == kb:
                # Names equal ignoring case still need distinct runs per ID.
                return (a.category_id > b.category_id) - (a.category_id < b.category_id)
            return (ka > kb) - (ka < kb)

        return compare

    def sort(self, cmp: Comparator[Expense], start: int = 0, stop: int | None = None) -> None:
        """Sort records ``[start, stop)`` in place, leaving the rest untouched."""

        self._records.sort(cmp, start, stop)

    def sort_by_date(self) -> None:
        self.sort(compare_by_date)

    def sort_by_category(self, start: int = 0, stop: int | None = None) -> None:
        self.sort(self.category_comparator(), start, stop)

    def normalize_categories(self, scratch: Arena) -> None:
        """Order the category table alphabetically and remap record IDs.

        A copy of the current table is kept in ``scratch`` to translate old
        IDs to names while records are rewritten.
        """

        previous = self.categories.duplicate(scratch)
        self.categories.sort(compare_casefold)
        remap: dict[int, int] = {0: 0}
        for old_id in range(1, len(previous)):
            remap[old_id] = self.categories.find(previous.get(old_id))
        self._rewrite(lambda e: e.with_changes(category_id=remap.get(e.category_id, 0)))

    def _rewrite(self, fn: Callable[[Expense], Expense]) -> None:
        for idx, expense in enumerate(self._records):
            updated = fn(expense)
            if updated != expense:
                self._records.replace(idx, updated)


__all__ = [
    "Expense",
    "ExpenseStore",
    "compare_by_date",
    "RECORD_SIZE",
    "ledger_footprint",
]
