"""Generic growable record table backed by arena blocks.

:class:`Table` is the ordered container every other structure builds on: the
string table keeps its slots in one, the expense store keeps its records in
one, and category reports collect :class:`AggregateEntry` rows in one.

Growth policy
-------------
Capacity starts at the caller's value and doubles on overflow, capped at
``max_len`` (the largest count a 16-bit signed ID can address, 32767, unless a
smaller maximum is injected). Each growth step charges a fresh block of
``capacity * item_size`` bytes to the owning arena; the previous block is not
reclaimed because arenas never free individual allocations. Adding to a table
that is already at ``max_len`` raises :class:`~exptrack.errors.CapacityExceeded`.

The block also ties the table to its arena generation: once the arena is
reset, every operation on the table raises
:class:`~exptrack.errors.StaleReferenceError`.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

from .arena import Arena, InternedStr, Region
from .errors import CapacityExceeded
from .logging_setup import get_logger
from .sorting import Comparator, quicksort

T = TypeVar("T")

MAX_ID = 32767
"""Largest slot count addressable by a 16-bit signed ID."""

DEFAULT_ITEM_SIZE = 16

_logger = get_logger("exptrack.table")


class Table(Generic[T]):
    """Insertion-ordered, arena-charged array of ``T``."""

    __slots__ = ("_arena", "_block", "_items", "_capacity", "_item_size", "_max_len", "name")

    def __init__(
        self,
        arena: Arena,
        capacity: int,
        *,
        item_size: int = DEFAULT_ITEM_SIZE,
        max_len: int = MAX_ID,
        name: str = "table",
    ) -> None:
        if max_len <= 0:
            raise ValueError("max_len must be positive")
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        capacity = min(capacity, max_len)
        self._arena = arena
        self._item_size = item_size
        self._max_len = max_len
        self._capacity = capacity
        self._block: Region = arena.allocate(capacity * item_size)
        self._items: list[T] = []
        self.name = name

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Table(name={self.name!r}, len={len(self._items)}, capacity={self._capacity})"

    @property
    def arena(self) -> Arena:
        return self._arena

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def max_len(self) -> int:
        return self._max_len

    @property
    def item_size(self) -> int:
        return self._item_size

    def __len__(self) -> int:
        self._block.check()
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        # Snapshot so deletes during iteration cannot shift unseen items.
        self._block.check()
        return iter(tuple(self._items))

    def _grow(self) -> None:
        if self._capacity >= self._max_len:
            _logger.error("%s: maximum capacity reached (%d)", self.name, self._max_len)
            raise CapacityExceeded(self.name, self._max_len)
        new_capacity = min(self._capacity * 2, self._max_len)
        self._block = self._arena.allocate(new_capacity * self._item_size)
        _logger.debug("%s: grew capacity %d -> %d", self.name, self._capacity, new_capacity)
        self._capacity = new_capacity

    def add(self, item: T) -> int:
        """Append ``item`` and return its ID (index)."""

        self._block.check()
        if len(self._items) >= self._capacity:
            self._grow()
        self._items.append(item)
        return len(self._items) - 1

    def replace(self, idx: int, item: T) -> None:
        """Overwrite the item at ``idx``; ``idx`` must already exist."""

        self._block.check()
        if not 0 <= idx < len(self._items):
            raise IndexError(f"{self.name}: index {idx} out of range 0..{len(self._items) - 1}")
        self._items[idx] = item

    def get(self, idx: int) -> T | None:
        """Return the item at ``idx`` or ``None`` when out of range."""

        self._block.check()
        if 0 <= idx < len(self._items):
            return self._items[idx]
        return None

    def delete(self, idx: int) -> T:
        """Remove the item at ``idx``, shifting later items down by one."""

        self._block.check()
        if not 0 <= idx < len(self._items):
            raise IndexError(f"{self.name}: index {idx} out of range 0..{len(self._items) - 1}")
        return self._items.pop(idx)

    def sort(self, cmp: Comparator[T], start: int = 0, stop: int | None = None) -> None:
        """Sort the half-open sub-range ``[start, stop)`` in place."""

        self._block.check()
        quicksort(self._items, cmp, start, stop)

    def copy_into(self, arena: Arena, *, name: str | None = None) -> Table[T]:
        """Return a copy of this table whose block lives in ``arena``.

        Items are shared, not deep-copied.
        """

        self._block.check()
        clone: Table[T] = Table(
            arena,
            self._capacity,
            item_size=self._item_size,
            max_len=self._max_len,
            name=name or self.name,
        )
        clone._items = list(self._items)
        return clone


# ---------------------------------------------------------------------------
# Aggregate entries (category subtotals, monthly totals)
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class AggregateEntry:
    """A report row: interned label plus accumulated value."""

    label: InternedStr
    value: float


AGGREGATE_ENTRY_SIZE = 24


def compare_entry_value_desc(a: AggregateEntry, b: AggregateEntry) -> int:
    if a.value > b.value:
        return -1
    if a.value < b.value:
        return 1
    return 0


def block_footprint(capacity: int, item_size: int, max_len: int = MAX_ID) -> int:
    """Total bytes charged to an arena by a table grown from ``capacity`` to ``max_len``.

    Every doubling allocates a new block and keeps the old ones, so this is
    the sum over the whole growth series.
    """

    capacity = min(capacity, max_len)
    total = capacity * item_size
    while capacity < max_len:
        capacity = min(capacity * 2, max_len)
        total += capacity * item_size
    return total


def new_entry_table(arena: Arena, capacity: int = 20, *, name: str = "entries") -> Table[AggregateEntry]:
    return Table(arena, capacity, item_size=AGGREGATE_ENTRY_SIZE, name=name)


__all__ = [
    "Table",
    "MAX_ID",
    "block_footprint",
    "AggregateEntry",
    "compare_entry_value_desc",
    "new_entry_table",
]
