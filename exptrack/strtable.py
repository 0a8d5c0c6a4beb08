"""Interned string table: small integer IDs mapped to arena strings.

Slot 0 always holds the empty string and doubles as the "not set" sentinel, so
ID 0 means "no value" (for categories: uncategorized). ``find`` is a linear
scan starting at slot 1; that is fine for category tables (tens of entries).
Description tables can reach thousands of entries, so callers intern
descriptions without looking them up first.
"""

from __future__ import annotations

from collections.abc import Iterator

from .arena import SIZE_TINY, Arena, InternedStr
from .sorting import Comparator
from .table import MAX_ID, Table

# Bytes charged per slot: a pointer plus a length.
SLOT_SIZE = 16


class StringTable:
    """Append-only table of :class:`InternedStr` addressed by ID."""

    __slots__ = ("_slots",)

    def __init__(
        self,
        arena: Arena,
        capacity: int = 0,
        *,
        max_len: int = MAX_ID,
        name: str = "strings",
    ) -> None:
        if capacity == 0:
            capacity = SIZE_TINY
        self._slots: Table[InternedStr] = Table(
            arena, capacity, item_size=SLOT_SIZE, max_len=max_len, name=name
        )
        self._slots.add(InternedStr.EMPTY)

    @classmethod
    def _wrap(cls, slots: Table[InternedStr]) -> StringTable:
        table = cls.__new__(cls)
        table._slots = slots
        return table

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"StringTable(name={self.name!r}, len={len(self)}, capacity={self.capacity})"

    @property
    def name(self) -> str:
        return self._slots.name

    @property
    def arena(self) -> Arena:
        return self._slots.arena

    @property
    def capacity(self) -> int:
        return self._slots.capacity

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[InternedStr]:
        return iter(self._slots)

    def add(self, value: bytes | str | InternedStr) -> int:
        """Copy ``value`` into the arena, append it, and return its new ID."""

        return self._slots.add(self._intern(value))

    def replace(self, idx: int, value: bytes | str | InternedStr) -> None:
        """Point slot ``idx`` at a freshly interned copy of ``value``.

        The previous bytes stay in the arena until it is reset.
        """

        if not 0 <= idx < len(self._slots):
            raise IndexError(f"{self.name}: id {idx} out of range")
        self._slots.replace(idx, self._intern(value))

    def get(self, idx: int) -> InternedStr:
        """Return slot ``idx`` or the empty string when ``idx`` is out of range."""

        s = self._slots.get(idx)
        return InternedStr.EMPTY if s is None else s

    def find(self, value: bytes | str | InternedStr) -> int:
        """Return the first ID (>= 1) whose bytes equal ``value``, else 0."""

        needle = _as_bytes(value)
        for idx, s in enumerate(self._slots):
            if idx == 0:
                continue
            if s.data == needle:
                return idx
        return 0

    def duplicate(self, arena: Arena | None = None) -> StringTable:
        """Copy the slot array into ``arena`` (default: the same arena).

        String bytes are shared with this table; only the slot block is new.
        """

        return StringTable._wrap(self._slots.copy_into(arena or self.arena))

    def sort(self, cmp: Comparator[InternedStr], start: int = 1, stop: int | None = None) -> None:
        """Sort slots ``[start, stop)`` in place. Slot 0 never moves."""

        self._slots.sort(cmp, max(start, 1), stop)

    def _intern(self, value: bytes | str | InternedStr) -> InternedStr:
        return self.arena.intern(_as_bytes(value))


def _as_bytes(value: bytes | str | InternedStr) -> bytes:
    if isinstance(value, InternedStr):
        return value.data
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def compare_bytes(a: InternedStr, b: InternedStr) -> int:
    da, db = a.data, b.data
    return (da > db) - (da < db)


def compare_casefold(a: InternedStr, b: InternedStr) -> int:
    """Case-insensitive ordering; equal-ignoring-case strings tie."""

    ta, tb = a.text.casefold(), b.text.casefold()
    return (ta > tb) - (ta < tb)


__all__ = ["StringTable", "SLOT_SIZE", "compare_bytes", "compare_casefold"]
