"""Bump-pointer arena and the immutable strings interned into it.

An :class:`Arena` owns one ``bytearray`` and a moving offset. Allocations are
carved sequentially and are never freed individually; ``reset()`` rewinds the
offset and starts a new *generation*. Every :class:`Region` records the
generation it was carved from, so a handle kept across a reset raises
:class:`~exptrack.errors.StaleReferenceError` the moment it is touched instead
of silently reading bytes that a later allocation may have overwritten.

Typical lifetime::

    arena = Arena(SIZE_MEDIUM)
    s = arena.intern(b"coffee")      # valid for this generation
    arena.reset()                    # s.data now raises StaleReferenceError
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .errors import ArenaExhausted, StaleReferenceError
from .logging_setup import get_logger

SIZE_TINY = 512
SIZE_MEDIUM = 32 * 1024

_logger = get_logger("exptrack.arena")


class Arena:
    """Bump allocator over a fixed-capacity byte buffer."""

    __slots__ = ("_buf", "_offset", "_capacity", "_generation", "_destroyed")

    def __init__(self, capacity: int = 0) -> None:
        if capacity < 0:
            raise ValueError("arena capacity must be non-negative")
        if capacity == 0:
            capacity = SIZE_MEDIUM
        try:
            self._buf = bytearray(capacity)
        except MemoryError as e:
            raise ArenaExhausted(capacity, 0, 0) from e
        self._offset = 0
        self._capacity = capacity
        self._generation = 0
        self._destroyed = False

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (
            f"Arena(offset={self._offset}, capacity={self._capacity}, "
            f"generation={self._generation})"
        )

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def remaining(self) -> int:
        return self._capacity - self._offset

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def allocate(self, size: int) -> Region:
        """Carve ``size`` bytes from the current offset.

        Raises ``ArenaExhausted`` when the request does not fit; the arena is
        left unchanged in that case.
        """

        if self._destroyed:
            raise StaleReferenceError("allocation from a destroyed arena")
        if size < 0:
            raise ValueError("allocation size must be non-negative")
        if self._offset + size > self._capacity:
            raise ArenaExhausted(size, self.remaining, self._capacity)
        region = Region(self, self._generation, self._offset, size)
        self._offset += size
        return region

    def intern(self, data: bytes | str) -> InternedStr:
        """Copy ``data`` into the arena and return an immutable handle to it."""

        if isinstance(data, str):
            data = data.encode("utf-8")
        if not data:
            return InternedStr.EMPTY
        # One extra byte keeps the C-style terminator in the layout.
        region = self.allocate(len(data) + 1)
        region.write(data)
        return InternedStr(region, len(data))

    def reset(self) -> None:
        """Rewind to offset 0; all previously returned regions become stale."""

        if self._destroyed:
            raise StaleReferenceError("reset of a destroyed arena")
        _logger.debug(
            "arena reset: generation %d released %d bytes", self._generation, self._offset
        )
        self._offset = 0
        self._generation += 1

    def destroy(self) -> None:
        """Release the backing buffer. The arena cannot be used afterwards."""

        self._buf = bytearray()
        self._offset = 0
        self._capacity = 0
        self._generation += 1
        self._destroyed = True

    # Internal accessors used by Region
    def _check(self, generation: int) -> None:
        if self._destroyed:
            raise StaleReferenceError("arena has been destroyed")
        if generation != self._generation:
            raise StaleReferenceError(
                f"region from generation {generation} used after reset "
                f"(arena is at generation {self._generation})"
            )


@dataclass(frozen=True, slots=True)
class Region:
    """A span of arena memory tied to the generation it was allocated in."""

    arena: Arena
    generation: int
    offset: int
    size: int

    @property
    def valid(self) -> bool:
        return not self.arena.destroyed and self.generation == self.arena.generation

    def check(self) -> None:
        self.arena._check(self.generation)

    def view(self) -> memoryview:
        self.check()
        return memoryview(self.arena._buf)[self.offset : self.offset + self.size]

    def write(self, data: bytes, at: int = 0) -> None:
        if at < 0 or at + len(data) > self.size:
            raise ValueError("write outside of region bounds")
        self.check()
        start = self.offset + at
        self.arena._buf[start : start + len(data)] = data


@dataclass(frozen=True, slots=True, eq=False)
class InternedStr:
    """Immutable ``(region, length)`` handle to bytes stored in an arena.

    Equality and hashing use byte content, never identity. ``EMPTY`` has no
    region and stays valid across every reset.
    """

    EMPTY: ClassVar[InternedStr]

    region: Region | None
    length: int

    @property
    def data(self) -> bytes:
        if self.region is None:
            return b""
        return bytes(self.region.view()[: self.length])

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    @property
    def valid(self) -> bool:
        return self.region is None or self.region.valid

    def __len__(self) -> int:
        return self.length

    def __bool__(self) -> bool:
        return self.length > 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, InternedStr):
            return self.length == other.length and self.data == other.data
        if isinstance(other, bytes):
            return self.data == other
        if isinstance(other, str):
            return self.data == other.encode("utf-8")
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.data)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        if not self.valid:
            return "InternedStr(<stale>)"
        return f"InternedStr({self.text!r})"


InternedStr.EMPTY = InternedStr(None, 0)


__all__ = [
    "Arena",
    "Region",
    "InternedStr",
    "SIZE_TINY",
    "SIZE_MEDIUM",
]
