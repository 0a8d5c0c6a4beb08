"""Exception hierarchy for ``exptrack``.

Two families matter to callers:

- Fatal ledger errors (``ArenaExhausted``, ``CapacityExceeded``) signal that a
  configured limit was exceeded. They are non-retryable; the CLI reports them
  and exits without attempting a partial result.
- Input errors (``ExpenseLineError``) describe a malformed line in the expense
  file and carry the offending line number.

Soft outcomes (out-of-range lookups, empty date ranges) are never exceptions;
they are expressed as return values (``None``, the empty string, an empty
listing).
"""

from __future__ import annotations


class ExptrackError(Exception):
    """Base class for all package errors."""


class FatalLedgerError(ExptrackError):
    """A sizing limit was exceeded; the current operation cannot continue."""


class ArenaExhausted(FatalLedgerError):
    """An arena could not satisfy an allocation request."""

    def __init__(self, requested: int, remaining: int, capacity: int) -> None:
        super().__init__(
            f"arena exhausted: requested {requested} bytes, "
            f"{remaining} of {capacity} remaining"
        )
        self.requested = requested
        self.remaining = remaining
        self.capacity = capacity


class CapacityExceeded(FatalLedgerError):
    """A table is already at its maximum representable ID count."""

    def __init__(self, name: str, max_len: int) -> None:
        super().__init__(f"{name}: maximum capacity reached ({max_len})")
        self.name = name
        self.max_len = max_len


class StaleReferenceError(RuntimeError):
    """A region was used after its arena was reset or destroyed."""


class ExpenseLineError(ExptrackError, ValueError):
    """A line of the expense file could not be parsed."""

    def __init__(self, line_no: int, reason: str, line: str = "") -> None:
        msg = f"line {line_no}: {reason}"
        if line:
            msg += f" ({line!r})"
        super().__init__(msg)
        self.line_no = line_no
        self.reason = reason
        self.line = line


__all__ = [
    "ExptrackError",
    "FatalLedgerError",
    "ArenaExhausted",
    "CapacityExceeded",
    "StaleReferenceError",
    "ExpenseLineError",
]
