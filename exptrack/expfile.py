"""Expense file I/O: location, creation, reading, and safe rewriting.

Writes follow a two-step protocol: the previous file is moved to
``<file>.bak``, then the new content is written to ``<file>.tmp`` and moved
into place with ``os.replace``.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from os import PathLike
from pathlib import Path

from .errors import ExpenseLineError
from .logging_setup import get_logger

_logger = get_logger("exptrack.expfile")


def touch_expense_file(path: str | PathLike[str]) -> bool:
    """Create an empty expense file when missing. Returns ``True`` if created."""

    p = Path(path)
    if p.exists():
        return False
    p.parent.mkdir(parents=True, exist_ok=True)
    p.touch()
    _logger.info("expense file created: %s", p)
    return True


def read_lines(path: str | PathLike[str]) -> Iterator[tuple[int, str]]:
    """Yield ``(line_no, text)`` for each non-blank line, newline-stripped.

    Line numbers are 1-based and count blank lines too, so they match what an
    editor shows. A line that is not valid UTF-8 raises ``ExpenseLineError``.
    """

    with open(path, "rb") as f:
        for line_no, raw in enumerate(f, start=1):
            try:
                text = raw.decode("utf-8").rstrip("\r\n")
            except UnicodeDecodeError as e:
                raise ExpenseLineError(
                    line_no, f"invalid UTF-8 byte 0x{raw[e.start]:02x} at column {e.start + 1}"
                ) from None
            if not text.strip():
                continue
            yield line_no, text


def backup_path(path: str | PathLike[str]) -> Path:
    p = Path(path)
    return p.with_name(p.name + ".bak")


def write_lines(path: str | PathLike[str], lines: Iterable[str]) -> None:
    """Replace the file at ``path`` with ``lines``, keeping a ``.bak`` copy."""

    p = Path(path)
    tmp = p.with_name(p.name + ".tmp")
    count = 0
    with open(tmp, "w", encoding="utf-8", newline="\n") as f:
        for line in lines:
            f.write(line)
            f.write("\n")
            count += 1
    if p.exists():
        os.replace(p, backup_path(p))
    os.replace(tmp, p)
    _logger.info("wrote %d expenses to %s", count, p)


__all__ = ["touch_expense_file", "read_lines", "write_lines", "backup_path"]
