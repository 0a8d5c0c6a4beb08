"""Codec for the semicolon-delimited expense line format.

Sample line::

    2016-05-01; 00:00; Mochi Cream coffee; 100.00; coffee

Fields are ``DATE; TIME; DESCRIPTION; AMOUNT; CATEGORY``. ``TIME`` is kept
only for format compatibility and is always written as ``00:00``. Each field
after a delimiter may start with one space, which is dropped on read; missing
trailing fields read as empty and anything past the fifth field is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass

from .dates import parse_iso_date
from .errors import ExpenseLineError
from .expenses import Expense, ExpenseStore

DELIMITER = ";"
FIELD_COUNT = 5
PLACEHOLDER_TIME = "00:00"


@dataclass(frozen=True, slots=True)
class LineFields:
    date: str
    time: str
    description: str
    amount: str
    category: str


def has_delimiter(text: str | bytes) -> bool:
    """True when ``text`` would read back as more than one field."""

    if isinstance(text, bytes):
        return DELIMITER.encode() in text
    return DELIMITER in text


def split_fields(line: str) -> LineFields:
    """Split a raw line into its five text fields (no validation)."""

    line = line.rstrip("\r\n")
    parts = line.split(DELIMITER)[:FIELD_COUNT]
    parts = [parts[0]] + [p.removeprefix(" ") for p in parts[1:]]
    parts += [""] * (FIELD_COUNT - len(parts))
    return LineFields(*parts)


def read_expense(line: str, store: ExpenseStore, *, line_no: int = 0) -> Expense:
    """Parse ``line`` into a record, interning its strings into ``store``.

    Raises ``ExpenseLineError`` when the date or amount cannot be parsed.
    """

    fields = split_fields(line)
    when = parse_iso_date(fields.date)
    if when is None:
        raise ExpenseLineError(line_no, f"invalid date {fields.date!r}", line)
    try:
        amount = float(fields.amount)
    except ValueError:
        raise ExpenseLineError(line_no, f"invalid amount {fields.amount!r}", line) from None
    return store.new_expense(when, fields.description, amount, fields.category)


def format_expense(store: ExpenseStore, expense: Expense) -> str:
    """Serialize a record back to one line (without the newline)."""

    return (
        f"{expense.date.isoformat()}{DELIMITER} {PLACEHOLDER_TIME}{DELIMITER} "
        f"{store.description_of(expense).text}{DELIMITER} "
        f"{expense.amount:.2f}{DELIMITER} {store.category_of(expense).text}"
    )


__all__ = [
    "LineFields",
    "split_fields",
    "has_delimiter",
    "read_expense",
    "format_expense",
    "DELIMITER",
]
