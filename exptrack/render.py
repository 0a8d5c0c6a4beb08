"""Plain-text rendering of listings and reports.

Every function returns a list of lines (no trailing newlines) so callers can
print, page, or compare them in tests.
"""

from __future__ import annotations

from .dates import DateRange
from .expenses import Expense, ExpenseStore
from .query import AggregateReport, ExpenseListing

RULE = "-" * 72
UNCATEGORIZED_LABEL = "uncategorized"
NO_EXPENSES = "No expenses found."


def _range_line(interval: DateRange) -> str:
    return f"Date range [{interval.start.isoformat()}] to [{interval.last_day.isoformat()}]"


def render_listing(listing: ExpenseListing) -> list[str]:
    lines = ["Display: Expenses", _range_line(listing.interval)]
    if listing.category:
        lines.append(f"Filter by category [{listing.category}]")
    lines.append("")
    if not listing.in_range:
        lines.append(NO_EXPENSES)
        return lines
    for row in listing.rows:
        lines.append(
            f"{row.date.isoformat():<12} {row.description[:30]:<30} {row.amount:9.2f}  "
            f"{row.category:<10}  #{row.recno:<5}".rstrip()
        )
    lines.append(RULE)
    lines.append(f"{'Totals':<12} {'':<30} {listing.total:9.2f}".rstrip())
    return lines


def render_report(report: AggregateReport, title: str) -> list[str]:
    lines = [f"Display: {title}", _range_line(report.interval), ""]
    if report.empty:
        lines.append(NO_EXPENSES)
        return lines
    for entry in report.entries:
        label = entry.label.text or UNCATEGORIZED_LABEL
        lines.append(f"{label[:15]:<15} {entry.value:12.2f}")
    lines.append(RULE)
    lines.append(f"{'Totals':<15} {report.total:12.2f}")
    return lines


def render_expense(store: ExpenseStore, expense: Expense) -> str:
    """One-line summary used by add/edit/delete confirmations."""

    return (
        f"{expense.date.isoformat()}; {store.description_of(expense).text}; "
        f"{expense.amount:.2f}; {store.category_of(expense).text}"
    )


__all__ = ["render_listing", "render_report", "render_expense", "RULE", "NO_EXPENSES"]
