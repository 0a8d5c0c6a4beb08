"""Public interface for the ``exptrack`` package.

This module exposes the ledger types and report functions as the stable
import surface. There is no runtime logic here, only symbol re-exports.
"""

from .arena import Arena, InternedStr, Region
from .config import Settings, load_settings
from .dates import DateRange, PartialDate, parse_filter_args, parse_partial_date, resolve_range
from .errors import (
    ArenaExhausted,
    CapacityExceeded,
    ExpenseLineError,
    ExptrackError,
    FatalLedgerError,
    StaleReferenceError,
)
from .expenses import Expense, ExpenseStore, compare_by_date
from .query import (
    AggregateReport,
    ExpenseListing,
    ListingRow,
    aggregate_by_category,
    iter_listing,
    list_expenses,
    locate_range,
    year_to_date,
)
from .session import LedgerSession
from .strtable import StringTable
from .table import AggregateEntry, Table

__all__ = [
    # Memory and tables
    "Arena",
    "Region",
    "InternedStr",
    "Table",
    "AggregateEntry",
    "StringTable",
    # Records
    "Expense",
    "ExpenseStore",
    "compare_by_date",
    # Queries
    "DateRange",
    "PartialDate",
    "parse_partial_date",
    "parse_filter_args",
    "resolve_range",
    "locate_range",
    "iter_listing",
    "list_expenses",
    "aggregate_by_category",
    "year_to_date",
    "ListingRow",
    "ExpenseListing",
    "AggregateReport",
    # Session / config
    "LedgerSession",
    "Settings",
    "load_settings",
    # Errors
    "ExptrackError",
    "FatalLedgerError",
    "ArenaExhausted",
    "CapacityExceeded",
    "StaleReferenceError",
    "ExpenseLineError",
]
