"""CLI for the ``exptrack`` package (installed as ``exp``).

This module exposes callable command handlers (``cmd_add``, ``cmd_list``, ...)
that return a process exit code, and a Typer-based console interface that
wraps them. Environment variables (notably ``EXP2FILE``) may come from a local
``.env``, loaded with ``python-dotenv`` before any command runs. Ledger logic
lives in :mod:`exptrack.session` and the modules it composes.

Exit codes: ``0`` success, ``1`` bad input or file problems, ``2`` a fatal
ledger limit (arena or table capacity) was hit.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from pydantic import ValidationError

from .config import EXPENSE_FILE_ENV, load_settings
from .dates import parse_filter_args, parse_iso_date
from .errors import ExpenseLineError, FatalLedgerError
from .expenses import Expense, ExpenseStore
from .lines import DELIMITER, has_delimiter
from .logging_setup import configure_logging, get_logger
from .render import render_expense, render_listing, render_report
from .session import LedgerSession
from .term_ui import TODAY_WORDS, confirm, prompt_amount, prompt_date, prompt_text, select_category

_logger = get_logger("exptrack.cli")


# ---- Small module-level helpers used by CLI commands -------------------------


def _today() -> date:
    return date.today()


def _error(msg: str) -> None:
    print(f"Error: {msg}", file=sys.stderr)


def _emit(lines: Sequence[str]) -> None:
    for line in lines:
        print(line)


def _open_session() -> LedgerSession | None:
    try:
        return LedgerSession(load_settings())
    except ValidationError as e:
        _error(f"invalid configuration: {e}")
        return None


def _load(session: LedgerSession) -> ExpenseStore | None:
    """Load the expense file, reporting problems on stderr.

    Fatal ledger errors propagate to :func:`_run`.
    """

    try:
        return session.load()
    except ExpenseLineError as e:
        _error(f"{session.path}: {e}")
    except PermissionError:
        _error(f"Permission denied: {session.path}")
    except OSError as e:
        _error(f"Failed to read '{session.path}': {e}")
    return None


def _save(session: LedgerSession) -> bool:
    try:
        session.save()
    except OSError as e:
        _error(f"Failed to write '{session.path}': {e}")
        return False
    return True


def _parse_amount(text: str | None) -> float | None:
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _parse_when(text: str | None, today: date) -> date | None:
    if text is None:
        return None
    if text.strip().lower() in TODAY_WORDS:
        return today
    return parse_iso_date(text)


def _run(handler, *args, **kwargs) -> int:
    """Invoke a command handler, mapping fatal ledger errors to exit code 2."""

    try:
        return handler(*args, **kwargs)
    except FatalLedgerError as e:
        _logger.error("fatal ledger error: %s", e)
        _error(str(e))
        return 2


# ---- Command handlers ---------------------------------------------------------


def cmd_add(
    description: str | None = None,
    amount: str | None = None,
    category: str | None = None,
    when: str | None = None,
    *,
    prompt_session: PromptSession | None = None,
) -> int:
    """Add one expense; any value not given on the command line is prompted.

    ``when`` accepts ``YYYY-MM-DD``, ``-`` or ``today``. An unparseable amount
    or date is asked for again interactively.
    """

    for label, value in (("description", description), ("category", category)):
        if value and has_delimiter(value):
            _error(f"{label} must not contain '{DELIMITER}': {value!r}")
            return 1

    today = _today()
    session = _open_session()
    if session is None:
        return 1
    with session:
        store = _load(session)
        if store is None:
            return 1

        desc = (description or "").strip()
        if not desc:
            desc = prompt_text("Expense Description", session=prompt_session)
        amt = _parse_amount(amount)
        if amt is None:
            amt = prompt_amount(session=prompt_session)
        cat = (category or "").strip()
        if not cat:
            cat = select_category(store.category_names(), session=prompt_session)
        dt = _parse_when(when, today)
        if dt is None:
            dt = prompt_date(today=today, session=prompt_session)

        expense = store.new_expense(dt, desc, amt, cat)
        store.add(expense)
        if not _save(session):
            print("Record not added.")
            return 1
        print("Record added.")
        print(render_expense(store, expense))
    return 0


def _resolve_record(store: ExpenseStore, recno: int) -> tuple[int, Expense] | None:
    """Map a 1-based record number to ``(index, record)``."""

    expense = store.get(recno - 1) if recno >= 1 else None
    if expense is None:
        print("Record out of range.", file=sys.stderr)
        return None
    return recno - 1, expense


def cmd_edit(recno: int, *, prompt_session: PromptSession | None = None) -> int:
    """Edit record ``recno`` (1-based, as shown by ``exp list``) field by field.

    Each prompt shows the current value; pressing Enter keeps it.
    """

    today = _today()
    session = _open_session()
    if session is None:
        return 1
    with session:
        store = _load(session)
        if store is None:
            return 1
        found = _resolve_record(store, recno)
        if found is None:
            return 1
        idx, current = found

        old_desc = store.description_of(current).text
        desc = prompt_text("Description", default=old_desc, session=prompt_session)
        amt = prompt_amount(default=current.amount, session=prompt_session)
        cat = select_category(
            store.category_names(),
            default=store.category_of(current).text or None,
            session=prompt_session,
        )
        dt = prompt_date(today=today, default=current.date, session=prompt_session)

        updated = current.with_changes(
            date=dt,
            amount=amt,
            category_id=store.intern_category(cat),
        )
        if desc != old_desc:
            updated = updated.with_changes(description_id=store.descriptions.add(desc))
        store.replace(idx, updated)
        if not _save(session):
            print("Record not updated.")
            return 1
        print("Record updated.")
        print(render_expense(store, updated))
    return 0


def cmd_del(
    recno: int,
    *,
    assume_yes: bool = False,
    prompt_session: PromptSession | None = None,
) -> int:
    """Delete record ``recno`` after showing it and asking for confirmation."""

    session = _open_session()
    if session is None:
        return 1
    with session:
        store = _load(session)
        if store is None:
            return 1
        found = _resolve_record(store, recno)
        if found is None:
            return 1
        idx, expense = found
        print()
        print(render_expense(store, expense))
        if not assume_yes and not confirm("Delete?", session=prompt_session):
            return 0
        store.delete(idx)
        if not _save(session):
            return 1
        print("Record deleted.")
    return 0


def cmd_list(args: Sequence[str] = ()) -> int:
    """List expenses for ``[CAT] [YEAR | YEAR-MONTH | DATE | START END]``."""

    try:
        filters = parse_filter_args(args, today=_today())
    except ValueError as e:
        _error(f"invalid date: {e}")
        return 1
    session = _open_session()
    if session is None:
        return 1
    with session:
        if _load(session) is None:
            return 1
        _emit(render_listing(session.listing(filters.interval, filters.category)))
    return 0


def cmd_cat(args: Sequence[str] = ()) -> int:
    """Category subtotals for ``[YEAR | YEAR-MONTH | DATE | START END]``."""

    try:
        filters = parse_filter_args(args, today=_today())
    except ValueError as e:
        _error(f"invalid date: {e}")
        return 1
    session = _open_session()
    if session is None:
        return 1
    with session:
        if _load(session) is None:
            return 1
        _emit(render_report(session.category_report(filters.interval), "Categories"))
    return 0


def cmd_ytd(year: int | None = None) -> int:
    """Monthly totals for ``year`` (default: the current year) up to today."""

    today = _today()
    session = _open_session()
    if session is None:
        return 1
    with session:
        if _load(session) is None:
            return 1
        report = session.ytd_report(year if year is not None else today.year, today=today)
        _emit(render_report(report, "Year to date"))
    return 0


def cmd_info() -> int:
    try:
        settings = load_settings()
    except ValidationError as e:
        _error(f"invalid configuration: {e}")
        return 1
    print("exp config info")
    print()
    print(f"    expense file  : {settings.resolve_expense_file()}")
    print()
    print(f"Set the {EXPENSE_FILE_ENV} environment var to change the active expense file.")
    print("Expense file will be created automatically when you add or display expenses.")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "exp - Utility for keeping track and reporting of daily expenses. "
        f"Expenses are stored in a plain text file (${EXPENSE_FILE_ENV} or ~/expenses)."
    ),
)


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


@app.command("add")
def add_cmd(
    description: Annotated[str | None, typer.Argument(help="Description of the expense.")] = None,
    amount: Annotated[str | None, typer.Argument(help="Numeric amount.")] = None,
    category: Annotated[str | None, typer.Argument(help="Category name.")] = None,
    when: Annotated[
        str | None, typer.Argument(metavar="[DATE]", help="YYYY-MM-DD; defaults to today.")
    ] = None,
) -> None:
    """Add an expense. Missing values are prompted for."""

    _exit(_run(cmd_add, description, amount, category, when))


@app.command("edit")
def edit_cmd(
    recno: Annotated[int, typer.Argument(help="Record number (#nnn) shown by 'exp list'.")],
) -> None:
    """Edit an expense."""

    _exit(_run(cmd_edit, recno))


@app.command("del")
def del_cmd(
    recno: Annotated[int, typer.Argument(help="Record number (#nnn) shown by 'exp list'.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
) -> None:
    """Delete an expense."""

    _exit(_run(cmd_del, recno, assume_yes=yes))


@app.command("list")
def list_cmd(
    args: Annotated[
        list[str] | None,
        typer.Argument(
            metavar="[CAT] [YEAR | YEAR-MONTH | DATE | STARTDATE ENDDATE]",
            help="Optional category, then a date or a date range.",
        ),
    ] = None,
) -> None:
    """Display list of expenses (default: current month)."""

    _exit(_run(cmd_list, args or []))


@app.command("cat")
def cat_cmd(
    args: Annotated[
        list[str] | None,
        typer.Argument(
            metavar="[YEAR | YEAR-MONTH | DATE | STARTDATE ENDDATE]",
            help="A date or a date range.",
        ),
    ] = None,
) -> None:
    """Display category subtotals (default: current month)."""

    _exit(_run(cmd_cat, args or []))


@app.command("ytd")
def ytd_cmd(
    year: Annotated[int | None, typer.Argument(help="Year in YYYY format.")] = None,
) -> None:
    """Display year-to-date monthly subtotals."""

    _exit(_run(cmd_ytd, year))


@app.command("info")
def info_cmd() -> None:
    """Display expense file location and other info."""

    _exit(cmd_info())


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    try:
        level = load_settings().log_level
    except ValidationError:
        level = None
    configure_logging(level)


def main() -> None:  # pragma: no cover - console script shim
    app()


if __name__ == "__main__":  # pragma: no cover
    app()
