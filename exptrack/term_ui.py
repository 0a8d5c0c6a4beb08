"""Tiny terminal UI helpers (prompt_toolkit-based).

These prompts collect the fields of an expense for ``exp add`` and
``exp edit``. They are kept apart from the CLI handlers so each can be driven
in tests through a pipe input and a dummy output.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from prompt_toolkit import PromptSession, print_formatted_text
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.validation import ValidationError, Validator

from .dates import parse_iso_date
from .lines import DELIMITER, has_delimiter

LIST_REQUEST = "?"
TODAY_WORDS = frozenset({"-", "today"})


def _make_session(session: PromptSession | None) -> PromptSession:
    if session is None:
        return PromptSession()
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
    )


def _echo(sess: PromptSession, text: str) -> None:
    print_formatted_text(text, output=sess.output)


class _FieldValidator(Validator):
    """Free-text field: optionally required, never containing the delimiter."""

    def __init__(self, allow_empty: bool) -> None:
        self._allow_empty = allow_empty

    def validate(self, document) -> None:
        if not self._allow_empty and not document.text.strip():
            raise ValidationError(message="A value is required")
        if has_delimiter(document.text):
            raise ValidationError(message=f"'{DELIMITER}' is not allowed")


class _AmountValidator(Validator):
    def __init__(self, allow_empty: bool) -> None:
        self._allow_empty = allow_empty

    def validate(self, document) -> None:
        text = document.text.strip()
        if not text:
            if self._allow_empty:
                return
            raise ValidationError(message="Enter an amount")
        try:
            float(text)
        except ValueError:
            raise ValidationError(message=f"Not a number: {text}") from None


class _DateValidator(Validator):
    def validate(self, document) -> None:
        text = document.text.strip()
        if not text or text.lower() in TODAY_WORDS:
            return
        if parse_iso_date(text) is None:
            raise ValidationError(message="Use YYYY-MM-DD, 'today', or leave blank")


def prompt_text(
    message: str,
    *,
    default: str | None = None,
    session: PromptSession | None = None,
) -> str:
    """Ask for a line of text. Blank input keeps ``default`` when one is given."""

    sess = _make_session(session)
    if default:
        message = f"{message} [{default}]: "
    else:
        message = f"{message}: "
    value = sess.prompt(
        message, validator=_FieldValidator(bool(default)), validate_while_typing=False
    )
    value = value.strip()
    return value if value else (default or "")


def prompt_amount(
    message: str = "Amount",
    *,
    default: float | None = None,
    session: PromptSession | None = None,
) -> float:
    sess = _make_session(session)
    shown = f"{message} [{default:.2f}]: " if default is not None else f"{message}: "
    value = sess.prompt(
        shown, validator=_AmountValidator(default is not None), validate_while_typing=False
    ).strip()
    if not value and default is not None:
        return default
    return float(value)


def prompt_date(
    message: str = "Date",
    *,
    today: date,
    default: date | None = None,
    session: PromptSession | None = None,
) -> date:
    """Ask for a date; blank input means ``default`` (or ``today`` when unset)."""

    sess = _make_session(session)
    if default is not None:
        shown = f"{message} [{default.isoformat()}]: "
    else:
        shown = f"{message} (yyyy-mm-dd or leave blank for today): "
    value = sess.prompt(shown, validator=_DateValidator(), validate_while_typing=False).strip()
    if not value:
        return default if default is not None else today
    if value.lower() in TODAY_WORDS:
        return today
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(f"invalid date: {value!r}")
    return parsed


def select_category(
    categories: Sequence[str],
    *,
    default: str | None = None,
    session: PromptSession | None = None,
) -> str:
    """Prompt for a category name, offering known names as completions.

    - Enter on a blank line keeps ``default`` when one is given.
    - ``?`` prints the numbered list of known categories; answering with a
      number picks that category, ``0`` goes back to typing a (new) name.
    - Any other text is returned as typed; unknown names become new
      categories when the caller interns them.
    """

    words = list(categories)
    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=True)
    sess = _make_session(session)

    if default:
        message = f"Category [{default}] (enter '?' for list): "
    else:
        message = "Category (enter '?' for list): "

    while True:
        value = sess.prompt(
            message,
            completer=completer,
            validator=_FieldValidator(allow_empty=True),
            validate_while_typing=False,
        ).strip()
        if not value:
            if default:
                return default
            continue
        if value != LIST_REQUEST:
            # Reuse the stored spelling when the user typed a known name.
            for w in words:
                if w.lower() == value.lower():
                    return w
            return value
        if not words:
            _echo(sess, "No categories yet.")
            continue
        picked = _pick_from_list(sess, words)
        if picked is not None:
            return picked


def _pick_from_list(sess: PromptSession, words: Sequence[str]) -> str | None:
    _echo(sess, "Categories:")
    _echo(sess, "[0] (Enter new category)")
    for i, w in enumerate(words, start=1):
        _echo(sess, f"[{i}] {w}")
    _echo(sess, "")
    while True:
        raw = sess.prompt("Select category [n]: ").strip()
        if not raw.isdigit():
            continue
        n = int(raw)
        if n == 0:
            return None
        if 1 <= n <= len(words):
            return words[n - 1]


def confirm(message: str, *, session: PromptSession | None = None) -> bool:
    """Yes/no prompt; only ``y``/``yes`` (any case) counts as yes."""

    sess = _make_session(session)
    answer = sess.prompt(f"{message} (y/n): ").strip().lower()
    return answer in {"y", "yes"}


__all__ = [
    "prompt_text",
    "prompt_amount",
    "prompt_date",
    "select_category",
    "confirm",
    "LIST_REQUEST",
]
