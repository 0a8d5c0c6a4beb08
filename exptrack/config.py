"""Runtime settings resolved from the environment.

Environment variables
---------------------
``EXP2FILE``
    Path of the expense file. When unset or blank, ``~/expenses`` is used.
``EXPTRACK_LEDGER_ARENA_SIZE``
    Bytes reserved for the arena that holds loaded records and strings.
``EXPTRACK_SCRATCH_ARENA_SIZE``
    Bytes reserved for the scratch arena (report rows, temporary tables).
``EXPTRACK_LOG_LEVEL``
    Logging level name or number for the CLI.

The CLI loads a ``.env`` file from the working directory before reading these
(existing variables win).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from .arena import SIZE_MEDIUM
from .expenses import ledger_footprint

EXPENSE_FILE_ENV = "EXP2FILE"
LEDGER_ARENA_ENV = "EXPTRACK_LEDGER_ARENA_SIZE"
SCRATCH_ARENA_ENV = "EXPTRACK_SCRATCH_ARENA_SIZE"
LOG_LEVEL_ENV = "EXPTRACK_LOG_LEVEL"

DEFAULT_FILENAME = "expenses"

# Room for every table at its maximum size with typical string lengths.
DEFAULT_LEDGER_ARENA_SIZE = ledger_footprint()


class Settings(BaseModel):
    """Validated, immutable settings for one CLI invocation."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    expense_file: Path | None = None
    ledger_arena_size: int = DEFAULT_LEDGER_ARENA_SIZE
    scratch_arena_size: int = SIZE_MEDIUM
    log_level: str | None = None

    @field_validator("ledger_arena_size", "scratch_arena_size")
    @classmethod
    def _positive_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("arena size must be a positive number of bytes")
        return v

    @field_validator("expense_file", mode="before")
    @classmethod
    def _blank_path_is_unset(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def resolve_expense_file(self) -> Path:
        """Return the configured expense file, else ``<home>/expenses``."""

        if self.expense_file is not None:
            return self.expense_file.expanduser()
        return Path.home() / DEFAULT_FILENAME


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``).

    Raises ``pydantic.ValidationError`` for malformed values.
    """

    env = os.environ if environ is None else environ
    values: dict[str, object] = {}
    if env.get(EXPENSE_FILE_ENV):
        values["expense_file"] = env[EXPENSE_FILE_ENV]
    if env.get(LEDGER_ARENA_ENV):
        values["ledger_arena_size"] = env[LEDGER_ARENA_ENV]
    if env.get(SCRATCH_ARENA_ENV):
        values["scratch_arena_size"] = env[SCRATCH_ARENA_ENV]
    if env.get(LOG_LEVEL_ENV):
        values["log_level"] = env[LOG_LEVEL_ENV]
    return Settings.model_validate(values)


__all__ = [
    "Settings",
    "load_settings",
    "EXPENSE_FILE_ENV",
    "LEDGER_ARENA_ENV",
    "SCRATCH_ARENA_ENV",
    "LOG_LEVEL_ENV",
    "DEFAULT_LEDGER_ARENA_SIZE",
]
