"""Pytest configuration for test isolation.

The CLI reads the expense file location from ``EXP2FILE`` and falls back to
``~/expenses``. Tests must never touch a real ledger, so every test gets its
own expense file path under ``tmp_path`` and a clean set of ``EXPTRACK_*``
variables.

``configure_logging`` attaches its handler once per process. The Typer
callback calls it on every invocation, and ``CliRunner`` swaps ``sys.stderr``
per run, so the handler (and the module flag) are torn down after each test.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from exptrack import logging_setup
from exptrack.config import (
    EXPENSE_FILE_ENV,
    LEDGER_ARENA_ENV,
    LOG_LEVEL_ENV,
    SCRATCH_ARENA_ENV,
)


@pytest.fixture(autouse=True)
def expense_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``EXP2FILE`` at a per-test file (not created up front)."""

    path = tmp_path / "expenses"
    monkeypatch.setenv(EXPENSE_FILE_ENV, os.fspath(path))
    for name in (LEDGER_ARENA_ENV, SCRATCH_ARENA_ENV, LOG_LEVEL_ENV):
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the invoking directory out of the picture.
    monkeypatch.chdir(tmp_path)
    return path


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("exptrack")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logging_setup._CONFIGURED = False
