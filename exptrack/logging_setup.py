"""Logging configuration shared by every ``exptrack`` module.

Modules obtain loggers with ``get_logger("exptrack.<module>")`` and never add
handlers themselves. The ``exp`` entrypoint calls ``configure_logging`` once,
which installs a single stderr handler on the ``exptrack`` logger. Until that
happens (library use, most tests) the package logger carries a
``NullHandler`` so nothing is printed.

Reports go to stdout, so the default level is WARNING: table growth and arena
resets (DEBUG) and file loads/saves (INFO) only show up when
``EXPTRACK_LOG_LEVEL`` asks for them.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "exptrack"
LEVEL_ENV = "EXPTRACK_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_CONFIGURED = False


def _resolve_level(level: int | str | None) -> int:
    """Turn ``level`` (int, name or digit string) into a numeric level.

    ``None`` and unknown names fall back to ``EXPTRACK_LOG_LEVEL``, then to
    :data:`DEFAULT_LEVEL`.
    """

    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
    from_env = os.getenv(LEVEL_ENV)
    if from_env and from_env != level:
        return _resolve_level(from_env)
    return DEFAULT_LEVEL


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Install the package handler; later calls are no-ops.

    ``stream`` defaults to the ``sys.stderr`` in effect at call time, so the
    CLI's output capture in tests sees log lines too.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    pkg = logging.getLogger(PACKAGE_LOGGER)
    for h in list(pkg.handlers):
        if isinstance(h, logging.NullHandler):
            pkg.removeHandler(h)

    resolved = _resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    pkg.setLevel(resolved)
    pkg.addHandler(handler)
    # Root handlers installed by a host application would print twice.
    pkg.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if not _CONFIGURED and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "DEFAULT_LEVEL", "LEVEL_ENV"]
