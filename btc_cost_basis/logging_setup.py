"""Logger setup shared by the analyzer modules.

Modules log under ``btc_cost_basis.<module>`` through :func:`get_logger` and
never install handlers themselves. Until the console entry point calls
:func:`configure_logging`, records stop at a ``NullHandler`` on the
``btc_cost_basis`` logger, so importing the package stays silent.

The level comes from the caller, then from ``BTC_COST_BASIS_LOG_LEVEL``, then
defaults to ``INFO``. :func:`reset_logging` returns the package logger to its
unconfigured state between test cases.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "btc_cost_basis"
_CONFIGURED = False


def _level_from_name(name: str) -> int | None:
    # "10" or "debug" style values.
    name = name.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = getattr(logging, name, None)
    return numeric if isinstance(numeric, int) else None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        parsed = _level_from_name(level)
        if parsed is not None:
            return parsed
    # Fall back to the environment.
    env_val = os.getenv("BTC_COST_BASIS_LOG_LEVEL")
    if env_val:
        parsed = _level_from_name(env_val)
        if parsed is not None:
            return parsed
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Send package log records to ``stream`` at the resolved level.

    Only the first call has any effect. ``level`` may be a number or a level
    name; when it is missing or unrecognized the ``BTC_COST_BASIS_LOG_LEVEL``
    variable is consulted. Without ``stream`` the handler writes to whatever
    ``sys.stderr`` is at call time, which is what a test runner captures.
    Records do not propagate to the root logger afterwards.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    # Replace the placeholder installed by get_logger().
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(
        logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s")
    )

    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Records stop here; the root logger never sees them.
    logger.propagate = False

    _CONFIGURED = True


def reset_logging() -> None:
    """Undo :func:`configure_logging` (used by tests and embedding hosts)."""

    global _CONFIGURED
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logger.addHandler(logging.NullHandler())
    _CONFIGURED = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name, attaching a ``NullHandler`` to the package
    root until the central configuration has run."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
