"""Run configuration and environment-derived settings.

Environment variables (a ``.env`` in the working directory is loaded by the
CLI first):

- ``BTC_COST_BASIS_PRICE_URL``: historical price endpoint override.
- ``BTC_COST_BASIS_API_KEY``: optional price service API key.
- ``BTC_COST_BASIS_REQUEST_DELAY``: seconds between price requests.
- ``BTC_COST_BASIS_TIMEOUT``: per-request timeout in seconds.
- ``BTC_COST_BASIS_LOG_LEVEL``: read by :mod:`btc_cost_basis.logging_setup`.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .prices import DEFAULT_PRICE_URL, DEFAULT_TIMEOUT_SEC

DEFAULT_REQUEST_DELAY_SEC: float = 3.0


@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    """Inputs for one pipeline run, resolved once by the entry point."""

    csv_path: Path
    start_date: datetime | None = None
    request_delay: float = DEFAULT_REQUEST_DELAY_SEC

    def __post_init__(self) -> None:
        if not math.isfinite(self.request_delay) or self.request_delay < 0:
            raise ValueError("request_delay must be a non-negative number of seconds")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if not math.isfinite(value) or value < 0:
        return default
    return value


def resolve_request_delay(explicit: float | None = None) -> float:
    """Seconds to wait between price requests.

    An explicit value wins; otherwise ``BTC_COST_BASIS_REQUEST_DELAY`` when it
    holds a non-negative number, else 3 seconds.
    """

    if explicit is not None:
        return explicit
    return _env_float("BTC_COST_BASIS_REQUEST_DELAY", DEFAULT_REQUEST_DELAY_SEC)


def resolve_timeout() -> float:
    timeout = _env_float("BTC_COST_BASIS_TIMEOUT", DEFAULT_TIMEOUT_SEC)
    return timeout if timeout > 0 else DEFAULT_TIMEOUT_SEC


def resolve_price_url() -> str:
    url = (os.getenv("BTC_COST_BASIS_PRICE_URL") or "").strip()
    return url or DEFAULT_PRICE_URL


def resolve_api_key() -> str | None:
    key = (os.getenv("BTC_COST_BASIS_API_KEY") or "").strip()
    return key or None


__all__ = [
    "DEFAULT_REQUEST_DELAY_SEC",
    "AnalysisConfig",
    "resolve_api_key",
    "resolve_price_url",
    "resolve_request_delay",
    "resolve_timeout",
]
