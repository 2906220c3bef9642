"""Bitcoin deposit selection over parsed ledger records.

Pure functions only: no I/O, no logging of individual rows. A row is kept when
it is a ``deposit`` into ``BTC`` with a usable ``INAMOUNT`` and, when a start
date is given, a ``DATE`` on or after it.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import UTC, datetime

from .models import Record

# Ledger column names
DATE = "DATE"
TYPE = "TYPE"
INCURRENCY = "INCURRENCY"
INAMOUNT = "INAMOUNT"

DEPOSIT_TYPE = "deposit"
BTC = "BTC"


def parse_timestamp(raw: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Accepts ``YYYY-MM-DD``, ``YYYY-MM-DDTHH:MM[:SS[.ffffff]]`` (``T`` or space
    separator) with an optional ``Z`` or ``±HH:MM`` offset. Returns ``None``
    when the value is empty or unparseable.
    """

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def parse_amount(raw: str | None) -> float | None:
    """Return the amount as a finite positive float, else ``None``."""

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    try:
        value = float(s)
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def is_bitcoin_deposit(record: Record, min_date: datetime | None = None) -> bool:
    """Return True when ``record`` is a BTC deposit passing the date threshold.

    An unparseable ``DATE`` only disqualifies the row when ``min_date`` is
    given; without a threshold such a row passes and fails later, at price
    lookup time.
    """

    if record.get(TYPE) != DEPOSIT_TYPE or record.get(INCURRENCY) != BTC:
        return False

    if min_date is not None:
        when = parse_timestamp(record.get(DATE))
        if when is None or when < _as_aware(min_date):
            return False

    return parse_amount(record.get(INAMOUNT)) is not None


def filter_bitcoin_deposits(
    records: Iterable[Record], min_date: datetime | None = None
) -> list[Record]:
    """Select Bitcoin deposits in input order."""

    return [r for r in records if is_bitcoin_deposit(r, min_date)]


def _as_aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


__all__ = [
    "DATE",
    "INAMOUNT",
    "INCURRENCY",
    "TYPE",
    "filter_bitcoin_deposits",
    "is_bitcoin_deposit",
    "parse_amount",
    "parse_timestamp",
]
