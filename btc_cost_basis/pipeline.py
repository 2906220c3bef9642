"""Sequential cost-basis pipeline: read, filter, price, summarize.

Price lookups run one at a time with a fixed pause between consecutive
requests; a failed lookup is logged and skipped, never fatal. Only reading the
ledger can abort a run (:class:`LedgerReadError` propagates to the caller).
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Literal, Protocol, TypeAlias

from .config import AnalysisConfig
from .deposits import DATE, INAMOUNT, filter_bitcoin_deposits, parse_amount, parse_timestamp
from .errors import PriceFetchError
from .ledger import load_ledger_text, parse_records
from .logging_setup import get_logger
from .models import AnalysisResult, EnrichedTransaction, PriceFailure, Record
from .stats import compute_statistics

_logger = get_logger("btc_cost_basis.pipeline")

ProgressCallback: TypeAlias = Callable[[Record, int, int], None]
"""Called before each deposit is priced with ``(record, position, total)``;
``position`` is 1-based."""

Stage: TypeAlias = Literal["reading", "parsing", "filtering", "filtered", "pricing"]

StageCallback: TypeAlias = Callable[[Stage, int], None]
"""Called as :func:`run_analysis` enters each stage. The count is the number
of deposits for ``"filtered"`` and ``"pricing"``, the number of parsed records
for ``"filtering"``, and ``0`` before anything has been parsed."""


class PriceLookup(Protocol):
    def fetch_price(self, when: datetime) -> float: ...


def enrich_deposits(
    deposits: Sequence[Record],
    resolver: PriceLookup,
    *,
    request_delay: float,
    sleep: Callable[[float], None] | None = None,
    on_progress: ProgressCallback | None = None,
) -> tuple[list[EnrichedTransaction], list[PriceFailure]]:
    """Price each deposit in order and return ``(priced, failures)``.

    ``sleep(request_delay)`` runs before every network lookup except the
    first, so N lookups pause N-1 times and nothing waits after the last one.
    ``sleep`` defaults to :func:`time.sleep`. A deposit whose ``DATE`` cannot
    be parsed is recorded as a failure without issuing a request, and so is a
    lookup that returns a price that is not a positive finite number.
    """

    pause = sleep if sleep is not None else time.sleep
    priced: list[EnrichedTransaction] = []
    failures: list[PriceFailure] = []
    total = len(deposits)
    looked_up = False

    for position, record in enumerate(deposits, start=1):
        raw_date = record.get(DATE, "")
        if on_progress is not None:
            on_progress(record, position, total)

        try:
            when = parse_timestamp(raw_date)
            if when is None:
                raise PriceFetchError(f"Invalid transaction date: {raw_date!r}")
            amount = parse_amount(record.get(INAMOUNT))
            if amount is None:
                raise PriceFetchError(f"Invalid BTC amount: {record.get(INAMOUNT)!r}")

            if looked_up and request_delay > 0:
                pause(request_delay)
            looked_up = True
            price = resolver.fetch_price(when)
            if not (math.isfinite(price) and price > 0):
                raise PriceFetchError(f"Unusable price for {raw_date}: {price!r}")
            tx = EnrichedTransaction.from_lookup(when, amount, price)
        except PriceFetchError as e:
            _logger.warning("Could not fetch price for %s: %s", raw_date, e)
            failures.append(PriceFailure(date=raw_date, message=str(e)))
            continue

        priced.append(tx)
        _logger.debug(
            "enrich:priced position=%d total=%d date=%s price=%.2f",
            position,
            total,
            raw_date,
            price,
        )

    return priced, failures


def run_analysis(
    config: AnalysisConfig,
    resolver: PriceLookup,
    *,
    sleep: Callable[[float], None] | None = None,
    on_progress: ProgressCallback | None = None,
    on_stage: StageCallback | None = None,
) -> AnalysisResult:
    """Run the full pipeline for ``config``.

    ``deposits`` on the result is empty when nothing matched the filter, and
    ``summary`` is ``None`` when no price could be resolved; callers report
    both as informational outcomes.
    """

    def _stage(stage: Stage, count: int = 0) -> None:
        if on_stage is not None:
            on_stage(stage, count)

    _stage("reading")
    text = load_ledger_text(config.csv_path)

    _stage("parsing")
    records = parse_records(text)

    _stage("filtering", len(records))
    deposits = filter_bitcoin_deposits(records, config.start_date)
    _logger.info(
        "analysis:filtered records=%d deposits=%d start_date=%s",
        len(records),
        len(deposits),
        config.start_date.date().isoformat() if config.start_date else "-",
    )
    _stage("filtered", len(deposits))

    if not deposits:
        return AnalysisResult(deposits=(), transactions=(), failures=(), summary=None)

    _stage("pricing", len(deposits))
    priced, failures = enrich_deposits(
        deposits,
        resolver,
        request_delay=config.request_delay,
        sleep=sleep,
        on_progress=on_progress,
    )
    if failures:
        _logger.info("analysis:skipped count=%d", len(failures))

    summary = compute_statistics(priced) if priced else None
    return AnalysisResult(
        deposits=tuple(deposits),
        transactions=tuple(priced),
        failures=tuple(failures),
        summary=summary,
    )


__all__ = ["PriceLookup", "Stage", "enrich_deposits", "run_analysis"]
