"""Descriptive statistics over priced deposits."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import EnrichedTransaction, StatisticsSummary


def median(values: Iterable[float]) -> float:
    """Median of ``values``; the mean of the two middle values for even counts."""

    ordered = sorted(values)
    n = len(ordered)
    if n == 0:
        raise ValueError("median() requires at least one value")
    mid = n // 2
    if n % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def compute_statistics(transactions: Sequence[EnrichedTransaction]) -> StatisticsSummary:
    """Summarize prices, totals and the volume-weighted average price.

    ``weighted_average`` is ``total_usd / total_btc``, so larger deposits pull
    it harder than the plain ``average`` of prices.

    Raises ``ValueError`` for an empty sequence or a zero BTC total.
    """

    if not transactions:
        raise ValueError("compute_statistics() requires at least one transaction")

    prices = [tx.btc_price for tx in transactions]
    total_btc = sum(tx.btc_amount for tx in transactions)
    total_usd = sum(tx.usd_cost for tx in transactions)
    if total_btc == 0:
        raise ValueError("total BTC is zero; weighted average is undefined")

    return StatisticsSummary(
        count=len(transactions),
        average=sum(prices) / len(prices),
        median=median(prices),
        total_btc=total_btc,
        total_usd=total_usd,
        weighted_average=total_usd / total_btc,
    )


__all__ = ["compute_statistics", "median"]
