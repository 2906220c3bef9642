"""Plain-text rendering of an analysis summary and its transactions."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .models import EnrichedTransaction, StatisticsSummary

RULE_WIDTH = 60
# Column widths for the transaction table (last column is unpadded)
DATE_COL = 25
AMOUNT_COL = 15
PRICE_COL = 15


def format_transaction_row(tx: EnrichedTransaction) -> str:
    return (
        tx.date.date().isoformat().ljust(DATE_COL)
        + f"{tx.btc_amount:.8f}".ljust(AMOUNT_COL)
        + f"${tx.btc_price:.2f}".ljust(PRICE_COL)
        + f"${tx.usd_cost:.2f}"
    )


def format_report(
    summary: StatisticsSummary,
    transactions: Iterable[EnrichedTransaction],
    *,
    start_date: datetime | None = None,
) -> str:
    """Render the results banner, statistics and per-transaction table.

    The output starts with a blank line and has no trailing newline.
    """

    heavy = "=" * RULE_WIDTH
    light = "-" * RULE_WIDTH

    lines = ["", heavy, "BITCOIN COST ANALYSIS RESULTS", heavy]
    if start_date is not None:
        lines.append(f"Start Date Filter: {start_date.strftime('%Y-%m-%d')}")
    lines += [
        f"Total Transactions Analyzed: {summary.count}",
        f"Total BTC Deposited: {summary.total_btc:.8f} BTC",
        f"Total USD Cost: ${summary.total_usd:.2f}",
        "",
        "BITCOIN PRICE STATISTICS:",
        f"Average BTC Price: ${summary.average:.2f}",
        f"Median BTC Price: ${summary.median:.2f}",
        f"Weighted Average Cost: ${summary.weighted_average:.2f} per BTC",
        "",
        "TRANSACTION DETAILS:",
        light,
        "Date".ljust(DATE_COL) + "BTC Amount".ljust(AMOUNT_COL) + "BTC Price".ljust(PRICE_COL)
        + "USD Cost",
        light,
    ]
    lines += [format_transaction_row(tx) for tx in transactions]
    lines.append(light)
    return "\n".join(lines)


__all__ = ["format_report", "format_transaction_row"]
