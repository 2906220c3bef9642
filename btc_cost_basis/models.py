"""Data models and type aliases for ``btc_cost_basis``.

Ledger rows stay as plain string mappings; only priced deposits and the
aggregate summary get concrete types. The remote price service's error
payload is validated with pydantic since it is external input.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, NamedTuple, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Ledger rows
# ---------------------------------------------------------------------------

Record: TypeAlias = Mapping[str, str]
"""A single ledger row keyed by header name.

Every header column is present; columns missing from a short row hold ``""``.
"""


# ---------------------------------------------------------------------------
# Priced deposits and summary
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EnrichedTransaction:
    """A Bitcoin deposit paired with its historical USD price.

    ``usd_cost`` is ``btc_amount * btc_price``. ``cost_per_btc`` is
    ``usd_cost / btc_amount`` and therefore equals ``btc_price``; it is kept as
    its own field because reports print it.
    """

    date: datetime
    btc_amount: float
    btc_price: float
    usd_cost: float
    cost_per_btc: float

    @classmethod
    def from_lookup(
        cls, date: datetime, btc_amount: float, btc_price: float
    ) -> EnrichedTransaction:
        if not btc_amount > 0:
            raise ValueError(f"btc_amount must be positive, got {btc_amount!r}")
        if not btc_price > 0:
            raise ValueError(f"btc_price must be positive, got {btc_price!r}")
        usd_cost = btc_amount * btc_price
        return cls(
            date=date,
            btc_amount=btc_amount,
            btc_price=btc_price,
            usd_cost=usd_cost,
            cost_per_btc=usd_cost / btc_amount,
        )


@dataclass(frozen=True, slots=True)
class StatisticsSummary:
    """Aggregate price statistics over a set of priced deposits.

    Attributes
    ----------
    count:
        Number of transactions summarized.
    average:
        Arithmetic mean of per-transaction prices.
    median:
        Median of per-transaction prices.
    total_btc:
        Sum of deposited BTC.
    total_usd:
        Sum of USD cost.
    weighted_average:
        ``total_usd / total_btc`` (volume-weighted, not the mean of prices).
    """

    count: int
    average: float
    median: float
    total_btc: float
    total_usd: float
    weighted_average: float


class PriceFailure(NamedTuple):
    """A deposit that was skipped because its price could not be resolved."""

    date: str
    """Raw ``DATE`` value of the skipped ledger row."""

    message: str


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Everything produced by one pipeline run.

    ``summary`` is ``None`` when no deposit matched or no price was resolved.
    """

    deposits: tuple[Record, ...]
    transactions: tuple[EnrichedTransaction, ...]
    failures: tuple[PriceFailure, ...]
    summary: StatisticsSummary | None


# ---------------------------------------------------------------------------
# Remote payloads
# ---------------------------------------------------------------------------


class HistoricalPriceError(BaseModel):
    """Error payload returned by the historical price service.

    Shape: ``{"Response": "Error", "Message": "...", ...}``. Extras are
    allowed since the service adds diagnostic fields freely.
    """

    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)

    response: Literal["Error"] = Field(alias="Response")
    message: str = Field(default="", alias="Message")

    @property
    def detail(self) -> str:
        return self.message or "Unknown error"


__all__ = [
    "AnalysisResult",
    "EnrichedTransaction",
    "HistoricalPriceError",
    "PriceFailure",
    "Record",
    "StatisticsSummary",
]
