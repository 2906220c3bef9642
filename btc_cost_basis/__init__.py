"""Public interface for the ``btc_cost_basis`` package.

Re-exports the pipeline steps and the public models/types as the stable import
surface. There is no runtime logic here, only symbol re-exports.
"""

from .config import AnalysisConfig
from .deposits import filter_bitcoin_deposits, is_bitcoin_deposit
from .errors import BtcCostBasisError, LedgerReadError, PriceFetchError
from .ledger import parse_records, read_ledger
from .models import (
    AnalysisResult,
    EnrichedTransaction,
    PriceFailure,
    Record,
    StatisticsSummary,
)
from .pipeline import enrich_deposits, run_analysis
from .prices import PriceResolver
from .report import format_report
from .stats import compute_statistics, median

__all__ = [
    # Pipeline
    "parse_records",
    "read_ledger",
    "filter_bitcoin_deposits",
    "is_bitcoin_deposit",
    "enrich_deposits",
    "compute_statistics",
    "median",
    "format_report",
    "run_analysis",
    "PriceResolver",
    # Models / types
    "AnalysisConfig",
    "AnalysisResult",
    "EnrichedTransaction",
    "PriceFailure",
    "Record",
    "StatisticsSummary",
    # Errors
    "BtcCostBasisError",
    "LedgerReadError",
    "PriceFetchError",
]
