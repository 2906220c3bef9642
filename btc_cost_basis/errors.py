"""Exception types raised by ``btc_cost_basis``.

Fatal setup problems (the ledger cannot be read) and per-transaction price
lookup failures are kept distinct so the pipeline can recover from the latter
while the CLI aborts on the former.
"""

from __future__ import annotations


class BtcCostBasisError(Exception):
    """Base class for all package errors."""


class LedgerReadError(BtcCostBasisError):
    """The ledger file is missing or could not be read/decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


class PriceFetchError(BtcCostBasisError):
    """A single historical price lookup failed.

    Covers transport errors, non-success HTTP status codes, undecodable
    bodies, and error payloads reported by the price service.
    """
