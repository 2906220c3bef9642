"""Historical BTC/USD price lookups against the CryptoCompare API.

One GET per lookup, no caching and no retries. Rate limiting is the caller's
job (see :func:`btc_cost_basis.pipeline.enrich_deposits`) so that the spacing
between requests stays a fixed, observable delay.
"""

from __future__ import annotations

import math
import time
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import requests
from pydantic import ValidationError

from .errors import PriceFetchError
from .logging_setup import get_logger
from .models import HistoricalPriceError

# ---- Tunables ----------------------------------------------------------------

DEFAULT_PRICE_URL: str = "https://min-api.cryptocompare.com/data/pricehistorical"
DEFAULT_TIMEOUT_SEC: float = 10.0

BASE_SYMBOL: str = "BTC"
QUOTE_CURRENCY: str = "USD"

_USER_AGENT: str = "btc-cost-basis/0.1"

_logger = get_logger("btc_cost_basis.prices")


def to_unix_seconds(when: datetime) -> int:
    """Epoch seconds for ``when``, rounded down to the whole second."""

    return math.floor(when.timestamp())


class PriceResolver:
    """Resolve the USD price of one BTC at a point in time.

    Parameters
    ----------
    base_url:
        Historical price endpoint; queried with ``fsym``, ``tsyms`` and ``ts``.
    api_key:
        Optional CryptoCompare API key, sent as ``authorization: Apikey <key>``.
    timeout:
        Per-request timeout in seconds.
    session:
        Optional preconfigured ``requests.Session`` (tests pass a stub).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_PRICE_URL,
        *,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

        headers = {"User-Agent": _USER_AGENT, "Accept": "application/json"}
        if api_key:
            headers["authorization"] = f"Apikey {api_key}"
        self.session.headers.update(headers)

    def fetch_price(self, when: datetime) -> float:
        """Return the USD price of 1 BTC at ``when``.

        Raises
        ------
        PriceFetchError
            On transport failure, non-2xx status, undecodable JSON, a service
            error payload, or a missing/non-positive price.
        """

        ts = to_unix_seconds(when)
        params = {"fsym": BASE_SYMBOL, "tsyms": QUOTE_CURRENCY, "ts": ts}

        t0 = time.perf_counter()
        try:
            price = self._request_price(params, ts)
        except PriceFetchError as e:
            _logger.debug(
                "fetch_price:failed ts=%d latency_ms=%.2f error=%s",
                ts,
                (time.perf_counter() - t0) * 1000.0,
                e,
            )
            raise PriceFetchError(f"Failed to fetch price data for timestamp {ts}: {e}") from e

        _logger.debug(
            "fetch_price:done ts=%d price=%.2f latency_ms=%.2f",
            ts,
            price,
            (time.perf_counter() - t0) * 1000.0,
        )
        return price

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> PriceResolver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---- Internal helpers ----------------------------------------------------

    def _request_price(self, params: Mapping[str, Any], ts: int) -> float:
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise PriceFetchError(str(e) or e.__class__.__name__) from e

        if not response.ok:
            raise PriceFetchError(f"HTTP error: status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise PriceFetchError(f"Invalid JSON response: {e}") from e

        price = _extract_price(payload)
        if price is not None:
            return price

        try:
            err = HistoricalPriceError.model_validate(payload)
        except ValidationError:
            raise PriceFetchError(f"No price data found for timestamp {ts}") from None
        raise PriceFetchError(f"API Error: {err.detail}")


def _extract_price(payload: Any) -> float | None:
    """Pull ``payload[BTC][USD]`` when it is a finite positive number."""

    if not isinstance(payload, Mapping):
        return None
    quotes = payload.get(BASE_SYMBOL)
    if not isinstance(quotes, Mapping):
        return None
    raw = quotes.get(QUOTE_CURRENCY)
    if isinstance(raw, bool) or not isinstance(raw, int | float):
        return None
    value = float(raw)
    if not math.isfinite(value) or value <= 0:
        return None
    return value


__all__ = [
    "BASE_SYMBOL",
    "DEFAULT_PRICE_URL",
    "PriceResolver",
    "QUOTE_CURRENCY",
    "to_unix_seconds",
]
