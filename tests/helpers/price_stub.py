"""Test helpers that stand in for the historical price service.

``SessionStub`` matches the small slice of ``requests.Session`` that
``PriceResolver`` touches (``headers``, ``get``, ``close``) and replays a
queue of canned responses. ``ResolverStub`` replaces the resolver entirely for
pipeline and CLI tests, mapping epoch seconds to prices or exceptions.
``RecordingSleep`` captures requested delays instead of sleeping.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import requests

from btc_cost_basis.errors import PriceFetchError
from btc_cost_basis.prices import to_unix_seconds


class StubResponse:
    """Minimal ``requests.Response`` look-alike."""

    def __init__(self, payload: Any = None, *, status_code: int = 200, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self._text = text if text is not None else json.dumps(payload)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        # requests raises a ValueError subclass for undecodable bodies
        return json.loads(self._text)


class SessionStub:
    """Replays queued responses (or raises queued exceptions) for ``get``.

    Every call's ``(url, params, timeout)`` is appended to ``calls``.
    """

    def __init__(self, *responses: StubResponse | BaseException) -> None:
        self.headers: dict[str, str] = {}
        self.calls: list[dict[str, Any]] = []
        self.closed = False
        self._queue = list(responses)

    def get(self, url: str, params: Mapping[str, Any] | None = None, timeout: float | None = None):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        if not self._queue:
            raise AssertionError("SessionStub: unexpected extra request")
        nxt = self._queue.pop(0)
        if isinstance(nxt, BaseException):
            raise nxt
        return nxt

    def close(self) -> None:
        self.closed = True


def connection_error(message: str = "connection refused") -> requests.exceptions.ConnectionError:
    return requests.exceptions.ConnectionError(message)


class ResolverStub:
    """Resolver replacement keyed by epoch seconds.

    Values are either a price or an exception instance to raise. Lookups for
    unknown timestamps raise :class:`PriceFetchError`. ``events`` is shared
    with :class:`RecordingSleep` when passed, giving a single ordered log of
    lookups and sleeps.
    """

    def __init__(
        self,
        prices: Mapping[int, float | BaseException],
        events: list[tuple[str, Any]] | None = None,
    ) -> None:
        self._prices = dict(prices)
        self.events = events if events is not None else []
        self.lookups: list[datetime] = []
        self.closed = False

    def fetch_price(self, when: datetime) -> float:
        self.lookups.append(when)
        self.events.append(("lookup", when))
        value = self._prices.get(to_unix_seconds(when))
        if value is None:
            raise PriceFetchError(f"no stubbed price for {when.isoformat()}")
        if isinstance(value, BaseException):
            raise value
        return value

    def __enter__(self) -> ResolverStub:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True


class RecordingSleep:
    """Callable replacement for ``time.sleep`` that records durations."""

    def __init__(self, events: list[tuple[str, Any]] | None = None) -> None:
        self.delays: list[float] = []
        self.events = events if events is not None else []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        self.events.append(("sleep", seconds))
