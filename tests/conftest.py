"""
Shared fixtures: an in-memory stand-in for aiohttp.ClientSession plus a fake clock.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from cryptotracker.cache import TTLCache
from cryptotracker.coingecko import CoinGeckoClient
from cryptotracker.config import Settings
from cryptotracker.ratelimit import RequestQueue


class FakeResponse:
    def __init__(self, status: int = 200, payload: Any = None, headers: Optional[Dict[str, str]] = None,
                 json_error: Optional[Exception] = None, body: Optional[bytes] = None):
        self.status = status
        self._payload = payload
        self.headers = headers or {}
        self._json_error = json_error
        self._body = body

    async def json(self) -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._payload

    async def read(self) -> bytes:
        if self._body is not None:
            return self._body
        return b"" if self._payload is None else str(self._payload).encode()

    async def text(self) -> str:
        # strict, like aiohttp with a utf-8 charset
        return (await self.read()).decode("utf-8")

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None


class FakeSession:
    """
    Replays scripted results for session.get(). A script item is a FakeResponse or an
    exception instance (raised when the request is made). With `routes`, the script is
    chosen by the first route prefix contained in the URL.
    """

    def __init__(self, script: Optional[List[Any]] = None, routes: Optional[Dict[str, List[Any]]] = None):
        self.script = list(script or [])
        self.routes = {k: list(v) for k, v in (routes or {}).items()}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def _next(self, url: str) -> Any:
        for fragment, items in self.routes.items():
            if fragment in url:
                return items.pop(0)
        return self.script.pop(0)

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, timeout: Any = None) -> FakeResponse:
        self.calls.append({"url": url, "params": dict(params or {})})
        item = self._next(url)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(clock: FakeClock):
    """Build a CoinGeckoClient wired to a FakeSession and the fake clock."""

    def _make(session: FakeSession, **settings: Any) -> CoinGeckoClient:
        cfg = Settings(**settings)
        return CoinGeckoClient(
            settings=cfg,
            session=session,
            cache=TTLCache(max_entries=cfg.cache_max_entries, clock=clock),
            queue=RequestQueue(cfg.min_interval, cfg.max_backoff, clock=clock, sleep=clock.sleep),
            sleep=clock.sleep,
        )

    return _make
