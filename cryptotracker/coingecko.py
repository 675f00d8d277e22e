# ------------------------------------------------------------------------------------
# MIT License
# Copyright (c) 2025 swayam-crypto
#
# This file is part of the crypto-tracker project and is licensed under the MIT License.
# See the LICENSE file in the project root for details.
#
# DISCLAIMER:
# This tool does NOT provide financial advice.
# Cryptocurrency markets are volatile — use this tool at your own risk.
# ------------------------------------------------------------------------------------

"""
cryptotracker/coingecko.py

CoinGecko client with caching, a serialized rate-limited request queue, and
429 retry handling.

Public methods:
 - search_coins(query)
 - get_coin_data(coin_id)
 - get_price_history(coin_id, days=7)
 - get_top_movers()
 - get_simple_prices(coin_ids)
 - get_queue_status() / clear_cache()
 - close()

Every failure surfaces as cryptotracker.errors.APIError. Failed fetches are never cached.
"""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple, Union
from urllib.parse import quote

import aiohttp

from cryptotracker import models
from cryptotracker.cache import TTLCache
from cryptotracker.config import Settings
from cryptotracker.errors import APIError, classify_unexpected
from cryptotracker.http import fetch_with_retry
from cryptotracker.models import CoinDetail, CoinSummary, MoversResult, PricePoint, SimplePriceMap
from cryptotracker.ratelimit import RequestQueue

logger = logging.getLogger("crypto-tracker.coingecko")

# cache lifetimes, seconds
SEARCH_TTL = 300
COIN_TTL = 60
MOVERS_TTL = 120
PRICES_TTL = 60

# detail and chart requests follow what the user is looking at right now
PRIORITY_FOCUSED = 1
PRIORITY_BACKGROUND = 0

Days = Union[int, str]


def history_ttl(days: Days) -> int:
    """Longer ranges change more slowly, so they are cached longer."""
    if isinstance(days, str) and not days.isdigit():
        return 600  # "max"
    days = int(days)
    if days <= 7:
        return 60
    if days <= 30:
        return 300
    return 600


def prices_cache_key(coin_ids: Iterable[str]) -> str:
    return "prices:" + ",".join(sorted(set(coin_ids)))


class CoinGeckoClient:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[aiohttp.ClientSession] = None,
        cache: Optional[TTLCache] = None,
        queue: Optional[RequestQueue] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.settings = settings or Settings()
        self.cache = cache or TTLCache(max_entries=self.settings.cache_max_entries)
        self.queue = queue or RequestQueue(
            min_interval=self.settings.min_interval,
            max_backoff=self.settings.max_backoff,
        )
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep or asyncio.sleep

    async def __aenter__(self) -> "CoinGeckoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None and not self._session.closed:
            return self._session
        self._session = aiohttp.ClientSession(headers={"Accept": "application/json"})
        self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _fetch(self, path: str, context: str, params: Optional[Dict[str, Any]] = None) -> Any:
        session = await self._get_session()
        return await fetch_with_retry(
            session,
            f"{self.settings.base_url}{path}",
            context,
            max_retries=self.settings.max_retries,
            params=params,
            timeout=self.settings.timeout,
            sleep=self._sleep,
        )

    async def _cached(
        self,
        key: str,
        ttl: float,
        priority: int,
        context: str,
        path: str,
        params: Dict[str, Any],
        normalize: Callable[[Any], Any],
    ) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        async def work() -> Any:
            payload = await self._fetch(path, context, params)
            try:
                result = normalize(payload)
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Unexpected payload for %s: %r", key, exc)
                raise APIError(classify_unexpected(f"Unexpected response shape ({exc!r})", context)) from exc
            self.cache.set(key, result, ttl)
            return result

        return await self.queue.enqueue(work, priority)

    # -------------------------- Domain operations -------------------------- #

    async def search_coins(self, query: str) -> Tuple[CoinSummary, ...]:
        """Top 10 matches for a name or symbol."""
        return await self._cached(
            f"search:{query.lower()}",
            SEARCH_TTL,
            PRIORITY_BACKGROUND,
            "coin search",
            "/search",
            {"query": query},
            models.normalize_search,
        )

    async def get_coin_data(self, coin_id: str) -> CoinDetail:
        return await self._cached(
            f"coin:{coin_id}",
            COIN_TTL,
            PRIORITY_FOCUSED,
            "coin details",
            f"/coins/{quote(coin_id, safe='')}",
            {
                "localization": "false",
                "tickers": "false",
                "community_data": "false",
                "developer_data": "false",
            },
            models.normalize_coin_detail,
        )

    async def get_price_history(self, coin_id: str, days: Days = 7) -> Tuple[PricePoint, ...]:
        """USD price series for the chart; `days` is a number or "max"."""
        days = str(days).lower()
        return await self._cached(
            f"history:{coin_id}:{days}",
            history_ttl(days),
            PRIORITY_FOCUSED,
            "price history",
            f"/coins/{quote(coin_id, safe='')}/market_chart",
            {"vs_currency": "usd", "days": days},
            models.normalize_price_history,
        )

    async def get_top_movers(self) -> MoversResult:
        """Top 5 gainers and losers over 24h among the 100 largest coins by market cap."""
        return await self._cached(
            "movers",
            MOVERS_TTL,
            PRIORITY_BACKGROUND,
            "market data",
            "/coins/markets",
            {
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": "100",
                "sparkline": "false",
                "price_change_percentage": "24h",
            },
            models.normalize_movers,
        )

    async def get_simple_prices(self, coin_ids: Iterable[str]) -> SimplePriceMap:
        """USD price and 24h change for several coins at once (watchlist refresh)."""
        ids = sorted(set(coin_ids))
        if not ids:
            return MappingProxyType({})
        return await self._cached(
            prices_cache_key(ids),
            PRICES_TTL,
            PRIORITY_BACKGROUND,
            "watchlist prices",
            "/simple/price",
            {"ids": ",".join(ids), "vs_currencies": "usd", "include_24hr_change": "true"},
            models.normalize_simple_prices,
        )

    # -------------------------- Diagnostics -------------------------- #

    def get_queue_status(self) -> Dict[str, Any]:
        return self.queue.status()

    def clear_cache(self) -> None:
        self.cache.clear()
