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
cryptotracker/models.py

Normalized records and the functions that build them from raw CoinGecko JSON.

The normalizers index required fields directly; a KeyError/TypeError/ValueError
means the payload did not have the expected shape and is turned into an
APIError(UNKNOWN) by the caller.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

SEARCH_RESULT_LIMIT = 10
MOVERS_COUNT = 5


@dataclass(frozen=True)
class CoinSummary:
    id: str
    name: str
    symbol: str
    thumb: Optional[str] = None
    image: Optional[str] = None
    market_cap_rank: Optional[int] = None
    current_price: Optional[float] = None
    price_change_24h: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CoinDetail:
    id: str
    name: str
    symbol: str
    image: Optional[str]
    current_price: Optional[float]
    price_change_24h: Optional[float]
    market_cap: Optional[float]
    volume_24h: Optional[float]
    high_24h: Optional[float]
    low_24h: Optional[float]
    ath: Optional[float]
    ath_date: Optional[str]
    circulating_supply: Optional[float]
    total_supply: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PricePoint:
    time: int  # unix seconds
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MoversResult:
    gainers: Tuple[CoinSummary, ...] = ()
    losers: Tuple[CoinSummary, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gainers": [c.to_dict() for c in self.gainers],
            "losers": [c.to_dict() for c in self.losers],
        }


@dataclass(frozen=True)
class SimplePrice:
    usd: Optional[float]
    usd_24h_change: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# read-only view; cached results are shared between callers
SimplePriceMap = Mapping[str, SimplePrice]


# -------------------------- Normalizers -------------------------- #

def _usd(block: Any) -> Any:
    return block.get("usd") if isinstance(block, dict) else None


def normalize_search(payload: Dict[str, Any]) -> Tuple[CoinSummary, ...]:
    coins = payload["coins"]
    return tuple(
        CoinSummary(
            id=coin["id"],
            name=coin["name"],
            symbol=coin["symbol"],
            thumb=coin.get("thumb"),
            market_cap_rank=coin.get("market_cap_rank"),
        )
        for coin in coins[:SEARCH_RESULT_LIMIT]
    )


def normalize_coin_detail(payload: Dict[str, Any]) -> CoinDetail:
    market = payload["market_data"]
    image = payload.get("image") or {}
    return CoinDetail(
        id=payload["id"],
        name=payload["name"],
        symbol=payload["symbol"],
        image=image.get("large") if isinstance(image, dict) else None,
        current_price=_usd(market.get("current_price")),
        price_change_24h=market.get("price_change_percentage_24h"),
        market_cap=_usd(market.get("market_cap")),
        volume_24h=_usd(market.get("total_volume")),
        high_24h=_usd(market.get("high_24h")),
        low_24h=_usd(market.get("low_24h")),
        ath=_usd(market.get("ath")),
        ath_date=_usd(market.get("ath_date")),
        circulating_supply=market.get("circulating_supply"),
        total_supply=market.get("total_supply"),
    )


def normalize_price_history(payload: Dict[str, Any]) -> Tuple[PricePoint, ...]:
    # prices: [[ms_timestamp, price], ...]
    return tuple(PricePoint(time=int(ts) // 1000, value=float(price)) for ts, price in payload["prices"])


def normalize_market_coin(coin: Dict[str, Any]) -> CoinSummary:
    return CoinSummary(
        id=coin["id"],
        name=coin["name"],
        symbol=coin["symbol"],
        image=coin.get("image"),
        market_cap_rank=coin.get("market_cap_rank"),
        current_price=coin.get("current_price"),
        price_change_24h=coin.get("price_change_percentage_24h") or 0,
    )


def rank_movers(coins: Sequence[CoinSummary], count: int = MOVERS_COUNT) -> MoversResult:
    """
    Sort by descending 24h change; gainers are the top `count`, losers the bottom
    `count` with the most negative first. The two lists never share a coin.
    """
    ranked = sorted(coins, key=lambda c: c.price_change_24h or 0, reverse=True)
    gainers = tuple(ranked[:count])
    start = max(len(gainers), len(ranked) - count)
    losers = tuple(reversed(ranked[start:]))
    return MoversResult(gainers=gainers, losers=losers)


def normalize_movers(payload: List[Dict[str, Any]]) -> MoversResult:
    if not isinstance(payload, list):
        raise TypeError(f"expected a list of markets, got {type(payload).__name__}")
    return rank_movers([normalize_market_coin(c) for c in payload])


def normalize_simple_prices(payload: Dict[str, Any]) -> SimplePriceMap:
    if not isinstance(payload, dict):
        raise TypeError(f"expected a price mapping, got {type(payload).__name__}")
    return MappingProxyType({
        coin_id: SimplePrice(usd=row.get("usd"), usd_24h_change=row.get("usd_24h_change"))
        for coin_id, row in payload.items()
    })
