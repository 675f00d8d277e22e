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
cryptotracker/formatting.py

Plain-text formatting for records returned by CoinGeckoClient.

Exports:
  - format_num(n)
  - format_price(n)
  - format_percent(n)
  - format_large_number(n)
  - format_search_results(results)
  - format_coin_detail(coin)
  - format_history(points)
  - format_movers(result)
  - format_prices(prices)
"""

from __future__ import annotations

from typing import Optional, Sequence

from cryptotracker.models import CoinDetail, CoinSummary, MoversResult, PricePoint, SimplePriceMap


# -------------------------- Number helpers -------------------------- #

def format_num(n: Optional[float]) -> str:
    """
    Smart number formatting:
    - >= 1       → 2 decimals
    - 0.01–1     → 4 decimals
    - < 0.01     → 8 decimals (for coins like SHIB/DOGE)
    - No trailing zeros
    """
    if n is None:
        return "N/A"

    n = float(n)

    if abs(n) >= 1:
        fmt = "{:,.2f}"
    elif abs(n) >= 0.01:
        fmt = "{:,.4f}"
    else:
        fmt = "{:,.8f}"

    out = fmt.format(n)
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    return out


def format_price(n: Optional[float]) -> str:
    return "N/A" if n is None else f"${format_num(n)}"


def format_percent(n: Optional[float], precision: int = 2) -> str:
    """
    Signed percentage:
      5.234 → '+5.23%'
    """
    if n is None:
        return "N/A"
    sign = "+" if n >= 0 else ""
    return f"{sign}{n:.{precision}f}%"


def format_large_number(n: Optional[float]) -> str:
    """1234567 → '$1.23M'"""
    if n is None:
        return "N/A"
    n = float(n)
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if abs(n) >= threshold:
            return f"${n / threshold:.2f}{suffix}"
    return f"${n:.2f}"


# -------------------------- Record views -------------------------- #

def format_search_results(results: Sequence[CoinSummary]) -> str:
    if not results:
        return "No coins found."
    lines = []
    for coin in results:
        rank = f"#{coin.market_cap_rank}" if coin.market_cap_rank else "-"
        lines.append(f"{rank:>6}  {coin.symbol.upper():<8} {coin.name}  ({coin.id})")
    return "\n".join(lines)


def format_coin_detail(coin: CoinDetail) -> str:
    rows = [
        ("Price", format_price(coin.current_price)),
        ("Change (24h)", format_percent(coin.price_change_24h)),
        ("Market cap", format_large_number(coin.market_cap)),
        ("Volume (24h)", format_large_number(coin.volume_24h)),
        ("High (24h)", format_price(coin.high_24h)),
        ("Low (24h)", format_price(coin.low_24h)),
        ("ATH", format_price(coin.ath)),
    ]
    lines = [f"{coin.name} ({coin.symbol.upper()})"]
    lines += [f"  {label:<13} {value}" for label, value in rows]
    return "\n".join(lines)


def format_history(points: Sequence[PricePoint]) -> str:
    if not points:
        return "No price history."
    values = [p.value for p in points]
    first, last = values[0], values[-1]
    change = ((last - first) / first * 100) if first else None
    return (
        f"{len(points)} points  "
        f"open {format_price(first)}  last {format_price(last)}  "
        f"low {format_price(min(values))}  high {format_price(max(values))}  "
        f"change {format_percent(change)}"
    )


def format_movers(result: MoversResult) -> str:
    lines = ["Top gainers (24h):"]
    lines += [f"  {i}. {c.name:<20} {format_percent(c.price_change_24h)}" for i, c in enumerate(result.gainers, 1)]
    lines.append("Top losers (24h):")
    lines += [f"  {i}. {c.name:<20} {format_percent(c.price_change_24h)}" for i, c in enumerate(result.losers, 1)]
    return "\n".join(lines)


def format_prices(prices: SimplePriceMap) -> str:
    if not prices:
        return "No prices."
    return "\n".join(
        f"{coin_id:<20} {format_price(p.usd):>16}  {format_percent(p.usd_24h_change)}"
        for coin_id, p in sorted(prices.items())
    )
