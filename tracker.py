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

#!/usr/bin/env python3
"""
Command-line front end for the CoinGecko tracker.

  python tracker.py search solana
  python tracker.py coin bitcoin
  python tracker.py history ethereum --days 30
  python tracker.py movers --json
  python tracker.py prices bitcoin ethereum dogecoin
"""
import argparse
import asyncio
import json
import logging
import signal
import sys
from collections.abc import Mapping
from typing import Any, List, Optional

from cryptotracker import formatting
from cryptotracker.coingecko import CoinGeckoClient
from cryptotracker.config import load_settings
from cryptotracker.errors import APIError

logger = logging.getLogger("crypto-tracker.cli")


def _days(value: str):
    if value == "max":
        return value
    try:
        days = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("days must be a positive integer or 'max'")
    if days <= 0:
        raise argparse.ArgumentTypeError("days must be a positive integer or 'max'")
    return days


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crypto-tracker", description="CoinGecko price tracker")
    parser.add_argument("--json", action="store_true", help="print raw records as JSON")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="search coins by name or symbol")
    p.add_argument("query")

    p = sub.add_parser("coin", help="price and market details for one coin")
    p.add_argument("coin_id")

    p = sub.add_parser("history", help="USD price history")
    p.add_argument("coin_id")
    p.add_argument("--days", type=_days, default=7)

    sub.add_parser("movers", help="top 24h gainers and losers")

    p = sub.add_parser("prices", help="batch USD prices")
    p.add_argument("coin_ids", nargs="*")

    sub.add_parser("status", help="request queue status")
    return parser


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _to_jsonable(v) for k, v in value.items()}
    return value


async def run_command(client: CoinGeckoClient, args: argparse.Namespace) -> str:
    if args.command == "search":
        result = await client.search_coins(args.query)
        text = formatting.format_search_results
    elif args.command == "coin":
        result = await client.get_coin_data(args.coin_id)
        text = formatting.format_coin_detail
    elif args.command == "history":
        result = await client.get_price_history(args.coin_id, args.days)
        text = formatting.format_history
    elif args.command == "movers":
        result = await client.get_top_movers()
        text = formatting.format_movers
    elif args.command == "prices":
        result = await client.get_simple_prices(args.coin_ids)
        text = formatting.format_prices
    else:
        result = client.get_queue_status()
        text = lambda status: "\n".join(f"{k}: {v}" for k, v in status.items())  # noqa: E731

    if args.json:
        return json.dumps(_to_jsonable(result), indent=2)
    return text(result)


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    loop = asyncio.get_running_loop()
    stop = asyncio.Event()

    def _signal_handler():
        logger.info("Received stop signal, shutting down...")
        stop.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            pass

    async with CoinGeckoClient(settings) as client:
        command_task = asyncio.create_task(run_command(client, args))
        stop_task = asyncio.create_task(stop.wait())
        try:
            done, _ = await asyncio.wait({command_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
            if command_task not in done:
                command_task.cancel()
                try:
                    await command_task
                except asyncio.CancelledError:
                    logger.debug("Command cancelled during shutdown.")
                return 130
            output = command_task.result()
        except APIError as exc:
            logger.warning("%s", exc.technical_message)
            print(exc.user_message, file=sys.stderr)
            return 1
        finally:
            if not stop_task.done():
                stop_task.cancel()

    print(output)
    return 0


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received. Exiting.")
        sys.exit(130)
    except Exception:
        logger.exception("Unhandled exception in top-level run.")
        sys.exit(1)


if __name__ == "__main__":
    cli()
