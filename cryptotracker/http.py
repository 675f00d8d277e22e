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
cryptotracker/http.py

One logical GET against CoinGecko with 429 handling.

Only rate-limit responses are retried (exponential delay, capped at 30s). Any other
non-2xx status and any transport failure is raised straight away as an APIError.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp

from cryptotracker.errors import (
    APIError,
    ErrorKind,
    classify_status,
    classify_transport_failure,
    classify_unexpected,
    parse_retry_after,
)

logger = logging.getLogger("crypto-tracker.http")

DEFAULT_TIMEOUT = 15  # seconds
DEFAULT_MAX_RETRIES = 2
MAX_RETRY_DELAY = 30.0  # seconds


def retry_delay(attempt: int) -> float:
    """Delay before retry number `attempt + 1`: 1s, 2s, 4s... capped at 30s."""
    return min(MAX_RETRY_DELAY, 1.0 * 2 ** attempt)


async def _excerpt(resp: aiohttp.ClientResponse, limit: int = 400) -> str:
    try:
        body = await resp.read()
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        return f"<body unreadable: {exc!r}>"
    return body[:limit].decode("utf-8", errors="replace")


async def fetch_with_retry(
    session: aiohttp.ClientSession,
    url: str,
    context: str = "",
    max_retries: int = DEFAULT_MAX_RETRIES,
    params: Optional[Dict[str, Any]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Any:
    """
    GET `url` and return the decoded JSON payload.

    Raises:
      - APIError(RATE_LIMIT) after `max_retries` retries of a 429
      - APIError(NOT_FOUND / SERVER / UNKNOWN) on the first other non-2xx status
      - APIError(NETWORK) when no response was received
      - APIError(UNKNOWN) when the body is not JSON
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    for attempt in range(max_retries + 1):
        try:
            async with session.get(url, params=params, timeout=client_timeout) as resp:
                if 200 <= resp.status < 300:
                    try:
                        return await resp.json()
                    except (aiohttp.ContentTypeError, ValueError) as exc:
                        raise APIError(classify_unexpected(f"Invalid JSON from {url}", context)) from exc

                # the kind depends on the status alone; the body is only for the log line
                retry_after = parse_retry_after(resp.headers.get("Retry-After"))
                error = APIError(classify_status(resp.status, context, retry_after))
                logger.warning("Request to %s returned status %s: %s", url, resp.status, await _excerpt(resp))
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            logger.warning("Transport failure fetching %s (attempt %s): %r", url, attempt, exc)
            raise APIError(classify_transport_failure(context, exc)) from exc

        if error.kind is not ErrorKind.RATE_LIMIT or attempt >= max_retries:
            raise error

        delay = retry_delay(attempt)
        logger.info("Retry %d/%d after %.1fs (%s)", attempt + 1, max_retries, delay, error.technical_message)
        await sleep(delay)

    # unreachable: the last attempt either returns or raises
    raise APIError(classify_unexpected(f"Retries exhausted for {url}", context))
