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
cryptotracker/config.py

Settings read from the environment (and a local .env file, if present).

Variables:
  COINGECKO_BASE_URL           default https://api.coingecko.com/api/v3
  COINGECKO_TIMEOUT            seconds per request, default 15
  COINGECKO_MAX_RETRIES        retries on HTTP 429, default 2
  COINGECKO_MIN_INTERVAL       seconds between requests, default 1.2
  COINGECKO_MAX_BACKOFF        ceiling for the backed-off interval, default 60
  COINGECKO_CACHE_MAX_ENTRIES  0 disables the bound, default 2000
  LOG_LEVEL                    default INFO
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

from cryptotracker.cache import DEFAULT_MAX_ENTRIES
from cryptotracker.http import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT
from cryptotracker.ratelimit import DEFAULT_MAX_BACKOFF, DEFAULT_MIN_INTERVAL

logger = logging.getLogger("crypto-tracker.config")

BASE_URL = "https://api.coingecko.com/api/v3"

T = TypeVar("T")


@dataclass(frozen=True)
class Settings:
    base_url: str = BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    min_interval: float = DEFAULT_MIN_INTERVAL
    max_backoff: float = DEFAULT_MAX_BACKOFF
    cache_max_entries: Optional[int] = DEFAULT_MAX_ENTRIES
    log_level: str = "INFO"


def _env(name: str, cast: Callable[[str], T], default: T) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning("Invalid value %r for %s, using default %r", raw, name, default)
        return default


def load_settings(dotenv: bool = True) -> Settings:
    if dotenv:
        load_dotenv()
    max_entries = _env("COINGECKO_CACHE_MAX_ENTRIES", int, DEFAULT_MAX_ENTRIES)
    min_interval = _env("COINGECKO_MIN_INTERVAL", float, DEFAULT_MIN_INTERVAL)
    return Settings(
        base_url=os.getenv("COINGECKO_BASE_URL", BASE_URL).rstrip("/"),
        timeout=_env("COINGECKO_TIMEOUT", float, float(DEFAULT_TIMEOUT)),
        max_retries=max(0, _env("COINGECKO_MAX_RETRIES", int, DEFAULT_MAX_RETRIES)),
        min_interval=min_interval if min_interval > 0 else DEFAULT_MIN_INTERVAL,
        max_backoff=_env("COINGECKO_MAX_BACKOFF", float, DEFAULT_MAX_BACKOFF),
        cache_max_entries=max_entries if max_entries and max_entries > 0 else None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
