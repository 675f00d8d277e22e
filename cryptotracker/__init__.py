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
Data-access layer for the CoinGecko price tracker.

    async with CoinGeckoClient() as api:
        movers = await api.get_top_movers()
"""

from cryptotracker.coingecko import CoinGeckoClient
from cryptotracker.config import Settings, load_settings
from cryptotracker.errors import APIError, ClassifiedError, ErrorKind, ERROR_MESSAGES
from cryptotracker.models import CoinDetail, CoinSummary, MoversResult, PricePoint, SimplePrice

__all__ = [
    "CoinGeckoClient",
    "Settings",
    "load_settings",
    "APIError",
    "ClassifiedError",
    "ErrorKind",
    "ERROR_MESSAGES",
    "CoinDetail",
    "CoinSummary",
    "MoversResult",
    "PricePoint",
    "SimplePrice",
]
