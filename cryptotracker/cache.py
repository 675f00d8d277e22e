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
cryptotracker/cache.py

In-memory TTL cache. Expiry is checked lazily on read; there is no background
eviction. A soft size bound purges expired entries first, then the oldest ones.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger("crypto-tracker.cache")

DEFAULT_TTL = 60.0  # seconds
DEFAULT_MAX_ENTRIES = 2000


class TTLCache:
    def __init__(
        self,
        max_entries: Optional[int] = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        # key -> (expires_at, value)
        self._data: Dict[str, Tuple[float, Any]] = {}
        self.max_entries = max_entries
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        """Return cached value or None if expired/missing."""
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            # expired
            del self._data[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: float = DEFAULT_TTL) -> None:
        # re-insert so dict order tracks recency of writes
        self._data.pop(key, None)
        self._data[key] = (self._clock() + ttl, value)
        if self.max_entries and len(self._data) > self.max_entries:
            self._shrink()

    def clear(self) -> None:
        self._data.clear()

    def _shrink(self) -> None:
        now = self._clock()
        for k, (expires_at, _) in list(self._data.items()):
            if now >= expires_at:
                del self._data[k]
        overflow = len(self._data) - self.max_entries
        if overflow > 0:
            for k in list(self._data)[:overflow]:
                del self._data[k]
            logger.debug("Cache over %d entries, dropped %d oldest", self.max_entries, overflow)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._data)
