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
cryptotracker/ratelimit.py

Priority request queue that runs one operation at a time and keeps them spaced
at least `min_interval * backoff_multiplier` seconds apart.

The free CoinGecko tier allows roughly 50 requests/minute, hence 1.2s.
A RATE_LIMIT failure doubles the multiplier (capped at max_backoff / min_interval),
every success shrinks it by 10% down to 1.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from cryptotracker.errors import APIError, ErrorKind

logger = logging.getLogger("crypto-tracker.ratelimit")

DEFAULT_MIN_INTERVAL = 1.2  # seconds
DEFAULT_MAX_BACKOFF = 60.0  # seconds
_DECAY = 0.9

Operation = Callable[[], Awaitable[Any]]


@dataclass
class RateLimiterState:
    last_request: Optional[float] = None
    backoff_multiplier: float = 1.0


@dataclass
class QueuedRequest:
    operation: Operation
    priority: int
    future: asyncio.Future


class RequestQueue:
    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        max_backoff: float = DEFAULT_MAX_BACKOFF,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if min_interval <= 0:
            raise ValueError("min_interval must be positive")
        self.min_interval = min_interval
        self.max_backoff = max_backoff
        self.state = RateLimiterState()
        self._clock = clock
        self._sleep = sleep
        # heap of (-priority, sequence, request): highest priority first, FIFO within a priority
        self._heap: List[Tuple[int, int, QueuedRequest]] = []
        self._counter = itertools.count()
        self._worker: Optional[asyncio.Task] = None
        self._in_flight: Optional[QueuedRequest] = None

    @property
    def max_multiplier(self) -> float:
        return max(1.0, self.max_backoff / self.min_interval)

    @property
    def effective_interval(self) -> float:
        return self.min_interval * self.state.backoff_multiplier

    @property
    def processing(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def enqueue(self, operation: Operation, priority: int = 0) -> Any:
        """Submit `operation` and wait for its result (or its exception)."""
        future = asyncio.get_running_loop().create_future()
        request = QueuedRequest(operation, priority, future)
        heapq.heappush(self._heap, (-priority, next(self._counter), request))
        if not self.processing:
            self._worker = asyncio.create_task(self._process_queue())
        return await future

    async def _process_queue(self) -> None:
        while self._heap:
            wait_time = self._wait_time()
            if wait_time > 0:
                await self._sleep(wait_time)

            _, _, request = heapq.heappop(self._heap)
            self.state.last_request = self._clock()
            self._in_flight = request
            try:
                result = await request.operation()
            except asyncio.CancelledError:
                request.future.cancel()
                raise
            except APIError as exc:
                if exc.kind is ErrorKind.RATE_LIMIT:
                    self._on_rate_limited()
                _settle(request.future, error=exc)
            except Exception as exc:
                _settle(request.future, error=exc)
            else:
                self.state.backoff_multiplier = max(1.0, self.state.backoff_multiplier * _DECAY)
                _settle(request.future, result=result)
            finally:
                if self._in_flight is request:
                    self._in_flight = None

    def _wait_time(self) -> float:
        if self.state.last_request is None:
            return 0.0
        return max(0.0, self.state.last_request + self.effective_interval - self._clock())

    def _on_rate_limited(self) -> None:
        self.state.backoff_multiplier = min(self.max_multiplier, self.state.backoff_multiplier * 2)
        logger.warning("Rate limited. Backing off to %.2fs between requests", self.effective_interval)

    def status(self) -> Dict[str, Any]:
        return {
            "queue_length": len(self._heap),
            "backoff_multiplier": self.state.backoff_multiplier,
            "effective_interval": self.effective_interval,
            "processing": self.processing,
        }

    def reset(self) -> None:
        """Drop queued and in-flight requests and forget backoff state. Their submitters get CancelledError."""
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
        self._worker = None
        if self._in_flight is not None and not self._in_flight.future.done():
            self._in_flight.future.cancel()
        self._in_flight = None
        for _, _, request in self._heap:
            if not request.future.done():
                request.future.cancel()
        self._heap.clear()
        self.state = RateLimiterState()


def _settle(future: asyncio.Future, result: Any = None, error: Optional[BaseException] = None) -> None:
    # the submitter may have been cancelled while its request was running
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)
