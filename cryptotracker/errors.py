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
cryptotracker/errors.py

Error classification for CoinGecko calls.

Every failure is described by a ClassifiedError value (kind + technical message +
user message). It travels through `await` inside a single APIError exception, so
callers catch one type and branch on `.kind`.

Exports:
  - ErrorKind
  - ClassifiedError
  - APIError
  - ERROR_MESSAGES
  - classify_status(status, context, retry_after)
  - classify_transport_failure(context, exc)
  - classify_unexpected(detail, context)
  - parse_retry_after(value)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class ErrorKind(str, Enum):
    NETWORK = "NETWORK"
    RATE_LIMIT = "RATE_LIMIT"
    NOT_FOUND = "NOT_FOUND"
    SERVER = "SERVER"
    UNKNOWN = "UNKNOWN"


ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.NETWORK: "Unable to connect. Please check your internet connection.",
    ErrorKind.RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
    ErrorKind.NOT_FOUND: "Coin not found. Please check the symbol and try again.",
    ErrorKind.SERVER: "CoinGecko is having issues. Please try again later.",
    ErrorKind.UNKNOWN: "Something went wrong. Please try again.",
}


@dataclass(frozen=True)
class ClassifiedError:
    """What went wrong, in two registers: one for logs, one for people."""

    kind: ErrorKind
    technical_message: str
    user_message: str
    status: Optional[int] = None
    retry_after: Optional[float] = None


class APIError(Exception):
    """Raised by every data-access call that fails. Inspect `.kind`."""

    def __init__(self, error: ClassifiedError):
        self.error = error
        super().__init__(error.technical_message)

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def user_message(self) -> str:
        return self.error.user_message

    @property
    def technical_message(self) -> str:
        return self.error.technical_message

    @property
    def retry_after(self) -> Optional[float]:
        return self.error.retry_after


def _during(context: str) -> str:
    return f" during {context}" if context else ""


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given in seconds. HTTP-date values are ignored."""
    if not value:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def classify_status(status: int, context: str = "", retry_after: Optional[float] = None) -> ClassifiedError:
    """Map a non-2xx HTTP status to a ClassifiedError."""
    if status == 429:
        return ClassifiedError(
            ErrorKind.RATE_LIMIT,
            f"Rate limited{_during(context)}",
            ERROR_MESSAGES[ErrorKind.RATE_LIMIT],
            status=status,
            retry_after=retry_after,
        )
    if status == 404:
        return ClassifiedError(
            ErrorKind.NOT_FOUND,
            f"Not found{_during(context)}",
            ERROR_MESSAGES[ErrorKind.NOT_FOUND],
            status=status,
        )
    if status >= 500:
        return ClassifiedError(
            ErrorKind.SERVER,
            f"Server error {status}{_during(context)}",
            ERROR_MESSAGES[ErrorKind.SERVER],
            status=status,
        )
    return ClassifiedError(
        ErrorKind.UNKNOWN,
        f"HTTP {status}{_during(context)}",
        ERROR_MESSAGES[ErrorKind.UNKNOWN],
        status=status,
    )


def classify_transport_failure(context: str = "", exc: Optional[BaseException] = None) -> ClassifiedError:
    """No response was received at all (DNS, refused connection, timeout...)."""
    detail = f": {exc!r}" if exc is not None else ""
    return ClassifiedError(
        ErrorKind.NETWORK,
        f"Network error{_during(context)}{detail}",
        ERROR_MESSAGES[ErrorKind.NETWORK],
    )


def classify_unexpected(detail: str, context: str = "") -> ClassifiedError:
    """A response arrived but could not be decoded or had the wrong shape."""
    return ClassifiedError(
        ErrorKind.UNKNOWN,
        f"{detail}{_during(context)}",
        ERROR_MESSAGES[ErrorKind.UNKNOWN],
    )


__all__ = [
    "ErrorKind",
    "ClassifiedError",
    "APIError",
    "ERROR_MESSAGES",
    "classify_status",
    "classify_transport_failure",
    "classify_unexpected",
    "parse_retry_after",
]
