"""
Tests for fetch_with_retry: 429 retries, immediate failures, transport errors.
"""

from __future__ import annotations

import asyncio

import aiohttp
import pytest

from cryptotracker.errors import APIError, ErrorKind
from cryptotracker.http import fetch_with_retry, retry_delay
from tests.conftest import FakeResponse, FakeSession

URL = "https://api.example.test/api/v3/ping"


@pytest.mark.asyncio
async def test_success_returns_payload(clock) -> None:
    session = FakeSession([FakeResponse(200, {"ok": True})])
    assert await fetch_with_retry(session, URL, "ping", sleep=clock.sleep) == {"ok": True}
    assert len(session.calls) == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_two_rate_limits_then_success_makes_three_calls(clock) -> None:
    session = FakeSession([FakeResponse(429), FakeResponse(429), FakeResponse(200, {"n": 3})])
    result = await fetch_with_retry(session, URL, "ping", max_retries=2, sleep=clock.sleep)
    assert result == {"n": 3}
    assert len(session.calls) == 3
    assert clock.sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_rate_limit_with_undecodable_body_is_still_retried(clock) -> None:
    session = FakeSession([FakeResponse(429, body=b"\xff\xfe"), FakeResponse(200, {"n": 2})])
    result = await fetch_with_retry(session, URL, "ping", max_retries=2, sleep=clock.sleep)
    assert result == {"n": 2}
    assert len(session.calls) == 2
    assert clock.sleeps == [1.0]


@pytest.mark.asyncio
async def test_error_kind_ignores_undecodable_body(clock) -> None:
    session = FakeSession([FakeResponse(404, body=b"\x80not utf-8")])
    with pytest.raises(APIError) as info:
        await fetch_with_retry(session, URL, "coin details", sleep=clock.sleep)
    assert info.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_rate_limit_exhausts_retries(clock) -> None:
    session = FakeSession([FakeResponse(429), FakeResponse(429), FakeResponse(429, headers={"Retry-After": "30"})])
    with pytest.raises(APIError) as info:
        await fetch_with_retry(session, URL, "ping", max_retries=2, sleep=clock.sleep)
    assert info.value.kind is ErrorKind.RATE_LIMIT
    assert info.value.retry_after == 30.0
    assert len(session.calls) == 3
    assert clock.sleeps == [1.0, 2.0]


@pytest.mark.asyncio
@pytest.mark.parametrize("status, kind", [(404, ErrorKind.NOT_FOUND), (500, ErrorKind.SERVER), (400, ErrorKind.UNKNOWN)])
async def test_other_statuses_are_not_retried(clock, status, kind) -> None:
    session = FakeSession([FakeResponse(status), FakeResponse(200, {})])
    with pytest.raises(APIError) as info:
        await fetch_with_retry(session, URL, "coin details", sleep=clock.sleep)
    assert info.value.kind is kind
    assert "coin details" in info.value.technical_message
    assert len(session.calls) == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError(), OSError("unreachable")],
)
async def test_transport_failure_is_network_without_retry(clock, exc) -> None:
    session = FakeSession([exc, FakeResponse(200, {})])
    with pytest.raises(APIError) as info:
        await fetch_with_retry(session, URL, "ping", sleep=clock.sleep)
    assert info.value.kind is ErrorKind.NETWORK
    assert len(session.calls) == 1


@pytest.mark.asyncio
async def test_invalid_json_is_unknown(clock) -> None:
    session = FakeSession([FakeResponse(200, json_error=ValueError("Expecting value"))])
    with pytest.raises(APIError) as info:
        await fetch_with_retry(session, URL, "ping", sleep=clock.sleep)
    assert info.value.kind is ErrorKind.UNKNOWN


@pytest.mark.asyncio
async def test_zero_retries(clock) -> None:
    session = FakeSession([FakeResponse(429), FakeResponse(200, {})])
    with pytest.raises(APIError):
        await fetch_with_retry(session, URL, "ping", max_retries=0, sleep=clock.sleep)
    assert len(session.calls) == 1


def test_retry_delay_is_capped() -> None:
    assert [retry_delay(a) for a in range(7)] == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0, 30.0]
