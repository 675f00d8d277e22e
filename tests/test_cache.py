"""
Tests for TTLCache: lazy expiry, eviction on read, clear, size bound.
"""

from __future__ import annotations

from cryptotracker.cache import TTLCache


def test_get_returns_value_before_expiry(clock) -> None:
    cache = TTLCache(clock=clock)
    cache.set("k", [1, 2, 3], ttl=10)
    clock.advance(9.999)
    assert cache.get("k") == [1, 2, 3]


def test_expired_entry_is_absent_and_evicted(clock) -> None:
    cache = TTLCache(clock=clock)
    cache.set("k", "v", ttl=10)
    clock.advance(10)
    assert len(cache) == 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_default_ttl_is_sixty_seconds(clock) -> None:
    cache = TTLCache(clock=clock)
    cache.set("k", "v")
    clock.advance(59)
    assert cache.get("k") == "v"
    clock.advance(1)
    assert cache.get("k") is None


def test_missing_key() -> None:
    assert TTLCache().get("nope") is None


def test_clear_removes_everything(clock) -> None:
    cache = TTLCache(clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()
    assert len(cache) == 0
    assert "a" not in cache


def test_contains_honours_expiry(clock) -> None:
    cache = TTLCache(clock=clock)
    cache.set("a", 1, ttl=1)
    assert "a" in cache
    clock.advance(2)
    assert "a" not in cache


def test_size_bound_purges_expired_first(clock) -> None:
    cache = TTLCache(max_entries=2, clock=clock)
    cache.set("old", 1, ttl=1)
    cache.set("keep", 2, ttl=100)
    clock.advance(5)
    cache.set("new", 3, ttl=100)
    assert cache.get("keep") == 2
    assert cache.get("new") == 3
    assert len(cache) == 2


def test_size_bound_drops_oldest_writes(clock) -> None:
    cache = TTLCache(max_entries=2, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)  # rewrite moves "a" to the newest slot
    cache.set("c", 3)
    assert cache.get("b") is None
    assert cache.get("a") == 10
    assert cache.get("c") == 3


def test_unbounded_when_disabled(clock) -> None:
    cache = TTLCache(max_entries=None, clock=clock)
    for i in range(5000):
        cache.set(f"k{i}", i)
    assert len(cache) == 5000
