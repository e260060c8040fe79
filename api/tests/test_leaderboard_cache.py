import pytest

from services.leaderboard_cache import LeaderboardCache
from tests.fakes import FakeClock


def test_get_returns_value_within_ttl():
    clock = FakeClock()
    cache = LeaderboardCache(ttl_seconds=60, max_entries=10, clock=clock)
    cache.set("k", {"results": [1]})

    clock.advance(59)
    assert cache.get("k") == {"results": [1]}


def test_expired_entry_is_reaped_on_read():
    clock = FakeClock()
    cache = LeaderboardCache(ttl_seconds=60, max_entries=10, clock=clock)
    cache.set("k", "v")

    clock.advance(61)
    assert "k" in cache  # not reaped until read
    assert cache.get("k") is None
    assert "k" not in cache


def test_read_does_not_extend_expiry():
    clock = FakeClock()
    cache = LeaderboardCache(ttl_seconds=60, max_entries=10, clock=clock)
    cache.set("k", "v")

    clock.advance(30)
    assert cache.get("k") == "v"
    clock.advance(31)
    assert cache.get("k") is None


def test_missing_key_returns_none():
    cache = LeaderboardCache()
    assert cache.get("nope") is None


def test_inserting_past_capacity_evicts_oldest_entry():
    cache = LeaderboardCache(ttl_seconds=60, max_entries=100)
    for i in range(100):
        cache.set(f"key-{i}", i)

    cache.set("key-100", 100)

    assert len(cache) == 100
    assert "key-0" not in cache
    for i in range(1, 101):
        assert f"key-{i}" in cache


def test_read_refreshes_recency_before_eviction():
    cache = LeaderboardCache(ttl_seconds=60, max_entries=3)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert cache.get("a") == 1
    cache.set("d", 4)

    assert "a" in cache
    assert "b" not in cache


def test_overwrite_replaces_value_and_expiry():
    clock = FakeClock()
    cache = LeaderboardCache(ttl_seconds=60, max_entries=2, clock=clock)
    cache.set("a", 1)
    clock.advance(50)
    cache.set("a", 2)
    clock.advance(50)

    assert cache.get("a") == 2
    assert len(cache) == 1


def test_invalid_capacity_rejected():
    with pytest.raises(ValueError):
        LeaderboardCache(max_entries=0)
