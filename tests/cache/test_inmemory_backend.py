from __future__ import annotations

import asyncio
import time

import pytest

from space_client.cache import CacheEntry, InMemoryCacheBackend


def run_async(coro):
    return asyncio.run(coro)


@pytest.fixture
def clock(monkeypatch):
    now = [1_000_000.0]
    monkeypatch.setattr(time, "time", lambda: now[0])
    return now


def test_entry_expiry_is_computed_from_created_at_plus_ttl():
    entry = CacheEntry.create({"a": 1}, 30, now=100.0)
    assert entry.expires_at == 130.0
    assert not entry.is_expired(129.9)
    assert entry.is_expired(130.0)
    # Repeated checks never mutate the entry.
    assert entry.is_expired(130.0)


def test_entry_without_positive_ttl_never_expires():
    entry = CacheEntry.create("v", 0, now=100.0)
    assert entry.expires_at is None
    assert not entry.is_expired(10**12)


def test_set_get_and_missing_key():
    async def scenario() -> None:
        cache = InMemoryCacheBackend(default_ttl=300)
        await cache.set("k", {"a": 1})
        assert await cache.get("k") == {"a": 1}
        assert await cache.get("missing") is None
        await cache.close()

    run_async(scenario())


def test_expired_entries_are_absent_before_any_sweep(clock):
    async def scenario() -> None:
        cache = InMemoryCacheBackend(default_ttl=5, sweep_interval_s=3600)
        await cache.set("k", "v")
        clock[0] += 4.9
        assert await cache.has("k") is True
        clock[0] += 0.1
        assert await cache.get("k") is None
        assert await cache.has("k") is False
        await cache.close()

    run_async(scenario())


def test_explicit_ttl_overrides_default(clock):
    async def scenario() -> None:
        cache = InMemoryCacheBackend(default_ttl=300, sweep_interval_s=3600)
        await cache.set("short", 1, ttl=10)
        await cache.set("default", 2)
        clock[0] += 11
        assert await cache.get("short") is None
        assert await cache.get("default") == 2
        await cache.close()

    run_async(scenario())


def test_non_positive_ttl_stores_without_expiry(clock):
    async def scenario() -> None:
        cache = InMemoryCacheBackend(default_ttl=1, sweep_interval_s=3600)
        await cache.set("forever", "v", ttl=0)
        await cache.set("also-forever", "v", ttl=-5)
        clock[0] += 10**6
        assert await cache.get("forever") == "v"
        assert await cache.has("also-forever") is True
        assert cache.sweep_expired() == 0
        await cache.close()

    run_async(scenario())


def test_set_overwrites_existing_entry():
    async def scenario() -> None:
        cache = InMemoryCacheBackend()
        await cache.set("k", 1)
        await cache.set("k", 2)
        assert await cache.get("k") == 2
        assert cache.stats()["total"] == 1
        await cache.close()

    run_async(scenario())


def test_has_evicts_stale_entries_lazily(clock):
    async def scenario() -> None:
        cache = InMemoryCacheBackend(default_ttl=1, sweep_interval_s=3600)
        await cache.set("k", "v")
        clock[0] += 2
        assert cache.stats() == {"total": 1, "active": 0, "expired": 1}
        assert await cache.has("k") is False
        assert cache.stats() == {"total": 0, "active": 0, "expired": 0}
        await cache.close()

    run_async(scenario())


def test_keys_include_stale_entries_until_read(clock):
    async def scenario() -> None:
        cache = InMemoryCacheBackend(default_ttl=1, sweep_interval_s=3600)
        await cache.set("k", "v")
        clock[0] += 2
        assert await cache.keys() == ["k"]
        await cache.get("k")
        assert await cache.keys() == []
        await cache.close()

    run_async(scenario())


def test_delete_and_clear_are_idempotent():
    async def scenario() -> None:
        cache = InMemoryCacheBackend()
        await cache.delete("nope")
        await cache.clear()
        assert await cache.keys() == []

        await cache.set("a", 1)
        await cache.delete("a")
        await cache.delete("a")
        assert await cache.get("a") is None
        await cache.close()

    run_async(scenario())


def test_keys_glob_patterns():
    async def scenario() -> None:
        cache = InMemoryCacheBackend()
        for key in (
            "user:123:contract",
            "user:123:feature:login",
            "user:456:contract",
            "other",
        ):
            await cache.set(key, True)

        assert sorted(await cache.keys("user:123:*")) == [
            "user:123:contract",
            "user:123:feature:login",
        ]
        assert sorted(await cache.keys("user:*")) == [
            "user:123:contract",
            "user:123:feature:login",
            "user:456:contract",
        ]
        assert len(await cache.keys()) == 4
        assert sorted(await cache.keys("user:?56:*")) == ["user:456:contract"]
        # Regex metacharacters in patterns are literal.
        assert await cache.keys("user.123*") == []
        await cache.close()

    run_async(scenario())


def test_backslash_escapes_glob_characters():
    async def scenario() -> None:
        cache = InMemoryCacheBackend()
        for key in ("feature:u*:login", "feature:u1:login", "feature:u?:login"):
            await cache.set(key, True)

        assert await cache.keys("feature:u\\*:*") == ["feature:u*:login"]
        assert await cache.keys("feature:u\\?:*") == ["feature:u?:login"]
        assert len(await cache.keys("feature:u?:*")) == 3
        await cache.close()

    run_async(scenario())


def test_background_sweep_removes_write_only_keys():
    async def scenario() -> None:
        cache = InMemoryCacheBackend(default_ttl=0.01, sweep_interval_s=0.02)
        await cache.set("written-once", "v")
        await asyncio.sleep(0.1)
        assert cache.stats()["total"] == 0
        await cache.close()

    run_async(scenario())


def test_close_stops_sweep_clears_storage_and_is_idempotent():
    async def scenario() -> None:
        cache = InMemoryCacheBackend(sweep_interval_s=0.01)
        await cache.set("k", "v")
        sweeper = cache._sweeper  # noqa: SLF001
        assert sweeper is not None

        await cache.close()
        await cache.close()

        assert sweeper.done()
        assert cache._sweeper is None  # noqa: SLF001
        assert await cache.keys() == []

    run_async(scenario())


def test_calls_after_close_do_not_restart_sweep():
    async def scenario() -> None:
        cache = InMemoryCacheBackend(sweep_interval_s=0.01)
        await cache.close()

        await cache.set("k", "v")
        assert await cache.get("k") == "v"
        assert cache._sweeper is None  # noqa: SLF001

    run_async(scenario())


def test_stats_counts_active_and_expired(clock):
    async def scenario() -> None:
        cache = InMemoryCacheBackend(default_ttl=300, sweep_interval_s=3600)
        await cache.set("a", 1, ttl=1)
        await cache.set("b", 2)
        clock[0] += 5
        assert cache.stats() == {"total": 2, "active": 1, "expired": 1}
        assert cache.sweep_expired() == 1
        assert cache.stats() == {"total": 1, "active": 1, "expired": 0}
        await cache.close()

    run_async(scenario())
