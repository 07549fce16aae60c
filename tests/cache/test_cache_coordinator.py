from __future__ import annotations

import asyncio

import pytest

from space_client.cache import CacheConfig, CacheCoordinator, InMemoryCacheBackend, RedisCacheConfig
from space_client.errors import CacheConfigurationError


def run_async(coro):
    return asyncio.run(coro)


class _ExplodingBackend:
    backend_id = "exploding"

    def __init__(self) -> None:
        self.closed = 0

    async def get(self, key):
        raise RuntimeError("boom")

    async def set(self, key, value, ttl=None):
        raise RuntimeError("boom")

    async def delete(self, key):
        raise RuntimeError("boom")

    async def clear(self):
        raise RuntimeError("boom")

    async def has(self, key):
        raise RuntimeError("boom")

    async def keys(self, pattern=None):
        raise RuntimeError("boom")

    async def close(self):
        self.closed += 1
        raise RuntimeError("boom")


def _enabled(ttl: int = 300) -> CacheCoordinator:
    return CacheCoordinator(CacheConfig(enabled=True, ttl=ttl))


def test_domain_key_builders():
    cache = CacheCoordinator()
    assert cache.get_contract_key("user123") == "contract:user123"
    assert cache.get_feature_key("user123", "feature-name") == "feature:user123:feature-name"
    assert cache.get_subscription_key("user123") == "subscription:user123"
    assert cache.get_pricing_token_key("user123") == "pricing-token:user123"


def test_disabled_by_default_returns_benign_defaults():
    cache = CacheCoordinator()
    assert cache.is_enabled() is False

    async def scenario() -> None:
        await cache.set("k", "v")
        assert await cache.get("k") is None
        assert await cache.has("k") is False
        assert await cache.keys() == []
        await cache.delete("k")
        await cache.clear()
        await cache.invalidate_user("u1")
        await cache.close()

    run_async(scenario())
    assert cache.stats() == {}


def test_explicitly_disabled_config_ignores_invalid_values():
    cache = CacheCoordinator(CacheConfig(enabled=False, type="redis", ttl=-1))
    assert cache.is_enabled() is False


def test_invalid_configuration_fails_construction():
    with pytest.raises(CacheConfigurationError):
        CacheCoordinator(CacheConfig(enabled=True, ttl=0))
    with pytest.raises(CacheConfigurationError):
        CacheCoordinator(CacheConfig(enabled=True, type="redis"))
    with pytest.raises(CacheConfigurationError):
        CacheCoordinator(
            CacheConfig(enabled=True, type="redis", redis=RedisCacheConfig(host="h", port=0))
        )


def test_namespace_is_applied_on_top_of_backend():
    backend = InMemoryCacheBackend()
    cache = CacheCoordinator(backend=backend)
    assert cache.is_enabled() is True

    async def scenario() -> None:
        await cache.set("contract:u1", {"a": 1})
        assert await backend.keys() == ["space-client:contract:u1"]
        assert await cache.keys() == ["contract:u1"]
        assert await cache.get("contract:u1") == {"a": 1}
        assert await cache.has("contract:u1") is True
        await cache.close()

    run_async(scenario())


def test_end_to_end_expiry_with_short_ttl():
    cache = _enabled(ttl=300)

    async def scenario() -> None:
        await cache.set("k", {"a": 1})
        assert await cache.get("k") == {"a": 1}

        await cache.set("short", {"a": 1}, ttl=1)
        await asyncio.sleep(1.1)
        assert await cache.get("short") is None
        assert await cache.has("short") is False
        assert await cache.get("k") == {"a": 1}
        await cache.close()

    run_async(scenario())


def test_invalidate_user_removes_every_entry_of_that_user_only():
    cache = _enabled()

    async def scenario() -> None:
        for user in ("u1", "u2"):
            await cache.set(cache.get_contract_key(user), {"user": user})
            await cache.set(cache.get_feature_key(user, "svc-login"), {"eval": True})
            await cache.set(cache.get_feature_key(user, "svc-export"), {"eval": False})
            await cache.set(cache.get_subscription_key(user), {"plan": "PRO"})
            await cache.set(cache.get_pricing_token_key(user), "token")
        await cache.set("feature:u10:svc-login", {"eval": True})

        await cache.invalidate_user("u1")

        assert await cache.has("contract:u1") is False
        assert await cache.has("feature:u1:svc-login") is False
        assert await cache.has("feature:u1:svc-export") is False
        assert await cache.has("subscription:u1") is False
        assert await cache.has("pricing-token:u1") is False

        assert await cache.has("contract:u2") is True
        assert await cache.has("feature:u2:svc-login") is True
        assert await cache.has("feature:u2:svc-export") is True
        assert await cache.has("subscription:u2") is True
        assert await cache.has("pricing-token:u2") is True
        assert await cache.has("feature:u10:svc-login") is True
        await cache.close()

    run_async(scenario())


@pytest.mark.parametrize("user_id", ["u*", "u?", "*", "u\\1", "u[0-9]"])
def test_invalidate_user_treats_glob_characters_literally(user_id):
    cache = _enabled()

    async def scenario() -> None:
        for user in ("u1", user_id):
            await cache.set(cache.get_contract_key(user), {"user": user})
            await cache.set(cache.get_feature_key(user, "svc-login"), {"eval": True})
            await cache.set(cache.get_pricing_token_key(user), "token")

        await cache.invalidate_user(user_id)

        assert await cache.has(cache.get_contract_key(user_id)) is False
        assert await cache.has(cache.get_feature_key(user_id, "svc-login")) is False
        assert await cache.has(cache.get_pricing_token_key(user_id)) is False

        assert await cache.has("contract:u1") is True
        assert await cache.has("feature:u1:svc-login") is True
        assert await cache.has("pricing-token:u1") is True
        await cache.close()

    run_async(scenario())


def test_keys_pattern_and_clear():
    cache = _enabled()

    async def scenario() -> None:
        await cache.set("contract:u1", 1)
        await cache.set("contract:u2", 1)
        await cache.set("feature:u1:f", 1)
        assert sorted(await cache.keys("contract:*")) == ["contract:u1", "contract:u2"]
        await cache.delete("contract:u2")
        await cache.delete("contract:u2")
        assert await cache.keys("contract:*") == ["contract:u1"]
        await cache.clear()
        assert await cache.keys() == []
        await cache.close()

    run_async(scenario())


def test_backend_failures_never_propagate():
    backend = _ExplodingBackend()
    cache = CacheCoordinator(backend=backend)

    async def scenario() -> None:
        assert await cache.get("k") is None
        assert await cache.has("k") is False
        assert await cache.keys() == []
        await cache.set("k", "v")
        await cache.delete("k")
        await cache.clear()
        await cache.invalidate_user("u1")
        await cache.close()

    run_async(scenario())
    assert backend.closed == 1
    assert cache.is_enabled() is False


def test_close_disables_and_is_idempotent():
    cache = _enabled()

    async def scenario() -> None:
        await cache.set("k", "v")
        await cache.close()
        await cache.close()
        assert cache.is_enabled() is False
        assert await cache.get("k") is None

    run_async(scenario())


def test_stats_include_backend_diagnostics():
    cache = _enabled()

    async def scenario() -> None:
        await cache.set("k", "v")
        assert cache.stats() == {"backend": "inmemory", "total": 1, "active": 1, "expired": 0}
        await cache.close()

    run_async(scenario())
