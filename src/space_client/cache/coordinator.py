"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache coordinator used by the client and its API modules.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import CacheConfigurationError
from .base import CacheBackend, escape_glob
from .config import DEFAULT_KEY_PREFIX, CacheConfig
from .factory import create_cache_backend, validate_cache_config

logger = logging.getLogger("space_client.cache")


class CacheCoordinator:
    """
    Single entry point to the configured cache backend.

    The coordinator namespaces every key with ``space-client:`` on top of
    whatever prefix the backend applies, builds the per-user domain keys
    and implements user-wide invalidation. Backend failures are logged and
    degrade to a cache miss; only configuration errors raise, and only at
    construction time.

    Args:
        config: Cache configuration. ``None`` or ``enabled=False`` yields a
            permanently disabled coordinator.
        backend: Pre-built backend, bypassing the factory.
        redis_client_factory: Forwarded to the Redis backend.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        *,
        backend: CacheBackend | None = None,
        redis_client_factory: Any | None = None,
    ) -> None:
        self._config = config or CacheConfig(enabled=backend is not None)
        self._prefix = DEFAULT_KEY_PREFIX
        self._backend: CacheBackend | None = None
        self._enabled = False

        if not self._config.enabled:
            return

        if backend is not None:
            self._backend = backend
            self._enabled = True
            return

        try:
            validate_cache_config(self._config)
            self._backend = create_cache_backend(
                self._config, redis_client_factory=redis_client_factory
            )
        except CacheConfigurationError:
            raise
        except Exception as exc:
            logger.error("Failed to initialize cache: %s", exc)
            raise CacheConfigurationError(f"Cache initialization failed: {exc}") from exc
        self._enabled = True
        logger.debug("Cache enabled with %s backend", self._backend.backend_id)

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def default_ttl(self) -> int:
        return self._config.effective_ttl

    def is_enabled(self) -> bool:
        return self._enabled and self._backend is not None

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _strip(self, key: str) -> str:
        if key.startswith(self._prefix):
            return key[len(self._prefix):]
        return key

    async def get(self, key: str) -> Any | None:
        if not self.is_enabled():
            return None
        try:
            value = await self._backend.get(self._full_key(key))  # type: ignore[union-attr]
        except Exception:
            logger.exception("Error getting cached value for %s", key)
            return None
        logger.debug("Cache %s for %s", "hit" if value is not None else "miss", key)
        return value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        if not self.is_enabled():
            return
        try:
            await self._backend.set(self._full_key(key), value, ttl)  # type: ignore[union-attr]
        except Exception:
            logger.exception("Error setting cached value for %s", key)

    async def delete(self, key: str) -> None:
        if not self.is_enabled():
            return
        try:
            await self._backend.delete(self._full_key(key))  # type: ignore[union-attr]
        except Exception:
            logger.exception("Error deleting cached value for %s", key)

    async def has(self, key: str) -> bool:
        if not self.is_enabled():
            return False
        try:
            return await self._backend.has(self._full_key(key))  # type: ignore[union-attr]
        except Exception:
            logger.exception("Error checking cached value for %s", key)
            return False

    async def clear(self) -> None:
        if not self.is_enabled():
            return
        try:
            await self._backend.clear()  # type: ignore[union-attr]
        except Exception:
            logger.exception("Error clearing cache")

    async def keys(self, pattern: str | None = None) -> list[str]:
        """List keys (without the coordinator namespace) matching a glob pattern."""
        if not self.is_enabled():
            return []
        try:
            keys = await self._backend.keys(self._full_key(pattern or "*"))  # type: ignore[union-attr]
        except Exception:
            logger.exception("Error getting cache keys for pattern %s", pattern)
            return []
        return [self._strip(key) for key in keys]

    def get_contract_key(self, user_id: str) -> str:
        return f"contract:{user_id}"

    def get_feature_key(self, user_id: str, feature_id: str) -> str:
        return f"feature:{user_id}:{feature_id}"

    def get_subscription_key(self, user_id: str) -> str:
        return f"subscription:{user_id}"

    def get_pricing_token_key(self, user_id: str) -> str:
        return f"pricing-token:{user_id}"

    async def invalidate_user(self, user_id: str) -> None:
        """
        Drop every cached entry that belongs to `user_id`.

        Covers the contract, all feature evaluations, the subscription and
        the pricing token. Writes that change a user's contract call this
        before caching the fresh contract.
        """
        if not self.is_enabled():
            return

        exact_keys = (
            self.get_contract_key(user_id),
            self.get_subscription_key(user_id),
            self.get_pricing_token_key(user_id),
        )
        # user_id is data, not a pattern
        feature_pattern = f"{escape_glob(self.get_feature_key(user_id, ''))}*"
        try:
            for key in exact_keys:
                await self.delete(key)
            for key in await self.keys(feature_pattern):
                await self.delete(key)
        except Exception:
            logger.exception("Error invalidating cache for user %s", user_id)

    def stats(self) -> dict[str, Any]:
        """Backend diagnostics; empty when the cache is disabled."""
        if not self.is_enabled():
            return {}
        stats_fn = getattr(self._backend, "stats", None)
        if not callable(stats_fn):
            return {"backend": self._backend.backend_id}  # type: ignore[union-attr]
        return {"backend": self._backend.backend_id, **stats_fn()}  # type: ignore[union-attr]

    async def close(self) -> None:
        """Close the backend and disable the coordinator. Safe to repeat."""
        backend, self._backend = self._backend, None
        self._enabled = False
        if backend is None:
            return
        try:
            await backend.close()
        except Exception:
            logger.exception("Error closing cache backend")
