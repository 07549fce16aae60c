"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for validating cache configuration and selecting backends.
"""

from __future__ import annotations

from typing import Any

from ..errors import CacheConfigurationError
from .base import CacheBackend
from .config import CacheConfig
from .inmemory import InMemoryCacheBackend

_INMEMORY_ALIASES = ("inmemory", "in_memory", "memory", "mem", "builtin")
_REDIS_ALIASES = ("redis", "networked")


def normalize_cache_type(value: str | None) -> str:
    """Map a configured backend type (or alias) to its canonical id."""
    key = (value or "inmemory").strip().lower()
    if key in _INMEMORY_ALIASES:
        return "inmemory"
    if key in _REDIS_ALIASES:
        return "redis"
    raise CacheConfigurationError(f"Unsupported cache type: {value}")


def validate_cache_config(config: CacheConfig) -> None:
    """
    Validate cache configuration without side effects.

    Rules:
    - Disabled configurations are always valid.
    - `ttl`, when set, must be > 0.
    - Redis requires a connection section with a non-empty host, a port in
      1-65535, a db index in 0-15 and a positive connect timeout.

    Raises:
        CacheConfigurationError: When any rule is violated.
    """
    if not config.enabled:
        return

    cache_type = normalize_cache_type(config.type)

    if config.ttl is not None and config.ttl <= 0:
        raise CacheConfigurationError("TTL must be a positive number")

    if cache_type != "redis":
        return

    redis = config.redis
    if redis is None:
        raise CacheConfigurationError(
            "Redis configuration is required when using Redis cache type"
        )
    if not redis.host or not redis.host.strip():
        raise CacheConfigurationError("Redis host is required")
    if redis.port is not None and not 1 <= redis.port <= 65535:
        raise CacheConfigurationError("Redis port must be between 1 and 65535")
    if redis.db is not None and not 0 <= redis.db <= 15:
        raise CacheConfigurationError("Redis database number must be between 0 and 15")
    if redis.connect_timeout_ms is not None and redis.connect_timeout_ms <= 0:
        raise CacheConfigurationError("Redis connect timeout must be a positive number")


def create_cache_backend(
    config: CacheConfig,
    *,
    redis_client_factory: Any | None = None,
) -> CacheBackend:
    """
    Create the cache backend selected by `config.type`.

    Backends:
    - `inmemory` (default)
    - `redis`

    Args:
        config: Cache configuration; callers validate it first.
        redis_client_factory: Optional zero-arg callable used by the Redis
            backend instead of building its own client.

    Raises:
        CacheConfigurationError: Redis selected without connection
            parameters, or unknown backend type.
    """
    cache_type = normalize_cache_type(config.type)
    ttl = config.effective_ttl

    if cache_type == "inmemory":
        return InMemoryCacheBackend(default_ttl=ttl)

    if config.redis is None:
        raise CacheConfigurationError(
            "Redis configuration is required when using Redis cache type"
        )

    from .redis import RedisCacheBackend

    return RedisCacheBackend(
        config.redis,
        default_ttl=ttl,
        client_factory=redis_client_factory,
    )
