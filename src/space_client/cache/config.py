"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache configuration objects and environment loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal
from urllib.parse import unquote, urlparse

from ..errors import CacheConfigurationError

CacheType = Literal["inmemory", "redis"]

DEFAULT_CACHE_TTL_S = 300
DEFAULT_REDIS_PORT = 6379
DEFAULT_REDIS_DB = 0
DEFAULT_REDIS_CONNECT_TIMEOUT_MS = 5000
DEFAULT_KEY_PREFIX = "space-client:"


@dataclass(frozen=True, slots=True)
class RedisCacheConfig:
    """
    Connection parameters for the Redis cache backend.

    Attributes:
        host: Redis host name. Required.
        port: Redis TCP port.
        password: Optional password (AUTH).
        db: Logical database index, 0-15.
        connect_timeout_ms: Upper bound for establishing a connection.
        key_prefix: Namespace prepended to every key on the wire.
    """

    host: str
    port: int = DEFAULT_REDIS_PORT
    password: str | None = None
    db: int = DEFAULT_REDIS_DB
    connect_timeout_ms: int = DEFAULT_REDIS_CONNECT_TIMEOUT_MS
    key_prefix: str = DEFAULT_KEY_PREFIX

    @property
    def connect_timeout_s(self) -> float:
        return self.connect_timeout_ms / 1000.0

    @staticmethod
    def from_url(url: str, *, key_prefix: str = DEFAULT_KEY_PREFIX) -> "RedisCacheConfig":
        """Parse a ``redis://[:password@]host[:port][/db]`` URL."""
        parsed = urlparse(url)
        db_part = parsed.path.lstrip("/")
        return RedisCacheConfig(
            host=parsed.hostname or "",
            port=parsed.port or DEFAULT_REDIS_PORT,
            password=unquote(parsed.password) if parsed.password else None,
            db=int(db_part) if db_part else DEFAULT_REDIS_DB,
            key_prefix=key_prefix,
        )


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """
    Cache configuration for one client instance.

    Built once when the client is created and never mutated afterwards.
    """

    enabled: bool = False
    type: str = "inmemory"
    ttl: int | None = DEFAULT_CACHE_TTL_S
    redis: RedisCacheConfig | None = None

    @property
    def effective_ttl(self) -> int:
        return self.ttl or DEFAULT_CACHE_TTL_S

    @staticmethod
    def from_env() -> "CacheConfig":
        """
        Load cache configuration from `SPACE_CACHE_*` environment variables.

        Redis resolution:
        - Uses `SPACE_CACHE_REDIS_URL` (or `SPACE_REDIS_URL`) when set.
        - Otherwise reads host/port/db/password variables. The Redis section
          is only built when a host is available.

        Raises:
            CacheConfigurationError: A numeric variable or the Redis URL
                cannot be parsed.
        """
        enabled = _env_first("SPACE_CACHE_ENABLED", default="false") or "false"
        cache_type = _env_first("SPACE_CACHE_TYPE", default="inmemory") or "inmemory"
        prefix = (
            _env_first("SPACE_CACHE_REDIS_PREFIX", default=DEFAULT_KEY_PREFIX)
            or DEFAULT_KEY_PREFIX
        )
        timeout_ms = _env_int(
            "SPACE_CACHE_REDIS_CONNECT_TIMEOUT_MS",
            default=DEFAULT_REDIS_CONNECT_TIMEOUT_MS,
        )

        redis: RedisCacheConfig | None = None
        url_names = ("SPACE_CACHE_REDIS_URL", "SPACE_REDIS_URL")
        url = _env_first(*url_names)
        if url:
            try:
                parsed = RedisCacheConfig.from_url(url, key_prefix=prefix)
            except ValueError as exc:
                raise CacheConfigurationError(
                    f"Invalid Redis URL in {' or '.join(url_names)}: {exc}"
                ) from exc
            redis = RedisCacheConfig(
                host=parsed.host,
                port=parsed.port,
                password=parsed.password,
                db=parsed.db,
                connect_timeout_ms=timeout_ms,
                key_prefix=prefix,
            )
        else:
            host = _env_first("SPACE_CACHE_REDIS_HOST", "SPACE_REDIS_HOST")
            if host:
                redis = RedisCacheConfig(
                    host=host,
                    port=_env_int(
                        "SPACE_CACHE_REDIS_PORT",
                        "SPACE_REDIS_PORT",
                        default=DEFAULT_REDIS_PORT,
                    ),
                    password=_env_first(
                        "SPACE_CACHE_REDIS_PASSWORD", "SPACE_REDIS_PASSWORD"
                    ),
                    db=_env_int(
                        "SPACE_CACHE_REDIS_DB", "SPACE_REDIS_DB", default=DEFAULT_REDIS_DB
                    ),
                    connect_timeout_ms=timeout_ms,
                    key_prefix=prefix,
                )

        return CacheConfig(
            enabled=enabled.lower() in ("1", "true", "yes", "on"),
            type=cache_type.lower(),
            ttl=_env_int("SPACE_CACHE_TTL", default=DEFAULT_CACHE_TTL_S),
            redis=redis,
        )


def _env_first(*names: str, default: str | None = None) -> str | None:
    """Return the first non-empty environment variable in `names`."""
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


def _env_int(*names: str, default: int) -> int:
    """Integer variant of `_env_first`; malformed values name the variable."""
    for name in names:
        raw = (os.getenv(name) or "").strip()
        if not raw:
            continue
        try:
            return int(raw)
        except ValueError as exc:
            raise CacheConfigurationError(
                f"Environment variable {name} must be an integer, got {raw!r}"
            ) from exc
    return default
