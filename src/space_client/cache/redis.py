"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Redis-backed cache backend shared across processes.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from .base import CacheBackend, escape_glob
from .config import DEFAULT_CACHE_TTL_S, RedisCacheConfig

logger = logging.getLogger("space_client.cache.redis")

T = TypeVar("T")

RECONNECT_MAX_RETRIES = 3
RECONNECT_BACKOFF_BASE_S = 0.2
RECONNECT_BACKOFF_CAP_S = 2.0
SCAN_BATCH_SIZE = 500


def _decode(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8")
    return raw


class RedisCacheBackend(CacheBackend):
    """
    Cache backend on top of ``redis.asyncio``.

    The connection is opened lazily by the first operation and bounded by
    ``connect_timeout_ms``. Every key is stored as ``{key_prefix}{key}``;
    enumeration strips the prefix again. Values are JSON documents and
    expire server-side through ``PX`` when a positive TTL applies.

    No method raises on connectivity, protocol or decoding failures. They
    are logged and the operation returns ``None``/``False``/``[]`` or
    nothing, within ``connect_timeout_ms`` and without per-command retries.
    A connection-level failure drops the connection so the next call runs
    a fresh round of bounded reconnect attempts.

    Args:
        config: Redis connection parameters.
        default_ttl: TTL in seconds applied when ``set`` omits one.
        client_factory: Optional zero-arg callable returning an async Redis
            client; defaults to building one from ``config``.
    """

    backend_id = "redis"

    def __init__(
        self,
        config: RedisCacheConfig,
        default_ttl: float = DEFAULT_CACHE_TTL_S,
        *,
        client_factory: Callable[[], Any] | None = None,
    ) -> None:
        self._config = config
        self._default_ttl = default_ttl
        self._client_factory = client_factory or self._build_client
        self._client: Any | None = None
        self._connected = False
        self._connect_lock = asyncio.Lock()

    @property
    def config(self) -> RedisCacheConfig:
        return self._config

    @property
    def connected(self) -> bool:
        return self._connected

    def _key(self, key: str) -> str:
        return f"{self._config.key_prefix}{key}"

    def _strip(self, key: str | bytes) -> str:
        text = _decode(key)
        prefix = self._config.key_prefix
        if prefix and text.startswith(prefix):
            return text[len(prefix):]
        return text

    def _build_client(self) -> Any:
        """Create a client with socket timeouts and no per-command retries."""
        try:
            import redis.asyncio as redis
            from redis.asyncio.retry import Retry
            from redis.backoff import NoBackoff
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "Redis cache backend requires `redis` to be installed."
            ) from exc

        timeout_s = self._config.connect_timeout_s
        return redis.Redis(
            host=self._config.host,
            port=self._config.port,
            db=self._config.db,
            password=self._config.password or None,
            socket_connect_timeout=timeout_s,
            socket_timeout=timeout_s,
            retry_on_timeout=False,
            retry=Retry(NoBackoff(), 0),
            decode_responses=True,
        )

    def _reconnect_delay(self, failures: int) -> float:
        from redis.backoff import ExponentialBackoff

        backoff = ExponentialBackoff(
            cap=RECONNECT_BACKOFF_CAP_S, base=RECONNECT_BACKOFF_BASE_S
        )
        return backoff.compute(failures)

    async def _ensure_connected(self) -> Any | None:
        """
        Return a live client, connecting on demand; ``None`` when unreachable.

        Makes up to ``RECONNECT_MAX_RETRIES`` attempts, each bounded by the
        connect timeout, sleeping an exponentially growing delay in between.
        After the last failure it gives up until the next operation.
        """
        if self._connected and self._client is not None:
            return self._client

        async with self._connect_lock:
            if self._connected and self._client is not None:
                return self._client

            stale, self._client = self._client, None
            if stale is not None:
                await self._dispose(stale)

            for attempt in range(RECONNECT_MAX_RETRIES):
                if attempt:
                    await asyncio.sleep(self._reconnect_delay(attempt - 1))
                client = None
                try:
                    client = self._client_factory()
                    await asyncio.wait_for(
                        client.ping(), timeout=self._config.connect_timeout_s
                    )
                except Exception as exc:  # noqa: BLE001
                    logger.warning(
                        "Redis cache connection to %s:%s failed (attempt %d/%d): %s",
                        self._config.host,
                        self._config.port,
                        attempt + 1,
                        RECONNECT_MAX_RETRIES,
                        str(exc) or type(exc).__name__,
                    )
                    if client is not None:
                        await self._dispose(client)
                    continue

                self._client = client
                self._connected = True
                logger.info(
                    "Connected to Redis cache at %s:%s/%s",
                    self._config.host,
                    self._config.port,
                    self._config.db,
                )
                return client

            logger.error(
                "Giving up on Redis cache at %s:%s until the next operation",
                self._config.host,
                self._config.port,
            )
            return None

    async def _dispose(self, client: Any) -> None:
        close = getattr(client, "aclose", None) or getattr(client, "close", None)
        if close is None:
            return
        try:
            await close()
        except Exception:  # noqa: BLE001
            logger.debug("Ignoring error while disposing Redis client", exc_info=True)

    def _is_connection_error(self, error: Exception) -> bool:
        if isinstance(error, (ConnectionError, OSError, asyncio.TimeoutError)):
            return True
        try:
            from redis.exceptions import ConnectionError as RedisConnectionError
            from redis.exceptions import TimeoutError as RedisTimeoutError
        except ModuleNotFoundError:  # pragma: no cover
            return False
        return isinstance(error, (RedisConnectionError, RedisTimeoutError))

    async def _call(
        self,
        action: str,
        default: T,
        operation: Callable[[Any], Awaitable[T]],
    ) -> T:
        """
        Run one Redis operation bounded by the connect timeout.

        Any failure is logged and yields `default` without retrying; a
        connection error or timeout drops the connection.
        """
        client = await self._ensure_connected()
        if client is None:
            return default
        try:
            return await asyncio.wait_for(
                operation(client), timeout=self._config.connect_timeout_s
            )
        except Exception as exc:  # noqa: BLE001
            if self._is_connection_error(exc):
                self._connected = False
            logger.error(
                "Redis cache %s failed: %s", action, str(exc) or type(exc).__name__
            )
            return default

    async def get(self, key: str) -> Any | None:
        async def op(client: Any) -> Any | None:
            raw = await client.get(self._key(key))
            if raw is None:
                return None
            try:
                return json.loads(_decode(raw))
            except ValueError:
                logger.warning("Discarding undecodable cache value for key %s", key)
                return None

        return await self._call("get", None, op)

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        try:
            payload = json.dumps(value, ensure_ascii=True)
        except (TypeError, ValueError) as exc:
            logger.error("Cannot serialize cache value for key %s: %s", key, exc)
            return

        actual_ttl = self._default_ttl if ttl is None else ttl

        async def op(client: Any) -> None:
            if actual_ttl > 0:
                await client.set(
                    self._key(key), payload, px=max(1, int(actual_ttl * 1000))
                )
            else:
                await client.set(self._key(key), payload)

        await self._call("set", None, op)

    async def delete(self, key: str) -> None:
        async def op(client: Any) -> None:
            await client.delete(self._key(key))

        await self._call("delete", None, op)

    async def clear(self) -> None:
        """Delete keys under this backend's prefix only; never FLUSHDB."""

        async def op(client: Any) -> None:
            match = f"{escape_glob(self._config.key_prefix)}*"
            batch: list[Any] = []
            async for raw in client.scan_iter(match=match, count=SCAN_BATCH_SIZE):
                batch.append(raw)
                if len(batch) >= SCAN_BATCH_SIZE:
                    await client.delete(*batch)
                    batch = []
            if batch:
                await client.delete(*batch)

        await self._call("clear", None, op)

    async def has(self, key: str) -> bool:
        async def op(client: Any) -> bool:
            return int(await client.exists(self._key(key))) == 1

        return await self._call("has", False, op)

    async def keys(self, pattern: str | None = None) -> list[str]:
        async def op(client: Any) -> list[str]:
            match = f"{escape_glob(self._config.key_prefix)}{pattern or '*'}"
            return [
                self._strip(raw)
                async for raw in client.scan_iter(match=match, count=SCAN_BATCH_SIZE)
            ]

        return await self._call("keys", [], op)

    async def ping(self) -> bool:
        """Liveness probe; ``False`` when Redis cannot be reached."""

        async def op(client: Any) -> bool:
            return bool(await client.ping())

        return await self._call("ping", False, op)

    async def close(self) -> None:
        client, self._client = self._client, None
        self._connected = False
        if client is not None:
            await self._dispose(client)
            logger.info("Redis cache connection closed")

    def stats(self) -> dict[str, Any]:
        return {
            "connected": self._connected,
            "host": self._config.host,
            "port": self._config.port,
            "db": self._config.db,
            "key_prefix": self._config.key_prefix,
        }
