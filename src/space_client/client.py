"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

SPACE client: REST modules, pricing events and the client-owned cache.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .api import ContractModule, FeatureModule, ServiceModule
from .cache import CacheConfig, CacheCoordinator
from .config import DEFAULT_TIMEOUT_MS, SpaceClientSettings
from .errors import SpaceRequestError
from .events import EventHandler, SpaceEventChannel
from .transport import SpaceHttpTransport

logger = logging.getLogger("space_client")


class SpaceClient:
    """
    Entry point for talking to a SPACE instance.

    Each client owns exactly one ``CacheCoordinator``; its backend lives
    until ``close()``. Cache configuration is validated while the client
    is built, so a broken configuration fails construction.

    Args:
        settings: Connection and cache settings.
        transport: Optional pre-built HTTP transport.
        events: Optional pre-built event channel.
        redis_client_factory: Forwarded to the Redis cache backend.

    Raises:
        SpaceConfigurationError: Invalid connection settings.
        CacheConfigurationError: Invalid cache configuration.
    """

    def __init__(
        self,
        settings: SpaceClientSettings,
        *,
        transport: SpaceHttpTransport | None = None,
        events: SpaceEventChannel | None = None,
        redis_client_factory: Callable[[], Any] | None = None,
    ) -> None:
        settings.validate()
        self.settings = settings
        self._transport = transport or SpaceHttpTransport(
            settings.url, settings.api_key, timeout_ms=settings.timeout_ms
        )
        self._cache = CacheCoordinator(
            settings.cache, redis_client_factory=redis_client_factory
        )
        self._events = events or SpaceEventChannel(settings.url)

        self.contracts = ContractModule(self._transport, self._cache)
        self.features = FeatureModule(self._transport, self._cache)
        self.services = ServiceModule(self._transport, self.is_connected_to_space)

    @property
    def http_url(self) -> str:
        return self._transport.http_url

    @property
    def events(self) -> SpaceEventChannel:
        return self._events

    def get_cache(self) -> CacheCoordinator:
        return self._cache

    async def is_connected_to_space(self) -> bool:
        """Health check against ``/healthcheck``."""
        try:
            data = await self._transport.request("GET", "/healthcheck")
        except SpaceRequestError as e:
            logger.warning("SPACE health check failed: %s", e)
            return False
        return isinstance(data, dict) and bool(data.get("message"))

    def on(self, event: str, handler: EventHandler) -> None:
        self._events.on(event, handler)

    def remove_listener(self, event: str) -> None:
        self._events.remove_listener(event)

    def remove_all_listeners(self) -> None:
        self._events.remove_all_listeners()

    async def connect(self) -> None:
        """Open the pricing event channel."""
        await self._events.connect()

    async def disconnect(self) -> None:
        """Close the pricing event channel; registered handlers are kept."""
        await self._events.disconnect()

    async def close(self) -> None:
        """Disconnect events and release the cache backend. Safe to repeat."""
        try:
            await self.disconnect()
        finally:
            await self._cache.close()

    async def __aenter__(self) -> "SpaceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def connect(
    url: str,
    api_key: str,
    *,
    timeout_ms: int | None = None,
    cache: CacheConfig | None = None,
) -> SpaceClient:
    """
    Build a validated ``SpaceClient``.

    Raises:
        SpaceConfigurationError: Invalid url, api key or timeout.
        CacheConfigurationError: Invalid cache configuration.
    """
    settings = SpaceClientSettings(
        url=url,
        api_key=api_key,
        timeout_ms=DEFAULT_TIMEOUT_MS if timeout_ms is None else timeout_ms,
        cache=cache or CacheConfig(),
    )
    return SpaceClient(settings)
