"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Pricing event channel: one handler per event name, fed by a Socket.IO client.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any

from .errors import SpaceEventError

logger = logging.getLogger("space_client.events")

PRICINGS_NAMESPACE = "/pricings"
SOCKETIO_PATH = "events"

VALID_EVENTS = (
    "synchronized",
    "pricing_created",
    "pricing_archived",
    "pricing_actived",
    "service_disabled",
    "error",
)

EventHandler = Callable[[Any], Any]


class SpaceEventChannel:
    """
    Real-time pricing notifications from SPACE.

    Handlers are kept in a table keyed by lower-cased event name; at most
    one handler is active per event and registering again replaces it.
    Handlers receive one argument: the event details (``None`` for
    ``synchronized``). Coroutine handlers are awaited.

    Args:
        url: Base URL of the SPACE instance.
        client_factory: Optional zero-arg callable returning a Socket.IO
            ``AsyncClient``-compatible object.
    """

    def __init__(self, url: str, *, client_factory: Callable[[], Any] | None = None) -> None:
        self._url = url.rstrip("/")
        self._client_factory = client_factory or self._build_client
        self._client: Any | None = None
        self._handlers: dict[str, EventHandler] = {}

    @property
    def connected(self) -> bool:
        return bool(self._client is not None and getattr(self._client, "connected", False))

    def handlers(self) -> dict[str, EventHandler]:
        return dict(self._handlers)

    def on(self, event: str, handler: EventHandler) -> None:
        key = event.lower()
        if key not in VALID_EVENTS:
            logger.warning("No handler for event: %s", event)
            return
        self._handlers[key] = handler

    def remove_listener(self, event: str) -> None:
        key = event.lower()
        if key not in VALID_EVENTS:
            logger.warning("No handler to remove for event: %s", event)
            return
        self._handlers.pop(key, None)

    def remove_all_listeners(self) -> None:
        self._handlers.clear()

    async def dispatch(self, event: str, data: Any = None) -> bool:
        """Invoke the handler for `event`; returns whether one was registered."""
        handler = self._handlers.get(event.lower())
        if handler is None:
            return False
        try:
            result = handler(data)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Handler for SPACE event %s failed", event)
        return True

    async def handle_message(self, message: Any) -> bool:
        """Route a ``{"code": ..., "details": ...}`` message to its handler."""
        if not isinstance(message, dict) or not isinstance(message.get("code"), str):
            logger.warning("Ignoring malformed SPACE event message: %r", message)
            return False
        return await self.dispatch(message["code"], message.get("details"))

    async def connect(self) -> None:
        """Connect to the pricing namespace; no-op when already connected."""
        if self.connected:
            return
        if self._client is None:
            self._client = self._client_factory()
            self._bind(self._client)
        try:
            await self._client.connect(
                self._url,
                namespaces=[PRICINGS_NAMESPACE],
                socketio_path=SOCKETIO_PATH,
                transports=["websocket"],
            )
        except Exception as e:
            await self.dispatch("error", e)
            raise SpaceEventError(f"Could not connect to SPACE events at {self._url}: {e}") from e

    async def disconnect(self) -> None:
        """Disconnect from the pricing namespace; no-op when not connected."""
        client, self._client = self._client, None
        if client is None:
            return
        if getattr(client, "connected", False):
            await client.disconnect()
            logger.info("Disconnected from SPACE events")

    def _build_client(self) -> Any:
        try:
            import socketio
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise SpaceEventError(
                "SPACE events require `python-socketio` to be installed."
            ) from exc
        return socketio.AsyncClient(reconnection=True)

    def _bind(self, client: Any) -> None:
        async def on_connect() -> None:
            logger.info("Connected to SPACE events")
            await self.dispatch("synchronized")

        async def on_message(data: Any) -> None:
            await self.handle_message(data)

        async def on_connect_error(data: Any) -> None:
            await self.dispatch("error", data)

        client.on("connect", on_connect, namespace=PRICINGS_NAMESPACE)
        client.on("message", on_message, namespace=PRICINGS_NAMESPACE)
        client.on("connect_error", on_connect_error, namespace=PRICINGS_NAMESPACE)
