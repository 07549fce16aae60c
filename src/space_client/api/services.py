"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Service and pricing management operations.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any
from urllib.parse import quote

from ..errors import SpaceNotConnectedError, SpaceRequestError
from ..models import FallbackSubscription
from ..transport import SpaceHttpTransport

logger = logging.getLogger("space_client.api.services")

_REMOTE_URL = re.compile(r"^https?://")


class ServiceModule:
    """
    Register services and pricings and manage pricing availability.

    Every operation first runs the health check and raises
    ``SpaceNotConnectedError`` when SPACE is unreachable.
    """

    def __init__(
        self,
        transport: SpaceHttpTransport,
        is_connected: Callable[[], Awaitable[bool]],
    ) -> None:
        self._transport = transport
        self._is_connected = is_connected

    async def _require_connection(self, action: str) -> None:
        if not await self._is_connected():
            raise SpaceNotConnectedError(
                f"Not connected to Space. Please connect before {action}."
            )

    async def get_service(self, service_name: str) -> Any:
        await self._require_connection("retrieving a service")
        try:
            return await self._transport.request(
                "GET", f"/services/{quote(service_name, safe='')}"
            )
        except SpaceRequestError as e:
            logger.error("Error retrieving service %s: %s", service_name, e.payload or e)
            raise

    async def get_pricing(self, service_name: str, pricing_version: str) -> Any:
        await self._require_connection("retrieving pricing")
        try:
            return await self._transport.request(
                "GET",
                f"/services/{quote(service_name, safe='')}/pricings/{quote(pricing_version, safe='')}",
            )
        except SpaceRequestError as e:
            logger.error(
                "Error retrieving pricing %s of %s: %s",
                pricing_version,
                service_name,
                e.payload or e,
            )
            raise

    async def add_service(self, url: str) -> Any:
        """
        Create a service from a pricing document.

        Args:
            url: Remote ``http(s)`` URL, or a local file path resolved against
                the current working directory.
        """
        await self._require_connection("adding a service")
        return await self._submit_pricing("/services", url)

    async def add_pricing(self, service_name: str, url: str) -> Any:
        """Add a pricing version (remote URL or local file) to an existing service."""
        await self._require_connection("adding a pricing")
        return await self._submit_pricing(
            f"/services/{quote(service_name, safe='')}/pricings", url
        )

    async def change_pricing_availability(
        self,
        service_name: str,
        pricing_version: str,
        new_availability: str,
        fallback_subscription: FallbackSubscription | dict[str, Any] | None = None,
    ) -> Any:
        """
        Mark a pricing version as ``active`` or ``archived``.

        Archiving requires a fallback subscription in the service's latest
        pricing so existing contracts can be novated to it.

        Raises:
            ValueError: Unknown availability, or archiving without fallback.
        """
        if new_availability not in ("active", "archived"):
            raise ValueError('Invalid availability status. Use "active" or "archived".')
        if new_availability == "archived" and fallback_subscription is None:
            raise ValueError(
                "You must provide a fallback subscription before archiving a pricing "
                "version, so that existing contracts can be novated to it"
            )

        body = (
            FallbackSubscription.model_validate(fallback_subscription).to_wire()
            if fallback_subscription is not None
            else None
        )
        try:
            return await self._transport.request(
                "PUT",
                f"/services/{quote(service_name, safe='')}/pricings/{quote(pricing_version, safe='')}",
                json_body=body,
                query={"availability": new_availability},
            )
        except SpaceRequestError as e:
            logger.error(
                "Error changing availability of %s/%s: %s",
                service_name,
                pricing_version,
                e.payload or e,
            )
            raise

    async def _submit_pricing(self, path: str, url: str) -> Any:
        try:
            if _REMOTE_URL.match(url):
                return await self._transport.request("POST", path, json_body={"pricing": url})
            file_path = Path.cwd() / url
            return await self._transport.request(
                "POST", path, file_field="pricing", file_path=file_path
            )
        except SpaceRequestError as e:
            logger.error("Error submitting pricing %s: %s", url, e.payload or e)
            raise
