"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Contract operations with cache-aware reads and user-wide invalidation on writes.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from ..cache import CacheCoordinator
from ..errors import SpaceRequestError
from ..models import Contract, ContractToCreate, Subscription
from ..transport import SpaceHttpTransport

logger = logging.getLogger("space_client.api.contracts")


class ContractModule:
    """Read, create and update user contracts in SPACE."""

    def __init__(self, transport: SpaceHttpTransport, cache: CacheCoordinator) -> None:
        self._transport = transport
        self._cache = cache

    async def get_contract(self, user_id: str) -> Contract:
        """
        Return the contract of `user_id`, served from cache when possible.

        Raises:
            SpaceRequestError: The contract could not be fetched.
        """
        key = self._cache.get_contract_key(user_id)
        cached = await self._cache.get(key)
        if cached is not None:
            try:
                return Contract.model_validate(cached)
            except ValidationError:
                logger.warning("Dropping malformed cached contract for %s", user_id)
                await self._cache.delete(key)

        try:
            data = await self._transport.request("GET", f"/contracts/{quote(user_id, safe='')}")
        except SpaceRequestError:
            logger.error("Error retrieving contract for user %s", user_id)
            raise

        contract = Contract.model_validate(data)
        await self._cache.set(key, contract.to_wire())
        return contract

    async def add_contract(self, contract_to_create: ContractToCreate | dict[str, Any]) -> Contract:
        """
        Create a contract so SPACE can evaluate features for its user.

        On success every cached entry of the user is dropped and the new
        contract is cached.
        """
        payload = ContractToCreate.model_validate(contract_to_create)
        try:
            data = await self._transport.request("POST", "/contracts", json_body=payload.to_wire())
        except SpaceRequestError:
            logger.error("Error adding contract for user %s", payload.user_contact.user_id)
            raise

        contract = Contract.model_validate(data)
        await self._refresh_user(contract.user_contact.user_id, contract)
        return contract

    async def update_contract_subscription(
        self,
        user_id: str,
        new_subscription: Subscription | dict[str, Any],
    ) -> Contract:
        """Replace the subscription of `user_id` and refresh its cached contract."""
        payload = Subscription.model_validate(new_subscription)
        try:
            data = await self._transport.request(
                "PUT",
                f"/contracts/{quote(user_id, safe='')}",
                json_body=payload.to_wire(),
            )
        except SpaceRequestError:
            logger.error("Error updating contract subscription for user %s", user_id)
            raise

        contract = Contract.model_validate(data)
        await self._refresh_user(user_id, contract)
        return contract

    async def _refresh_user(self, user_id: str, contract: Contract) -> None:
        if not self._cache.is_enabled():
            return
        await self._cache.invalidate_user(user_id)
        await self._cache.set(self._cache.get_contract_key(user_id), contract.to_wire())
