"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Feature evaluation, usage revert and pricing token operations.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from urllib.parse import quote

from pydantic import ValidationError

from ..cache import CacheCoordinator
from ..errors import SpaceRequestError
from ..models import FeatureEvaluationResult
from ..transport import SpaceHttpTransport

logger = logging.getLogger("space_client.api.features")

READ_ONLY_EVALUATION_TTL_S = 60


class FeatureModule:
    """
    Evaluate features against SPACE.

    Only read-only evaluations (no expected consumption) are cached, with
    a TTL shorter than the cache default. Evaluations that consume usage
    and reverts never touch the evaluation cache; they drop the feature,
    contract and pricing-token entries of the user instead.
    """

    def __init__(self, transport: SpaceHttpTransport, cache: CacheCoordinator) -> None:
        self._transport = transport
        self._cache = cache

    async def evaluate(
        self,
        user_id: str,
        feature_id: str,
        expected_consumption: Mapping[str, float] | None = None,
        *,
        details: bool = False,
        server: bool = False,
    ) -> FeatureEvaluationResult:
        """
        Evaluate `feature_id` (``{service}-{feature}``) for `user_id`.

        Args:
            user_id: User whose contract is evaluated.
            feature_id: Feature identifier.
            expected_consumption: Usage limit -> amount the request will consume.
                Empty or ``None`` makes this a read-only evaluation.
            details: Ask SPACE for detailed usage information.
            server: Ask SPACE to evaluate server-side expressions.

        Raises:
            SpaceRequestError: The evaluation request failed.
        """
        consumption = dict(expected_consumption or {})
        read_only = not consumption
        key = self._cache.get_feature_key(user_id, feature_id)

        if read_only:
            cached = await self._cache.get(key)
            if cached is not None:
                try:
                    return FeatureEvaluationResult.model_validate(cached)
                except ValidationError:
                    logger.warning("Dropping malformed cached evaluation for %s", key)
                    await self._cache.delete(key)

        query: dict[str, str] = {}
        if details:
            query["details"] = "true"
        if server:
            query["server"] = "true"

        try:
            data = await self._transport.request(
                "POST",
                f"/features/{quote(user_id, safe='')}/{quote(feature_id, safe='')}",
                json_body=consumption,
                query=query or None,
            )
        except SpaceRequestError as e:
            logger.error("Error evaluating feature %s for user %s: %s", feature_id, user_id, e.payload or e)
            raise

        result = FeatureEvaluationResult.model_validate(data)
        if read_only:
            await self._cache.set(key, result.to_wire(), READ_ONLY_EVALUATION_TTL_S)
        else:
            await self._invalidate_usage(user_id, feature_id)
        return result

    async def revert_evaluation(
        self,
        user_id: str,
        feature_id: str,
        revert_to_latest: bool = True,
    ) -> bool:
        """
        Undo the optimistic usage update of a previous evaluation.

        Use it when the application transaction that followed the evaluation
        failed, so the user is not charged.

        Args:
            revert_to_latest: ``True`` restores the newest stored usage value,
                ``False`` the oldest.

        Returns:
            ``True`` once SPACE accepted the revert.
        """
        try:
            await self._transport.request(
                "POST",
                f"/features/{quote(user_id, safe='')}",
                json_body={},
                query={"revert": "true", "latest": "true" if revert_to_latest else "false"},
            )
        except SpaceRequestError as e:
            logger.error(
                "Error reverting usage level for evaluation of feature %s for user %s: %s",
                feature_id,
                user_id,
                e.payload or e,
            )
            raise

        await self._invalidate_usage(user_id, feature_id)
        return True

    async def generate_user_pricing_token(self, user_id: str) -> str:
        """
        Return a pricing token for `user_id`, cached with the default TTL.

        The token lets frontends read the user's pricing state without
        exposing the SPACE API.
        """
        key = self._cache.get_pricing_token_key(user_id)
        cached = await self._cache.get(key)
        if isinstance(cached, str) and cached:
            return cached

        try:
            data = await self._transport.request(
                "POST", f"/features/{quote(user_id, safe='')}/pricing-token", json_body={}
            )
        except SpaceRequestError as e:
            logger.error("Error generating pricing token for user %s: %s", user_id, e.payload or e)
            raise

        token = data.get("pricingToken") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise SpaceRequestError(
                f"SPACE returned no pricing token for user {user_id}", payload=data
            )
        await self._cache.set(key, token)
        return token

    async def _invalidate_usage(self, user_id: str, feature_id: str) -> None:
        """Drop entries whose content depends on the user's usage levels."""
        if not self._cache.is_enabled():
            return
        await self._cache.delete(self._cache.get_feature_key(user_id, feature_id))
        await self._cache.delete(self._cache.get_contract_key(user_id))
        await self._cache.delete(self._cache.get_pricing_token_key(user_id))
