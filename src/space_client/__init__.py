"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Python client for SPACE, the pricing-driven self-adaptation platform.

Quick start::

    from space_client import CacheConfig, connect

    client = connect(
        "http://localhost:5403",
        "my-api-key",
        cache=CacheConfig(enabled=True, ttl=300),
    )
    contract = await client.contracts.get_contract("user-1")
    result = await client.features.evaluate("user-1", "service-feature")
    await client.close()
"""

from .cache import (
    CacheBackend,
    CacheConfig,
    CacheCoordinator,
    CacheEntry,
    CacheType,
    InMemoryCacheBackend,
    RedisCacheBackend,
    RedisCacheConfig,
    create_cache_backend,
    validate_cache_config,
)
from .client import SpaceClient, connect
from .config import SpaceClientSettings
from .errors import (
    CacheConfigurationError,
    SpaceClientError,
    SpaceConfigurationError,
    SpaceEventError,
    SpaceNotConnectedError,
    SpaceRequestError,
)
from .events import VALID_EVENTS, SpaceEventChannel
from .models import (
    Contract,
    ContractToCreate,
    FallbackSubscription,
    FeatureEvaluationResult,
    Subscription,
    UserContact,
)

__all__ = [
    "SpaceClient",
    "SpaceClientSettings",
    "connect",
    "CacheBackend",
    "CacheConfig",
    "CacheCoordinator",
    "CacheEntry",
    "CacheType",
    "InMemoryCacheBackend",
    "RedisCacheBackend",
    "RedisCacheConfig",
    "create_cache_backend",
    "validate_cache_config",
    "SpaceEventChannel",
    "VALID_EVENTS",
    "Contract",
    "ContractToCreate",
    "FallbackSubscription",
    "FeatureEvaluationResult",
    "Subscription",
    "UserContact",
    "SpaceClientError",
    "SpaceConfigurationError",
    "CacheConfigurationError",
    "SpaceEventError",
    "SpaceNotConnectedError",
    "SpaceRequestError",
]
