"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/__init__.py.
"""

from .base import CacheBackend, CacheEntry
from .config import (
    DEFAULT_CACHE_TTL_S,
    DEFAULT_KEY_PREFIX,
    CacheConfig,
    CacheType,
    RedisCacheConfig,
)
from .coordinator import CacheCoordinator
from .factory import create_cache_backend, normalize_cache_type, validate_cache_config
from .inmemory import InMemoryCacheBackend
from .redis import RedisCacheBackend

__all__ = [
    "CacheBackend",
    "CacheEntry",
    "CacheConfig",
    "CacheType",
    "RedisCacheConfig",
    "DEFAULT_CACHE_TTL_S",
    "DEFAULT_KEY_PREFIX",
    "CacheCoordinator",
    "InMemoryCacheBackend",
    "RedisCacheBackend",
    "create_cache_backend",
    "normalize_cache_type",
    "validate_cache_config",
]
