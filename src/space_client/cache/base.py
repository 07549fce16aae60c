"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/base.py.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """
    One cached value with expiration metadata.

    ``expires_at`` is ``None`` for entries stored without expiry
    (``ttl <= 0``). Liveness is always computed against the clock, so
    checking an entry twice never changes it.
    """

    value: Any
    created_at: float
    ttl: float
    expires_at: float | None = field(default=None)

    @classmethod
    def create(cls, value: Any, ttl: float, *, now: float | None = None) -> CacheEntry:
        """Build an entry whose expiry is ``created_at + ttl``."""
        created_at = time.time() if now is None else now
        expires_at = created_at + ttl if ttl > 0 else None
        return cls(value=value, created_at=created_at, ttl=ttl, expires_at=expires_at)

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        current = time.time() if now is None else now
        return current >= self.expires_at


_GLOB_SPECIALS = "\\*?[]"


def escape_glob(value: str) -> str:
    """Backslash-escape glob metacharacters so `value` matches only itself."""
    return "".join(f"\\{char}" if char in _GLOB_SPECIALS else char for char in value)


@runtime_checkable
class CacheBackend(Protocol):
    """Capability set implemented by every cache backend."""

    backend_id: str

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def clear(self) -> None: ...

    async def has(self, key: str) -> bool: ...

    async def keys(self, pattern: str | None = None) -> list[str]:
        """Keys matching a glob (`*`, `?`, backslash escapes), prefix removed."""
        ...

    async def close(self) -> None: ...
