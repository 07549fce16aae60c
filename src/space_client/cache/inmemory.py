"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/inmemory.py.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any

from .base import CacheBackend, CacheEntry
from .config import DEFAULT_CACHE_TTL_S

logger = logging.getLogger("space_client.cache.inmemory")

DEFAULT_SWEEP_INTERVAL_S = 300.0


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """
    Compile a glob pattern where `*` matches any run and `?` one character.

    A backslash makes the next character literal, as in Redis ``MATCH``.
    """
    parts: list[str] = []
    chars = iter(pattern)
    for char in chars:
        if char == "\\":
            parts.append(re.escape(next(chars, "\\")))
        elif char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


class InMemoryCacheBackend(CacheBackend):
    """
    Process-local TTL cache.

    Expired rows are dropped lazily on ``get``/``has`` and proactively by a
    background sweep task that runs every ``sweep_interval_s`` seconds while
    an event loop is available. All mutations happen without suspending, so
    no locking is needed under asyncio scheduling. A closed backend still
    serves calls but relies on lazy expiry only.

    Args:
        default_ttl: TTL in seconds applied when ``set`` omits one.
        sweep_interval_s: Period of the background expiry sweep.
    """

    backend_id = "inmemory"

    def __init__(
        self,
        default_ttl: float = DEFAULT_CACHE_TTL_S,
        *,
        sweep_interval_s: float = DEFAULT_SWEEP_INTERVAL_S,
    ) -> None:
        self._default_ttl = default_ttl
        self._sweep_interval_s = sweep_interval_s
        self._rows: dict[str, CacheEntry] = {}
        self._sweeper: asyncio.Task[None] | None = None
        self._closed = False
        self._start_sweeper()

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    async def get(self, key: str) -> Any | None:
        self._start_sweeper()
        row = self._rows.get(key)
        if row is None:
            return None
        if row.is_expired():
            self._rows.pop(key, None)
            return None
        return row.value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        self._start_sweeper()
        actual_ttl = self._default_ttl if ttl is None else ttl
        self._rows[key] = CacheEntry.create(value, actual_ttl)

    async def delete(self, key: str) -> None:
        self._rows.pop(key, None)

    async def clear(self) -> None:
        self._rows.clear()

    async def has(self, key: str) -> bool:
        row = self._rows.get(key)
        if row is None:
            return False
        if row.is_expired():
            self._rows.pop(key, None)
            return False
        return True

    async def keys(self, pattern: str | None = None) -> list[str]:
        """Return stored keys, live or not, optionally filtered by glob pattern."""
        all_keys = list(self._rows.keys())
        if not pattern:
            return all_keys
        regex = glob_to_regex(pattern)
        return [key for key in all_keys if regex.fullmatch(key)]

    async def close(self) -> None:
        """Stop the sweep task for good and drop all rows."""
        self._closed = True
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is not None and not sweeper.done():
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass
        self._rows.clear()

    def stats(self) -> dict[str, int]:
        """Count total, live and expired-but-not-yet-evicted rows."""
        now = time.time()
        expired = sum(1 for row in self._rows.values() if row.is_expired(now))
        return {
            "total": len(self._rows),
            "active": len(self._rows) - expired,
            "expired": expired,
        }

    def sweep_expired(self) -> int:
        """Remove every expired row now; returns the number removed."""
        now = time.time()
        stale = [key for key, row in self._rows.items() if row.is_expired(now)]
        for key in stale:
            self._rows.pop(key, None)
        if stale:
            logger.debug("Swept %d expired cache entries", len(stale))
        return len(stale)

    def _start_sweeper(self) -> None:
        """Start the sweep task once a running loop is available, unless closed."""
        if self._closed:
            return
        if self._sweeper is not None and not self._sweeper.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._sweeper = loop.create_task(self._sweep_loop())

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval_s)
            self.sweep_expired()
