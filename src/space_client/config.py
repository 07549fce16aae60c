"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Client connection settings and explicit config loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .cache.config import CacheConfig
from .errors import SpaceConfigurationError

DEFAULT_TIMEOUT_MS = 5000


@dataclass(frozen=True, slots=True)
class SpaceClientSettings:
    """Explicit settings used to build a ``SpaceClient``."""

    url: str
    api_key: str
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    cache: CacheConfig = field(default_factory=CacheConfig)

    def validate(self) -> None:
        """
        Fail fast on unusable connection settings.

        Raises:
            SpaceConfigurationError: Missing url/api key, non-http url,
                blank api key or non-positive timeout.
        """
        if not self.url or not self.api_key:
            raise SpaceConfigurationError(
                "Both 'url' and 'api_key' are required to connect to Space."
            )
        if not isinstance(self.timeout_ms, (int, float)) or self.timeout_ms <= 0:
            raise SpaceConfigurationError(
                "Invalid 'timeout_ms' value. It must be a positive number."
            )
        if not self.url.startswith(("http://", "https://")):
            raise SpaceConfigurationError(
                "Invalid 'url'. It must start with 'http://' or 'https://'."
            )
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise SpaceConfigurationError("Invalid 'api_key'. It must be a non-empty string.")

    @staticmethod
    def from_env() -> "SpaceClientSettings":
        """Load settings from `SPACE_*` environment variables."""
        raw_timeout = os.getenv("SPACE_TIMEOUT_MS", "").strip()
        try:
            timeout_ms = int(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_MS
        except ValueError as exc:
            raise SpaceConfigurationError(
                f"Environment variable SPACE_TIMEOUT_MS must be an integer, got {raw_timeout!r}"
            ) from exc
        return SpaceClientSettings(
            url=os.getenv("SPACE_URL", "").strip(),
            api_key=os.getenv("SPACE_API_KEY", "").strip(),
            timeout_ms=timeout_ms,
            cache=CacheConfig.from_env(),
        )
