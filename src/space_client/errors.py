"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error hierarchy for the SPACE client.
"""

from __future__ import annotations

from typing import Any


class SpaceClientError(RuntimeError):
    """Base SPACE client error."""


class SpaceConfigurationError(SpaceClientError, ValueError):
    """Raised when client connection settings are invalid."""


class CacheConfigurationError(SpaceConfigurationError):
    """Raised when cache configuration is invalid or incomplete."""


class SpaceNotConnectedError(SpaceClientError):
    """Raised when an operation requires a reachable SPACE instance."""


class SpaceEventError(SpaceClientError):
    """Raised when the pricing event channel cannot be used."""


class SpaceRequestError(SpaceClientError):
    """
    Raised when a remote SPACE call fails.

    Attributes:
        status_code: HTTP status returned by SPACE, or ``None`` on network errors.
        payload: Decoded error body when SPACE returned one.
        url: Request URL.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
        self.url = url
