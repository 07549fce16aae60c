"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

HTTP transport for SPACE REST calls.
"""

from __future__ import annotations

import asyncio
import json
import logging
import mimetypes
import urllib.error
import urllib.parse
import urllib.request
import uuid
from pathlib import Path
from typing import Any

from .errors import SpaceRequestError

logger = logging.getLogger("space_client.transport")

API_PREFIX = "/api/v1"


def build_http_url(url: str) -> str:
    """Return the REST base URL (``{url}/api/v1``) for a SPACE instance."""
    return url.rstrip("/") + API_PREFIX


def _encode_multipart(field: str, path: Path) -> tuple[bytes, str]:
    """Encode one file upload as ``multipart/form-data``."""
    boundary = f"space-{uuid.uuid4().hex}"
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field}"; filename="{path.name}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return head + path.read_bytes() + tail, f"multipart/form-data; boundary={boundary}"


class SpaceHttpTransport:
    """
    JSON-over-HTTP client for the SPACE REST API.

    Blocking ``urllib`` calls run in a worker thread so callers never block
    the event loop. Every request carries the ``x-api-key`` header and the
    configured timeout.
    """

    def __init__(self, url: str, api_key: str, *, timeout_ms: int = 5000) -> None:
        self.http_url = build_http_url(url)
        self.api_key = api_key
        self.timeout_ms = timeout_ms

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        query: dict[str, str] | None = None,
        file_field: str | None = None,
        file_path: str | Path | None = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON response.

        Args:
            method: HTTP method.
            path: Path relative to ``/api/v1`` (leading slash included).
            json_body: JSON payload, ignored when uploading a file.
            query: Optional query string parameters.
            file_field: Multipart field name for file uploads.
            file_path: Local file to upload as multipart/form-data.

        Raises:
            SpaceRequestError: Non-2xx status or network failure.
        """
        url = f"{self.http_url}{path}"
        if query:
            url = f"{url}?{urllib.parse.urlencode(query)}"

        headers = {"Accept": "application/json", "x-api-key": self.api_key}
        data: bytes | None = None
        if file_path is not None:
            data, content_type = _encode_multipart(file_field or "file", Path(file_path))
            headers["Content-Type"] = content_type
        elif json_body is not None or method.upper() in ("POST", "PUT"):
            data = json.dumps({} if json_body is None else json_body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        req = urllib.request.Request(url, data=data, method=method.upper(), headers=headers)
        raw = await asyncio.to_thread(self._send, req)
        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as e:
            raise SpaceRequestError(f"Invalid JSON response from {url}", url=url) from e

    def _send(self, req: urllib.request.Request) -> bytes:
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_ms / 1000.0) as resp:  # noqa: S310
                return resp.read()
        except urllib.error.HTTPError as e:
            body = ""
            try:
                body = e.read().decode("utf-8", errors="replace")
            except Exception:  # noqa: BLE001
                body = ""
            payload: Any = body
            try:
                payload = json.loads(body) if body else None
            except ValueError:
                pass
            raise SpaceRequestError(
                f"HTTP {e.code} calling {req.method} {req.full_url}: {body or e.reason}",
                status_code=e.code,
                payload=payload,
                url=req.full_url,
            ) from e
        except urllib.error.URLError as e:
            raise SpaceRequestError(
                f"Network error calling {req.method} {req.full_url}: {e.reason}",
                url=req.full_url,
            ) from e
        except TimeoutError as e:
            raise SpaceRequestError(
                f"Timed out calling {req.method} {req.full_url}", url=req.full_url
            ) from e
