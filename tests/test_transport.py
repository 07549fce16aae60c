from __future__ import annotations

import asyncio
import io
import json
import urllib.error

import pytest

from space_client import transport as transport_module
from space_client.errors import SpaceRequestError
from space_client.transport import SpaceHttpTransport, _encode_multipart, build_http_url


def run_async(coro):
    return asyncio.run(coro)


class _FakeResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


def test_build_http_url_strips_trailing_slash():
    assert build_http_url("http://localhost:5403/") == "http://localhost:5403/api/v1"
    assert build_http_url("https://space.example.com") == "https://space.example.com/api/v1"


def test_encode_multipart_wraps_file(tmp_path):
    pricing = tmp_path / "zoom.yml"
    pricing.write_text("saasName: Zoom\n", encoding="utf-8")

    body, content_type = _encode_multipart("pricing", pricing)

    boundary = content_type.split("boundary=", 1)[1]
    assert content_type.startswith("multipart/form-data")
    assert f'name="pricing"; filename="zoom.yml"'.encode() in body
    assert b"saasName: Zoom\n" in body
    assert body.endswith(f"--{boundary}--\r\n".encode())


def test_request_sends_api_key_and_decodes_json(monkeypatch):
    sent: list[object] = []

    def fake_urlopen(req, timeout):
        sent.append((req, timeout))
        return _FakeResponse(b'{"eval": true}')

    monkeypatch.setattr(transport_module.urllib.request, "urlopen", fake_urlopen)
    transport = SpaceHttpTransport("http://space.test", "secret", timeout_ms=2500)

    data = run_async(
        transport.request("POST", "/features/u1/f1", json_body={"x": 1}, query={"details": "true"})
    )

    req, timeout = sent[0]
    assert data == {"eval": True}
    assert timeout == 2.5
    assert req.full_url == "http://space.test/api/v1/features/u1/f1?details=true"
    assert req.get_header("X-api-key") == "secret"
    assert json.loads(req.data) == {"x": 1}


def test_empty_response_returns_none(monkeypatch):
    monkeypatch.setattr(
        transport_module.urllib.request, "urlopen", lambda req, timeout: _FakeResponse(b"")
    )
    transport = SpaceHttpTransport("http://space.test", "secret")

    assert run_async(transport.request("GET", "/healthcheck")) is None


def test_http_error_becomes_request_error(monkeypatch):
    def fake_urlopen(req, timeout):
        raise urllib.error.HTTPError(
            req.full_url, 404, "Not Found", {}, io.BytesIO(b'{"error": "Contract not found"}')
        )

    monkeypatch.setattr(transport_module.urllib.request, "urlopen", fake_urlopen)
    transport = SpaceHttpTransport("http://space.test", "secret")

    with pytest.raises(SpaceRequestError) as excinfo:
        run_async(transport.request("GET", "/contracts/u1"))
    assert excinfo.value.status_code == 404
    assert excinfo.value.payload == {"error": "Contract not found"}


def test_network_error_becomes_request_error(monkeypatch):
    def fake_urlopen(req, timeout):
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(transport_module.urllib.request, "urlopen", fake_urlopen)
    transport = SpaceHttpTransport("http://space.test", "secret")

    with pytest.raises(SpaceRequestError, match="Network error"):
        run_async(transport.request("GET", "/healthcheck"))
