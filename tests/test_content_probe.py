"""Tests for header-only content-type probing."""

import asyncio

import httpx

from disclosure_panel.app_config import PanelConfig
from disclosure_panel.attachments.content_probe import ContentTypeProber


class TrackingStream(httpx.AsyncByteStream):
    """Response body that records whether anyone read or closed it."""

    def __init__(self):
        self.iterated = False
        self.closed = False

    async def __aiter__(self):
        self.iterated = True
        yield b"x" * 1024

    async def aclose(self):
        self.closed = True


def _probe(ref, handler, **config):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            prober = ContentTypeProber(PanelConfig(**config), client=client)
            return await prober.probe(ref)

    return asyncio.run(run())


def test_inline_data_needs_no_request():
    def handler(request):
        raise AssertionError("inline data must not hit the network")

    assert _probe("data:audio/mpeg;base64,AA==", handler) == "audio/mpeg"


def test_remote_probe_reads_headers_and_drops_body():
    stream = TrackingStream()
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, headers={"content-type": "image/png"}, stream=stream)

    mime_type = _probe("/files/cat", handler, base_url="https://chat.example.com")

    assert mime_type == "image/png"
    assert seen == ["https://chat.example.com/files/cat"]
    assert stream.closed
    assert not stream.iterated


def test_missing_header_resolves_to_empty():
    def handler(request):
        return httpx.Response(200, content=b"?")

    assert _probe("https://h/a", handler) == ""


def test_error_status_resolves_to_empty():
    def handler(request):
        return httpx.Response(404, headers={"content-type": "text/html"})

    assert _probe("https://h/missing", handler) == ""


def test_transport_failure_resolves_to_empty(caplog):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    assert _probe("https://h/a", handler) == ""
    assert "Content-type probe failed" in caplog.text


def test_relative_ref_without_base_url_resolves_to_empty():
    def handler(request):
        return httpx.Response(200, headers={"content-type": "image/png"})

    assert _probe("files/cat", handler) == ""


def _cookie_for(url, **config):
    cookies = []

    def handler(request):
        cookies.append(request.headers.get("cookie"))
        return httpx.Response(200, headers={"content-type": "text/plain"})

    _probe(url, handler, cookies={"session": "abc"}, **config)
    return cookies[0]


def test_production_sends_credentials_only_same_origin():
    base = {"base_url": "https://chat.example.com", "environment": "production"}
    assert _cookie_for("/files/a", **base) == "session=abc"
    assert _cookie_for("https://cdn.example.com/a", **base) is None


def test_development_sends_credentials_cross_origin():
    config = {"base_url": "http://localhost:8080", "environment": "development"}
    assert _cookie_for("https://cdn.example.com/a", **config) == "session=abc"
