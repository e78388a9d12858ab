"""
Tests for the httpx-backed fetcher.
"""

import httpx
import pytest

from scte_fetch.errors import FetchFailed
from scte_fetch.fetcher import KEY_REQUEST_HEADERS, Fetcher


def _transport(seen: list[httpx.Request]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/live.m3u8":
            return httpx.Response(200, text="#EXTM3U\n")
        if request.url.path == "/old.ts":
            return httpx.Response(302, headers={"Location": "https://cdn.example/new.ts"})
        if request.url.path == "/new.ts":
            return httpx.Response(200, content=b"\x47\x00")
        if request.url.path == "/boom":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def test_fetch_text():
    seen: list[httpx.Request] = []
    with Fetcher(transport=_transport(seen)) as f:
        assert f.fetch_text("https://cdn.example/live.m3u8") == "#EXTM3U\n"


def test_fetch_follows_redirects():
    seen: list[httpx.Request] = []
    with Fetcher(transport=_transport(seen)) as f:
        assert f.fetch("https://cdn.example/old.ts") == b"\x47\x00"
    assert [r.url.path for r in seen] == ["/old.ts", "/new.ts"]


def test_fetch_passes_headers():
    seen: list[httpx.Request] = []
    with Fetcher(transport=_transport(seen)) as f:
        f.fetch("https://cdn.example/new.ts", headers=KEY_REQUEST_HEADERS)
        f.fetch("https://cdn.example/new.ts")
    assert seen[0].headers["User-Agent"] == KEY_REQUEST_HEADERS["User-Agent"]
    assert seen[1].headers["User-Agent"] != KEY_REQUEST_HEADERS["User-Agent"]


def test_http_error_status_raises():
    with Fetcher(transport=_transport([])) as f:
        with pytest.raises(FetchFailed) as excinfo:
            f.fetch("https://cdn.example/missing.ts")
    assert excinfo.value.reason == "HTTP 404"
    assert excinfo.value.url == "https://cdn.example/missing.ts"


def test_transport_error_raises():
    with Fetcher(transport=_transport([])) as f:
        with pytest.raises(FetchFailed) as excinfo:
            f.fetch("https://cdn.example/boom")
    assert "ConnectError" in excinfo.value.reason
