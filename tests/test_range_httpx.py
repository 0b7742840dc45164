"""HTTPX MockTransport-based coverage for the range fetcher."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from pwnedranges.adapters.range_httpx import HttpxRangeFetcher
from pwnedranges.domain.errors import FetchError, SetupError

BASE = "https://ranges.example.org/range/"


def _fetch(handler, key="ABCDE"):
    async def run():
        fetcher = HttpxRangeFetcher(BASE, http2=False, transport=httpx.MockTransport(handler))
        try:
            return await fetcher.fetch(key)
        finally:
            await fetcher.aclose()

    return asyncio.run(run())


def test_returns_key_and_whole_body():
    payload = b"0" * 35 + b":3\r\n" + b"1" * 35 + b":4"
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=payload, headers={"Content-Type": "text/plain"})

    key, body = _fetch(handler)

    assert (key, body) == ("ABCDE", payload)
    assert len(seen) == 1
    assert seen[0].method == "GET"
    assert str(seen[0].url) == BASE + "ABCDE"
    assert seen[0].headers["User-Agent"].startswith("pwnedranges")


@pytest.mark.parametrize("status", [404, 429, 500, 503])
def test_non_success_status_is_a_fetch_error(status):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=b"error page")

    with pytest.raises(FetchError, match=f"HTTP {status}") as info:
        _fetch(handler, key="00000")
    assert info.value.key == "00000"


def test_transport_error_is_a_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError, match="failed to get response") as info:
        _fetch(handler)
    assert isinstance(info.value.__cause__, httpx.ConnectError)


def test_timeout_is_a_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(FetchError):
        _fetch(handler)


def test_many_fetches_share_one_client():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=request.url.path.encode())

    async def run():
        fetcher = HttpxRangeFetcher(BASE, http2=False, transport=httpx.MockTransport(handler))
        try:
            return await asyncio.gather(*(fetcher.fetch(k) for k in ("00000", "00001", "FFFFF")))
        finally:
            await fetcher.aclose()

    results = asyncio.run(run())
    assert results == [
        ("00000", b"/range/00000"),
        ("00001", b"/range/00001"),
        ("FFFFF", b"/range/FFFFF"),
    ]


def test_missing_http2_support_is_a_setup_error(monkeypatch):
    def no_h2(*args, **kwargs):
        raise ImportError("Using http2=True, but the 'h2' package is not installed.")

    monkeypatch.setattr(httpx, "AsyncClient", no_h2)

    with pytest.raises(SetupError, match="failed to build http client") as info:
        HttpxRangeFetcher(BASE, http2=True)
    assert isinstance(info.value.__cause__, ImportError)
