"""Tests for the HTTP client request executor."""

import asyncio
import ssl
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiohttp
import pytest
from aiohttp import test_utils, web

from surge.adapters.driven.http.client import HttpClient
from surge.adapters.driven.http.headers import USER_AGENTS
from surge.adapters.driven.metrics.run_counters import RunCounters
from surge.ports.http import HttpPort
from surge.ports.metrics import Outcome

__all__ = []

Seen = list[tuple[str, dict[str, str], str]]

CERTS_DIR = Path(__file__).parent / "certs"


@asynccontextmanager
async def serve(status: int = 200, delay: float = 0.0) -> AsyncIterator[tuple[str, Seen]]:
    """Run a local target answering every request with ``status``."""
    seen: Seen = []

    async def handler(request: web.Request) -> web.Response:
        seen.append((request.method, dict(request.headers), await request.text()))
        if delay:
            await asyncio.sleep(delay)
        return web.Response(status=status, text="x" * 1024)

    app = web.Application()
    app.router.add_route("*", "/", handler)
    async with test_utils.TestServer(app) as server:
        yield str(server.make_url("/")), seen


@pytest.mark.asyncio
async def test_http_client_context_manager() -> None:
    """HTTP client should initialize and close session."""
    client = HttpClient()
    assert client.session is None

    async with client as c:
        assert c.session is not None
        assert c is client

    assert client.session.closed


@pytest.mark.asyncio
async def test_execute_requires_session() -> None:
    """Using the client outside ``async with`` is a programming error."""
    client = HttpClient()

    with pytest.raises(RuntimeError, match="Session not initialized"):
        await client.execute(HttpPort(url="http://test", method="GET"))


@pytest.mark.asyncio
async def test_execute_success_updates_counters() -> None:
    """A 200 response counts as attempted and successful."""
    counters = RunCounters()
    async with serve(200) as (url, seen), HttpClient(metrics=counters) as client:
        result = await client.execute(HttpPort(url=url, method="GET"))

    assert result.outcome is Outcome.SUCCESS
    assert result.status_code == 200
    assert result.label == "OK"
    assert counters.snapshot().total == 1
    assert counters.snapshot().successful == 1
    assert counters.snapshot().unreachable == 0
    assert seen[0][0] == "GET"
    assert seen[0][2] == ""


@pytest.mark.asyncio
async def test_execute_sends_randomized_identity_headers() -> None:
    """Every request carries the randomized identity headers."""
    async with serve(200) as (url, seen), HttpClient() as client:
        await client.execute(HttpPort(url=url, method="GET"))

    headers = seen[0][1]
    assert headers["User-Agent"] in USER_AGENTS
    assert headers["Accept"] == "*/*"
    assert len(headers["X-Forwarded-For"].split(".")) == 4


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH"])
async def test_execute_attaches_json_body(method: str) -> None:
    """Body methods send the payload with a JSON content type."""
    async with serve(201) as (url, seen), HttpClient() as client:
        result = await client.execute(HttpPort(url=url, method=method, body='{"k": "v"}'))

    sent_method, headers, body = seen[0]
    assert sent_method == method
    assert headers["Content-Type"] == "application/json"
    assert body == '{"k": "v"}'
    assert result.outcome is Outcome.SUCCESS


@pytest.mark.asyncio
async def test_execute_omits_body_for_get() -> None:
    """Non-body methods never send the payload."""
    async with serve(200) as (url, seen), HttpClient() as client:
        await client.execute(HttpPort(url=url, method="GET", body='{"k": "v"}'))

    _, headers, body = seen[0]
    assert body == ""
    assert "Content-Type" not in headers


@pytest.mark.asyncio
async def test_execute_error_status_is_attempted_not_successful() -> None:
    """Status >= 400 counts toward total but not success."""
    counters = RunCounters()
    async with serve(404) as (url, _), HttpClient(metrics=counters) as client:
        result = await client.execute(HttpPort(url=url, method="GET"))

    assert result.outcome is Outcome.ERROR_STATUS
    assert result.label == "Not Found"
    assert counters.snapshot().total == 1
    assert counters.snapshot().successful == 0


@pytest.mark.asyncio
async def test_execute_unknown_status_label() -> None:
    """Unregistered status codes fall back to the unknown label."""
    async with serve(599) as (url, _), HttpClient() as client:
        result = await client.execute(HttpPort(url=url, method="GET"))

    assert result.status_code == 599
    assert result.label == "Unknown Status"


@pytest.mark.asyncio
async def test_execute_reuses_connection_after_drain() -> None:
    """Drained responses release the connection for the next request."""
    async with serve(200) as (url, seen), HttpClient() as client:
        for _ in range(5):
            await client.execute(HttpPort(url=url, method="GET"))

    assert len(seen) == 5


@pytest.mark.asyncio
async def test_execute_refused_connection_is_unreachable() -> None:
    """Transport failures count as unreachable and never as attempted."""
    counters = RunCounters()
    url = f"http://127.0.0.1:{test_utils.unused_port()}/"
    async with HttpClient(metrics=counters) as client:
        result = await client.execute(HttpPort(url=url, method="GET"))

    assert result.outcome is Outcome.UNREACHABLE
    assert result.status_code is None
    assert counters.snapshot().total == 0
    assert counters.snapshot().unreachable == 1


@pytest.mark.asyncio
async def test_execute_timeout_is_unreachable() -> None:
    """A target slower than the request timeout counts as unreachable."""
    counters = RunCounters()
    async with (
        serve(200, delay=0.5) as (url, _),
        HttpClient(metrics=counters, request_timeout=0.1) as client,
    ):
        result = await client.execute(HttpPort(url=url, method="GET"))

    assert result.outcome is Outcome.UNREACHABLE
    assert counters.snapshot().unreachable == 1
    assert counters.snapshot().total == 0


@pytest.mark.asyncio
async def test_execute_malformed_method_is_unreachable() -> None:
    """A request that cannot be built is absorbed as unreachable."""
    counters = RunCounters()
    async with HttpClient(metrics=counters) as client:
        result = await client.execute(HttpPort(url="http://127.0.0.1/", method="BAD METHOD"))

    assert result.outcome is Outcome.UNREACHABLE
    assert counters.snapshot().unreachable == 1


@asynccontextmanager
async def serve_tls() -> AsyncIterator[str]:
    """Run a local HTTPS target with a self-signed certificate."""

    async def handler(request: web.Request) -> web.Response:
        return web.Response(text="secure")

    ssl_context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    ssl_context.load_cert_chain(CERTS_DIR / "self_signed.crt", CERTS_DIR / "self_signed.key")

    app = web.Application()
    app.router.add_route("*", "/", handler)
    server = test_utils.TestServer(app, scheme="https")
    await server.start_server(ssl=ssl_context)
    try:
        yield str(server.make_url("/"))
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_execute_ignores_untrusted_certificate() -> None:
    """Targets with self-signed certificates are still load tested."""
    counters = RunCounters()
    async with serve_tls() as url:
        # A verifying client rejects this target
        async with aiohttp.ClientSession() as verifying:
            with pytest.raises(aiohttp.ClientConnectorError):
                await verifying.get(url)

        async with HttpClient(metrics=counters) as client:
            result = await client.execute(HttpPort(url=url, method="GET"))

    assert url.startswith("https://")
    assert result.outcome is Outcome.SUCCESS
    assert result.status_code == 200
    assert counters.snapshot().unreachable == 0
