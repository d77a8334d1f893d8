"""Tests for the asynchronous transport."""

import asyncio
import time

import httpx
import pytest

from scoopit_api.client.errors import TransportError, TransportTimeoutError
from scoopit_api.client.transport import RawResponse, Transport
from scoopit_api.config import USER_AGENT


URL = "https://www.scoop.it/api/1/test"


@pytest.mark.asyncio
async def test_send_returns_raw_response(http_client, server):
    server.queue((200, {"connectedUser": "jdoe"}))
    transport = Transport(timeout=5, client=http_client)

    response = await transport.send("POST", URL, {"Authorization": "Bearer t"}, b'{"a": 1}')

    assert response == RawResponse(status=200, content=b'{"connectedUser": "jdoe"}', reason="OK")
    assert response.ok
    sent = server.requests[0]
    assert sent.method == "POST"
    assert sent.url == URL
    assert sent.headers["Authorization"] == "Bearer t"
    assert sent.body == b'{"a": 1}'


@pytest.mark.asyncio
async def test_non_2xx_is_returned_not_raised(http_client, server):
    server.queue((500, b"boom"))
    response = await Transport(timeout=5, client=http_client).send("GET", URL, {})
    assert response.status == 500
    assert not response.ok


@pytest.mark.asyncio
async def test_slow_response_times_out(http_client, server):
    server.delay = 2
    transport = Transport(timeout=1, client=http_client)

    started = time.monotonic()
    with pytest.raises(TransportTimeoutError) as exc_info:
        await transport.send("GET", URL, {})

    assert time.monotonic() - started < 1.9
    assert exc_info.value.timeout == 1
    assert exc_info.value.retryable


@pytest.mark.asyncio
async def test_timeout_cancels_pending_exchange(http_client, server):
    server.delay = 1
    transport = Transport(timeout=0.2, client=http_client)

    with pytest.raises(TransportTimeoutError):
        await transport.send("POST", URL, {}, b"{}")
    await asyncio.sleep(1.1)

    assert len(server.requests) == 1
    assert server.completed == []


@pytest.mark.asyncio
async def test_httpx_timeout_is_timeout_error(http_client, server):
    server.queue(httpx.ReadTimeout("read timed out"))
    with pytest.raises(TransportTimeoutError):
        await Transport(timeout=5, client=http_client).send("GET", URL, {})


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", [
    httpx.ConnectError("connection refused"),
    httpx.ConnectError("certificate verify failed"),
    httpx.RemoteProtocolError("server disconnected without sending a response"),
])
async def test_connection_failures_are_transport_errors(http_client, server, exc):
    server.queue(exc)
    with pytest.raises(TransportError) as exc_info:
        await Transport(timeout=5, client=http_client).send("GET", URL, {})
    assert not isinstance(exc_info.value, TransportTimeoutError)
    assert exc_info.value.url == URL
    assert exc_info.value.__cause__ is exc


class TestRetries:

    @pytest.mark.asyncio
    async def test_disabled_by_default(self, http_client, server):
        server.queue((503, b""), (200, {}))
        response = await Transport(timeout=5, client=http_client).send("GET", URL, {})

        assert response.status == 503
        assert len(server.requests) == 1

    @pytest.mark.asyncio
    async def test_retryable_status_then_success(self, http_client, server):
        server.queue((503, b""), (429, b""), (200, {}))
        transport = Transport(timeout=5, max_retries=2, backoff_factor=0, client=http_client)

        response = await transport.send("GET", URL, {})

        assert response.status == 200
        assert len(server.requests) == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_return_last_response(self, http_client, server):
        server.queue((503, b""), (502, b"bad gateway"))
        transport = Transport(timeout=5, max_retries=1, backoff_factor=0, client=http_client)

        response = await transport.send("GET", URL, {})

        assert response.status == 502
        assert response.content == b"bad gateway"

    @pytest.mark.asyncio
    async def test_connection_error_retried(self, http_client, server):
        server.queue(httpx.ConnectError("connection refused"), (200, {}))
        transport = Transport(timeout=5, max_retries=1, backoff_factor=0, client=http_client)

        response = await transport.send("DELETE", URL, {})

        assert response.status == 200
        assert len(server.requests) == 2

    @pytest.mark.asyncio
    async def test_exhausted_connection_retries_raise(self, http_client, server):
        server.default = httpx.ConnectError("connection refused")
        transport = Transport(timeout=5, max_retries=2, backoff_factor=0, client=http_client)

        with pytest.raises(TransportError):
            await transport.send("GET", URL, {})
        assert len(server.requests) == 3

    @pytest.mark.asyncio
    async def test_post_not_retried(self, http_client, server):
        server.queue((503, b""), (200, {}))
        transport = Transport(timeout=5, max_retries=2, backoff_factor=0, client=http_client)

        response = await transport.send("POST", URL, {}, b"{}")

        assert response.status == 503
        assert len(server.requests) == 1


@pytest.mark.asyncio
async def test_default_client_configuration():
    transport = Transport(timeout=3, max_retries=2, backoff_factor=0.1)
    try:
        assert transport.max_retries == 2
        assert transport.client.timeout.read == 3
        assert transport.client.headers["User-Agent"] == USER_AGENT
        assert transport.client.headers["Accept"] == "application/json"
    finally:
        await transport.close()
    assert transport.client.is_closed
