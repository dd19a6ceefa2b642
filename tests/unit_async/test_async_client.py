from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone

import httpx
import pytest

from trafficops_client.async_client import AsyncTrafficOpsClient
from trafficops_client.client_shared import MISSING_COOKIE_MESSAGE
from trafficops_client.core.errors import APIError, ClientError
from trafficops_client.core.login import PasswordLogin, TokenLogin
from tests.shared.transport import (
    AsyncSequencedHandler,
    async_http_client,
    build_config,
    json_response,
    login_cookie,
)


async def _logged_in(steps, **overrides) -> tuple[AsyncTrafficOpsClient, AsyncSequencedHandler]:
    handler = AsyncSequencedHandler([json_response(cookies=[login_cookie()]), *steps])
    client = AsyncTrafficOpsClient(build_config(**overrides), client=async_http_client(handler))
    await client.login(PasswordLogin("admin", "twelve12"))
    return client, handler


@pytest.mark.asyncio
async def test_async_request_without_login_raises_before_any_network_call():
    handler = AsyncSequencedHandler([])
    client = AsyncTrafficOpsClient(build_config(), client=async_http_client(handler))
    with pytest.raises(ClientError, match="not authenticated"):
        await client.get("servers")
    assert handler.calls == 0


@pytest.mark.asyncio
async def test_async_request_pipeline():
    client, handler = await _logged_in(
        [
            json_response(
                payload={
                    "response": [{"hostName": "edge", "lastUpdated": "2022-07-18 00:00:00+00"}],
                    "alerts": [{"level": "success", "text": "ok"}],
                },
                cookies=[login_cookie("renewed")],
            ),
            json_response(payload={"response": []}),
        ]
    )
    response = await client.get("servers", {"hostName": "edge"})
    await client.delete("servers/1")

    first, second = handler.requests[1], handler.requests[2]
    assert first.url.path == "/api/4.0/servers"
    assert first.headers["Cookie"] == "mojolicious=abc123"
    assert second.method == "DELETE"
    assert second.content == b""
    assert second.headers["Cookie"] == "mojolicious=renewed"
    assert response.envelope.response[0]["lastUpdated"] == datetime(2022, 7, 18, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_async_error_alerts_raise():
    client, _ = await _logged_in(
        [json_response(400, {"response": {}, "alerts": [{"level": "ERROR", "text": "bad name"}]})]
    )
    with pytest.raises(APIError, match="^bad name$"):
        await client.put("cdns/1", {"name": ""})


@pytest.mark.asyncio
async def test_async_login_without_cookie_raises():
    handler = AsyncSequencedHandler([json_response(payload={"alerts": []})])
    client = AsyncTrafficOpsClient(build_config(), client=async_http_client(handler))
    with pytest.raises(APIError, match=MISSING_COOKIE_MESSAGE):
        await client.login(TokenLogin("tok"))
    assert client.authenticated is False


@pytest.mark.asyncio
async def test_async_transport_errors_propagate_unwrapped():
    client, _ = await _logged_in([httpx.ReadTimeout("timed out")])
    with pytest.raises(httpx.ReadTimeout):
        await client.get("cdns")


@pytest.mark.asyncio
async def test_async_ping_and_binary_endpoints():
    handler = AsyncSequencedHandler(
        [
            json_response(payload={"ping": "pong"}),
            json_response(cookies=[login_cookie()]),
            httpx.Response(200, content=b"-- dump"),
            httpx.Response(500, content=b"no"),
        ]
    )
    client = AsyncTrafficOpsClient(build_config(), client=async_http_client(handler))
    assert (await client.ping()).data == {"ping": "pong"}
    await client.login(TokenLogin("tok"))
    assert await client.dbdump() == b"-- dump"
    with pytest.raises(APIError, match="isos returned error response: no"):
        await client.generate_iso({"osVersionsDir": "centos72"})
    assert json.loads(handler.requests[-1].content) == {"osVersionsDir": "centos72"}


@pytest.mark.asyncio
async def test_async_client_context_manager_closes_owned_client():
    async with AsyncTrafficOpsClient(build_config()) as client:
        assert client.authenticated is False
    with pytest.raises(ClientError):
        await client.ping()


@pytest.mark.asyncio
async def test_concurrent_renewals_last_processed_response_wins():
    release_first = asyncio.Event()
    second_done = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("user/login/token"):
            return json_response(cookies=[login_cookie("initial")])
        if request.url.path.endswith("/first"):
            await release_first.wait()
            return json_response(payload={"response": 1}, cookies=[login_cookie("from-first")])
        if request.url.path.endswith("/second"):
            return json_response(payload={"response": 2}, cookies=[login_cookie("from-second")])
        assert request.headers["Cookie"] == "mojolicious=from-first"
        return json_response(payload={"response": 3})

    client = AsyncTrafficOpsClient(build_config(), client=async_http_client(handler))
    await client.login(TokenLogin("tok"))

    async def second() -> None:
        await client.get("second")
        second_done.set()
        release_first.set()

    first_result, _ = await asyncio.gather(client.get("first"), second())

    assert first_result.envelope.response == 1
    assert second_done.is_set()
    third = await client.get("third")
    assert third.envelope.response == 3
