"""Tests for the JSON HTTP transport against a local aiohttp server."""

from __future__ import annotations

import pytest
from aiohttp import web
from aiohttp import test_utils

from polynomial.clients import ApiKeyProvider, HttpClient
from polynomial.errors import APIError, NetworkError


def _app(seen: dict) -> web.Application:
    async def markets(request: web.Request) -> web.Response:
        seen.setdefault("headers", []).append(request.headers.copy())
        seen["query"] = dict(request.query)
        return web.json_response({"chainId": 8008, "markets": []})

    async def order(request: web.Request) -> web.Response:
        seen["body"] = await request.json()
        return web.json_response({"message": "Insufficient margin"}, status=400)

    async def flaky(request: web.Request) -> web.Response:
        seen["flaky"] = seen.get("flaky", 0) + 1
        return web.Response(text="upstream down", status=502, reason="Bad Gateway")

    app = web.Application()
    app.router.add_get("/markets", markets)
    app.router.add_post("/api/market_order/100", order)
    app.router.add_get("/flaky", flaky)
    return app


@pytest.mark.asyncio
async def test_get_sends_api_key_and_query() -> None:
    seen: dict = {}
    async with test_utils.TestServer(_app(seen)) as server:
        auth = ApiKeyProvider("first-key")
        client = HttpClient(f"http://{server.host}:{server.port}/", auth)
        try:
            data = await client.get("markets", params={"chainId": 8008, "symbol": None})
            auth.update_api_key("second-key")
            await client.get("/markets")
        finally:
            await client.close()
    assert data == {"chainId": 8008, "markets": []}
    assert seen["query"] == {"chainId": "8008"}
    first, second = seen["headers"]
    assert first["x-api-key"] == "first-key"
    assert first["Accept"] == "application/json"
    assert second["x-api-key"] == "second-key"


@pytest.mark.asyncio
async def test_non_2xx_raises_api_error_from_body() -> None:
    seen: dict = {}
    async with test_utils.TestServer(_app(seen)) as server:
        client = HttpClient(f"http://{server.host}:{server.port}/api", ApiKeyProvider("key"))
        try:
            with pytest.raises(APIError) as excinfo:
                await client.post("market_order/100", {"marketId": "100", "sizeDelta": "-1"})
        finally:
            await client.close()
    assert seen["body"] == {"marketId": "100", "sizeDelta": "-1"}
    assert excinfo.value.status == 400
    assert excinfo.value.message == "Insufficient margin"
    assert excinfo.value.response == {"message": "Insufficient margin"}


@pytest.mark.asyncio
async def test_api_errors_are_not_retried() -> None:
    seen: dict = {}
    async with test_utils.TestServer(_app(seen)) as server:
        client = HttpClient(f"http://{server.host}:{server.port}", ApiKeyProvider("key"), read_attempts=3)
        try:
            with pytest.raises(APIError) as excinfo:
                await client.get("flaky")
        finally:
            await client.close()
    assert seen["flaky"] == 1
    assert excinfo.value.message == "Bad Gateway"
    assert excinfo.value.response == "upstream down"


@pytest.mark.asyncio
async def test_connection_failure_is_a_network_error() -> None:
    client = HttpClient("http://127.0.0.1:1", ApiKeyProvider("key"), timeout=5)
    try:
        with pytest.raises(NetworkError) as excinfo:
            await client.post("market_order/1", {"marketId": "1"})
    finally:
        await client.close()
    assert excinfo.value.context["url"] == "http://127.0.0.1:1/market_order/1"
    assert excinfo.value.context["method"] == "POST"


def test_api_key_provider_redacts_repr() -> None:
    provider = ApiKeyProvider("very-secret")
    assert "very-secret" not in repr(provider)
    assert provider.api_key == "very-secret"
