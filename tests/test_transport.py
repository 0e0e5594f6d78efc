from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pyvehicle.config import VehicleConfig
from pyvehicle.exceptions import AuthError, NetworkError, UnauthorizedError, VehicleError
from pyvehicle.remote import HttpVehicleClient


@asynccontextmanager
async def _serve(routes: list[web.RouteDef]) -> AsyncIterator[tuple[HttpVehicleClient, list[web.Request]]]:
    """Run a throwaway API server and yield a client pointed at it."""
    seen: list[web.Request] = []

    @web.middleware
    async def _record(request: web.Request, handler: Any) -> web.StreamResponse:
        seen.append(request)
        return await handler(request)

    app = web.Application(middlewares=[_record])
    app.add_routes(routes)
    server = TestServer(app)
    await server.start_server()
    try:
        config = VehicleConfig(base_url=str(server.make_url("")).rstrip("/"), request_timeout=5.0)
        async with HttpVehicleClient(config) as remote:
            yield remote, seen
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_login_posts_form_and_parses_pair() -> None:
    received: dict[str, str] = {}

    async def token(request: web.Request) -> web.Response:
        received.update(await request.post())
        return web.json_response({"access_token": "AT", "refresh_token": "RT"})

    async with _serve([web.post("/token", token)]) as (remote, seen):
        pair = await remote.login("user", "secret")

    assert received == {"username": "user", "password": "secret"}
    assert seen[0].content_type == "application/x-www-form-urlencoded"
    assert "Authorization" not in seen[0].headers
    assert pair.access_token == "AT"
    assert pair.refresh_token == "RT"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_login_rejection_maps_to_auth_error(status: int) -> None:
    async def token(request: web.Request) -> web.Response:
        return web.json_response({"detail": "bad credentials"}, status=status)

    async with _serve([web.post("/token", token)]) as (remote, _):
        with pytest.raises(AuthError) as excinfo:
            await remote.login("user", "wrong")

    assert excinfo.value.status_code == status


@pytest.mark.asyncio
async def test_login_server_error_stays_network_error() -> None:
    async def token(request: web.Request) -> web.Response:
        return web.Response(status=500, text="oops")

    async with _serve([web.post("/token", token)]) as (remote, _):
        with pytest.raises(NetworkError) as excinfo:
            await remote.login("user", "secret")

    assert not isinstance(excinfo.value, AuthError)
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_login_without_tokens_is_auth_error() -> None:
    async def token(request: web.Request) -> web.Response:
        return web.json_response({"access_token": "AT"})

    async with _serve([web.post("/token", token)]) as (remote, _):
        with pytest.raises(AuthError, match="missing token fields"):
            await remote.login("user", "secret")


@pytest.mark.asyncio
async def test_refresh_posts_json_body() -> None:
    bodies: list[Any] = []

    async def refresh(request: web.Request) -> web.Response:
        bodies.append(await request.json())
        return web.json_response({"accessToken": "AT2", "refreshToken": "RT2"})

    async with _serve([web.post("/refresh-token", refresh)]) as (remote, _):
        pair = await remote.refresh("RT")

    assert bodies == [{"refresh_token": "RT"}]
    assert pair.access_token == "AT2"


@pytest.mark.asyncio
async def test_authenticated_calls_send_bearer_and_unwrap_envelopes() -> None:
    async def recent(request: web.Request) -> web.Response:
        return web.json_response({"vehicles": [{"id": "1"}, "junk", {"id": "2"}]})

    async def search(request: web.Request) -> web.Response:
        return web.json_response({"results": [{"id": request.query["query"]}]})

    async def by_id(request: web.Request) -> web.Response:
        return web.json_response({"vehicle": {"id": request.match_info["vehicle_id"]}})

    async def by_vin(request: web.Request) -> web.Response:
        return web.json_response({"vehicle": {"vin": request.match_info["vin"]}})

    routes = [
        web.get("/vehicle", recent),
        web.get("/vehicles/search/", search),
        web.get("/vehicle/{vehicle_id}", by_id),
        web.get("/vin/{vin}", by_vin),
    ]
    async with _serve(routes) as (remote, seen):
        assert await remote.list_recent("AT") == [{"id": "1"}, {"id": "2"}]
        assert await remote.search("AT", "lada") == [{"id": "lada"}]
        assert await remote.get_by_id("AT", "42") == {"id": "42"}
        assert await remote.get_by_vin("AT", "XTA210999") == {"vin": "XTA210999"}

    assert [request.headers.get("Authorization") for request in seen] == ["Bearer AT"] * 4
    assert [request.path for request in seen] == [
        "/vehicle",
        "/vehicles/search/",
        "/vehicle/42",
        "/vin/XTA210999",
    ]


@pytest.mark.asyncio
async def test_blank_token_sends_no_authorization_header() -> None:
    async def recent(request: web.Request) -> web.Response:
        return web.json_response({"vehicles": []})

    async with _serve([web.get("/vehicle", recent)]) as (remote, seen):
        assert await remote.list_recent("  ") == []
        assert await remote.list_recent(None) == []

    assert all("Authorization" not in request.headers for request in seen)


@pytest.mark.asyncio
async def test_unauthorized_and_error_statuses() -> None:
    async def unauthorized(request: web.Request) -> web.Response:
        return web.Response(status=401)

    async def missing(request: web.Request) -> web.Response:
        return web.Response(status=404, text="no such vin")

    routes = [web.get("/vehicle", unauthorized), web.get("/vin/{vin}", missing)]
    async with _serve(routes) as (remote, _):
        with pytest.raises(UnauthorizedError) as unauthorized_info:
            await remote.list_recent("expired")
        with pytest.raises(NetworkError) as missing_info:
            await remote.get_by_vin("AT", "NOPE")

    assert unauthorized_info.value.status_code == 401
    assert unauthorized_info.value.endpoint == "/vehicle"
    assert missing_info.value.status_code == 404
    assert not isinstance(missing_info.value, UnauthorizedError)


@pytest.mark.asyncio
async def test_invalid_json_and_empty_body() -> None:
    async def broken(request: web.Request) -> web.Response:
        return web.Response(text="<html>gateway</html>", content_type="text/html")

    async def empty(request: web.Request) -> web.Response:
        return web.Response(status=204)

    routes = [web.get("/vehicle", broken), web.get("/vehicle/{vehicle_id}", empty)]
    async with _serve(routes) as (remote, _):
        with pytest.raises(NetworkError, match="Invalid JSON"):
            await remote.list_recent("AT")
        assert await remote.get_by_id("AT", "1") == {}


@pytest.mark.asyncio
async def test_connection_failure_maps_to_network_error() -> None:
    config = VehicleConfig(base_url="http://127.0.0.1:9", request_timeout=2.0)
    async with HttpVehicleClient(config) as remote:
        with pytest.raises(NetworkError):
            await remote.list_recent("AT")


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    remote = HttpVehicleClient(VehicleConfig())
    with pytest.raises(VehicleError, match="not initialized"):
        await remote.list_recent("AT")


@pytest.mark.asyncio
async def test_external_session_is_left_open() -> None:
    async with aiohttp.ClientSession() as session:
        async with HttpVehicleClient(VehicleConfig(), session=session):
            pass
        assert not session.closed


@pytest.mark.asyncio
async def test_debug_log_never_contains_secrets(caplog: pytest.LogCaptureFixture) -> None:
    async def token(request: web.Request) -> web.Response:
        return web.json_response({"access_token": "AT-SECRET", "refresh_token": "RT-SECRET"})

    async def recent(request: web.Request) -> web.Response:
        return web.json_response({"vehicles": []})

    caplog.set_level(logging.DEBUG, logger="pyvehicle")
    async with _serve([web.post("/token", token), web.get("/vehicle", recent)]) as (remote, _):
        await remote.login("user", "hunter2")
        await remote.list_recent("AT-SECRET")

    text = caplog.text
    assert "POST" in text and "/vehicle" in text
    for secret in ("hunter2", "AT-SECRET", "RT-SECRET"):
        assert secret not in text
