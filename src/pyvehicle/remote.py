"""Remote vehicle client: the stateless RPC surface of the vehicle API."""

from __future__ import annotations

from typing import Any, Protocol

import aiohttp

from pyvehicle._api import auth as _auth_api
from pyvehicle._api import vehicles as _vehicles_api
from pyvehicle._transport import HttpTransport, Transport
from pyvehicle.config import VehicleConfig
from pyvehicle.exceptions import VehicleError
from pyvehicle.models.token import TokenPair


class RemoteVehicleClient(Protocol):
    """Operations offered by the vehicle API.

    Implementations never store tokens: authenticated calls receive the
    access token explicitly and report a rejected token with
    :class:`~pyvehicle.exceptions.UnauthorizedError`.
    """

    async def login(self, username: str, password: str) -> TokenPair: ...

    async def refresh(self, refresh_token: str) -> TokenPair: ...

    async def search(self, token: str | None, query: str) -> list[dict[str, Any]]: ...

    async def list_recent(self, token: str | None) -> list[dict[str, Any]]: ...

    async def get_by_id(self, token: str | None, vehicle_id: str) -> dict[str, Any]: ...

    async def get_by_vin(self, token: str | None, vin: str) -> dict[str, Any]: ...


class HttpVehicleClient:
    """HTTP implementation of :class:`RemoteVehicleClient`.

    Usage::

        async with HttpVehicleClient(config) as remote:
            tokens = await remote.login("user", "secret")
    """

    def __init__(
        self,
        config: VehicleConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> HttpVehicleClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise VehicleError("Client not initialized. Use 'async with HttpVehicleClient(...) as remote:'")
        return self._transport

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def login(self, username: str, password: str) -> TokenPair:
        return await _auth_api.fetch_login(self._require_transport(), username, password)

    async def refresh(self, refresh_token: str) -> TokenPair:
        return await _auth_api.fetch_refresh(self._require_transport(), refresh_token)

    async def search(self, token: str | None, query: str) -> list[dict[str, Any]]:
        return await _vehicles_api.fetch_search(self._require_transport(), token, query)

    async def list_recent(self, token: str | None) -> list[dict[str, Any]]:
        return await _vehicles_api.fetch_recent(self._require_transport(), token)

    async def get_by_id(self, token: str | None, vehicle_id: str) -> dict[str, Any]:
        return await _vehicles_api.fetch_by_id(self._require_transport(), token, vehicle_id)

    async def get_by_vin(self, token: str | None, vin: str) -> dict[str, Any]:
        return await _vehicles_api.fetch_by_vin(self._require_transport(), token, vin)
