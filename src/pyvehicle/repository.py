"""Session repository: authenticated access to the vehicle API.

Wraps a :class:`~pyvehicle.remote.RemoteVehicleClient` with bearer-token
attachment from the :class:`~pyvehicle.token_store.TokenStore`, the
refresh-once-on-401 retry protocol, and normalization of raw records into
vehicle models.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from pyvehicle._constants import DEFAULT_RECENT_LIMIT, VIN_NOT_FOUND_STATUSES
from pyvehicle.exceptions import NetworkError, NoSessionError, NotFoundError, UnauthorizedError
from pyvehicle.ingestion.normalize import summaries_from, to_vehicle_detail
from pyvehicle.models.token import TokenPair
from pyvehicle.models.vehicle import VehicleDetail, VehicleSummary
from pyvehicle.remote import RemoteVehicleClient
from pyvehicle.token_store import TokenStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionRepository:
    """Token-aware facade over the remote vehicle client."""

    def __init__(self, remote: RemoteVehicleClient, token_store: TokenStore) -> None:
        self._remote = remote
        self._tokens = token_store

    @property
    def tokens(self) -> TokenStore:
        """Token store backing this repository, for observers."""
        return self._tokens

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self, username: str, password: str) -> TokenPair:
        """Log in and persist the returned pair.

        Raises
        ------
        AuthError
            If the credentials are rejected.
        NetworkError
            On any other transport failure.
        StorageError
            If the pair cannot be persisted.
        """
        pair = await self._remote.login(username, password)
        await self._tokens.save(pair)
        _logger.info("Logged in as %s", username)
        return pair

    async def refresh(self) -> TokenPair:
        """Exchange the stored refresh token for a new pair.

        Raises
        ------
        NoSessionError
            If no refresh token is stored.
        """
        current = self._tokens.current
        if current is None:
            raise NoSessionError("No refresh token available to renew the session")
        pair = await self._remote.refresh(current.refresh_token)
        await self._tokens.save(pair)
        _logger.info("Session tokens refreshed")
        return pair

    async def logout(self) -> None:
        await self._tokens.clear()
        _logger.info("Logged out")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _call_with_refresh(self, fn: Callable[[str | None], Awaitable[T]]) -> T:
        """Run an authenticated call, refreshing and retrying once on 401."""
        try:
            return await fn(self._tokens.current_access_token())
        except UnauthorizedError:
            _logger.debug("Access token rejected; refreshing once before retry")
            pair = await self.refresh()
            return await fn(pair.access_token)

    @staticmethod
    def _log_sample(source: str, vehicles: Sequence[VehicleSummary]) -> None:
        if vehicles:
            _logger.debug("Sample from %s list: id=%s title=%s", source, vehicles[0].id, vehicles[0].title)

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def search_vehicles(self, query: str) -> list[VehicleSummary]:
        """Free-text search."""

        async def _call(token: str | None) -> list[VehicleSummary]:
            return summaries_from(await self._remote.search(token, query))

        vehicles = await self._call_with_refresh(_call)
        self._log_sample("search", vehicles)
        return vehicles

    async def recent_vehicles(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[VehicleSummary]:
        """Most recent vehicles, truncated to *limit* after normalization."""

        async def _call(token: str | None) -> list[VehicleSummary]:
            return summaries_from(await self._remote.list_recent(token))

        vehicles = (await self._call_with_refresh(_call))[: max(limit, 0)]
        self._log_sample("recent", vehicles)
        return vehicles

    async def vehicle_detail(self, vehicle_id: str) -> VehicleDetail:
        """Fetch one vehicle by its identifier.

        Raises
        ------
        NotFoundError
            If the returned record cannot be normalized.
        """

        async def _call(token: str | None) -> VehicleDetail | None:
            return to_vehicle_detail(await self._remote.get_by_id(token, vehicle_id))

        detail = await self._call_with_refresh(_call)
        if detail is None:
            raise NotFoundError(f"Could not read vehicle data for {vehicle_id}")
        _logger.debug("Vehicle detail for %s loaded", vehicle_id)
        return detail

    async def vehicle_by_vin(self, vin: str) -> VehicleDetail:
        """Look a vehicle up by VIN.

        The upstream reports unknown VINs with HTTP 404 or HTTP 500; both
        become :class:`NotFoundError`. Other errors propagate unchanged.
        """
        not_found = f"Vehicle with VIN {vin} not found"

        async def _call(token: str | None) -> VehicleDetail | None:
            try:
                record = await self._remote.get_by_vin(token, vin)
            except NetworkError as exc:
                if exc.status_code in VIN_NOT_FOUND_STATUSES:
                    raise NotFoundError(not_found) from exc
                raise
            return to_vehicle_detail(record)

        detail = await self._call_with_refresh(_call)
        if detail is None:
            raise NotFoundError(not_found)
        return detail
