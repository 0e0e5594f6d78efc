"""Vehicle read endpoints.

Endpoints:
  - GET /vehicles/search/?query=
  - GET /vehicle
  - GET /vehicle/{id}
  - GET /vin/{vin}

These return raw records; normalization happens in the repository.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from pyvehicle._constants import (
    RECENT_ENDPOINT,
    SEARCH_ENDPOINT,
    VEHICLE_BY_ID_ENDPOINT,
    VEHICLE_BY_VIN_ENDPOINT,
)
from pyvehicle._transport import Transport


def _records(response: Any, key: str) -> list[dict[str, Any]]:
    """Pull the record list out of an envelope like ``{"vehicles": [...]}``."""
    items = response.get(key) if isinstance(response, dict) else None
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _record(response: Any) -> dict[str, Any]:
    item = response.get("vehicle") if isinstance(response, dict) else None
    return item if isinstance(item, dict) else {}


async def fetch_search(transport: Transport, token: str | None, query: str) -> list[dict[str, Any]]:
    response = await transport.request_json("GET", SEARCH_ENDPOINT, token=token, params={"query": query})
    return _records(response, "results")


async def fetch_recent(transport: Transport, token: str | None) -> list[dict[str, Any]]:
    response = await transport.request_json("GET", RECENT_ENDPOINT, token=token)
    return _records(response, "vehicles")


async def fetch_by_id(transport: Transport, token: str | None, vehicle_id: str) -> dict[str, Any]:
    endpoint = VEHICLE_BY_ID_ENDPOINT.format(vehicle_id=quote(vehicle_id, safe=""))
    return _record(await transport.request_json("GET", endpoint, token=token))


async def fetch_by_vin(transport: Transport, token: str | None, vin: str) -> dict[str, Any]:
    endpoint = VEHICLE_BY_VIN_ENDPOINT.format(vin=quote(vin, safe=""))
    return _record(await transport.request_json("GET", endpoint, token=token))
