from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyvehicle.exceptions import AuthError, NetworkError, UnauthorizedError
from pyvehicle.models.token import TokenPair
from pyvehicle.repository import SessionRepository
from pyvehicle.token_store import TokenStore


def make_record(index: int, **extra: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "vin": f"VIN{index:04d}",
        "make": "Lada",
        "model": f"Model {index}",
        "year": 2000 + index,
        "price_usd": str(10000 + index),
        "images": [f"https://img.example.com/{index}.jpg"],
    }
    record.update(extra)
    return record


@dataclass
class FakeVehicleBackend:
    """In-memory stand-in for the remote vehicle API."""

    records: list[dict[str, Any]] = field(default_factory=lambda: [make_record(i) for i in range(1, 4)])
    calls: dict[str, int] = field(default_factory=dict)
    tokens_seen: list[tuple[str, str | None]] = field(default_factory=list)
    reject_credentials: bool = False
    login_delay: float = 0.0
    unauthorized_once: set[str] = field(default_factory=set)
    always_unauthorized: set[str] = field(default_factory=set)
    failures: dict[str, Exception] = field(default_factory=dict)
    vin_status: int | None = None
    delays: dict[str, float] = field(default_factory=dict)
    _expired_already: set[str] = field(default_factory=set)
    _issued: int = 0

    def _record_call(self, name: str, token: str | None = None) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1
        self.tokens_seen.append((name, token))

    async def _pause(self, name: str) -> None:
        delay = self.delays.get(name)
        if delay:
            await asyncio.sleep(delay)

    def _issue(self) -> TokenPair:
        self._issued += 1
        return TokenPair(access_token=f"access-{self._issued}", refresh_token=f"refresh-{self._issued}")

    def _authorize(self, name: str, token: str | None) -> None:
        if name in self.always_unauthorized:
            raise UnauthorizedError(f"HTTP 401 from {name}: unauthorized", status_code=401, endpoint=name)
        if name in self.unauthorized_once and name not in self._expired_already:
            self._expired_already.add(name)
            raise UnauthorizedError(f"HTTP 401 from {name}: unauthorized", status_code=401, endpoint=name)
        if not token:
            raise UnauthorizedError(f"HTTP 401 from {name}: unauthorized", status_code=401, endpoint=name)
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    async def login(self, username: str, password: str) -> TokenPair:
        self._record_call("login")
        if self.login_delay:
            await asyncio.sleep(self.login_delay)
        if self.reject_credentials:
            raise AuthError("Login rejected: invalid username or password (HTTP 401)", status_code=401)
        return self._issue()

    async def refresh(self, refresh_token: str) -> TokenPair:
        self._record_call("refresh", refresh_token)
        return self._issue()

    async def search(self, token: str | None, query: str) -> list[dict[str, Any]]:
        self._record_call("search", token)
        self._authorize("search", token)
        return [record for record in self.records if query in str(record.get("vin", ""))]

    async def list_recent(self, token: str | None) -> list[dict[str, Any]]:
        self._record_call("list_recent", token)
        await self._pause("list_recent")
        self._authorize("list_recent", token)
        return list(self.records)

    async def get_by_id(self, token: str | None, vehicle_id: str) -> dict[str, Any]:
        self._record_call("get_by_id", token)
        await self._pause("get_by_id")
        self._authorize("get_by_id", token)
        for record in self.records:
            if record.get("vin") == vehicle_id:
                return record
        return {}

    async def get_by_vin(self, token: str | None, vin: str) -> dict[str, Any]:
        self._record_call("get_by_vin", token)
        self.tokens_seen.append(("vin", vin))
        await self._pause("get_by_vin")
        self._authorize("get_by_vin", token)
        if self.vin_status is not None:
            raise NetworkError(f"HTTP {self.vin_status} from /vin/{vin}", status_code=self.vin_status)
        for record in self.records:
            if record.get("vin") == vin:
                return record
        raise NetworkError(f"HTTP 404 from /vin/{vin}", status_code=404)


@pytest.fixture
def backend() -> FakeVehicleBackend:
    return FakeVehicleBackend()


@pytest.fixture
def token_store() -> TokenStore:
    return TokenStore()


@pytest.fixture
def repository(backend: FakeVehicleBackend, token_store: TokenStore) -> SessionRepository:
    return SessionRepository(backend, token_store)


@pytest.fixture
def stored_pair() -> TokenPair:
    return TokenPair(access_token="stored-access", refresh_token="stored-refresh")


@pytest.fixture
def record_factory() -> Any:
    return make_record
