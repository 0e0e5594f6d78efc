"""Credential sources used for automatic login."""

from __future__ import annotations

import dataclasses
from typing import Protocol

from pyvehicle.config import VehicleConfig


@dataclasses.dataclass(frozen=True)
class Credentials:
    """Username/password pair handed to the login endpoint."""

    username: str
    password: str

    @property
    def is_complete(self) -> bool:
        """Whether both fields are non-blank."""
        return bool(self.username.strip()) and bool(self.password.strip())


class CredentialSource(Protocol):
    """Anything able to supply login credentials on demand."""

    def credentials(self) -> Credentials: ...


class StaticCredentialSource:
    """Fixed credentials, e.g. issued for a service account."""

    def __init__(self, username: str, password: str) -> None:
        self._credentials = Credentials(username=username, password=password)

    def credentials(self) -> Credentials:
        return self._credentials


class ConfigCredentialSource:
    """Credentials read from a :class:`VehicleConfig`."""

    def __init__(self, config: VehicleConfig) -> None:
        self._config = config

    def credentials(self) -> Credentials:
        return Credentials(username=self._config.username, password=self._config.password)
