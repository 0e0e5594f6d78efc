"""Custom exception hierarchy for pyvehicle."""

from __future__ import annotations


class VehicleError(Exception):
    """Base exception for all pyvehicle errors."""


class ConfigError(VehicleError):
    """Invalid or missing configuration."""


class StorageError(VehicleError):
    """Persisted token storage could not be read or written."""


class NetworkError(VehicleError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class UnauthorizedError(NetworkError):
    """Access token rejected by the server (HTTP 401).

    The session repository catches this internally to refresh the token
    pair once and retry the call.
    """


class AuthError(VehicleError):
    """Login rejected: invalid credentials or malformed token response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class NoSessionError(VehicleError):
    """Refresh requested while no refresh token is stored."""


class NotFoundError(VehicleError):
    """The requested vehicle does not exist upstream."""
