"""pyvehicle - Async session-managed client and state controller for a vehicle lookup API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyvehicle")
except PackageNotFoundError:
    __version__ = "0+local"
from pyvehicle.config import VehicleConfig
from pyvehicle.controller import ApplicationController
from pyvehicle.credentials import ConfigCredentialSource, Credentials, CredentialSource, StaticCredentialSource
from pyvehicle.exceptions import (
    AuthError,
    ConfigError,
    NetworkError,
    NoSessionError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
    VehicleError,
)
from pyvehicle.models import TokenPair, VehicleDetail, VehicleSpec, VehicleSummary
from pyvehicle.remote import HttpVehicleClient, RemoteVehicleClient
from pyvehicle.repository import SessionRepository
from pyvehicle.state import (
    ApplicationState,
    ClearDetailError,
    DismissDetail,
    Intent,
    LoadRecentVehicles,
    OpenDetail,
    SearchQueryChanged,
    SubmitSearch,
    ToggleSearchVisibility,
    TokensChanged,
)
from pyvehicle.token_store import JsonFileTokenBackend, MemoryTokenBackend, TokenBackend, TokenStore

__all__ = [
    "__version__",
    "ApplicationController",
    "ApplicationState",
    "AuthError",
    "ClearDetailError",
    "ConfigCredentialSource",
    "ConfigError",
    "CredentialSource",
    "Credentials",
    "DismissDetail",
    "HttpVehicleClient",
    "Intent",
    "JsonFileTokenBackend",
    "LoadRecentVehicles",
    "MemoryTokenBackend",
    "NetworkError",
    "NoSessionError",
    "NotFoundError",
    "OpenDetail",
    "RemoteVehicleClient",
    "SearchQueryChanged",
    "SessionRepository",
    "StaticCredentialSource",
    "StorageError",
    "SubmitSearch",
    "TokenBackend",
    "TokenPair",
    "TokenStore",
    "TokensChanged",
    "ToggleSearchVisibility",
    "UnauthorizedError",
    "VehicleConfig",
    "VehicleDetail",
    "VehicleError",
    "VehicleSpec",
    "VehicleSummary",
]
