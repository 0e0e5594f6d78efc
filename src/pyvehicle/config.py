"""Client configuration for pyvehicle."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyvehicle._constants import BASE_URL, DEFAULT_RECENT_LIMIT, TOKEN_NAMESPACE, USER_AGENT
from pyvehicle.exceptions import ConfigError


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class VehicleConfig:
    """Client configuration.

    Parameters
    ----------
    username : str
        Account name used for automatic login.
    password : str
        Account password used for automatic login.
    base_url : str
        API base URL, without a trailing slash.
    token_path : str or None
        JSON file holding the persisted token pair.  ``None`` keeps
        tokens in memory only.
    token_namespace : str
        Name of the record inside the token file.
    recent_limit : int
        Number of vehicles kept from the recent-vehicles list.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    user_agent : str
        ``User-Agent`` header sent with every request.
    """

    username: str = ""
    password: str = ""
    base_url: str = BASE_URL
    token_path: str | None = None
    token_namespace: str = TOKEN_NAMESPACE
    recent_limit: int = DEFAULT_RECENT_LIMIT
    request_timeout: float = 30.0
    user_agent: str = USER_AGENT

    @classmethod
    def from_env(cls, **overrides: Any) -> VehicleConfig:
        """Create configuration from environment variables.

        Reads ``VEHICLE_USERNAME``, ``VEHICLE_PASSWORD`` and the optional
        ``VEHICLE_*`` variables below. Explicit keyword arguments override
        environment values.

        Raises
        ------
        ConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "VEHICLE_USERNAME": "username",
            "VEHICLE_PASSWORD": "password",
            "VEHICLE_BASE_URL": "base_url",
            "VEHICLE_TOKEN_PATH": "token_path",
            "VEHICLE_TOKEN_NAMESPACE": "token_namespace",
            "VEHICLE_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        limit_env = env.get("VEHICLE_RECENT_LIMIT")
        if limit_env is not None and "recent_limit" not in overrides:
            config_kwargs["recent_limit"] = _env_number("VEHICLE_RECENT_LIMIT", limit_env, int)

        timeout_env = env.get("VEHICLE_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_number("VEHICLE_REQUEST_TIMEOUT", timeout_env, float)

        config_kwargs.update(overrides)

        if "base_url" in config_kwargs:
            config_kwargs["base_url"] = str(config_kwargs["base_url"]).rstrip("/")

        return cls(**config_kwargs)
