"""HTTP transport with bearer-token attachment and status mapping."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyvehicle._redact import mask_bearer, redact_for_log
from pyvehicle.config import VehicleConfig
from pyvehicle.exceptions import NetworkError, UnauthorizedError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        token: str | None = None,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
        form: Mapping[str, str] | None = None,
    ) -> Any: ...


class HttpTransport:
    """aiohttp-backed transport returning decoded JSON bodies."""

    def __init__(self, config: VehicleConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self, token: str | None) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }
        if token is not None and token.strip():
            headers["authorization"] = f"Bearer {token}"
        return headers

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        token: str | None = None,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
        form: Mapping[str, str] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises
        ------
        UnauthorizedError
            On HTTP 401.
        NetworkError
            On any other non-2xx status, client failure or invalid JSON.
        """
        url = f"{self._config.base_url}{endpoint}"
        headers = self._headers(token)
        _logger.debug(
            "%s %s headers=%s params=%s body=%s",
            method,
            url,
            redact_for_log(headers),
            redact_for_log(params),
            redact_for_log(json_body if json_body is not None else form),
        )

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params else None,
                json=dict(json_body) if json_body is not None else None,
                data=dict(form) if form is not None else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
            _logger.debug("%s %s -> HTTP %d (%d bytes)", method, endpoint, status, len(text))
        except aiohttp.ClientError as exc:
            raise NetworkError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc
        except TimeoutError as exc:
            raise NetworkError(f"Request to {endpoint} timed out", endpoint=endpoint) from exc

        if status == 401:
            raise UnauthorizedError(
                f"HTTP 401 from {endpoint}: unauthorized",
                status_code=status,
                endpoint=endpoint,
            )
        if not 200 <= status < 300:
            raise NetworkError(
                f"HTTP {status} from {endpoint}: {mask_bearer(text[:200])}",
                status_code=status,
                endpoint=endpoint,
            )

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise NetworkError(
                f"Invalid JSON from {endpoint}: {mask_bearer(text[:200])}",
                status_code=status,
                endpoint=endpoint,
            ) from exc
