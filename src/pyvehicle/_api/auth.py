"""Login and refresh endpoints.

Endpoints:
  - POST /token          (form: username, password)
  - POST /refresh-token  (JSON: refresh_token)
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyvehicle._constants import AUTH_REJECTED_STATUSES, LOGIN_ENDPOINT, REFRESH_ENDPOINT, REFRESH_TOKEN_KEY
from pyvehicle._redact import redact_for_log
from pyvehicle._transport import Transport
from pyvehicle.exceptions import AuthError, NetworkError
from pyvehicle.models.token import TokenPair

_logger = logging.getLogger(__name__)


def parse_token_response(response: Any, *, endpoint: str) -> TokenPair:
    """Parse a token response.

    Raises
    ------
    AuthError
        If the response does not carry both tokens.
    """
    _logger.debug("Token response from %s parsed=%s", endpoint, redact_for_log(response))
    if not isinstance(response, dict):
        raise AuthError(f"{endpoint} returned no token object")
    try:
        return TokenPair.model_validate(response)
    except ValidationError as exc:
        raise AuthError(f"{endpoint} response missing token fields") from exc


async def fetch_login(transport: Transport, username: str, password: str) -> TokenPair:
    """Exchange credentials for a token pair.

    Raises
    ------
    AuthError
        If the server rejects the credentials (HTTP 401/403).
    NetworkError
        On any other transport failure.
    """
    try:
        response = await transport.request_json(
            "POST",
            LOGIN_ENDPOINT,
            form={"username": username, "password": password},
        )
    except NetworkError as exc:
        if exc.status_code in AUTH_REJECTED_STATUSES:
            raise AuthError(
                f"Login rejected: invalid username or password (HTTP {exc.status_code})",
                status_code=exc.status_code,
            ) from exc
        raise
    return parse_token_response(response, endpoint=LOGIN_ENDPOINT)


async def fetch_refresh(transport: Transport, refresh_token: str) -> TokenPair:
    """Exchange a refresh token for a new token pair."""
    response = await transport.request_json(
        "POST",
        REFRESH_ENDPOINT,
        json_body={REFRESH_TOKEN_KEY: refresh_token},
    )
    return parse_token_response(response, endpoint=REFRESH_ENDPOINT)
