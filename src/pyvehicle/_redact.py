"""Masking of credentials and tokens in debug output.

Every request carries either a password (login form), a refresh token
(refresh body) or a bearer header, and token responses echo both tokens
back. :func:`redact_for_log` is applied to all of them before they reach
a log record.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

REDACTED = "<redacted>"

_SECRET_KEYS = frozenset(
    {
        "password",
        "access_token",
        "accesstoken",
        "refresh_token",
        "refreshtoken",
        "token",
        "authorization",
        "cookie",
        "set_cookie",
    }
)
_BEARER = re.compile(r"(?i)\b(bearer)\s+[A-Za-z0-9._~+/=-]+")


def mask_bearer(text: str) -> str:
    """Replace the credential of every ``Bearer <token>`` in *text*."""
    return _BEARER.sub(rf"\1 {REDACTED}", text)


def _is_secret(key: Any) -> bool:
    return str(key).lower().replace("-", "_") in _SECRET_KEYS


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Return a copy of *value* that is safe to log.

    Mapping entries whose key names a secret are replaced, bearer tokens
    inside free text are masked, pydantic models are dumped first, and
    long strings are shortened to *max_string* characters.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED if _is_secret(key) else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [redact_for_log(item, max_string=max_string) for item in value]
    if isinstance(value, str):
        text = mask_bearer(value)
        if len(text) > max_string:
            return f"{text[:max_string]}...(+{len(text) - max_string} chars)"
        return text
    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"
    return value
