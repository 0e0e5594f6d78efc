from __future__ import annotations

from pyvehicle._redact import REDACTED, mask_bearer, redact_for_log
from pyvehicle.models.token import TokenPair


def test_secret_keys_are_replaced_at_any_depth() -> None:
    payload = {
        "access_token": "AT",
        "refreshToken": "RT",
        "nested": {"Authorization": "Bearer AT", "Set-Cookie": "sid=1"},
        "form": {"username": "user", "password": "pw"},
        "vehicles": [{"vin": "X1"}],
    }

    assert redact_for_log(payload) == {
        "access_token": REDACTED,
        "refreshToken": REDACTED,
        "nested": {"Authorization": REDACTED, "Set-Cookie": REDACTED},
        "form": {"username": "user", "password": REDACTED},
        "vehicles": [{"vin": "X1"}],
    }


def test_bearer_tokens_in_free_text_are_masked() -> None:
    assert mask_bearer("rejected Bearer eyJhbGciOi.J9.x-y_z for /vehicle") == (
        f"rejected Bearer {REDACTED} for /vehicle"
    )
    assert redact_for_log({"detail": "token bearer abc123 expired"}) == {
        "detail": f"token bearer {REDACTED} expired"
    }


def test_models_are_dumped_before_redaction() -> None:
    pair = TokenPair(access_token="AT", refresh_token="RT")
    assert redact_for_log(pair) == {"access_token": REDACTED, "refresh_token": REDACTED}


def test_long_strings_and_bytes_are_shortened() -> None:
    redacted = redact_for_log({"value": "x" * 300, "blob": b"\x00" * 12, "items": ("a", 1)}, max_string=10)
    assert redacted["value"] == "x" * 10 + "...(+290 chars)"
    assert redacted["blob"] == "<12 bytes>"
    assert redacted["items"] == ["a", 1]
