"""Authentication token model."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TokenPair(BaseModel):
    """Access/refresh token pair returned by login and refresh.

    Both fields are required and non-blank; a pair with only one token
    cannot be constructed.

    Parameters
    ----------
    access_token : str
        Bearer token attached to authenticated requests.
    refresh_token : str
        Longer-lived token used to obtain a new pair.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    access_token: str = Field(min_length=1, validation_alias=AliasChoices("access_token", "accessToken"))
    refresh_token: str = Field(min_length=1, validation_alias=AliasChoices("refresh_token", "refreshToken"))

    def __repr__(self) -> str:
        return "TokenPair(access_token=<redacted>, refresh_token=<redacted>)"
