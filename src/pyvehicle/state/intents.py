"""User and system intents accepted by the application controller."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class _IntentBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ToggleSearchVisibility(_IntentBase):
    """Show or hide the search panel."""


class SearchQueryChanged(_IntentBase):
    value: str


class SubmitSearch(_IntentBase):
    """Look up the current search query as a VIN."""


class LoadRecentVehicles(_IntentBase):
    """Reload the recent-vehicles list."""


class OpenDetail(_IntentBase):
    vehicle_id: str


class DismissDetail(_IntentBase):
    pass


class ClearDetailError(_IntentBase):
    pass


class TokensChanged(_IntentBase):
    """Emitted by the token store subscription, not by the UI."""

    present: bool


Intent = (
    ToggleSearchVisibility
    | SearchQueryChanged
    | SubmitSearch
    | LoadRecentVehicles
    | OpenDetail
    | DismissDetail
    | ClearDetailError
    | TokensChanged
)
