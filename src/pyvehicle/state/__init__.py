"""State layer.

This package is the single source of truth for the UI-facing
application snapshot: the intents that drive it, the pure reducers that
transform it, and the holder that publishes each new snapshot.
"""

from pyvehicle.state.intents import (
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
from pyvehicle.state.store import ApplicationState, StateHolder

__all__ = [
    "ApplicationState",
    "ClearDetailError",
    "DismissDetail",
    "Intent",
    "LoadRecentVehicles",
    "OpenDetail",
    "SearchQueryChanged",
    "StateHolder",
    "SubmitSearch",
    "ToggleSearchVisibility",
    "TokensChanged",
]
