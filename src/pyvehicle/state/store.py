"""Application snapshot and its holder.

The holder is the only component allowed to replace the snapshot. Every
transition is a pure ``ApplicationState -> ApplicationState`` function
applied in one step, so observers never see a half-applied update.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from pyvehicle.models.vehicle import VehicleDetail, VehicleSummary

_logger = logging.getLogger(__name__)

StateListener = Callable[["ApplicationState"], None]


class ApplicationState(BaseModel):
    """Everything the presentation layer renders."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_logged_in: bool = False
    is_authenticating: bool = False
    auth_error: str | None = None
    is_search_panel_visible: bool = False
    search_query: str = ""
    is_list_loading: bool = False
    list_message: str | None = None
    vehicles: tuple[VehicleSummary, ...] = ()
    is_detail_loading: bool = False
    detail_error: str | None = None
    selected_vehicle: VehicleDetail | None = None


class StateHolder:
    """Holds the current :class:`ApplicationState` and publishes changes."""

    def __init__(self, initial: ApplicationState | None = None) -> None:
        self._state = initial if initial is not None else ApplicationState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ApplicationState:
        return self._state

    def update(self, transition: Callable[[ApplicationState], ApplicationState]) -> ApplicationState:
        """Replace the snapshot with ``transition(current)``.

        Listeners are notified only when the snapshot actually changed.
        """
        new_state = transition(self._state)
        if new_state == self._state:
            return self._state
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                _logger.debug("State listener failed", exc_info=True)
        return new_state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener*; it receives the current snapshot immediately."""
        self._listeners.append(listener)
        try:
            listener(self._state)
        except Exception:
            _logger.debug("State listener failed", exc_info=True)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe
