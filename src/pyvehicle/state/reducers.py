"""Pure state transitions.

Each function takes the current snapshot (plus the result being reduced)
and returns a new snapshot. None of them perform I/O, so every
transition can be tested in isolation.
"""

from __future__ import annotations

from collections.abc import Sequence

from pyvehicle._constants import NO_DATA_MESSAGE
from pyvehicle.models.vehicle import VehicleDetail, VehicleSummary
from pyvehicle.state.store import ApplicationState


def normalize_query(value: str) -> str:
    """Uppercase *value* and drop every non-alphanumeric character.

    ``"k123 a45"`` becomes ``"K123A45"``.
    """
    return "".join(ch for ch in value.upper() if ch.isalnum())


# ------------------------------------------------------------------
# Local intents
# ------------------------------------------------------------------


def toggle_search_visibility(state: ApplicationState) -> ApplicationState:
    return state.model_copy(update={"is_search_panel_visible": not state.is_search_panel_visible})


def search_query_changed(state: ApplicationState, value: str) -> ApplicationState:
    return state.model_copy(update={"search_query": value, "list_message": None})


def dismiss_detail(state: ApplicationState) -> ApplicationState:
    return state.model_copy(update={"selected_vehicle": None})


def clear_detail_error(state: ApplicationState) -> ApplicationState:
    return state.model_copy(update={"detail_error": None})


def list_message(state: ApplicationState, message: str) -> ApplicationState:
    return state.model_copy(update={"list_message": message})


# ------------------------------------------------------------------
# Session
# ------------------------------------------------------------------


def logged_in(state: ApplicationState) -> ApplicationState:
    return state.model_copy(update={"is_logged_in": True})


def logged_out(state: ApplicationState) -> ApplicationState:
    return state.model_copy(
        update={
            "is_logged_in": False,
            "selected_vehicle": None,
            "is_list_loading": False,
            "is_detail_loading": False,
        }
    )


def auth_started(state: ApplicationState) -> ApplicationState:
    return state.model_copy(update={"is_authenticating": True, "auth_error": None})


def auth_succeeded(state: ApplicationState) -> ApplicationState:
    return state.model_copy(update={"is_logged_in": True, "is_authenticating": False, "auth_error": None})


def auth_failed(state: ApplicationState, message: str) -> ApplicationState:
    return state.model_copy(update={"is_authenticating": False, "auth_error": message})


# ------------------------------------------------------------------
# Vehicle list and VIN search
# ------------------------------------------------------------------


def list_loading(state: ApplicationState, *, clear_selection: bool = False) -> ApplicationState:
    update: dict[str, object] = {"is_list_loading": True, "list_message": None}
    if clear_selection:
        update["selected_vehicle"] = None
    return state.model_copy(update=update)


def recent_loaded(state: ApplicationState, vehicles: Sequence[VehicleSummary]) -> ApplicationState:
    return state.model_copy(
        update={
            "is_list_loading": False,
            "vehicles": tuple(vehicles),
            "list_message": NO_DATA_MESSAGE if not vehicles else None,
        }
    )


def list_failed(state: ApplicationState, message: str) -> ApplicationState:
    return state.model_copy(update={"is_list_loading": False, "list_message": message})


def vin_found(state: ApplicationState, detail: VehicleDetail) -> ApplicationState:
    return state.model_copy(
        update={
            "is_list_loading": False,
            "selected_vehicle": detail,
            "list_message": None,
            "detail_error": None,
        }
    )


def vin_not_found(state: ApplicationState, message: str) -> ApplicationState:
    return state.model_copy(
        update={"is_list_loading": False, "list_message": message, "selected_vehicle": None}
    )


# ------------------------------------------------------------------
# Vehicle detail
# ------------------------------------------------------------------


def detail_loading(state: ApplicationState) -> ApplicationState:
    return state.model_copy(update={"is_detail_loading": True, "detail_error": None})


def detail_loaded(state: ApplicationState, detail: VehicleDetail) -> ApplicationState:
    return state.model_copy(
        update={"is_detail_loading": False, "selected_vehicle": detail, "detail_error": None}
    )


def detail_failed(state: ApplicationState, message: str) -> ApplicationState:
    return state.model_copy(
        update={"is_detail_loading": False, "detail_error": message, "selected_vehicle": None}
    )
