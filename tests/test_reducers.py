from __future__ import annotations

import pytest

from pyvehicle._constants import NO_DATA_MESSAGE
from pyvehicle.models.vehicle import VehicleDetail, VehicleSummary
from pyvehicle.state import reducers
from pyvehicle.state.store import ApplicationState, StateHolder

SUMMARY = VehicleSummary(id="VIN1", brand="Lada", model="Niva")
DETAIL = VehicleDetail(summary=SUMMARY)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("k123 a45", "K123A45"),
        ("  xta-2109/99 ", "XTA210999"),
        ("--", ""),
        ("", ""),
    ],
)
def test_normalize_query(raw: str, expected: str) -> None:
    assert reducers.normalize_query(raw) == expected


def test_reducers_return_new_snapshots() -> None:
    state = ApplicationState()

    toggled = reducers.toggle_search_visibility(state)

    assert toggled is not state
    assert toggled.is_search_panel_visible is True
    assert state.is_search_panel_visible is False


def test_query_change_clears_list_message() -> None:
    state = ApplicationState(list_message="old")
    assert reducers.search_query_changed(state, "abc") == ApplicationState(search_query="abc")


def test_recent_loaded_sets_no_data_only_when_empty() -> None:
    loading = reducers.list_loading(ApplicationState(list_message="stale"))
    assert loading.is_list_loading is True
    assert loading.list_message is None

    empty = reducers.recent_loaded(loading, [])
    assert empty.list_message == NO_DATA_MESSAGE
    assert empty.is_list_loading is False

    loaded = reducers.recent_loaded(empty, [SUMMARY])
    assert loaded.list_message is None
    assert loaded.vehicles == (SUMMARY,)


def test_vin_search_transitions() -> None:
    state = ApplicationState(selected_vehicle=DETAIL, detail_error="old")

    loading = reducers.list_loading(state, clear_selection=True)
    assert loading.selected_vehicle is None

    found = reducers.vin_found(loading, DETAIL)
    assert found.selected_vehicle == DETAIL
    assert found.detail_error is None
    assert found.is_list_loading is False

    missing = reducers.vin_not_found(found, "Vehicle with VIN X not found")
    assert missing.selected_vehicle is None
    assert missing.list_message == "Vehicle with VIN X not found"


def test_detail_result_and_error_are_exclusive() -> None:
    loaded = reducers.detail_loaded(reducers.detail_loading(ApplicationState(detail_error="x")), DETAIL)
    assert loaded.selected_vehicle == DETAIL
    assert loaded.detail_error is None

    failed = reducers.detail_failed(loaded, "boom")
    assert failed.selected_vehicle is None
    assert failed.detail_error == "boom"
    assert failed.is_detail_loading is False


def test_auth_transitions() -> None:
    started = reducers.auth_started(ApplicationState(auth_error="old"))
    assert started.is_authenticating is True
    assert started.auth_error is None

    failed = reducers.auth_failed(started, "nope")
    assert failed.is_authenticating is False
    assert failed.auth_error == "nope"

    succeeded = reducers.auth_succeeded(started)
    assert succeeded.is_logged_in is True
    assert succeeded.is_authenticating is False

    out = reducers.logged_out(succeeded.model_copy(update={"selected_vehicle": DETAIL}))
    assert out.is_logged_in is False
    assert out.selected_vehicle is None

    busy = succeeded.model_copy(update={"is_list_loading": True, "is_detail_loading": True})
    assert reducers.logged_out(busy).is_list_loading is False
    assert reducers.logged_out(busy).is_detail_loading is False


def test_state_holder_notifies_only_on_change() -> None:
    holder = StateHolder()
    seen: list[ApplicationState] = []
    unsubscribe = holder.subscribe(seen.append)

    holder.update(reducers.dismiss_detail)
    holder.update(reducers.toggle_search_visibility)
    unsubscribe()
    holder.update(reducers.toggle_search_visibility)

    assert [state.is_search_panel_visible for state in seen] == [False, True]
    assert holder.state.is_search_panel_visible is False
