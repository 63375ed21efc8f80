import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from state.app_state import (
    AppState,
    AppStateManager,
    app_state_defaults,
    ensure_session_state_defaults,
)
from actions.state_updates import (
    advance_flow_step,
    reset_calculator,
    rewind_flow_step,
    select_collective,
)


def test_app_state_defaults_describe_the_worked_example():
    state = AppState()
    assert (state.a_rows, state.a_cols, state.b_rows, state.b_cols) == (3, 4, 4, 5)
    assert state.device_name == "H100 PCIe"
    assert state.device_query == ""
    assert state.precision_id == "fp32"
    assert state.collective == "all_reduce"
    assert state.collective_root == 0
    assert state.reduce_op == "sum"
    assert state.flow_step == 0
    assert state.parallelism == "data"


def test_from_mapping_merges_with_defaults():
    state = AppState.from_mapping({"a_rows": 8, "precision_id": "int8", "unrelated": True})
    assert state.a_rows == 8
    assert state.precision_id == "int8"
    assert state.b_cols == 5
    assert not hasattr(state, "unrelated")


def test_manager_updates_and_extras():
    manager = AppStateManager()
    manager.set("a_cols", 7)
    assert manager.get("a_cols") == 7

    manager.update({"b_rows": 7}, precision_id="bf16")
    assert manager.get("b_rows") == 7
    assert manager.get("precision_id") == "bf16"

    manager.set("collective_choice", "gather")
    assert manager.get("collective_choice") == "gather"
    assert manager.as_dict()["collective_choice"] == "gather"
    assert manager.get("missing", "fallback") == "fallback"


def test_reset_calculator_leaves_other_tabs_alone():
    manager = AppStateManager()
    manager.update(a_rows=99, device_name="L4", precision_id="int4", parallelism="expert")

    reset_calculator(manager)

    assert manager.get("a_rows") == 3
    assert manager.get("device_name") == "H100 PCIe"
    assert manager.get("precision_id") == "fp32"
    assert manager.get("parallelism") == "expert"


def test_select_collective_rewinds_the_flow():
    manager = AppStateManager()
    manager.set("flow_step", 3)

    select_collective(manager, "scatter")

    assert manager.get("collective") == "scatter"
    assert manager.get("flow_step") == 0


@pytest.mark.parametrize("total, presses, expected", [(5, 2, 2), (5, 9, 5), (0, 3, 0)])
def test_advance_flow_step_is_capped(total, presses, expected):
    manager = AppStateManager()
    for _ in range(presses):
        advance_flow_step(manager, total)
    assert manager.get("flow_step") == expected


def test_rewind_flow_step_stops_at_zero():
    manager = AppStateManager()
    advance_flow_step(manager, 4)
    assert rewind_flow_step(manager) == 0
    assert rewind_flow_step(manager) == 0


def test_ensure_session_state_defaults_populates_missing_entries():
    backing: dict = {}

    manager = ensure_session_state_defaults(backing)

    for key in app_state_defaults():
        assert key in backing
        assert backing[key] == getattr(manager.state, key)

    # values already in the session survive a rerun
    backing["a_rows"] = 12
    ensure_session_state_defaults(backing)
    assert backing["a_rows"] == 12
