import pytest

from pension_planner.config import SolverSettings
from pension_planner.data_model import Params
from pension_planner.engine.simulator import compute_results
from pension_planner.engine.state import PreviewCoordinator, ScenarioState, scenario_name

FAST = SolverSettings(perpetual_horizon_years=30, bisection_iterations=30)


def _add(state, **payload):
    params = Params.from_dict({"durationYears": 2, **payload})
    return state.add(params, compute_results(params, FAST))


def test_scenario_names_use_roman_numerals():
    assert scenario_name(0) == "Scenario I"
    assert scenario_name(14) == "Scenario XV"
    assert scenario_name(15) == "Scenario 16"


def test_added_scenarios_persist_and_reload(tmp_path):
    path = str(tmp_path / "scenarios.json")
    state = ScenarioState(path)

    first = _add(state)
    second = _add(state, startCapital=5000)

    assert state.list_names() == ["Scenario I", "Scenario II"]
    assert state.active_id == second["id"]

    reloaded = ScenarioState(path)
    assert reloaded.list_names() == ["Scenario I", "Scenario II"]
    assert reloaded.active_id == second["id"]
    assert reloaded.get(first["id"])["params"]["startCapital"] == 100000.0


def test_deleting_active_scenario_selects_neighbour(tmp_path):
    state = ScenarioState(str(tmp_path / "scenarios.json"))
    first = _add(state)
    second = _add(state)
    third = _add(state)

    state.activate(second["id"])
    state.delete(second["id"])
    assert state.active_id == third["id"]

    state.delete(third["id"])
    assert state.active_id == first["id"]

    state.delete(first["id"])
    assert state.active_id is None


def test_unknown_scenario_raises_key_error(tmp_path):
    state = ScenarioState(str(tmp_path / "scenarios.json"))

    with pytest.raises(KeyError):
        state.delete("nope")
    with pytest.raises(KeyError):
        state.activate("nope")


def test_get_all_monthly_concatenates_series(tmp_path):
    state = ScenarioState(str(tmp_path / "scenarios.json"))
    assert state.get_all_monthly().empty

    _add(state)
    _add(state, durationYears=3)

    df = state.get_all_monthly()
    assert len(df) == 24 + 36
    assert set(df["Scenario"]) == {"Scenario I", "Scenario II"}


def test_clear_removes_everything(tmp_path):
    path = str(tmp_path / "scenarios.json")
    state = ScenarioState(path)
    _add(state)

    state.clear()

    assert ScenarioState(path).scenarios == []


def test_preview_coordinator_keeps_only_latest():
    coordinator = PreviewCoordinator()
    params = Params.from_dict({"durationYears": 1, "payoutMode": "fixed", "payoutYears": 1})
    result = compute_results(params, FAST)

    older = coordinator.submit()
    newer = coordinator.submit()

    assert not coordinator.is_current(older)
    assert not coordinator.publish(older, result)
    assert coordinator.result is None
    assert coordinator.publish(newer, result)
    assert coordinator.published_ticket == newer
    assert coordinator.result is result
