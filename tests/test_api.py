import pytest

from pension_planner import api
from pension_planner.config import SolverSettings
from pension_planner.engine.state import PreviewCoordinator, ScenarioState

PLAN = {
    "startCapital": 50000,
    "durationYears": 10,
    "returnSavings": 6,
    "returnWithdrawal": 4,
    "inflation": 2,
    "payoutMode": "fixed",
    "payoutYears": 20,
    "tax": {"enabled": True, "baseRate": 25, "includeSurchargeA": True},
    "breakpoints": [
        {"year": 0, "monthlyRate": 500, "segmentMode": "linear"},
        {"year": 5, "monthlyRate": 800},
    ],
}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(api, "state", ScenarioState(str(tmp_path / "scenarios.json")))
    monkeypatch.setattr(api, "preview", PreviewCoordinator())
    monkeypatch.setattr(api, "settings", SolverSettings(perpetual_horizon_years=40, bisection_iterations=40))
    return api.app.test_client()


def test_health(client):
    response = client.get("/api/health")

    assert response.get_json() == {"status": "ok"}
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_schema_describes_schedule_table(client):
    payload = client.get("/api/schema").get_json()

    assert payload["planDefaults"]["durationYears"] == 30
    assert payload["planDefaults"]["returnSavings"] == pytest.approx(7.0)
    assert [col["field"] for col in payload["schedule"]["columns"]] == ["Year", "Monthly Rate", "Segment"]


def test_parse_params_converts_percentages():
    params = api.parse_params(PLAN)

    assert params.annual_return_savings == pytest.approx(0.06)
    assert params.annual_inflation == pytest.approx(0.02)
    assert params.tax.base_rate == pytest.approx(0.25)
    assert params.payout_months == 240
    assert [p.year for p in params.breakpoints] == [0, 5]


@pytest.mark.parametrize(
    "payload",
    [
        {"startCapital": "lots"},
        {"returnSavings": -150},
        {"payoutMode": "sometimes"},
        {"inflation": "nan"},
        {"breakpoints": [5]},
        {"breakpoints": "monthly"},
        {"tax": "flat"},
        [1, 2],
    ],
)
def test_invalid_params_are_rejected(client, payload):
    response = client.post("/api/preview", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid plan parameters."


def test_preview_returns_series_and_summary(client):
    payload = client.post("/api/preview", json=PLAN).get_json()

    assert payload["stale"] is False
    assert payload["ticket"] == 1
    assert len(payload["series"]["years"]) == 120
    assert payload["summary"]["payoutMonthlyNominalAtRetirementStart"] > 0
    assert payload["summary"]["payoutMode"] == "fixed"


def test_scenario_lifecycle(client):
    first = client.post("/api/scenarios", json=PLAN).get_json()
    second = client.post("/api/scenarios", json={**PLAN, "durationYears": 5}).get_json()

    names = [s["name"] for s in second["scenarios"]]
    assert names == ["Scenario I", "Scenario II"]
    assert second["activeScenarioId"] == second["scenario"]["id"]
    assert first["scenario"]["schedule"].startswith("0Y→€500/MO")

    first_id = first["scenario"]["id"]
    activated = client.post(f"/api/scenarios/{first_id}/activate").get_json()
    assert activated["scenario"]["results"]["summary"]["endCapitalNominal"] > 0
    assert client.get("/api/scenarios").get_json()["activeScenarioId"] == first_id

    yearly = client.get("/api/scenarios/series?freq=Y").get_json()
    assert len(yearly["data"]) == 10 + 5

    deleted = client.delete(f"/api/scenarios/{first_id}").get_json()
    assert [s["name"] for s in deleted["scenarios"]] == ["Scenario II"]

    cleared = client.delete("/api/scenarios").get_json()
    assert cleared["scenarios"] == []


def test_unknown_scenario_is_404(client):
    assert client.delete("/api/scenarios/missing").status_code == 404
    assert client.post("/api/scenarios/missing/activate").status_code == 404


def test_series_rejects_unknown_frequency(client):
    client.post("/api/scenarios", json=PLAN)

    assert client.get("/api/scenarios/series?freq=W").status_code == 400


def test_series_validates_frequency_before_store_is_filled(client):
    response = client.get("/api/scenarios/series?freq=W")

    assert response.status_code == 400
    assert client.get("/api/scenarios/series?freq=q").get_json() == {"scenarios": [], "freq": "Q", "data": []}


def test_preview_with_collapsed_price_level_pays_nothing(client):
    response = client.post("/api/preview", json={**PLAN, "inflation": -100, "payoutMode": "perpetual"})

    assert response.status_code == 200
    summary = response.get_json()["summary"]
    assert summary["payoutMonthlyNominalAtRetirementStart"] == 0.0
