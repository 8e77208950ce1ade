"""REST backend for savings projection and payout scenarios."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List

from flask import Flask, jsonify, request

from .config import DEFAULT_PARAMS, DEFAULT_SETTINGS, MAX_DURATION_YEARS, MIN_DURATION_YEARS, RATE_STEP
from .data_model import Params, ScheduleTableModel, SimulationResult
from .engine.aggregate import aggregate_period, validate_freq
from .engine.schedule import format_schedule
from .engine.simulator import compute_results
from .engine.state import PreviewCoordinator, ScenarioState

logger = logging.getLogger(__name__)

app = Flask(__name__)

state = ScenarioState()
preview = PreviewCoordinator()
settings = DEFAULT_SETTINGS

SCHEDULE_MODEL = ScheduleTableModel()

PERCENT_FIELDS = {
    "annualReturnSavings": ("returnSavings", "annualReturnSavings"),
    "annualReturnWithdrawal": ("returnWithdrawal", "annualReturnWithdrawal"),
    "annualInflation": ("inflation", "annualInflation"),
}
TAX_PERCENT_FIELDS = ("baseRate", "surchargeARate", "surchargeBRate")


def _extract_payload_value(payload: dict, *keys: str, default=None):
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _is_nan(value: Any) -> bool:
    try:
        return not math.isfinite(value)
    except (TypeError, ValueError):
        return False


def _sanitize_records(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    clean_rows: List[Dict[str, Any]] = []
    for row in records:
        clean_rows.append({key: (None if _is_nan(value) else value) for key, value in row.items()})
    return clean_rows


def _percent(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError("Rates must be finite numbers.")
    return number / 100.0


def parse_params(payload: dict) -> Params:
    """Build Params from a request payload where rates are given in percent."""
    if not isinstance(payload, dict):
        raise TypeError("Plan payload must be an object.")
    breakpoints = payload.get("breakpoints")
    if breakpoints is not None and (
        not isinstance(breakpoints, list) or not all(isinstance(row, dict) for row in breakpoints)
    ):
        raise TypeError("Breakpoints must be a list of objects.")
    tax = payload.get("tax")
    if tax is not None and not isinstance(tax, dict):
        raise TypeError("Tax settings must be an object.")

    data: Dict[str, Any] = {
        "startCapital": _extract_payload_value(payload, "startCapital", default=DEFAULT_PARAMS["startCapital"]),
        "durationYears": _extract_payload_value(
            payload, "durationYears", "duration", default=DEFAULT_PARAMS["durationYears"]
        ),
        "payoutMode": _extract_payload_value(payload, "payoutMode", default=DEFAULT_PARAMS["payoutMode"]),
        "payoutYears": _extract_payload_value(payload, "payoutYears", default=DEFAULT_PARAMS["payoutYears"]),
        "breakpoints": _extract_payload_value(
            payload, "breakpoints", default=DEFAULT_PARAMS["breakpoints"]
        ),
    }
    for field, keys in PERCENT_FIELDS.items():
        raw = _extract_payload_value(payload, *keys)
        data[field] = DEFAULT_PARAMS[field] if raw is None else _percent(raw)
        if data[field] <= -1 and field != "annualInflation":
            raise ValueError("Returns must be greater than -100%.")

    tax_payload = dict(tax or {})
    for field in TAX_PERCENT_FIELDS:
        if tax_payload.get(field) is not None:
            tax_payload[field] = _percent(tax_payload[field])
    data["tax"] = tax_payload

    if str(data["payoutMode"]).lower() not in {"perpetual", "fixed"}:
        raise ValueError(f"Unknown payout mode: {data['payoutMode']}")
    for number in (data["startCapital"], data["durationYears"], data["payoutYears"]):
        if _is_nan(float(number)):
            raise ValueError("Plan values must be finite numbers.")
    return Params.from_dict(data)


def _scenario_payload(scenario: Dict[str, Any]) -> Dict[str, Any]:
    params = Params.from_dict(scenario.get("params"))
    return {
        "id": scenario["id"],
        "name": scenario["name"],
        "params": scenario.get("params"),
        "schedule": format_schedule(params.breakpoints),
        "summary": (scenario.get("results") or {}).get("summary"),
        "warnings": (scenario.get("results") or {}).get("warnings", []),
    }


def _scenarios_payload() -> Dict[str, Any]:
    return {
        "scenarios": [_scenario_payload(scenario) for scenario in state.scenarios],
        "activeScenarioId": state.active_id,
    }


@app.after_request
def apply_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET,POST,DELETE,OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


@app.get("/api/health")
def healthcheck():
    return jsonify({"status": "ok"})


@app.get("/api/schema")
def get_schema():
    payload = {
        "planDefaults": {
            "startCapital": DEFAULT_PARAMS["startCapital"],
            "durationYears": DEFAULT_PARAMS["durationYears"],
            "returnSavings": DEFAULT_PARAMS["annualReturnSavings"] * 100,
            "returnWithdrawal": DEFAULT_PARAMS["annualReturnWithdrawal"] * 100,
            "inflation": DEFAULT_PARAMS["annualInflation"] * 100,
            "payoutMode": DEFAULT_PARAMS["payoutMode"],
            "payoutYears": DEFAULT_PARAMS["payoutYears"],
            "durationRange": [MIN_DURATION_YEARS, MAX_DURATION_YEARS],
            "rateStep": RATE_STEP,
        },
        "schedule": SCHEDULE_MODEL.to_payload(),
        "payoutModes": [
            {"label": "Perpetual", "value": "perpetual"},
            {"label": "Fixed duration", "value": "fixed"},
        ],
        "freqOptions": [
            {"label": "Monthly", "value": "M"},
            {"label": "Quarterly", "value": "Q"},
            {"label": "Yearly", "value": "Y"},
        ],
    }
    return jsonify(payload)


@app.post("/api/preview")
def preview_endpoint():
    payload = request.get_json(silent=True) or {}
    try:
        params = parse_params(payload)
    except (TypeError, ValueError):
        return jsonify({"error": "Invalid plan parameters."}), 400
    ticket = preview.submit()
    result = compute_results(params, settings)
    accepted = preview.publish(ticket, result)
    return jsonify({"ticket": ticket, "stale": not accepted, "params": params.to_dict(), **result.to_dict()})


@app.get("/api/scenarios")
def list_scenarios():
    return jsonify(_scenarios_payload())


@app.post("/api/scenarios")
def add_scenario():
    payload = request.get_json(silent=True) or {}
    try:
        params = parse_params(payload)
    except (TypeError, ValueError):
        return jsonify({"error": "Invalid plan parameters."}), 400
    result = compute_results(params, settings)
    scenario = state.add(params, result)
    return jsonify({"scenario": _scenario_payload(scenario), **_scenarios_payload()})


@app.get("/api/scenarios/series")
def scenario_series():
    freq = str(request.args.get("freq", "Y")).upper()
    try:
        validate_freq(freq)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    monthly_all = state.get_all_monthly()
    if monthly_all.empty:
        return jsonify({"scenarios": state.list_names(), "freq": freq, "data": []})
    agg_df = aggregate_period(monthly_all, freq=freq)
    return jsonify(
        {
            "scenarios": state.list_names(),
            "freq": freq,
            "data": _sanitize_records(agg_df.to_dict(orient="records")),
        }
    )


@app.post("/api/scenarios/<scenario_id>/activate")
def activate_scenario(scenario_id: str):
    try:
        scenario = state.activate(scenario_id)
    except KeyError:
        return jsonify({"error": "Scenario not found."}), 404
    results = SimulationResult.from_dict(scenario.get("results"))
    return jsonify({"scenario": {**_scenario_payload(scenario), "results": results.to_dict()}})


@app.delete("/api/scenarios/<scenario_id>")
def delete_scenario(scenario_id: str):
    try:
        state.delete(scenario_id)
    except KeyError:
        return jsonify({"error": "Scenario not found."}), 404
    return jsonify({"message": "Scenario deleted.", **_scenarios_payload()})


@app.delete("/api/scenarios")
def clear_scenarios():
    state.clear()
    return jsonify({"message": "All scenarios cleared.", "scenarios": [], "activeScenarioId": None})


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(debug=False, port=8000)


if __name__ == "__main__":
    main()
