import pandas as pd
import pytest

from pension_planner.data_model import SimulationSeries
from pension_planner.engine.aggregate import aggregate_period


def _frame(months=24, scenario="Scenario I"):
    values = [float(m) for m in range(1, months + 1)]
    series = SimulationSeries(
        years=[m / 12 for m in range(1, months + 1)],
        capital_nominal=values,
        capital_real=values,
        payins_nominal=values,
        payins_real=values,
    )
    return series.to_frame(scenario)


def test_yearly_aggregation_keeps_year_end_values():
    df = pd.concat([_frame(), _frame(12, "Scenario II")], ignore_index=True)

    yearly = aggregate_period(df, "Y")

    assert len(yearly) == 3
    first = yearly[yearly["Scenario"] == "Scenario I"]
    assert first["CapitalNominal"].tolist() == [12.0, 24.0]
    assert first["Period"].tolist() == ["Y1", "Y2"]
    assert first["ContributionsNominal"].tolist() == [12.0, 12.0]
    assert first["CapitalRealLow"].tolist() == [1.0, 13.0]


def test_quarterly_aggregation_labels():
    quarterly = aggregate_period(_frame(), "q")

    assert len(quarterly) == 8
    assert quarterly["Period"].tolist()[:2] == ["Y1 Q1", "Y1 Q2"]
    assert quarterly["CapitalNominal"].tolist()[0] == 3.0
    assert quarterly["ContributionsNominal"].tolist()[:2] == [3.0, 3.0]
    assert quarterly["CapitalRealLow"].tolist()[:2] == [1.0, 4.0]


def test_monthly_aggregation_is_passthrough_with_labels():
    monthly = aggregate_period(_frame(), "M")

    assert len(monthly) == 24
    assert monthly["Period"].iloc[12] == "Y2 M01"


def test_invalid_inputs():
    with pytest.raises(ValueError):
        aggregate_period(_frame(), "W")
    with pytest.raises(KeyError):
        aggregate_period(pd.DataFrame({"Scenario": ["x"]}), "Y")
    assert aggregate_period(pd.DataFrame(), "Y").empty


def test_period_low_tracks_drawdown_inside_the_year():
    df = _frame(12)
    df.loc[5, "CapitalReal"] = -4.0

    yearly = aggregate_period(df, "Y")

    assert yearly["CapitalReal"].tolist() == [12.0]
    assert yearly["CapitalRealLow"].tolist() == [-4.0]


def test_invalid_frequency_is_rejected_even_without_rows():
    with pytest.raises(ValueError):
        aggregate_period(pd.DataFrame(), "W")
