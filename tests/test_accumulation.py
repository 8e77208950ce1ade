import pytest

from pension_planner.data_model import Params, ScheduleBreakpoint, SegmentMode
from pension_planner.engine.accumulation import (
    INFLATION_OVERFLOW_WARNING,
    INFLATION_RANGE_WARNING,
    accumulate,
)


def _params(**overrides):
    values = dict(
        start_capital=0.0,
        duration_years=1,
        annual_return_savings=0.0,
        annual_return_withdrawal=0.0,
        annual_inflation=0.0,
        breakpoints=[ScheduleBreakpoint(0, 0.0)],
    )
    values.update(overrides)
    return Params(**values)


def test_flat_capital_without_contributions_or_return():
    result = accumulate(_params(start_capital=100000.0))

    assert result.end_capital_nominal == pytest.approx(100000.0)
    assert result.end_capital_real == pytest.approx(100000.0)
    assert result.cost_basis == 100000.0
    assert len(result.series) == 12
    assert result.warnings == []


def test_contributions_accumulate_as_payins():
    result = accumulate(_params(duration_years=2, breakpoints=[ScheduleBreakpoint(0, 100.0)]))

    assert result.series.payins_nominal[-1] == pytest.approx(2400.0)
    assert result.end_capital_nominal == pytest.approx(2400.0)
    assert result.series.capital_real == result.series.capital_nominal
    assert result.series.years[0] == pytest.approx(1 / 12)
    assert result.series.years[-1] == pytest.approx(2.0)


def test_contribution_changes_at_breakpoint_year():
    result = accumulate(
        _params(duration_years=2, breakpoints=[ScheduleBreakpoint(0, 100.0), ScheduleBreakpoint(1, 300.0)])
    )

    payins = result.series.payins_nominal
    assert payins[11] == pytest.approx(1200.0)
    assert payins[12] - payins[11] == pytest.approx(300.0)
    assert result.cost_basis == pytest.approx(1200.0 + 3600.0)


def test_linear_ramp_contributions():
    result = accumulate(
        _params(
            duration_years=2,
            breakpoints=[ScheduleBreakpoint(0, 0.0, SegmentMode.LINEAR), ScheduleBreakpoint(1, 1200.0)],
        )
    )

    payins = result.series.payins_nominal
    # month m pays 1200 * (m - 1) / 12 during the ramp
    assert payins[1] == pytest.approx(100.0)
    assert payins[11] == pytest.approx(sum(100.0 * k for k in range(12)))


def test_returns_compound_before_contribution():
    result = accumulate(_params(start_capital=1000.0, annual_return_savings=0.12))

    assert result.end_capital_nominal == pytest.approx(1120.0)
    assert result.series.capital_nominal[0] == pytest.approx(1000.0 * 1.12 ** (1 / 12))


def test_real_values_are_deflated():
    result = accumulate(_params(start_capital=1000.0, annual_inflation=0.02))

    assert result.inflation_factor_end == pytest.approx(1.02)
    assert result.end_capital_real == pytest.approx(1000.0 / 1.02)
    assert result.series.capital_real[-1] == pytest.approx(result.end_capital_real)


def test_total_deflation_truncates_series():
    result = accumulate(_params(start_capital=5000.0, duration_years=3, annual_inflation=-1.0))

    assert INFLATION_RANGE_WARNING in result.warnings
    assert INFLATION_OVERFLOW_WARNING in result.warnings
    assert result.months_simulated == 0
    assert len(result.series) == 0
    assert result.end_capital_nominal == 5000.0


def test_inflation_overflow_truncates_at_last_valid_month():
    result = accumulate(_params(start_capital=1.0, duration_years=80, annual_inflation=1e200))

    assert INFLATION_OVERFLOW_WARNING in result.warnings
    assert 0 < result.months_simulated < 960
    assert len(result.series) == result.months_simulated
    assert result.series.years[-1] == pytest.approx(result.months_simulated / 12)
