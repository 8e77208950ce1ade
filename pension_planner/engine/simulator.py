# engine/simulator.py
from __future__ import annotations

import logging
import math
from typing import List

from ..config import DEFAULT_SETTINGS, SolverSettings
from ..data_model import PayoutMode, Params, SimulationResult, SimulationSummary, SolverResult
from .accumulation import accumulate
from .rates import monthly_rate
from .solver import solve_fixed_horizon, solve_perpetual, year_one_averages

logger = logging.getLogger(__name__)

PAYOUT_OVERFLOW_WARNING = "Payout calculation overflow. Values are set to zero."
YEAR_ONE_PARTIAL_WARNING = "Year-1 average is partial because simulation depleted early."


def _dedupe(warnings: List[str]) -> List[str]:
    seen: List[str] = []
    for warning in warnings:
        if warning not in seen:
            seen.append(warning)
    return seen


def compute_results(params: Params, settings: SolverSettings | None = None) -> SimulationResult:
    """Savings phase, payout solve and first-year averages for one set of params."""
    settings = settings or DEFAULT_SETTINGS
    acc = accumulate(params)
    warnings = list(acc.warnings)

    r_withdrawal = monthly_rate(params.annual_return_withdrawal)
    i_monthly = monthly_rate(params.annual_inflation)
    value0 = acc.end_capital_nominal
    basis0 = acc.cost_basis

    if params.payout_mode is PayoutMode.FIXED:
        solved: SolverResult = solve_fixed_horizon(
            value0, basis0, params.payout_months, r_withdrawal, i_monthly, params.tax, settings
        )
    else:
        solved = solve_perpetual(value0, basis0, r_withdrawal, i_monthly, params.tax, settings)
    warnings.extend(solved.warnings)
    logger.debug(
        "solved %s payout net=%.2f in %d evaluations",
        params.payout_mode.value,
        solved.net_monthly,
        solved.evaluations,
    )

    payout_nominal = solved.net_monthly
    payout_real = payout_nominal / acc.inflation_factor_end
    if not math.isfinite(payout_nominal) or not math.isfinite(payout_real):
        payout_nominal = 0.0
        payout_real = 0.0
        warnings.append(PAYOUT_OVERFLOW_WARNING)

    gross_year_one = 0.0
    tax_year_one = 0.0
    if payout_nominal > 0:
        averages = year_one_averages(payout_nominal, value0, basis0, r_withdrawal, i_monthly, params.tax)
        gross_year_one = averages.gross
        tax_year_one = averages.tax
        if averages.partial:
            warnings.append(YEAR_ONE_PARTIAL_WARNING)

    summary = SimulationSummary(
        end_capital_nominal=acc.end_capital_nominal,
        end_capital_real=acc.end_capital_real,
        cost_basis_at_retirement=basis0,
        inflation_factor_at_retirement=acc.inflation_factor_end,
        payout_monthly_nominal_at_retirement_start=payout_nominal,
        payout_monthly_real_today=payout_real,
        gross_monthly_year_one=gross_year_one,
        tax_monthly_year_one=tax_year_one,
        effective_tax_rate=params.tax.effective_rate if params.tax.enabled else 0.0,
        payout_mode=params.payout_mode.value,
        payout_months=params.payout_months,
        months_simulated=acc.months_simulated,
    )
    return SimulationResult(series=acc.series, summary=summary, warnings=_dedupe(warnings))
