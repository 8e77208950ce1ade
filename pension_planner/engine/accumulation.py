# engine/accumulation.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List

from ..data_model import Params, SimulationSeries
from .rates import compound, monthly_rate
from .schedule import rate_at

logger = logging.getLogger(__name__)

INFLATION_RANGE_WARNING = "Inflation rate must be greater than -100%."
INFLATION_OVERFLOW_WARNING = "Inflation compounding overflow. Values are clamped."


@dataclass
class AccumulationResult:
    series: SimulationSeries
    end_capital_nominal: float
    end_capital_real: float
    cost_basis: float
    inflation_factor_end: float
    months_simulated: int
    warnings: List[str] = field(default_factory=list)


def accumulate(params: Params) -> AccumulationResult:
    """Run the savings phase month by month.

    Each month the balance compounds first, then the scheduled contribution
    for that month is added. Real values are deflated by cumulative inflation
    since the start. If the inflation factor stops being usable the series is
    cut at the last valid month.
    """
    warnings: List[str] = []
    if params.annual_inflation <= -1:
        warnings.append(INFLATION_RANGE_WARNING)

    r_savings = monthly_rate(params.annual_return_savings)
    i_monthly = monthly_rate(params.annual_inflation)

    series = SimulationSeries()
    balance = params.start_capital
    pay_nominal = 0.0
    pay_real = 0.0
    inflation_factor = 1.0
    months = 0

    for m in range(1, params.duration_months + 1):
        factor = compound(i_monthly, m)
        if not math.isfinite(factor) or factor == 0:
            logger.warning("Inflation factor invalid at month %d, truncating accumulation", m)
            warnings.append(INFLATION_OVERFLOW_WARNING)
            break

        balance *= 1.0 + r_savings
        contribution = rate_at(params.breakpoints, (m - 1) / 12.0)
        balance += contribution
        pay_nominal += contribution
        pay_real += contribution / factor
        inflation_factor = factor
        months = m

        series.years.append(m / 12.0)
        series.capital_nominal.append(balance)
        series.capital_real.append(balance / factor)
        series.payins_nominal.append(pay_nominal)
        series.payins_real.append(pay_real)

    return AccumulationResult(
        series=series,
        end_capital_nominal=balance,
        end_capital_real=balance / inflation_factor,
        cost_basis=params.start_capital + pay_nominal,
        inflation_factor_end=inflation_factor,
        months_simulated=months,
        warnings=warnings,
    )
