# engine/solver.py
"""Maximum sustainable net withdrawal via bracket-then-bisect search.

Every trial is a full monthly simulation; a failed simulation (depletion,
tax infeasibility, overflow) only means the trial level is too high.
"""
from __future__ import annotations

import logging
from typing import Callable, List

from ..config import DEFAULT_SETTINGS, SolverSettings
from ..data_model import SolverResult, TaxConfig, YearOneAverages
from .decumulation import DecumulationContext, initial_state, simulate_decumulation, step
from .rates import real_monthly_rate

logger = logging.getLogger(__name__)

PERPETUAL_ZERO_WARNING = "Perpetual payout is zero because real return is non-positive."

Predicate = Callable[[float], bool]


class _CountingPredicate:
    def __init__(self, predicate: Predicate) -> None:
        self.predicate = predicate
        self.calls = 0

    def __call__(self, net: float) -> bool:
        self.calls += 1
        return self.predicate(net)


def bracket_and_bisect(
    predicate: Predicate,
    initial_high: float,
    cap: float,
    settings: SolverSettings = DEFAULT_SETTINGS,
) -> SolverResult:
    """Grow ``high`` until infeasible (or capped), then bisect on [0, high]."""
    counted = _CountingPredicate(predicate)
    high = initial_high
    expansions = 0
    while expansions < settings.max_bracket_expansions and high <= cap and counted(high):
        high *= settings.bracket_growth
        expansions += 1
    logger.debug("bracket high=%.4f after %d expansions", high, expansions)

    low = 0.0
    best = 0.0
    upper = high
    for _ in range(settings.bisection_iterations):
        mid = (low + high) / 2.0
        if counted(mid):
            best = mid
            low = mid
        else:
            high = mid
    logger.debug("bisection best=%.6f evaluations=%d", best, counted.calls)
    return SolverResult(net_monthly=best, upper_bound=upper, evaluations=counted.calls)


def fixed_horizon_predicate(
    portfolio_value0: float,
    cost_basis0: float,
    months: int,
    monthly_return: float,
    monthly_inflation: float,
    tax: TaxConfig,
) -> Predicate:
    def sustainable(net: float) -> bool:
        outcome = simulate_decumulation(
            net, months, portfolio_value0, cost_basis0, monthly_return, monthly_inflation, tax
        )
        return outcome.ok and outcome.ending_value_real > 0

    return sustainable


def perpetual_predicate(
    portfolio_value0: float,
    cost_basis0: float,
    monthly_return: float,
    monthly_inflation: float,
    tax: TaxConfig,
    settings: SolverSettings = DEFAULT_SETTINGS,
) -> Predicate:
    floor = portfolio_value0 * (1.0 - settings.perpetual_epsilon)

    def sustainable(net: float) -> bool:
        outcome = simulate_decumulation(
            net,
            settings.perpetual_months,
            portfolio_value0,
            cost_basis0,
            monthly_return,
            monthly_inflation,
            tax,
        )
        return outcome.ok and outcome.ending_value_real >= floor

    return sustainable


def solve_fixed_horizon(
    portfolio_value0: float,
    cost_basis0: float,
    months: int,
    monthly_return: float,
    monthly_inflation: float,
    tax: TaxConfig,
    settings: SolverSettings = DEFAULT_SETTINGS,
) -> SolverResult:
    """Largest net withdrawal (in retirement-start money) that lasts exactly ``months``."""
    if portfolio_value0 <= 0 or months <= 0:
        return SolverResult(net_monthly=0.0)
    predicate = fixed_horizon_predicate(
        portfolio_value0, cost_basis0, months, monthly_return, monthly_inflation, tax
    )
    return bracket_and_bisect(
        predicate,
        initial_high=portfolio_value0 / months,
        cap=settings.high_cap_multiple * portfolio_value0,
        settings=settings,
    )


def solve_perpetual(
    portfolio_value0: float,
    cost_basis0: float,
    monthly_return: float,
    monthly_inflation: float,
    tax: TaxConfig,
    settings: SolverSettings = DEFAULT_SETTINGS,
) -> SolverResult:
    """Largest net withdrawal that keeps the real portfolio value intact over the long horizon."""
    # NaN (collapsed price level) counts as non-positive
    if not real_monthly_rate(monthly_return, monthly_inflation) > 0:
        return SolverResult(net_monthly=0.0, warnings=[PERPETUAL_ZERO_WARNING])
    if portfolio_value0 <= 0:
        return SolverResult(net_monthly=0.0)
    predicate = perpetual_predicate(
        portfolio_value0, cost_basis0, monthly_return, monthly_inflation, tax, settings
    )
    return bracket_and_bisect(
        predicate,
        initial_high=portfolio_value0 * settings.perpetual_initial_fraction,
        cap=settings.high_cap_multiple * portfolio_value0,
        settings=settings,
    )


def year_one_averages(
    net: float,
    portfolio_value0: float,
    cost_basis0: float,
    monthly_return: float,
    monthly_inflation: float,
    tax: TaxConfig,
) -> YearOneAverages:
    context = DecumulationContext(net, monthly_return, monthly_inflation, tax)
    state = initial_state(portfolio_value0, cost_basis0)
    grosses: List[float] = []
    taxes: List[float] = []
    for _ in range(12):
        state, outcome = step(state, context)
        if not outcome.ok:
            break
        grosses.append(outcome.gross)
        taxes.append(outcome.tax)

    months = len(grosses)
    if months == 0:
        return YearOneAverages(partial=True)
    return YearOneAverages(
        gross=sum(grosses) / months,
        tax=sum(taxes) / months,
        months=months,
        partial=months < 12,
    )
