# engine/decumulation.py
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import List, Tuple

import pandas as pd

from ..data_model import DecumulationOutcome, ErrorKind, TaxConfig
from .tax import TaxState, gross_for_target_net


@dataclass(frozen=True)
class DecumulationState:
    month: int
    value: float
    basis: float
    allowance_remaining: float
    cpi: float = 1.0

    @property
    def value_real(self) -> float:
        return self.value / self.cpi


@dataclass(frozen=True)
class DecumulationContext:
    target_net_real: float
    monthly_return: float
    monthly_inflation: float
    tax: TaxConfig


@dataclass(frozen=True)
class MonthOutcome:
    ok: bool
    reason: ErrorKind | None = None
    net: float = 0.0
    gross: float = 0.0
    tax: float = 0.0


def initial_state(portfolio_value: float, cost_basis: float) -> DecumulationState:
    return DecumulationState(month=0, value=portfolio_value, basis=cost_basis, allowance_remaining=0.0)


def step(state: DecumulationState, context: DecumulationContext) -> Tuple[DecumulationState, MonthOutcome]:
    """Advance one payout month.

    On failure the returned state is the input state unchanged.
    """
    if not math.isfinite(state.value) or state.value <= 0:
        return state, MonthOutcome(ok=False, reason=ErrorKind.DEPLETED)

    tax = context.tax
    allowance = state.allowance_remaining
    if state.month % 12 == 0:
        allowance = tax.annual_allowance_in_effect

    value = state.value * (1.0 + context.monthly_return)
    target_nominal = context.target_net_real * state.cpi
    quote = gross_for_target_net(
        TaxState(
            portfolio_value=value,
            cost_basis=state.basis,
            allowance_remaining=allowance,
            allowance_enabled=tax.apply_allowance,
            effective_rate=tax.effective_rate,
            tax_enabled=tax.enabled,
            target_net=target_nominal,
        )
    )
    if not quote.ok:
        return state, MonthOutcome(ok=False, reason=quote.reason)

    cpi = state.cpi * (1.0 + context.monthly_inflation)
    if not math.isfinite(cpi) or cpi <= 0:
        return state, MonthOutcome(ok=False, reason=ErrorKind.INFLATION_OVERFLOW)

    new_state = replace(
        state,
        month=state.month + 1,
        value=value - quote.gross,
        basis=max(0.0, state.basis - quote.principal_part),
        allowance_remaining=allowance - quote.gain_covered_by_allowance,
        cpi=cpi,
    )
    return new_state, MonthOutcome(ok=True, net=quote.net, gross=quote.gross, tax=quote.tax)


def simulate_decumulation(
    target_net_real: float,
    months: int,
    portfolio_value0: float,
    cost_basis0: float,
    monthly_return: float,
    monthly_inflation: float,
    tax: TaxConfig,
) -> DecumulationOutcome:
    context = DecumulationContext(target_net_real, monthly_return, monthly_inflation, tax)
    state = initial_state(portfolio_value0, cost_basis0)
    for _ in range(months):
        state, outcome = step(state, context)
        if not outcome.ok:
            return DecumulationOutcome(
                ok=False,
                reason=outcome.reason,
                ending_value_nominal=state.value,
                ending_cpi_factor=state.cpi,
                months_completed=state.month,
            )
    return DecumulationOutcome(
        ok=True,
        ending_value_nominal=state.value,
        ending_cpi_factor=state.cpi,
        months_completed=state.month,
    )


def trace_decumulation(
    target_net_real: float,
    months: int,
    portfolio_value0: float,
    cost_basis0: float,
    monthly_return: float,
    monthly_inflation: float,
    tax: TaxConfig,
) -> pd.DataFrame:
    """Month-by-month replay of a payout path, stopping at the first failure."""
    context = DecumulationContext(target_net_real, monthly_return, monthly_inflation, tax)
    state = initial_state(portfolio_value0, cost_basis0)
    records: List[dict] = []
    for _ in range(months):
        month = state.month
        state, outcome = step(state, context)
        records.append(
            {
                "MonthIndex": month,
                "YearIndex": month // 12,
                "Ok": outcome.ok,
                "Reason": outcome.reason.value if outcome.reason else None,
                "Net": outcome.net,
                "Gross": outcome.gross,
                "Tax": outcome.tax,
                "ValueNominal": state.value,
                "ValueReal": state.value_real,
                "CostBasis": state.basis,
                "AllowanceRemaining": state.allowance_remaining,
                "Cpi": state.cpi,
            }
        )
        if not outcome.ok:
            break
    return pd.DataFrame(records)
