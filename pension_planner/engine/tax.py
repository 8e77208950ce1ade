# engine/tax.py
"""Per-month withdrawal grossing-up under a flat capital gains tax.

Sales are assumed proportional: every unit sold carries the same share of
unrealized gain as the whole portfolio. For one month the gross sale needed to
deliver a target net amount has a closed form; path dependence across months
comes from the shrinking cost basis and the allowance, which the decumulation
simulator carries.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from ..data_model import ErrorKind, TaxConfig

FUNDS_TOLERANCE = 1e-9


def effective_rate(tax: TaxConfig) -> float:
    return tax.effective_rate


@dataclass(frozen=True)
class TaxState:
    portfolio_value: float
    cost_basis: float
    allowance_remaining: float
    allowance_enabled: bool
    effective_rate: float
    tax_enabled: bool
    target_net: float


@dataclass(frozen=True)
class WithdrawalQuote:
    ok: bool
    reason: ErrorKind | None = None
    gross: float = 0.0
    tax: float = 0.0
    realized_gain: float = 0.0
    gain_covered_by_allowance: float = 0.0
    principal_part: float = 0.0

    @property
    def net(self) -> float:
        return self.gross - self.tax


def _fail(reason: ErrorKind) -> WithdrawalQuote:
    return WithdrawalQuote(ok=False, reason=reason)


def gain_ratio(portfolio_value: float, cost_basis: float) -> float:
    if portfolio_value <= 0:
        return 0.0
    return min(1.0, max(0.0, (portfolio_value - cost_basis) / portfolio_value))


def gross_for_target_net(state: TaxState) -> WithdrawalQuote:
    value = state.portfolio_value
    if not math.isfinite(value) or value <= 0:
        return _fail(ErrorKind.EMPTY_PORTFOLIO)

    g = gain_ratio(value, state.cost_basis)
    rate = state.effective_rate
    taxed = state.tax_enabled and rate > 0 and g > 0
    allowance = max(0.0, state.allowance_remaining) if state.allowance_enabled else 0.0

    if not taxed:
        gross = state.target_net
    else:
        denom = 1.0 - rate * g
        if denom <= 0:
            return _fail(ErrorKind.TAX_DENOMINATOR)
        if state.allowance_enabled and state.target_net * g <= allowance:
            gross = state.target_net
        elif state.allowance_enabled:
            gross = (state.target_net - allowance * rate) / denom
        else:
            gross = state.target_net / denom

    if not math.isfinite(gross) or gross < 0:
        return _fail(ErrorKind.TAX_GROSS_INVALID)
    if gross > value + FUNDS_TOLERANCE * max(1.0, value):
        return _fail(ErrorKind.INSUFFICIENT_FUNDS)

    realized_gain = gross * g
    covered = min(realized_gain, allowance) if state.allowance_enabled else 0.0
    tax = max(0.0, realized_gain - covered) * rate if taxed else 0.0
    return WithdrawalQuote(
        ok=True,
        gross=gross,
        tax=tax,
        realized_gain=realized_gain,
        gain_covered_by_allowance=covered,
        principal_part=max(0.0, gross - realized_gain),
    )
