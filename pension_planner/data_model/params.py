# data_model/params.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

from ..config import DEFAULT_PARAMS, MAX_DURATION_YEARS, MIN_DURATION_YEARS
from .schedule import ScheduleBreakpoint, breakpoints_from_rows
from .tax import TaxConfig


class PayoutMode(str, Enum):
    PERPETUAL = "perpetual"
    FIXED = "fixed"


def clamp_duration(value: Any) -> int:
    return min(MAX_DURATION_YEARS, max(MIN_DURATION_YEARS, int(round(float(value)))))


@dataclass(frozen=True)
class Params:
    start_capital: float
    duration_years: int
    annual_return_savings: float
    annual_return_withdrawal: float
    annual_inflation: float
    payout_mode: PayoutMode = PayoutMode.PERPETUAL
    payout_years: int = 25
    tax: TaxConfig = field(default_factory=TaxConfig)
    breakpoints: List[ScheduleBreakpoint] = field(default_factory=list)

    @property
    def duration_months(self) -> int:
        return self.duration_years * 12

    @property
    def payout_months(self) -> int | None:
        if self.payout_mode is PayoutMode.FIXED:
            return self.payout_years * 12
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "startCapital": self.start_capital,
            "durationYears": self.duration_years,
            "annualReturnSavings": self.annual_return_savings,
            "annualReturnWithdrawal": self.annual_return_withdrawal,
            "annualInflation": self.annual_inflation,
            "payoutMode": self.payout_mode.value,
            "payoutYears": self.payout_years if self.payout_mode is PayoutMode.FIXED else None,
            "tax": self.tax.to_dict(),
            "breakpoints": [point.to_dict() for point in self.breakpoints],
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "Params":
        """Build clamped params from a camelCase payload with rates as ratios.

        Raises ValueError/TypeError on values that are not numbers.
        """
        # Imported here: engine.schedule depends on this package.
        from ..engine.schedule import normalize_breakpoints

        data = {**DEFAULT_PARAMS, **(payload or {})}
        duration = clamp_duration(data["durationYears"])
        mode = PayoutMode(str(data.get("payoutMode") or PayoutMode.PERPETUAL.value).lower())
        payout_years = data.get("payoutYears")
        if payout_years is None:
            payout_years = DEFAULT_PARAMS["payoutYears"]
        return cls(
            start_capital=max(0.0, float(data["startCapital"])),
            duration_years=duration,
            annual_return_savings=float(data["annualReturnSavings"]),
            annual_return_withdrawal=float(data["annualReturnWithdrawal"]),
            annual_inflation=float(data["annualInflation"]),
            payout_mode=mode,
            payout_years=max(1, int(round(float(payout_years)))),
            tax=TaxConfig.from_dict(data.get("tax")),
            breakpoints=normalize_breakpoints(breakpoints_from_rows(data.get("breakpoints")), duration),
        )
