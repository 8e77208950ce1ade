from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

import pandas as pd


class ErrorKind(str, Enum):
    """Reason a simulated withdrawal level could not be sustained."""

    EMPTY_PORTFOLIO = "empty-portfolio"
    TAX_DENOMINATOR = "tax-denominator"
    TAX_GROSS_INVALID = "tax-gross-invalid"
    INSUFFICIENT_FUNDS = "insufficient-funds"
    DEPLETED = "depleted"
    INFLATION_OVERFLOW = "inflation-overflow"


@dataclass
class SimulationSeries:
    years: List[float] = field(default_factory=list)
    capital_nominal: List[float] = field(default_factory=list)
    capital_real: List[float] = field(default_factory=list)
    payins_nominal: List[float] = field(default_factory=list)
    payins_real: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.years)

    def to_dict(self) -> dict[str, List[float]]:
        return {
            "years": list(self.years),
            "capitalNominal": list(self.capital_nominal),
            "capitalReal": list(self.capital_real),
            "payinsNominal": list(self.payins_nominal),
            "payinsReal": list(self.payins_real),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "SimulationSeries":
        payload = payload or {}
        return cls(
            years=list(payload.get("years") or []),
            capital_nominal=list(payload.get("capitalNominal") or []),
            capital_real=list(payload.get("capitalReal") or []),
            payins_nominal=list(payload.get("payinsNominal") or []),
            payins_real=list(payload.get("payinsReal") or []),
        )

    def to_frame(self, scenario: str = "") -> pd.DataFrame:
        """Monthly series as a frame with the month bookkeeping columns used by aggregation."""
        n = len(self.years)
        month_index = list(range(n))
        return pd.DataFrame(
            {
                "Scenario": [scenario] * n,
                "MonthIndex": month_index,
                "YearIndex": [m // 12 for m in month_index],
                "MonthInYear": [m % 12 + 1 for m in month_index],
                "Year": self.years,
                "CapitalNominal": self.capital_nominal,
                "CapitalReal": self.capital_real,
                "PayinsNominal": self.payins_nominal,
                "PayinsReal": self.payins_real,
            }
        )


@dataclass
class SimulationSummary:
    end_capital_nominal: float = 0.0
    end_capital_real: float = 0.0
    cost_basis_at_retirement: float = 0.0
    inflation_factor_at_retirement: float = 1.0
    payout_monthly_nominal_at_retirement_start: float = 0.0
    payout_monthly_real_today: float = 0.0
    gross_monthly_year_one: float = 0.0
    tax_monthly_year_one: float = 0.0
    effective_tax_rate: float = 0.0
    payout_mode: str = "perpetual"
    payout_months: int | None = None
    months_simulated: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "endCapitalNominal": self.end_capital_nominal,
            "endCapitalReal": self.end_capital_real,
            "costBasisAtRetirement": self.cost_basis_at_retirement,
            "inflationFactorAtRetirement": self.inflation_factor_at_retirement,
            "payoutMonthlyNominalAtRetirementStart": self.payout_monthly_nominal_at_retirement_start,
            "payoutMonthlyRealToday": self.payout_monthly_real_today,
            "grossMonthlyYearOne": self.gross_monthly_year_one,
            "taxMonthlyYearOne": self.tax_monthly_year_one,
            "effectiveTaxRate": self.effective_tax_rate,
            "payoutMode": self.payout_mode,
            "payoutMonths": self.payout_months,
            "monthsSimulated": self.months_simulated,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "SimulationSummary":
        payload = payload or {}

        def _num(key: str, default: float = 0.0) -> float:
            value = payload.get(key)
            return default if value is None else float(value)

        return cls(
            end_capital_nominal=_num("endCapitalNominal"),
            end_capital_real=_num("endCapitalReal"),
            cost_basis_at_retirement=_num("costBasisAtRetirement"),
            inflation_factor_at_retirement=_num("inflationFactorAtRetirement", 1.0),
            payout_monthly_nominal_at_retirement_start=_num("payoutMonthlyNominalAtRetirementStart"),
            payout_monthly_real_today=_num("payoutMonthlyRealToday"),
            gross_monthly_year_one=_num("grossMonthlyYearOne"),
            tax_monthly_year_one=_num("taxMonthlyYearOne"),
            effective_tax_rate=_num("effectiveTaxRate"),
            payout_mode=str(payload.get("payoutMode") or "perpetual"),
            payout_months=payload.get("payoutMonths"),
            months_simulated=int(payload.get("monthsSimulated") or 0),
        )


@dataclass
class SimulationResult:
    series: SimulationSeries
    summary: SimulationSummary
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "series": self.series.to_dict(),
            "summary": self.summary.to_dict(),
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "SimulationResult":
        payload = payload or {}
        return cls(
            series=SimulationSeries.from_dict(payload.get("series")),
            summary=SimulationSummary.from_dict(payload.get("summary")),
            warnings=list(payload.get("warnings") or []),
        )


@dataclass(frozen=True)
class DecumulationOutcome:
    ok: bool
    reason: ErrorKind | None = None
    ending_value_nominal: float = 0.0
    ending_cpi_factor: float = 1.0
    months_completed: int = 0

    @property
    def ending_value_real(self) -> float:
        if not math.isfinite(self.ending_cpi_factor) or self.ending_cpi_factor <= 0:
            return math.nan
        return self.ending_value_nominal / self.ending_cpi_factor


@dataclass(frozen=True)
class SolverResult:
    net_monthly: float
    upper_bound: float = 0.0
    evaluations: int = 0
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class YearOneAverages:
    gross: float = 0.0
    tax: float = 0.0
    months: int = 0
    partial: bool = False
