# config.py
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MONTHLY_RATE = 1000.0
RATE_STEP = 25.0
CURRENCY = "EUR"

MIN_DURATION_YEARS = 1
MAX_DURATION_YEARS = 80

STORAGE_PATH = os.environ.get("PENSION_PLANNER_STORAGE", "user_data/scenarios.json")


@dataclass(frozen=True)
class SolverSettings:
    """Tunables for the payout searches."""

    bisection_iterations: int = 60
    bracket_growth: float = 1.6
    max_bracket_expansions: int = 50
    high_cap_multiple: float = 10.0
    # "forever" is approximated by a long finite horizon
    perpetual_horizon_years: int = 200
    perpetual_epsilon: float = 0.005
    perpetual_initial_fraction: float = 0.01

    @property
    def perpetual_months(self) -> int:
        return self.perpetual_horizon_years * 12


DEFAULT_SETTINGS = SolverSettings()

DEFAULT_TAX = {
    "enabled": True,
    "applyAllowance": True,
    "includeSurchargeA": True,
    "includeSurchargeB": False,
    "baseRate": 0.25,
    "surchargeARate": 0.055,
    "surchargeBRate": 0.09,
    "allowanceAnnual": 1000.0,
}

DEFAULT_PARAMS = {
    "startCapital": 100000.0,
    "durationYears": 30,
    "annualReturnSavings": 0.07,
    "annualReturnWithdrawal": 0.05,
    "annualInflation": 0.02,
    "payoutMode": "perpetual",
    "payoutYears": 25,
    "tax": DEFAULT_TAX,
    "breakpoints": [{"year": 0, "monthlyRate": DEFAULT_MONTHLY_RATE, "segmentMode": "step"}],
}
