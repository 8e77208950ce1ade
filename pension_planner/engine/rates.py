from __future__ import annotations

import math


def monthly_rate(annual: float) -> float:
    """Geometric monthly equivalent of an annual rate; NaN when 1 + annual is negative."""
    base = 1.0 + annual
    if not math.isfinite(base) or base < 0:
        return math.nan
    return base ** (1.0 / 12.0) - 1.0


def real_monthly_rate(monthly_return: float, monthly_inflation: float) -> float:
    """Inflation-adjusted monthly return; NaN when the price level collapses to zero or below."""
    deflator = 1.0 + monthly_inflation
    if not math.isfinite(deflator) or deflator <= 0:
        return math.nan
    return (1.0 + monthly_return) / deflator - 1.0


def compound(rate: float, periods: int) -> float:
    """``(1 + rate) ** periods``, with overflow reported as infinity."""
    if not math.isfinite(rate):
        return math.nan
    try:
        return (1.0 + rate) ** periods
    except OverflowError:
        return math.inf
