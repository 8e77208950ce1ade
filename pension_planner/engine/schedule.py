# engine/schedule.py
from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from ..config import CURRENCY, DEFAULT_MONTHLY_RATE
from ..data_model.schedule import ScheduleBreakpoint, whole_year


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def normalize_breakpoints(
    points: Iterable[ScheduleBreakpoint], duration_years: int
) -> List[ScheduleBreakpoint]:
    """Return breakpoints unique by year, sorted, clamped to the duration, with year 0 present.

    The first point seen for a year wins. Negative rates are clamped to 0.
    """
    deduped: dict[int, ScheduleBreakpoint] = {}
    for point in points:
        year = int(_clamp(whole_year(point.year), 0, duration_years))
        if year in deduped:
            continue
        deduped[year] = ScheduleBreakpoint(
            year=year,
            monthly_rate=max(0.0, point.monthly_rate),
            segment_mode=point.segment_mode,
        )
    if 0 not in deduped:
        deduped[0] = ScheduleBreakpoint(year=0, monthly_rate=DEFAULT_MONTHLY_RATE)
    return [deduped[year] for year in sorted(deduped)]


def rate_at(points: Sequence[ScheduleBreakpoint], year: float) -> float:
    """Monthly contribution in effect at a (fractional) year of a normalized schedule."""
    if not points:
        return 0.0

    index = 0
    for i, point in enumerate(points):
        if point.year <= year:
            index = i
        else:
            break
    current = points[index]

    if not current.is_linear or index + 1 >= len(points):
        return current.monthly_rate

    nxt = points[index + 1]
    span = nxt.year - current.year
    if span <= 0:
        return current.monthly_rate
    t = _clamp((year - current.year) / span, 0.0, 1.0)
    return current.monthly_rate + t * (nxt.monthly_rate - current.monthly_rate)


def round_to_step(value: float, step: float) -> float:
    if not math.isfinite(value):
        return 0.0
    if not math.isfinite(step) or step <= 0:
        return value
    return round(value / step) * step


def insert_breakpoint(
    points: Sequence[ScheduleBreakpoint], year: float, duration_years: int
) -> List[ScheduleBreakpoint]:
    """Add a breakpoint at ``year`` carrying the rate currently in effect there."""
    target = int(_clamp(whole_year(year), 0, duration_years))
    if any(point.year == target for point in points):
        return normalize_breakpoints(points, duration_years)
    added = ScheduleBreakpoint(year=target, monthly_rate=rate_at(points, target))
    return normalize_breakpoints([*points, added], duration_years)


def remove_breakpoint(points: Sequence[ScheduleBreakpoint], year: int) -> List[ScheduleBreakpoint]:
    # year 0 anchors the schedule
    if year == 0:
        return list(points)
    return [point for point in points if point.year != year]


def update_rate(
    points: Sequence[ScheduleBreakpoint], year: int, monthly_rate: float, step: float = 0.0
) -> List[ScheduleBreakpoint]:
    snapped = max(0.0, round_to_step(monthly_rate, step))
    return [
        ScheduleBreakpoint(point.year, snapped, point.segment_mode) if point.year == year else point
        for point in points
    ]


def format_currency(value: float) -> str:
    symbol = "€" if CURRENCY == "EUR" else f"{CURRENCY} "
    return f"{symbol}{value:,.0f}"


def format_schedule(points: Iterable[ScheduleBreakpoint]) -> str:
    parts = []
    for point in points:
        label = f"{point.year}Y→{format_currency(point.monthly_rate)}/MO"
        if point.is_linear:
            label += " (ramp)"
        parts.append(label)
    return " | ".join(parts)
