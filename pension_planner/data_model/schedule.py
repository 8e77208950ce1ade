from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List

import pandas as pd

from ..config import DEFAULT_MONTHLY_RATE, RATE_STEP
from .base import ColumnDefinition, TableModel


def whole_year(value: Any) -> int:
    """Round half up to a whole year."""
    return int(math.floor(float(value or 0) + 0.5))


class SegmentMode(str, Enum):
    """Shape of the segment that starts at a breakpoint."""

    STEP = "step"
    LINEAR = "linear"

    @classmethod
    def parse(cls, value: Any) -> "SegmentMode":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if not text:
            return cls.STEP
        return cls(text)


@dataclass(frozen=True)
class ScheduleBreakpoint:
    year: int
    monthly_rate: float
    segment_mode: SegmentMode = SegmentMode.STEP

    @property
    def is_linear(self) -> bool:
        return self.segment_mode is SegmentMode.LINEAR

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "monthlyRate": self.monthly_rate,
            "segmentMode": self.segment_mode.value,
        }

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "ScheduleBreakpoint":
        return cls(
            year=whole_year(row.get("year", 0)),
            monthly_rate=float(row.get("monthlyRate", row.get("monthly_rate", 0.0)) or 0.0),
            segment_mode=SegmentMode.parse(row.get("segmentMode", row.get("segment_mode"))),
        )


class ScheduleTableModel(TableModel):
    def __init__(self) -> None:
        columns = [
            ColumnDefinition("Year", "Year", kind="number", default=0, min_value=0, step=1),
            ColumnDefinition(
                "Monthly Rate",
                "Monthly Contribution (EUR)",
                kind="number",
                default=DEFAULT_MONTHLY_RATE,
                min_value=0.0,
                step=RATE_STEP,
            ),
            ColumnDefinition(
                "Segment",
                "Segment Shape",
                kind="select",
                default=SegmentMode.STEP.value,
                options=[mode.value for mode in SegmentMode],
                help="step = constant until next breakpoint, linear = ramp to next breakpoint",
            ),
        ]
        super().__init__("schedule", columns)


def breakpoints_from_rows(rows: Iterable[dict[str, Any]] | None) -> List[ScheduleBreakpoint]:
    return [ScheduleBreakpoint.from_dict(row) for row in rows or []]


def dataframe_to_breakpoints(df: pd.DataFrame) -> List[ScheduleBreakpoint]:
    points: List[ScheduleBreakpoint] = []
    for row in df.to_dict("records"):
        year = row.get("Year")
        if year is None or pd.isna(year):
            continue
        rate = row.get("Monthly Rate", 0.0)
        segment = row.get("Segment")
        if segment is not None and pd.isna(segment):
            segment = None
        points.append(
            ScheduleBreakpoint(
                year=whole_year(year),
                monthly_rate=0.0 if pd.isna(rate) else float(rate or 0.0),
                segment_mode=SegmentMode.parse(segment),
            )
        )
    return points
