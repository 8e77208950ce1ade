from .base import ColumnDefinition, TableModel
from .params import PayoutMode, Params, clamp_duration
from .results import (
    DecumulationOutcome,
    ErrorKind,
    SimulationResult,
    SimulationSeries,
    SimulationSummary,
    SolverResult,
    YearOneAverages,
)
from .schedule import (
    ScheduleBreakpoint,
    ScheduleTableModel,
    SegmentMode,
    breakpoints_from_rows,
    dataframe_to_breakpoints,
)
from .tax import NO_TAX, TaxConfig

__all__ = [
    "ColumnDefinition",
    "DecumulationOutcome",
    "ErrorKind",
    "NO_TAX",
    "PayoutMode",
    "Params",
    "ScheduleBreakpoint",
    "ScheduleTableModel",
    "SegmentMode",
    "SimulationResult",
    "SimulationSeries",
    "SimulationSummary",
    "SolverResult",
    "TableModel",
    "TaxConfig",
    "YearOneAverages",
    "breakpoints_from_rows",
    "clamp_duration",
    "dataframe_to_breakpoints",
]
