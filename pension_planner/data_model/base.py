from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

import pandas as pd


@dataclass
class ColumnDefinition:
    """Schema descriptor for one editable column of an input table."""

    field: str
    label: str
    kind: str = "number"  # number | select
    default: Any = 0.0
    options: List[str] | None = None
    min_value: float | None = None
    max_value: float | None = None
    step: float | None = None
    help: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "label": self.label,
            "kind": self.kind,
            "default": self.default,
            "options": self.options or [],
            "min": self.min_value,
            "max": self.max_value,
            "step": self.step,
            "help": self.help,
        }


@dataclass
class TableModel:
    """Container for a table schema plus default rows."""

    name: str
    columns: List[ColumnDefinition]
    default_rows: List[dict[str, Any]] = field(default_factory=list)

    def default_records(self) -> List[dict[str, Any]]:
        if self.default_rows:
            return [dict(row) for row in self.default_rows]
        return [{col.field: col.default for col in self.columns}]

    def create_default_df(self) -> pd.DataFrame:
        return pd.DataFrame(self.default_records())

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "columns": [col.to_payload() for col in self.columns],
            "defaults": self.default_records(),
        }
