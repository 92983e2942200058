from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

CellValue = Union[None, str, int, float, Decimal, bool, date, datetime, time]
Row = Dict[str, CellValue]
Dataset = List[Row]

ADDED = "added"
REMOVED = "removed"
CHANGED = "changed"
CATEGORIES = (ADDED, REMOVED, CHANGED)


@dataclass
class FieldDifference:
    before: CellValue
    after: CellValue


@dataclass
class RowDifference:
    category: str
    key: str
    key_field: str
    before_row: Row = field(default_factory=dict)
    after_row: Optional[Row] = None
    field_differences: Dict[str, FieldDifference] = field(default_factory=dict)

    @property
    def display_row(self) -> Row:
        """Row shown in exports: the new state, or the old one for removals."""
        return self.after_row if self.after_row is not None else self.before_row


@dataclass
class ComparisonResult:
    added: List[RowDifference] = field(default_factory=list)
    removed: List[RowDifference] = field(default_factory=list)
    changed: List[RowDifference] = field(default_factory=list)
    total: int = 0
    duplicate_keys: List[str] = field(default_factory=list)

    def all_differences(self) -> List[RowDifference]:
        return [*self.added, *self.removed, *self.changed]

    def counts(self) -> Dict[str, int]:
        return {
            ADDED: len(self.added),
            REMOVED: len(self.removed),
            CHANGED: len(self.changed),
            "total": self.total,
        }


Config = Dict[str, Any]
