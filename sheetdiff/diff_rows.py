from __future__ import annotations

from typing import Dict, Iterable, List

from .models import FieldDifference, Row
from .normalize import normalize_value


def field_union(before: Row, after: Row) -> List[str]:
    fields = list(before)
    fields.extend(name for name in after if name not in before)
    return fields


def diff_rows(before: Row, after: Row, excluded_fields: Iterable[str] = ()) -> Dict[str, FieldDifference]:
    excluded = set(excluded_fields)
    differences: Dict[str, FieldDifference] = {}
    for name in field_union(before, after):
        if name in excluded:
            continue
        raw_before = before.get(name)
        raw_after = after.get(name)
        if normalize_value(raw_before) != normalize_value(raw_after):
            differences[name] = FieldDifference(before=raw_before, after=raw_after)
    return differences
