from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, List

from .diff_rows import diff_rows
from .errors import ConfigurationError
from .index import build_key_index
from .models import ADDED, CHANGED, REMOVED, ComparisonResult, Dataset, RowDifference

LOGGER = logging.getLogger(__name__)


def dataset_fields(dataset: Dataset) -> List[str]:
    fields: List[str] = []
    seen = set()
    for row in dataset:
        for name in row:
            if name not in seen:
                seen.add(name)
                fields.append(name)
    return fields


def common_fields(before: Dataset, after: Dataset) -> List[str]:
    after_fields = set(dataset_fields(after))
    return [name for name in dataset_fields(before) if name in after_fields]


def validate_key_field(before: Dataset, after: Dataset, key_field: str) -> None:
    if not key_field or not key_field.strip():
        raise ConfigurationError("A key field is required")
    if not before and not after:
        return
    if key_field not in dataset_fields(before) and key_field not in dataset_fields(after):
        raise ConfigurationError(f"Key field {key_field!r} is not present in either dataset")


def compare_datasets(
    before: Dataset,
    after: Dataset,
    key_field: str,
    excluded_fields: Iterable[str] = (),
) -> ComparisonResult:
    validate_key_field(before, after, key_field)
    excluded: FrozenSet[str] = frozenset(excluded_fields)

    before_index = build_key_index(before, key_field)
    after_index = build_key_index(after, key_field)
    result = ComparisonResult()

    for key, before_row in before_index.rows.items():
        after_row = after_index.rows.get(key)
        if after_row is None:
            result.removed.append(RowDifference(REMOVED, key, key_field, before_row=before_row))
            continue
        differences = diff_rows(before_row, after_row, excluded)
        if differences:
            result.changed.append(
                RowDifference(CHANGED, key, key_field, before_row, after_row, differences)
            )

    for key, after_row in after_index.rows.items():
        if key not in before_index:
            result.added.append(RowDifference(ADDED, key, key_field, before_row={}, after_row=after_row))

    result.total = len(result.added) + len(result.removed) + len(result.changed)
    result.duplicate_keys = before_index.duplicates + [
        key for key in after_index.duplicates if key not in before_index.duplicates
    ]
    LOGGER.info(
        "Compared %d/%d keyed rows on %s: added=%d removed=%d changed=%d",
        len(before_index), len(after_index), key_field,
        len(result.added), len(result.removed), len(result.changed),
    )
    return result
