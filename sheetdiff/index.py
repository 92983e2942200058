from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .models import Row
from .normalize import normalize_value

LOGGER = logging.getLogger(__name__)


@dataclass
class KeyIndex:
    rows: Dict[str, Row] = field(default_factory=dict)
    duplicates: List[str] = field(default_factory=list)
    skipped: int = 0

    def __contains__(self, key: str) -> bool:
        return key in self.rows

    def __len__(self) -> int:
        return len(self.rows)


def build_key_index(dataset: Iterable[Row], key_field: str) -> KeyIndex:
    """Index rows by the normalized value of ``key_field``.

    Rows whose key is empty are dropped. When a key repeats, the later row
    replaces the earlier one and the key is recorded in ``duplicates``.
    """
    index = KeyIndex()
    for row in dataset:
        key = normalize_value(row.get(key_field))
        if not key:
            index.skipped += 1
            continue
        if key in index.rows and key not in index.duplicates:
            index.duplicates.append(key)
        index.rows[key] = row
    if index.duplicates:
        LOGGER.warning(
            "Duplicate %s values (last row wins): %s",
            key_field,
            ", ".join(index.duplicates[:10]) + (" ..." if len(index.duplicates) > 10 else ""),
        )
    LOGGER.debug("Indexed %d rows by %s (%d without key)", len(index.rows), key_field, index.skipped)
    return index
