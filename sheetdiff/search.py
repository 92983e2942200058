from __future__ import annotations

from typing import Iterable, List

from .models import ComparisonResult, Row, RowDifference
from .normalize import display_text


def _matches(diff: RowDifference, term: str) -> bool:
    if term in diff.key.lower():
        return True
    rows: List[Row] = [diff.before_row]
    if diff.after_row is not None:
        rows.append(diff.after_row)
    return any(term in display_text(value).lower() for row in rows for value in row.values())


def filter_results(result: ComparisonResult, search_term: str) -> ComparisonResult:
    """Keep differences whose key or row values contain ``search_term``.

    An empty term returns ``result`` itself. Otherwise a new result is built
    with ``total`` recounted from the filtered lists.
    """
    term = (search_term or "").strip().lower()
    if not term:
        return result
    added = [d for d in result.added if _matches(d, term)]
    removed = [d for d in result.removed if _matches(d, term)]
    changed = [d for d in result.changed if _matches(d, term)]
    return ComparisonResult(
        added=added,
        removed=removed,
        changed=changed,
        total=len(added) + len(removed) + len(changed),
        duplicate_keys=list(result.duplicate_keys),
    )


def sort_value(diff: RowDifference, sort_field: str) -> str:
    value = diff.before_row.get(sort_field)
    if value is None or value == "":
        after = diff.after_row or {}
        value = after.get(sort_field, "")
    return display_text(value).lower()


def sort_differences(differences: Iterable[RowDifference], sort_field: str, ascending: bool = True) -> List[RowDifference]:
    # sorted() stays stable with reverse=True, so ties keep their input order
    return sorted(differences, key=lambda diff: sort_value(diff, sort_field), reverse=not ascending)
