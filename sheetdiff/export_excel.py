from __future__ import annotations

from typing import IO, Dict, Iterable, List, Optional, Union

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .models import ADDED, CATEGORIES, CHANGED, REMOVED, CellValue, RowDifference
from .normalize import display_text

DEFAULT_LABELS = {
    "status": "Status",
    ADDED: "Added",
    REMOVED: "Removed",
    CHANGED: "Changed",
    "details": "Change details",
    "from": "From",
    "to": "To",
}

STATUS_FILLS = {
    ADDED: PatternFill("solid", start_color="C6EFCE", end_color="C6EFCE"),
    REMOVED: PatternFill("solid", start_color="FFC7CE", end_color="FFC7CE"),
    CHANGED: PatternFill("solid", start_color="FFEB9C", end_color="FFEB9C"),
}


def _autosize(ws: Worksheet, max_width: int = 30) -> None:
    for i, col in enumerate(ws.columns, start=1):
        max_len = max((len(str(c.value)) for c in col if c.value is not None), default=0)
        ws.column_dimensions[get_column_letter(i)].width = min(max_len + 2, max_width)


def _format(ws: Worksheet, headers: List[str]) -> None:
    ws.freeze_panes = "A2"
    ws.auto_filter.ref = f"A1:{get_column_letter(len(headers))}1"
    for cell in ws[1]:
        cell.font = Font(bold=True)
    _autosize(ws)


def result_columns(differences: Iterable[RowDifference], key_field: str) -> List[str]:
    columns: List[str] = []
    for diff in differences:
        for name in list(diff.before_row) + list(diff.after_row or {}):
            if name != key_field and name not in columns:
                columns.append(name)
    return columns


def _cell(value: CellValue) -> CellValue:
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def change_note(before, after, labels: Dict[str, str]) -> str:
    return _cell(f"{labels['from']}: {display_text(before)} → {labels['to']}: {display_text(after)}")


def write_workbook(
    path: Union[str, IO[bytes]],
    differences: Iterable[RowDifference],
    key_field: str,
    labels: Optional[Dict[str, str]] = None,
) -> None:
    labels = {**DEFAULT_LABELS, **(labels or {})}
    differences = list(differences)
    columns = result_columns(differences, key_field)
    headers = [_cell(name) for name in [labels["status"], key_field] + columns]

    wb = Workbook()
    ws = wb.active
    ws.title = "Results"
    ws.append(headers)
    counts = dict.fromkeys(CATEGORIES, 0)
    for diff in differences:
        counts[diff.category] += 1
        row = diff.display_row
        ws.append([labels[diff.category], _cell(diff.key)] + [_cell(row.get(name)) for name in columns])
        for cell in ws[ws.max_row]:
            cell.fill = STATUS_FILLS[diff.category]
        if diff.field_differences:
            notes = [
                change_note(diff.field_differences[name].before, diff.field_differences[name].after, labels)
                if name in diff.field_differences else None
                for name in columns
            ]
            ws.append([labels["details"], None] + notes)
            for cell in ws[ws.max_row]:
                cell.alignment = Alignment(wrap_text=True, vertical="top")

    summary = wb.create_sheet("Summary")
    summary_headers = [labels["status"], "Count"]
    summary.append(summary_headers)
    for category in CATEGORIES:
        summary.append([labels[category], counts[category]])
    summary.append(["Total", sum(counts.values())])

    _format(ws, headers)
    _format(summary, summary_headers)
    wb.save(path)
