from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import IO, Dict, List, Optional, Sequence, Union
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .errors import IngestError
from .models import CellValue, Dataset, Row

LOGGER = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xltx", ".xltm"}
RawRows = List[List[CellValue]]


def _read_csv(handle: IO[str], name: str) -> Dict[str, RawRows]:
    return {name: [list(row) for row in csv.reader(handle)]}


def _read_excel(source: Union[Path, IO[bytes]], name: str) -> Dict[str, RawRows]:
    try:
        wb = load_workbook(source, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError) as exc:
        raise IngestError(f"Failed to parse Excel file {name}: {exc}") from exc
    try:
        return {ws.title: [list(row) for row in ws.iter_rows(values_only=True)] for ws in wb.worksheets}
    finally:
        wb.close()


def read_workbook(path: str) -> Dict[str, RawRows]:
    """Return every sheet of ``path`` as raw rows, keyed by sheet name."""
    source = Path(path)
    if not source.is_file():
        raise IngestError(f"File not found: {path}")
    suffix = source.suffix.lower()
    try:
        if suffix == ".csv":
            with open(source, "r", encoding="utf-8-sig", newline="") as file:
                sheets = _read_csv(file, source.stem)
        elif suffix in EXCEL_SUFFIXES:
            sheets = _read_excel(source, str(source))
        else:
            raise IngestError(f"Unsupported file type {suffix or '(none)'}: {path}")
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise IngestError(f"Failed to read {path}: {exc}") from exc
    LOGGER.debug("Read %s: sheets=%s", path, list(sheets))
    return sheets


def _is_blank(value: CellValue) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def column_headers(rows: Sequence[Sequence[CellValue]]) -> List[str]:
    if not rows:
        return []
    headers: List[str] = []
    for i, header in enumerate(rows[0], start=1):
        text = "" if _is_blank(header) else str(header).strip()
        headers.append(text or f"Column {i}")
    return headers


def rows_to_records(rows: Sequence[Sequence[CellValue]]) -> Dataset:
    headers = column_headers(rows)
    records: Dataset = []
    for raw in rows[1:]:
        if all(_is_blank(value) for value in raw):
            continue
        record: Row = {}
        for i, header in enumerate(headers):
            value = raw[i] if i < len(raw) else None
            record[header] = "" if value is None else value
        records.append(record)
    return records


def load_dataset(path: str, sheet: Optional[str] = None) -> Dataset:
    return sheet_dataset(read_workbook(path), sheet, path)


def read_upload(data: bytes, filename: str) -> Dict[str, RawRows]:
    """Same as :func:`read_workbook` for in-memory uploads."""
    name = Path(filename)
    suffix = name.suffix.lower()
    try:
        if suffix == ".csv":
            return _read_csv(io.StringIO(data.decode("utf-8-sig"), newline=""), name.stem)
        if suffix in EXCEL_SUFFIXES:
            return _read_excel(io.BytesIO(data), filename)
    except (UnicodeDecodeError, csv.Error) as exc:
        raise IngestError(f"Failed to read {filename}: {exc}") from exc
    raise IngestError(f"Unsupported file type {suffix or '(none)'}: {filename}")


def sheet_dataset(sheets: Dict[str, RawRows], sheet: Optional[str] = None, source: str = "") -> Dataset:
    if not sheets:
        raise IngestError(f"No sheets in {source}")
    name = sheet or next(iter(sheets))
    if name not in sheets:
        raise IngestError(f"Sheet {name!r} not found in {source} (available: {', '.join(sheets)})")
    rows = sheets[name]
    if not rows:
        raise IngestError(f"Sheet {name!r} in {source} has no header row")
    dataset = rows_to_records(rows)
    LOGGER.info("Loaded %s [%s]: %d rows", source, name, len(dataset))
    return dataset
