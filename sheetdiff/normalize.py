from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

from .models import CellValue


def _number_text(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return repr(value)
    return str(value)


def normalize_value(value: CellValue) -> str:
    """Canonical string used to decide whether two cell values are equal.

    Text is trimmed but otherwise compared verbatim; numbers keep their own
    canonical form (integral floats drop the trailing ``.0`` the way a
    spreadsheet displays them). Never raises.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float, Decimal)):
        return _number_text(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value).strip()


def display_text(value: CellValue) -> str:
    return "" if value is None else str(value)
