# Shared cell parsing and cleaning helpers for the import paths

import math
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pandas as pd

# text pandas leaves behind when a missing cell was stringified before export
WORKBOOK_NA_TEXT = ("nan", "NaN", "NaT", "None", "<NA>")


def clean_cell(val: Any) -> Optional[str]:
    """Normalize a raw cell into a stripped string.
    - None and pandas NaN/NaT become None
    - empty strings become None
    Text is never compared against NA spellings, so a real "Nat" survives.
    """
    if val is None:
        return None
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        pass
    s = str(val).strip()
    if s == "":
        return None
    return s


def clean_workbook_cell(val: Any) -> Optional[str]:
    """clean_cell for workbook cells, also dropping pandas' own NA renderings."""
    s = clean_cell(val)
    if s in WORKBOOK_NA_TEXT:
        return None
    return s


def cell(row, column_name: str) -> Optional[str]:
    """Cleaned value of ``column_name`` in a decoded row; None when absent or blank."""
    if row is None or not column_name:
        return None
    return clean_cell(row.get(column_name))


def parse_int_cell(val: Any, default: int = 0) -> int:
    s = clean_cell(val)
    if s is None:
        return default
    try:
        return int(s)
    except ValueError:
        pass
    try:
        number = float(s)
    except ValueError:
        return default
    if not math.isfinite(number):
        return default
    return int(number)


def parse_float_cell(val: Any, default: float = 0.0) -> float:
    s = clean_cell(val)
    if s is None:
        return default
    try:
        number = float(s)
    except ValueError:
        return default
    return number if math.isfinite(number) else default


def parse_excel_date(val: Any) -> Optional[date]:
    """Parse diverse Excel/CSV cell date values into a python date.
    Handles:
      - pandas.Timestamp (tz-aware or naive)
      - pandas.NaT or other NA markers => None
      - Excel serial numbers (>25000 heuristic)
      - Common string formats (Y-m-d, d-m-Y, d/m/Y, Y/m/d)
      - datetime / date objects
    Returns either a date instance or None, never pandas NaT.
    """
    if val is None:
        return None
    if isinstance(val, pd.Timestamp):
        if pd.isna(val):
            return None
        py_dt = val.to_pydatetime()
        return py_dt.replace(tzinfo=None).date()
    if isinstance(val, datetime):
        return val.replace(tzinfo=None).date()
    if isinstance(val, date):
        return val
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        if math.isfinite(val) and val > 25000:
            origin = datetime(1899, 12, 30)
            return (origin + timedelta(days=int(val))).date()
    sval = clean_cell(val)
    if sval is None:
        return None
    # workbooks read as text give "2024-05-31 00:00:00"
    if len(sval) > 10 and sval[10] in (" ", "T"):
        sval = sval[:10]
    for fmt in ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d", "%m/%d/%Y", "%d.%m.%Y"):
        try:
            return datetime.strptime(sval, fmt).date()
        except ValueError:
            continue
    if sval.isdigit() and int(sval) > 25000:
        return parse_excel_date(int(sval))
    return None
