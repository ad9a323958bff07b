"""Decode uploaded CSV text or Excel workbooks into header-keyed rows."""
import csv
import io
import logging
import os

import pandas as pd

from ..conf import ingest_setting
from ..exceptions import StructuralError
from .helpers import clean_workbook_cell

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")


def decode_tabular(content, filename=None):
    """Return the data rows of ``content`` as a list of ``{header: raw string}`` dicts.

    Workbooks are recognised by ``filename``; everything else is read as
    UTF-8 CSV (a leading BOM is tolerated). Header names are trimmed but
    keep their case. Rows whose cells are all blank are dropped, so row
    numbers reported later are positions in the returned list (1-based).
    Raises StructuralError when nothing usable can be decoded.
    """
    if content is None or len(content) == 0:
        raise StructuralError("The uploaded file is empty.")
    max_bytes = ingest_setting("MAX_UPLOAD_BYTES")
    if max_bytes and len(content) > max_bytes:
        raise StructuralError(f"The uploaded file exceeds the {max_bytes} byte limit.")

    suffix = os.path.splitext(filename or "")[1].lower()
    if suffix in EXCEL_SUFFIXES:
        if isinstance(content, str):
            raise StructuralError("Workbook content must be bytes.")
        rows = _decode_workbook(content)
    else:
        rows = _decode_csv(content)

    rows = [row for row in rows if any(value.strip() for value in row.values())]
    if not rows:
        raise StructuralError("The file has no data rows.")
    logger.debug("Decoded %s rows from %s", len(rows), filename or "<text>")
    return rows


def _decode_csv(content):
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise StructuralError(f"The file is not valid UTF-8 text: {exc}") from exc
    else:
        text = content.lstrip("\ufeff")

    reader = csv.DictReader(io.StringIO(text, newline=""))
    try:
        headers = reader.fieldnames
        raw_rows = list(reader)
    except csv.Error as exc:
        raise StructuralError(f"Malformed CSV: {exc}") from exc
    if not headers or not any((h or "").strip() for h in headers):
        raise StructuralError("No header row found.")

    rows = []
    for raw in raw_rows:
        row = {}
        for key, value in raw.items():
            # cells beyond the header width land under the None key
            if key is None:
                continue
            row[key.strip()] = value if value is not None else ""
        rows.append(row)
    return rows


def _decode_workbook(content):
    try:
        frame = pd.read_excel(io.BytesIO(content), dtype=str, keep_default_na=False)
    except Exception as exc:
        raise StructuralError(f"Could not read workbook: {exc}") from exc
    if frame.columns.empty:
        raise StructuralError("No header row found.")
    frame.columns = [str(c).strip() for c in frame.columns]
    rows = []
    for record in frame.to_dict(orient="records"):
        rows.append({key: clean_workbook_cell(value) or "" for key, value in record.items()})
    return rows
