"""
Sheet reading: uploaded bytes → raw rows of the first sheet.

The first row is the header and is skipped; the pipeline reads columns by
position, per layout. Each returned row keeps its 1-indexed spreadsheet
row number so errors can point back at the sheet.
"""

import csv
import io
import zipfile
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from pricebook.errors import SheetParseError

SheetRow = tuple[int, list[Any]]


def _is_blank(values) -> bool:
    return all(v is None or (isinstance(v, str) and v.strip() == "") for v in values)


def parse_excel(file_bytes: bytes) -> list[SheetRow]:
    """Read the first worksheet of an .xlsx file."""
    try:
        wb = openpyxl.load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise SheetParseError(f"Could not read Excel file: {e}") from e

    try:
        ws = wb.worksheets[0]
        rows: list[SheetRow] = []
        for row_num, row_values in enumerate(ws.iter_rows(values_only=True), start=1):
            if row_num == 1:
                continue
            if not row_values or _is_blank(row_values):
                continue
            rows.append((row_num, list(row_values)))
    finally:
        wb.close()
    return rows


def parse_csv(file_bytes: bytes) -> list[SheetRow]:
    """Read a CSV file (same shape as parse_excel)."""
    try:
        text_content = file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise SheetParseError(f"CSV file is not UTF-8: {e}") from e

    rows: list[SheetRow] = []
    reader = csv.reader(io.StringIO(text_content))
    for row_num, row_values in enumerate(reader, start=1):
        if row_num == 1:
            continue
        if not row_values or _is_blank(row_values):
            continue
        rows.append((row_num, [v if v.strip() else None for v in row_values]))
    return rows


def read_sheet(file_bytes: bytes, filename: str | None = None) -> list[SheetRow]:
    """Dispatch on the file extension. Anything that is not .csv is read as .xlsx."""
    if filename and filename.lower().endswith(".csv"):
        return parse_csv(file_bytes)
    if filename and filename.lower().endswith(".xls"):
        raise SheetParseError("Legacy .xls files are not supported; save the sheet as .xlsx")
    return parse_excel(file_bytes)
