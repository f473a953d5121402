"""
Cell and value normalization utilities.

Used by the row validator to coerce raw spreadsheet cells and by the
resolver for case-insensitive lookups. Normalizations are composable:
each is a small function that can be chained.
"""

import math
import re
from datetime import date, datetime

from openpyxl.utils.datetime import from_excel


def normalize_case(value: str) -> str:
    """Lowercase for case-insensitive comparison."""
    return value.lower()


def normalize_key(value: str | None) -> str:
    """
    Lookup key for case-insensitive, trim-insensitive matching.
    '  ACME Co ' → 'acme co'
    """
    if not value:
        return ""
    return normalize_case(value.strip())


# ─── Cells ────────────────────────────────────────────────────

def cell_text(value) -> str:
    """
    Render a raw cell as trimmed text.

    Whole floats lose their '.0' so numeric code cells read back as
    written: 1001.0 → '1001'.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def parse_number(value) -> float | None:
    """
    Parse a numeric cell.

    Returns None for blank cells. Raises ValueError for anything that is
    not a finite number. Thousands separators are accepted: '1,250.50'.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "").replace(" ", "")
        if not text:
            return None
        number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"not a number: {value!r}")
    return number


# ─── Dates ────────────────────────────────────────────────────

# Day-first, as written on the sheets: 31/01/2024
_DMY_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

# Canonical form, optionally followed by a time part
_ISO_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[ T].*)?$")


def normalize_date(value) -> str | None:
    """
    Normalize a date cell to 'YYYY-MM-DD'.

    Accepts spreadsheet date serials (45322 → '2024-01-31'), date and
    datetime objects, 'DD/MM/YYYY' text and 'YYYY-MM-DD' text.

    Returns None for blank cells. Raises ValueError when the value is
    present but not a recognizable date.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"not a date: {value!r}")
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        if value <= 0:
            raise ValueError(f"not a date serial: {value!r}")
        try:
            converted = from_excel(value)
        except OverflowError:
            raise ValueError(f"not a date serial: {value!r}")
        if isinstance(converted, datetime):
            return converted.date().isoformat()
        raise ValueError(f"not a date serial: {value!r}")

    text = str(value).strip()
    if not text:
        return None

    m = _DMY_PATTERN.match(text)
    if m:
        day, month, year = (int(g) for g in m.groups())
        return date(year, month, day).isoformat()

    m = _ISO_PATTERN.match(text)
    if m:
        return date.fromisoformat(m.group(1)).isoformat()

    raise ValueError(f"not a date: {text!r}")


def parse_iso_date(value: str | None) -> date | None:
    """Parse a canonical 'YYYY-MM-DD' string. None for blank or malformed input."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None
