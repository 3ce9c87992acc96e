"""
Cell reading utilities shared by the xlsx and xls decoders.

Cell values are rendered to the string a user would see in the sheet,
using the cell's number format, and never re-parsed into floats, so
large integers and formatted dates survive the trip into the
transcript unchanged.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, List, Optional, Tuple

from openpyxl.cell.cell import Cell
from openpyxl.styles.numbers import FORMAT_GENERAL
from openpyxl.utils import column_index_from_string
from openpyxl.worksheet.worksheet import Worksheet

from extractors.number_format import format_number, format_temporal

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Display formatting
# ------------------------------------------------------------------

def _format_duration(value: datetime.timedelta) -> str:
    seconds = int(value.total_seconds())
    sign = "-" if seconds < 0 else ""
    hours, rest = divmod(abs(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{sign}{hours}:{minutes:02d}:{secs:02d}"


def display_value(value: Any, number_format: Optional[str] = FORMAT_GENERAL) -> str:
    """Render a decoded cell value as the text its number format shows."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return format_number(value, number_format or FORMAT_GENERAL)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return format_temporal(value, number_format)
    if isinstance(value, datetime.timedelta):
        return _format_duration(value)
    return str(value)


def display_cell(cell: Cell) -> str:
    return display_value(cell.value, getattr(cell, "number_format", FORMAT_GENERAL))


# ------------------------------------------------------------------
# Used range
# ------------------------------------------------------------------

def find_used_range(ws: Worksheet) -> Optional[Tuple[int, int, int, int]]:
    """
    Return (min_row, min_col, max_row, max_col), all 1-based, or None
    when the worksheet holds no value at all.

    Trusts ``ws.calculate_dimension()`` unless it reports the single-cell
    default, which openpyxl also returns for an empty sheet.
    """
    dim = ws.calculate_dimension()
    if dim and dim != "A1:A1":
        try:
            parts = dim.replace("$", "").split(":")
            if len(parts) == 2:
                tl, br = parts
                tl_col = column_index_from_string("".join(c for c in tl if c.isalpha()))
                br_col = column_index_from_string("".join(c for c in br if c.isalpha()))
                tl_row = int("".join(c for c in tl if c.isdigit()))
                br_row = int("".join(c for c in br if c.isdigit()))
                return tl_row, tl_col, br_row, br_col
        except ValueError:
            logger.debug("Unusable dimension %r for sheet %r", dim, ws.title)

    min_r = min_c = float("inf")
    max_r = max_c = 0
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is not None:
                min_r = min(min_r, cell.row)
                max_r = max(max_r, cell.row)
                min_c = min(min_c, cell.column)
                max_c = max(max_c, cell.column)
    if max_r == 0:
        return None
    return int(min_r), int(min_c), int(max_r), int(max_c)


def read_sheet_rows(ws: Worksheet) -> List[List[str]]:
    """Read every row of the used range as formatted display strings."""
    used = find_used_range(ws)
    if used is None:
        return []
    min_row, min_col, max_row, max_col = used
    return [
        [display_cell(cell) for cell in row]
        for row in ws.iter_rows(
            min_row=min_row,
            min_col=min_col,
            max_row=max_row,
            max_col=max_col,
        )
    ]
