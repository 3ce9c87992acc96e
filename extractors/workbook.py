"""
Workbook decoding. Turns a raw spreadsheet byte buffer into an ordered
list of ``RawSheet`` objects whose cells are already display strings.

Two containers are supported, detected from the leading bytes:
  - xlsx (Office Open XML, a ZIP archive)  → openpyxl
  - xls  (legacy BIFF inside an OLE2 file) → xlrd

Any decoder failure is fatal; no partial workbook is ever returned.
"""

from __future__ import annotations

import io
import logging
from typing import List, Optional

import openpyxl
import xlrd
from openpyxl.styles.numbers import FORMAT_GENERAL
from pydantic import BaseModel

from extractors.cell_reader import display_value, read_sheet_rows
from extractors.errors import MalformedWorkbookError

logger = logging.getLogger(__name__)

_ZIP_SIGNATURE = b"PK\x03\x04"
_OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


class RawSheet(BaseModel):
    """One worksheet: its name and rows of display strings (row 0 = header)."""

    name: str
    rows: List[List[str]] = []


def detect_file_type(raw: bytes) -> str:
    """Return ``"xlsx"`` or ``"xls"`` for a supported container."""
    if raw.startswith(_ZIP_SIGNATURE):
        return "xlsx"
    if raw.startswith(_OLE2_SIGNATURE):
        return "xls"
    raise MalformedWorkbookError(
        f"Unrecognised file signature {raw[:8]!r}; expected an .xlsx or .xls file"
    )


# ------------------------------------------------------------------
# xlsx
# ------------------------------------------------------------------

def _read_xlsx(raw: bytes) -> List[RawSheet]:
    try:
        wb = openpyxl.load_workbook(io.BytesIO(raw), data_only=True)
    except Exception as exc:
        raise MalformedWorkbookError(f"Failed to open xlsx workbook: {exc}") from exc

    try:
        return [
            RawSheet(name=ws.title, rows=read_sheet_rows(ws))
            for ws in wb.worksheets
        ]
    except Exception as exc:
        raise MalformedWorkbookError(f"Failed to read xlsx workbook: {exc}") from exc
    finally:
        wb.close()


# ------------------------------------------------------------------
# xls
# ------------------------------------------------------------------

def _xls_number_format(wb: xlrd.book.Book, cell: xlrd.sheet.Cell) -> str:
    """Resolve a cell's format string through its XF record."""
    xf_index = cell.xf_index
    if xf_index is None or xf_index >= len(wb.xf_list):
        return FORMAT_GENERAL
    fmt = wb.format_map.get(wb.xf_list[xf_index].format_key)
    return fmt.format_str if fmt is not None else FORMAT_GENERAL


def _xls_cell_value(cell: xlrd.sheet.Cell, wb: xlrd.book.Book) -> str:
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return ""
    number_format = _xls_number_format(wb, cell)
    if cell.ctype == xlrd.XL_CELL_DATE:
        return display_value(xlrd.xldate_as_datetime(cell.value, wb.datemode), number_format)
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return display_value(bool(cell.value))
    if cell.ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value, "#ERR")
    if cell.ctype == xlrd.XL_CELL_NUMBER:
        return display_value(cell.value, number_format)
    return display_value(cell.value)


def _read_xls(raw: bytes) -> List[RawSheet]:
    try:
        wb = xlrd.open_workbook(file_contents=raw, formatting_info=True)
    except Exception as exc:
        raise MalformedWorkbookError(f"Failed to open xls workbook: {exc}") from exc

    try:
        sheets: List[RawSheet] = []
        for idx in range(wb.nsheets):
            ws = wb.sheet_by_index(idx)
            rows = [
                [_xls_cell_value(cell, wb) for cell in ws.row(r)]
                for r in range(ws.nrows)
            ]
            sheets.append(RawSheet(name=ws.name, rows=rows))
        return sheets
    except Exception as exc:
        raise MalformedWorkbookError(f"Failed to read xls workbook: {exc}") from exc
    finally:
        wb.release_resources()


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

_READERS = {
    "xlsx": _read_xlsx,
    "xls": _read_xls,
}


def read_workbook(raw: bytes, file_type: Optional[str] = None) -> List[RawSheet]:
    """
    Decode *raw* into its sheets, in workbook order.

    Pass *file_type* when the caller has already sniffed the container.
    """
    file_type = file_type or detect_file_type(raw)
    sheets = _READERS[file_type](raw)
    logger.debug("Decoded %s workbook with %d sheet(s)", file_type, len(sheets))
    return sheets
