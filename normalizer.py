"""
Tabular ingestion normalizer.

Converts a raw spreadsheet byte buffer into a ``Document``:
  1. Decode the workbook (xlsx / xls) into sheets of display strings.
  2. Pair each data row with the sheet's header row into a Record.
  3. Render a plain-text transcript of every sheet for model input.
  4. Flatten the records and union the column names across sheets.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Union

from dto.document import Document, Record, SheetRecords
from extractors.errors import UnreadableWorkbookError
from extractors.workbook import RawSheet, detect_file_type, read_workbook

logger = logging.getLogger(__name__)

RawSource = Union[bytes, bytearray, BinaryIO]


# -------------------------------------------------------------------
# Records
# -------------------------------------------------------------------


def build_record(header: Sequence[str], row: Sequence[str]) -> Record:
    """
    Pair *row* positionally with *header*.

    Cells beyond the header are ignored; header entries beyond the row
    map to "". A repeated header name keeps its last value.
    """
    return {
        column: row[idx] if idx < len(row) else ""
        for idx, column in enumerate(header)
    }


def sheet_header(sheet: RawSheet) -> List[str]:
    """
    The header row without trailing blank entries.

    The used range pads every row to the widest one, so a data cell to
    the right of the last header would otherwise become a "" column.
    """
    if not sheet.rows:
        return []
    header = list(sheet.rows[0])
    while header and header[-1] == "":
        header.pop()
    return header


def sheet_records(sheet: RawSheet) -> List[Record]:
    header = sheet_header(sheet)
    return [build_record(header, row) for row in sheet.rows[1:]]


# -------------------------------------------------------------------
# Transcript
# -------------------------------------------------------------------


def render_row_line(index: int, header: Sequence[str], row: Sequence[str]) -> str:
    """``Row <index>: <h>: <v>, ...`` with empty cells left out."""
    pairs = [
        f"{column}: {value}"
        for column, value in zip(header, row)
        if value != ""
    ]
    return f"Row {index}: {', '.join(pairs)}".rstrip()


def render_sheet_block(sheet: RawSheet) -> Optional[str]:
    """Transcript block for one sheet, or None if it has no header row."""
    if not sheet.rows:
        return None
    header = sheet_header(sheet)
    lines = [
        f"Sheet: {sheet.name}",
        f"Headers: {', '.join(header)}",
    ]
    for idx, row in enumerate(sheet.rows[1:], start=1):
        lines.append(render_row_line(idx, header, row))
    return "\n".join(lines)


def render_transcript(sheets: Sequence[RawSheet]) -> str:
    blocks = [b for b in (render_sheet_block(s) for s in sheets) if b is not None]
    return "\n\n".join(blocks)


# -------------------------------------------------------------------
# Column union
# -------------------------------------------------------------------


def union_columns(sheets: Sequence[SheetRecords]) -> List[str]:
    """
    First-seen union of column names across sheets.

    Only sheets with at least one record contribute, so a sheet that has
    a header but no data rows adds no columns.
    """
    seen: dict = {}
    for sheet in sheets:
        if not sheet.records:
            continue
        for column in sheet.records[0]:
            seen.setdefault(column, None)
    return list(seen)


# -------------------------------------------------------------------
# Entry points
# -------------------------------------------------------------------


def _read_source(raw: RawSource) -> bytes:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    try:
        data = raw.read()
    except OSError as exc:
        raise UnreadableWorkbookError(f"Failed to read the file: {exc}") from exc
    if not isinstance(data, (bytes, bytearray)):
        raise UnreadableWorkbookError(
            f"Byte source returned {type(data).__name__}, expected bytes"
        )
    return bytes(data)


def normalize(raw: RawSource, name: str) -> Document:
    """
    Normalise a spreadsheet into a ``Document``.

    *name* is the display name supplied by the caller; it is not read
    from the workbook's own metadata.

    Raises:
        MalformedWorkbookError: the buffer is not a decodable xlsx / xls.
        UnreadableWorkbookError: a file-like source failed mid-read.
    """
    data = _read_source(raw)
    file_type = detect_file_type(data)
    sheets = read_workbook(data, file_type)

    per_sheet = [
        SheetRecords(name=sheet.name, records=sheet_records(sheet))
        for sheet in sheets
    ]
    flat = [record for sheet in per_sheet for record in sheet.records]

    document = Document(
        id=uuid.uuid4().hex,
        name=name,
        file_type=file_type,
        transcript=render_transcript(sheets),
        data=flat,
        columns=union_columns(per_sheet),
        sheets=per_sheet,
    )
    logger.info(
        "Normalised %s: %d sheet(s), %d row(s), %d column(s)",
        name,
        len(per_sheet),
        len(flat),
        len(document.columns),
    )
    return document


def normalize_file(path: Union[str, Path], name: Optional[str] = None) -> Document:
    """Read *path* from disk and normalise it; *name* defaults to the file name."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise UnreadableWorkbookError(f"Failed to read {path}: {exc}") from exc
    return normalize(raw, name or path.name)
