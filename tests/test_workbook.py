"""Tests for container detection, cell display formatting and the xls path."""

import datetime
import io
import types

import openpyxl
import pytest
import xlrd
from xlrd.formatting import Format

import extractors.workbook as workbook
import normalizer
from extractors.cell_reader import display_value
from extractors.errors import MalformedWorkbookError
from normalizer import normalize


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        ("text", "text"),
        (True, "TRUE"),
        (False, "FALSE"),
        (42, "42"),
        (3.0, "3"),
        (1234.5678, "1234.5678"),
        (1e20, "1e+20"),
        (datetime.datetime(2024, 3, 1), "2024-03-01"),
        (datetime.datetime(2024, 3, 1, 14, 30, 5), "2024-03-01 14:30:05"),
        (datetime.date(2024, 3, 1), "2024-03-01"),
        (datetime.time(9, 15), "09:15:00"),
    ],
)
def test_display_value(value, expected):
    assert display_value(value) == expected


@pytest.mark.parametrize(
    "value, number_format, expected",
    [
        (0.1 + 0.2, "General", "0.3"),
        (1234.5, "#,##0.00", "1,234.50"),
        (-1234.5, "#,##0.00", "-1,234.50"),
        (2.5, "0", "3"),
        (7, "0.00", "7.00"),
        (0.25, "0%", "25%"),
        (0.1234, "0.00%", "12.34%"),
        (-5, "0;(0)", "(5)"),
        (19.9, '"$"#,##0.00', "$19.90"),
    ],
)
def test_display_value_number_formats(value, number_format, expected):
    assert display_value(value, number_format) == expected


@pytest.mark.parametrize(
    "value, number_format, expected",
    [
        (datetime.datetime(2024, 3, 5), "dd/mm/yyyy", "05/03/2024"),
        (datetime.date(2024, 3, 5), "m/d/yy", "3/5/24"),
        (datetime.date(2024, 3, 5), "d-mmm-yy", "5-Mar-24"),
        (datetime.datetime(2024, 3, 5, 14, 5), "yyyy-mm-dd hh:mm", "2024-03-05 14:05"),
        (datetime.time(14, 5), "h:mm AM/PM", "2:05 PM"),
        (datetime.time(9, 15, 30), "hh:mm:ss", "09:15:30"),
    ],
)
def test_display_value_date_formats(value, number_format, expected):
    assert display_value(value, number_format) == expected


def test_detect_file_type():
    assert workbook.detect_file_type(b"PK\x03\x04rest") == "xlsx"
    assert workbook.detect_file_type(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1rest") == "xls"
    with pytest.raises(MalformedWorkbookError):
        workbook.detect_file_type(b"")
    with pytest.raises(MalformedWorkbookError):
        workbook.detect_file_type(b"Region,Units\nNorth,10\n")


# ------------------------------------------------------------------
# xls, decoded through a stand-in for xlrd's Book
# ------------------------------------------------------------------


class _FakeSheet:
    def __init__(self, name, rows):
        self.name = name
        self._rows = rows
        self.nrows = len(rows)

    def row(self, rowx):
        return self._rows[rowx]


class _FakeBook:
    datemode = 0

    def __init__(self, sheets, xf_list=(), format_map=None):
        self.xf_list = list(xf_list)
        self.format_map = format_map or {}
        self._sheets = sheets
        self.nsheets = len(sheets)
        self.released = False

    def sheet_by_index(self, idx):
        return self._sheets[idx]

    def release_resources(self):
        self.released = True


def _cell(ctype, value, xf_index=None):
    return xlrd.sheet.Cell(ctype, value, xf_index)


_OLE2 = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 32


def test_xls_workbook_is_normalised(monkeypatch):
    book = _FakeBook(
        [
            _FakeSheet(
                "Legacy",
                [
                    [_cell(xlrd.XL_CELL_TEXT, "Item"), _cell(xlrd.XL_CELL_TEXT, "Qty"),
                     _cell(xlrd.XL_CELL_TEXT, "Date"), _cell(xlrd.XL_CELL_TEXT, "Ok")],
                    [_cell(xlrd.XL_CELL_TEXT, "Bolt"), _cell(xlrd.XL_CELL_NUMBER, 12.0),
                     _cell(xlrd.XL_CELL_DATE, 45292.0), _cell(xlrd.XL_CELL_BOOLEAN, 1)],
                    [_cell(xlrd.XL_CELL_TEXT, "Nut"), _cell(xlrd.XL_CELL_EMPTY, ""),
                     _cell(xlrd.XL_CELL_ERROR, 0x07), _cell(xlrd.XL_CELL_BLANK, "")],
                ],
            )
        ]
    )
    monkeypatch.setattr(
        workbook.xlrd, "open_workbook", lambda file_contents, formatting_info=False: book
    )

    doc = normalize(_OLE2, "legacy.xls")

    assert doc.file_type == "xls"
    assert doc.columns == ["Item", "Qty", "Date", "Ok"]
    assert doc.data == [
        {"Item": "Bolt", "Qty": "12", "Date": "2024-01-01", "Ok": "TRUE"},
        {"Item": "Nut", "Qty": "", "Date": "#DIV/0!", "Ok": ""},
    ]
    assert doc.transcript.splitlines()[-1] == "Row 2: Item: Nut, Date: #DIV/0!"
    assert book.released


def test_xls_decoder_error_is_malformed(monkeypatch):
    def _boom(file_contents, formatting_info=False):
        raise xlrd.XLRDError("Unsupported format, or corrupt file")

    monkeypatch.setattr(workbook.xlrd, "open_workbook", _boom)
    with pytest.raises(MalformedWorkbookError) as excinfo:
        normalize(_OLE2, "bad.xls")
    assert isinstance(excinfo.value.__cause__, xlrd.XLRDError)


def test_xls_number_formats_come_from_xf_records(monkeypatch):
    book = _FakeBook(
        [
            _FakeSheet(
                "Rates",
                [
                    [_cell(xlrd.XL_CELL_TEXT, "Rate"), _cell(xlrd.XL_CELL_TEXT, "When"),
                     _cell(xlrd.XL_CELL_TEXT, "Plain")],
                    [_cell(xlrd.XL_CELL_NUMBER, 0.25, 1), _cell(xlrd.XL_CELL_DATE, 45356.0, 2),
                     _cell(xlrd.XL_CELL_NUMBER, 0.1 + 0.2, 0)],
                ],
            )
        ],
        xf_list=[
            types.SimpleNamespace(format_key=0),
            types.SimpleNamespace(format_key=9),
            types.SimpleNamespace(format_key=164),
        ],
        format_map={
            0: Format(0, 0, "General"),
            9: Format(9, 0, "0%"),
            164: Format(164, 1, "dd/mm/yyyy"),
        },
    )
    monkeypatch.setattr(
        workbook.xlrd, "open_workbook", lambda file_contents, formatting_info=False: book
    )

    doc = normalize(_OLE2, "rates.xls")

    assert doc.data == [{"Rate": "25%", "When": "05/03/2024", "Plain": "0.3"}]


# ------------------------------------------------------------------
# xlsx number formats and type detection
# ------------------------------------------------------------------


def test_xlsx_cells_use_their_number_format():
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Rates"
    ws.append(["Rate", "When", "Amount"])
    ws.append([0.25, datetime.date(2024, 3, 5), 1234.5])
    ws["A2"].number_format = "0%"
    ws["B2"].number_format = "dd/mm/yyyy"
    ws["C2"].number_format = "#,##0.00"
    buf = io.BytesIO()
    wb.save(buf)

    doc = normalize(buf.getvalue(), "rates.xlsx")

    assert doc.data == [{"Rate": "25%", "When": "05/03/2024", "Amount": "1,234.50"}]
    assert doc.transcript.splitlines()[-1] == "Row 1: Rate: 25%, When: 05/03/2024, Amount: 1,234.50"


def test_file_type_is_detected_once(monkeypatch, sales_xlsx):
    calls = []
    real_detect = workbook.detect_file_type

    def _counting_detect(raw):
        calls.append(raw[:4])
        return real_detect(raw)

    monkeypatch.setattr(normalizer, "detect_file_type", _counting_detect)
    monkeypatch.setattr(workbook, "detect_file_type", _counting_detect)

    doc = normalize(sales_xlsx, "sales.xlsx")

    assert doc.file_type == "xlsx"
    assert len(calls) == 1


def test_read_workbook_accepts_known_file_type(sales_xlsx):
    sheets = workbook.read_workbook(sales_xlsx, "xlsx")
    assert [s.name for s in sheets] == ["Sales", "Staff"]
    assert sheets[0].rows[0] == ["Region", "Units", "Revenue"]
