"""Shared fixtures: in-memory workbooks built with openpyxl."""

import io
from typing import Dict, List, Sequence

import openpyxl
import pytest

from ai.service import AIService


def make_xlsx(sheets: Dict[str, List[Sequence]]) -> bytes:
    """Build an .xlsx file from ``{sheet_name: rows}`` and return its bytes."""
    wb = openpyxl.Workbook()
    default = wb.active
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(list(row))
    if sheets:
        wb.remove(default)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def sales_xlsx() -> bytes:
    return make_xlsx(
        {
            "Sales": [
                ["Region", "Units", "Revenue"],
                ["North", 10, 1500.5],
                ["South", None, 900],
            ],
            "Staff": [
                ["Name", "Region"],
                ["Ada", "North"],
            ],
        }
    )


class FakeService(AIService):
    """AIService stand-in returning canned replies and recording prompts."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.prompts: List[str] = []

    def get_decision(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else "Summary."
