"""
Document DTOs produced by the ingestion normalizer.

    Document
      ├─ transcript: str               (plain-text rendering of every sheet)
      ├─ data: List[Record]            (all sheets, flattened)
      ├─ columns: List[str]            (first-seen union of sheet headers)
      └─ sheets: List[SheetRecords]
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel

# column name -> display string; blank cells are "" rather than missing
Record = Dict[str, str]


class SheetRecords(BaseModel):
    """Records of a single worksheet, in row order."""

    name: str
    records: List[Record] = []

    model_config = {"frozen": True}


class Document(BaseModel):
    """Normalised, immutable result of ingesting one workbook."""

    id: str
    name: str
    file_type: str
    transcript: str = ""
    data: List[Record] = []
    columns: List[str] = []
    sheets: List[SheetRecords] = []

    model_config = {"frozen": True}

    @property
    def row_count(self) -> int:
        return len(self.data)

    def equivalent_to(self, other: "Document") -> bool:
        """Compare two documents ignoring the generated identifier."""
        return self.model_dump(exclude={"id"}) == other.model_dump(exclude={"id"})
