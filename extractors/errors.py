"""
Errors raised while ingesting a workbook.

Every error carries a stable ``code`` so callers can tell unreadable
bytes apart from an unparseable spreadsheet even when they show the
user the same "could not read this file" text.
"""

from __future__ import annotations


class WorkbookError(Exception):
    code = "workbook_error"
    user_message = "Could not read this file."

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.user_message)
        self.detail = detail


class MalformedWorkbookError(WorkbookError):
    """The buffer is not a spreadsheet container we can decode."""

    code = "malformed_workbook"
    user_message = (
        "Could not read this file. Please ensure it's a valid Excel file "
        "(.xlsx or .xls)."
    )


class UnreadableWorkbookError(WorkbookError, OSError):
    """The byte source failed before the whole file was read."""

    code = "unreadable_source"
    user_message = "Could not read this file. Please try again."
