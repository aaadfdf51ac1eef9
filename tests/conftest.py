"""Pytest configuration and shared fixtures."""

from typing import Callable

import pytest
from openpyxl import Workbook

from rollmark.grid import WorkbookGrid


def build_workbook(sheets: dict[str, list[list]]) -> Workbook:
    """Create a workbook with one sheet per entry, rows given top to bottom."""
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
    return wb


@pytest.fixture
def make_grid() -> Callable[[dict[str, list[list]]], WorkbookGrid]:
    """Factory building an in-memory WorkbookGrid from row lists."""

    def _make(sheets: dict[str, list[list]]) -> WorkbookGrid:
        return WorkbookGrid(build_workbook(sheets))

    return _make


def roster_rows() -> list[list]:
    """A course roster with a section area (C-D) and a lecture area (E-F)."""
    return [
        ["Name", "ID", "Attendance Section", None, "Attendance Lecture", None],
        [None, None, "W1", "W2", "W1", "W2"],
        ["Alice Smith", 123456, None, None, None, None],
        ["Bob Jones", 234567, None, "x", None, None],
        ["Carol White", 345678, None, None, None, None],
        ["Dan Brown", 456789, None, None, None, None],
    ]


@pytest.fixture
def roster_grid(make_grid) -> WorkbookGrid:
    """Single-sheet roster grid."""
    return make_grid({"Roster": roster_rows()})


@pytest.fixture
def two_sheet_grid(make_grid) -> WorkbookGrid:
    """Two rosters sharing the same header layout; 567890 appears in both."""
    first = roster_rows() + [["Eve Black", 567890, None, None, None, None]]
    second = [
        ["Name", "ID", "Attendance Section", None, "Attendance Lecture", None],
        [None, None, "W1", "W2", "W1", "W2"],
        ["Frank Green", 678901, None, None, None, None],
        ["Grace Hall", 789012, None, None, None, None],
        ["Eve Black", 567890, None, None, None, None],
    ]
    return make_grid({"Sec1": first, "Sec2": second})
