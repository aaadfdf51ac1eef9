"""openpyxl-backed grid implementation."""

import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Protection
from openpyxl.utils.exceptions import IllegalCharacterError

from ..errors import InvalidGridError
from .base import CellValue, Grid
from .models import CellType, SheetBounds

logger = logging.getLogger(__name__)


def _plain(value: Any) -> CellValue:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    # dates, times and other rich values are shown as text
    return str(value)


class _SheetSnapshot:
    """Non-blank cell values and bounds of one sheet, read once."""

    def __init__(self, values: dict[tuple[int, int], CellValue], max_row: int, max_col: int):
        self.values = values
        self.max_row = max_row
        self.max_col = max_col

    @property
    def bounds(self) -> Optional[SheetBounds]:
        if not self.values:
            return None
        return SheetBounds(max_row=self.max_row, max_col=self.max_col)


class WorkbookGrid(Grid):
    """Grid over an in-memory openpyxl workbook.

    Two workbooks are kept when loading a file: ``values`` (``data_only``) is
    read, so formulas show the result last computed by the spreadsheet
    application, and ``workbook`` keeps the formulas and is the one written and
    serialized. Cells are read from a per-sheet snapshot taken on first access.
    """

    def __init__(self, workbook: Workbook, values: Optional[Workbook] = None):
        self.workbook = workbook
        self.values = values if values is not None else workbook
        self._snapshots: dict[str, _SheetSnapshot] = {}

    @classmethod
    def from_bytes(cls, data: bytes) -> "WorkbookGrid":
        """Decode ``.xlsx`` bytes into a grid."""
        try:
            workbook = load_workbook(BytesIO(data))
            values = load_workbook(BytesIO(data), data_only=True)
        except Exception as e:
            raise InvalidGridError(f"Failed to read the spreadsheet file: {e}") from e
        return cls(workbook, values)

    @classmethod
    def load(cls, path: str | Path) -> "WorkbookGrid":
        """Read a workbook from disk."""
        return cls.from_bytes(Path(path).read_bytes())

    def sheet_names(self) -> list[str]:
        return list(self.workbook.sheetnames)

    def _snapshot(self, sheet: str) -> Optional[_SheetSnapshot]:
        snapshot = self._snapshots.get(sheet)
        if snapshot is not None:
            return snapshot
        if sheet not in self.values.sheetnames:
            return None

        ws = self.values[sheet]
        values = {}
        max_row = max_col = 0
        # _cells holds only existing cells; iter_rows would create blanks
        for (row, col), cell in ws._cells.items():
            max_row = max(max_row, row)
            max_col = max(max_col, col)
            if cell.value is not None:
                values[(row, col)] = _plain(cell.value)

        snapshot = _SheetSnapshot(values, max_row, max_col)
        self._snapshots[sheet] = snapshot
        return snapshot

    def sheet_range(self, sheet: str) -> Optional[SheetBounds]:
        snapshot = self._snapshot(sheet)
        if snapshot is None:
            return None
        return snapshot.bounds

    def cell_value(self, sheet: str, row: int, col: int) -> CellValue:
        snapshot = self._snapshot(sheet)
        if snapshot is None:
            return None
        return snapshot.values.get((row, col))

    def write_cell(
        self,
        sheet: str,
        row: int,
        col: int,
        value: Any,
        fill_color: Optional[str] = None,
    ) -> None:
        if sheet not in self.workbook.sheetnames:
            raise KeyError(f"Sheet '{sheet}' not found")
        ws = self.workbook[sheet]
        cell = ws.cell(row=row, column=col)

        cell_type = CellType.of(value)
        stored = ("" if value is None else str(value)) if cell_type == CellType.TEXT else value
        try:
            cell.value = stored
        except IllegalCharacterError as e:
            raise ValueError(f"Value {stored!r} contains characters not allowed in a cell") from e
        if cell_type == CellType.TEXT:
            # keep text that starts with "=" from being stored as a formula
            cell.data_type = "s"

        cell.font = Font()
        cell.border = Border()
        cell.alignment = Alignment()
        cell.protection = Protection()
        cell.number_format = "General"
        if fill_color:
            cell.fill = PatternFill(fill_type="solid", fgColor=fill_color)
        else:
            cell.fill = PatternFill(fill_type=None)

        if self.values is not self.workbook:
            self.values[sheet].cell(row=row, column=col).value = stored
        snapshot = self._snapshots.get(sheet)
        if snapshot is not None:
            snapshot.max_row = max(snapshot.max_row, row)
            snapshot.max_col = max(snapshot.max_col, col)
            if stored is None:
                snapshot.values.pop((row, col), None)
            else:
                snapshot.values[(row, col)] = stored

        logger.debug(f"Wrote {cell.coordinate} on '{sheet}' as {cell_type.name}")

    def serialize(self) -> bytes:
        buffer = BytesIO()
        self.workbook.save(buffer)
        return buffer.getvalue()
