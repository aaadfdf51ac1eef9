"""Abstract grid interface consumed by the detection and preview code."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from .models import SheetBounds

CellValue = Optional[str | int | float | bool]


class Grid(ABC):
    """A caller-owned, multi-sheet grid with 1-based addressing."""

    @abstractmethod
    def sheet_names(self) -> list[str]:
        """Return sheet names in workbook order."""
        pass

    @abstractmethod
    def cell_value(self, sheet: str, row: int, col: int) -> CellValue:
        """Return the value at a cell, or None when blank or out of range."""
        pass

    @abstractmethod
    def sheet_range(self, sheet: str) -> Optional[SheetBounds]:
        """Return the populated bounds of a sheet, or None when it is empty."""
        pass

    @abstractmethod
    def write_cell(
        self,
        sheet: str,
        row: int,
        col: int,
        value: Any,
        fill_color: Optional[str] = None,
    ) -> None:
        """Replace a cell's value and style, optionally with a solid fill."""
        pass

    @abstractmethod
    def serialize(self) -> bytes:
        """Encode the grid in its native file format."""
        pass
