"""Grid access: the abstract interface and the openpyxl adapter."""

from .base import Grid, CellValue
from .models import SheetBounds, CellType, col_letter, cell_address, cell_text
from .workbook import WorkbookGrid

__all__ = [
    "Grid",
    "CellValue",
    "SheetBounds",
    "CellType",
    "col_letter",
    "cell_address",
    "cell_text",
    "WorkbookGrid",
]
