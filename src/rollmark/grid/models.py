"""Data models for grid access."""

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel


class SheetBounds(BaseModel):
    """Inclusive 1-based bounds over the populated cells of a sheet."""

    max_row: int
    max_col: int


class CellType(str, Enum):
    """Stored type of a written cell value."""

    NUMERIC = "n"
    BOOLEAN = "b"
    TEXT = "s"

    @classmethod
    def of(cls, value: Any) -> "CellType":
        # bool is checked first because it is an int subclass
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, (int, float)):
            return cls.NUMERIC
        return cls.TEXT


def col_letter(col: int) -> str:
    """Convert a 1-based column index to letters. 1=A, 26=Z, 27=AA."""
    result = ""
    while col > 0:
        col, rem = divmod(col - 1, 26)
        result = chr(ord("A") + rem) + result
    return result


def cell_address(row: int, col: int) -> str:
    """Return A1 notation for a 1-based row and column."""
    return f"{col_letter(col)}{row}"


def cell_text(value: Any) -> str:
    """Render a cell value as display text; blanks become ``""``.

    Integral floats render without the fractional part so that ``123456.0``
    read from a workbook reads the same as ``123456``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)
