"""Per-sheet student indexes built from the detected id and name columns."""

import logging
from typing import Optional

from ..grid import Grid, cell_text
from ..ids import extract_row_id
from ..mapping import ColumnRoleDetector, ColumnRoles, resolve_scope
from .models import SearchRow, StudentIndex, StudentRow

logger = logging.getLogger(__name__)


class StudentIndexBuilder:
    """Maps normalized student ids to the grid rows that hold them."""

    def __init__(self, detector: Optional[ColumnRoleDetector] = None):
        self.detector = detector or ColumnRoleDetector()

    def build(
        self,
        grid: Grid,
        sheet: str,
        target_ids: Optional[set[str]] = None,
        roles: Optional[ColumnRoles] = None,
    ) -> StudentIndex:
        """
        Index the data rows of one sheet.

        Args:
            grid: Grid to scan
            sheet: Sheet name
            target_ids: Known ids. With them, only member ids (or email
                usernames) are indexed; without them any id-shaped value is.
            roles: Pre-computed column roles (detected when omitted)

        Returns:
            StudentIndex; rows without an id are left out
        """
        index = StudentIndex(sheet=sheet)
        bounds = grid.sheet_range(sheet)
        if bounds is None:
            return index

        roles = roles or self.detector.detect_roles(grid, sheet, target_ids)
        min_length = self.detector.policy.min_id_length

        for row in range(self.detector.policy.first_data_row, bounds.max_row + 1):
            sid = extract_row_id(grid.cell_value(sheet, row, roles.id_col), target_ids, min_length)
            if not sid:
                continue
            index.add(StudentRow(row=row, id=sid, name=self._row_name(grid, sheet, row, roles)))

        logger.debug(
            f"Indexed {len(index.rows)} rows ({len(index.by_id)} ids) in sheet '{sheet}' "
            f"using id column {roles.id_col}"
        )
        return index

    def _row_name(self, grid: Grid, sheet: str, row: int, roles: ColumnRoles) -> str:
        parts = [cell_text(grid.cell_value(sheet, row, col)).strip() for col in roles.name_cols]
        return " ".join(parts).strip()

    def build_search_rows(self, grid: Grid, sheet: Optional[str] = None) -> list[SearchRow]:
        """Flatten pattern-based indexes of the scope for manual fix search."""
        out = []
        for sheet_name in resolve_scope(grid, sheet):
            index = self.build(grid, sheet_name)
            out.extend(
                SearchRow(sheet=sheet_name, row=r.row, id=r.id, name=r.name) for r in index.rows
            )
        return out


def search_students(rows: list[SearchRow], query: str, limit: int = 30) -> list[SearchRow]:
    """Case-insensitive substring search over ids and names."""
    needle = (query or "").strip().lower()
    if not needle:
        return []
    results = []
    for row in rows:
        if needle in row.id.lower() or needle in row.name.lower():
            results.append(row)
            if len(results) >= limit:
                break
    return results
