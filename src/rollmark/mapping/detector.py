"""Heuristic detection of column roles and structural areas."""

import logging
import re
from typing import Any, Optional

from ..grid import Grid, cell_text
from ..ids import extract_target_id, looks_like_id
from .models import AreaBounds, ColumnRoles, DetectionPolicy, IdStrategy

logger = logging.getLogger(__name__)

LETTER_RE = re.compile(r"[a-zA-Z]")


class ColumnRoleDetector:
    """Infers the id column, name column(s) and area boundaries of a sheet.

    All thresholds come from a DetectionPolicy so that they can be tuned and
    tested independently of the scanning code.
    """

    def __init__(self, policy: Optional[DetectionPolicy] = None):
        self.policy = policy or DetectionPolicy.from_settings()

    def looks_like_name(self, value: Any) -> bool:
        """A name has letters and is not an id or an id-based email."""
        text = cell_text(value).strip()
        if not text:
            return False
        if not LETTER_RE.search(text):
            return False
        return not looks_like_id(text, self.policy.min_id_length)

    def is_id_shaped(self, value: Any) -> bool:
        return looks_like_id(value, self.policy.min_id_length)

    def detect_roles(
        self,
        grid: Grid,
        sheet: str,
        target_ids: Optional[set[str]] = None,
    ) -> ColumnRoles:
        """
        Detect the id and name columns of a sheet.

        Args:
            grid: Grid to scan
            sheet: Sheet name
            target_ids: Known ids; when given, the id column is the one holding
                the most of them

        Returns:
            ColumnRoles with 1-based columns. ``id_col`` always ends up set for
            a non-empty sheet thanks to the fallback chain.
        """
        bounds = grid.sheet_range(sheet)
        if bounds is None:
            return ColumnRoles(id_col=None, name_col=1, name_col2=None)

        start_row = self.policy.first_data_row
        end_row = min(bounds.max_row, start_row + self.policy.scan_window_rows - 1)

        name_col, name_col2 = self._detect_name_columns(grid, sheet, start_row, end_row, bounds.max_col)
        excluded = {name_col, name_col2}

        id_col = None
        strategy = None
        if target_ids:
            id_col = self._best_target_column(grid, sheet, start_row, end_row, bounds.max_col, excluded, target_ids)
            strategy = IdStrategy.TARGET_MATCH
        else:
            id_col = self._best_pattern_column(grid, sheet, start_row, end_row, bounds.max_col, excluded)
            strategy = IdStrategy.PATTERN

        if id_col is None:
            loose_end = min(bounds.max_row, start_row + self.policy.loose_scan_rows)
            id_col = self._first_pattern_column(grid, sheet, start_row, loose_end, bounds.max_col, excluded)
            strategy = IdStrategy.LOOSE_SCAN

        if id_col is None:
            id_col = self.policy.fallback_id_column
            strategy = IdStrategy.DEFAULT
            logger.warning(
                f"No id column detected in sheet '{sheet}', "
                f"falling back to column {id_col}"
            )

        roles = ColumnRoles(id_col=id_col, name_col=name_col, name_col2=name_col2, id_strategy=strategy)
        logger.debug(f"Sheet '{sheet}' roles: {roles}")
        return roles

    def _detect_name_columns(
        self, grid: Grid, sheet: str, start_row: int, end_row: int, max_col: int
    ) -> tuple[int, Optional[int]]:
        total_rows = end_row - start_row + 1
        if total_rows <= 0:
            return 1, None

        qualifying = []
        for col in range(1, min(self.policy.name_scan_columns, max_col) + 1):
            text_count = sum(
                1
                for row in range(start_row, end_row + 1)
                if self.looks_like_name(grid.cell_value(sheet, row, col))
            )
            if text_count / total_rows > self.policy.name_likeness_threshold:
                qualifying.append(col)

        # Prefer first/last name split across two adjacent columns
        for first, second in zip(qualifying, qualifying[1:]):
            if second == first + 1:
                return first, second
        if qualifying:
            return qualifying[0], None
        return 1, None

    def _best_target_column(
        self,
        grid: Grid,
        sheet: str,
        start_row: int,
        end_row: int,
        max_col: int,
        excluded: set,
        target_ids: set[str],
    ) -> Optional[int]:
        best_col = None
        best_score = 0
        for col in range(1, max_col + 1):
            if col in excluded:
                continue
            score = sum(
                1
                for row in range(start_row, end_row + 1)
                if extract_target_id(grid.cell_value(sheet, row, col), target_ids)
            )
            # strict ">" keeps the leftmost column on ties
            if score > best_score:
                best_score = score
                best_col = col
        return best_col

    def _best_pattern_column(
        self, grid: Grid, sheet: str, start_row: int, end_row: int, max_col: int, excluded: set
    ) -> Optional[int]:
        total_rows = end_row - start_row + 1
        if total_rows <= 0:
            return None

        best_col = None
        best_score = 0
        for col in range(1, max_col + 1):
            if col in excluded:
                continue
            score = self._id_shaped_count(grid, sheet, col, start_row, end_row)
            if score / total_rows <= self.policy.id_likeness_threshold:
                continue
            if score > best_score:
                best_score = score
                best_col = col
        return best_col

    def _first_pattern_column(
        self, grid: Grid, sheet: str, start_row: int, end_row: int, max_col: int, excluded: set
    ) -> Optional[int]:
        total_rows = end_row - start_row + 1
        if total_rows <= 0:
            return None
        for col in range(1, max_col + 1):
            if col in excluded:
                continue
            score = self._id_shaped_count(grid, sheet, col, start_row, end_row)
            if score / total_rows > self.policy.id_likeness_threshold:
                return col
        return None

    def _id_shaped_count(self, grid: Grid, sheet: str, col: int, start_row: int, end_row: int) -> int:
        return sum(
            1
            for row in range(start_row, end_row + 1)
            if self.is_id_shaped(grid.cell_value(sheet, row, col))
        )

    def find_col_by_text(self, grid: Grid, sheet: str, row: int, text: str) -> Optional[int]:
        """Return the first column whose cell contains ``text`` (case-insensitive)."""
        bounds = grid.sheet_range(sheet)
        if bounds is None:
            return None
        needle = text.lower()
        for col in range(1, bounds.max_col + 1):
            value = grid.cell_value(sheet, row, col)
            if value is None:
                continue
            if needle in cell_text(value).lower():
                return col
        return None

    def detect_areas(self, grid: Grid, sheet: str) -> Optional[AreaBounds]:
        """Locate the section and lecture areas from row 1 markers."""
        bounds = grid.sheet_range(sheet)
        if bounds is None:
            return None
        return AreaBounds(
            section_col=self.find_col_by_text(grid, sheet, 1, self.policy.section_marker),
            lecture_col=self.find_col_by_text(grid, sheet, 1, self.policy.lecture_marker),
            max_col=bounds.max_col,
        )
