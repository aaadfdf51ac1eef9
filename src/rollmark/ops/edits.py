"""User actions on a preview before it is applied."""

import logging
from typing import Optional

from ..errors import ColumnNotFoundError, InvalidTaskError, PreviewRowNotFoundError
from ..grid import Grid, cell_address
from ..roster import StudentIndexBuilder
from .models import MatchStatus, PreviewResult, PreviewRow, TaskKind

logger = logging.getLogger(__name__)

MANUAL_FIX_NOTE = "Manually fixed by user."
MARKED_WRONG_NOTE = "Marked as wrong match by user."


def _get_row(preview: PreviewResult, seq: int) -> PreviewRow:
    row = preview.row_by_seq(seq)
    if row is None:
        raise PreviewRowNotFoundError(f"Preview row {seq} does not exist.")
    return row


def fix_row(
    grid: Grid,
    preview: PreviewResult,
    seq: int,
    sheet: str,
    row: int,
    index_builder: Optional[StudentIndexBuilder] = None,
) -> PreviewRow:
    """
    Point a preview row at a grid row chosen by the user.

    The target column is the selected column's first location in ``sheet``.
    The student id and name are taken from that grid row when it holds an id.

    Raises:
        PreviewRowNotFoundError: If ``seq`` is unknown
        ColumnNotFoundError: If the selected column has no location in ``sheet``
    """
    preview_row = _get_row(preview, seq)
    locations = preview.column.locations_in(sheet)
    if not locations:
        raise ColumnNotFoundError(
            f"Column '{preview.column.header_text}' does not exist in sheet '{sheet}'."
        )
    loc = locations[0]

    builder = index_builder or StudentIndexBuilder()
    index = builder.build(grid, sheet)
    student = next((r for r in index.rows if r.row == row), None)

    old_value = grid.cell_value(sheet, row, loc.col)
    preview_row.sheet = sheet
    preview_row.row = row
    preview_row.col = loc.col
    preview_row.target_cell = cell_address(row, loc.col)
    preview_row.old_value = "" if old_value is None else old_value
    if student is not None:
        preview_row.resolved_id = student.id
        preview_row.resolved_name = student.name
    preview_row.match_status = MatchStatus.MANUALLY_FIXED
    preview_row.note = MANUAL_FIX_NOTE

    logger.info(f"Preview row {seq} manually fixed to {sheet}!{preview_row.target_cell}")
    return preview_row


def mark_wrong(preview: PreviewResult, seq: int) -> PreviewRow:
    """Flag a match as wrong so it gets reviewed again."""
    preview_row = _get_row(preview, seq)
    preview_row.match_status = MatchStatus.AMBIGUOUS
    preview_row.note = MARKED_WRONG_NOTE
    return preview_row


def set_discarded(preview: PreviewResult, seq: int, discarded: bool = True) -> PreviewRow:
    """Exclude (or re-include) a row from the apply batch."""
    preview_row = _get_row(preview, seq)
    preview_row.discarded = discarded
    return preview_row


def edit_grade(preview: PreviewResult, seq: int, value: str) -> PreviewRow:
    """Replace the grade that will be written for a row."""
    if preview.task != TaskKind.GRADE:
        raise InvalidTaskError("Grades can only be edited for grade tasks.")
    preview_row = _get_row(preview, seq)
    preview_row.new_value = str(value if value is not None else "").strip()
    return preview_row
