"""Preview generation for attendance and grade edits."""

import logging
import uuid
from typing import Any, Optional

from ..config import settings
from ..grid import Grid, cell_address
from ..ids import normalize_id
from ..mapping import ColumnCatalogBuilder, ColumnOption, resolve_option
from ..roster import IdEntry, ParsedIdentifierList, StudentIndex, StudentIndexBuilder
from .models import ColumnMapEntry, MatchStatus, PreviewResult, PreviewRow, TaskKind

logger = logging.getLogger(__name__)

AMBIGUOUS_NOTE = "Duplicate ID detected in sheet; please verify match."
NOT_FOUND_NOTE = "ID not found in selected scope."


class PreviewGenerator:
    """Builds previews of every prospective cell write. Never writes to the grid."""

    def __init__(
        self,
        catalog_builder: Optional[ColumnCatalogBuilder] = None,
        index_builder: Optional[StudentIndexBuilder] = None,
        attendance_sentinel: Any = None,
    ):
        self.catalog_builder = catalog_builder or ColumnCatalogBuilder()
        self.index_builder = index_builder or StudentIndexBuilder(self.catalog_builder.detector)
        self.attendance_sentinel = (
            settings.attendance_sentinel if attendance_sentinel is None else attendance_sentinel
        )

    def generate_preview(
        self,
        grid: Grid,
        column_key: str,
        task: "TaskKind | str",
        parsed: ParsedIdentifierList,
        sheet: Optional[str] = None,
    ) -> PreviewResult:
        """
        Generate a preview for an ordered id (or id+grade) list.

        Args:
            grid: The grid to read
            column_key: Catalog key of the target column (header text also works)
            task: ``attendance`` or ``grade``
            parsed: Parsed input list
            sheet: Restrict to a single sheet, or None for all sheets

        Returns:
            PreviewResult with one row per input id and one column map entry
            per location of the selected column

        Raises:
            ColumnNotFoundError: If the column key cannot be resolved
            InvalidTaskError: If the task kind is unknown
        """
        task = TaskKind.parse(task)
        options = self.catalog_builder.build(grid, sheet)
        selected = resolve_option(options, column_key)

        logger.info(
            f"Generating {task.value} preview for column '{selected.key}' "
            f"({len(selected.locations)} locations, {len(parsed.id_entries())} ids)"
        )

        indexes: dict[str, StudentIndex] = {}
        for loc in selected.locations:
            if loc.sheet not in indexes:
                indexes[loc.sheet] = self.index_builder.build(grid, loc.sheet, parsed.target_ids)

        rows = [
            self._preview_entry(grid, seq, entry, task, selected, indexes)
            for seq, entry in enumerate(parsed.id_entries(), start=1)
        ]

        result = PreviewResult(
            preview_id=str(uuid.uuid4()),
            task=task,
            column=selected,
            rows=rows,
            column_map=self.build_column_map(selected),
            ordered_entries=parsed.ordered_entries,
            duplicate_ids=parsed.duplicate_ids(),
        )

        summary = result.summary()
        logger.info(
            f"Preview {result.preview_id}: {summary.matched} matched, "
            f"{summary.ambiguous} ambiguous, {summary.not_found} not found"
        )
        return result

    def desired_value(self, task: TaskKind, entry: IdEntry) -> Any:
        if task == TaskKind.ATTENDANCE:
            return self.attendance_sentinel
        return str(entry.grade if entry.grade is not None else "")

    def _preview_entry(
        self,
        grid: Grid,
        seq: int,
        entry: IdEntry,
        task: TaskKind,
        selected: ColumnOption,
        indexes: dict[str, StudentIndex],
    ) -> PreviewRow:
        sid = normalize_id(entry.id) or ""
        new_value = self.desired_value(task, entry)

        # First sheet (in location order) with any hit wins
        for loc in selected.locations:
            hits = indexes[loc.sheet].hits(sid)
            if not hits:
                continue
            hit = hits[0]
            ambiguous = len(hits) > 1
            old_value = grid.cell_value(loc.sheet, hit.row, loc.col)
            return PreviewRow(
                seq=seq,
                input_id=sid,
                section=entry.section,
                sheet=loc.sheet,
                row=hit.row,
                col=loc.col,
                resolved_id=hit.id,
                resolved_name=hit.name,
                target_cell=cell_address(hit.row, loc.col),
                old_value="" if old_value is None else old_value,
                new_value=new_value,
                match_status=MatchStatus.AMBIGUOUS if ambiguous else MatchStatus.MATCHED,
                note=AMBIGUOUS_NOTE if ambiguous else "",
            )

        return PreviewRow(
            seq=seq,
            input_id=sid,
            section=entry.section,
            resolved_id=sid,
            old_value="",
            new_value=new_value,
            match_status=MatchStatus.NOT_FOUND,
            note=NOT_FOUND_NOTE,
        )

    @staticmethod
    def build_column_map(selected: ColumnOption) -> list[ColumnMapEntry]:
        return [
            ColumnMapEntry(
                sheet=loc.sheet,
                header_text=selected.header_text,
                kind=selected.kind,
                header_row=loc.header_row,
                col=loc.col,
                col_letter=loc.col_letter,
            )
            for loc in selected.locations
        ]
