"""Editor session tying a grid, a preview and the user's edits together."""

import logging
import uuid
from typing import Any, Optional

from ..config import settings
from ..errors import ApplyRefusedError
from ..grid import Grid
from ..mapping import ColumnCatalogBuilder, ColumnOption, resolve_scope
from ..roster import SearchRow, StudentIndexBuilder, parse_input_text, search_students
from . import edits
from .apply import ApplyEngine
from .models import ApplyResult, PreviewResult, PreviewRow, TaskKind
from .preview import PreviewGenerator

logger = logging.getLogger(__name__)


class EditorSession:
    """
    One loaded grid plus the current preview.

    Workflow: list columns, build a preview from pasted text, optionally
    fix/discard/edit rows, then apply with explicit confirmation.
    """

    def __init__(self, grid: Grid, sheet: Optional[str] = None, session_id: Optional[str] = None):
        # Validates the scope up front
        resolve_scope(grid, sheet)
        self.session_id = session_id or str(uuid.uuid4())
        self.grid = grid
        self.sheet = sheet
        self.catalog_builder = ColumnCatalogBuilder()
        self.index_builder = StudentIndexBuilder(self.catalog_builder.detector)
        self.preview_generator = PreviewGenerator(self.catalog_builder, self.index_builder)
        self.apply_engine = ApplyEngine()
        self.preview: Optional[PreviewResult] = None
        self.last_apply: Optional[ApplyResult] = None
        self._search_rows: Optional[list[SearchRow]] = None

    def list_columns(self) -> list[ColumnOption]:
        return self.catalog_builder.build(self.grid, self.sheet)

    def build_preview(self, column_key: str, task: "TaskKind | str", text: str) -> PreviewResult:
        """Parse ``text`` for the task and replace the current preview."""
        task = TaskKind.parse(task)
        parsed = parse_input_text(text, task.input_mode)
        self.preview = self.preview_generator.generate_preview(
            self.grid, column_key, task, parsed, self.sheet
        )
        self.last_apply = None
        return self.preview

    def _require_preview(self) -> PreviewResult:
        if self.preview is None:
            raise ApplyRefusedError("No preview has been generated.")
        return self.preview

    def fix_row(self, seq: int, sheet: str, row: int) -> PreviewRow:
        return edits.fix_row(
            self.grid, self._require_preview(), seq, sheet, row, self.index_builder
        )

    def mark_wrong(self, seq: int) -> PreviewRow:
        return edits.mark_wrong(self._require_preview(), seq)

    def discard(self, seq: int, discarded: bool = True) -> PreviewRow:
        return edits.set_discarded(self._require_preview(), seq, discarded)

    def edit_grade(self, seq: int, value: str) -> PreviewRow:
        return edits.edit_grade(self._require_preview(), seq, value)

    def search_students(self, query: str, limit: Optional[int] = None) -> list[SearchRow]:
        if self._search_rows is None:
            self._search_rows = self.index_builder.build_search_rows(self.grid, self.sheet)
        return search_students(self._search_rows, query, limit or settings.search_result_limit)

    def apply(
        self,
        confirmation: bool = False,
        highlight: Optional[bool] = None,
        highlight_color: Optional[str] = None,
    ) -> ApplyResult:
        """
        Write the current preview into the grid.

        Raises:
            ApplyRefusedError: Without confirmation, without a preview, or when
                the preview has already been applied
        """
        if not confirmation:
            raise ApplyRefusedError("Apply requires explicit confirmation.")
        preview = self._require_preview()
        if self.last_apply is not None:
            raise ApplyRefusedError("This preview has already been applied.")

        result = self.apply_engine.apply(self.grid, preview.rows, highlight, highlight_color)
        self.last_apply = result
        # Cell contents changed; search results must be rebuilt
        self._search_rows = None
        logger.info(f"Session {self.session_id} applied preview {preview.preview_id}")
        return result

    def export(self) -> bytes:
        return self.grid.serialize()

    def describe(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "sheet": self.sheet,
            "sheets": self.grid.sheet_names(),
            "has_preview": self.preview is not None,
            "applied": self.last_apply is not None,
        }
