"""Preview, edit and apply operations on a loaded workbook."""

from .models import (
    TaskKind,
    MatchStatus,
    PreviewRow,
    ColumnMapEntry,
    PreviewSummary,
    PreviewResult,
    ApplyResult,
)
from .preview import PreviewGenerator
from .edits import fix_row, mark_wrong, set_discarded, edit_grade
from .apply import ApplyEngine, normalize_fill_color
from .engine import EditorSession
from .cache import SessionCache

__all__ = [
    "TaskKind",
    "MatchStatus",
    "PreviewRow",
    "ColumnMapEntry",
    "PreviewSummary",
    "PreviewResult",
    "ApplyResult",
    "PreviewGenerator",
    "fix_row",
    "mark_wrong",
    "set_discarded",
    "edit_grade",
    "ApplyEngine",
    "normalize_fill_color",
    "EditorSession",
    "SessionCache",
]
