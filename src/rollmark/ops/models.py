"""Data models for previewing and applying cell edits."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..errors import InvalidTaskError
from ..mapping import ColumnKind, ColumnOption
from ..roster.models import InputEntry, InputMode


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class TaskKind(str, Enum):
    """What gets written into the resolved cells."""

    ATTENDANCE = "attendance"  # a fixed sentinel meaning "present"
    GRADE = "grade"  # the grade text of each input line

    @classmethod
    def parse(cls, value: "str | TaskKind") -> "TaskKind":
        if isinstance(value, TaskKind):
            return value
        normalized = str(value or "").strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise InvalidTaskError("Task type must be Attendance or Grade.")

    @property
    def input_mode(self) -> InputMode:
        if self == TaskKind.GRADE:
            return InputMode.GRADES
        return InputMode.IDENTIFIERS


class MatchStatus(str, Enum):
    """How an input id was resolved to a grid row."""

    MATCHED = "matched"
    NOT_FOUND = "notFound"
    AMBIGUOUS = "ambiguous"
    MANUALLY_FIXED = "manuallyFixed"


class PreviewRow(BaseModel):
    """One prospective cell write, in input order."""

    seq: int  # 1-based position among the input ids
    input_id: str
    section: Optional[int] = None
    sheet: str = ""
    row: Optional[int] = None
    col: Optional[int] = None
    resolved_id: str = ""
    resolved_name: str = ""
    target_cell: str = ""
    old_value: Any = ""
    new_value: Any = None
    match_status: MatchStatus
    discarded: bool = False
    note: str = ""

    @property
    def has_target(self) -> bool:
        return bool(self.sheet) and self.row is not None and self.col is not None

    @property
    def is_writable(self) -> bool:
        return (
            not self.discarded
            and self.match_status != MatchStatus.NOT_FOUND
            and self.has_target
        )


class ColumnMapEntry(BaseModel):
    """Where the selected column lives in one sheet (reporting only)."""

    sheet: str
    header_text: str
    kind: ColumnKind
    header_row: int
    col: int
    col_letter: str


class PreviewSummary(BaseModel):
    """Counts over a preview's rows."""

    total: int
    matched: int
    not_found: int
    ambiguous: int
    discarded: int
    duplicates: dict[str, int] = Field(default_factory=dict)


class PreviewResult(BaseModel):
    """A side-effect-free preview of every prospective write."""

    preview_id: str
    task: TaskKind
    column: ColumnOption
    rows: list[PreviewRow] = Field(default_factory=list)
    column_map: list[ColumnMapEntry] = Field(default_factory=list)
    ordered_entries: list[InputEntry] = Field(default_factory=list)
    duplicate_ids: dict[str, int] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)

    def row_by_seq(self, seq: int) -> Optional[PreviewRow]:
        for row in self.rows:
            if row.seq == seq:
                return row
        return None

    def summary(self) -> PreviewSummary:
        statuses = [r.match_status for r in self.rows]
        return PreviewSummary(
            total=len(self.rows),
            matched=sum(
                1 for s in statuses if s in (MatchStatus.MATCHED, MatchStatus.MANUALLY_FIXED)
            ),
            not_found=statuses.count(MatchStatus.NOT_FOUND),
            ambiguous=statuses.count(MatchStatus.AMBIGUOUS),
            discarded=sum(1 for r in self.rows if r.discarded),
            duplicates=dict(self.duplicate_ids),
        )


class ApplyResult(BaseModel):
    """Outcome of writing an approved preview into the grid."""

    success: bool
    cells_updated: int = 0
    skipped: int = 0
    fill_color: Optional[str] = None
    errors: list[str] = Field(default_factory=list)
    applied_at: datetime = Field(default_factory=_utc_now)
