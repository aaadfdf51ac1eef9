"""Data models for column role detection and the column catalog."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..config import Settings, settings as default_settings


class ColumnKind(str, Enum):
    """Structural area a target column belongs to."""

    LECTURE = "lecture"
    SECTION = "section"
    UNKNOWN = "unknown"


class IdStrategy(str, Enum):
    """Which detection step produced the identifier column."""

    TARGET_MATCH = "target_match"  # most cells found in the target id set
    PATTERN = "pattern"  # most id-shaped cells within the scan window
    LOOSE_SCAN = "loose_scan"  # first id-shaped column over the first data rows
    DEFAULT = "default"  # fixed fallback column


class DetectionPolicy(BaseModel):
    """Thresholds and limits used by the column heuristics."""

    name_likeness_threshold: float = 0.5
    id_likeness_threshold: float = 0.5
    scan_window_rows: int = 50
    loose_scan_rows: int = 50
    name_scan_columns: int = 10
    first_data_row: int = 2
    header_scan_last_row: int = 5
    fallback_id_column: int = 2
    min_id_length: int = 6
    section_marker: str = "attendance section"
    lecture_marker: str = "attendance lecture"

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DetectionPolicy":
        s = settings or default_settings
        return cls(
            name_likeness_threshold=s.name_likeness_threshold,
            id_likeness_threshold=s.id_likeness_threshold,
            scan_window_rows=s.scan_window_rows,
            loose_scan_rows=s.loose_scan_rows,
            name_scan_columns=s.name_scan_columns,
            first_data_row=s.first_data_row,
            header_scan_last_row=s.header_scan_last_row,
            fallback_id_column=s.fallback_id_column,
            min_id_length=s.min_id_length,
            section_marker=s.section_marker,
            lecture_marker=s.lecture_marker,
        )


class ColumnRoles(BaseModel):
    """Inferred id and name columns of a sheet (1-based)."""

    id_col: Optional[int] = None
    name_col: int = 1
    name_col2: Optional[int] = None
    id_strategy: Optional[IdStrategy] = None

    @property
    def name_cols(self) -> tuple[int, ...]:
        if self.name_col2 is None:
            return (self.name_col,)
        return (self.name_col, self.name_col2)


class AreaRange(BaseModel):
    """Inclusive column range of one area."""

    kind: ColumnKind
    start_col: int
    end_col: int

    def contains(self, col: int) -> bool:
        return self.start_col <= col <= self.end_col

    @property
    def is_empty(self) -> bool:
        return self.end_col < self.start_col


class AreaBounds(BaseModel):
    """Area boundaries found through row 1 marker text."""

    section_col: Optional[int] = None
    lecture_col: Optional[int] = None
    max_col: int

    @property
    def has_areas(self) -> bool:
        return self.section_col is not None

    def ranges(self) -> list[AreaRange]:
        """Column ranges to scan for headers, in scan order."""
        if self.section_col is None:
            return [AreaRange(kind=ColumnKind.UNKNOWN, start_col=1, end_col=self.max_col)]

        section_end = self.lecture_col - 1 if self.lecture_col is not None else self.max_col
        ranges = [
            AreaRange(kind=ColumnKind.SECTION, start_col=self.section_col, end_col=section_end)
        ]
        if self.lecture_col is not None:
            ranges.append(
                AreaRange(kind=ColumnKind.LECTURE, start_col=self.lecture_col, end_col=self.max_col)
            )
        return ranges

    def kind_of(self, col: int) -> ColumnKind:
        """Classify a column purely by range membership."""
        if not self.has_areas:
            return ColumnKind.UNKNOWN
        for area in self.ranges():
            if area.kind != ColumnKind.UNKNOWN and area.contains(col):
                return area.kind
        return ColumnKind.UNKNOWN


class ColumnLocation(BaseModel):
    """Where a catalog entry's header sits."""

    sheet: str
    header_row: int
    col: int
    col_letter: str


class ColumnOption(BaseModel):
    """A selectable target column slot, merged by header text within an area kind."""

    key: str
    header_text: str
    kind: ColumnKind
    occurrences: int = 0
    locations: list[ColumnLocation] = Field(default_factory=list)

    @staticmethod
    def make_key(kind: ColumnKind, header_text: str) -> str:
        return f"{kind.value}::{header_text}"

    def locations_in(self, sheet: str) -> list[ColumnLocation]:
        return [loc for loc in self.locations if loc.sheet == sheet]

    @property
    def sheets(self) -> list[str]:
        seen: list[str] = []
        for loc in self.locations:
            if loc.sheet not in seen:
                seen.append(loc.sheet)
        return seen
