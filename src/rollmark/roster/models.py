"""Data models for parsed identifier lists and student indexes."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class InputMode(str, Enum):
    """How an input text file is interpreted."""

    IDENTIFIERS = "identifiers"
    GRADES = "grades"


class TitleEntry(BaseModel):
    """A delimiter line that opens a new section."""

    type: Literal["title"] = "title"
    text: str


class IdEntry(BaseModel):
    """A student id line, with its grade in grade mode."""

    type: Literal["id"] = "id"
    id: str
    section: Optional[int] = None
    grade: Optional[str] = None


InputEntry = Annotated[Union[TitleEntry, IdEntry], Field(discriminator="type")]


class ParsedIdentifierList(BaseModel):
    """Ordered entries of an identifier or grade file plus duplicate counts."""

    mode: InputMode = InputMode.IDENTIFIERS
    ordered_entries: list[InputEntry] = Field(default_factory=list)
    target_ids: set[str] = Field(default_factory=set)
    id_counts: dict[str, int] = Field(default_factory=dict)
    section_id_counts: dict[int, dict[str, int]] = Field(default_factory=dict)

    @property
    def total_unique(self) -> int:
        return len(self.target_ids)

    def id_entries(self) -> list[IdEntry]:
        """Return the id entries in input order, titles removed."""
        return [e for e in self.ordered_entries if isinstance(e, IdEntry)]

    def titles(self) -> list[str]:
        return [e.text for e in self.ordered_entries if isinstance(e, TitleEntry)]

    def duplicate_ids(self) -> dict[str, int]:
        """Ids that appear more than once, with their counts."""
        return {sid: count for sid, count in self.id_counts.items() if count > 1}


class StudentRow(BaseModel):
    """A grid row that holds a student id."""

    row: int
    id: str
    name: str = ""


class SearchRow(StudentRow):
    """A student row tagged with its sheet, used by manual fix search."""

    sheet: str


class StudentIndex(BaseModel):
    """Per-sheet lookup from normalized id to candidate rows."""

    sheet: str
    by_id: dict[str, list[StudentRow]] = Field(default_factory=dict)
    rows: list[StudentRow] = Field(default_factory=list)

    def hits(self, student_id: str) -> list[StudentRow]:
        return self.by_id.get(student_id, [])

    def add(self, entry: StudentRow) -> None:
        self.rows.append(entry)
        self.by_id.setdefault(entry.id, []).append(entry)
