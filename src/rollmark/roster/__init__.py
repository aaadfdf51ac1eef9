"""Identifier/grade list parsing and per-sheet student indexes."""

from .models import (
    InputMode,
    TitleEntry,
    IdEntry,
    ParsedIdentifierList,
    StudentRow,
    SearchRow,
    StudentIndex,
)
from .parser import parse_identifier_text, parse_grade_text, parse_input_text
from .index import StudentIndexBuilder, search_students

__all__ = [
    "InputMode",
    "TitleEntry",
    "IdEntry",
    "ParsedIdentifierList",
    "StudentRow",
    "SearchRow",
    "StudentIndex",
    "parse_identifier_text",
    "parse_grade_text",
    "parse_input_text",
    "StudentIndexBuilder",
    "search_students",
]
