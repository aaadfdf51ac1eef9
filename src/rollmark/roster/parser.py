"""Parsing of identifier and grade text files.

Both formats are line based. In identifier mode every line of six or more
digits is an id and any other non-blank line is a section title::

    Sec A
    123456
    234567

    345678

Here the first two ids belong to section 1 and ``345678`` is sectionless
because the blank line closes the section.

Grade mode uses ``id,grade`` lines. The grade may itself contain commas. A
line whose left part is not an id is a title, exactly like identifier mode.
"""

import logging
from collections import Counter
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Iterator, Optional

from ..errors import EmptyInputError, MissingGradeError
from ..ids import is_id_token, normalize_id
from .models import IdEntry, InputMode, ParsedIdentifierList, TitleEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _SectionState:
    """Accumulator threaded through the line fold."""

    current_section: Optional[int] = None
    titles_seen: int = 0


# A classified line: ("title", text) or ("id", (id, grade))
_Classified = tuple[str, object]
_Classifier = Callable[[str], _Classified]


def _split_lines(text: str) -> list[str]:
    return text.replace("\r\n", "\n").split("\n")


def _classify_identifier_line(line: str) -> _Classified:
    if is_id_token(line):
        return "id", (normalize_id(line), None)
    return "title", line


def _classify_grade_line(line: str) -> _Classified:
    parts = [p.strip() for p in line.split(",")]
    if len(parts) < 2:
        return "title", line

    sid = normalize_id(parts[0])
    if not is_id_token(sid):
        return "title", line

    grade = ",".join(parts[1:]).strip()
    if not grade:
        raise MissingGradeError(sid)
    return "id", (sid, grade)


def _step(
    state: _SectionState, raw_line: str, classify: _Classifier
) -> tuple[Optional[TitleEntry | IdEntry], _SectionState]:
    """Consume one line, returning the entry it produced and the next state."""
    line = raw_line.strip()
    if not line:
        return None, replace(state, current_section=None)

    kind, payload = classify(line)
    if kind == "title":
        titles_seen = state.titles_seen + 1
        return TitleEntry(text=line), _SectionState(
            current_section=titles_seen, titles_seen=titles_seen
        )

    sid, grade = payload
    return IdEntry(id=sid, section=state.current_section, grade=grade), state


def _fold(lines: Iterable[str], classify: _Classifier) -> Iterator[TitleEntry | IdEntry]:
    state = _SectionState()
    for line in lines:
        entry, state = _step(state, line, classify)
        if entry is not None:
            yield entry


def _build(entries: list[TitleEntry | IdEntry], mode: InputMode) -> ParsedIdentifierList:
    ids = [e for e in entries if isinstance(e, IdEntry)]
    if not ids:
        if mode == InputMode.GRADES:
            raise EmptyInputError("No valid grade rows found.")
        raise EmptyInputError(
            "No valid student IDs found. IDs must be numeric and at least 6 digits."
        )

    section_counts: dict[int, dict[str, int]] = {}
    section_no = 0
    for entry in entries:
        if isinstance(entry, TitleEntry):
            section_no += 1
            section_counts[section_no] = {}
    for sid_entry in ids:
        if sid_entry.section is not None:
            bucket = section_counts[sid_entry.section]
            bucket[sid_entry.id] = bucket.get(sid_entry.id, 0) + 1

    parsed = ParsedIdentifierList(
        mode=mode,
        ordered_entries=entries,
        target_ids={e.id for e in ids},
        id_counts=dict(Counter(e.id for e in ids)),
        section_id_counts=section_counts,
    )
    logger.info(
        f"Parsed {len(ids)} {mode.value} entries "
        f"({parsed.total_unique} unique, {len(section_counts)} sections)"
    )
    return parsed


def parse_identifier_text(text: str) -> ParsedIdentifierList:
    """Parse an identifier list. Raises EmptyInputError when no id is found."""
    entries = list(_fold(_split_lines(text), _classify_identifier_line))
    return _build(entries, InputMode.IDENTIFIERS)


def parse_grade_text(text: str) -> ParsedIdentifierList:
    """Parse ``id,grade`` lines.

    Raises MissingGradeError for an id with an empty grade and EmptyInputError
    when no grade row is found.
    """
    entries = list(_fold(_split_lines(text), _classify_grade_line))
    return _build(entries, InputMode.GRADES)


def parse_input_text(text: str, mode: InputMode) -> ParsedIdentifierList:
    if mode == InputMode.GRADES:
        return parse_grade_text(text)
    return parse_identifier_text(text)
