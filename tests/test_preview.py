"""Tests for preview generation."""

import time

import pytest

from rollmark.errors import ColumnNotFoundError, InvalidTaskError
from rollmark.ops import MatchStatus, PreviewGenerator, TaskKind
from rollmark.roster import parse_grade_text, parse_identifier_text


def quiz_rows(duplicate_at_14: bool = False) -> list[list]:
    """Header plus rows 2-14; 555555 sits in row 10 with an old quiz value."""
    rows = [["Name", "ID", "Quiz"]]
    for r in range(2, 15):
        rows.append([f"Student {r}", 100000 + r, None])
    rows[9] = ["Pat Doe", 555555, 7]
    if duplicate_at_14:
        rows[13] = ["Pat Doe Jr", 555555, None]
    return rows


def snapshot(grid):
    """All cell values of every sheet."""
    out = {}
    for sheet in grid.sheet_names():
        bounds = grid.sheet_range(sheet)
        if bounds is None:
            continue
        for r in range(1, bounds.max_row + 1):
            for c in range(1, bounds.max_col + 1):
                out[(sheet, r, c)] = grid.cell_value(sheet, r, c)
    return out


class TestTaskKind:
    """Test task parsing."""

    def test_case_insensitive(self):
        assert TaskKind.parse("Attendance") == TaskKind.ATTENDANCE
        assert TaskKind.parse(" GRADE ") == TaskKind.GRADE

    def test_unknown_task(self):
        with pytest.raises(InvalidTaskError, match="Task type must be Attendance or Grade."):
            TaskKind.parse("homework")


class TestGeneratePreview:
    """Test PreviewGenerator.generate_preview."""

    def test_single_match(self, make_grid):
        grid = make_grid({"Sheet1": quiz_rows()})
        preview = PreviewGenerator().generate_preview(
            grid, "unknown::Quiz", "attendance", parse_identifier_text("555555")
        )

        row = preview.rows[0]
        assert row.seq == 1
        assert row.match_status == MatchStatus.MATCHED
        assert (row.sheet, row.row, row.col) == ("Sheet1", 10, 3)
        assert row.target_cell == "C10"
        assert row.old_value == 7
        assert row.new_value == 1
        assert row.resolved_name == "Pat Doe"
        assert row.note == ""

    def test_duplicate_rows_are_ambiguous(self, make_grid):
        grid = make_grid({"Sheet1": quiz_rows(duplicate_at_14=True)})
        preview = PreviewGenerator().generate_preview(
            grid, "unknown::Quiz", "attendance", parse_identifier_text("555555")
        )

        row = preview.rows[0]
        assert row.match_status == MatchStatus.AMBIGUOUS
        assert row.row == 10
        assert row.note == "Duplicate ID detected in sheet; please verify match."

    def test_unknown_id_is_not_found(self, make_grid):
        grid = make_grid({"Sheet1": quiz_rows()})
        preview = PreviewGenerator().generate_preview(
            grid, "unknown::Quiz", "attendance", parse_identifier_text("555555\n999999")
        )

        row = preview.rows[1]
        assert row.match_status == MatchStatus.NOT_FOUND
        assert row.sheet == ""
        assert row.row is None
        assert row.target_cell == ""
        assert row.note == "ID not found in selected scope."
        assert row.new_value == 1

    def test_grade_values(self, roster_grid):
        parsed = parse_grade_text("234567, B+\n123456,A")
        preview = PreviewGenerator().generate_preview(roster_grid, "lecture::W2", "grade", parsed)

        assert [(r.input_id, r.target_cell, r.new_value) for r in preview.rows] == [
            ("234567", "F4", "B+"),
            ("123456", "F3", "A"),
        ]
        assert preview.task == TaskKind.GRADE

    def test_rows_follow_input_order_and_duplicates(self, roster_grid):
        parsed = parse_identifier_text("Sec A\n345678\n123456\n\n345678")
        preview = PreviewGenerator().generate_preview(
            roster_grid, "section::W1", TaskKind.ATTENDANCE, parsed
        )

        assert [r.seq for r in preview.rows] == [1, 2, 3]
        assert [r.input_id for r in preview.rows] == ["345678", "123456", "345678"]
        assert [r.section for r in preview.rows] == [1, 1, None]
        assert preview.duplicate_ids == {"345678": 2}
        assert preview.summary().duplicates == {"345678": 2}

    def test_first_sheet_with_a_hit_wins(self, two_sheet_grid):
        parsed = parse_identifier_text("567890\n678901")
        preview = PreviewGenerator().generate_preview(
            two_sheet_grid, "section::W1", "attendance", parsed
        )

        assert [(r.sheet, r.row, r.match_status) for r in preview.rows] == [
            ("Sec1", 7, MatchStatus.MATCHED),
            ("Sec2", 3, MatchStatus.MATCHED),
        ]
        assert [(e.sheet, e.col_letter) for e in preview.column_map] == [
            ("Sec1", "C"),
            ("Sec2", "C"),
        ]

    def test_single_sheet_scope(self, two_sheet_grid):
        parsed = parse_identifier_text("678901")
        preview = PreviewGenerator().generate_preview(
            two_sheet_grid, "section::W1", "attendance", parsed, sheet="Sec1"
        )
        assert preview.rows[0].match_status == MatchStatus.NOT_FOUND

    def test_no_row_is_matched_with_several_hits(self, make_grid):
        grid = make_grid({"Sheet1": quiz_rows(duplicate_at_14=True)})
        parsed = parse_identifier_text("555555\n100002\n555555")
        preview = PreviewGenerator().generate_preview(grid, "Quiz", "attendance", parsed)

        for row in preview.rows:
            if row.input_id == "555555":
                assert row.match_status == MatchStatus.AMBIGUOUS

    def test_preview_never_writes(self, roster_grid):
        before = snapshot(roster_grid)
        PreviewGenerator().generate_preview(
            roster_grid, "section::W2", "attendance", parse_identifier_text("234567\n123456")
        )
        assert snapshot(roster_grid) == before

    def test_custom_sentinel(self, roster_grid):
        preview = PreviewGenerator(attendance_sentinel="P").generate_preview(
            roster_grid, "section::W1", "attendance", parse_identifier_text("123456")
        )
        assert preview.rows[0].new_value == "P"

    def test_summary_counts(self, roster_grid):
        parsed = parse_identifier_text("123456\n999999\n234567")
        summary = PreviewGenerator().generate_preview(
            roster_grid, "section::W1", "attendance", parsed
        ).summary()

        assert (summary.total, summary.matched, summary.not_found, summary.ambiguous) == (3, 2, 1, 0)

    def test_unknown_column(self, roster_grid):
        with pytest.raises(ColumnNotFoundError):
            PreviewGenerator().generate_preview(
                roster_grid, "section::Nope", "attendance", parse_identifier_text("123456")
            )

    def test_invalid_task(self, roster_grid):
        with pytest.raises(InvalidTaskError):
            PreviewGenerator().generate_preview(
                roster_grid, "section::W1", "homework", parse_identifier_text("123456")
            )


class TestLargeRoster:
    """Test preview on a full-size roster."""

    @pytest.fixture
    def large_grid(self, make_grid):
        """1500 students, 30 week columns past the name and id."""
        header = ["Name", "ID"] + [f"Week {w}" for w in range(1, 31)]
        rows = [header]
        for r in range(1500):
            rows.append([f"Student {r}", 200000 + r] + ["x" if w % 3 == 0 else None for w in range(30)])
        return make_grid({"Roster": rows})

    def test_preview_is_fast(self, large_grid):
        text = "\n".join(str(200000 + r * 5) for r in range(300))
        started = time.perf_counter()
        preview = PreviewGenerator().generate_preview(
            large_grid, "Week 30", "attendance", parse_identifier_text(text)
        )
        elapsed = time.perf_counter() - started

        assert preview.summary().matched == 300
        assert elapsed < 5

    def test_preview_creates_no_cells(self, large_grid):
        ws = large_grid.workbook["Roster"]
        before = len(ws._cells)
        PreviewGenerator().generate_preview(
            large_grid, "Week 30", "attendance", parse_identifier_text("200000\n999999")
        )
        assert len(ws._cells) == before
