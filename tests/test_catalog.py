"""Tests for the column catalog."""

import pytest

from rollmark.errors import ColumnNotFoundError, InvalidGridError
from rollmark.mapping import ColumnCatalogBuilder, ColumnKind, resolve_option, resolve_scope


@pytest.fixture
def split_area_grid(make_grid):
    """Section marker at C, lecture marker at H, "W1" under both areas."""
    header = ["Name", "ID", "Attendance Section", None, None, None, None, "Attendance Lecture", None]
    sub = [None, None, None, "W1", None, None, None, None, "W1"]
    students = [
        ["Alice", 123456],
        ["Bob", 234567],
        ["Carol", 345678],
    ]
    return make_grid({"Sheet1": [header, sub] + students})


class TestCatalogBuild:
    """Test ColumnCatalogBuilder.build."""

    def test_same_header_in_two_areas_stays_split(self, split_area_grid):
        options = ColumnCatalogBuilder().build(split_area_grid)
        by_key = {o.key: o for o in options}

        assert "section::W1" in by_key
        assert "lecture::W1" in by_key
        assert [loc.col_letter for loc in by_key["section::W1"].locations] == ["D"]
        assert [loc.col_letter for loc in by_key["lecture::W1"].locations] == ["I"]
        assert by_key["section::W1"].locations[0].header_row == 2

    def test_sorted_by_kind_then_text(self, roster_grid):
        keys = [o.key for o in ColumnCatalogBuilder().build(roster_grid)]
        assert keys == [
            "lecture::Attendance Lecture",
            "lecture::W1",
            "lecture::W2",
            "section::Attendance Section",
            "section::W1",
            "section::W2",
            "unknown::ID",
            "unknown::Name",
        ]

    def test_data_rows_are_not_headers(self, roster_grid):
        """Scanning stops once the id column holds an id."""
        texts = {o.header_text for o in ColumnCatalogBuilder().build(roster_grid)}
        assert "x" not in texts

    def test_merges_across_sheets(self, two_sheet_grid):
        options = ColumnCatalogBuilder().build(two_sheet_grid)
        w1 = next(o for o in options if o.key == "section::W1")

        assert w1.occurrences == 2
        assert w1.sheets == ["Sec1", "Sec2"]
        assert [loc.col for loc in w1.locations] == [3, 3]

    def test_single_sheet_scope(self, two_sheet_grid):
        options = ColumnCatalogBuilder().build(two_sheet_grid, "Sec2")
        assert all(o.sheets == ["Sec2"] for o in options)

    def test_repeated_builds_are_identical(self, two_sheet_grid):
        builder = ColumnCatalogBuilder()
        first = builder.build(two_sheet_grid)
        second = builder.build(two_sheet_grid)
        assert [o.model_dump() for o in first] == [o.model_dump() for o in second]

    def test_without_markers_everything_is_unknown(self, make_grid):
        grid = make_grid({
            "S": [
                ["Name", "ID", "Quiz 1"],
                ["Alice", 123456, None],
                ["Bob", 234567, None],
            ]
        })
        options = ColumnCatalogBuilder().build(grid)
        assert {o.kind for o in options} == {ColumnKind.UNKNOWN}
        assert [o.header_text for o in options] == ["ID", "Name", "Quiz 1"]

    def test_section_marker_only(self, make_grid):
        """Without a lecture marker, row 1 only headers stay unknown."""
        grid = make_grid({
            "S": [
                ["Name", "ID", "Attendance Section", "Total"],
                [None, None, "W1", None],
                ["Alice", 123456, None, 3],
                ["Bob", 234567, None, 5],
            ]
        })
        keys = [o.key for o in ColumnCatalogBuilder().build(grid)]
        assert keys == [
            "section::W1",
            "unknown::Attendance Section",
            "unknown::ID",
            "unknown::Name",
            "unknown::Total",
        ]

    def test_section_marker_only_upgrades_repeated_row_one_header(self, make_grid):
        """A row 1 header also found below row 1 joins the section entry."""
        grid = make_grid({
            "S": [
                ["Name", "ID", "Attendance Section", "W1"],
                [None, None, "W1", None],
                ["Alice", 123456, None, None],
            ]
        })
        options = ColumnCatalogBuilder().build(grid)
        w1 = next(o for o in options if o.header_text == "W1")

        assert w1.key == "section::W1"
        assert w1.occurrences == 2
        assert "unknown::W1" not in {o.key for o in options}

    def test_empty_sheet_contributes_nothing(self, make_grid):
        grid = make_grid({"Empty": [], "S": [["Name", "ID"], ["Alice", 123456]]})
        options = ColumnCatalogBuilder().build(grid)
        assert {o.sheets[0] for o in options} == {"S"}


class TestScope:
    """Test scope resolution."""

    def test_all_sheets(self, two_sheet_grid):
        assert resolve_scope(two_sheet_grid) == ["Sec1", "Sec2"]

    def test_unknown_sheet(self, two_sheet_grid):
        with pytest.raises(InvalidGridError, match="Sheet 'Nope' was not found"):
            resolve_scope(two_sheet_grid, "Nope")


class TestResolveOption:
    """Test resolve_option."""

    def test_exact_key(self, roster_grid):
        options = ColumnCatalogBuilder().build(roster_grid)
        assert resolve_option(options, "section::W2").kind == ColumnKind.SECTION

    def test_locations_are_stable(self, two_sheet_grid):
        options = ColumnCatalogBuilder().build(two_sheet_grid)
        first = resolve_option(options, "lecture::W1")
        second = resolve_option(options, "lecture::W1")
        assert first.locations == second.locations

    def test_header_text_fallback_prefers_prefixed_kind(self, roster_grid):
        options = ColumnCatalogBuilder().build(roster_grid)
        assert resolve_option(options, "section::w1").key == "section::W1"
        assert resolve_option(options, "unknown::W2").key == "lecture::W2"

    def test_bare_header_text(self, roster_grid):
        options = ColumnCatalogBuilder().build(roster_grid)
        assert resolve_option(options, "name").key == "unknown::Name"

    def test_empty_key(self, roster_grid):
        options = ColumnCatalogBuilder().build(roster_grid)
        with pytest.raises(ColumnNotFoundError, match="Please select a target column."):
            resolve_option(options, "  ")

    def test_unknown_header(self, roster_grid):
        options = ColumnCatalogBuilder().build(roster_grid)
        with pytest.raises(ColumnNotFoundError, match="not found in the workbook headers"):
            resolve_option(options, "section::W9")
