"""Catalog of addressable target columns across one or all sheets."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import ColumnNotFoundError, InvalidGridError
from ..grid import Grid, cell_text, col_letter
from .detector import ColumnRoleDetector
from .models import AreaBounds, ColumnKind, ColumnLocation, ColumnOption

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawHeader:
    """A header cell collected before kinds are assigned."""

    sheet: str
    header_row: int
    col: int
    text: str
    scan_pass: ColumnKind  # area pass that found it; row 1 is always UNKNOWN


def resolve_scope(grid: Grid, sheet: Optional[str] = None) -> list[str]:
    """
    Resolve the sheets an operation covers.

    Args:
        grid: The grid
        sheet: A single sheet name, or None for every sheet

    Returns:
        Sheet names in workbook order

    Raises:
        InvalidGridError: If the grid has no sheets or ``sheet`` is unknown
    """
    names = grid.sheet_names()
    if not names:
        raise InvalidGridError("The workbook has no sheets.")
    if sheet is None:
        return names
    if sheet not in names:
        raise InvalidGridError(f"Sheet '{sheet}' was not found in the workbook.")
    return [sheet]


class ColumnCatalogBuilder:
    """Builds the column catalog in two phases.

    Phase one collects raw header tuples: every non-empty row 1 cell, then the
    cells of rows 2 to ``header_scan_last_row`` inside each detected area. Phase
    two assigns each tuple a kind from its sheet's area ranges and merges
    tuples by ``(kind, header text)``. Same-named headers that live in
    different areas therefore never collapse into one entry.

    With only a section marker there is no range split: a header takes the
    section kind when its text was found in the rows below row 1, and row 1
    only headers stay unknown.
    """

    def __init__(self, detector: Optional[ColumnRoleDetector] = None):
        self.detector = detector or ColumnRoleDetector()

    @property
    def policy(self):
        return self.detector.policy

    def build(self, grid: Grid, sheet: Optional[str] = None) -> list[ColumnOption]:
        """Return the sorted catalog for one sheet or all sheets."""
        sheets = resolve_scope(grid, sheet)

        raw: list[RawHeader] = []
        areas_by_sheet: dict[str, AreaBounds] = {}
        for sheet_name in sheets:
            areas = self.detector.detect_areas(grid, sheet_name)
            if areas is None:
                continue
            areas_by_sheet[sheet_name] = areas
            raw.extend(self._collect_sheet(grid, sheet_name, areas))

        options = self._partition(raw, areas_by_sheet)
        logger.info(
            f"Column catalog: {len(options)} options from {len(raw)} header cells "
            f"in {len(areas_by_sheet)} sheets"
        )
        return options

    def _collect_sheet(self, grid: Grid, sheet: str, areas: AreaBounds) -> list[RawHeader]:
        collected = []

        for col in range(1, areas.max_col + 1):
            text = cell_text(grid.cell_value(sheet, 1, col)).strip()
            if text:
                collected.append(RawHeader(sheet, 1, col, text, ColumnKind.UNKNOWN))

        roles = self.detector.detect_roles(grid, sheet)
        for area in areas.ranges():
            if area.is_empty:
                continue
            for row in range(2, self.policy.header_scan_last_row + 1):
                # data has begun once the id column holds an id
                if self.detector.is_id_shaped(grid.cell_value(sheet, row, roles.id_col)):
                    break
                for col in range(area.start_col, area.end_col + 1):
                    text = cell_text(grid.cell_value(sheet, row, col)).strip()
                    if text:
                        collected.append(RawHeader(sheet, row, col, text, area.kind))

        return collected

    def _partition(
        self, raw: list[RawHeader], areas_by_sheet: dict[str, AreaBounds]
    ) -> list[ColumnOption]:
        by_key: dict[tuple[ColumnKind, str], ColumnOption] = {}
        scanned = {
            (h.sheet, h.text.lower()) for h in raw if h.scan_pass != ColumnKind.UNKNOWN
        }

        for header in raw:
            kind = self._kind_of(header, areas_by_sheet[header.sheet], scanned)
            merge_key = (kind, header.text.lower())
            option = by_key.get(merge_key)
            if option is None:
                option = ColumnOption(
                    key=ColumnOption.make_key(kind, header.text),
                    header_text=header.text,
                    kind=kind,
                )
                by_key[merge_key] = option
            option.locations.append(
                ColumnLocation(
                    sheet=header.sheet,
                    header_row=header.header_row,
                    col=header.col,
                    col_letter=col_letter(header.col),
                )
            )
            option.occurrences += 1

        return sorted(by_key.values(), key=lambda o: (o.kind.value, o.header_text.lower()))

    @staticmethod
    def _kind_of(
        header: RawHeader, areas: AreaBounds, scanned: set[tuple[str, str]]
    ) -> ColumnKind:
        if areas.section_col is not None and areas.lecture_col is not None:
            return areas.kind_of(header.col)
        if areas.section_col is not None and (header.sheet, header.text.lower()) in scanned:
            return ColumnKind.SECTION
        return ColumnKind.UNKNOWN


def resolve_option(options: list[ColumnOption], column_key: str) -> ColumnOption:
    """
    Find the selected catalog entry.

    An exact key match wins. Otherwise the header text after ``kind::`` (or the
    whole key when it has no kind prefix) is matched, exactly and then
    case-insensitively, preferring entries of the prefixed kind.

    Raises:
        ColumnNotFoundError: If nothing matches
    """
    key = (column_key or "").strip()
    if not key:
        raise ColumnNotFoundError("Please select a target column.")

    for option in options:
        if option.key == key:
            return option

    kind_prefix = None
    header_text = key
    if "::" in key:
        kind_prefix, header_text = key.split("::", 1)
        kind_prefix = kind_prefix.lower()
    # stable sort keeps catalog order within each group
    candidates = sorted(options, key=lambda o: o.kind.value != kind_prefix)

    for option in candidates:
        if option.header_text == header_text:
            return option
    lowered = header_text.lower()
    for option in candidates:
        if option.header_text.lower() == lowered:
            return option

    raise ColumnNotFoundError("Selected column was not found in the workbook headers.")
