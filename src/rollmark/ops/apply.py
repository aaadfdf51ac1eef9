"""Apply logic for writing approved preview rows into a grid."""

import logging
import re
from typing import Optional

from ..config import settings
from ..grid import Grid
from .models import ApplyResult, PreviewRow

logger = logging.getLogger(__name__)

HEX_COLOR_RE = re.compile(r"[0-9A-Fa-f]{6}")


def normalize_fill_color(color: Optional[str], default: Optional[str] = None) -> str:
    """Return an upper-case ``RRGGBB`` colour.

    Invalid input is replaced by the default instead of failing the batch.
    """
    default = (default or settings.highlight_color).lstrip("#").upper()
    candidate = str(color or "").strip()
    if candidate.startswith("#"):
        candidate = candidate[1:]
    if HEX_COLOR_RE.fullmatch(candidate):
        return candidate.upper()
    logger.warning(f"Invalid highlight color {color!r}, using {default}")
    return default


class ApplyEngine:
    """Writes the non-discarded, resolved rows of a preview into the grid."""

    def __init__(self, default_color: Optional[str] = None):
        self.default_color = default_color or settings.highlight_color

    def apply(
        self,
        grid: Grid,
        rows: list[PreviewRow],
        highlight: Optional[bool] = None,
        highlight_color: Optional[str] = None,
    ) -> ApplyResult:
        """
        Apply preview rows.

        Discarded rows, not-found rows and rows without a target cell are
        skipped. A failed cell write is recorded and the batch continues;
        earlier writes are kept.

        Args:
            grid: The grid to write
            rows: Preview rows, possibly edited by the user
            highlight: Fill written cells (defaults to settings)
            highlight_color: ``RRGGBB`` or ``#RRGGBB``

        Returns:
            ApplyResult with counts and per-cell errors
        """
        if highlight is None:
            highlight = settings.highlight_enabled
        fill_color = None
        if highlight:
            fill_color = normalize_fill_color(
                highlight_color if highlight_color is not None else self.default_color,
                self.default_color,
            )

        updated = 0
        skipped = 0
        errors = []
        for row in rows:
            if not row.is_writable:
                skipped += 1
                continue
            try:
                grid.write_cell(row.sheet, row.row, row.col, row.new_value, fill_color)
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                message = f"{row.sheet}!{row.target_cell}: {e}"
                logger.error(f"Failed to write cell {message}")
                errors.append(message)
                continue
            updated += 1

        logger.info(
            f"Applied {updated} cell updates ({skipped} skipped, {len(errors)} failed)"
        )
        return ApplyResult(
            success=not errors,
            cells_updated=updated,
            skipped=skipped,
            fill_color=fill_color,
            errors=errors,
        )
