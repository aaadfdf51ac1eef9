"""Column role detection and the target column catalog."""

from .models import (
    ColumnKind,
    IdStrategy,
    DetectionPolicy,
    ColumnRoles,
    AreaRange,
    AreaBounds,
    ColumnLocation,
    ColumnOption,
)
from .detector import ColumnRoleDetector
from .catalog import ColumnCatalogBuilder, RawHeader, resolve_option, resolve_scope

__all__ = [
    "ColumnKind",
    "IdStrategy",
    "DetectionPolicy",
    "ColumnRoles",
    "AreaRange",
    "AreaBounds",
    "ColumnLocation",
    "ColumnOption",
    "ColumnRoleDetector",
    "ColumnCatalogBuilder",
    "RawHeader",
    "resolve_option",
    "resolve_scope",
]
