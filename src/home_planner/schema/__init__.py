"""Schema setup, introspection, and validation.

Usage:
    from home_planner.schema import init_database, validate_schema, EXPECTED_COLUMNS
"""

from home_planner.schema.comparator import validate_schema
from home_planner.schema.introspector import get_column_names
from home_planner.schema.models import (
    ColumnDiff,
    ConnectionResult,
    SchemaValidationResult,
)
from home_planner.schema.tables import (
    EXPECTED_COLUMNS,
    UPGRADE_COLUMNS,
    ColumnFix,
    init_database,
    parse_expected_columns,
)

__all__ = [
    "validate_schema",
    "get_column_names",
    "SchemaValidationResult",
    "ColumnDiff",
    "ConnectionResult",
    "EXPECTED_COLUMNS",
    "UPGRADE_COLUMNS",
    "ColumnFix",
    "init_database",
    "parse_expected_columns",
]
