"""Schema comparison using set operations.

Compares expected columns against actual columns from the database.
Pure logic -- no I/O.

Usage:
    from home_planner.schema.comparator import validate_schema
    from home_planner.schema.introspector import get_column_names
    from home_planner.schema.tables import EXPECTED_COLUMNS

    actual = await get_column_names(client)
    result = validate_schema(actual, EXPECTED_COLUMNS)
    if not result.valid:
        print(result.format_report())
"""

from home_planner.schema.models import ColumnDiff, SchemaValidationResult


def validate_schema(
    actual_columns: dict[str, set[str]],
    expected_columns: dict[str, set[str]],
) -> SchemaValidationResult:
    """Validate actual database schema against expected columns.

    Finds tables and columns present in *expected_columns* but missing
    from *actual_columns*.  Tables only present in the database are
    reported as ``extra_tables`` and do not affect ``valid``.

    Args:
        actual_columns: Dict mapping table name to set of column names,
            as returned by ``get_column_names()``.
        expected_columns: Dict mapping table name to set of expected
            column names.

    Returns:
        ``SchemaValidationResult``.

    Examples:
        >>> validate_schema({"rooms": {"id"}}, {"rooms": {"id", "floor"}}).valid
        False
        >>> validate_schema({"rooms": {"id"}}, {}).valid
        True
    """
    actual_tables: set[str] = set(actual_columns.keys())
    expected_tables: set[str] = set(expected_columns.keys())

    missing_tables: list[str] = sorted(expected_tables - actual_tables)
    extra_tables: list[str] = sorted(actual_tables - expected_tables)

    missing_columns: list[ColumnDiff] = []
    for table_name in sorted(expected_tables & actual_tables):
        missing_cols = expected_columns[table_name] - actual_columns[table_name]
        for col_name in sorted(missing_cols):
            missing_columns.append(
                ColumnDiff(
                    table=table_name,
                    column=col_name,
                    message=f"Column '{col_name}' missing from table '{table_name}'",
                )
            )

    return SchemaValidationResult(
        valid=not missing_tables and not missing_columns,
        missing_tables=missing_tables,
        missing_columns=missing_columns,
        extra_tables=extra_tables,
    )
