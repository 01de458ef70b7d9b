"""Shape and size guards for untrusted backup payloads.

Each guard returns ``(value, None)`` on success or ``(None, reason)``
on the first problem it finds.  Nothing here raises for bad input.
"""

from collections.abc import Mapping
from typing import Any

from home_planner.backup.models import (
    PROJECT_BACKUP_SCHEMA,
    BackupPayload,
    BackupRow,
    BackupSchema,
)

MAX_ROWS_PER_TABLE = 1000
MAX_TOTAL_ROWS = 5000

INVALID_PAYLOAD_SHAPE = "Invalid payload shape"


def is_record(value: Any) -> bool:
    """True for a keyed record (a JSON object), False for lists and scalars."""
    return isinstance(value, Mapping)


def is_cell_value(value: Any) -> bool:
    """True for ``str``, ``int``, ``float`` or ``None``.

    ``bool`` is rejected even though it subclasses ``int``.
    """
    if value is None or isinstance(value, str):
        return True
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_rows(value: Any, table: str) -> tuple[list[BackupRow] | None, str | None]:
    """Check one collection and copy its rows.

    Args:
        value: Candidate collection (should be a list of records).
        table: Collection name, used in the per-table cap reason.

    Returns:
        ``(rows, None)`` or ``(None, reason)``.

    Example:
        >>> as_rows([{"id": "r1", "floor": None}], "rooms")
        ([{'id': 'r1', 'floor': None}], None)
        >>> as_rows([{"id": "r1", "done": True}], "rooms")
        (None, 'Invalid payload shape')
    """
    if not isinstance(value, list):
        return None, INVALID_PAYLOAD_SHAPE
    if len(value) > MAX_ROWS_PER_TABLE:
        return None, f"{table} exceeds maximum allowed rows ({MAX_ROWS_PER_TABLE})"

    rows: list[BackupRow] = []
    for item in value:
        if not is_record(item):
            return None, INVALID_PAYLOAD_SHAPE
        row: BackupRow = {}
        for key, cell in item.items():
            if not isinstance(key, str) or not is_cell_value(cell):
                return None, INVALID_PAYLOAD_SHAPE
            row[key] = cell
        rows.append(row)
    return rows, None


def parse_payload(
    value: Any,
    schema: BackupSchema = PROJECT_BACKUP_SCHEMA,
) -> tuple[BackupPayload | None, str | None]:
    """Parse every collection, enforcing per-table and running total caps.

    Collections are parsed in ``schema.parse_order``: required ones in
    dependency order, then ``builder_quotes``.  The total is checked
    after each collection, so a later collection can trip the total cap
    although each one is within its own.  An absent or null optional
    collection is read as empty; a present but malformed one fails.

    Returns:
        ``(payload, None)`` or ``(None, reason)``.
    """
    if not is_record(value):
        return None, INVALID_PAYLOAD_SHAPE

    collections: dict[str, list[BackupRow]] = {}
    total = 0
    for table_def in schema.parse_order:
        raw = value.get(table_def.name)
        if table_def.optional and raw is None:
            rows: list[BackupRow] = []
        else:
            parsed, reason = as_rows(raw, table_def.name)
            if reason is not None:
                return None, reason
            rows = parsed or []

        collections[table_def.name] = rows
        total += len(rows)
        if total > MAX_TOTAL_ROWS:
            return None, f"Backup payload exceeds maximum allowed rows ({MAX_TOTAL_ROWS})"

    return BackupPayload.model_construct(**collections), None
