"""Table definitions and idempotent schema setup.

``init_database`` creates every table if missing, adds columns that were
introduced after the first release to databases created by an older
version, then creates the indexes.

Usage:
    from home_planner.schema.tables import init_database

    async with adapter.session() as client:
        report = await init_database(client)
"""

import logging
import re
from dataclasses import dataclass

from home_planner.adapters.base import DatabaseClient
from home_planner.schema.comparator import validate_schema
from home_planner.schema.introspector import get_column_names
from home_planner.schema.models import SchemaValidationResult

logger = logging.getLogger(__name__)


TABLE_STATEMENTS: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS projects (
      id TEXT PRIMARY KEY NOT NULL,
      name TEXT NOT NULL,
      address TEXT,
      start_date TEXT,
      target_end_date TEXT,
      currency TEXT NOT NULL,
      home_layout TEXT NOT NULL DEFAULT 'standard',
      theme_preference TEXT NOT NULL DEFAULT 'system',
      budget_planned_total REAL NOT NULL DEFAULT 0,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL,
      archived_at TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS rooms (
      id TEXT PRIMARY KEY NOT NULL,
      project_id TEXT NOT NULL,
      name TEXT NOT NULL,
      type TEXT NOT NULL,
      floor TEXT,
      order_index INTEGER NOT NULL,
      status TEXT NOT NULL,
      budget_planned REAL NOT NULL DEFAULT 0,
      notes TEXT,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL,
      FOREIGN KEY (project_id) REFERENCES projects(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
      id TEXT PRIMARY KEY NOT NULL,
      project_id TEXT NOT NULL,
      room_id TEXT NOT NULL,
      title TEXT NOT NULL,
      description TEXT,
      phase TEXT NOT NULL,
      status TEXT NOT NULL,
      waiting_reason TEXT,
      due_at TEXT,
      start_at TEXT,
      completed_at TEXT,
      priority TEXT NOT NULL DEFAULT 'medium',
      estimate_labor REAL,
      estimate_materials REAL,
      actual_labor REAL,
      actual_materials REAL,
      sort_index INTEGER NOT NULL DEFAULT 0,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL,
      deleted_at TEXT,
      FOREIGN KEY (project_id) REFERENCES projects(id),
      FOREIGN KEY (room_id) REFERENCES rooms(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS events (
      id TEXT PRIMARY KEY NOT NULL,
      project_id TEXT NOT NULL,
      room_id TEXT,
      task_id TEXT,
      type TEXT NOT NULL,
      title TEXT NOT NULL,
      description TEXT,
      starts_at TEXT NOT NULL,
      ends_at TEXT,
      is_all_day INTEGER NOT NULL DEFAULT 0,
      company TEXT,
      contact_name TEXT,
      contact_phone TEXT,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL,
      FOREIGN KEY (project_id) REFERENCES projects(id),
      FOREIGN KEY (room_id) REFERENCES rooms(id),
      FOREIGN KEY (task_id) REFERENCES tasks(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS expenses (
      id TEXT PRIMARY KEY NOT NULL,
      project_id TEXT NOT NULL,
      room_id TEXT,
      task_id TEXT,
      category TEXT NOT NULL,
      vendor TEXT,
      amount REAL NOT NULL,
      tax_amount REAL,
      incurred_on TEXT NOT NULL,
      notes TEXT,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL,
      FOREIGN KEY (project_id) REFERENCES projects(id),
      FOREIGN KEY (room_id) REFERENCES rooms(id),
      FOREIGN KEY (task_id) REFERENCES tasks(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS builder_quotes (
      id TEXT PRIMARY KEY NOT NULL,
      project_id TEXT NOT NULL,
      room_id TEXT,
      title TEXT NOT NULL,
      scope TEXT,
      builder_name TEXT NOT NULL,
      amount REAL NOT NULL,
      currency TEXT NOT NULL,
      status TEXT NOT NULL DEFAULT 'received',
      notes TEXT,
      selected_at TEXT,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL,
      FOREIGN KEY (project_id) REFERENCES projects(id),
      FOREIGN KEY (room_id) REFERENCES rooms(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS attachments (
      id TEXT PRIMARY KEY NOT NULL,
      project_id TEXT NOT NULL,
      room_id TEXT,
      task_id TEXT,
      expense_id TEXT,
      kind TEXT NOT NULL,
      uri TEXT NOT NULL,
      file_name TEXT,
      mime_type TEXT,
      size_bytes INTEGER,
      created_at TEXT NOT NULL,
      FOREIGN KEY (project_id) REFERENCES projects(id),
      FOREIGN KEY (room_id) REFERENCES rooms(id),
      FOREIGN KEY (task_id) REFERENCES tasks(id),
      FOREIGN KEY (expense_id) REFERENCES expenses(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS tags (
      id TEXT PRIMARY KEY NOT NULL,
      project_id TEXT NOT NULL,
      name TEXT NOT NULL,
      type TEXT NOT NULL,
      color_token TEXT,
      FOREIGN KEY (project_id) REFERENCES projects(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS task_tags (
      task_id TEXT NOT NULL,
      tag_id TEXT NOT NULL,
      PRIMARY KEY (task_id, tag_id),
      FOREIGN KEY (task_id) REFERENCES tasks(id),
      FOREIGN KEY (tag_id) REFERENCES tags(id)
    );
    """,
    # No FK to projects: snapshots must survive the project row being
    # deleted and re-inserted by a restore.
    """
    CREATE TABLE IF NOT EXISTS backup_snapshots (
      id TEXT PRIMARY KEY NOT NULL,
      project_id TEXT NOT NULL,
      reason TEXT NOT NULL,
      backup_json TEXT NOT NULL,
      created_at TEXT NOT NULL
    );
    """,
]

INDEX_STATEMENTS: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_project_status_due ON tasks(project_id, status, due_at);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_project_room_phase_sort ON tasks(project_id, room_id, phase, sort_index);",
    "CREATE INDEX IF NOT EXISTS idx_events_project_starts_all_day ON events(project_id, starts_at, is_all_day);",
    "CREATE INDEX IF NOT EXISTS idx_events_project_task ON events(project_id, task_id);",
    "CREATE INDEX IF NOT EXISTS idx_expenses_project_incurred_on ON expenses(project_id, incurred_on);",
    "CREATE INDEX IF NOT EXISTS idx_rooms_project_order ON rooms(project_id, order_index);",
    "CREATE INDEX IF NOT EXISTS idx_attachments_project_created ON attachments(project_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_tags_project_name_type ON tags(project_id, name, type);",
    "CREATE INDEX IF NOT EXISTS idx_task_tags_tag_task ON task_tags(tag_id, task_id);",
    "CREATE INDEX IF NOT EXISTS idx_builder_quotes_project_status_amount ON builder_quotes(project_id, status, amount);",
    "CREATE INDEX IF NOT EXISTS idx_backup_snapshots_project_created ON backup_snapshots(project_id, created_at);",
]


@dataclass
class ColumnFix:
    """A column added to an existing table via ALTER TABLE.

    Example:
        fix = ColumnFix(table="rooms", column="floor", definition="TEXT")
        fix.to_sql()
        # 'ALTER TABLE rooms ADD COLUMN floor TEXT;'
    """

    table: str
    column: str
    definition: str

    def to_sql(self) -> str:
        """Generate ALTER TABLE ADD COLUMN statement."""
        return f"ALTER TABLE {self.table} ADD COLUMN {self.column} {self.definition};"


# Columns added after the first release, with definitions safe for
# ALTER TABLE on a populated table (NOT NULL only with a DEFAULT).
UPGRADE_COLUMNS: list[ColumnFix] = [
    ColumnFix("projects", "home_layout", "TEXT NOT NULL DEFAULT 'standard'"),
    ColumnFix("projects", "theme_preference", "TEXT NOT NULL DEFAULT 'system'"),
    ColumnFix("rooms", "floor", "TEXT"),
    ColumnFix("events", "company", "TEXT"),
]


def parse_expected_columns(statements: list[str]) -> dict[str, set[str]]:
    """Parse CREATE TABLE statements into expected columns.

    Args:
        statements: SQL strings, each containing one CREATE TABLE.

    Returns:
        Dict mapping table name to set of column names.

    Raises:
        ValueError: If no CREATE TABLE statements are found.
    """
    table_pattern = re.compile(
        r"CREATE TABLE(?:\s+IF NOT EXISTS)?\s+(\w+)\s*\(([^;]+)\);",
        re.IGNORECASE | re.DOTALL,
    )

    result: dict[str, set[str]] = {}

    for match in table_pattern.finditer("\n".join(statements)):
        table_name = match.group(1)
        body = match.group(2)

        columns: set[str] = set()
        for line in body.split("\n"):
            line = line.strip().rstrip(",")
            if not line:
                continue
            # Skip table constraints
            first_word = line.split()[0].upper()
            if first_word in ("PRIMARY", "FOREIGN", "UNIQUE", "CHECK", "CONSTRAINT"):
                continue
            columns.add(line.split()[0])

        if columns:
            result[table_name] = columns

    if not result:
        raise ValueError("No CREATE TABLE statements found")

    return result


EXPECTED_COLUMNS: dict[str, set[str]] = parse_expected_columns(TABLE_STATEMENTS)


async def init_database(client: DatabaseClient) -> SchemaValidationResult:
    """Create missing tables, upgrade older databases, then create indexes.

    Safe to run on every start.  Upgrade columns are added only when the
    comparator reports them missing, and before indexes so an index never
    names a column that is still to be added.

    Args:
        client: Database client (no transaction open).

    Returns:
        Schema validation result after setup and upgrades.

    Raises:
        StorageError: If a statement fails, e.g. an index on a column an
            unknown older schema lacks.
    """
    for statement in TABLE_STATEMENTS:
        await client.execute(statement)

    result = validate_schema(await get_column_names(client), EXPECTED_COLUMNS)
    if not result.valid:
        missing = {(diff.table, diff.column) for diff in result.missing_columns}
        for fix in UPGRADE_COLUMNS:
            if (fix.table, fix.column) in missing:
                await client.execute(fix.to_sql())
                logger.info(f"[Schema] Added column {fix.table}.{fix.column}")
        result = validate_schema(await get_column_names(client), EXPECTED_COLUMNS)

    for statement in INDEX_STATEMENTS:
        await client.execute(statement)

    if not result.valid:
        logger.warning(f"[Schema] {result.format_report()}")
    return result
