"""Backup document models and the declarative collection hierarchy.

``PROJECT_BACKUP_SCHEMA`` declares the nine collections a project backup
carries, in dependency order (parents first), with their required and
optional references.  Export, validation, and restore all iterate it.

Usage:
    from home_planner.backup.models import PROJECT_BACKUP_SCHEMA, BackupDocument

    for table_def in PROJECT_BACKUP_SCHEMA.tables:
        rows = document.payload.rows(table_def.name)
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_VERSION = "1"

# A row as carried in a backup document: column name -> cell value.
BackupRow = dict[str, str | int | float | None]


class ForeignKey(BaseModel):
    """Reference from a collection column to another collection's ``id``."""

    table: str          # referenced collection name
    field: str          # FK column in this collection


class TableDef(BaseModel):
    """Definition of one backup collection."""

    name: str                                       # collection and table name
    label: str                                      # entity name used in error reasons
    pk: str | None = "id"                           # primary key column (None for link tables)
    scope: str                                      # SQL predicate selecting a project's rows
    columns: str = "*"                              # columns exported
    order_by: str = "id"                            # deterministic export order
    parents: list[ForeignKey] = Field(default_factory=list)        # required refs
    optional_refs: list[ForeignKey] = Field(default_factory=list)  # checked only when set
    optional: bool = False                          # may be absent in older documents


class BackupSchema(BaseModel):
    """Declarative backup schema. Tables ordered by dependency (parents first)."""

    tables: list[TableDef]

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.tables]

    @property
    def parse_order(self) -> list[TableDef]:
        """Required collections first, then those older documents may omit."""
        return [t for t in self.tables if not t.optional] + [
            t for t in self.tables if t.optional
        ]


_PROJECT_SCOPE = "project_id = :project_id"

PROJECT_BACKUP_SCHEMA = BackupSchema(
    tables=[
        TableDef(name="projects", label="project", scope="id = :project_id"),
        TableDef(
            name="rooms",
            label="room",
            scope=_PROJECT_SCOPE,
            parents=[ForeignKey(table="projects", field="project_id")],
        ),
        TableDef(
            name="tasks",
            label="task",
            scope=_PROJECT_SCOPE,
            parents=[
                ForeignKey(table="projects", field="project_id"),
                ForeignKey(table="rooms", field="room_id"),
            ],
        ),
        TableDef(
            name="events",
            label="event",
            scope=_PROJECT_SCOPE,
            parents=[ForeignKey(table="projects", field="project_id")],
            optional_refs=[
                ForeignKey(table="rooms", field="room_id"),
                ForeignKey(table="tasks", field="task_id"),
            ],
        ),
        TableDef(
            name="expenses",
            label="expense",
            scope=_PROJECT_SCOPE,
            parents=[ForeignKey(table="projects", field="project_id")],
            optional_refs=[
                ForeignKey(table="rooms", field="room_id"),
                ForeignKey(table="tasks", field="task_id"),
            ],
        ),
        TableDef(
            name="builder_quotes",
            label="builder_quote",
            scope=_PROJECT_SCOPE,
            parents=[ForeignKey(table="projects", field="project_id")],
            optional_refs=[ForeignKey(table="rooms", field="room_id")],
            optional=True,
        ),
        TableDef(
            name="attachments",
            label="attachment",
            scope=_PROJECT_SCOPE,
            parents=[ForeignKey(table="projects", field="project_id")],
            optional_refs=[
                ForeignKey(table="rooms", field="room_id"),
                ForeignKey(table="tasks", field="task_id"),
                ForeignKey(table="expenses", field="expense_id"),
            ],
        ),
        TableDef(
            name="tags",
            label="tag",
            scope=_PROJECT_SCOPE,
            parents=[ForeignKey(table="projects", field="project_id")],
        ),
        TableDef(
            name="task_tags",
            label="task_tags",
            scope=(
                "task_id IN (SELECT id FROM tasks WHERE project_id = :project_id) "
                "OR tag_id IN (SELECT id FROM tags WHERE project_id = :project_id)"
            ),
            pk=None,
            columns="task_id, tag_id",
            order_by="task_id, tag_id",
            parents=[
                ForeignKey(table="tasks", field="task_id"),
                ForeignKey(table="tags", field="tag_id"),
            ],
        ),
    ]
)


# ------------------------------------------------------------------
# Document
# ------------------------------------------------------------------


class BackupPayload(BaseModel):
    """The nine collections of one project."""

    projects: list[BackupRow]
    rooms: list[BackupRow]
    tasks: list[BackupRow]
    events: list[BackupRow]
    expenses: list[BackupRow]
    builder_quotes: list[BackupRow] = Field(default_factory=list)
    attachments: list[BackupRow]
    tags: list[BackupRow]
    task_tags: list[BackupRow]

    def rows(self, table: str) -> list[BackupRow]:
        """Return the rows of a collection by name."""
        return getattr(self, table)

    @property
    def total_rows(self) -> int:
        return sum(len(self.rows(name)) for name in PROJECT_BACKUP_SCHEMA.names)


class BackupDocument(BaseModel):
    """Versioned, in-transit representation of one project's data.

    Field aliases match the exchanged JSON (``schemaVersion``,
    ``exportedAt``, ``appVersion``, ``projectId``).
    """

    model_config = ConfigDict(populate_by_name=True)

    schema_version: Literal["1"] = Field(default=SCHEMA_VERSION, alias="schemaVersion")
    exported_at: str = Field(alias="exportedAt")
    app_version: str = Field(alias="appVersion")
    project_id: str = Field(alias="projectId")
    payload: BackupPayload
    warnings: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the exchange form (camelCase keys, no ``warnings`` if unset)."""
        data = self.model_dump(by_alias=True)
        if self.warnings is None:
            data.pop("warnings")
        return data


# ------------------------------------------------------------------
# Results
# ------------------------------------------------------------------


class BackupValid(BaseModel):
    """Validation passed; ``backup`` is the normalized document."""

    ok: Literal[True] = True
    backup: BackupDocument


class BackupInvalid(BaseModel):
    """Validation failed with a single human-readable reason."""

    ok: Literal[False] = False
    reason: str


BackupValidationResult = BackupValid | BackupInvalid


class SnapshotSummary(BaseModel):
    """A stored pre-restore snapshot as listed to the user."""

    id: str
    created_at: str
