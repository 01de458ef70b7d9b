"""Project export, restore, and pre-restore snapshots.

Export reads the nine collections of one project inside a single read
transaction.  Restore validates a candidate, then, inside one
``BEGIN IMMEDIATE`` transaction, stores a snapshot of the current
state, deletes the project's rows (children first) and inserts the
candidate's rows (parents first).  Either every step commits or the
store is left exactly as it was.

Usage:
    from home_planner.backup.backup_restore import (
        export_project_backup,
        read_backup_file,
        restore_project_backup,
        write_backup_file,
    )

    async with adapter.session() as client:
        document = await export_project_backup(client, "project_1")
        write_backup_file(document, "backups/project_1.json")

        candidate = read_backup_file("backups/project_1.json")
        snapshot_id = await restore_project_backup(client, "project_1", candidate)
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from home_planner.adapters.base import DatabaseClient
from home_planner.backup.models import (
    PROJECT_BACKUP_SCHEMA,
    BackupDocument,
    BackupPayload,
    BackupRow,
    BackupSchema,
    SnapshotSummary,
)
from home_planner.backup.validation import validate_backup
from home_planner.errors import (
    BackupValidationError,
    HomePlannerError,
    ProjectMismatchError,
    TransactionError,
)
from home_planner.ids import create_id, utc_timestamp
from home_planner.repositories.transaction import rollback_and_raise

logger = logging.getLogger(__name__)

DEFAULT_APP_VERSION = "0.1.0"
DEFAULT_SNAPSHOT_LIMIT = 20
SNAPSHOT_REASON = "pre_restore"
UNENCRYPTED_WARNING = "Backup data is unencrypted. Store and share it carefully."


# ------------------------------------------------------------------
# Export
# ------------------------------------------------------------------


async def _read_project_rows(
    client: DatabaseClient,
    project_id: str,
    schema: BackupSchema = PROJECT_BACKUP_SCHEMA,
) -> BackupPayload:
    """Select every collection of a project.  Caller owns the transaction."""
    collections: dict[str, list[BackupRow]] = {}
    for table_def in schema.tables:
        rows = await client.fetch_all(
            f"SELECT {table_def.columns} FROM {table_def.name} "
            f"WHERE {table_def.scope} ORDER BY {table_def.order_by}",
            {"project_id": project_id},
        )
        collections[table_def.name] = rows
        logger.debug(f"[Backup] {table_def.name}: {len(rows)} rows")
    return BackupPayload.model_construct(**collections)


def _build_document(
    project_id: str, payload: BackupPayload, app_version: str
) -> BackupDocument:
    return BackupDocument(
        exported_at=utc_timestamp(),
        app_version=app_version,
        project_id=project_id,
        payload=payload,
        warnings=[UNENCRYPTED_WARNING],
    )


async def export_project_backup(
    client: DatabaseClient,
    project_id: str,
    app_version: str = DEFAULT_APP_VERSION,
) -> BackupDocument:
    """Export one project as a backup document.

    All nine collections are read inside one transaction, so the
    document never mixes states from before and after a concurrent
    write.  Rows are ordered by primary key (``task_tags`` by
    ``task_id, tag_id``).  A project id with no rows yields a document
    with empty collections.

    Args:
        client: Database client with no transaction open.
        project_id: Project to export.
        app_version: Version string recorded in the document.

    Returns:
        The backup document, carrying the unencrypted-data warning.

    Raises:
        StorageError: If any read fails.  No partial document is returned.
    """
    await client.begin()
    try:
        payload = await _read_project_rows(client, project_id)
        await client.commit()
    except Exception:
        try:
            await client.rollback()
        except Exception as rollback_error:
            logger.warning(
                f"[Backup] Rollback after failed export of {project_id} "
                f"also failed: {rollback_error}"
            )
        raise

    document = _build_document(project_id, payload, app_version)
    logger.info(
        f"[Backup] Exported project {project_id} "
        f"({len(PROJECT_BACKUP_SCHEMA.tables)} collections, {payload.total_rows} rows)"
    )
    return document


# ------------------------------------------------------------------
# Snapshots
# ------------------------------------------------------------------


async def _store_snapshot(client: DatabaseClient, snapshot: BackupDocument) -> str:
    """Insert a pre-restore snapshot row.  Caller owns the transaction."""
    snapshot_id = create_id("backup_snapshot")
    await client.execute(
        "INSERT INTO backup_snapshots (id, project_id, reason, backup_json, created_at) "
        "VALUES (:id, :project_id, :reason, :backup_json, :created_at)",
        {
            "id": snapshot_id,
            "project_id": snapshot.project_id,
            "reason": SNAPSHOT_REASON,
            "backup_json": json.dumps(snapshot.to_dict()),
            "created_at": utc_timestamp(),
        },
    )
    return snapshot_id


async def _keep_snapshot(client: DatabaseClient, snapshot: BackupDocument) -> None:
    """Record a snapshot in its own transaction after a restore rolled back."""
    await client.begin(immediate=True)
    try:
        snapshot_id = await _store_snapshot(client, snapshot)
        await client.commit()
    except Exception as e:
        await rollback_and_raise(
            client, f"storeBackupSnapshot({snapshot.project_id})", e
        )
    logger.info(f"[Backup] Kept snapshot {snapshot_id} of failed restore attempt")


async def list_pre_restore_snapshots(
    client: DatabaseClient,
    project_id: str,
    limit: int = DEFAULT_SNAPSHOT_LIMIT,
) -> list[SnapshotSummary]:
    """List a project's pre-restore snapshots, newest first.

    Args:
        client: Database client.
        project_id: Project whose snapshots to list.
        limit: Maximum number of snapshots returned.

    Returns:
        Snapshot summaries (id and creation time).
    """
    rows = await client.fetch_all(
        "SELECT id, created_at FROM backup_snapshots "
        "WHERE project_id = :project_id AND reason = :reason "
        "ORDER BY created_at DESC, id DESC LIMIT :limit",
        {"project_id": project_id, "reason": SNAPSHOT_REASON, "limit": limit},
    )
    return [SnapshotSummary(**row) for row in rows]


# ------------------------------------------------------------------
# Restore
# ------------------------------------------------------------------


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _insert_statement(table: str, row: BackupRow) -> tuple[str, dict[str, Any]]:
    """Build an INSERT for one row, binding values positionally by index.

    Column names come from the document, so they are quoted rather than
    interpolated; unknown columns fail in the store and abort the restore.
    """
    columns = list(row)
    if not columns:
        return f"INSERT INTO {table} DEFAULT VALUES", {}
    names = ", ".join(_quote_identifier(column) for column in columns)
    placeholders = ", ".join(f":v{i}" for i in range(len(columns)))
    params = {f"v{i}": row[column] for i, column in enumerate(columns)}
    return f"INSERT INTO {table} ({names}) VALUES ({placeholders})", params


async def _replace_project_rows(
    client: DatabaseClient,
    project_id: str,
    payload: BackupPayload,
    schema: BackupSchema = PROJECT_BACKUP_SCHEMA,
) -> int:
    """Delete a project's rows children first, then insert parents first.

    Returns:
        Number of rows inserted.
    """
    for table_def in reversed(schema.tables):
        await client.execute(
            f"DELETE FROM {table_def.name} WHERE {table_def.scope}",
            {"project_id": project_id},
        )

    inserted = 0
    for table_def in schema.tables:
        for row in payload.rows(table_def.name):
            sql, params = _insert_statement(table_def.name, row)
            await client.execute(sql, params)
            inserted += 1
        logger.debug(
            f"[Backup] Restored {len(payload.rows(table_def.name))} rows into {table_def.name}"
        )
    return inserted


async def restore_project_backup(
    client: DatabaseClient,
    project_id: str,
    candidate: Any,
    app_version: str = DEFAULT_APP_VERSION,
) -> str:
    """Replace a project's live data with a validated backup.

    Steps:

    1. Validate ``candidate``; reject before any write.
    2. Require the document's ``projectId`` to equal ``project_id``.
    3. ``BEGIN IMMEDIATE``; read the current state and store it as a
       ``pre_restore`` snapshot.
    4. Delete the project's rows, children before parents.
    5. Insert the document's rows verbatim, parents before children.
    6. Commit.

    Any failure in steps 3-5 rolls the whole transaction back.  When the
    rollback succeeds, the snapshot taken in step 3 is then recorded on
    its own so the attempt stays visible in the snapshot list.

    Args:
        client: Database client with no transaction open.
        project_id: The active project being replaced.
        candidate: Untrusted backup value, usually decoded JSON.
        app_version: Version string recorded in the snapshot.

    Returns:
        Id of the stored pre-restore snapshot.

    Raises:
        BackupValidationError: Candidate failed validation (``.reason``).
        ProjectMismatchError: Candidate belongs to another project.
        TransactionError: A write failed; the store is unchanged.
        RollbackFailedError: A write failed and so did the rollback; the
            store may be inconsistent.
        StorageError: The write lock could not be acquired.
    """
    result = validate_backup(candidate)
    if not result.ok:
        logger.warning(f"[Backup] Restore of {project_id} rejected: {result.reason}")
        raise BackupValidationError(result.reason)

    document = result.backup
    if document.project_id != project_id:
        logger.warning(
            f"[Backup] Restore of {project_id} rejected: backup is for {document.project_id}"
        )
        raise ProjectMismatchError(project_id, document.project_id)

    snapshot: BackupDocument | None = None
    await client.begin(immediate=True)
    try:
        snapshot = _build_document(
            project_id, await _read_project_rows(client, project_id), app_version
        )
        snapshot_id = await _store_snapshot(client, snapshot)
        inserted = await _replace_project_rows(client, project_id, document.payload)
        await client.commit()
    except Exception as e:
        try:
            await rollback_and_raise(client, f"restoreProjectBackup({project_id})", e)
        except TransactionError as failure:
            if failure.state_consistent and snapshot is not None:
                try:
                    await _keep_snapshot(client, snapshot)
                except HomePlannerError as snapshot_error:
                    logger.error(
                        f"[Backup] Could not keep snapshot for {project_id}: {snapshot_error}"
                    )
            raise

    logger.info(
        f"[Backup] Restored project {project_id} ({inserted} rows, snapshot {snapshot_id})"
    )
    return snapshot_id


# ------------------------------------------------------------------
# JSON files
# ------------------------------------------------------------------


def dump_backup(document: BackupDocument) -> str:
    """Serialize a document to JSON text."""
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False)


def load_backup(text: str) -> Any:
    """Decode JSON text into an untrusted candidate for ``validate_backup``.

    Raises:
        BackupValidationError: If the text is not valid JSON.
    """
    try:
        return json.loads(text)
    except ValueError as e:
        # JSONDecodeError, or an integer literal past the int digit limit
        raise BackupValidationError("Backup file is not valid JSON") from e


def default_backup_path(project_id: str) -> Path:
    """Timestamped path under ``./backups/`` for a project export."""
    timestamp = datetime.now().strftime("%Y-%m-%d-%H%M%S")
    return Path.cwd() / "backups" / f"{project_id}-{timestamp}.json"


def write_backup_file(document: BackupDocument, path: str | Path) -> Path:
    """Write a document to ``path``, creating parent directories.

    Returns:
        The path written.
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dump_backup(document), encoding="utf-8")
    return output_path


def read_backup_file(path: str | Path) -> Any:
    """Read and decode a backup file.

    Raises:
        FileNotFoundError: If the file does not exist.
        BackupValidationError: If the file is not UTF-8 encoded JSON.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise BackupValidationError("Backup file is not valid JSON") from e
    return load_backup(text)
