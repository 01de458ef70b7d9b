"""Project backup: export, validation, restore, and snapshots.

Usage:
    from home_planner.backup import export_project_backup, validate_backup
    from home_planner.backup import restore_project_backup, PROJECT_BACKUP_SCHEMA
"""

from home_planner.backup.backup_restore import (
    dump_backup,
    export_project_backup,
    list_pre_restore_snapshots,
    load_backup,
    read_backup_file,
    restore_project_backup,
    write_backup_file,
)
from home_planner.backup.models import (
    PROJECT_BACKUP_SCHEMA,
    BackupDocument,
    BackupInvalid,
    BackupPayload,
    BackupSchema,
    BackupValid,
    ForeignKey,
    SnapshotSummary,
    TableDef,
)
from home_planner.backup.validation import validate_backup

__all__ = [
    "PROJECT_BACKUP_SCHEMA",
    "BackupSchema",
    "TableDef",
    "ForeignKey",
    "BackupDocument",
    "BackupPayload",
    "BackupValid",
    "BackupInvalid",
    "SnapshotSummary",
    "export_project_backup",
    "restore_project_backup",
    "list_pre_restore_snapshots",
    "validate_backup",
    "dump_backup",
    "load_backup",
    "read_backup_file",
    "write_backup_file",
]
