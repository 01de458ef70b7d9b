"""home-planner: local-first home renovation planner store.

Provides the async SQLite store, the shared business rules, and
project-level backup export, validation, and restore.

Usage:
    from home_planner import AsyncSQLiteAdapter, export_project_backup
    from home_planner import validate_backup, restore_project_backup
    from home_planner import get_adapter, load_config
"""

__version__ = "0.1.0"

# Adapters
from home_planner.adapters.base import DatabaseClient
from home_planner.adapters.sqlite import AsyncSQLiteAdapter

# Backup
from home_planner.backup.backup_restore import (
    export_project_backup,
    list_pre_restore_snapshots,
    restore_project_backup,
)
from home_planner.backup.models import BackupDocument, SnapshotSummary
from home_planner.backup.validation import validate_backup

# Config
from home_planner.config.loader import load_config
from home_planner.config.models import DatabaseProfile, PlannerConfig

# Errors
from home_planner.errors import (
    BackupValidationError,
    HomePlannerError,
    ProfileNotFoundError,
    ProjectMismatchError,
    RollbackFailedError,
    StorageError,
    TransactionError,
)

# Factory
from home_planner.factory import connect_and_validate, get_adapter

# Schema
from home_planner.schema.tables import init_database

__all__ = [
    # Adapters
    "DatabaseClient",
    "AsyncSQLiteAdapter",
    # Backup
    "export_project_backup",
    "restore_project_backup",
    "list_pre_restore_snapshots",
    "validate_backup",
    "BackupDocument",
    "SnapshotSummary",
    # Config
    "load_config",
    "DatabaseProfile",
    "PlannerConfig",
    # Errors
    "HomePlannerError",
    "StorageError",
    "TransactionError",
    "RollbackFailedError",
    "BackupValidationError",
    "ProjectMismatchError",
    "ProfileNotFoundError",
    # Factory
    "get_adapter",
    "connect_and_validate",
    # Schema
    "init_database",
]
