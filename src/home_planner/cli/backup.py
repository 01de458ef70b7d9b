"""Backup commands: export, validate, restore, snapshots.

Usage:
    home-planner export project_1 -o backups/project_1.json
    home-planner validate backups/project_1.json
    home-planner restore project_1 backups/project_1.json
    home-planner restore project_1 backups/project_1.json --yes
    home-planner snapshots project_1 --limit 5
"""

import argparse
import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from home_planner.adapters.sqlite import AsyncSQLiteConnection
from home_planner.backup.backup_restore import (
    default_backup_path,
    export_project_backup,
    list_pre_restore_snapshots,
    read_backup_file,
    restore_project_backup,
    write_backup_file,
)
from home_planner.backup.validation import validate_backup
from home_planner.config.loader import load_config
from home_planner.config.models import PlannerConfig
from home_planner.errors import (
    BackupValidationError,
    HomePlannerError,
    ProjectMismatchError,
    RollbackFailedError,
)
from home_planner.factory import get_adapter
from home_planner.schema.tables import init_database

console = Console()


@asynccontextmanager
async def _open(
    args: argparse.Namespace, config: PlannerConfig
) -> AsyncIterator[AsyncSQLiteConnection]:
    """Yield a client on the active profile with the schema in place."""
    adapter = get_adapter(args.profile, config=config)
    try:
        async with adapter.session() as client:
            await init_database(client)
            yield client
    finally:
        await adapter.close()


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_export(args: argparse.Namespace, config: PlannerConfig) -> int:
    """Export a project to a JSON file.

    Returns:
        0 on success, 1 on failure.
    """
    output = Path(args.output) if args.output else default_backup_path(args.project_id)
    try:
        async with _open(args, config) as client:
            document = await export_project_backup(
                client, args.project_id, app_version=config.app.app_version
            )
    except HomePlannerError as e:
        console.print(f"[bold red]x[/bold red] Export failed: {escape(str(e))}")
        return 1

    if not document.payload.projects:
        console.print(
            f"[yellow]No project with id {escape(args.project_id)} was found; "
            f"the backup is empty.[/yellow]"
        )

    path = write_backup_file(document, output)
    console.print(
        f"[bold green]v[/bold green] Exported [bold cyan]{args.project_id}[/bold cyan] "
        f"({document.payload.total_rows} rows) to {path}"
    )
    for warning in document.warnings or []:
        console.print(f"  [yellow]{warning}[/yellow]")
    return 0


async def _async_restore(args: argparse.Namespace, config: PlannerConfig) -> int:
    """Restore a project from a JSON file.

    Returns:
        0 on success or when cancelled, 1 on failure.
    """
    try:
        candidate = read_backup_file(args.backup_path)
    except (FileNotFoundError, BackupValidationError) as e:
        console.print(f"[bold red]x[/bold red] {escape(str(e))}")
        return 1

    if not args.yes:
        console.print(
            f"[yellow]This replaces all data of project "
            f"[bold]{args.project_id}[/bold] with {args.backup_path}.[/yellow]"
        )
        console.print("[dim]A pre-restore snapshot of the current data is kept.[/dim]")
        if not Confirm.ask("Continue?", default=False, console=console):
            console.print("Cancelled.")
            return 0

    try:
        async with _open(args, config) as client:
            snapshot_id = await restore_project_backup(
                client, args.project_id, candidate, app_version=config.app.app_version
            )
    except (BackupValidationError, ProjectMismatchError) as e:
        console.print(f"[bold red]x[/bold red] Backup rejected: {escape(str(e))}")
        return 1
    except RollbackFailedError as e:
        console.print(f"[bold red]x[/bold red] Restore failed: {escape(str(e))}")
        console.print(
            "[red]The local database may be inconsistent. "
            "Export a fresh backup before making further changes.[/red]"
        )
        return 1
    except HomePlannerError as e:
        console.print(f"[bold red]x[/bold red] Restore failed, no data was changed: {escape(str(e))}")
        return 1

    console.print(
        f"[bold green]v[/bold green] Restored [bold cyan]{args.project_id}[/bold cyan] "
        f"(snapshot {snapshot_id})"
    )
    return 0


async def _async_snapshots(args: argparse.Namespace, config: PlannerConfig) -> int:
    """List recent pre-restore snapshots of a project."""
    limit = args.limit or config.app.snapshot_list_limit
    try:
        async with _open(args, config) as client:
            snapshots = await list_pre_restore_snapshots(client, args.project_id, limit)
    except HomePlannerError as e:
        console.print(f"[bold red]x[/bold red] {escape(str(e))}")
        return 1

    if not snapshots:
        console.print(f"[dim]No snapshots for {args.project_id}.[/dim]")
        return 0

    table = Table(title="Pre-restore Snapshots", show_header=True, header_style="bold")
    table.add_column("Created", style="dim")
    table.add_column("Snapshot")
    for snapshot in snapshots:
        table.add_row(snapshot.created_at, snapshot.id)
    console.print(table)
    return 0


# ============================================================================
# Sync command wrappers
# ============================================================================


def _with_config(args: argparse.Namespace) -> PlannerConfig | None:
    config_path = Path(args.config) if args.config else None
    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return None


def cmd_export(args: argparse.Namespace) -> int:
    """Export a project backup."""
    config = _with_config(args)
    if config is None:
        return 1
    return asyncio.run(_async_export(args, config))


def cmd_restore(args: argparse.Namespace) -> int:
    """Restore a project backup."""
    config = _with_config(args)
    if config is None:
        return 1
    return asyncio.run(_async_restore(args, config))


def cmd_snapshots(args: argparse.Namespace) -> int:
    """List pre-restore snapshots."""
    config = _with_config(args)
    if config is None:
        return 1
    return asyncio.run(_async_snapshots(args, config))


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a backup file without touching the database.

    Returns:
        0 if valid, 1 otherwise.
    """
    console.print(f"Validating: {args.backup_path}")
    try:
        result = validate_backup(read_backup_file(args.backup_path))
    except (FileNotFoundError, BackupValidationError) as e:
        console.print(f"[bold red]x[/bold red] {escape(str(e))}")
        return 1

    if not result.ok:
        console.print(f"[bold red]x[/bold red] Backup is invalid: {escape(result.reason)}")
        return 1

    backup = result.backup
    console.print(
        f"[bold green]v[/bold green] Backup is valid: project "
        f"[bold cyan]{backup.project_id}[/bold cyan], exported {backup.exported_at}, "
        f"{backup.payload.total_rows} rows"
    )
    for warning in backup.warnings or []:
        console.print(f"  [yellow]{warning}[/yellow]")
    return 0
