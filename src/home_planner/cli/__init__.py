"""Command line interface for the home planner store.

Usage:
    home-planner init
    home-planner --profile device export project_1 -o backups/project_1.json
    home-planner validate backups/project_1.json
    home-planner restore project_1 backups/project_1.json --yes
    home-planner snapshots project_1

Commands:
    init       - Create or upgrade the schema and report its validity
    export     - Write a project backup as JSON
    validate   - Check a backup file without touching the database
    restore    - Replace a project's data with a backup
    snapshots  - List recent pre-restore snapshots
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from home_planner.cli.backup import cmd_export, cmd_restore, cmd_snapshots, cmd_validate
from home_planner.factory import connect_and_validate

console = Console()


def _configure_logging(verbose: bool) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


async def _async_init(args: argparse.Namespace) -> int:
    """Async implementation for init command.

    Returns:
        0 on success, 1 on failure.
    """
    console.print("Preparing database...", style="dim")
    config_path = Path(args.config) if args.config else None
    result = await connect_and_validate(args.profile, config_path=config_path)

    if result.success:
        console.print(
            f"[bold green]v[/bold green] Database ready for profile: "
            f"[bold cyan]{result.profile_name}[/bold cyan]"
        )
        console.print("  Schema validation: [green]PASSED[/green]")
        if result.schema_report and result.schema_report.extra_tables:
            console.print(
                f"  Extra tables: [yellow]"
                f"{', '.join(result.schema_report.extra_tables)}[/yellow]"
            )
        return 0

    console.print(f"[bold red]x[/bold red] {escape(result.error or 'Unknown error')}")
    if result.schema_report:
        console.print("\n[bold]Schema validation report:[/bold]")
        console.print(result.schema_report.format_report(), markup=False)
    return 1


def cmd_init(args: argparse.Namespace) -> int:
    """Create or upgrade the schema.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_init(args))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="home-planner",
        description="Local home planner database and backup toolkit",
    )
    parser.add_argument("--config", help="Path to home_planner.toml")
    parser.add_argument(
        "--profile",
        help="Database profile (default: $HOME_PLANNER_PROFILE or 'default')",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_init = subparsers.add_parser("init", help="Create or upgrade the schema")
    p_init.set_defaults(func=cmd_init)

    p_export = subparsers.add_parser("export", help="Export a project backup")
    p_export.add_argument("project_id", help="Project to export")
    p_export.add_argument(
        "--output", "-o", help="Output file (default: ./backups/<project>-<time>.json)"
    )
    p_export.set_defaults(func=cmd_export)

    p_validate = subparsers.add_parser("validate", help="Validate a backup file")
    p_validate.add_argument("backup_path", help="Backup JSON file")
    p_validate.set_defaults(func=cmd_validate)

    p_restore = subparsers.add_parser("restore", help="Restore a project backup")
    p_restore.add_argument("project_id", help="Project to replace")
    p_restore.add_argument("backup_path", help="Backup JSON file")
    p_restore.add_argument(
        "--yes", "-y", action="store_true", help="Skip the confirmation prompt"
    )
    p_restore.set_defaults(func=cmd_restore)

    p_snapshots = subparsers.add_parser(
        "snapshots", help="List recent pre-restore snapshots"
    )
    p_snapshots.add_argument("project_id", help="Project whose snapshots to list")
    p_snapshots.add_argument(
        "--limit", type=int, help="Maximum snapshots shown (default from config)"
    )
    p_snapshots.set_defaults(func=cmd_snapshots)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
