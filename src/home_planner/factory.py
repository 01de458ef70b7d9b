"""Adapter factory.

Resolves a database profile from ``home_planner.toml`` and builds an
``AsyncSQLiteAdapter`` for it.

Profile resolution order:

1. Explicit ``profile_name`` argument (``--profile`` on the CLI)
2. ``HOME_PLANNER_PROFILE`` environment variable
3. ``default``

Usage:
    from home_planner.factory import connect_and_validate, get_adapter

    result = await connect_and_validate()
    adapter = get_adapter(profile_name="default")
"""

import logging
import os
from pathlib import Path

from home_planner.adapters.sqlite import AsyncSQLiteAdapter
from home_planner.config.loader import load_config
from home_planner.config.models import DatabaseProfile, PlannerConfig
from home_planner.errors import HomePlannerError, ProfileNotFoundError
from home_planner.schema.models import ConnectionResult
from home_planner.schema.tables import init_database

logger = logging.getLogger(__name__)

PROFILE_ENV_VAR = "HOME_PLANNER_PROFILE"
DEFAULT_PROFILE = "default"


def get_active_profile_name(profile_name: str | None = None) -> str:
    """Return the profile to use (argument, then env var, then ``default``)."""
    if profile_name:
        return profile_name
    return os.environ.get(PROFILE_ENV_VAR) or DEFAULT_PROFILE


def get_active_profile(
    config: PlannerConfig, profile_name: str | None = None
) -> tuple[str, DatabaseProfile]:
    """Look up the active profile in ``config``.

    Raises:
        ProfileNotFoundError: If the profile is not configured.
    """
    name = get_active_profile_name(profile_name)
    if name not in config.profiles:
        available = ", ".join(config.profiles) or "(none)"
        raise ProfileNotFoundError(
            f"Profile '{name}' not found in config. Available: {available}"
        )
    return name, config.profiles[name]


def get_adapter(
    profile_name: str | None = None,
    config_path: Path | None = None,
    config: PlannerConfig | None = None,
) -> AsyncSQLiteAdapter:
    """Create an adapter for the active profile.

    Args:
        profile_name: Profile to use; see module docstring for fallbacks.
        config_path: TOML file to load when ``config`` is not given.
        config: Already-loaded configuration.

    Returns:
        Adapter configured with the profile URL and the ``[app]`` timeouts.

    Raises:
        FileNotFoundError: If no config file is found.
        ProfileNotFoundError: If the profile is not configured.
    """
    if config is None:
        config = load_config(config_path)
    name, profile = get_active_profile(config, profile_name)
    logger.debug(f"[Factory] Using profile '{name}': {profile.url}")
    return AsyncSQLiteAdapter(
        profile.url,
        query_timeout=config.app.query_timeout,
        open_timeout=config.app.open_timeout,
    )


async def connect_and_validate(
    profile_name: str | None = None,
    config_path: Path | None = None,
) -> ConnectionResult:
    """Open the profile's database, create or upgrade its schema, and report.

    Never raises for configuration or storage problems; they are
    reported in ``ConnectionResult.error``.

    Example:
        >>> result = await connect_and_validate("default")
        >>> if not result.success:
        ...     print(result.error)
    """
    try:
        config = load_config(config_path)
        name, _ = get_active_profile(config, profile_name)
    except (FileNotFoundError, ProfileNotFoundError) as e:
        return ConnectionResult(success=False, error=str(e))

    adapter = get_adapter(name, config=config)
    try:
        async with adapter.session() as client:
            report = await init_database(client)
    except HomePlannerError as e:
        return ConnectionResult(
            success=False,
            profile_name=name,
            error=f"Failed to connect to database: {e}",
        )
    finally:
        await adapter.close()

    if not report.valid:
        return ConnectionResult(
            success=False,
            profile_name=name,
            schema_valid=False,
            schema_report=report,
            error=f"Schema validation failed: {report.error_count} errors",
        )
    return ConnectionResult(
        success=True,
        profile_name=name,
        schema_valid=True,
        schema_report=report,
    )
