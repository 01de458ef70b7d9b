"""TOML configuration loader.

Usage:
    from home_planner.config.loader import load_config

    config = load_config()                      # ./home_planner.toml
    config = load_config(Path("planner.toml"))  # explicit path
"""

import tomllib
from pathlib import Path

from home_planner.config.models import AppSettings, DatabaseProfile, PlannerConfig

CONFIG_FILENAME = "home_planner.toml"


def load_config(config_path: Path | None = None) -> PlannerConfig:
    """Load home planner configuration from a TOML file.

    Args:
        config_path: Path to the TOML file.  Defaults to
            ``home_planner.toml`` in the current working directory.

    Returns:
        PlannerConfig with all profiles and app settings.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        pydantic.ValidationError: If a profile or setting is malformed.
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(
            f"Config not found: {config_path}\n"
            f"Create {CONFIG_FILENAME} with at least one [profiles.<name>] table."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = DatabaseProfile(**profile_data)

    return PlannerConfig(
        profiles=profiles,
        app=AppSettings(**data.get("app", {})),
    )
