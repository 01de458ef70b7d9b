"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from home_planner.config import load_config, DatabaseProfile, PlannerConfig
"""

from home_planner.config.loader import load_config
from home_planner.config.models import AppSettings, DatabaseProfile, PlannerConfig

__all__ = ["load_config", "AppSettings", "DatabaseProfile", "PlannerConfig"]
