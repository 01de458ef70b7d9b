"""Pydantic models for home planner configuration."""

from pydantic import BaseModel, Field


class DatabaseProfile(BaseModel):
    """Database connection profile from home_planner.toml."""

    url: str
    description: str = ""


class AppSettings(BaseModel):
    """Application-level settings from the ``[app]`` table."""

    app_version: str = "0.1.0"
    snapshot_list_limit: int = Field(default=20, gt=0)
    query_timeout: float = Field(default=15.0, gt=0)
    open_timeout: float = Field(default=15.0, gt=0)


class PlannerConfig(BaseModel):
    """Complete configuration from home_planner.toml."""

    profiles: dict[str, DatabaseProfile]
    app: AppSettings = Field(default_factory=AppSettings)
