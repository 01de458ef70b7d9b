"""Project rules, used by project create."""

from typing import Literal

from pydantic import BaseModel

from home_planner.errors import RuleViolationError
from home_planner.rules.limits import INPUT_LIMITS, assert_max_length


class ProjectInput(BaseModel):
    """Fields of a project as entered by the user."""

    name: str
    currency: str = "USD"
    address: str | None = None
    start_date: str | None = None
    target_end_date: str | None = None
    home_layout: Literal["standard", "tile"] = "standard"
    theme_preference: Literal["system", "light", "dark"] = "system"
    budget_planned_total: float = 0


def validate_project_input(data: ProjectInput) -> None:
    """Validate a project.

    Raises:
        RuleViolationError: On the first rule the project breaks.
    """
    if not data.name.strip():
        raise RuleViolationError("Project name is required")
    assert_max_length(data.name, INPUT_LIMITS["project_name"], "Project name")
    assert_max_length(data.currency, INPUT_LIMITS["project_currency"], "Currency")
    assert_max_length(data.address, INPUT_LIMITS["project_address"], "Address")
