"""Project write paths."""

import logging
from typing import Any

from home_planner.adapters.base import DatabaseClient
from home_planner.ids import create_id, utc_timestamp
from home_planner.repositories.transaction import rollback_and_raise
from home_planner.rules import ProjectInput, validate_project_input

logger = logging.getLogger(__name__)

# Children before parents; the project row itself is kept.
_CLEAR_STATEMENTS = [
    "DELETE FROM task_tags "
    "WHERE task_id IN (SELECT id FROM tasks WHERE project_id = :project_id) "
    "OR tag_id IN (SELECT id FROM tags WHERE project_id = :project_id)",
    "DELETE FROM attachments WHERE project_id = :project_id",
    "DELETE FROM expenses WHERE project_id = :project_id",
    "DELETE FROM events WHERE project_id = :project_id",
    "DELETE FROM tasks WHERE project_id = :project_id",
    "DELETE FROM tags WHERE project_id = :project_id",
    "DELETE FROM builder_quotes WHERE project_id = :project_id",
    "DELETE FROM rooms WHERE project_id = :project_id",
]


async def create_project(client: DatabaseClient, data: ProjectInput) -> str:
    """Insert a project and return its id.

    Raises:
        RuleViolationError: If ``data`` breaks a project rule.
    """
    validate_project_input(data)
    project_id = create_id("project")
    now = utc_timestamp()
    await client.execute(
        """
        INSERT INTO projects (
          id, name, address, start_date, target_end_date, currency, home_layout,
          theme_preference, budget_planned_total, created_at, updated_at
        ) VALUES (
          :id, :name, :address, :start_date, :target_end_date, :currency, :home_layout,
          :theme_preference, :budget_planned_total, :now, :now
        )
        """,
        {
            **data.model_dump(),
            "id": project_id,
            "name": data.name.strip(),
            "currency": data.currency.strip().upper(),
            "now": now,
        },
    )
    logger.info(f"[Projects] Created project {project_id}")
    return project_id


async def get_project(client: DatabaseClient, project_id: str) -> dict[str, Any] | None:
    """Return the project row, or ``None``."""
    return await client.fetch_one(
        "SELECT * FROM projects WHERE id = :id LIMIT 1", {"id": project_id}
    )


async def clear_project_data(client: DatabaseClient, project_id: str) -> None:
    """Delete everything inside a project and reset its planned budget.

    Raises:
        TransactionError: A delete failed; nothing was removed.
    """
    await client.begin(immediate=True)
    try:
        for statement in _CLEAR_STATEMENTS:
            await client.execute(statement, {"project_id": project_id})
        await client.execute(
            "UPDATE projects SET budget_planned_total = 0, updated_at = :now "
            "WHERE id = :project_id",
            {"now": utc_timestamp(), "project_id": project_id},
        )
        await client.commit()
    except Exception as e:
        await rollback_and_raise(client, f"clearProjectData({project_id})", e)
    logger.info(f"[Projects] Cleared data of project {project_id}")
