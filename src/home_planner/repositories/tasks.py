"""Task write paths: create and update, each with its tag links."""

import logging
from typing import Literal

from home_planner.adapters.base import DatabaseClient
from home_planner.ids import create_id, utc_timestamp
from home_planner.repositories.transaction import rollback_and_raise
from home_planner.rules import TaskInput, validate_task_input

logger = logging.getLogger(__name__)

TagType = Literal["trade", "custom"]


async def _upsert_task_tags(
    client: DatabaseClient,
    task_id: str,
    project_id: str,
    data: TaskInput,
) -> None:
    """Replace a task's tag links, creating missing tags in the project.

    Runs inside the caller's transaction.  Tag names are already
    normalized by ``validate_task_input``.
    """
    wanted: list[tuple[str, TagType]] = [(name, "trade") for name in data.trade_tags]
    wanted += [(name, "custom") for name in data.custom_tags]

    await client.execute("DELETE FROM task_tags WHERE task_id = :task_id", {"task_id": task_id})
    if not wanted:
        return

    existing = await client.fetch_all(
        "SELECT id, name, type FROM tags WHERE project_id = :project_id",
        {"project_id": project_id},
    )
    tag_ids = {(row["name"], row["type"]): row["id"] for row in existing}

    for name, tag_type in wanted:
        if (name, tag_type) in tag_ids:
            continue
        tag_id = create_id("tag")
        await client.execute(
            "INSERT INTO tags (id, project_id, name, type, color_token) "
            "VALUES (:id, :project_id, :name, :type, NULL)",
            {"id": tag_id, "project_id": project_id, "name": name, "type": tag_type},
        )
        tag_ids[(name, tag_type)] = tag_id

    for key in wanted:
        await client.execute(
            "INSERT OR IGNORE INTO task_tags (task_id, tag_id) VALUES (:task_id, :tag_id)",
            {"task_id": task_id, "tag_id": tag_ids[key]},
        )


def _task_params(data: TaskInput) -> dict[str, str | None]:
    return {
        "room_id": data.room_id,
        "title": data.title.strip(),
        "description": (data.description or "").strip() or None,
        "phase": data.phase or "plan",
        "status": data.status,
        "waiting_reason": data.waiting_reason if data.status == "waiting" else None,
        "due_at": data.due_at,
        "start_at": data.start_at,
        "priority": data.priority or "medium",
    }


async def create_task(client: DatabaseClient, project_id: str, data: TaskInput) -> str:
    """Insert a task with its tags and return its id.

    Raises:
        RuleViolationError: If ``data`` breaks a task rule.
        TransactionError: A write failed; nothing was stored.
    """
    validate_task_input(data)
    task_id = create_id("task")
    now = utc_timestamp()

    await client.begin(immediate=True)
    try:
        row = await client.fetch_one(
            "SELECT COALESCE(MAX(sort_index), 0) + 1 AS value FROM tasks WHERE room_id = :room_id",
            {"room_id": data.room_id},
        )
        await client.execute(
            """
            INSERT INTO tasks (
              id, project_id, room_id, title, description, phase, status, waiting_reason,
              due_at, start_at, priority, sort_index, created_at, updated_at
            ) VALUES (
              :id, :project_id, :room_id, :title, :description, :phase, :status, :waiting_reason,
              :due_at, :start_at, :priority, :sort_index, :now, :now
            )
            """,
            {
                **_task_params(data),
                "id": task_id,
                "project_id": project_id,
                "sort_index": int(row["value"]) if row else 1,
                "now": now,
            },
        )
        await _upsert_task_tags(client, task_id, project_id, data)
        await client.commit()
    except Exception as e:
        await rollback_and_raise(client, f"createTask({task_id})", e)

    logger.info(f"[Tasks] Created task {task_id}")
    return task_id


async def update_task(
    client: DatabaseClient, project_id: str, task_id: str, data: TaskInput
) -> None:
    """Update a task and replace its tags.

    Raises:
        RuleViolationError: If ``data`` breaks a task rule.
        TransactionError: A write failed; the task is unchanged.
    """
    validate_task_input(data)

    await client.begin(immediate=True)
    try:
        await client.execute(
            """
            UPDATE tasks
            SET room_id = :room_id, title = :title, description = :description,
                phase = :phase, status = :status, waiting_reason = :waiting_reason,
                due_at = :due_at, start_at = :start_at, priority = :priority,
                updated_at = :now
            WHERE id = :id
            """,
            {**_task_params(data), "id": task_id, "now": utc_timestamp()},
        )
        await _upsert_task_tags(client, task_id, project_id, data)
        await client.commit()
    except Exception as e:
        await rollback_and_raise(client, f"updateTask({task_id})", e)
