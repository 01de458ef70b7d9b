"""Room write paths."""

import logging

from home_planner.adapters.base import DatabaseClient
from home_planner.ids import create_id, utc_timestamp
from home_planner.repositories.transaction import rollback_and_raise
from home_planner.rules import RoomInput, validate_room_input

logger = logging.getLogger(__name__)


async def create_room(client: DatabaseClient, project_id: str, data: RoomInput) -> str:
    """Append a room to the end of the project's room order.

    Raises:
        RuleViolationError: If ``data`` breaks a room rule.
    """
    validate_room_input(data)
    room_id = create_id("room")
    now = utc_timestamp()
    await client.begin(immediate=True)
    try:
        row = await client.fetch_one(
            "SELECT COALESCE(MAX(order_index), 0) + 1 AS value "
            "FROM rooms WHERE project_id = :project_id",
            {"project_id": project_id},
        )
        await client.execute(
            """
            INSERT INTO rooms (
              id, project_id, name, type, floor, order_index, status,
              budget_planned, created_at, updated_at
            ) VALUES (
              :id, :project_id, :name, :type, :floor, :order_index, 'active',
              :budget_planned, :now, :now
            )
            """,
            {
                "id": room_id,
                "project_id": project_id,
                "name": data.name.strip(),
                "type": data.type,
                "floor": data.floor,
                "order_index": int(row["value"]) if row else 1,
                "budget_planned": data.budget_planned,
                "now": now,
            },
        )
        await client.commit()
    except Exception as e:
        await rollback_and_raise(client, f"createRoom({room_id})", e)
    return room_id


async def delete_room(client: DatabaseClient, project_id: str, room_id: str) -> None:
    """Delete a room with everything attached to it.

    Removes the room's tasks (and their tag links, events, expenses and
    attachments), quotes, and events, then prunes tags no task uses.

    Raises:
        TransactionError: A delete failed; nothing was removed.
    """
    params = {"room_id": room_id, "project_id": project_id}
    await client.begin(immediate=True)
    try:
        await client.execute(
            "DELETE FROM task_tags "
            "WHERE task_id IN (SELECT id FROM tasks WHERE room_id = :room_id)",
            params,
        )
        await client.execute(
            """
            DELETE FROM attachments
            WHERE room_id = :room_id
               OR task_id IN (SELECT id FROM tasks WHERE room_id = :room_id)
               OR expense_id IN (SELECT id FROM expenses WHERE room_id = :room_id)
            """,
            params,
        )
        await client.execute(
            "DELETE FROM builder_quotes WHERE room_id = :room_id AND project_id = :project_id",
            params,
        )
        await client.execute(
            """
            DELETE FROM events
            WHERE room_id = :room_id
               OR task_id IN (SELECT id FROM tasks WHERE room_id = :room_id)
            """,
            params,
        )
        await client.execute(
            """
            DELETE FROM expenses
            WHERE room_id = :room_id
               OR task_id IN (SELECT id FROM tasks WHERE room_id = :room_id)
            """,
            params,
        )
        await client.execute("DELETE FROM tasks WHERE room_id = :room_id", params)
        await client.execute(
            "DELETE FROM rooms WHERE id = :room_id AND project_id = :project_id", params
        )
        await client.execute(
            "DELETE FROM tags WHERE project_id = :project_id "
            "AND id NOT IN (SELECT tag_id FROM task_tags)",
            params,
        )
        await client.commit()
    except Exception as e:
        await rollback_and_raise(client, f"deleteRoom({room_id})", e)
    logger.info(f"[Rooms] Deleted room {room_id}")
