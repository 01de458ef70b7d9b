"""Event write path."""

from home_planner.adapters.base import DatabaseClient
from home_planner.ids import create_id, utc_timestamp
from home_planner.rules import EventInput, validate_event_input


async def create_event(client: DatabaseClient, project_id: str, data: EventInput) -> str:
    """Insert a calendar event and return its id.

    Raises:
        RuleViolationError: If ``data`` breaks an event rule.
    """
    validate_event_input(data)
    event_id = create_id("event")
    now = utc_timestamp()
    await client.execute(
        """
        INSERT INTO events (
          id, project_id, room_id, task_id, type, title, description, starts_at, ends_at,
          is_all_day, company, contact_name, contact_phone, created_at, updated_at
        ) VALUES (
          :id, :project_id, :room_id, :task_id, :type, :title, :description, :starts_at, :ends_at,
          :is_all_day, :company, :contact_name, :contact_phone, :now, :now
        )
        """,
        {
            "id": event_id,
            "project_id": project_id,
            "room_id": data.room_id,
            "task_id": data.task_id,
            "type": data.type or "other",
            "title": data.title.strip(),
            "description": data.description,
            "starts_at": data.starts_at,
            "ends_at": data.ends_at,
            "is_all_day": 1 if data.is_all_day else 0,
            "company": (data.company or "").strip() or None,
            "contact_name": (data.contact_name or "").strip() or None,
            "contact_phone": (data.contact_phone or "").strip() or None,
            "now": now,
        },
    )
    return event_id
