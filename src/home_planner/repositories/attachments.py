"""Attachment write path."""

from home_planner.adapters.base import DatabaseClient
from home_planner.ids import create_id, utc_timestamp
from home_planner.rules import AttachmentInput, validate_attachment_input


async def create_attachment(
    client: DatabaseClient, project_id: str, data: AttachmentInput
) -> str:
    """Insert an attachment and return its id.

    Raises:
        RuleViolationError: If ``data`` breaks an attachment rule.
    """
    validate_attachment_input(data)
    attachment_id = create_id("attachment")
    await client.execute(
        """
        INSERT INTO attachments (
          id, project_id, room_id, task_id, expense_id, kind, uri, file_name,
          mime_type, size_bytes, created_at
        ) VALUES (
          :id, :project_id, :room_id, :task_id, :expense_id, :kind, :uri, :file_name,
          :mime_type, :size_bytes, :created_at
        )
        """,
        {
            "id": attachment_id,
            "project_id": project_id,
            "room_id": data.room_id,
            "task_id": data.task_id,
            "expense_id": data.expense_id,
            "kind": data.kind.strip(),
            "uri": data.uri.strip(),
            "file_name": data.file_name.strip() or None,
            "mime_type": (data.mime_type or "").strip() or None,
            "size_bytes": data.size_bytes,
            "created_at": utc_timestamp(),
        },
    )
    return attachment_id
