"""Attachment rules, used by attachment create."""

from pydantic import BaseModel

from home_planner.errors import RuleViolationError
from home_planner.rules.limits import INPUT_LIMITS, assert_max_length


class AttachmentInput(BaseModel):
    """An attachment linked to a room, a task, or an expense."""

    kind: str
    uri: str
    file_name: str = ""
    mime_type: str | None = None
    size_bytes: int | None = None
    room_id: str | None = None
    task_id: str | None = None
    expense_id: str | None = None


def validate_attachment_input(data: AttachmentInput) -> None:
    """Validate an attachment.

    Raises:
        RuleViolationError: On the first rule the attachment breaks.
    """
    if not data.kind.strip():
        raise RuleViolationError("Attachment kind is required")
    if not data.uri.strip():
        raise RuleViolationError("Attachment URI is required")
    assert_max_length(data.kind, INPUT_LIMITS["attachment_kind"], "Attachment kind")
    assert_max_length(data.uri, INPUT_LIMITS["attachment_uri"], "Attachment URI")
    assert_max_length(data.file_name, INPUT_LIMITS["attachment_file_name"], "File name")
    assert_max_length(data.mime_type, INPUT_LIMITS["attachment_mime_type"], "MIME type")
