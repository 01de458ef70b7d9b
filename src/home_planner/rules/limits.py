"""Per-field length limits shared by every entity rule."""

from home_planner.errors import RuleViolationError

INPUT_LIMITS: dict[str, int] = {
    "task_title": 120,
    "task_description": 4000,
    "waiting_reason": 100,
    "tag_name": 100,
    "event_title": 120,
    "event_company": 120,
    "event_contact_name": 120,
    "event_contact_phone": 40,
    "event_type": 40,
    "expense_category": 60,
    "expense_vendor": 120,
    "expense_notes": 2000,
    "quote_title": 120,
    "quote_scope": 4000,
    "quote_builder_name": 120,
    "quote_currency": 10,
    "quote_notes": 4000,
    "attachment_kind": 40,
    "attachment_uri": 2000,
    "attachment_file_name": 255,
    "attachment_mime_type": 100,
    "room_name": 120,
    "room_type": 40,
    "room_floor": 40,
    "project_name": 120,
    "project_currency": 10,
    "project_address": 255,
}


def assert_max_length(value: str | None, max_length: int, label: str) -> None:
    """Raise if ``value`` (trimmed) is longer than ``max_length``.

    Empty and ``None`` values always pass; presence is checked separately.

    Raises:
        RuleViolationError: ``"<label> must be <max> characters or fewer"``.
    """
    if not value:
        return
    if len(value.strip()) > max_length:
        raise RuleViolationError(f"{label} must be {max_length} characters or fewer")
