"""Event rules, used by event create and by backup validation."""

import re
from datetime import datetime, timezone

from pydantic import BaseModel

from home_planner.errors import RuleViolationError
from home_planner.rules.limits import INPUT_LIMITS, assert_max_length

MIN_EVENT_YEAR = 2000
MAX_EVENT_YEAR = 2100

_ISO_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d{3})?)?(Z|[+-]\d{2}:\d{2})$"
)


class EventInput(BaseModel):
    """Fields of a calendar event as entered by the user."""

    title: str
    starts_at: str
    type: str | None = None
    room_id: str | None = None
    task_id: str | None = None
    description: str | None = None
    ends_at: str | None = None
    is_all_day: bool = False
    company: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None


def parse_event_datetime(value: str) -> datetime | None:
    """Parse a strict ISO datetime with an explicit offset, else ``None``."""
    if not _ISO_DATETIME.match(value):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def validate_event_input(data: EventInput) -> None:
    """Validate an event.

    Raises:
        RuleViolationError: On the first rule the event breaks.
    """
    if not data.title.strip():
        raise RuleViolationError("Event title is required")
    assert_max_length(data.type, INPUT_LIMITS["event_type"], "Event type")
    assert_max_length(data.title, INPUT_LIMITS["event_title"], "Event title")
    assert_max_length(data.company, INPUT_LIMITS["event_company"], "Company")
    assert_max_length(data.contact_name, INPUT_LIMITS["event_contact_name"], "Contact name")
    assert_max_length(data.contact_phone, INPUT_LIMITS["event_contact_phone"], "Contact phone")
    if not data.starts_at:
        raise RuleViolationError("Event start is required")

    starts_at = parse_event_datetime(data.starts_at)
    if starts_at is None:
        raise RuleViolationError("Event start must be a valid ISO datetime")

    try:
        year = starts_at.astimezone(timezone.utc).year
    except OverflowError:
        year = MAX_EVENT_YEAR + 1
    if year < MIN_EVENT_YEAR or year > MAX_EVENT_YEAR:
        raise RuleViolationError(
            f"Event start year must be between {MIN_EVENT_YEAR} and {MAX_EVENT_YEAR}"
        )
