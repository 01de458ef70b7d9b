"""Task rules, used by task create/update and by backup validation."""

from pydantic import BaseModel, Field

from home_planner.errors import RuleViolationError
from home_planner.rules.limits import INPUT_LIMITS, assert_max_length


class TaskInput(BaseModel):
    """Fields of a task as entered by the user."""

    room_id: str
    title: str
    description: str | None = None
    phase: str | None = None
    status: str
    priority: str | None = None
    waiting_reason: str | None = None
    due_at: str | None = None
    start_at: str | None = None
    trade_tags: list[str] = Field(default_factory=list)
    custom_tags: list[str] = Field(default_factory=list)


def normalize_tag_names(values: list[str]) -> list[str]:
    """Trim, lowercase, and de-duplicate tag names, keeping first-seen order.

    Example:
        >>> normalize_tag_names([" Plumber", "plumber", "", "Tiler"])
        ['plumber', 'tiler']
    """
    seen: set[str] = set()
    result: list[str] = []
    for raw in values:
        name = raw.strip().lower()
        if not name or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


def validate_task_input(data: TaskInput) -> None:
    """Validate a task and normalize its tag lists in place.

    Raises:
        RuleViolationError: On the first rule the task breaks.
    """
    if not data.title.strip():
        raise RuleViolationError("Task title is required")
    assert_max_length(data.title, INPUT_LIMITS["task_title"], "Task title")
    assert_max_length(data.description, INPUT_LIMITS["task_description"], "Task description")
    assert_max_length(data.phase, INPUT_LIMITS["room_type"], "Task phase")
    assert_max_length(data.status, INPUT_LIMITS["room_type"], "Task status")
    assert_max_length(data.priority, INPUT_LIMITS["room_type"], "Task priority")
    if not data.room_id:
        raise RuleViolationError("Room is required")
    if data.status == "waiting" and not data.waiting_reason:
        raise RuleViolationError("Waiting reason is required when status is waiting")
    assert_max_length(data.waiting_reason, INPUT_LIMITS["waiting_reason"], "Waiting reason")

    data.trade_tags = normalize_tag_names(data.trade_tags)
    data.custom_tags = normalize_tag_names(data.custom_tags)
    for tag in data.trade_tags + data.custom_tags:
        assert_max_length(tag, INPUT_LIMITS["tag_name"], "Tag name")
