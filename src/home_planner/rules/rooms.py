"""Room rules, used by room create."""

from pydantic import BaseModel

from home_planner.errors import RuleViolationError
from home_planner.rules.limits import INPUT_LIMITS, assert_max_length


class RoomInput(BaseModel):
    """Fields of a room as entered by the user."""

    name: str
    type: str = "other"
    floor: str | None = None
    budget_planned: float = 0


def validate_room_input(data: RoomInput) -> None:
    """Validate a room.

    Raises:
        RuleViolationError: On the first rule the room breaks.
    """
    if not data.name.strip():
        raise RuleViolationError("Room name is required")
    assert_max_length(data.name, INPUT_LIMITS["room_name"], "Room name")
    assert_max_length(data.type, INPUT_LIMITS["room_type"], "Room type")
    assert_max_length(data.floor, INPUT_LIMITS["room_floor"], "Room floor")
