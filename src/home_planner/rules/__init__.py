"""Business rules shared by live create/update paths and backup restore.

A restored row must pass exactly the rules a row entered through the
app would, so both paths import from here.

Usage:
    from home_planner.rules import TaskInput, validate_task_input
"""

from home_planner.rules.attachments import AttachmentInput, validate_attachment_input
from home_planner.rules.events import EventInput, validate_event_input
from home_planner.rules.expenses import ExpenseInput, validate_expense_input
from home_planner.rules.limits import INPUT_LIMITS, assert_max_length
from home_planner.rules.projects import ProjectInput, validate_project_input
from home_planner.rules.quotes import QuoteInput, validate_quote_input
from home_planner.rules.rooms import RoomInput, validate_room_input
from home_planner.rules.tasks import TaskInput, normalize_tag_names, validate_task_input

__all__ = [
    "INPUT_LIMITS",
    "assert_max_length",
    "ProjectInput",
    "validate_project_input",
    "RoomInput",
    "validate_room_input",
    "TaskInput",
    "normalize_tag_names",
    "validate_task_input",
    "EventInput",
    "validate_event_input",
    "ExpenseInput",
    "validate_expense_input",
    "QuoteInput",
    "validate_quote_input",
    "AttachmentInput",
    "validate_attachment_input",
]
