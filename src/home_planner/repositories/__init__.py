"""Live write paths over the store.

Every multi-statement mutation runs inside ``BEGIN IMMEDIATE`` and
fails through ``rollback_and_raise``.

Usage:
    from home_planner.repositories import create_task, select_quote
"""

from home_planner.repositories.attachments import create_attachment
from home_planner.repositories.events import create_event
from home_planner.repositories.expenses import create_expense
from home_planner.repositories.projects import (
    clear_project_data,
    create_project,
    get_project,
)
from home_planner.repositories.quotes import create_quote, select_quote
from home_planner.repositories.rooms import create_room, delete_room
from home_planner.repositories.tasks import create_task, update_task
from home_planner.repositories.transaction import rollback_and_raise

__all__ = [
    "rollback_and_raise",
    "create_project",
    "get_project",
    "clear_project_data",
    "create_room",
    "delete_room",
    "create_task",
    "update_task",
    "create_event",
    "create_expense",
    "create_quote",
    "select_quote",
    "create_attachment",
]
