"""Shared fixtures: a file-backed SQLite store and a valid backup document."""

import copy

import pytest

from home_planner.adapters.sqlite import AsyncSQLiteAdapter
from home_planner.schema.tables import init_database

TIMESTAMP = "2026-02-01T00:00:00.000Z"

VALID_BACKUP = {
    "schemaVersion": "1",
    "exportedAt": "2026-02-09T12:00:00.000Z",
    "appVersion": "0.1.0",
    "projectId": "project_1",
    "payload": {
        "projects": [
            {
                "id": "project_1",
                "name": "Home",
                "currency": "USD",
                "created_at": TIMESTAMP,
                "updated_at": TIMESTAMP,
            }
        ],
        "rooms": [
            {
                "id": "room_1",
                "project_id": "project_1",
                "name": "Kitchen",
                "type": "kitchen",
                "order_index": 1,
                "status": "active",
                "budget_planned": 0,
                "created_at": TIMESTAMP,
                "updated_at": TIMESTAMP,
            }
        ],
        "tasks": [
            {
                "id": "task_1",
                "project_id": "project_1",
                "room_id": "room_1",
                "title": "Install sink",
                "phase": "install",
                "status": "ready",
                "priority": "medium",
                "sort_index": 1,
                "created_at": TIMESTAMP,
                "updated_at": TIMESTAMP,
            }
        ],
        "events": [
            {
                "id": "event_1",
                "project_id": "project_1",
                "room_id": "room_1",
                "task_id": "task_1",
                "type": "trade_visit",
                "title": "Plumber",
                "starts_at": "2026-02-10T10:00:00.000Z",
                "created_at": TIMESTAMP,
                "updated_at": TIMESTAMP,
                "is_all_day": 0,
            }
        ],
        "expenses": [
            {
                "id": "expense_1",
                "project_id": "project_1",
                "room_id": "room_1",
                "task_id": "task_1",
                "category": "plumbing",
                "amount": 120,
                "incurred_on": "2026-02-10",
                "created_at": TIMESTAMP,
                "updated_at": TIMESTAMP,
            }
        ],
        "builder_quotes": [
            {
                "id": "quote_1",
                "project_id": "project_1",
                "room_id": "room_1",
                "title": "Kitchen install package",
                "builder_name": "ABC Builders",
                "amount": 4500,
                "currency": "USD",
                "status": "received",
                "created_at": TIMESTAMP,
                "updated_at": TIMESTAMP,
            }
        ],
        "attachments": [
            {
                "id": "attachment_1",
                "project_id": "project_1",
                "room_id": "room_1",
                "task_id": "task_1",
                "expense_id": "expense_1",
                "kind": "photo",
                "uri": "file://photo.jpg",
                "created_at": TIMESTAMP,
            }
        ],
        "tags": [
            {"id": "tag_1", "project_id": "project_1", "name": "plumber", "type": "trade"}
        ],
        "task_tags": [{"task_id": "task_1", "tag_id": "tag_1"}],
    },
}


@pytest.fixture
def valid_backup() -> dict:
    """A fresh, fully valid backup document for project_1."""
    return copy.deepcopy(VALID_BACKUP)


@pytest.fixture
async def adapter(tmp_path):
    """Adapter on a throwaway database file."""
    adapter = AsyncSQLiteAdapter(f"sqlite:///{tmp_path / 'planner.db'}")
    yield adapter
    await adapter.close()


@pytest.fixture
async def client(adapter):
    """Client on an initialized schema."""
    async with adapter.session() as client:
        await init_database(client)
        yield client
