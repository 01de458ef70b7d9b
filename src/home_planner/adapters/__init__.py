"""Database adapters package.

Provides the ``DatabaseClient`` Protocol and the async SQLite adapter.

Usage:
    from home_planner.adapters import AsyncSQLiteAdapter, DatabaseClient
"""

from home_planner.adapters.base import DatabaseClient
from home_planner.adapters.sqlite import AsyncSQLiteAdapter, AsyncSQLiteConnection

__all__ = [
    "DatabaseClient",
    "AsyncSQLiteAdapter",
    "AsyncSQLiteConnection",
]
