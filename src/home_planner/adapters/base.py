"""Database client protocol definition.

Defines the ``DatabaseClient`` Protocol that the backup engine and the
repositories talk to.  A client is one unit-of-work handle on the
store: statements issued through it share a single connection, so an
explicit ``begin()`` / ``commit()`` / ``rollback()`` brackets them into
one transaction.  All methods are ``async def``.

Usage:
    from home_planner.adapters.base import DatabaseClient

    async def rename_room(client: DatabaseClient, room_id: str, name: str) -> None:
        await client.begin(immediate=True)
        await client.execute(
            "UPDATE rooms SET name = :name WHERE id = :id",
            {"name": name, "id": room_id},
        )
        await client.commit()
"""

from typing import Any, Protocol


class DatabaseClient(Protocol):
    """Transactional statement interface over the embedded store.

    Parameters are bound by name (``:param`` placeholders).  Rows are
    returned as plain dicts of column name to ``str | int | float | None``.
    """

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> None:
        """Execute one statement that returns no rows.

        Args:
            sql: SQL statement.
            params: Optional dict of named parameters.

        Raises:
            StorageError: If the statement fails.
            StorageTimeoutError: If the statement exceeds the timeout.

        Example:
            await client.execute(
                "DELETE FROM tags WHERE project_id = :project_id",
                {"project_id": "project_1"},
            )
        """
        ...

    async def fetch_all(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Execute a query and return every row.

        Returns:
            List of dicts, one per row.  Empty list if no matches.
        """
        ...

    async def fetch_one(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """Execute a query and return the first row, or ``None``."""
        ...

    async def begin(self, immediate: bool = False) -> None:
        """Open a transaction.

        Args:
            immediate: Acquire the exclusive write lock up front
                (``BEGIN IMMEDIATE``).  Every mutation path uses this so
                concurrent writers are serialized by the store.
        """
        ...

    async def commit(self) -> None:
        """Commit the open transaction."""
        ...

    async def rollback(self) -> None:
        """Roll back the open transaction."""
        ...

    async def close(self) -> None:
        """Release the underlying connection."""
        ...
