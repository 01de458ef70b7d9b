"""Async SQLite database adapter.

Provides ``AsyncSQLiteAdapter``, which owns a SQLAlchemy async engine
on the ``aiosqlite`` driver, and ``AsyncSQLiteConnection``, the
per-unit-of-work ``DatabaseClient`` it hands out.

Transactions are controlled explicitly: connections run in driver
autocommit mode and the caller issues ``BEGIN`` / ``BEGIN IMMEDIATE``
/ ``COMMIT`` / ``ROLLBACK`` through the client.  Every statement and
every connection-open is bounded by a wall-clock timeout.

Usage:
    from home_planner.adapters.sqlite import AsyncSQLiteAdapter

    adapter = AsyncSQLiteAdapter("sqlite:///home_planner.db")

    async with adapter.session() as client:
        rows = await client.fetch_all("SELECT id, name FROM projects")

    await adapter.close()
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from home_planner.errors import StorageError, StorageTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT = 15.0
DEFAULT_OPEN_TIMEOUT = 15.0

T = TypeVar("T")


def normalize_sqlite_url(database_url: str) -> str:
    """Normalize a SQLite URL to the ``sqlite+aiosqlite://`` scheme.

    Example:
        >>> normalize_sqlite_url("sqlite:///planner.db")
        'sqlite+aiosqlite:///planner.db'
    """
    if database_url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + database_url[len("sqlite://"):]
    return database_url


def create_async_engine_sqlite(
    database_url: str,
    busy_timeout: float = DEFAULT_QUERY_TIMEOUT,
    **kwargs: Any,
) -> AsyncEngine:
    """Create an async SQLAlchemy engine for an embedded SQLite file.

    Engine settings:

    - ``isolation_level="AUTOCOMMIT"``: the driver never opens implicit
      transactions; callers issue ``BEGIN`` themselves.
    - ``timeout``: how long a connection waits on another writer's lock
      before failing with "database is locked".
    - ``PRAGMA foreign_keys = ON`` on every new connection.

    Args:
        database_url: SQLite URL with ``sqlite+aiosqlite://`` scheme.
        busy_timeout: Seconds to wait for a competing write lock.
        **kwargs: Additional keyword arguments forwarded to
            ``create_async_engine``.

    Returns:
        Configured ``AsyncEngine``.
    """
    defaults: dict[str, Any] = {
        "isolation_level": "AUTOCOMMIT",
        "connect_args": {"timeout": busy_timeout},
        "echo": False,
    }
    # Caller kwargs override defaults
    merged = {**defaults, **kwargs}

    engine = create_async_engine(database_url, **merged)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


class AsyncSQLiteConnection:
    """One connection's worth of statements against the store.

    Implements the ``DatabaseClient`` protocol.  Obtain instances from
    ``AsyncSQLiteAdapter.connect()`` or ``AsyncSQLiteAdapter.session()``.
    """

    def __init__(self, connection: AsyncConnection, query_timeout: float) -> None:
        self._conn = connection
        self._query_timeout = query_timeout

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> None:
        """Execute one statement that returns no rows."""
        await self._run(self._conn.execute(text(sql), params or {}), "statement")

    async def fetch_all(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Execute a query and return every row as a dict."""
        result = await self._run(
            self._conn.execute(text(sql), params or {}), "query"
        )
        col_names = list(result.keys())
        return [dict(zip(col_names, row)) for row in result.fetchall()]

    async def fetch_one(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """Execute a query and return the first row, or ``None``."""
        rows = await self.fetch_all(sql, params)
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Transaction control
    # ------------------------------------------------------------------

    async def begin(self, immediate: bool = False) -> None:
        """Open a transaction (``BEGIN IMMEDIATE`` when ``immediate``)."""
        statement = "BEGIN IMMEDIATE" if immediate else "BEGIN"
        logger.debug(f"[SQLite] {statement}")
        await self._run(self._conn.exec_driver_sql(statement), "begin")

    async def commit(self) -> None:
        """Commit the open transaction."""
        await self._run(self._conn.exec_driver_sql("COMMIT"), "commit")

    async def rollback(self) -> None:
        """Roll back the open transaction."""
        await self._run(self._conn.exec_driver_sql("ROLLBACK"), "rollback")

    async def close(self) -> None:
        """Return the connection to the pool."""
        await self._conn.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run(self, awaitable: Awaitable[T], operation: str) -> T:
        """Await a driver call under the statement timeout.

        Converts driver errors to ``StorageError`` with the driver's own
        message (e.g. ``"UNIQUE constraint failed: tasks.id"``).
        """
        try:
            return await asyncio.wait_for(awaitable, self._query_timeout)
        except asyncio.TimeoutError as e:
            raise StorageTimeoutError(operation, self._query_timeout) from e
        except SQLAlchemyError as e:
            orig = getattr(e, "orig", None)
            raise StorageError(str(orig) if orig is not None else str(e)) from e


class AsyncSQLiteAdapter:
    """Owner of the async engine for one SQLite database file.

    Args:
        database_url: SQLite URL.  ``sqlite://`` is normalized to
            ``sqlite+aiosqlite://`` automatically.
        query_timeout: Seconds allowed per statement (and per lock wait).
        open_timeout: Seconds allowed to open a connection.
        **engine_kwargs: Forwarded to ``create_async_engine_sqlite``.

    Example:
        adapter = AsyncSQLiteAdapter("sqlite:///home_planner.db")
        async with adapter.session() as client:
            await client.execute("DELETE FROM tags WHERE name = :n", {"n": "old"})
        await adapter.close()
    """

    def __init__(
        self,
        database_url: str,
        query_timeout: float = DEFAULT_QUERY_TIMEOUT,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
        **engine_kwargs: Any,
    ) -> None:
        self.database_url = normalize_sqlite_url(database_url)
        self._query_timeout = query_timeout
        self._open_timeout = open_timeout
        self._engine: AsyncEngine = create_async_engine_sqlite(
            self.database_url, busy_timeout=query_timeout, **engine_kwargs
        )

    async def connect(self) -> AsyncSQLiteConnection:
        """Open a connection under the connection-open timeout.

        Raises:
            StorageTimeoutError: If opening takes longer than ``open_timeout``.
            StorageError: If the database cannot be opened.
        """
        try:
            conn = await asyncio.wait_for(self._engine.connect(), self._open_timeout)
        except asyncio.TimeoutError as e:
            raise StorageTimeoutError("open", self._open_timeout) from e
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Failed to open local database: {e}") from e
        return AsyncSQLiteConnection(conn, self._query_timeout)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSQLiteConnection]:
        """Yield a connection and always release it afterwards."""
        client = await self.connect()
        try:
            yield client
        finally:
            await client.close()

    async def test_connection(self) -> bool:
        """Run ``SELECT 1`` to verify the database is reachable."""
        async with self.session() as client:
            row = await client.fetch_one("SELECT 1 AS ok")
            return row is not None and row["ok"] == 1

    async def close(self) -> None:
        """Dispose of the engine and its connection pool."""
        if self._engine:
            await self._engine.dispose()
