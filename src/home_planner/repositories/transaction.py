"""Shared failure path for multi-statement mutations.

Every write path that opens ``BEGIN IMMEDIATE`` ends its ``except``
block with ``rollback_and_raise`` so the store never keeps a
half-applied mutation and every caller sees the same error shape.

Usage:
    from home_planner.repositories.transaction import rollback_and_raise

    await client.begin(immediate=True)
    try:
        await client.execute(...)
        await client.execute(...)
        await client.commit()
    except Exception as e:
        await rollback_and_raise(client, f"deleteRoom({room_id})", e)
"""

import logging
from typing import NoReturn

from home_planner.adapters.base import DatabaseClient
from home_planner.errors import RollbackFailedError, TransactionError

logger = logging.getLogger(__name__)


async def rollback_and_raise(
    client: DatabaseClient,
    operation: str,
    error: Exception,
) -> NoReturn:
    """Roll back the open transaction, then raise.

    Never returns.  The raised message is always prefixed with
    ``operation``.

    Args:
        client: Client holding the open transaction.
        operation: Label for the failed mutation, e.g. ``"selectQuote(q1)"``.
        error: The exception that aborted the mutation.

    Raises:
        TransactionError: Rollback succeeded; the store is unchanged.
        RollbackFailedError: Rollback failed too; the store may be
            inconsistent.  Carries both causes.
    """
    try:
        await client.rollback()
    except Exception as rollback_error:
        logger.error(
            f"[Transaction] {operation} failed and rollback failed: "
            f"{error!r}; {rollback_error!r}"
        )
        raise RollbackFailedError(operation, error, rollback_error) from error

    logger.warning(f"[Transaction] {operation} rolled back: {error}")
    raise TransactionError(operation, error) from error
