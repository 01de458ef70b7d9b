"""Builder quote write paths."""

import logging

from home_planner.adapters.base import DatabaseClient
from home_planner.ids import create_id, utc_timestamp
from home_planner.repositories.transaction import rollback_and_raise
from home_planner.rules import QuoteInput, validate_quote_input

logger = logging.getLogger(__name__)


async def create_quote(client: DatabaseClient, project_id: str, data: QuoteInput) -> str:
    """Insert a builder quote and return its id.

    Raises:
        RuleViolationError: If ``data`` breaks a quote rule.
    """
    validate_quote_input(data)
    quote_id = create_id("quote")
    now = utc_timestamp()
    await client.execute(
        """
        INSERT INTO builder_quotes (
          id, project_id, room_id, title, scope, builder_name, amount, currency,
          status, notes, selected_at, created_at, updated_at
        ) VALUES (
          :id, :project_id, :room_id, :title, :scope, :builder_name, :amount, :currency,
          :status, :notes, NULL, :now, :now
        )
        """,
        {
            "id": quote_id,
            "project_id": project_id,
            "room_id": data.room_id,
            "title": data.title.strip(),
            "scope": data.scope.strip() or None,
            "builder_name": data.builder_name.strip(),
            "amount": data.amount,
            "currency": data.currency.strip().upper(),
            "status": data.status,
            "notes": data.notes.strip() or None,
            "now": now,
        },
    )
    return quote_id


async def select_quote(client: DatabaseClient, project_id: str, quote_id: str) -> None:
    """Mark one quote as selected; a previously selected quote reverts to received.

    At most one quote per project is selected afterwards.

    Raises:
        TransactionError: The update failed; selection is unchanged.
    """
    now = utc_timestamp()
    await client.begin(immediate=True)
    try:
        await client.execute(
            """
            UPDATE builder_quotes
            SET
              status = CASE WHEN id = :quote_id THEN 'selected'
                            WHEN status = 'selected' THEN 'received'
                            ELSE status END,
              selected_at = CASE WHEN id = :quote_id THEN :now ELSE NULL END,
              updated_at = :now
            WHERE project_id = :project_id
            """,
            {"quote_id": quote_id, "now": now, "project_id": project_id},
        )
        await client.commit()
    except Exception as e:
        await rollback_and_raise(client, f"selectQuote({quote_id})", e)
    logger.info(f"[Quotes] Selected quote {quote_id}")
