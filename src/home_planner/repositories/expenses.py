"""Expense write path."""

from home_planner.adapters.base import DatabaseClient
from home_planner.ids import create_id, utc_timestamp
from home_planner.rules import ExpenseInput, validate_expense_input


async def create_expense(client: DatabaseClient, project_id: str, data: ExpenseInput) -> str:
    """Insert an expense and return its id.

    Raises:
        RuleViolationError: If ``data`` breaks an expense rule.
    """
    validate_expense_input(data)
    expense_id = create_id("expense")
    now = utc_timestamp()
    await client.execute(
        """
        INSERT INTO expenses (
          id, project_id, room_id, task_id, category, vendor, amount, tax_amount,
          incurred_on, notes, created_at, updated_at
        ) VALUES (
          :id, :project_id, :room_id, :task_id, :category, :vendor, :amount, :tax_amount,
          :incurred_on, :notes, :now, :now
        )
        """,
        {
            "id": expense_id,
            "project_id": project_id,
            "room_id": data.room_id,
            "task_id": data.task_id,
            "category": data.category or "other",
            "vendor": (data.vendor or "").strip() or None,
            "amount": data.amount,
            "tax_amount": data.tax_amount,
            "incurred_on": data.incurred_on,
            "notes": (data.notes or "").strip() or None,
            "now": now,
        },
    )
    return expense_id
