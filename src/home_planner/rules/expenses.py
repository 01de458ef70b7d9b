"""Expense rules, used by expense create and by backup validation."""

import math

from pydantic import BaseModel

from home_planner.errors import RuleViolationError
from home_planner.rules.limits import INPUT_LIMITS, assert_max_length

MAX_EXPENSE_AMOUNT = 1_000_000


class ExpenseInput(BaseModel):
    """Fields of an expense as entered by the user."""

    amount: float
    incurred_on: str
    category: str | None = None
    vendor: str | None = None
    notes: str | None = None
    room_id: str | None = None
    task_id: str | None = None
    tax_amount: float | None = None


def validate_expense_input(data: ExpenseInput) -> None:
    """Validate an expense.

    Raises:
        RuleViolationError: On the first rule the expense breaks.
    """
    if not math.isfinite(data.amount) or data.amount <= 0:
        raise RuleViolationError("Expense amount must be greater than 0")
    if data.amount > MAX_EXPENSE_AMOUNT:
        raise RuleViolationError(f"Expense amount must be {MAX_EXPENSE_AMOUNT:,} or less")
    assert_max_length(data.category, INPUT_LIMITS["expense_category"], "Expense category")
    assert_max_length(data.vendor, INPUT_LIMITS["expense_vendor"], "Expense vendor")
    assert_max_length(data.notes, INPUT_LIMITS["expense_notes"], "Expense notes")
    if not data.incurred_on:
        raise RuleViolationError("Expense date is required")
