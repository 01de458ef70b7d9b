"""Builder quote rules."""

import math
from typing import Literal

from pydantic import BaseModel

from home_planner.errors import RuleViolationError
from home_planner.rules.limits import INPUT_LIMITS, assert_max_length


class QuoteInput(BaseModel):
    """Fields of a builder quote as entered by the user.

    ``selected`` is not a valid input status; use ``select_quote``.
    """

    title: str
    builder_name: str
    amount: float
    currency: str
    status: Literal["draft", "received", "rejected"] = "received"
    room_id: str | None = None
    scope: str = ""
    notes: str = ""


def validate_quote_input(data: QuoteInput) -> None:
    """Validate a builder quote.

    Raises:
        RuleViolationError: On the first rule the quote breaks.
    """
    if not data.title.strip():
        raise RuleViolationError("Quote title is required")
    assert_max_length(data.title, INPUT_LIMITS["quote_title"], "Quote title")
    assert_max_length(data.scope, INPUT_LIMITS["quote_scope"], "Quote scope")
    if not data.builder_name.strip():
        raise RuleViolationError("Builder name is required")
    assert_max_length(data.builder_name, INPUT_LIMITS["quote_builder_name"], "Builder name")
    if not math.isfinite(data.amount) or data.amount <= 0:
        raise RuleViolationError("Quote amount must be greater than zero")
    if not data.currency.strip():
        raise RuleViolationError("Currency is required")
    assert_max_length(data.currency, INPUT_LIMITS["quote_currency"], "Currency")
    assert_max_length(data.notes, INPUT_LIMITS["quote_notes"], "Quote notes")
