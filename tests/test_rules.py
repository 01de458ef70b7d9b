"""Tests for the entity business rules in home_planner.rules."""

import pytest

from home_planner.errors import RuleViolationError
from home_planner.rules import (
    AttachmentInput,
    EventInput,
    ExpenseInput,
    ProjectInput,
    QuoteInput,
    RoomInput,
    TaskInput,
    assert_max_length,
    normalize_tag_names,
    validate_attachment_input,
    validate_event_input,
    validate_expense_input,
    validate_project_input,
    validate_quote_input,
    validate_room_input,
    validate_task_input,
)
from home_planner.rules.events import parse_event_datetime


class TestLimits:
    def test_none_and_empty_pass(self):
        assert_max_length(None, 1, "Field")
        assert_max_length("", 1, "Field")

    def test_length_measured_after_trim(self):
        assert_max_length("  abc  ", 3, "Field")

    def test_over_limit_message(self):
        with pytest.raises(RuleViolationError, match="^Field must be 3 characters or fewer$"):
            assert_max_length("abcd", 3, "Field")


class TestTasks:
    def _task(self, **overrides) -> TaskInput:
        values = {"room_id": "room_1", "title": "Install sink", "status": "ready"}
        values.update(overrides)
        return TaskInput(**values)

    def test_valid_task(self):
        validate_task_input(self._task())

    def test_blank_title_rejected(self):
        with pytest.raises(RuleViolationError, match="Task title is required"):
            validate_task_input(self._task(title="   "))

    def test_title_limit(self):
        validate_task_input(self._task(title="x" * 120))
        with pytest.raises(RuleViolationError, match="Task title must be 120"):
            validate_task_input(self._task(title="x" * 121))

    def test_room_required(self):
        with pytest.raises(RuleViolationError, match="Room is required"):
            validate_task_input(self._task(room_id=""))

    def test_waiting_requires_reason(self):
        with pytest.raises(RuleViolationError, match="Waiting reason is required"):
            validate_task_input(self._task(status="waiting"))
        validate_task_input(self._task(status="waiting", waiting_reason="Parts on order"))

    def test_tags_normalized_in_place(self):
        task = self._task(trade_tags=[" Plumber", "plumber", ""], custom_tags=["Urgent"])
        validate_task_input(task)
        assert task.trade_tags == ["plumber"]
        assert task.custom_tags == ["urgent"]

    def test_tag_limit(self):
        with pytest.raises(RuleViolationError, match="Tag name"):
            validate_task_input(self._task(custom_tags=["x" * 101]))

    def test_normalize_keeps_first_seen_order(self):
        assert normalize_tag_names(["b", "A", "a", " b "]) == ["b", "a"]


class TestEvents:
    def test_valid_event(self):
        validate_event_input(EventInput(title="Plumber", starts_at="2026-02-10T10:00:00.000Z"))

    def test_offset_accepted(self):
        validate_event_input(EventInput(title="Plumber", starts_at="2026-02-10T10:00+02:00"))

    @pytest.mark.parametrize(
        "starts_at",
        ["2026-02-10", "2026-02-10T10:00:00", "tomorrow", "2026-13-40T10:00:00Z"],
    )
    def test_malformed_start_rejected(self, starts_at):
        with pytest.raises(RuleViolationError, match="valid ISO datetime"):
            validate_event_input(EventInput(title="Plumber", starts_at=starts_at))

    def test_missing_start_rejected(self):
        with pytest.raises(RuleViolationError, match="Event start is required"):
            validate_event_input(EventInput(title="Plumber", starts_at=""))

    @pytest.mark.parametrize("starts_at", ["1999-12-31T10:00:00Z", "2101-01-01T10:00:00Z"])
    def test_year_out_of_range(self, starts_at):
        with pytest.raises(RuleViolationError, match="between 2000 and 2100"):
            validate_event_input(EventInput(title="Plumber", starts_at=starts_at))

    def test_year_measured_in_utc(self):
        # 2000-01-01 00:30 at +01:00 is still 1999 in UTC
        with pytest.raises(RuleViolationError, match="between 2000 and 2100"):
            validate_event_input(
                EventInput(title="Plumber", starts_at="2000-01-01T00:30:00+01:00")
            )

    def test_contact_phone_limit(self):
        with pytest.raises(RuleViolationError, match="Contact phone"):
            validate_event_input(
                EventInput(
                    title="Plumber",
                    starts_at="2026-02-10T10:00:00Z",
                    contact_phone="1" * 41,
                )
            )

    def test_parse_event_datetime(self):
        assert parse_event_datetime("2026-02-10T10:00:00.000Z").year == 2026
        assert parse_event_datetime("not a date") is None


class TestExpenses:
    @pytest.mark.parametrize("amount", [0, -5, float("nan"), float("inf")])
    def test_non_positive_or_non_finite_rejected(self, amount):
        with pytest.raises(RuleViolationError, match="greater than 0"):
            validate_expense_input(ExpenseInput(amount=amount, incurred_on="2026-02-10"))

    def test_upper_bound(self):
        validate_expense_input(ExpenseInput(amount=1_000_000, incurred_on="2026-02-10"))
        with pytest.raises(RuleViolationError, match="1,000,000 or less"):
            validate_expense_input(ExpenseInput(amount=1_000_000.01, incurred_on="2026-02-10"))

    def test_date_required(self):
        with pytest.raises(RuleViolationError, match="Expense date is required"):
            validate_expense_input(ExpenseInput(amount=10, incurred_on=""))


class TestQuotes:
    def _quote(self, **overrides) -> QuoteInput:
        values = {
            "title": "Kitchen install",
            "builder_name": "ABC Builders",
            "amount": 4500,
            "currency": "USD",
        }
        values.update(overrides)
        return QuoteInput(**values)

    def test_valid_quote(self):
        validate_quote_input(self._quote())

    def test_builder_required(self):
        with pytest.raises(RuleViolationError, match="Builder name is required"):
            validate_quote_input(self._quote(builder_name=" "))

    def test_amount_positive(self):
        with pytest.raises(RuleViolationError, match="greater than zero"):
            validate_quote_input(self._quote(amount=0))

    def test_currency_required(self):
        with pytest.raises(RuleViolationError, match="Currency is required"):
            validate_quote_input(self._quote(currency=""))

    def test_selected_is_not_an_input_status(self):
        with pytest.raises(ValueError):
            self._quote(status="selected")


class TestRoomsProjectsAttachments:
    def test_room_name_required(self):
        with pytest.raises(RuleViolationError, match="Room name is required"):
            validate_room_input(RoomInput(name=""))
        validate_room_input(RoomInput(name="Kitchen", floor="Ground"))

    def test_project_name_required(self):
        with pytest.raises(RuleViolationError, match="Project name is required"):
            validate_project_input(ProjectInput(name=" "))
        validate_project_input(ProjectInput(name="Home"))

    def test_project_address_limit(self):
        with pytest.raises(RuleViolationError, match="Address"):
            validate_project_input(ProjectInput(name="Home", address="x" * 256))

    def test_attachment_requires_kind_and_uri(self):
        with pytest.raises(RuleViolationError, match="kind is required"):
            validate_attachment_input(AttachmentInput(kind="", uri="file://a.jpg"))
        with pytest.raises(RuleViolationError, match="URI is required"):
            validate_attachment_input(AttachmentInput(kind="photo", uri=" "))
        validate_attachment_input(AttachmentInput(kind="photo", uri="file://a.jpg"))
