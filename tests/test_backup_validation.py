"""Tests for the backup validator.

Covers each stage in order, the precedence between stages, the row
caps at their boundaries, referential integrity within the document,
business rule re-validation, and warnings normalization.
"""

import math

import pytest

from home_planner.backup.guards import (
    MAX_ROWS_PER_TABLE,
    MAX_TOTAL_ROWS,
    as_rows,
    is_cell_value,
    parse_payload,
)
from home_planner.backup.models import BackupInvalid, BackupValid
from home_planner.backup.validation import (
    _read_number,
    ensure_foreign_keys,
    validate_backup,
)


def _reason(value) -> str:
    result = validate_backup(value)
    assert isinstance(result, BackupInvalid), "expected validation to fail"
    return result.reason


def _tags(count: int) -> list[dict]:
    return [
        {"id": f"tag_{i}", "project_id": "project_1", "name": f"tag{i}", "type": "custom"}
        for i in range(count)
    ]


# ------------------------------------------------------------------
# Acceptance
# ------------------------------------------------------------------


class TestAccepts:
    """Valid documents produce a normalized document."""

    def test_accepts_valid_document(self, valid_backup):
        """A complete v1 document validates."""
        result = validate_backup(valid_backup)
        assert isinstance(result, BackupValid)
        assert result.ok is True
        assert result.backup.project_id == "project_1"
        assert result.backup.payload.tasks[0]["title"] == "Install sink"

    def test_builder_quotes_absent_is_empty(self, valid_backup):
        """Older documents without builder_quotes are accepted."""
        del valid_backup["payload"]["builder_quotes"]
        result = validate_backup(valid_backup)
        assert result.ok is True
        assert result.backup.payload.builder_quotes == []

    def test_builder_quotes_null_is_empty(self, valid_backup):
        """A null builder_quotes collection reads as empty."""
        valid_backup["payload"]["builder_quotes"] = None
        result = validate_backup(valid_backup)
        assert result.ok is True
        assert result.backup.payload.builder_quotes == []

    def test_optional_reference_null_is_not_checked(self, valid_backup):
        """A null optional reference passes."""
        valid_backup["payload"]["events"][0]["task_id"] = None
        assert validate_backup(valid_backup).ok is True

    def test_cell_values_kept_verbatim(self, valid_backup):
        """Numbers and strings are not coerced."""
        valid_backup["payload"]["expenses"][0]["amount"] = 120.5
        result = validate_backup(valid_backup)
        assert result.backup.payload.expenses[0]["amount"] == 120.5
        assert result.backup.payload.rooms[0]["order_index"] == 1

    def test_validation_does_not_mutate_input(self, valid_backup):
        """The candidate is left as it was."""
        valid_backup["warnings"] = ["a", 1]
        validate_backup(valid_backup)
        assert valid_backup["warnings"] == ["a", 1]


class TestWarnings:
    """Warnings are filtered to strings, never fabricated."""

    def test_non_string_warnings_dropped(self, valid_backup):
        valid_backup["warnings"] = ["Backup data is unencrypted.", 42, None, "second"]
        result = validate_backup(valid_backup)
        assert result.backup.warnings == ["Backup data is unencrypted.", "second"]

    def test_missing_warnings_stay_missing(self, valid_backup):
        result = validate_backup(valid_backup)
        assert result.backup.warnings is None
        assert "warnings" not in result.backup.to_dict()

    def test_malformed_warnings_dropped(self, valid_backup):
        valid_backup["warnings"] = "not a list"
        assert validate_backup(valid_backup).backup.warnings is None


# ------------------------------------------------------------------
# Root stages
# ------------------------------------------------------------------


class TestRootStages:
    """Root shape and header field checks."""

    @pytest.mark.parametrize("value", [None, [], "backup", 1, True])
    def test_non_object_root(self, value):
        assert _reason(value) == "Backup must be a JSON object"

    @pytest.mark.parametrize("version", ["2", 1, None, ""])
    def test_unsupported_schema_version(self, valid_backup, version):
        valid_backup["schemaVersion"] = version
        assert _reason(valid_backup) == "Unsupported backup schemaVersion"

    def test_missing_schema_version(self, valid_backup):
        del valid_backup["schemaVersion"]
        assert _reason(valid_backup) == "Unsupported backup schemaVersion"

    @pytest.mark.parametrize("exported_at", ["not-a-date", "", None, 1700000000])
    def test_invalid_exported_at(self, valid_backup, exported_at):
        valid_backup["exportedAt"] = exported_at
        assert _reason(valid_backup) == "Invalid exportedAt timestamp"

    def test_missing_app_version(self, valid_backup):
        valid_backup["appVersion"] = ""
        assert _reason(valid_backup) == "Missing appVersion"

    def test_missing_project_id(self, valid_backup):
        del valid_backup["projectId"]
        assert _reason(valid_backup) == "Missing projectId"

    def test_header_only_document_reports_first_failure(self):
        """Only schemaVersion present: exportedAt is the first failure."""
        assert _reason({"schemaVersion": "1"}) == "Invalid exportedAt timestamp"


class TestStagePrecedence:
    """Earlier stages win over later ones."""

    def test_schema_version_before_exported_at(self, valid_backup):
        valid_backup["schemaVersion"] = "2"
        valid_backup["exportedAt"] = "not-a-date"
        assert _reason(valid_backup) == "Unsupported backup schemaVersion"

    def test_header_before_payload(self, valid_backup):
        valid_backup["appVersion"] = None
        valid_backup["payload"] = "garbage"
        assert _reason(valid_backup) == "Missing appVersion"

    def test_shape_before_references(self, valid_backup):
        valid_backup["payload"]["tasks"][0]["room_id"] = "missing_room"
        valid_backup["payload"]["tags"] = "garbage"
        assert _reason(valid_backup) == "Invalid payload shape"

    def test_references_before_business_rules(self, valid_backup):
        valid_backup["payload"]["task_tags"][0]["tag_id"] = "missing_tag"
        valid_backup["payload"]["expenses"][0]["amount"] = 0
        assert _reason(valid_backup) == "Invalid task_tags.tag_id reference"


# ------------------------------------------------------------------
# Payload shape
# ------------------------------------------------------------------


class TestPayloadShape:
    """Collections must be lists of flat records."""

    def test_payload_not_object(self, valid_backup):
        valid_backup["payload"] = []
        assert _reason(valid_backup) == "Invalid payload shape"

    def test_missing_required_collection(self, valid_backup):
        del valid_backup["payload"]["tags"]
        assert _reason(valid_backup) == "Invalid payload shape"

    def test_row_not_object(self, valid_backup):
        valid_backup["payload"]["rooms"] = ["room_1"]
        assert _reason(valid_backup) == "Invalid payload shape"

    @pytest.mark.parametrize("cell", [True, {"nested": 1}, [1, 2]])
    def test_rejected_cell_values(self, valid_backup, cell):
        valid_backup["payload"]["rooms"][0]["notes"] = cell
        assert _reason(valid_backup) == "Invalid payload shape"

    def test_present_but_malformed_builder_quotes(self, valid_backup):
        valid_backup["payload"]["builder_quotes"] = {"id": "quote_1"}
        assert _reason(valid_backup) == "Invalid payload shape"

    def test_cell_value_guard(self):
        assert is_cell_value("x")
        assert is_cell_value(0)
        assert is_cell_value(1.5)
        assert is_cell_value(None)
        assert not is_cell_value(False)
        assert not is_cell_value({})

    def test_as_rows_copies_rows(self):
        source = [{"id": "r1"}]
        rows, reason = as_rows(source, "rooms")
        assert reason is None
        assert rows == source
        assert rows[0] is not source[0]


class TestRowCaps:
    """Per-collection and running total caps."""

    def test_table_at_cap_accepted(self, valid_backup):
        valid_backup["payload"]["tags"] = _tags(MAX_ROWS_PER_TABLE)
        valid_backup["payload"]["task_tags"] = []
        assert validate_backup(valid_backup).ok is True

    def test_table_over_cap_rejected(self, valid_backup):
        valid_backup["payload"]["tags"] = _tags(MAX_ROWS_PER_TABLE + 1)
        assert _reason(valid_backup) == "tags exceeds maximum allowed rows (1000)"

    def test_total_at_cap_accepted(self):
        """Exactly 5000 rows across collections parses."""
        payload = {
            "projects": [{"id": "project_1"}],
            "rooms": [{"id": f"room_{i}"} for i in range(999)],
            "tasks": [{"id": f"task_{i}"} for i in range(1000)],
            "events": [{"id": f"event_{i}"} for i in range(1000)],
            "expenses": [{"id": f"expense_{i}"} for i in range(1000)],
            "attachments": [{"id": f"attachment_{i}"} for i in range(1000)],
            "tags": [],
            "task_tags": [],
        }
        parsed, reason = parse_payload(payload)
        assert reason is None
        assert parsed.total_rows == MAX_TOTAL_ROWS

    def test_total_over_cap_trips_on_last_collection(self, valid_backup):
        """Eight collections of 625 plus two projects cross 5000 at builder_quotes."""
        per = MAX_TOTAL_ROWS // 8
        payload = valid_backup["payload"]
        payload["rooms"] = [{"id": f"room_{i}", "project_id": "project_1"} for i in range(per)]
        payload["tasks"] = [
            {"id": f"task_{i}", "project_id": "project_1", "room_id": f"room_{i}"}
            for i in range(per)
        ]
        payload["events"] = [{"id": f"event_{i}", "project_id": "project_1"} for i in range(per)]
        payload["expenses"] = [
            {"id": f"expense_{i}", "project_id": "project_1"} for i in range(per)
        ]
        payload["attachments"] = [
            {"id": f"attachment_{i}", "project_id": "project_1"} for i in range(per)
        ]
        payload["tags"] = _tags(per)
        payload["task_tags"] = [
            {"task_id": f"task_{i}", "tag_id": f"tag_{i}"} for i in range(per)
        ]
        payload["builder_quotes"] = [
            {"id": f"quote_{i}", "project_id": "project_1"} for i in range(per)
        ]
        payload["projects"].append({"id": "project_2"})

        assert _reason(valid_backup) == "Backup payload exceeds maximum allowed rows (5000)"

    def test_per_table_cap_reported_before_total(self, valid_backup):
        """A table over its own cap is reported even when the total is also exceeded."""
        payload = valid_backup["payload"]
        payload["rooms"] = [{"id": f"room_{i}"} for i in range(1000)]
        payload["tasks"] = [{"id": f"task_{i}"} for i in range(1000)]
        payload["events"] = [{"id": f"event_{i}"} for i in range(1000)]
        payload["expenses"] = [{"id": f"expense_{i}"} for i in range(1000)]
        payload["attachments"] = [{"id": f"attachment_{i}"} for i in range(1001)]
        assert _reason(valid_backup) == "attachments exceeds maximum allowed rows (1000)"


# ------------------------------------------------------------------
# Referential integrity
# ------------------------------------------------------------------


class TestReferences:
    """References resolve within the document only."""

    def test_task_room_missing(self, valid_backup):
        valid_backup["payload"]["tasks"][0]["room_id"] = "missing_room"
        assert _reason(valid_backup) == "Invalid task.room_id reference"

    def test_required_reference_empty(self, valid_backup):
        valid_backup["payload"]["rooms"][0]["project_id"] = ""
        assert _reason(valid_backup) == "Invalid room.project_id reference"

    def test_required_reference_not_string(self, valid_backup):
        valid_backup["payload"]["tasks"][0]["project_id"] = 1
        assert _reason(valid_backup) == "Invalid task.project_id reference"

    def test_required_checked_before_optional(self, valid_backup):
        event = valid_backup["payload"]["events"][0]
        event["project_id"] = "other"
        event["room_id"] = "missing_room"
        assert _reason(valid_backup) == "Invalid event.project_id reference"

    def test_builder_quote_room_missing(self, valid_backup):
        valid_backup["payload"]["builder_quotes"][0]["room_id"] = "missing_room"
        assert _reason(valid_backup) == "Invalid builder_quote.room_id reference"

    def test_attachment_expense_missing(self, valid_backup):
        valid_backup["payload"]["attachments"][0]["expense_id"] = "missing_expense"
        assert _reason(valid_backup) == "Invalid attachment.expense_id reference"

    def test_task_tags_tag_missing(self, valid_backup):
        valid_backup["payload"]["task_tags"][0]["tag_id"] = "missing_tag"
        assert _reason(valid_backup) == "Invalid task_tags.tag_id reference"

    def test_tables_checked_in_dependency_order(self, valid_backup):
        valid_backup["payload"]["task_tags"][0]["task_id"] = "missing_task"
        valid_backup["payload"]["rooms"][0]["project_id"] = "missing_project"
        assert _reason(valid_backup) == "Invalid room.project_id reference"

    def test_project_row_must_match_document(self, valid_backup):
        valid_backup["projectId"] = "project_2"
        assert _reason(valid_backup) == "Invalid project.id reference"

    def test_foreign_keys_helper_on_parsed_payload(self, valid_backup):
        payload, _ = parse_payload(valid_backup["payload"])
        assert ensure_foreign_keys(payload) is None


# ------------------------------------------------------------------
# Business rules
# ------------------------------------------------------------------


class TestBusinessRules:
    """Rows must pass the same rules as live create/update."""

    def test_waiting_task_without_reason(self, valid_backup):
        task = valid_backup["payload"]["tasks"][0]
        task["status"] = "waiting"
        task["waiting_reason"] = None
        assert _reason(valid_backup) == (
            "Invalid task at index 0: Waiting reason is required when status is waiting"
        )

    def test_event_blank_title(self, valid_backup):
        valid_backup["payload"]["events"][0]["title"] = "   "
        assert _reason(valid_backup) == "Invalid event at index 0: Event title is required"

    def test_event_year_out_of_range(self, valid_backup):
        valid_backup["payload"]["events"][0]["starts_at"] = "1999-12-31T10:00:00.000Z"
        assert _reason(valid_backup) == (
            "Invalid event at index 0: Event start year must be between 2000 and 2100"
        )

    def test_expense_zero_amount(self, valid_backup):
        valid_backup["payload"]["expenses"][0]["amount"] = 0
        assert _reason(valid_backup) == (
            "Invalid expense at index 0: Expense amount must be greater than 0"
        )

    def test_expense_numeric_string_amount_accepted(self, valid_backup):
        valid_backup["payload"]["expenses"][0]["amount"] = "120.50"
        assert validate_backup(valid_backup).ok is True

    def test_index_points_at_offending_row(self, valid_backup):
        expenses = valid_backup["payload"]["expenses"]
        expenses.append(dict(expenses[0], id="expense_2", amount=2_000_000))
        assert _reason(valid_backup) == (
            "Invalid expense at index 1: Expense amount must be 1,000,000 or less"
        )

    def test_tasks_checked_before_events(self, valid_backup):
        valid_backup["payload"]["tasks"][0]["title"] = ""
        valid_backup["payload"]["events"][0]["title"] = ""
        assert _reason(valid_backup).startswith("Invalid task at index 0")

    @pytest.mark.parametrize(
        "amount",
        [10**400, -(10**400), math.nan, math.inf, "Infinity", "1e999"],
    )
    def test_non_finite_expense_amount(self, valid_backup, amount):
        valid_backup["payload"]["expenses"][0]["amount"] = amount
        assert _reason(valid_backup) == (
            "Invalid expense at index 0: Expense amount must be greater than 0"
        )

    def test_read_number(self):
        assert _read_number({"amount": 10**400}, "amount") == math.inf
        assert _read_number({"amount": -(10**400)}, "amount") == -math.inf
        assert _read_number({"amount": 5}, "amount") == 5.0
        assert _read_number({"amount": " "}, "amount") == 0.0
        assert math.isnan(_read_number({"amount": "abc"}, "amount"))
        assert math.isnan(_read_number({}, "amount"))
