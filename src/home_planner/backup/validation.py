"""Backup validator.

``validate_backup`` takes any value (typically decoded JSON) and returns
a tagged result: ``BackupValid`` with the normalized document, or
``BackupInvalid`` with one reason.  It never raises for bad input.

Checks run as an ordered list of stages and stop at the first failure,
so the reason a caller sees for a given input is always the same:

    root shape -> schema version -> exportedAt -> appVersion -> projectId
    -> payload shape and row caps -> references -> business rules

Usage:
    from home_planner.backup.validation import validate_backup

    result = validate_backup(json.loads(text))
    if not result.ok:
        print(result.reason)
"""

import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from home_planner.backup.guards import is_record, parse_payload
from home_planner.backup.models import (
    PROJECT_BACKUP_SCHEMA,
    SCHEMA_VERSION,
    BackupDocument,
    BackupInvalid,
    BackupPayload,
    BackupRow,
    BackupSchema,
    BackupValid,
    BackupValidationResult,
)
from home_planner.errors import RuleViolationError
from home_planner.rules import (
    EventInput,
    ExpenseInput,
    TaskInput,
    validate_event_input,
    validate_expense_input,
    validate_task_input,
)


# ------------------------------------------------------------------
# Cell readers
# ------------------------------------------------------------------


def _as_string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _read_string(row: BackupRow, key: str) -> str:
    value = row.get(key)
    return value if isinstance(value, str) else ""


def _read_nullable_string(row: BackupRow, key: str) -> str | None:
    value = row.get(key)
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _read_number(row: BackupRow, key: str) -> float:
    """Read a numeric cell; numeric strings are accepted, blanks read as 0.

    Integers too large for a float read as infinity.
    """
    value = row.get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _is_valid_timestamp(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


# ------------------------------------------------------------------
# Referential integrity and business rules
# ------------------------------------------------------------------


def ensure_foreign_keys(
    payload: BackupPayload,
    project_id: str | None = None,
    schema: BackupSchema = PROJECT_BACKUP_SCHEMA,
) -> str | None:
    """Check every reference against ids in the same payload.

    The live store is never consulted: a document must be internally
    consistent.  Required references must be non-empty strings naming
    an existing row; optional references are checked only when set.

    Args:
        payload: Parsed payload.
        project_id: When given, every project row must carry this id.
        schema: Collection hierarchy to check against.

    Returns:
        ``None`` when consistent, else e.g. ``"Invalid task.room_id reference"``.
    """
    if project_id is not None:
        for row in payload.rows("projects"):
            if row.get("id") != project_id:
                return "Invalid project.id reference"

    ids: dict[str, set[str]] = {}
    for table_def in schema.tables:
        if table_def.pk is None:
            continue
        ids[table_def.name] = {
            value
            for row in payload.rows(table_def.name)
            if (value := _as_string(row.get(table_def.pk)))
        }

    for table_def in schema.tables:
        if not table_def.parents and not table_def.optional_refs:
            continue
        for row in payload.rows(table_def.name):
            for ref in table_def.parents:
                value = _as_string(row.get(ref.field))
                if not value or value not in ids[ref.table]:
                    return f"Invalid {table_def.label}.{ref.field} reference"
            for ref in table_def.optional_refs:
                value = _as_string(row.get(ref.field))
                if value and value not in ids[ref.table]:
                    return f"Invalid {table_def.label}.{ref.field} reference"
    return None


def validate_backup_business_rules(payload: BackupPayload) -> str | None:
    """Re-run the live create/update rules on every task, event and expense.

    Returns:
        ``None`` when all rows pass, else
        ``"Invalid <entity> at index <i>: <rule message>"``.
    """
    for index, row in enumerate(payload.tasks):
        try:
            validate_task_input(
                TaskInput(
                    room_id=_read_string(row, "room_id"),
                    title=_read_string(row, "title"),
                    status=_read_string(row, "status"),
                    waiting_reason=_read_nullable_string(row, "waiting_reason"),
                )
            )
        except RuleViolationError as e:
            return f"Invalid task at index {index}: {e}"

    for index, row in enumerate(payload.events):
        try:
            validate_event_input(
                EventInput(
                    title=_read_string(row, "title"),
                    starts_at=_read_string(row, "starts_at"),
                )
            )
        except RuleViolationError as e:
            return f"Invalid event at index {index}: {e}"

    for index, row in enumerate(payload.expenses):
        try:
            validate_expense_input(
                ExpenseInput(
                    amount=_read_number(row, "amount"),
                    incurred_on=_read_string(row, "incurred_on"),
                )
            )
        except RuleViolationError as e:
            return f"Invalid expense at index {index}: {e}"

    return None


# ------------------------------------------------------------------
# Stages
# ------------------------------------------------------------------


@dataclass
class _Candidate:
    """Validation state carried from one stage to the next."""

    raw: Any
    payload: BackupPayload | None = None


def _check_root(candidate: _Candidate) -> str | None:
    if not is_record(candidate.raw):
        return "Backup must be a JSON object"
    return None


def _check_schema_version(candidate: _Candidate) -> str | None:
    if candidate.raw.get("schemaVersion") != SCHEMA_VERSION:
        return "Unsupported backup schemaVersion"
    return None


def _check_exported_at(candidate: _Candidate) -> str | None:
    if not _is_valid_timestamp(candidate.raw.get("exportedAt")):
        return "Invalid exportedAt timestamp"
    return None


def _check_app_version(candidate: _Candidate) -> str | None:
    if not _as_string(candidate.raw.get("appVersion")):
        return "Missing appVersion"
    return None


def _check_project_id(candidate: _Candidate) -> str | None:
    if not _as_string(candidate.raw.get("projectId")):
        return "Missing projectId"
    return None


def _check_payload(candidate: _Candidate) -> str | None:
    payload, reason = parse_payload(candidate.raw.get("payload"))
    candidate.payload = payload
    return reason


def _check_references(candidate: _Candidate) -> str | None:
    return ensure_foreign_keys(candidate.payload, candidate.raw["projectId"])


def _check_business_rules(candidate: _Candidate) -> str | None:
    return validate_backup_business_rules(candidate.payload)


_STAGES: tuple[Callable[[_Candidate], str | None], ...] = (
    _check_root,
    _check_schema_version,
    _check_exported_at,
    _check_app_version,
    _check_project_id,
    _check_payload,
    _check_references,
    _check_business_rules,
)


def validate_backup(value: Any) -> BackupValidationResult:
    """Validate an untrusted backup candidate.

    Args:
        value: Any value, usually the result of ``json.loads``.

    Returns:
        ``BackupValid(backup=...)`` or ``BackupInvalid(reason=...)``.

    Example:
        result = validate_backup({"schemaVersion": "2"})
        result.reason
        # 'Unsupported backup schemaVersion'
    """
    candidate = _Candidate(raw=value)
    for stage in _STAGES:
        reason = stage(candidate)
        if reason is not None:
            return BackupInvalid(reason=reason)

    raw_warnings = value.get("warnings")
    warnings = (
        [w for w in raw_warnings if isinstance(w, str)]
        if isinstance(raw_warnings, list)
        else None
    )

    return BackupValid(
        backup=BackupDocument(
            schema_version=SCHEMA_VERSION,
            exported_at=value["exportedAt"],
            app_version=value["appVersion"],
            project_id=value["projectId"],
            payload=candidate.payload,
            warnings=warnings,
        )
    )
