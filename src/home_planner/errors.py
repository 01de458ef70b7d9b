"""Exception types shared across the home planner package.

Storage and transaction failures are exceptional and raised; expected
"invalid input" outcomes of backup validation are returned as tagged
results instead (see ``home_planner.backup.validation``).

Usage:
    from home_planner.errors import RollbackFailedError, TransactionError

    try:
        await restore_project_backup(client, "project_1", candidate)
    except RollbackFailedError:
        ...  # state may be inconsistent
    except TransactionError:
        ...  # mutation failed, state is clean
"""


class HomePlannerError(Exception):
    """Base exception for the home planner package."""

    pass


# ------------------------------------------------------------------
# Storage
# ------------------------------------------------------------------


class StorageError(HomePlannerError):
    """Raised when the store is unreachable or a statement fails."""

    pass


class StorageTimeoutError(StorageError):
    """Raised when a statement or connection-open exceeds its time bound."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(
            f"Database {operation} timed out after {timeout:g}s"
        )


class TransactionError(HomePlannerError):
    """A multi-statement mutation failed and was rolled back cleanly."""

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {_message(cause)}")

    @property
    def state_consistent(self) -> bool:
        """Whether the store is known to be in its pre-mutation state."""
        return True


class RollbackFailedError(TransactionError):
    """A mutation failed and the rollback failed too."""

    def __init__(
        self,
        operation: str,
        cause: BaseException,
        rollback_error: BaseException,
    ):
        super().__init__(operation, cause)
        self.rollback_error = rollback_error
        self.args = (
            f"{operation} failed: {_message(cause)}. "
            f"Rollback also failed: {_message(rollback_error)}",
        )

    @property
    def state_consistent(self) -> bool:
        return False


# ------------------------------------------------------------------
# Input validation
# ------------------------------------------------------------------


class RuleViolationError(HomePlannerError, ValueError):
    """Raised when a business rule rejects an entity input."""

    pass


class BackupValidationError(HomePlannerError, ValueError):
    """Raised when a restore candidate fails backup validation."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ProjectMismatchError(HomePlannerError, ValueError):
    """Raised when a backup targets a different project than the restore."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Backup projectId '{actual}' does not match active project '{expected}'"
        )


# ------------------------------------------------------------------
# Configuration
# ------------------------------------------------------------------


class ProfileNotFoundError(HomePlannerError):
    """Raised when no database profile is configured."""

    pass


def _message(error: BaseException) -> str:
    """Return the human-readable message of an exception."""
    text = str(error)
    return text if text else type(error).__name__
