"""Pydantic models for schema validation and connection results."""

from pydantic import BaseModel, Field


class ColumnDiff(BaseModel):
    """A missing column detected during validation."""

    table: str
    column: str
    message: str = ""


class SchemaValidationResult(BaseModel):
    """Result of schema validation."""

    valid: bool
    missing_tables: list[str] = Field(default_factory=list)
    missing_columns: list[ColumnDiff] = Field(default_factory=list)
    extra_tables: list[str] = Field(default_factory=list)  # Warning only

    @property
    def error_count(self) -> int:
        """Count of critical errors (missing tables + missing columns)."""
        return len(self.missing_tables) + len(self.missing_columns)

    def format_report(self) -> str:
        """Format validation result as human-readable report."""
        if self.valid:
            return "Schema valid"

        lines = ["Schema validation failed:"]

        if self.missing_tables:
            lines.append(f"\n  Missing tables ({len(self.missing_tables)}):")
            for table in self.missing_tables:
                lines.append(f"    - {table}")

        if self.missing_columns:
            lines.append(f"\n  Missing columns ({len(self.missing_columns)}):")
            for diff in self.missing_columns:
                lines.append(f"    - {diff.table}.{diff.column}")

        if self.extra_tables:
            lines.append(f"\n  Extra tables (warning): {', '.join(self.extra_tables)}")

        return "\n".join(lines)


class ConnectionResult(BaseModel):
    """Result of connect_and_validate()."""

    success: bool
    profile_name: str | None = None
    schema_valid: bool = False
    schema_report: SchemaValidationResult | None = None
    error: str | None = None
