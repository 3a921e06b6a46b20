"""
Form and Validation Models

The record form holds raw user input (the amount is still text). It only
becomes a RecordDraft after validation passes.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from finfamily.models.record import Record, RecordKind


class FormFields(BaseModel):
    """Raw values of the record form."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    amount: str = ""
    kind: RecordKind = RecordKind.EXPENSE
    date: str = Field(default_factory=lambda: date.today().isoformat())

    @classmethod
    def from_record(cls, record: Record) -> "FormFields":
        """Prefill the form for editing."""
        return cls(
            title=record.title,
            amount=str(record.amount),
            kind=record.kind,
            date=record.date,
        )

    @property
    def is_blank(self) -> bool:
        """Title or amount missing: submitting does nothing."""
        return not self.title.strip() or not self.amount.strip()


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """Outcome of validating a form."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]
