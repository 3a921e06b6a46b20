"""
Record Form Validation

Checks the raw record form before anything is sent to storage.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the form.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

from finfamily.config import AppSettings, get_settings
from finfamily.models.form import FormFields, ValidationIssue, ValidationResult
from finfamily.models.record import (
    ModuleId,
    RecordDraft,
    RecordKind,
    split_iso_date,
)


def parse_amount(text: str) -> Decimal:
    """
    Parse a user-typed amount.

    Accepts both "1234.56" and the Brazilian "1.234,56".

    Raises:
        ValueError: If the text isn't a number
    """
    cleaned = text.strip().replace(" ", "")
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Not a number: {text!r}")
    if not value.is_finite():
        raise ValueError(f"Not a number: {text!r}")
    return value


class RecordValidator:
    """Validates the record form and turns it into a RecordDraft."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def validate(self, form: FormFields) -> ValidationResult:
        issues = []

        if not form.title.strip():
            issues.append(ValidationIssue(
                field="title",
                issue_type="missing",
                message="Título é obrigatório",
                severity="error",
            ))
        elif len(form.title.strip()) > 200:
            issues.append(ValidationIssue(
                field="title",
                issue_type="too_long",
                message="Título deve ter no máximo 200 caracteres",
                severity="error",
            ))

        if not form.amount.strip():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Valor é obrigatório",
                severity="error",
            ))
        else:
            try:
                amount = parse_amount(form.amount)
            except ValueError:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_format",
                    message=f"Valor inválido: {form.amount}",
                    severity="error",
                    suggested_fix="Use apenas números, por exemplo 1234,56",
                ))
            else:
                if amount < 0:
                    issues.append(ValidationIssue(
                        field="amount",
                        issue_type="invalid_value",
                        message="Valor não pode ser negativo; use o tipo Despesa",
                        severity="error",
                    ))
                elif amount == 0:
                    issues.append(ValidationIssue(
                        field="amount",
                        issue_type="suspicious_value",
                        message="Valor igual a zero",
                        severity="warning",
                    ))
                elif amount > Decimal(str(self._settings.max_record_amount)):
                    issues.append(ValidationIssue(
                        field="amount",
                        issue_type="suspicious_value",
                        message="Valor muito alto, confira se está correto",
                        severity="warning",
                    ))

        try:
            split_iso_date(form.date)
        except ValueError:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Data inválida: {form.date}",
                severity="error",
                suggested_fix="Use o formato AAAA-MM-DD",
            ))

        return ValidationResult(issues=issues)

    def to_draft(self, form: FormFields, module_id: ModuleId) -> RecordDraft:
        """
        Build a RecordDraft from a valid form.

        Raises:
            ValueError: If the form doesn't validate
        """
        result = self.validate(form)
        if result.has_errors:
            messages = "; ".join(i.message for i in result.issues if i.severity == "error")
            raise ValueError(messages)

        return RecordDraft(
            module_id=module_id,
            title=form.title,
            amount=parse_amount(form.amount),
            date=form.date,
            kind=RecordKind(form.kind),
        )
