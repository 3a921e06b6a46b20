"""
Tests for FinFamily

Test strategy:
1. Unit tests for individual components (models, engine, validators)
2. Integration tests for flows (with in-memory storage and fake models)
3. No real API calls in tests
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from finfamily.models import (
    MODULES,
    AdviceResult,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    ModuleId,
    ModuleStyle,
    Month,
    ProjectionMatch,
    Record,
    RecordDraft,
    RecordKind,
    RiskLevel,
    User,
    ValidationIssue,
    ValidationResult,
    get_module,
    split_iso_date,
)


class TestDates:
    """Tests for timezone-naive date handling."""

    def test_split_iso_date(self):
        assert split_iso_date("2024-03-15") == (2024, 3, 15)

    def test_split_iso_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            split_iso_date("15/03/2024")

    def test_split_iso_date_rejects_impossible_day(self):
        with pytest.raises(ValueError):
            split_iso_date("2024-02-30")

    def test_month_contains_last_day(self):
        """The last day of a month stays in that month."""
        assert Month(year=2024, month=1).contains("2024-01-31")
        assert not Month(year=2024, month=2).contains("2024-01-31")

    def test_month_navigation_wraps_years(self):
        assert Month(year=2024, month=1).previous() == Month(year=2023, month=12)
        assert Month(year=2023, month=12).next() == Month(year=2024, month=1)

    def test_month_of(self):
        assert Month.of("2024-07-04") == Month(year=2024, month=7)

    def test_month_label(self):
        assert Month(year=2024, month=3).label == "março de 2024"


class TestRecordModels:
    """Tests for record Pydantic models."""

    def test_draft_strips_whitespace(self):
        draft = RecordDraft(
            module_id=ModuleId.BUDGET,
            title="  Mercado  ",
            amount=Decimal("150.00"),
            date="2024-03-10",
            kind=RecordKind.EXPENSE,
        )
        assert draft.title == "Mercado"

    def test_draft_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            RecordDraft(
                module_id=ModuleId.BUDGET,
                title="Mercado",
                amount=Decimal("-1"),
                date="2024-03-10",
                kind=RecordKind.EXPENSE,
            )

    def test_draft_rejects_bad_date(self):
        with pytest.raises(ValueError):
            RecordDraft(
                module_id=ModuleId.BUDGET,
                title="Mercado",
                amount=Decimal("1"),
                date="2024-13-01",
                kind=RecordKind.EXPENSE,
            )

    def test_draft_normalizes_date(self):
        draft = RecordDraft(
            module_id=ModuleId.BUDGET,
            title="Mercado",
            amount=Decimal("1"),
            date="2024-3-5",
            kind=RecordKind.EXPENSE,
        )
        assert draft.date == "2024-03-05"
        assert draft.day == 5

    def test_record_from_draft_keeps_fields(self):
        draft = RecordDraft(
            module_id=ModuleId.TRAVEL,
            title="Hotel",
            amount=Decimal("900"),
            date="2024-05-01",
            kind=RecordKind.EXPENSE,
        )
        record = Record.from_draft(draft, "abc")
        assert record.id == "abc"
        assert record.title == "Hotel"
        assert record.module_id == ModuleId.TRAVEL

    def test_with_changes_keeps_id(self, record_factory):
        record = record_factory(ModuleId.BUDGET, "Luz", 100, "2024-03-01", record_id="r1")
        edited = record.with_changes(title="Energia", amount=Decimal("120"))
        assert edited.id == "r1"
        assert edited.title == "Energia"
        assert record.title == "Luz"

    def test_with_changes_revalidates(self, record_factory):
        record = record_factory(ModuleId.BUDGET, "Luz", 100, "2024-03-01")
        with pytest.raises(ValueError):
            record.with_changes(amount=Decimal("-5"))

    def test_records_are_immutable(self, record_factory):
        record = record_factory(ModuleId.BUDGET, "Luz", 100, "2024-03-01")
        with pytest.raises(ValueError):
            record.title = "Other"

    def test_to_prompt_dict(self, record_factory):
        record = record_factory(ModuleId.BUDGET, "Luz", "100.50", "2024-03-01", record_id="r1")
        data = record.to_prompt_dict()
        assert data["moduleId"] == "budget"
        assert data["amount"] == 100.5
        assert data["type"] == "expense"


class TestModuleConfig:
    """Tests for the static module table."""

    def test_four_modules(self):
        assert [m.id for m in MODULES] == [
            ModuleId.BUDGET,
            ModuleId.TRAVEL,
            ModuleId.INVESTMENT,
            ModuleId.PROJECTION,
        ]

    def test_every_module_has_distinct_style(self):
        styles = {m.style for m in MODULES}
        assert len(styles) == len(MODULES)
        for style in ModuleStyle:
            assert style.hex.startswith("#")
            assert style.light_hex.startswith("#")

    def test_get_module_accepts_string(self):
        assert get_module("travel").title == "Viagens"


class TestProjectionMatch:
    """Tests for derived progress values."""

    def test_percentage_clamped(self):
        match = ProjectionMatch(
            goal_amount=Decimal("100"),
            current_total=Decimal("150"),
            is_over=True,
        )
        assert match.percentage == 100.0
        assert match.raw_percentage == 150
        assert match.excess == Decimal("50")
        assert match.remaining == Decimal("-50")

    def test_raw_percentage_rounds_half_up(self):
        match = ProjectionMatch(
            goal_amount=Decimal("200"),
            current_total=Decimal("1"),
            is_over=False,
        )
        assert match.raw_percentage == 1  # 0.5 rounds up

    def test_zero_goal(self):
        match = ProjectionMatch(
            goal_amount=Decimal("0"),
            current_total=Decimal("10"),
            is_over=True,
        )
        assert match.percentage == 0.0
        assert match.raw_percentage == 0
        assert match.remaining is None


class TestAdviceResult:

    def test_accepts_camel_case_key(self):
        advice = AdviceResult.model_validate({
            "summary": "Tudo certo.",
            "tips": ["a", "b", "c"],
            "riskLevel": "Medium",
        })
        assert advice.risk_level == RiskLevel.MEDIUM

    def test_requires_three_tips(self):
        with pytest.raises(ValueError):
            AdviceResult(summary="x", tips=["a", "b"], risk_level=RiskLevel.LOW)


class TestUser:

    def test_first_name_and_initial(self):
        user = User(id="u1", name="maria da silva", email="m@example.com")
        assert user.first_name == "maria"
        assert user.initial == "M"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            description="Record created",
        )
        assert event.event_type == AuditEventType.RECORD_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            description="Record created",
            details={"title": "Mercado", "amount": "150"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "record_created"
        assert log_dict["details"]["title"] == "Mercado"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            description="User signed in",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 12  # Expected number of columns
        assert row[2] == "user_signed_in"  # event_type
        assert row[11] == "True"  # is_user_action

    def test_audit_event_builder_record_created(self):
        """Test AuditEventBuilder.record_created."""
        correlation_id = uuid4()

        event = AuditEventBuilder.record_created(
            user_id="u1",
            record_id="r1",
            module_id="budget",
            title="Mercado",
            amount="150",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.RECORD_CREATED
        assert event.entity_id == "r1"
        assert event.user_id == "u1"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_audit_event_builder_save_failed_is_error(self):
        event = AuditEventBuilder.save_failed(
            user_id="u1",
            operation="create",
            error_message="boom",
        )
        assert event.event_type == AuditEventType.SAVE_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "boom"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Valor é obrigatório",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.is_valid is False
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="suspicious_value",
                    message="Valor igual a zero",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert len(result.warnings) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
