"""
Integration tests for the record and advice flows.

Uses in-memory storage, a failing store and a fake model.
"""

import asyncio
from decimal import Decimal

from finfamily.agents import NOT_CONFIGURED_ADVICE, UNAVAILABLE_ADVICE, FinancialAdvisor
from finfamily.audit import AuditLogger
from finfamily.config import GeminiSettings
from finfamily.models.audit import AuditEventBuilder, AuditEventType
from finfamily.models.record import ModuleId, Month, RecordDraft, RecordKind
from finfamily.models.user import User
from finfamily.orchestrator import (
    SAVE_ERROR_MESSAGE,
    AdviceFlow,
    RecordFlow,
    create_app_components,
)
from finfamily.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    RecordStorageInterface,
    StorageError,
)

from conftest import make_record
from test_advisor import VALID_ANSWER, FakeModel


USER = User(id="u1", name="Ana Souza", email="ana@example.com")
MARCH = Month(year=2024, month=3)


class FailingStorage(RecordStorageInterface):
    """A store whose every call fails, like an unreachable spreadsheet."""

    async def list_records(self, user_id):
        raise StorageError("offline")

    async def create_record(self, user_id, draft):
        raise StorageError("offline")

    async def update_record(self, user_id, record):
        raise StorageError("offline")

    async def delete_record(self, user_id, record_id):
        raise StorageError("offline")


class FailingAuditStorage(AuditStorageInterface):
    """An audit sheet that can't be written."""

    async def append_event(self, event):
        raise StorageError("audit sheet unavailable")


def audit():
    storage = InMemoryAuditStorage()
    return storage, AuditLogger(storage)


def event_types(audit_storage):
    return [e.event_type for e in audit_storage.events]


def draft(title="Mercado", amount="150"):
    return RecordDraft(
        module_id=ModuleId.BUDGET,
        title=title,
        amount=Decimal(amount),
        date="2024-03-10",
        kind=RecordKind.EXPENSE,
    )


class TestRecordFlow:

    def test_add_edit_delete(self):
        audit_storage, logger = audit()
        flow = RecordFlow(InMemoryRecordStorage(), logger)

        added = asyncio.run(flow.add_record(USER, draft(), []))
        assert added.success
        assert added.records == [added.record]

        edited_record = added.record.with_changes(amount=Decimal("200"))
        edited = asyncio.run(flow.edit_record(USER, edited_record, added.records))
        assert edited.success
        assert edited.records[0].amount == Decimal("200")
        assert edited.records[0].id == added.record.id

        deleted = asyncio.run(flow.delete_record(USER, added.record.id, edited.records))
        assert deleted.success
        assert deleted.records == []

        assert event_types(audit_storage) == [
            AuditEventType.RECORD_CREATED,
            AuditEventType.RECORD_UPDATED,
            AuditEventType.RECORD_DELETED,
        ]

    def test_new_record_goes_first(self):
        flow = RecordFlow(InMemoryRecordStorage())
        existing = [make_record(ModuleId.BUDGET, "old", 1, "2024-01-01")]
        change = asyncio.run(flow.add_record(USER, draft(), existing))
        assert change.records[1:] == existing

    def test_load_records(self):
        storage = InMemoryRecordStorage()
        storage.seed("u1", [make_record(ModuleId.BUDGET, "x", 1, "2024-03-01")])
        loaded = asyncio.run(RecordFlow(storage).load_records(USER))
        assert loaded.success
        assert len(loaded.records) == 1

    def test_failed_save_keeps_snapshot(self):
        audit_storage, logger = audit()
        flow = RecordFlow(FailingStorage(), logger)
        existing = [make_record(ModuleId.BUDGET, "old", 1, "2024-01-01")]

        change = asyncio.run(flow.add_record(USER, draft(), existing))

        assert not change.success
        assert change.records == existing
        assert change.message == SAVE_ERROR_MESSAGE
        assert event_types(audit_storage) == [AuditEventType.SAVE_FAILED]

    def test_failed_edit_and_delete_keep_snapshot(self):
        flow = RecordFlow(FailingStorage())
        record = make_record(ModuleId.BUDGET, "old", 1, "2024-01-01")

        edit = asyncio.run(flow.edit_record(USER, record.with_changes(title="new"), [record]))
        delete = asyncio.run(flow.delete_record(USER, record.id, [record]))

        assert not edit.success and edit.records == [record]
        assert not delete.success and delete.records == [record]

    def test_edit_of_missing_record_fails(self):
        flow = RecordFlow(InMemoryRecordStorage())
        record = make_record(ModuleId.BUDGET, "ghost", 1, "2024-01-01")
        change = asyncio.run(flow.edit_record(USER, record, [record]))
        assert not change.success

    def test_failed_load(self):
        audit_storage, logger = audit()
        loaded = asyncio.run(RecordFlow(FailingStorage(), logger).load_records(USER))
        assert not loaded.success
        assert loaded.records == []
        assert loaded.message
        assert event_types(audit_storage) == [AuditEventType.EXTERNAL_SERVICE_ERROR]


class TestAuditFailures:
    """A broken audit store never breaks the main flow."""

    def test_log_reports_failure(self):
        logger = AuditLogger(FailingAuditStorage())
        event = AuditEventBuilder.user_signed_in("u1", "ana@example.com")
        assert asyncio.run(logger.log(event)) is False

    def test_add_record_still_succeeds(self):
        flow = RecordFlow(InMemoryRecordStorage(), AuditLogger(FailingAuditStorage()))
        existing = [make_record(ModuleId.BUDGET, "old", 1, "2024-01-01")]

        change = asyncio.run(flow.add_record(USER, draft(), existing))

        assert change.success
        assert change.records == [change.record, *existing]

    def test_advice_still_returned(self):
        model = FakeModel(text=VALID_ANSWER)
        advisor = FinancialAdvisor(settings=GeminiSettings(api_key=""), model=model)
        flow = AdviceFlow(advisor, AuditLogger(FailingAuditStorage()))

        advice = asyncio.run(flow.request_advice(USER, ModuleId.BUDGET, MARCH, []))

        assert advice.summary == "Gastos sob controle."


class TestAdviceFlow:

    def test_advisor_only_sees_module_and_month(self, travel_month):
        model = FakeModel(text=VALID_ANSWER)
        advisor = FinancialAdvisor(settings=GeminiSettings(api_key=""), model=model)
        audit_storage, logger = audit()
        flow = AdviceFlow(advisor, logger)

        records = travel_month + [
            make_record(ModuleId.BUDGET, "Mercado secreto", 10, "2024-03-02"),
            make_record(ModuleId.TRAVEL, "Passagem antiga", 10, "2024-02-02"),
        ]
        advice = asyncio.run(flow.request_advice(USER, ModuleId.TRAVEL, MARCH, records))

        assert advice.summary == "Gastos sob controle."
        prompt = model.prompts[0]
        assert "Viagens" in prompt
        assert "Mercado secreto" not in prompt
        assert "Passagem antiga" not in prompt
        assert event_types(audit_storage) == [
            AuditEventType.ADVICE_REQUESTED,
            AuditEventType.ADVICE_GENERATED,
        ]

    def test_not_configured(self):
        advisor = FinancialAdvisor(settings=GeminiSettings(api_key=""))
        advice = asyncio.run(
            AdviceFlow(advisor).request_advice(USER, ModuleId.BUDGET, MARCH, [])
        )
        assert advice == NOT_CONFIGURED_ADVICE

    def test_model_failure_falls_back(self):
        model = FakeModel(error=RuntimeError("timeout"))
        advisor = FinancialAdvisor(settings=GeminiSettings(api_key=""), model=model)
        audit_storage, logger = audit()

        advice = asyncio.run(
            AdviceFlow(advisor, logger).request_advice(USER, ModuleId.BUDGET, MARCH, [])
        )

        assert advice == UNAVAILABLE_ADVICE
        assert AuditEventType.ADVICE_FAILED in event_types(audit_storage)

    def test_malformed_answer_falls_back(self):
        model = FakeModel(text="Desculpe, não posso ajudar.")
        advisor = FinancialAdvisor(settings=GeminiSettings(api_key=""), model=model)

        advice = asyncio.run(
            AdviceFlow(advisor).request_advice(USER, ModuleId.BUDGET, MARCH, [])
        )

        assert advice == UNAVAILABLE_ADVICE


class TestCreateAppComponents:

    def test_offline_components(self):
        components = create_app_components(use_storage=False)
        assert components.storage_backend == "memory"

        change = asyncio.run(components.record_flow.add_record(USER, draft(), []))
        assert change.success
