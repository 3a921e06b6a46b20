"""
Main Orchestrator for FinFamily

This module ties together all the components and defines the
end-to-end flows for:
1. Records (load → create / edit / delete through the store)
2. Advice (module + month records → language model → advice)

DESIGN DECISION: The orchestrator is where external failures stop.
- The local record snapshot changes only after the store confirms
- A failing store or model produces a message / fallback, not an exception
- Every step is audited

The reconciliation engine never sees any of this: it only gets snapshots.
"""

from typing import NamedTuple, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict

from finfamily.agents import (
    NOT_CONFIGURED_ADVICE,
    UNAVAILABLE_ADVICE,
    AdviceGenerationError,
    AdvisorNotConfiguredError,
    FinancialAdvisor,
)
from finfamily.audit import AuditLogger, configure_logging
from finfamily.config import get_settings
from finfamily.models.record import (
    AdviceResult,
    ModuleId,
    Month,
    Record,
    RecordDraft,
    get_module,
)
from finfamily.models.user import User
from finfamily.reconciliation import filter_month
from finfamily.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStorage,
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    NotFoundError,
    RecordStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

SAVE_ERROR_MESSAGE = "Erro ao salvar transação. Verifique a conexão com a planilha."
UPDATE_ERROR_MESSAGE = "Erro ao atualizar transação."
DELETE_ERROR_MESSAGE = "Erro ao excluir transação."
LOAD_ERROR_MESSAGE = "Não foi possível carregar suas transações."


class RecordChange(BaseModel):
    """Outcome of a record operation: the snapshot to use from now on."""

    model_config = ConfigDict(frozen=True)

    records: list[Record]
    success: bool
    record: Optional[Record] = None
    message: Optional[str] = None


class RecordFlow:
    """
    Orchestrates record CRUD against the store.

    Records are passed around as snapshots (lists). Each operation returns
    the next snapshot; on failure that is the unchanged input.
    """

    def __init__(
        self,
        storage: RecordStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()

    async def load_records(
        self,
        user: User,
        correlation_id: Optional[UUID] = None,
    ) -> RecordChange:
        """Fetch the user's records, newest first."""
        try:
            records = await self._storage.list_records(user.id)
        except StorageError as e:
            await self._audit_logger.log_external_service_error(
                service="record_store",
                error_message=str(e),
                user_id=user.id,
                correlation_id=correlation_id,
            )
            return RecordChange(records=[], success=False, message=LOAD_ERROR_MESSAGE)

        await self._audit_logger.log_records_loaded(
            user_id=user.id,
            record_count=len(records),
            correlation_id=correlation_id,
        )
        return RecordChange(records=records, success=True)

    async def add_record(
        self,
        user: User,
        draft: RecordDraft,
        records: list[Record],
        correlation_id: Optional[UUID] = None,
    ) -> RecordChange:
        """Create a record; the new record goes to the front of the snapshot."""
        try:
            created = await self._storage.create_record(user.id, draft)
        except StorageError as e:
            await self._audit_logger.log_save_failed(
                user_id=user.id,
                operation="create",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return RecordChange(records=records, success=False, message=SAVE_ERROR_MESSAGE)

        await self._audit_logger.log_record_created(
            user_id=user.id,
            record_id=created.id,
            module_id=created.module_id.value,
            title=created.title,
            amount=str(created.amount),
            correlation_id=correlation_id,
        )
        return RecordChange(records=[created, *records], success=True, record=created)

    async def edit_record(
        self,
        user: User,
        record: Record,
        records: list[Record],
        correlation_id: Optional[UUID] = None,
    ) -> RecordChange:
        """Replace a record (same id) in the store and the snapshot."""
        try:
            updated = await self._storage.update_record(user.id, record)
        except (NotFoundError, StorageError) as e:
            await self._audit_logger.log_save_failed(
                user_id=user.id,
                operation="update",
                error_message=str(e),
                record_id=record.id,
                correlation_id=correlation_id,
            )
            return RecordChange(records=records, success=False, message=UPDATE_ERROR_MESSAGE)

        await self._audit_logger.log_record_updated(
            user_id=user.id,
            record_id=updated.id,
            title=updated.title,
            amount=str(updated.amount),
            correlation_id=correlation_id,
        )
        return RecordChange(
            records=[updated if r.id == updated.id else r for r in records],
            success=True,
            record=updated,
        )

    async def delete_record(
        self,
        user: User,
        record_id: str,
        records: list[Record],
        correlation_id: Optional[UUID] = None,
    ) -> RecordChange:
        """Delete a record from the store and the snapshot."""
        try:
            deleted = await self._storage.delete_record(user.id, record_id)
        except StorageError as e:
            await self._audit_logger.log_save_failed(
                user_id=user.id,
                operation="delete",
                error_message=str(e),
                record_id=record_id,
                correlation_id=correlation_id,
            )
            return RecordChange(records=records, success=False, message=DELETE_ERROR_MESSAGE)

        if deleted:
            await self._audit_logger.log_record_deleted(
                user_id=user.id,
                record_id=record_id,
                correlation_id=correlation_id,
            )
        else:
            logger.info("delete_missing_record", record_id=record_id)

        return RecordChange(
            records=[r for r in records if r.id != record_id],
            success=True,
        )


class AdviceFlow:
    """
    Orchestrates advice generation.

    The advisor only ever receives the active module's records for the
    selected month.
    """

    def __init__(
        self,
        advisor: Optional[FinancialAdvisor] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._advisor = advisor or FinancialAdvisor()
        self._audit_logger = audit_logger or AuditLogger()

    async def request_advice(
        self,
        user: User,
        module_id: ModuleId,
        month: Month,
        records: list[Record],
        correlation_id: Optional[UUID] = None,
    ) -> AdviceResult:
        """
        Advice for one module's month. Never raises.

        Args:
            records: Snapshot of all the user's records; filtered here
        """
        module = get_module(module_id)
        scoped = [
            r for r in filter_month(records, month) if r.module_id == module.id
        ]

        await self._audit_logger.log_advice_requested(
            user_id=user.id,
            module_id=module.id.value,
            record_count=len(scoped),
            correlation_id=correlation_id,
        )

        try:
            advice = await self._advisor.generate_advice(scoped, module.title)
        except AdvisorNotConfiguredError as e:
            await self._audit_logger.log_advice_failed(
                user_id=user.id,
                module_id=module.id.value,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return NOT_CONFIGURED_ADVICE
        except AdviceGenerationError as e:
            await self._audit_logger.log_external_service_error(
                service="gemini",
                error_message=str(e),
                user_id=user.id,
                correlation_id=correlation_id,
            )
            await self._audit_logger.log_advice_failed(
                user_id=user.id,
                module_id=module.id.value,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return UNAVAILABLE_ADVICE

        await self._audit_logger.log_advice_generated(
            user_id=user.id,
            module_id=module.id.value,
            risk_level=advice.risk_level.value,
            correlation_id=correlation_id,
        )
        return advice


class AppComponents(NamedTuple):
    """Everything the UI needs, built once per process."""

    record_flow: RecordFlow
    advice_flow: AdviceFlow
    audit_logger: AuditLogger
    storage_backend: str


def create_app_components(
    use_storage: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured hosted store.
                    Set to False for an in-memory store (testing / offline).
    """
    app_settings = get_settings().app
    configure_logging(app_settings)

    record_storage: RecordStorageInterface
    backend = "memory"

    if use_storage and app_settings.storage_backend == "sheets":
        try:
            sheets_client = GoogleSheetsClient()
            record_storage = GoogleSheetsRecordStorage(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
            backend = "sheets"
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            record_storage = InMemoryRecordStorage()
            audit_logger = AuditLogger(InMemoryAuditStorage())
    else:
        record_storage = InMemoryRecordStorage()
        audit_logger = AuditLogger(InMemoryAuditStorage())

    return AppComponents(
        record_flow=RecordFlow(record_storage, audit_logger),
        advice_flow=AdviceFlow(audit_logger=audit_logger),
        audit_logger=audit_logger,
        storage_backend=backend,
    )
