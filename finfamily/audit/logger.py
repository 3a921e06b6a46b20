"""
Audit Logger

DESIGN DECISION: Every user action on the family's records is logged.
This provides:
1. Complete traceability
2. Debugging capability when a hosted service misbehaves
3. A history the family can inspect in the audit sheet

The audit logger:
- Is async to match the storage layer
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finfamily.config import AppSettings
from finfamily.models.audit import AuditEvent, AuditEventBuilder
from finfamily.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(settings: AppSettings) -> None:
    """
    Apply the app settings to logging.

    DEBUG level in debug mode, INFO otherwise. Every log line carries the
    environment name.
    """
    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(logging.DEBUG if settings.debug_mode else logging.INFO)
    structlog.contextvars.bind_contextvars(environment=settings.app_environment)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_user_signed_in(self, user_id: str, email: str) -> None:
        await self.log(AuditEventBuilder.user_signed_in(user_id=user_id, email=email))

    async def log_user_signed_out(self, user_id: str) -> None:
        await self.log(AuditEventBuilder.user_signed_out(user_id=user_id))

    async def log_records_loaded(
        self,
        user_id: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a record fetch."""
        event = AuditEventBuilder.records_loaded(
            user_id=user_id,
            record_count=record_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_record_created(
        self,
        user_id: str,
        record_id: str,
        module_id: str,
        title: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log record creation."""
        event = AuditEventBuilder.record_created(
            user_id=user_id,
            record_id=record_id,
            module_id=module_id,
            title=title,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_record_updated(
        self,
        user_id: str,
        record_id: str,
        title: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log record update."""
        event = AuditEventBuilder.record_updated(
            user_id=user_id,
            record_id=record_id,
            title=title,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_record_deleted(
        self,
        user_id: str,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log record deletion."""
        event = AuditEventBuilder.record_deleted(
            user_id=user_id,
            record_id=record_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_save_failed(
        self,
        user_id: str,
        operation: str,
        error_message: str,
        record_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed create/update/delete."""
        event = AuditEventBuilder.save_failed(
            user_id=user_id,
            operation=operation,
            error_message=error_message,
            record_id=record_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_advice_requested(
        self,
        user_id: str,
        module_id: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.advice_requested(
            user_id=user_id,
            module_id=module_id,
            record_count=record_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_advice_generated(
        self,
        user_id: str,
        module_id: str,
        risk_level: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.advice_generated(
            user_id=user_id,
            module_id=module_id,
            risk_level=risk_level,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_advice_failed(
        self,
        user_id: str,
        module_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.advice_failed(
            user_id=user_id,
            module_id=module_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user session and pass it through all
    subsequent operations.
    """
    return uuid4()
