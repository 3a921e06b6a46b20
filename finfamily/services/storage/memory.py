"""
In-Memory Storage

Used by the test-suite and by the offline mode (STORAGE_BACKEND=memory).
Nothing survives a restart.
"""

from uuid import uuid4

from finfamily.models.audit import AuditEvent
from finfamily.models.record import Record, RecordDraft
from finfamily.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    RecordStorageInterface,
)


class InMemoryRecordStorage(RecordStorageInterface):
    """Records kept in a dict per user, keyed by record id."""

    def __init__(self):
        self._records: dict[str, dict[str, Record]] = {}

    def _user_records(self, user_id: str) -> dict[str, Record]:
        return self._records.setdefault(user_id, {})

    def seed(self, user_id: str, records: list[Record]) -> None:
        """Load existing records (ids already assigned)."""
        store = self._user_records(user_id)
        for record in records:
            if record.id in store:
                raise DuplicateError(f"Record already exists: {record.id}")
            store[record.id] = record

    async def list_records(self, user_id: str) -> list[Record]:
        records = list(self._user_records(user_id).values())
        records.sort(key=lambda r: r.date_parts, reverse=True)
        return records

    async def create_record(self, user_id: str, draft: RecordDraft) -> Record:
        record = Record.from_draft(draft, str(uuid4()))
        self._user_records(user_id)[record.id] = record
        return record

    async def update_record(self, user_id: str, record: Record) -> Record:
        store = self._user_records(user_id)
        if record.id not in store:
            raise NotFoundError(f"Record not found: {record.id}")
        store[record.id] = record
        return record

    async def delete_record(self, user_id: str, record_id: str) -> bool:
        return self._user_records(user_id).pop(record_id, None) is not None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True
