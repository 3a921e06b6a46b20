"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Every operation is scoped to one user: a user can never read or change
another user's records.
"""

from abc import ABC, abstractmethod

from finfamily.models.record import Record, RecordDraft
from finfamily.models.audit import AuditEvent


class RecordStorageInterface(ABC):
    """
    Abstract interface for financial record storage.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def list_records(self, user_id: str) -> list[Record]:
        """
        List all of a user's records.

        Returns:
            Records ordered by date, newest first

        Raises:
            StorageError: If the store can't be read
        """
        pass

    @abstractmethod
    async def create_record(self, user_id: str, draft: RecordDraft) -> Record:
        """
        Store a new record.

        Args:
            user_id: Owner of the record
            draft: The record fields

        Returns:
            The stored record, with its newly assigned id

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def update_record(self, user_id: str, record: Record) -> Record:
        """
        Replace an existing record (matched by id).

        Raises:
            NotFoundError: If the user has no record with that id
            StorageError: If update fails
        """
        pass

    @abstractmethod
    async def delete_record(self, user_id: str, record_id: str) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a record was deleted, False if none matched
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
