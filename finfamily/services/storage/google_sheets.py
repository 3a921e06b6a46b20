"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the hosted storage backend because:
1. The family can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for a household)
- No transactions (we handle this with careful ordering)
- Limited query capabilities (we filter in Python)

Records of every user live in one worksheet; the user_id column scopes them.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finfamily.config import get_settings
from finfamily.models.audit import AuditEvent
from finfamily.models.record import (
    ModuleId,
    Record,
    RecordDraft,
    RecordKind,
)
from finfamily.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    NotFoundError,
    RecordStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


# Column mappings for the records sheet
RECORD_COLUMNS = [
    "id",
    "user_id",
    "created_at",
    "updated_at",
    "module_id",
    "title",
    "amount",
    "date",
    "kind",
    "category",
    "note",
]

# Column mappings for the audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "user_id",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_records_sheet(self) -> gspread.Worksheet:
        """Get or create the records worksheet."""
        return self._get_or_create_sheet(
            self._settings.records_sheet_name, RECORD_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


def _safe_get(row: list, index: int, default: str = "") -> str:
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


def record_to_row(user_id: str, record: Record, created_at: Optional[str] = None) -> list:
    """Convert a Record to a spreadsheet row."""
    now = datetime.utcnow().isoformat()
    return [
        record.id,
        user_id,
        created_at or now,
        now,
        record.module_id.value,
        record.title,
        str(record.amount),
        record.date,
        record.kind.value,
        record.category or "",
        record.note or "",
    ]


def row_to_record(row: list) -> Record:
    """Convert a spreadsheet row to a Record."""
    try:
        amount = Decimal(_safe_get(row, 6, "0"))
    except InvalidOperation:
        raise ValueError(f"Invalid amount in row: {_safe_get(row, 6)!r}")

    return Record(
        id=_safe_get(row, 0),
        module_id=ModuleId(_safe_get(row, 4)),
        title=_safe_get(row, 5),
        amount=amount,
        date=_safe_get(row, 7),
        kind=RecordKind(_safe_get(row, 8)),
        category=_safe_get(row, 9) or None,
        note=_safe_get(row, 10) or None,
    )


class GoogleSheetsRecordStorage(RecordStorageInterface):
    """
    Google Sheets implementation of record storage.

    Records are stored as rows in a worksheet with one record per row.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, all_rows: list[list], user_id: str, record_id: str) -> Optional[int]:
        """1-based sheet row index of a user's record, or None."""
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
            if row and row[0] == record_id and _safe_get(row, 1) == user_id:
                return idx
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def list_records(self, user_id: str) -> list[Record]:
        """List a user's records, newest first."""
        try:
            sheet = self._client.get_records_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except Exception as e:
            raise StorageError(f"Failed to list records: {e}")

        records = []
        for row in all_rows:
            if not row or not row[0] or _safe_get(row, 1) != user_id:
                continue
            try:
                records.append(row_to_record(row))
            except ValueError as e:
                # A hand-edited row shouldn't hide the rest of the data
                logger.warning("malformed_record_row", record_id=row[0], error=str(e))

        records.sort(key=lambda r: r.date_parts, reverse=True)
        return records

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def create_record(self, user_id: str, draft: RecordDraft) -> Record:
        """Append a new record row."""
        record = Record.from_draft(draft, str(uuid4()))
        try:
            sheet = self._client.get_records_sheet()
            sheet.append_row(record_to_row(user_id, record), value_input_option="RAW")
        except Exception as e:
            raise StorageError(f"Failed to save record: {e}")
        return record

    @retry(
        retry=retry_if_not_exception_type(NotFoundError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def update_record(self, user_id: str, record: Record) -> Record:
        """Rewrite an existing record row in place."""
        try:
            sheet = self._client.get_records_sheet()
            all_rows = sheet.get_all_values()

            idx = self._find_row(all_rows, user_id, record.id)
            if idx is None:
                raise NotFoundError(f"Record not found: {record.id}")

            created_at = _safe_get(all_rows[idx - 1], 2) or None
            sheet.update(
                range_name=f"A{idx}",
                values=[record_to_row(user_id, record, created_at=created_at)],
                value_input_option="RAW",
            )
            return record
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update record: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def delete_record(self, user_id: str, record_id: str) -> bool:
        """Delete a record row."""
        try:
            sheet = self._client.get_records_sheet()
            all_rows = sheet.get_all_values()

            idx = self._find_row(all_rows, user_id, record_id)
            if idx is None:
                return False

            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete record: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event.

        Raises:
            StorageError: If the row can't be written after retries.
                          AuditLogger catches it; the main flow goes on.
        """
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")
        return True
