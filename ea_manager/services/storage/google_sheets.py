"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a shared backend because:
1. The owner can view and export the account book directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a handful of accounts is fine)
- No transactions (a save rewrites the whole worksheet)
- Limited query capabilities (we aggregate in Python anyway)

The account collection lives in one worksheet named after the storage
namespace, one row per account, history JSON-serialized in the last column.
"""

import json
from datetime import datetime, timezone
from typing import Optional, Sequence
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from ea_manager.config import get_settings
from ea_manager.models.account import Account, AccountStatus, HistoryEntry
from ea_manager.models.activity import (
    ActivityEvent,
    ActivityEventType,
    ActivitySeverity,
)
from ea_manager.services.storage.interface import (
    AccountStorageInterface,
    ActivityStorageInterface,
    PersistenceUnavailableError,
    StorageError,
    ensure_unique_accounts,
)


logger = structlog.get_logger(__name__)


# Column mappings for the accounts sheet
ACCOUNT_COLUMNS = [
    "account",
    "expire",
    "status",
    "package",
    "history_json",
]

# Column mappings for the activity sheet
ACTIVITY_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_id",
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
                raise PersistenceUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise PersistenceUnavailableError(
                    f"Failed to connect to Google Sheets: {e}"
                )

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
                raise PersistenceUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def find_worksheet(self, title: str) -> Optional[gspread.Worksheet]:
        """Get a worksheet by title, or None if it doesn't exist."""
        try:
            return self.get_spreadsheet().worksheet(title)
        except gspread.WorksheetNotFound:
            return None

    def get_or_create_worksheet(
        self,
        title: str,
        header: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        """Get a worksheet, creating it with a header row if missing."""
        sheet = self.find_worksheet(title)
        if sheet is None:
            sheet = self.get_spreadsheet().add_worksheet(
                title=title,
                rows=rows,
                cols=len(header),
            )
            sheet.append_row(header)
        return sheet

    def get_activity_sheet(self) -> gspread.Worksheet:
        """Get or create the activity worksheet."""
        return self.get_or_create_worksheet(
            self._settings.activity_sheet_name,
            ACTIVITY_COLUMNS,
            rows=5000,  # More rows for the activity trail
        )


class GoogleSheetsAccountStorage(AccountStorageInterface):
    """
    Google Sheets implementation of account storage.

    A missing worksheet means nothing has been stored yet.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        namespace: str = "ea_accounts",
    ):
        self._client = client or GoogleSheetsClient()
        self._namespace = namespace

    def _account_to_row(self, account: Account) -> list:
        """Convert an Account to a spreadsheet row."""
        return [
            account.account,
            account.expire.isoformat(),
            account.status.value,
            account.package,
            json.dumps([entry.model_dump(mode="json") for entry in account.history]),
        ]

    def _row_to_account(self, row: list) -> Account:
        """Convert a spreadsheet row to an Account."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        history_json = safe_get(4)
        history = tuple(
            HistoryEntry.model_validate(item)
            for item in (json.loads(history_json) if history_json else [])
        )

        return Account(
            account=safe_get(0),
            expire=safe_get(1),
            status=AccountStatus(safe_get(2, AccountStatus.ACTIVE.value)),
            package=safe_get(3),
            history=history,
        )

    def load(self) -> Optional[list[Account]]:
        """Load the collection from the namespace worksheet."""
        try:
            sheet = self._client.find_worksheet(self._namespace)
            if sheet is None:
                return None
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise PersistenceUnavailableError(f"Failed to read accounts: {e}")

        accounts = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                accounts.append(self._row_to_account(row))
            except ValueError as e:
                raise PersistenceUnavailableError(
                    f"Malformed account row {row[0]!r}: {e}"
                )
        return ensure_unique_accounts(accounts)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def save(self, accounts: Sequence[Account]) -> None:
        """Rewrite the namespace worksheet with the whole collection."""
        try:
            sheet = self._client.get_or_create_worksheet(
                self._namespace, ACCOUNT_COLUMNS
            )
            rows = [ACCOUNT_COLUMNS] + [self._account_to_row(a) for a in accounts]
            sheet.clear()
            sheet.append_rows(rows, value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise PersistenceUnavailableError(f"Failed to save accounts: {e}")


class GoogleSheetsActivityStorage(ActivityStorageInterface):
    """
    Google Sheets implementation of the activity trail.

    Activity events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> ActivityEvent:
        """Convert a spreadsheet row to an ActivityEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        timestamp = datetime.fromisoformat(safe_get(1))
        if timestamp.tzinfo is None:
            # Rows written before timestamps carried an offset are UTC
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        return ActivityEvent(
            event_id=UUID(safe_get(0)),
            timestamp=timestamp,
            event_type=ActivityEventType(safe_get(2)),
            severity=ActivitySeverity(safe_get(3)),
            entity_id=safe_get(4) or None,
            description=safe_get(5),
            details=json.loads(safe_get(6)) if safe_get(6) else {},
            error_message=safe_get(7) or None,
            is_user_action=safe_get(8).lower() == "true",
        )

    def append_event(self, event: ActivityEvent) -> bool:
        """Append an activity event."""
        try:
            sheet = self._client.get_activity_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Don't raise - the activity trail must not break the main flow
            logger.warning(
                "activity_sheet_write_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

    def get_recent_events(
        self,
        limit: int = 50,
    ) -> list[ActivityEvent]:
        """Get recent events."""
        try:
            sheet = self._client.get_activity_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise PersistenceUnavailableError(f"Failed to read activity events: {e}")

        events = []
        for row in all_rows:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except ValueError:
                    continue  # Skip malformed rows

        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
