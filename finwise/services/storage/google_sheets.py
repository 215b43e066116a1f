"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the profile/audit backend because:
1. The profile store is a handful of small documents keyed by uid
2. No database setup required
3. Operators can inspect profiles and the audit trail directly

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (one row per profile, rewritten in place)
- Limited query capabilities (we scan rows in Python)

gspread is synchronous, so every sheet call runs in a worker thread.
The implementation follows the abstract interface, so Firestore can
replace it without changing the auth gateway.
"""

import asyncio
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from finwise.config import get_settings
from finwise.models.audit import AuditEvent
from finwise.models.profile import UserProfile
from finwise.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    NotFoundError,
    ProfileStoreInterface,
    StorageError,
)


# Column mappings for Profiles sheet (document keys, camelCase)
PROFILE_COLUMNS = [
    "uid",
    "firstName",
    "lastName",
    "email",
    "currency",
    "createdAt",
    "lastUpdated",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "user_id",
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

    def _get_or_create_sheet(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(title=title, rows=rows, cols=len(columns))
            sheet.append_row(columns)
        return sheet

    def get_profiles_sheet(self) -> gspread.Worksheet:
        """Get or create the Profiles worksheet."""
        return self._get_or_create_sheet(
            self._settings.profiles_sheet_name, PROFILE_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


def _profile_to_row(profile: UserProfile) -> list:
    """Convert a UserProfile to a spreadsheet row."""
    document = profile.to_document()
    return [document.get(column) or "" for column in PROFILE_COLUMNS]


def _row_to_profile(row: list) -> UserProfile:
    """Convert a spreadsheet row to a UserProfile."""
    document = {
        column: row[index]
        for index, column in enumerate(PROFILE_COLUMNS)
        if index < len(row) and row[index]
    }
    return UserProfile.model_validate(document)


class GoogleSheetsProfileStore(ProfileStoreInterface):
    """
    Google Sheets implementation of the profile document store.

    One profile per row, located by the uid in column A.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet: gspread.Worksheet, uid: str) -> tuple[Optional[int], Optional[list]]:
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if row and row[0] == uid:
                return idx, row
        return None, None

    def _get_profile_sync(self, uid: str) -> Optional[UserProfile]:
        sheet = self._client.get_profiles_sheet()
        _, row = self._find_row(sheet, uid)
        return _row_to_profile(row) if row else None

    def _save_profile_sync(self, profile: UserProfile) -> bool:
        sheet = self._client.get_profiles_sheet()
        idx, _ = self._find_row(sheet, profile.uid)
        new_row = _profile_to_row(profile)
        if idx is None:
            sheet.append_row(new_row, value_input_option="RAW")
        else:
            sheet.update(
                range_name=f"A{idx}",
                values=[new_row],
                value_input_option="RAW",
            )
        return True

    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        """Retrieve a profile by uid."""
        try:
            return await asyncio.to_thread(self._get_profile_sync, uid)
        except Exception as e:
            raise StorageError(f"Failed to get profile: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_profile(self, profile: UserProfile) -> bool:
        """Create or replace the profile row."""
        try:
            return await asyncio.to_thread(self._save_profile_sync, profile)
        except Exception as e:
            raise StorageError(f"Failed to save profile: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(NotFoundError),
        reraise=True,
    )
    async def update_profile(self, uid: str, **fields) -> bool:
        """Update selected fields of an existing profile row."""
        existing = await self.get_profile(uid)
        if existing is None:
            raise NotFoundError(f"Profile not found: {uid}")
        return await self.save_profile(existing.touched(**fields))


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _append_sync(self, event: AuditEvent) -> bool:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
        return True

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            return await asyncio.to_thread(self._append_sync, event)
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")
