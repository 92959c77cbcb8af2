"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the storage backend because:
1. The owner can browse and fix their cards directly in Sheets
2. No database setup required
3. Easy to export/migrate later

TRADEOFFS:
- No realtime change feed (callers re-list after writes)
- No transactions (we handle this with careful ordering)
- Limited query capabilities (we sort and filter in Python)
"""

import json
from datetime import datetime
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from infocards.config import get_settings
from infocards.models.audit import AuditEvent, AuditEventType, AuditSeverity
from infocards.models.item import Item
from infocards.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    ItemStorageInterface,
    NotFoundError,
    StorageError,
)


# Column mappings for Items sheet
ITEM_COLUMNS = [
    "id",
    "created_at",
    "updated_at",
    "title",
    "type",
    "url",
    "username",
    "note",
    "tags_json",
    "ai_summary",
    "ai_confidence",
    "ai_model",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
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

    def _get_or_create_sheet(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_items_sheet(self) -> gspread.Worksheet:
        """Get or create the Items worksheet."""
        return self._get_or_create_sheet(
            self._settings.items_sheet_name, ITEM_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


def item_to_row(item: Item) -> list:
    """Convert an Item to a spreadsheet row."""
    return [
        str(item.id),
        item.created_at.isoformat(),
        item.updated_at.isoformat(),
        item.title,
        item.type,
        item.url or "",
        item.username or "",
        item.note or "",
        json.dumps(item.tags, ensure_ascii=False),
        item.ai_summary or "",
        str(item.ai_confidence) if item.ai_confidence is not None else "",
        item.ai_model or "",
    ]


def row_to_item(row: list) -> Item:
    """Convert a spreadsheet row to an Item."""
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default

    tags_json = safe_get(8)
    return Item(
        id=UUID(safe_get(0)),
        created_at=datetime.fromisoformat(safe_get(1)),
        updated_at=datetime.fromisoformat(safe_get(2)),
        title=safe_get(3),
        type=safe_get(4, "memo"),
        url=safe_get(5) or None,
        username=safe_get(6) or None,
        note=safe_get(7) or None,
        tags=json.loads(tags_json) if tags_json else [],
        ai_summary=safe_get(9) or None,
        ai_confidence=float(safe_get(10)) if safe_get(10) else None,
        ai_model=safe_get(11) or None,
    )


class GoogleSheetsItemStorage(ItemStorageInterface):
    """
    Google Sheets implementation of card storage.

    Cards are stored one per row. Tags are a JSON array in one cell.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_item(self, item: Item) -> bool:
        """Append a card row."""
        try:
            sheet = self._client.get_items_sheet()
            sheet.append_row(item_to_row(item), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to save item: {e}")

    async def get_item_by_id(self, item_id: UUID) -> Optional[Item]:
        """Retrieve a card by its ID."""
        try:
            sheet = self._client.get_items_sheet()
            for row in sheet.get_all_values()[1:]:
                if row and row[0] == str(item_id):
                    return row_to_item(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get item: {e}")

    async def update_item(self, item: Item) -> bool:
        """Rewrite the row of an existing card."""
        try:
            sheet = self._client.get_items_sheet()
            all_rows = sheet.get_all_values()

            # Row 1 is the header
            for idx, row in enumerate(all_rows[1:], start=2):
                if row and row[0] == str(item.id):
                    new_row = item_to_row(item)
                    sheet.update(
                        values=[new_row],
                        range_name=f"A{idx}",
                        value_input_option="RAW",
                    )
                    return True

            raise NotFoundError(f"Item not found: {item.id}")
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update item: {e}")

    async def delete_item(self, item_id: UUID) -> bool:
        """Delete a card row."""
        try:
            sheet = self._client.get_items_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in enumerate(all_rows[1:], start=2):
                if row and row[0] == str(item_id):
                    sheet.delete_rows(idx)
                    return True

            return False
        except Exception as e:
            raise StorageError(f"Failed to delete item: {e}")

    async def list_items(self, limit: int = 100) -> list[Item]:
        """List cards, newest first."""
        try:
            sheet = self._client.get_items_sheet()
            items = []
            for row in sheet.get_all_values()[1:]:
                if not row or not row[0]:
                    continue
                try:
                    items.append(row_to_item(row))
                except Exception:
                    continue  # Skip malformed rows

            items.sort(key=lambda i: i.created_at, reverse=True)
            return items[:limit]
        except Exception as e:
            raise StorageError(f"Failed to list items: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=UUID(safe_get(5)) if safe_get(5) else None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        sheet = self._client.get_audit_sheet()
        sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID."""
        try:
            sheet = self._client.get_audit_sheet()
            events = []
            for row in sheet.get_all_values()[1:]:
                if row and len(row) > 6 and row[6] == str(correlation_id):
                    try:
                        events.append(self._row_to_event(row))
                    except Exception:
                        continue

            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            sheet = self._client.get_audit_sheet()
            events = []
            for row in sheet.get_all_values()[1:]:
                if row and row[0]:
                    try:
                        events.append(self._row_to_event(row))
                    except Exception:
                        continue

            events.sort(key=lambda e: e.timestamp, reverse=True)
            return events[:limit]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
