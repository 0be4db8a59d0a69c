"""
Google Sheets Record Store

Uses a worksheet as the booking table:
- row 1 holds the headers, every other row is a booking
- rows are read with get_all_records() and keyed by header; cells stay text
  so "007" is not read back as 7
- rows are written RAW so the sheet does not reinterpret them either
- appends are written in the sheet's current header order
- single cells are updated by (row number, header position)

Row references are 1-based sheet row numbers (first data row is 2).
"""

import logging
import os
from typing import Any, Dict, List, Optional

import gspread

from ..exceptions import RecordStoreError
from ..models.booking import BOOKING_HEADERS
from .record_store import RecordStore, StoredRow

logger = logging.getLogger(__name__)


def open_worksheet(service_account_file: str, spreadsheet: str, sheet_name: str) -> gspread.Worksheet:
    """Return a gspread Worksheet for the configured spreadsheet and sheet name."""
    if not service_account_file or not os.path.exists(service_account_file):
        raise RecordStoreError(
            "Google service account JSON not found. Set GOOGLE_SERVICE_ACCOUNT_JSON to a valid path."
        )
    if not spreadsheet:
        raise RecordStoreError("Spreadsheet identifier not configured. Set GSHEET_ID.")

    client = gspread.service_account(filename=service_account_file)
    try:
        try:
            sh = client.open_by_key(spreadsheet)
        except gspread.SpreadsheetNotFound:
            sh = client.open(spreadsheet)
        return sh.worksheet(sheet_name)
    except gspread.exceptions.GSpreadException as e:
        logger.exception(f"open_worksheet failed for sheet={sheet_name}")
        raise RecordStoreError(f"Could not open sheet '{sheet_name}': {e}")


class GoogleSheetsRecordStore(RecordStore):
    """Record store backed by a Google Sheets worksheet"""

    def __init__(self, worksheet: Optional[gspread.Worksheet] = None, opener=None):
        self._worksheet = worksheet
        self._opener = opener

    @classmethod
    def from_settings(cls, settings) -> "GoogleSheetsRecordStore":
        return cls(opener=lambda: open_worksheet(
            settings.service_account_file,
            settings.gsheet_id,
            settings.bookings_sheet,
        ))

    @property
    def worksheet(self) -> gspread.Worksheet:
        if self._worksheet is None:
            if self._opener is None:
                raise RecordStoreError("No worksheet configured")
            self._worksheet = self._opener()
        return self._worksheet

    def _headers(self) -> List[str]:
        return [str(h).strip() for h in self.worksheet.row_values(1)]

    def scan_all(self) -> List[StoredRow]:
        try:
            if not self._headers():
                return []
            records = self.worksheet.get_all_records(numericise_ignore=["all"])
        except gspread.exceptions.GSpreadException as e:
            logger.error(f"get_all_records failed: {e}")
            raise RecordStoreError(f"Could not read bookings sheet: {e}")
        return [
            StoredRow(ref=idx, values={str(k).strip(): v for k, v in r.items()})
            for idx, r in enumerate(records, start=2)
        ]

    def append(self, row: Dict[str, Any]) -> int:
        try:
            headers = self._headers()
            if not headers:
                # Empty sheet: lay out the standard header row first
                headers = list(BOOKING_HEADERS) + [k for k in row if k not in BOOKING_HEADERS]
                self.worksheet.append_row(headers, value_input_option="RAW")
            ordered = [row.get(h, "") for h in headers]
            missing = [k for k in row if k not in headers]
            if missing:
                logger.warning(f"Sheet has no column for {missing}; those values are dropped")
            response = self.worksheet.append_row(ordered, value_input_option="RAW")
        except gspread.exceptions.GSpreadException as e:
            logger.exception("append_row failed")
            raise RecordStoreError(f"Could not append booking row: {e}")
        return self._row_number_from_response(response)

    def update_field(self, ref: int, field_name: str, value: Any) -> None:
        try:
            headers = self._headers()
            if field_name in headers:
                col = headers.index(field_name) + 1
            else:
                col = len(headers) + 1
                self.worksheet.update_cell(1, col, field_name)
            self.worksheet.update_cell(ref, col, value)
        except gspread.exceptions.GSpreadException as e:
            logger.exception(f"update_cell failed for row {ref}, field {field_name}")
            raise RecordStoreError(f"Could not update booking row {ref}: {e}")

    def _row_number_from_response(self, response) -> Optional[int]:
        """Pull the written row number out of the append response (e.g. 'Bookings!A7:R7')."""
        try:
            updated = response["updates"]["updatedRange"]
            cell = updated.split("!")[-1].split(":")[0]
            return int("".join(ch for ch in cell if ch.isdigit()))
        except (KeyError, TypeError, ValueError, IndexError):
            return None

    def describe(self) -> str:
        return f"GoogleSheetsRecordStore({getattr(self._worksheet, 'title', 'unopened')})"
