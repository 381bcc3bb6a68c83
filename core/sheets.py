"""
================================================================================
SHEETS.PY - GOOGLE SHEETS OPERATIONS
================================================================================
PURPOSE: Handle Google API authentication and all Google Sheets interactions
         for the folder listing: the output worksheet (tabular sink), the
         progress cell and the hidden state worksheet.

FEATURES:
  - Service account authentication (file + raw JSON)
  - Output sheet clear / header / batched row appends
  - Column reads and targeted cell writes for the maintenance passes
  - Quota (429) retry on every write
  - Dynamic sheet creation if missing
================================================================================
"""

import json
import time
from pathlib import Path
from typing import Dict, List, Sequence

import gspread
from gspread.exceptions import WorksheetNotFound, APIError
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials

try:
    from .config import (
        GOOGLE_SHEET_URL, GOOGLE_CRED_PATH, GOOGLE_CREDENTIALS_JSON,
        SHEET_OUTPUT, SHEET_STATE, SHEET_STATUS,
        COLUMN_ORDER, SHEET_WRITE_DELAY
    )
    from .logger import log_msg, print_error, get_timestamp_full
except ImportError:
    from core.config import (
        GOOGLE_SHEET_URL, GOOGLE_CRED_PATH, GOOGLE_CREDENTIALS_JSON,
        SHEET_OUTPUT, SHEET_STATE, SHEET_STATUS,
        COLUMN_ORDER, SHEET_WRITE_DELAY
    )
    from core.logger import log_msg, print_error, get_timestamp_full

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive"
]

QUOTA_RETRIES = 3
QUOTA_WAIT_SECONDS = 60

# ==================== GOOGLE AUTH ====================

def load_google_credentials():
    """
    PURPOSE: Load service account credentials shared by Sheets and Drive.
             Supports both local credentials file and GitHub Secrets raw JSON.

    RETURNS:
      Credentials: google-auth service account credentials

    RAISES:
      SystemExit: If credentials not found or invalid
    """
    try:
        if GOOGLE_CRED_PATH and Path(GOOGLE_CRED_PATH).exists():
            log_msg(f"[INFO] Using credentials from: {GOOGLE_CRED_PATH}")
            return Credentials.from_service_account_file(str(GOOGLE_CRED_PATH), scopes=SCOPES)

        if GOOGLE_CREDENTIALS_JSON:
            log_msg("[INFO] Using credentials from GitHub Secrets")
            cred_dict = json.loads(GOOGLE_CREDENTIALS_JSON)
            return Credentials.from_service_account_info(cred_dict, scopes=SCOPES)

        print_error(
            f"Google credentials not found.\n"
            f"  Checked: {GOOGLE_CRED_PATH}\n"
            f"  Also checked: GOOGLE_CREDENTIALS_JSON env var"
        )
        raise SystemExit(1)

    except json.JSONDecodeError as e:
        print_error(f"Invalid JSON in credentials: {e}")
        raise SystemExit(1)
    except ValueError as e:
        print_error(f"Google authentication failed: {e}")
        raise SystemExit(1)


def authenticate_google(credentials=None):
    """
    PURPOSE: Authorize a gspread client.

    ARGS:
      credentials (Credentials, optional): Pre-loaded credentials; loaded
        from config when omitted

    RETURNS:
      gspread.Client: Authenticated Sheets client
    """
    log_msg("[INFO] Authenticating with Google Sheets API...")
    if credentials is None:
        credentials = load_google_credentials()
    client = gspread.authorize(credentials)
    log_msg("[OK] Google Sheets authenticated")
    return client


def with_quota_retry(func, *args, **kwargs):
    """
    PURPOSE: Run a Sheets call, waiting out 429 quota errors.

    RAISES:
      APIError: Non-quota errors immediately, quota errors after the last attempt
    """
    for attempt in range(1, QUOTA_RETRIES + 1):
        try:
            return func(*args, **kwargs)
        except APIError as e:
            if '429' not in str(e) or attempt == QUOTA_RETRIES:
                raise
            log_msg(f"[API] 429 Quota exceeded, waiting {QUOTA_WAIT_SECONDS}s (attempt {attempt}/{QUOTA_RETRIES})...")
            time.sleep(QUOTA_WAIT_SECONDS)


# ==================== SHEETS MANAGER CLASS ====================

class SheetsManager:
    """
    PURPOSE: Tabular sink for folder rows backed by one worksheet.

    ATTRIBUTES:
      client (gspread.Client): Authenticated Sheets API client
      ss (Spreadsheet): Active Google Spreadsheet
      output_ws (Worksheet): Folder listing sheet
      status_ws (Worksheet): Progress sheet (created on first update)
    """

    def __init__(self, client, sheet_url: str = GOOGLE_SHEET_URL, output_sheet: str = SHEET_OUTPUT):
        log_msg("[INFO] Initializing Google Sheets manager...")

        self.client = client
        self.ss = client.open_by_url(sheet_url)
        self.output_ws = self._get_or_create_sheet(output_sheet, cols=len(COLUMN_ORDER))
        self.status_ws = None

        log_msg(f"[OK] Sheets manager initialized (sheet: {output_sheet})")

    def _get_or_create_sheet(self, name: str, rows: int = 1000, cols: int = 20):
        """
        PURPOSE: Get existing worksheet or create new one if missing.

        ARGS:
          name (str): Worksheet name
          rows (int): Default rows for new sheet
          cols (int): Default columns for new sheet
        """
        try:
            return self.ss.worksheet(name)
        except WorksheetNotFound:
            log_msg(f"[INFO] Creating new sheet: {name}")
            return self.ss.add_worksheet(title=name, rows=rows, cols=cols)

    def get_state_worksheet(self):
        """Worksheet holding persisted key/value pairs (hidden from the sheet tabs)."""
        try:
            return self.ss.worksheet(SHEET_STATE)
        except WorksheetNotFound:
            log_msg(f"[INFO] Creating state sheet: {SHEET_STATE}")
            ws = self.ss.add_worksheet(title=SHEET_STATE, rows=50, cols=2)
            try:
                ws.hide()
            except APIError as e:
                log_msg(f"[ERROR] Could not hide state sheet: {e}")
            return ws

    # ---------- sink operations ----------

    def clear(self):
        with_quota_retry(self.output_ws.clear)
        time.sleep(SHEET_WRITE_DELAY)

    def write_header(self, columns: Sequence[str]):
        with_quota_retry(self.output_ws.update, values=[list(columns)], range_name="A1")
        time.sleep(SHEET_WRITE_DELAY)
        self._apply_formatting(len(columns))

    def append_rows(self, rows: List[List[str]]):
        """Append rows below the last written row, in order."""
        if not rows:
            return
        with_quota_retry(
            self.output_ws.append_rows,
            [list(r) for r in rows],
            value_input_option="RAW",
            table_range="A1",
        )
        time.sleep(SHEET_WRITE_DELAY)

    def read_column(self, index: int) -> List[str]:
        """
        PURPOSE: Read a whole column (header included).

        ARGS:
          index (int): Column number (0-indexed)
        """
        return with_quota_retry(self.output_ws.col_values, index + 1)

    def write_cells(self, index: int, values_by_row: Dict[int, str]):
        """
        PURPOSE: Overwrite single cells of one column in one batch.

        ARGS:
          index (int): Column number (0-indexed)
          values_by_row (dict): Row number (1-indexed) -> new value
        """
        if not values_by_row:
            return
        data = [
            {"range": rowcol_to_a1(row, index + 1), "values": [[value]]}
            for row, value in sorted(values_by_row.items())
        ]
        with_quota_retry(self.output_ws.batch_update, data, value_input_option="RAW")
        time.sleep(SHEET_WRITE_DELAY)

    def update_progress(self, text: str):
        """Write the progress line into the status sheet."""
        if self.status_ws is None:
            self.status_ws = self._get_or_create_sheet(SHEET_STATUS, rows=10, cols=3)
        with_quota_retry(
            self.status_ws.update,
            values=[["Progress", text, get_timestamp_full()]],
            range_name="A1",
        )

    # ---------- formatting ----------

    def _apply_formatting(self, column_count: int):
        """
        PURPOSE: Apply column widths, bold header and frozen header row
                 to the output sheet.
        """
        try:
            sheet_id = self.output_ws.id
            column_widths = [200, 220, 320, 140, 160, 90][:column_count]
            reqs = []

            for i, width in enumerate(column_widths):
                reqs.append({
                    "updateDimensionProperties": {
                        "range": {
                            "sheetId": sheet_id,
                            "dimension": "COLUMNS",
                            "startIndex": i,
                            "endIndex": i + 1
                        },
                        "properties": {"pixelSize": width},
                        "fields": "pixelSize"
                    }
                })

            reqs.append({
                "repeatCell": {
                    "range": {"sheetId": sheet_id, "startRowIndex": 0, "endRowIndex": 1},
                    "cell": {
                        "userEnteredFormat": {
                            "textFormat": {"bold": True},
                            "horizontalAlignment": "CENTER",
                            "verticalAlignment": "MIDDLE"
                        }
                    },
                    "fields": "userEnteredFormat.textFormat,userEnteredFormat.horizontalAlignment,userEnteredFormat.verticalAlignment"
                }
            })

            # Freeze header row
            reqs.append({
                "updateSheetProperties": {
                    "properties": {
                        "sheetId": sheet_id,
                        "gridProperties": {"frozenRowCount": 1}
                    },
                    "fields": "gridProperties.frozenRowCount"
                }
            })

            self.ss.batch_update({"requests": reqs})
            log_msg("[OK] Formatting applied to output sheet")

        except APIError as e:
            log_msg(f"[ERROR] Formatting failed: {e}")
