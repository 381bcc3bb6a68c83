"""
================================================================================
SESSION.PY - GOOGLE-BACKED SCAN SESSIONS
================================================================================
PURPOSE: Wire the real Drive provider, Sheets sink and key-value store into a
         ScanSession. Every mode builds its session here so credentials are
         loaded once and shared by gspread and the Drive service.
================================================================================
"""

from __future__ import annotations

from typing import Optional

from config import (
    BATCH_SIZE,
    EMPTY_CHECK_MAX_DEPTH,
    MAX_DELAY,
    MIN_DELAY,
    STATE_BACKEND,
    STATE_FILE,
    TIME_BUDGET_SECONDS,
)
from core.drive import DriveClient, build_drive_service
from core.logger import log_msg
from core.scanner import ScanSession, ScanSettings
from core.sheets import SheetsManager, authenticate_google, load_google_credentials
from core.state import JsonFileStore, SheetPropertyStore


def build_store(sheets: SheetsManager, backend: str = STATE_BACKEND):
    """Return the key-value store selected by STATE_BACKEND."""
    if backend == "file":
        log_msg(f"[INFO] Scan state kept in {STATE_FILE}")
        return JsonFileStore(STATE_FILE)
    log_msg("[INFO] Scan state kept in the spreadsheet")
    return SheetPropertyStore(sheets.get_state_worksheet())


def build_session(
    batch_size: Optional[int] = None,
    time_budget: Optional[float] = None,
    max_depth: Optional[int] = None,
) -> ScanSession:
    """Authenticate once and return a session over Drive + Sheets."""
    credentials = load_google_credentials()
    sheets = SheetsManager(authenticate_google(credentials))
    drive = DriveClient(build_drive_service(credentials))

    settings = ScanSettings(
        batch_size=BATCH_SIZE if batch_size is None else batch_size,
        time_budget=TIME_BUDGET_SECONDS if time_budget is None else time_budget,
        max_depth=EMPTY_CHECK_MAX_DEPTH if max_depth is None else max_depth,
        min_delay=MIN_DELAY,
        max_delay=MAX_DELAY,
    )
    return ScanSession(provider=drive, sink=sheets, store=build_store(sheets), settings=settings)
