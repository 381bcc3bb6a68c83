"""Folder listing workflow (one time-bounded slice per call)."""

from __future__ import annotations

from typing import Optional, Tuple

from config import INCLUDE_SUBFOLDERS, ROOT_FOLDER_ID
from core.logger import log_msg, print_separator
from core.scanner import ScanResult, ScanSession, reset_scan, run_scan, scan_status
from core.state import load_settings, load_state, save_settings
from scanner.session import build_session


def resolve_scan_target(
    session: ScanSession,
    root_id: Optional[str] = None,
    include_subfolders: Optional[bool] = None,
) -> Tuple[Optional[str], bool]:
    """
    PURPOSE: Decide which root/mode a new scan uses.

    LOGIC:
      - Explicit arguments win and are saved for later runs
      - Otherwise the saved settings are used
      - Otherwise ROOT_FOLDER_ID / INCLUDE_SUBFOLDERS from the environment
    """
    saved_root, saved_mode = load_settings(session.store)
    default_mode = saved_mode if saved_mode is not None else INCLUDE_SUBFOLDERS
    mode = include_subfolders if include_subfolders is not None else default_mode
    target = root_id or saved_root or ROOT_FOLDER_ID or None

    if root_id or (saved_root and mode != saved_mode):
        save_settings(session.store, target, mode)
    return target, mode


def run_scan_mode(
    root_id: Optional[str] = None,
    include_subfolders: Optional[bool] = None,
    update_only: bool = False,
    batch_size: Optional[int] = None,
    time_budget: Optional[float] = None,
    session: Optional[ScanSession] = None,
) -> ScanResult:
    """Run (or resume) one slice of the folder listing."""

    session = session or build_session(batch_size=batch_size, time_budget=time_budget)

    if load_state(session.store) is not None:
        result = run_scan(session, root_id, include_subfolders, update_only)
    else:
        target, mode = resolve_scan_target(session, root_id, include_subfolders)
        log_msg(f"[INFO] Starting scan of root {target or '(none)'}")
        result = run_scan(session, target, mode, update_only)

    print_separator()
    log_msg(f"[INFO] Scan status: {result.status.upper()}")
    log_msg(f"  Processed:    {result.processed}/{result.total}")
    log_msg(f"  Rows written: {result.rows_written}")
    log_msg(f"  Errors:       {result.errors}")
    if update_only or result.skipped:
        log_msg(f"  Skipped:      {result.skipped}")
    if result.message:
        log_msg(f"  {result.message}")
    print_separator()
    return result


def run_reset_mode(session: Optional[ScanSession] = None) -> bool:
    session = session or build_session()
    return reset_scan(session)


def run_status_mode(session: Optional[ScanSession] = None) -> Optional[dict]:
    """Log and return the in-progress scan summary."""
    session = session or build_session()
    status = scan_status(session)
    if status is None:
        log_msg("[INFO] No scan in progress")
        return None

    mode = "folders + subfolders" if status["include_subfolders"] else "folders"
    log_msg(f"[INFO] Scan of '{status['root_name']}' ({mode}) started {status['started_at']}")
    log_msg(f"  Progress: {status['percent']}% ({status['processed']}/{status['total']})")
    log_msg(f"  Rows:     {status['rows_written']}")
    log_msg(f"  Errors:   {status['errors']}")
    return status
