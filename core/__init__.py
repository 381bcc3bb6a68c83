"""
================================================================================
core/__init__.py - Package Initialization
================================================================================
PURPOSE: Makes the core folder a Python package and exposes main classes/functions
         for easy importing in main.py and the scanner modes

EXPORTS:
  - SheetsManager, authenticate_google, load_google_credentials (from sheets)
  - DriveClient, build_drive_service (from drive)
  - ScanSession, ScanSettings, run_scan, reset_scan, scan_status (from scanner)
  - classify_folder, mark_empty (from empty_check)
  - remove_marked (from cleanup)
  - log_msg and console helpers (from logger)
================================================================================
"""

from core.config import validate_config, IS_CI

from core.logger import (
    log_msg, get_local_time, get_timestamp_full,
    print_header, print_separator, print_success, print_error
)

from core.errors import ScannerError, AccessError, NotFoundError

from core.drive import DriveClient, FolderHandle, build_drive_service, folder_id_from_url

from core.sheets import SheetsManager, authenticate_google, load_google_credentials

from core.state import (
    ScanState, JsonFileStore, SheetPropertyStore,
    load_settings, save_settings
)

from core.scanner import ScanSession, ScanSettings, ScanResult, run_scan, reset_scan, scan_status

from core.empty_check import classify_folder, mark_empty

from core.cleanup import remove_marked

__all__ = [
    'validate_config', 'IS_CI',
    'log_msg', 'get_local_time', 'get_timestamp_full',
    'print_header', 'print_separator', 'print_success', 'print_error',
    'ScannerError', 'AccessError', 'NotFoundError',
    'DriveClient', 'FolderHandle', 'build_drive_service', 'folder_id_from_url',
    'SheetsManager', 'authenticate_google', 'load_google_credentials',
    'ScanState', 'JsonFileStore', 'SheetPropertyStore', 'load_settings', 'save_settings',
    'ScanSession', 'ScanSettings', 'ScanResult', 'run_scan', 'reset_scan', 'scan_status',
    'classify_folder', 'mark_empty',
    'remove_marked',
]
