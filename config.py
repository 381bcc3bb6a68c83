"""
Configuration Manager for the Drive Folder Scanner
Handles all environment variables and settings
"""

import os
import sys
from pathlib import Path
from dotenv import load_dotenv

# Get script directory
SCRIPT_DIR = Path(__file__).parent.absolute()

# Load .env file
env_path = SCRIPT_DIR / '.env'
if env_path.exists():
    print(f"[DEBUG] Loading .env from: {env_path}")
    load_dotenv(env_path)


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Central configuration class"""

    # Google Sheets / Drive
    GOOGLE_SHEET_URL = os.getenv('GOOGLE_SHEET_URL', '').strip()
    GOOGLE_CREDENTIALS_JSON = os.getenv('GOOGLE_CREDENTIALS_JSON', '').strip()
    GOOGLE_APPLICATION_CREDENTIALS = os.getenv('GOOGLE_APPLICATION_CREDENTIALS', 'credentials.json').strip()

    # Scan Settings
    ROOT_FOLDER_ID = os.getenv('ROOT_FOLDER_ID', '').strip()
    INCLUDE_SUBFOLDERS = _env_bool('INCLUDE_SUBFOLDERS')
    BATCH_SIZE = int(os.getenv('BATCH_SIZE', '20'))
    TIME_BUDGET_SECONDS = float(os.getenv('TIME_BUDGET_SECONDS', '300'))
    EMPTY_CHECK_MAX_DEPTH = int(os.getenv('EMPTY_CHECK_MAX_DEPTH', '5'))
    MIN_DELAY = float(os.getenv('MIN_DELAY', '0.1'))
    MAX_DELAY = float(os.getenv('MAX_DELAY', '0.3'))
    SHEET_WRITE_DELAY = float(os.getenv('SHEET_WRITE_DELAY', '1.0'))
    TZ_OFFSET_HOURS = float(os.getenv('TZ_OFFSET_HOURS', '0'))

    # State persistence: "sheet" keeps it inside the spreadsheet, "file" on disk
    STATE_BACKEND = os.getenv('STATE_BACKEND', 'sheet').strip().lower()
    STATE_FILE = SCRIPT_DIR / os.getenv('STATE_FILE', 'scan_state.json').strip()

    # Paths
    SCRIPT_DIR = SCRIPT_DIR

    # URLs
    DRIVE_FOLDER_URL = "https://drive.google.com/drive/folders/"

    # Environment
    IS_CI = bool(os.getenv('GITHUB_ACTIONS'))

    # Sheet Names
    SHEET_OUTPUT = os.getenv('SHEET_OUTPUT', 'Folders').strip()
    SHEET_STATE = os.getenv('SHEET_STATE', '_ScanState').strip()
    SHEET_STATUS = os.getenv('SHEET_STATUS', 'ScanStatus').strip()

    # Column Configuration
    COLUMN_ORDER = [
        "PARENT FOLDER", "FOLDER NAME", "URL",
        "LAST UPDATED", "STATUS", "ACTION"
    ]

    # Row Status / Action Markers
    STATUS_OK = "OK"
    STATUS_ERROR = "Error"
    NO_SUBFOLDERS = "(no subfolders)"
    UNAVAILABLE = "(unavailable)"
    ACTION_DELETE = "DELETE"
    ACTION_REMOVED = "Removed"

    @classmethod
    def validate(cls):
        """Validate critical configuration"""
        errors = []

        print("=" * 70)
        print("CONFIGURATION VALIDATION")
        print("=" * 70)

        cred_path = cls._get_credentials_path()
        print(f"📍 Script Directory: {cls.SCRIPT_DIR}")
        print(f"📍 Credentials Path: {cred_path}")
        print(f"📁 File exists: {cred_path.exists()}")

        if not cls.GOOGLE_SHEET_URL:
            errors.append("❌ GOOGLE_SHEET_URL is required")
        else:
            print("✅ Google Sheet URL: Present")

        if cls.STATE_BACKEND not in ('sheet', 'file'):
            errors.append(f"❌ STATE_BACKEND must be 'sheet' or 'file' (got {cls.STATE_BACKEND!r})")

        if cls.BATCH_SIZE <= 0:
            errors.append("❌ BATCH_SIZE must be positive")

        has_json = bool(cls.GOOGLE_CREDENTIALS_JSON)
        has_file = cred_path.exists()

        if not has_json and not has_file:
            errors.append("❌ Google credentials required (either JSON or file)")
        else:
            if has_json:
                print("✅ Google Credentials: Raw JSON found")
            if has_file:
                print(f"✅ Google Credentials: File found at {cred_path}")

        print("=" * 70)

        if errors:
            print("❌ VALIDATION FAILED")
            print("=" * 70)
            for error in errors:
                print(error)
            print("=" * 70)
            sys.exit(1)

        print("✅ VALIDATION PASSED")
        print("=" * 70)
        return True

    @classmethod
    def _get_credentials_path(cls):
        """Get the actual credentials file path"""
        if cls.GOOGLE_APPLICATION_CREDENTIALS:
            p = Path(cls.GOOGLE_APPLICATION_CREDENTIALS)
            if p.is_absolute():
                return p
            return cls.SCRIPT_DIR / cls.GOOGLE_APPLICATION_CREDENTIALS
        return cls.SCRIPT_DIR / 'credentials.json'

    @classmethod
    def get_credentials_path(cls):
        """Public method to get credentials path"""
        return cls._get_credentials_path()


# Flat aliases for ``from config import BATCH_SIZE`` style imports
GOOGLE_SHEET_URL = Config.GOOGLE_SHEET_URL
GOOGLE_CREDENTIALS_JSON = Config.GOOGLE_CREDENTIALS_JSON
GOOGLE_CRED_PATH = Config.get_credentials_path()
ROOT_FOLDER_ID = Config.ROOT_FOLDER_ID
INCLUDE_SUBFOLDERS = Config.INCLUDE_SUBFOLDERS
BATCH_SIZE = Config.BATCH_SIZE
TIME_BUDGET_SECONDS = Config.TIME_BUDGET_SECONDS
EMPTY_CHECK_MAX_DEPTH = Config.EMPTY_CHECK_MAX_DEPTH
MIN_DELAY = Config.MIN_DELAY
MAX_DELAY = Config.MAX_DELAY
SHEET_WRITE_DELAY = Config.SHEET_WRITE_DELAY
TZ_OFFSET_HOURS = Config.TZ_OFFSET_HOURS
STATE_BACKEND = Config.STATE_BACKEND
STATE_FILE = Config.STATE_FILE
DRIVE_FOLDER_URL = Config.DRIVE_FOLDER_URL
IS_CI = Config.IS_CI
SHEET_OUTPUT = Config.SHEET_OUTPUT
SHEET_STATE = Config.SHEET_STATE
SHEET_STATUS = Config.SHEET_STATUS
COLUMN_ORDER = Config.COLUMN_ORDER
COLUMN_TO_INDEX = {name: idx for idx, name in enumerate(COLUMN_ORDER)}
STATUS_OK = Config.STATUS_OK
STATUS_ERROR = Config.STATUS_ERROR
NO_SUBFOLDERS = Config.NO_SUBFOLDERS
UNAVAILABLE = Config.UNAVAILABLE
ACTION_DELETE = Config.ACTION_DELETE
ACTION_REMOVED = Config.ACTION_REMOVED

validate_config = Config.validate
