"""
================================================================================
LOGGER.PY - LOGGING & CONSOLE OUTPUT
================================================================================
PURPOSE: Centralized logging system with rich formatting for console output.
         Handles different log levels (INFO, OK, ERROR, SCAN, PROGRESS, etc.)

FEATURES:
  - Color-coded messages based on log type
  - Emoji icons for visual distinction
  - Timestamp formatting (configurable UTC offset)
  - CI/CD mode support (plain text output for GitHub Actions)
  - Rich console formatting for local development
================================================================================
"""

import os
import sys
import warnings
from datetime import datetime, timedelta, timezone
from colorama import init as colorama_init
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

# Initialize colorama for Windows compatibility
colorama_init(autoreset=True)

# Rich console for fancy formatting
console = Console()

IS_CI = bool(os.getenv('GITHUB_ACTIONS'))
TZ_OFFSET_HOURS = float(os.getenv('TZ_OFFSET_HOURS', '0'))

try:
    from .config import IS_CI as CONFIG_IS_CI, TZ_OFFSET_HOURS as CONFIG_TZ_OFFSET
    IS_CI = CONFIG_IS_CI
    TZ_OFFSET_HOURS = CONFIG_TZ_OFFSET
except ImportError:
    pass

# Suppress deprecation warnings (googleapiclient discovery cache)
warnings.filterwarnings("ignore", category=DeprecationWarning)

# ==================== TIME UTILITIES ====================

def get_local_time():
    """
    PURPOSE: Get current time shifted by the configured UTC offset

    RETURNS:
      datetime: Naive datetime in the configured local time
    """
    return datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(hours=TZ_OFFSET_HOURS)


def get_timestamp_short():
    """Short timestamp (HH:MM:SS) for console lines."""
    return get_local_time().strftime('%H:%M:%S')


def get_timestamp_full():
    """
    PURPOSE: Get full timestamp format (DD-MMM-YY HH:MM AM/PM)

    RETURNS:
      str: Formatted time string
    """
    return get_local_time().strftime('%d-%b-%y %I:%M %p')


def format_drive_time(value: str) -> str:
    """Convert a Drive RFC 3339 timestamp into the sheet's display format."""
    if not value:
        return ""
    try:
        parsed = datetime.strptime(value[:19], '%Y-%m-%dT%H:%M:%S')
    except ValueError:
        return value
    return (parsed + timedelta(hours=TZ_OFFSET_HOURS)).strftime('%d-%b-%y %I:%M %p')

# ==================== LOGGING FUNCTIONS ====================

_LEVELS = [
    ("[OK]", "green", "✅"),
    ("[ERROR]", "red", "❌"),
    ("FATAL", "red", "❌"),
    ("[SCAN]", "cyan", "📂"),
    ("[PROGRESS]", "blue", "📊"),
    ("[PAUSED]", "yellow", "⏸️"),
    ("[COMPLETE]", "magenta", "🏁"),
    ("[API]", "blue", "🌐"),
    ("[TRASH]", "yellow", "🗑️"),
]


def log_msg(message: str, style: str = None):
    """
    PURPOSE: Log a message with automatic level detection and formatting

    LOGIC:
      - Parse message for log level indicators ([OK], [ERROR], etc.)
      - Assign color and emoji based on level
      - Output to console with formatting or plain text (if CI/CD)

    ARGS:
      message (str): Message to log
      style (str, optional): Rich style override
    """
    ts = get_timestamp_short()
    text = str(message)
    detected_style = style
    icon = "ℹ️ "

    # Auto-detect log level from message content
    upper = text.upper()
    for tag, tag_style, tag_icon in _LEVELS:
        if tag in upper:
            detected_style = style or tag_style
            icon = tag_icon
            break

    if IS_CI:
        # Plain text for GitHub Actions
        print(f"[{ts}] {text}")
        sys.stdout.flush()
    else:
        console.print(f"[bold]{ts}[/bold] {icon}  {escape(text)}", style=detected_style, highlight=False)


def print_header(title: str, data: dict = None):
    """
    PURPOSE: Print a formatted header panel with configuration/status info

    ARGS:
      title (str): Header title
      data (dict, optional): Key-value pairs to display
    """
    if IS_CI:
        print(f"\n{'=' * 70}")
        print(f"  {title}")
        print(f"{'=' * 70}")
        if data:
            for key, value in data.items():
                print(f"  {key}: {value}")
        return

    header = Table.grid(padding=(0, 2))
    header.add_column(justify="left")
    header.add_row(title)
    if data:
        for key, value in data.items():
            header.add_row(f"{key}: {value}")

    console.print(Panel(header, title=title, border_style="magenta"))


def print_separator(char: str = "="):
    print(char * 70)


def print_success(message: str):
    log_msg(f"[OK] {message}")


def print_error(message: str):
    log_msg(f"[ERROR] {message}")


def print_info(message: str):
    log_msg(f"[INFO] {message}")
