#!/usr/bin/env python3
"""
Run one slice of the folder scan for the scheduled (daily) trigger.
Takes no arguments: root folder and mode come from the saved settings,
falling back to ROOT_FOLDER_ID / INCLUDE_SUBFOLDERS in the environment.
A paused scan is continued by the next trigger.
"""

import sys

from config import validate_config
from core.logger import log_msg
from scanner import run_scan_mode


def main():
    try:
        validate_config()
    except SystemExit:
        return 1

    log_msg("[INFO] Scheduled folder scan starting")
    try:
        result = run_scan_mode()
    except SystemExit:
        return 1
    except Exception as e:
        log_msg(f"[ERROR] Fatal error in scheduled scan: {e}")
        return 1

    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
