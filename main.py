#!/usr/bin/env python3
"""
================================================================================
MAIN.PY - ENTRY POINT & COMMAND DISPATCH
================================================================================
PURPOSE: Command-line entry point for the Drive folder scanner.

COMMANDS:
  scan           List (or keep listing) the folders under the root folder
  status         Show the progress of the scan in progress
  reset          Forget the scan in progress (sheet rows are kept)
  mark-empty     Classify listed folders, mark empty ones DELETE
  remove-marked  Move folders marked DELETE to the Drive trash

USAGE:
  python main.py scan --root <FOLDER_ID>            # New scan of a root folder
  python main.py scan --root <FOLDER_ID> --subfolders
  python main.py scan                               # Resume / rerun saved root
  python main.py scan --update                      # Append only new folders
  python main.py mark-empty --max-depth 3
  python main.py remove-marked
================================================================================
"""

import argparse
import sys

from core import (
    validate_config,
    log_msg, print_header, print_separator, print_error,
    IS_CI, folder_id_from_url,
)
from config import BATCH_SIZE, TIME_BUDGET_SECONDS, EMPTY_CHECK_MAX_DEPTH
from scanner import (
    run_scan_mode, run_reset_mode, run_status_mode,
    run_mark_empty_mode, run_remove_marked_mode,
)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Drive Folder Scanner - list Google Drive folders into Google Sheets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py scan --root 1AbC... --subfolders
  python main.py scan                 # resume the paused scan
  python main.py reset
  python main.py mark-empty
  python main.py remove-marked
        """
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Run or resume the folder listing")
    scan.add_argument("--root", default=None, help="Root folder id or URL (saved for later runs)")
    scan.add_argument(
        "--subfolders", action=argparse.BooleanOptionalAction, default=None,
        help="List each folder's immediate subfolders (saved for later runs)"
    )
    scan.add_argument("--update", action="store_true", help="Keep existing rows, append only new folder URLs")
    scan.add_argument("--batch-size", type=int, default=None, help=f"Rows per checkpoint (default {BATCH_SIZE})")
    scan.add_argument(
        "--time-budget", type=float, default=None,
        help=f"Seconds per run before pausing (default {TIME_BUDGET_SECONDS:g})"
    )

    sub.add_parser("status", help="Show the scan in progress")
    sub.add_parser("reset", help="Discard the scan in progress")

    mark = sub.add_parser("mark-empty", help="Mark empty folders for removal")
    mark.add_argument(
        "--max-depth", type=int, default=None,
        help=f"Subfolder depth checked per row (default {EMPTY_CHECK_MAX_DEPTH})"
    )

    sub.add_parser("remove-marked", help="Trash folders marked DELETE")
    return parser


def _root_argument(value):
    """Accept a bare folder id or a folder URL."""
    if not value:
        return None
    return folder_id_from_url(value) or value.strip()


def main(argv=None):
    """
    PURPOSE: Parse arguments, validate configuration and run one command.

    RETURNS:
      int: Exit code (0 = success/paused, 1 = error)
    """
    args = build_parser().parse_args(argv)

    try:
        validate_config()
    except SystemExit:
        return 1

    if not IS_CI:
        print_header("Drive Folder Scanner", {"Command": args.command})
    print_separator()

    try:
        if args.command == "scan":
            result = run_scan_mode(
                root_id=_root_argument(args.root),
                include_subfolders=args.subfolders,
                update_only=args.update,
                batch_size=args.batch_size,
                time_budget=args.time_budget,
            )
            return 0 if result.ok else 1

        if args.command == "status":
            run_status_mode()
            return 0

        if args.command == "reset":
            run_reset_mode()
            return 0

        if args.command == "mark-empty":
            stats = run_mark_empty_mode(max_depth=args.max_depth)
            return 0 if stats["checked"] or not stats["errors"] else 1

        if args.command == "remove-marked":
            stats = run_remove_marked_mode()
            return 0 if stats["removed"] or not stats["errors"] else 1

    except SystemExit:
        return 1
    except KeyboardInterrupt:
        log_msg("[INFO] Interrupted by user")
        return 1
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        return 1

    return 1


if __name__ == '__main__':
    sys.exit(main())
