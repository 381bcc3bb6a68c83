"""High-level scan and maintenance modes exposed by the folder scanner."""

from .scan_mode import run_scan_mode, run_reset_mode, run_status_mode
from .maintenance_mode import run_mark_empty_mode, run_remove_marked_mode

__all__ = [
    "run_scan_mode",
    "run_reset_mode",
    "run_status_mode",
    "run_mark_empty_mode",
    "run_remove_marked_mode",
]
