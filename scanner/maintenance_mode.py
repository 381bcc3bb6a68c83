"""Empty-folder marking and removal workflows over the listed rows."""

from __future__ import annotations

from typing import Dict, Optional

from core.cleanup import remove_marked
from core.empty_check import mark_empty
from core.logger import log_msg
from core.scanner import ScanSession
from core.state import load_state
from scanner.session import build_session


def _warn_if_scanning(session: ScanSession):
    if load_state(session.store) is not None:
        log_msg("[INFO] A scan is still in progress; only rows listed so far are covered")


def run_mark_empty_mode(
    max_depth: Optional[int] = None,
    session: Optional[ScanSession] = None,
) -> Dict[str, int]:
    """Classify listed folders and mark empty ones DELETE."""
    session = session or build_session(max_depth=max_depth)
    _warn_if_scanning(session)
    return mark_empty(session)


def run_remove_marked_mode(session: Optional[ScanSession] = None) -> Dict[str, int]:
    """Trash every folder marked DELETE."""
    session = session or build_session()
    _warn_if_scanning(session)
    return remove_marked(session)
