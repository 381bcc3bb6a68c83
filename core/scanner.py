"""
================================================================================
SCANNER.PY - BATCHED FOLDER LISTING WITH CHECKPOINTED RESUME
================================================================================
PURPOSE: List the folders under a Drive root (optionally with their immediate
         subfolders) into the output sheet in bounded time slices. When the
         slice budget runs out the cursor is persisted and the next call
         continues where this one stopped.

WORKFLOW (one call = one slice):
  1. Load ScanState, or snapshot the root's child folder ids on first call
  2. Visit entries until the list ends or the time budget is spent
  3. Flush rows + progress + checkpoint every BATCH_SIZE entries
  4. Paused  -> persist ScanState
     Complete -> delete ScanState
================================================================================
"""

import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Set, Tuple

try:
    from .config import (
        BATCH_SIZE, TIME_BUDGET_SECONDS, EMPTY_CHECK_MAX_DEPTH, MIN_DELAY, MAX_DELAY,
        COLUMN_ORDER, COLUMN_TO_INDEX,
        STATUS_OK, STATUS_ERROR, NO_SUBFOLDERS, UNAVAILABLE
    )
    from .errors import AccessError
    from .logger import log_msg, print_error, get_timestamp_full, format_drive_time
    from .state import ScanState, load_state, save_state, clear_state
    from .utils import calculate_eta
except ImportError:
    from core.config import (
        BATCH_SIZE, TIME_BUDGET_SECONDS, EMPTY_CHECK_MAX_DEPTH, MIN_DELAY, MAX_DELAY,
        COLUMN_ORDER, COLUMN_TO_INDEX,
        STATUS_OK, STATUS_ERROR, NO_SUBFOLDERS, UNAVAILABLE
    )
    from core.errors import AccessError
    from core.logger import log_msg, print_error, get_timestamp_full, format_drive_time
    from core.state import ScanState, load_state, save_state, clear_state
    from core.utils import calculate_eta

URL_COL = COLUMN_TO_INDEX["URL"]

STATUS_PAUSED = "paused"
STATUS_COMPLETE = "complete"
STATUS_FAILED = "error"


@dataclass
class ScanSettings:
    batch_size: int = BATCH_SIZE
    time_budget: float = TIME_BUDGET_SECONDS
    max_depth: int = EMPTY_CHECK_MAX_DEPTH
    min_delay: float = MIN_DELAY
    max_delay: float = MAX_DELAY


@dataclass
class ScanSession:
    """
    PURPOSE: Everything one scan call needs, passed in explicitly.

    ATTRIBUTES:
      provider: Storage provider (resolve / list_children / list_files / trash)
      sink: Tabular sink (clear / write_header / append_rows / read_column /
            write_cells / update_progress)
      store: Key-value store (get / set / delete)
      settings (ScanSettings): Batch size, slice time budget, empty-check depth,
                               API pacing for the maintenance passes
      clock: Monotonic seconds source used for the time budget
    """

    provider: Any
    sink: Any
    store: Any
    settings: ScanSettings = field(default_factory=ScanSettings)
    clock: Callable[[], float] = time.monotonic


@dataclass
class ScanResult:
    status: str
    processed: int = 0
    total: int = 0
    rows_written: int = 0
    errors: int = 0
    skipped: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status != STATUS_FAILED


# ==================== ROW BUILDERS ====================

def folder_row(parent_name: str, handle, name: Optional[str] = None) -> List[str]:
    return [
        parent_name,
        handle.name if name is None else name,
        handle.url,
        format_drive_time(handle.modified_at),
        STATUS_OK,
        "",
    ]


def error_row(folder_id: str, exc: Exception) -> List[str]:
    return [
        UNAVAILABLE,
        folder_id,
        "",
        get_timestamp_full(),
        f"{STATUS_ERROR}: {getattr(exc, 'message', None) or exc}",
        "",
    ]


def _rows_for_entry(provider, state: ScanState, folder_id: str) -> Tuple[List[List[str]], bool]:
    """Build the rows for one top-level entry; the flag is True on failure."""
    try:
        folder = provider.resolve(folder_id)
        if not state.include_subfolders:
            return [folder_row(state.root_name, folder)], False

        children = provider.list_children(folder)
    except AccessError as e:
        log_msg(f"[ERROR] Folder {folder_id} unavailable: {e.message}")
        return [error_row(folder_id, e)], True

    if not children:
        return [folder_row(folder.name, folder, name=NO_SUBFOLDERS)], False
    return [folder_row(folder.name, child) for child in children], False


def _existing_urls(sink) -> Set[str]:
    column = sink.read_column(URL_COL)
    return {cell.strip() for cell in column[1:] if cell and cell.strip()}


# ==================== SCAN OPERATIONS ====================

def _start_scan(session: ScanSession, root_id: str, include_subfolders: bool, update_only: bool) -> ScanState:
    """
    PURPOSE: Resolve the root and snapshot its child folder ids.

    RAISES:
      AccessError / NotFoundError: root unavailable (nothing persisted)
    """
    root = session.provider.resolve(root_id)
    children = session.provider.list_children(root)

    state = ScanState(
        folder_ids=[child.id for child in children],
        total_folders=len(children),
        include_subfolders=include_subfolders,
        update_only=update_only,
        root_id=root.id,
        root_name=root.name,
        started_at=get_timestamp_full(),
    )

    if update_only:
        if not session.sink.read_column(0):
            session.sink.write_header(COLUMN_ORDER)
    else:
        session.sink.clear()
        session.sink.write_header(COLUMN_ORDER)

    mode = "folders + subfolders" if include_subfolders else "folders"
    log_msg(f"[SCAN] New scan of '{root.name}': {state.total_folders} folders ({mode}{', update only' if update_only else ''})")
    return state


def _write_rows(session: ScanSession, state: ScanState, buffer: List[List[str]]):
    if buffer:
        session.sink.append_rows(buffer)
        state.rows_written += len(buffer)
        buffer.clear()


def _report_progress(session: ScanSession, state: ScanState, processed_in_slice: int, elapsed: float):
    remaining = state.total_folders - state.processed_count
    eta = calculate_eta(processed_in_slice, processed_in_slice + remaining, elapsed)
    progress = f"{state.percent}% ({state.processed_count}/{state.total_folders}) ETA {eta}"
    log_msg(f"[PROGRESS] {progress}")
    session.sink.update_progress(progress)


def run_scan(session: ScanSession, root_id: Optional[str] = None,
             include_subfolders: Optional[bool] = None, update_only: bool = False) -> ScanResult:
    """
    PURPOSE: Run one time-bounded slice of the folder listing.

    LOGIC:
      - Without persisted state: start a new scan of ``root_id``
      - With persisted state: ignore the arguments and resume from the cursor
      - A folder that cannot be resolved becomes an error row; the slice goes on
      - Checkpoint (rows + progress + state) every ``batch_size`` entries
      - Any other failure rolls back to the last checkpoint; an entry that
        fails that way twice in a row is written as an error row instead

    ARGS:
      session (ScanSession): Provider, sink, store, settings and clock
      root_id (str, optional): Root folder id, needed only for a new scan
      include_subfolders (bool, optional): List immediate subfolders per folder
      update_only (bool): Keep existing rows, append only unseen URLs

    RETURNS:
      ScanResult: status "paused", "complete" or "error"
    """
    slice_start = session.clock()
    settings = session.settings
    batch_size = max(1, settings.batch_size)

    state = load_state(session.store)
    if state is None:
        if not root_id:
            message = "No scan in progress and no root folder id given"
            print_error(message)
            return ScanResult(STATUS_FAILED, message=message)
        try:
            state = _start_scan(session, root_id, bool(include_subfolders), update_only)
        except AccessError as e:
            message = f"Root folder {root_id} unavailable: {e.message}"
            print_error(message)
            return ScanResult(STATUS_FAILED, message=message)
    else:
        if root_id or include_subfolders is not None or update_only:
            log_msg("[INFO] Scan in progress; ignoring new root/mode arguments (reset to start over)")
        log_msg(f"[SCAN] Resuming '{state.root_name}' at {state.current_index}/{len(state.folder_ids)}")

    buffer: List[List[str]] = []
    processed_in_slice = 0
    skipped = 0
    failing_index = None
    # State matching what is already in the sheet; restored if the slice fails
    checkpoint = replace(state)

    try:
        seen_urls = _existing_urls(session.sink) if state.update_only else None

        while not state.finished:
            # Every slice moves the cursor at least one entry
            if processed_in_slice and session.clock() - slice_start >= settings.time_budget:
                break

            folder_id = state.folder_ids[state.current_index]
            try:
                rows, failed = _rows_for_entry(session.provider, state, folder_id)
            except Exception as e:
                # Second unexpected failure on the same entry: record it and move on
                if state.current_index != state.retry_index:
                    failing_index = state.current_index
                    raise
                log_msg(f"[ERROR] Folder {folder_id} failed again, listing it as unavailable: {e}")
                rows, failed = [error_row(folder_id, e)], True
            if failed:
                state.error_count += 1

            for row in rows:
                url = row[URL_COL]
                if seen_urls is not None and url:
                    if url in seen_urls:
                        skipped += 1
                        continue
                    seen_urls.add(url)
                buffer.append(row)

            state.current_index += 1
            state.processed_count += 1
            processed_in_slice += 1

            if state.processed_count % batch_size == 0:
                _write_rows(session, state, buffer)
                checkpoint = replace(state)
                _report_progress(session, state, processed_in_slice, session.clock() - slice_start)
                if not state.finished:
                    save_state(session.store, state)

        if buffer or state.processed_count % batch_size:
            _write_rows(session, state, buffer)
            checkpoint = replace(state)
            _report_progress(session, state, processed_in_slice, session.clock() - slice_start)

        if state.finished:
            clear_state(session.store)
        else:
            save_state(session.store, state)

    except Exception as e:
        # Entries after the last flush are listed again by the next call
        print_error(f"Scan interrupted at entry {state.current_index}: {e}")
        checkpoint.retry_index = -1 if failing_index is None else failing_index
        try:
            save_state(session.store, checkpoint)
        except Exception as save_error:
            print_error(f"Could not save scan state: {save_error}")
        return ScanResult(
            STATUS_FAILED,
            processed=checkpoint.processed_count,
            total=checkpoint.total_folders,
            rows_written=checkpoint.rows_written,
            errors=checkpoint.error_count,
            skipped=skipped,
            message=str(e),
        )

    if state.finished:
        log_msg(
            f"[COMPLETE] Listed {state.total_folders} folders from '{state.root_name}' "
            f"({state.rows_written} rows, {state.error_count} errors)"
        )
        return ScanResult(
            STATUS_COMPLETE,
            processed=state.processed_count,
            total=state.total_folders,
            rows_written=state.rows_written,
            errors=state.error_count,
            skipped=skipped,
            message=f"Complete: {state.total_folders} folders processed",
        )

    log_msg(f"[PAUSED] Time budget reached at {state.processed_count}/{state.total_folders}; run again to continue")
    return ScanResult(
        STATUS_PAUSED,
        processed=state.processed_count,
        total=state.total_folders,
        rows_written=state.rows_written,
        errors=state.error_count,
        skipped=skipped,
        message=f"Paused at {state.percent}%",
    )


def reset_scan(session: ScanSession) -> bool:
    """Discard any persisted scan; sheet rows are left as they are."""
    existed = clear_state(session.store)
    if existed:
        log_msg("[OK] Scan state cleared")
    else:
        log_msg("[INFO] No scan in progress")
    return existed


def scan_status(session: ScanSession) -> Optional[dict]:
    """Summary of the persisted scan, or None when none is in progress."""
    state = load_state(session.store)
    if state is None:
        return None
    return {
        "root_id": state.root_id,
        "root_name": state.root_name,
        "processed": state.processed_count,
        "total": state.total_folders,
        "percent": state.percent,
        "include_subfolders": state.include_subfolders,
        "update_only": state.update_only,
        "errors": state.error_count,
        "rows_written": state.rows_written,
        "started_at": state.started_at,
    }
