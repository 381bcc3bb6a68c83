"""
================================================================================
EMPTY_CHECK.PY - EMPTY FOLDER CLASSIFICATION & MARKING
================================================================================
PURPOSE: Decide whether a listed folder holds anything, and mark the empty
         ones in the ACTION column so a later pass can trash them.

CLASSIFICATION:
  hasFiles       a file exists in the folder or in a subfolder (within depth)
  emptyLeaf      no files, no subfolders
  emptySubtree   no files anywhere below, only empty subfolders
  hasSubfolders  depth bound reached before the answer was known

The depth bound (EMPTY_CHECK_MAX_DEPTH, default 5) keeps a single row from
walking an arbitrarily deep tree. Deeper trees come back as hasSubfolders,
not as empty. This pass has no time budget and no resume.
================================================================================
"""

from typing import Dict

try:
    from .config import COLUMN_TO_INDEX, STATUS_ERROR, ACTION_DELETE
    from .drive import folder_id_from_url
    from .errors import AccessError
    from .logger import log_msg, print_separator
    from .utils import AdaptiveDelay
except ImportError:
    from core.config import COLUMN_TO_INDEX, STATUS_ERROR, ACTION_DELETE
    from core.drive import folder_id_from_url
    from core.errors import AccessError
    from core.logger import log_msg, print_separator
    from core.utils import AdaptiveDelay

HAS_FILES = "hasFiles"
EMPTY_LEAF = "emptyLeaf"
EMPTY_SUBTREE = "emptySubtree"
HAS_SUBFOLDERS = "hasSubfolders"

EMPTY_CLASSES = (EMPTY_LEAF, EMPTY_SUBTREE)

STATUS_LABELS = {
    HAS_FILES: "Has files",
    EMPTY_LEAF: "Empty",
    EMPTY_SUBTREE: "Empty (only empty subfolders)",
    HAS_SUBFOLDERS: "Has subfolders (not fully checked)",
}

URL_COL = COLUMN_TO_INDEX["URL"]
STATUS_COL = COLUMN_TO_INDEX["STATUS"]
ACTION_COL = COLUMN_TO_INDEX["ACTION"]


def classify_folder(provider, handle, max_depth: int = 5, depth: int = 0) -> str:
    """
    PURPOSE: Depth-first emptiness check of one folder.

    LOGIC:
      - Any direct file -> hasFiles
      - No subfolders -> emptyLeaf
      - At the depth bound with subfolders left -> hasSubfolders
      - Otherwise recurse: any hasFiles wins, any inconclusive child makes
        the result inconclusive, all-empty children give emptySubtree

    ARGS:
      provider: Storage provider
      handle (FolderHandle): Folder to check
      max_depth (int): Deepest level recursed into (root is level 0)

    RETURNS:
      str: One of HAS_FILES, EMPTY_LEAF, EMPTY_SUBTREE, HAS_SUBFOLDERS
    """
    if provider.list_files(handle, limit=1):
        return HAS_FILES

    children = provider.list_children(handle)
    if not children:
        return EMPTY_LEAF

    if depth >= max_depth:
        return HAS_SUBFOLDERS

    inconclusive = False
    for child in children:
        verdict = classify_folder(provider, child, max_depth, depth + 1)
        if verdict == HAS_FILES:
            return HAS_FILES
        if verdict == HAS_SUBFOLDERS:
            inconclusive = True

    return HAS_SUBFOLDERS if inconclusive else EMPTY_SUBTREE


def _write_updates(sink, status_updates: Dict[int, str], action_updates: Dict[int, str]):
    sink.write_cells(STATUS_COL, status_updates)
    sink.write_cells(ACTION_COL, action_updates)
    status_updates.clear()
    action_updates.clear()


def mark_empty(session) -> Dict[str, int]:
    """
    PURPOSE: Classify every listed folder and mark empty ones for removal.

    LOGIC:
      - Read the URL column (data rows only)
      - Resolve + classify each folder, write the label into STATUS
      - emptyLeaf / emptySubtree rows get ACTION = DELETE
      - Unresolvable or failing folders get "Error: ..." in STATUS
      - Cells are written every batch_size rows

    RETURNS:
      dict: checked, empty, errors
    """
    sink = session.sink
    provider = session.provider
    settings = session.settings
    delay = AdaptiveDelay(settings.min_delay, settings.max_delay)
    batch_size = max(1, settings.batch_size)

    stats = {"checked": 0, "empty": 0, "errors": 0}
    status_updates: Dict[int, str] = {}
    action_updates: Dict[int, str] = {}

    urls = sink.read_column(URL_COL)
    log_msg(f"[SCAN] Checking {max(len(urls) - 1, 0)} rows for empty folders (depth limit {settings.max_depth})")

    try:
        for row_num, url in enumerate(urls[1:], start=2):
            folder_id = folder_id_from_url(url)
            if not folder_id:
                continue

            try:
                handle = provider.resolve(folder_id)
                verdict = classify_folder(provider, handle, settings.max_depth)
            except AccessError as e:
                log_msg(f"[ERROR] Row {row_num}: {e}")
                status_updates[row_num] = f"{STATUS_ERROR}: {e.message}"
                stats["errors"] += 1
                delay.on_error()
            except Exception as e:
                log_msg(f"[ERROR] Row {row_num}: check of {folder_id} failed: {e}")
                status_updates[row_num] = f"{STATUS_ERROR}: {e}"
                stats["errors"] += 1
                delay.on_error()
            else:
                status_updates[row_num] = STATUS_LABELS[verdict]
                if verdict in EMPTY_CLASSES:
                    action_updates[row_num] = ACTION_DELETE
                    stats["empty"] += 1
                stats["checked"] += 1
                delay.on_success()

            if len(status_updates) >= batch_size:
                _write_updates(sink, status_updates, action_updates)
            delay.sleep()
    finally:
        # Verdicts already computed are kept even if the pass is interrupted
        _write_updates(sink, status_updates, action_updates)

    print_separator()
    log_msg("[COMPLETE] Empty folder check finished")
    log_msg(f"  Checked: {stats['checked']}")
    log_msg(f"  Empty:   {stats['empty']}")
    log_msg(f"  Errors:  {stats['errors']}")
    print_separator()
    return stats
