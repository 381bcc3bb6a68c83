"""
================================================================================
CLEANUP.PY - TRASH FOLDERS MARKED FOR REMOVAL
================================================================================
PURPOSE: Move every folder whose ACTION cell says DELETE to the Drive trash
         and record the outcome in the same cell.

LOGIC:
  - ACTION = DELETE (any case)  -> trash, then ACTION = Removed
  - trash / resolve failure     -> ACTION = Error: <reason>
  - ACTION = Removed            -> skipped (already done)
  - Folders go to the trash, never permanently deleted
================================================================================
"""

from typing import Dict

try:
    from .config import COLUMN_TO_INDEX, STATUS_ERROR, ACTION_DELETE, ACTION_REMOVED
    from .drive import folder_id_from_url
    from .errors import AccessError
    from .logger import log_msg, print_separator
    from .utils import AdaptiveDelay
except ImportError:
    from core.config import COLUMN_TO_INDEX, STATUS_ERROR, ACTION_DELETE, ACTION_REMOVED
    from core.drive import folder_id_from_url
    from core.errors import AccessError
    from core.logger import log_msg, print_separator
    from core.utils import AdaptiveDelay

URL_COL = COLUMN_TO_INDEX["URL"]
ACTION_COL = COLUMN_TO_INDEX["ACTION"]


def remove_marked(session) -> Dict[str, int]:
    """
    PURPOSE: Trash the folders marked DELETE in the output sheet.

    RETURNS:
      dict: removed, errors, skipped
    """
    sink = session.sink
    provider = session.provider
    settings = session.settings
    delay = AdaptiveDelay(settings.min_delay, settings.max_delay)
    batch_size = max(1, settings.batch_size)

    stats = {"removed": 0, "errors": 0, "skipped": 0}
    updates: Dict[int, str] = {}

    urls = sink.read_column(URL_COL)
    actions = sink.read_column(ACTION_COL)

    try:
        for row_num in range(2, len(actions) + 1):
            action = (actions[row_num - 1] or "").strip()
            if action.lower() == ACTION_REMOVED.lower():
                stats["skipped"] += 1
                continue
            if action.upper() != ACTION_DELETE:
                continue

            url = urls[row_num - 1] if row_num - 1 < len(urls) else ""
            folder_id = folder_id_from_url(url)
            if not folder_id:
                updates[row_num] = f"{STATUS_ERROR}: no folder URL"
                stats["errors"] += 1
                continue

            try:
                handle = provider.resolve(folder_id)
                provider.trash(handle)
            except AccessError as e:
                log_msg(f"[ERROR] Row {row_num}: could not trash {folder_id}: {e.message}")
                updates[row_num] = f"{STATUS_ERROR}: {e.message}"
                stats["errors"] += 1
                delay.on_error()
            except Exception as e:
                log_msg(f"[ERROR] Row {row_num}: could not trash {folder_id}: {e}")
                updates[row_num] = f"{STATUS_ERROR}: {e}"
                stats["errors"] += 1
                delay.on_error()
            else:
                log_msg(f"[TRASH] Row {row_num}: '{handle.name}' moved to trash")
                updates[row_num] = ACTION_REMOVED
                stats["removed"] += 1
                delay.on_success()

            if len(updates) >= batch_size:
                sink.write_cells(ACTION_COL, updates)
                updates.clear()
            delay.sleep()
    finally:
        # Trashed folders must not stay marked DELETE
        sink.write_cells(ACTION_COL, updates)

    print_separator()
    log_msg("[COMPLETE] Removal of marked folders finished")
    log_msg(f"  Removed: {stats['removed']}")
    log_msg(f"  Errors:  {stats['errors']}")
    log_msg(f"  Skipped: {stats['skipped']}")
    print_separator()
    return stats
