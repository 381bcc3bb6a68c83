"""
================================================================================
STATE.PY - SCAN CHECKPOINT & KEY-VALUE PERSISTENCE
================================================================================
PURPOSE: Hold the resumable scan cursor (ScanState) and the small key-value
         stores it is persisted in between invocations.

FEATURES:
  - ScanState record with JSON (de)serialization
  - JsonFileStore: local JSON file (development, manual runs)
  - SheetPropertyStore: hidden worksheet inside the output spreadsheet
    (scheduled runs, where the local disk does not survive)
  - Saved root folder / mode settings
================================================================================
"""

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

try:
    from .config import SHEET_WRITE_DELAY
    from .logger import log_msg
except ImportError:
    from core.config import SHEET_WRITE_DELAY
    from core.logger import log_msg

STATE_KEY = "scan_state"
ROOT_KEY = "root_folder_id"
MODE_KEY = "include_subfolders"

# Sheets rejects cells over 50,000 characters
CHUNK_SIZE = 45000


@dataclass
class ScanState:
    """Cursor of an in-progress scan."""

    folder_ids: List[str] = field(default_factory=list)
    current_index: int = 0
    total_folders: int = 0
    processed_count: int = 0
    include_subfolders: bool = False
    update_only: bool = False
    root_id: str = ""
    root_name: str = ""
    error_count: int = 0
    rows_written: int = 0
    started_at: str = ""
    # Entry whose unexpected failure ended the previous slice; -1 when none
    retry_index: int = -1

    @property
    def finished(self) -> bool:
        return self.current_index >= len(self.folder_ids)

    @property
    def percent(self) -> int:
        if not self.total_folders:
            return 100
        return int(self.processed_count * 100 / self.total_folders)

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str) -> "ScanState":
        data = json.loads(raw)
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        state = cls(**known)
        if not 0 <= state.current_index <= len(state.folder_ids):
            raise ValueError(f"cursor {state.current_index} outside 0..{len(state.folder_ids)}")
        return state


# ==================== KEY-VALUE STORES ====================

class JsonFileStore:
    """Key-value store kept as one JSON object in a local file."""

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            log_msg(f"[ERROR] State file {self.path} is corrupt, ignoring it: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str):
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str):
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class SheetPropertyStore:
    """
    PURPOSE: Key-value store backed by a two-column worksheet
             (column A = key, column B = value).

    LOGIC:
      - A Sheets cell holds at most 50,000 characters, so values longer than
        CHUNK_SIZE are split over rows "key", "key#1", "key#2", ...
      - get() joins the chunks back in order

    ATTRIBUTES:
      ws (Worksheet): gspread worksheet holding the pairs
    """

    def __init__(self, worksheet):
        self.ws = worksheet

    def _find_rows(self, key: str, rows: List[List[str]]) -> Dict[int, int]:
        """Map chunk number -> sheet row number (1-indexed) for ``key``."""
        found = {}
        prefix = f"{key}#"
        for idx, row in enumerate(rows, start=1):
            name = row[0] if row else ""
            if name == key:
                found[0] = idx
            elif name.startswith(prefix) and name[len(prefix):].isdigit():
                found[int(name[len(prefix):])] = idx
        return found

    def get(self, key: str) -> Optional[str]:
        rows = self.ws.get_all_values()
        found = self._find_rows(key, rows)
        if 0 not in found:
            return None

        parts = []
        chunk = 0
        while chunk in found:
            values = rows[found[chunk] - 1]
            parts.append(values[1] if len(values) > 1 else "")
            chunk += 1
        return "".join(parts)

    def set(self, key: str, value: str):
        chunks = [value[i:i + CHUNK_SIZE] for i in range(0, len(value), CHUNK_SIZE)] or [""]
        found = self._find_rows(key, self.ws.get_all_values())

        new_rows = []
        for chunk, text in enumerate(chunks):
            name = key if chunk == 0 else f"{key}#{chunk}"
            row = found.get(chunk)
            if row is None:
                new_rows.append([name, text])
            else:
                self.ws.update(values=[[name, text]], range_name=f"A{row}:B{row}", raw=True)
        if new_rows:
            self.ws.append_rows(new_rows, value_input_option="RAW")

        # Bottom-up so earlier row numbers stay valid
        stale = sorted((row for chunk, row in found.items() if chunk >= len(chunks)), reverse=True)
        for row in stale:
            self.ws.delete_rows(row)
        time.sleep(SHEET_WRITE_DELAY)

    def delete(self, key: str):
        found = self._find_rows(key, self.ws.get_all_values())
        if not found:
            return
        for row in sorted(found.values(), reverse=True):
            self.ws.delete_rows(row)
        time.sleep(SHEET_WRITE_DELAY)


# ==================== STATE HELPERS ====================

def load_state(store) -> Optional[ScanState]:
    """
    PURPOSE: Read the persisted ScanState.

    RETURNS:
      ScanState or None: None when absent or unreadable (logged)
    """
    raw = store.get(STATE_KEY)
    if not raw:
        return None
    try:
        return ScanState.from_json(raw)
    except (ValueError, TypeError, AttributeError) as e:
        log_msg(f"[ERROR] Discarding unreadable scan state: {e}")
        return None


def save_state(store, state: ScanState):
    store.set(STATE_KEY, state.to_json())


def clear_state(store) -> bool:
    """Delete the persisted ScanState; returns whether one existed."""
    existed = store.get(STATE_KEY) is not None
    store.delete(STATE_KEY)
    return existed


def save_settings(store, root_id: str, include_subfolders: bool):
    store.set(ROOT_KEY, root_id)
    store.set(MODE_KEY, "true" if include_subfolders else "false")


def load_settings(store) -> Tuple[Optional[str], Optional[bool]]:
    """Return the saved (root_id, include_subfolders); either may be None."""
    root_id = store.get(ROOT_KEY) or None
    mode = store.get(MODE_KEY)
    include_subfolders = None if mode is None else mode.strip().lower() == "true"
    return root_id, include_subfolders
