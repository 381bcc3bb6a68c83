"""Pytest configuration and fixtures."""
from collections import defaultdict
from typing import Dict, List, Optional

import pytest

from core.drive import FileHandle, FolderHandle, folder_url
from core.errors import AccessError, NotFoundError
from core.scanner import ScanSession, ScanSettings


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeDrive:
    """In-memory folder tree implementing the storage provider interface.

    Every ``resolve`` call advances the attached clock by ``tick`` seconds,
    so a time budget of N lets exactly N folders through per slice.
    """

    def __init__(self, clock: Optional[FakeClock] = None, tick: float = 1.0):
        self.clock = clock
        self.tick = tick
        self.folders: Dict[str, FolderHandle] = {}
        self.children: Dict[str, List[str]] = defaultdict(list)
        self.files: Dict[str, List[FileHandle]] = defaultdict(list)
        self.denied = set()
        self.broken = set()
        self.trashed: List[str] = []
        self.resolved: List[str] = []

    def add_folder(self, folder_id, name=None, parent=None, modified="2024-01-02T03:04:05.000Z"):
        handle = FolderHandle(
            id=folder_id,
            name=name or folder_id,
            url=folder_url(folder_id),
            created_at="2024-01-01T00:00:00.000Z",
            modified_at=modified,
        )
        self.folders[folder_id] = handle
        if parent is not None:
            self.children[parent].append(folder_id)
        return handle

    def add_file(self, parent, name="file.txt"):
        self.files[parent].append(FileHandle(id=f"{parent}-{name}", name=name))

    def remove(self, folder_id):
        self.folders.pop(folder_id, None)

    # ---------- provider interface ----------

    def resolve(self, folder_id):
        if self.clock is not None:
            self.clock.advance(self.tick)
        self.resolved.append(folder_id)
        if folder_id in self.broken:
            raise RuntimeError(f"backend failure for {folder_id}")
        if folder_id in self.denied:
            raise AccessError(folder_id, "access denied")
        if folder_id not in self.folders:
            raise NotFoundError(folder_id)
        return self.folders[folder_id]

    def list_children(self, handle):
        if handle.id in self.denied:
            raise AccessError(handle.id, "access denied")
        return [self.folders[c] for c in self.children[handle.id] if c in self.folders]

    def list_files(self, handle, limit=None):
        files = list(self.files[handle.id])
        return files[:limit] if limit else files

    def trash(self, handle):
        self.trashed.append(handle.id)
        self.remove(handle.id)


class FakeSink:
    """In-memory sheet; ``rows[0]`` is the header once written."""

    def __init__(self):
        self.rows: List[List[str]] = []
        self.progress: List[str] = []
        self.append_calls = 0

    @property
    def data_rows(self):
        return self.rows[1:]

    def clear(self):
        self.rows = []

    def write_header(self, columns):
        if self.rows:
            self.rows[0] = list(columns)
        else:
            self.rows.append(list(columns))

    def append_rows(self, rows):
        self.append_calls += 1
        self.rows.extend(list(r) for r in rows)

    def read_column(self, index):
        column = [row[index] if index < len(row) else "" for row in self.rows]
        # gspread drops trailing empty cells
        while column and not column[-1]:
            column.pop()
        return column

    def write_cells(self, index, values_by_row):
        for row_num, value in values_by_row.items():
            row = self.rows[row_num - 1]
            while len(row) <= index:
                row.append("")
            row[index] = value

    def update_progress(self, text):
        self.progress.append(text)


class MemoryStore:
    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)


class FakeWorksheet:
    """Just enough of gspread.Worksheet for SheetPropertyStore.

    Rejects cells longer than ``cell_limit`` the way Sheets does.
    """

    def __init__(self, cell_limit: int = 50000):
        self.rows: List[List[str]] = []
        self.cell_limit = cell_limit

    def _check(self, values):
        for value in values:
            if len(str(value)) > self.cell_limit:
                raise RuntimeError(
                    f"Your input contains more than the maximum of {self.cell_limit} characters in a single cell."
                )

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_rows(self, values, value_input_option=None):
        for row in values:
            self._check(row)
            self.rows.append(list(row))

    def update(self, values=None, range_name=None, raw=True):
        self._check(values[0])
        row = int(range_name.split(":")[0][1:])
        self.rows[row - 1] = list(values[0])

    def delete_rows(self, row):
        del self.rows[row - 1]


@pytest.fixture(autouse=True)
def no_write_delay(monkeypatch):
    """Sheet pacing sleeps are irrelevant under test."""
    monkeypatch.setattr("core.sheets.SHEET_WRITE_DELAY", 0)
    monkeypatch.setattr("core.state.SHEET_WRITE_DELAY", 0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def drive(clock):
    return FakeDrive(clock=clock, tick=1.0)


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def make_session(drive, sink, store, clock):
    """Factory for sessions over the shared fakes."""

    def _make(batch_size=2, time_budget=1000.0, max_depth=5):
        settings = ScanSettings(
            batch_size=batch_size,
            time_budget=time_budget,
            max_depth=max_depth,
            min_delay=0,
            max_delay=0,
        )
        return ScanSession(provider=drive, sink=sink, store=store, settings=settings, clock=clock)

    return _make


@pytest.fixture
def abc_tree(drive):
    """Root with folders A, B, C (no subfolders)."""
    drive.add_folder("root", "Root")
    for name in ("A", "B", "C"):
        drive.add_folder(name, name, parent="root")
    return drive


@pytest.fixture
def worksheet():
    return FakeWorksheet()
