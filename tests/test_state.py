"""Tests for ScanState persistence and the key-value stores."""

import json

from core.state import (
    CHUNK_SIZE,
    STATE_KEY,
    JsonFileStore,
    ScanState,
    SheetPropertyStore,
    clear_state,
    load_settings,
    load_state,
    save_settings,
    save_state,
)


class TestScanState:

    def test_json_keeps_cursor_and_flags(self):
        state = ScanState(
            folder_ids=["a", "b", "c"],
            current_index=2,
            total_folders=3,
            processed_count=2,
            include_subfolders=True,
            update_only=True,
            root_id="root",
            root_name="Root",
        )

        restored = ScanState.from_json(state.to_json())

        assert restored == state
        assert restored.percent == 66
        assert not restored.finished

    def test_unknown_keys_are_ignored(self):
        raw = json.dumps({"folder_ids": ["a"], "current_index": 1, "legacy": "x"})
        assert ScanState.from_json(raw).finished

    def test_cursor_out_of_range_is_unreadable(self, store):
        store.set(STATE_KEY, json.dumps({"folder_ids": ["a"], "current_index": 5}))
        assert load_state(store) is None

    def test_non_object_json_is_unreadable(self, store):
        store.set(STATE_KEY, "[1, 2]")
        assert load_state(store) is None

    def test_percent_of_empty_scan(self):
        assert ScanState().percent == 100


class TestJsonFileStore:

    def test_set_get_delete(self, tmp_path):
        store = JsonFileStore(tmp_path / "state.json")

        assert store.get("k") is None
        store.set("k", "v")
        store.set("other", "w")

        assert JsonFileStore(tmp_path / "state.json").get("k") == "v"
        store.delete("k")
        assert store.get("k") is None
        assert store.get("other") == "w"

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{broken")
        store = JsonFileStore(path)

        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"

    def test_state_round_trip_through_file(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "state.json")
        save_state(store, ScanState(folder_ids=["a", "b"], current_index=1, total_folders=2, processed_count=1))

        assert load_state(store).current_index == 1
        assert clear_state(store) is True
        assert load_state(store) is None


class TestSheetPropertyStore:

    def test_set_updates_in_place(self, worksheet):
        store = SheetPropertyStore(worksheet)

        store.set("a", "1")
        store.set("b", "2")
        store.set("a", "3")

        assert worksheet.rows == [["a", "3"], ["b", "2"]]
        assert store.get("a") == "3"
        assert store.get("missing") is None

    def test_delete_removes_row(self, worksheet):
        store = SheetPropertyStore(worksheet)
        store.set("a", "1")
        store.set("b", "2")

        store.delete("a")
        store.delete("never-set")

        assert worksheet.rows == [["b", "2"]]

    def test_empty_value_cell(self, worksheet):
        worksheet.rows = [["k"]]
        assert SheetPropertyStore(worksheet).get("k") == ""

    def test_long_value_is_split_across_rows(self, worksheet):
        store = SheetPropertyStore(worksheet)
        value = "x" * (CHUNK_SIZE * 2) + "tail"

        store.set("big", value)

        assert [row[0] for row in worksheet.rows] == ["big", "big#1", "big#2"]
        assert all(len(row[1]) <= CHUNK_SIZE for row in worksheet.rows)
        assert store.get("big") == value

    def test_shorter_value_drops_surplus_rows(self, worksheet):
        store = SheetPropertyStore(worksheet)
        store.set("big", "y" * (CHUNK_SIZE * 2 + 1))
        store.set("other", "keep")

        store.set("big", "small")

        assert worksheet.rows == [["big", "small"], ["other", "keep"]]
        assert store.get("big") == "small"

    def test_delete_removes_every_chunk(self, worksheet):
        store = SheetPropertyStore(worksheet)
        store.set("big", "z" * (CHUNK_SIZE + 1))
        store.set("big#notes", "unrelated")

        store.delete("big")

        assert store.get("big") is None
        assert worksheet.rows == [["big#notes", "unrelated"]]

    def test_large_scan_state_fits(self, worksheet):
        store = SheetPropertyStore(worksheet)
        ids = [f"1{'x' * 28}{i:05d}" for i in range(2000)]
        state = ScanState(folder_ids=ids, current_index=40, total_folders=2000, processed_count=40)
        assert len(state.to_json()) > worksheet.cell_limit

        save_state(store, state)

        restored = load_state(store)
        assert restored.folder_ids == ids
        assert restored.current_index == 40
        assert clear_state(store) is True
        assert worksheet.rows == []


class TestSettings:

    def test_round_trip(self, store):
        save_settings(store, "root-id", True)
        assert load_settings(store) == ("root-id", True)

        save_settings(store, "root-id", False)
        assert load_settings(store) == ("root-id", False)

    def test_nothing_saved(self, store):
        assert load_settings(store) == (None, None)
