"""Tests for learninghub.core.storage – the persisted JSON blob."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from learninghub.core.state import RootState, SCHEMA_VERSION, ProgressRecord
from learninghub.core.storage import (
    HOME_ENV_VAR,
    STORAGE_KEY,
    PersistentStore,
    default_data_dir,
    timestamp_ms,
)

NOW = datetime(2026, 10, 17, 9, 30)


@pytest.fixture()
def store(tmp_path: Path) -> PersistentStore:
    return PersistentStore(tmp_path, clock=lambda: NOW)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class TestDataDir:
    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(HOME_ENV_VAR, str(tmp_path / "hub"))
        assert default_data_dir() == tmp_path / "hub"

    def test_home_fallback(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv(HOME_ENV_VAR, raising=False)
        assert default_data_dir() == Path.home() / ".learninghub"

    def test_file_named_after_storage_key(self, store: PersistentStore, tmp_path: Path):
        assert store.path == tmp_path / f"{STORAGE_KEY}.json"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestLoad:
    def test_missing_file_returns_defaults(self, store: PersistentStore):
        assert store.load() == RootState()

    def test_corrupt_json(self, store: PersistentStore):
        store.path.write_text("NOT VALID JSON", encoding="utf-8")
        assert store.load() == RootState()

    def test_json_array_is_rejected(self, store: PersistentStore):
        store.path.write_text("[1, 2, 3]", encoding="utf-8")
        assert store.load() == RootState()

    def test_old_data_gets_new_defaults(self, store: PersistentStore):
        store.path.write_text(json.dumps({"progress": {"m1": {"completed": True}}}), encoding="utf-8")
        state = store.load()
        assert state.progress["m1"].completed is True
        assert state.settings["lineSpacing"] == "normal"
        assert state.stats.study_streak == 0

    def test_browser_export_is_migrated(self, store: PersistentStore):
        legacy = {
            "bookmarks": [{"id": "7", "moduleId": "m1", "title": "T", "path": "p", "content": "c", "createdAt": 7}],
            "currentModule": "m1",
        }
        store.path.write_text(json.dumps(legacy), encoding="utf-8")
        state = store.load()
        assert state.bookmarks[0].unit_id == "m1"
        assert state.current_unit == "m1"

    def test_out_of_range_numbers_fall_back(self, store: PersistentStore):
        store.path.write_text(
            '{"schemaVersion": 1e999, "progress": {"a": {"timeSpent": 1e999, "completedAt": 1e999}},'
            ' "stats": {"studyStreak": -1e999}}',
            encoding="utf-8",
        )
        state = store.load()
        assert state.progress["a"] == ProgressRecord()
        assert state.stats.study_streak == 0


# ---------------------------------------------------------------------------
# Saving
# ---------------------------------------------------------------------------

class TestSave:
    def test_writes_whole_state(self, store: PersistentStore):
        state = RootState()
        state.progress["m1"] = ProgressRecord(completed=True)
        assert store.save(state) is True
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["schemaVersion"] == SCHEMA_VERSION
        assert data["progress"]["m1"]["completed"] is True

    def test_stamps_last_accessed(self, store: PersistentStore):
        state = RootState()
        store.save(state)
        assert state.last_accessed == timestamp_ms(NOW)

    def test_save_then_load(self, store: PersistentStore):
        state = RootState()
        state.settings["theme"] = "dark"
        store.save(state)
        assert store.load() == state

    def test_no_temp_file_left_behind(self, store: PersistentStore, tmp_path: Path):
        store.save(RootState())
        assert [p.name for p in tmp_path.iterdir()] == [store.path.name]

    def test_creates_directory(self, tmp_path: Path):
        s = PersistentStore(tmp_path / "nested" / "dir", clock=lambda: NOW)
        assert s.save(RootState()) is True
        assert s.path.exists()

    def test_write_failure_is_reported_not_raised(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        s = PersistentStore(blocker / "sub", clock=lambda: NOW)
        state = RootState()
        state.progress["m1"] = ProgressRecord(completed=True)
        assert s.save(state) is False
        # in-memory state is untouched by the failed write
        assert state.progress["m1"].completed is True

    def test_unserializable_setting(self, store: PersistentStore):
        state = RootState()
        state.settings["callback"] = object()
        assert store.save(state) is False
        assert not store.path.exists()

    def test_failed_write_keeps_previous_file(self, store: PersistentStore):
        good = RootState()
        good.settings["theme"] = "dark"
        store.save(good)
        bad = RootState()
        bad.settings["callback"] = object()
        store.save(bad)
        assert store.load().settings["theme"] == "dark"


class TestClear:
    def test_removes_file(self, store: PersistentStore):
        store.save(RootState())
        store.clear()
        assert not store.path.exists()

    def test_missing_file_is_fine(self, store: PersistentStore):
        store.clear()
        assert store.load() == RootState()
