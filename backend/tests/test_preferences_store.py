"""Tests for the JSON-file preferences store."""

import json
from pathlib import Path

from mindfeed.schemas import DEFAULT_PREFERENCES, UserPreferences
from mindfeed.services.preferences_store import PreferencesStore


class TestPreferencesStore:
    def test_missing_file_returns_default(self, tmp_path: Path):
        store = PreferencesStore(tmp_path / "prefs.json")
        assert store.load() == DEFAULT_PREFERENCES

    def test_round_trip(self, tmp_path: Path):
        store = PreferencesStore(tmp_path / "prefs.json")
        prefs = UserPreferences(topics=["Rust"], complexity_level="beginner", tone="critical")
        store.save(prefs)
        assert store.load() == prefs

    def test_value_stored_as_text_under_namespace(self, tmp_path: Path):
        path = tmp_path / "prefs.json"
        PreferencesStore(path, namespace="ns").save(DEFAULT_PREFERENCES)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert isinstance(data["ns"], str)
        assert json.loads(data["ns"])["complexity_level"] == "expert"

    def test_save_preserves_other_keys(self, tmp_path: Path):
        path = tmp_path / "prefs.json"
        path.write_text(json.dumps({"other": "value"}), encoding="utf-8")

        PreferencesStore(path).save(DEFAULT_PREFERENCES)

        assert json.loads(path.read_text(encoding="utf-8"))["other"] == "value"

    def test_corrupt_file_returns_default(self, tmp_path: Path):
        path = tmp_path / "prefs.json"
        path.write_text("{not json", encoding="utf-8")
        assert PreferencesStore(path).load() == DEFAULT_PREFERENCES

    def test_invalid_value_returns_default(self, tmp_path: Path):
        path = tmp_path / "prefs.json"
        bad = json.dumps({"complexity_level": "wizard"})
        path.write_text(json.dumps({"mindfeed_preferences": bad}), encoding="utf-8")
        assert PreferencesStore(path).load() == DEFAULT_PREFERENCES

    def test_creates_parent_directories(self, tmp_path: Path):
        store = PreferencesStore(tmp_path / "nested" / "dir" / "prefs.json")
        store.save(DEFAULT_PREFERENCES)
        assert store.load() == DEFAULT_PREFERENCES
