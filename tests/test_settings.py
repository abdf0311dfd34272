"""
Tests for cellwidgets.config.settings module.

This test suite covers:
- Settings loading and saving
- Default settings initialization
- Settings persistence to JSON file
- Type conversion helpers (get_bool, get_float, get_int)
- Error handling for corrupted settings files
"""

import json

from cellwidgets.config import settings


class TestLoadSettings:
    """Tests for load_settings() function."""

    def test_load_defaults_when_no_file(self, tmp_path, monkeypatch):
        """Test that default settings are loaded when file doesn't exist."""
        settings_file = tmp_path / "nonexistent" / "settings.json"
        monkeypatch.setattr("cellwidgets.config.settings.SETTINGS_PATH", settings_file)

        settings.settings_store.values = {}
        settings.load_settings()

        assert settings.settings_store.values["poll_timeout"] == settings.DEFAULT_POLL_TIMEOUT
        assert settings.settings_store.values["web_port"] == settings.DEFAULT_WEB_PORT

    def test_load_from_existing_file(self, temp_settings_file, sample_settings_data, monkeypatch):
        """Test loading settings from existing file."""
        temp_settings_file.write_text(json.dumps(sample_settings_data))
        monkeypatch.setattr("cellwidgets.config.settings.SETTINGS_PATH", temp_settings_file)

        settings.settings_store.values = {}
        settings.load_settings()

        assert settings.get_setting("web_port") == 9000
        assert settings.get_setting("theme") == {"menu": "black on cyan"}
        # Keys missing from the file keep their defaults
        assert settings.get_setting("image_rows") == settings.DEFAULT_IMAGE_ROWS

    def test_corrupted_file_falls_back_to_defaults(self, temp_settings_file, monkeypatch):
        """Test invalid JSON is ignored."""
        temp_settings_file.write_text("{not json")
        monkeypatch.setattr("cellwidgets.config.settings.SETTINGS_PATH", temp_settings_file)

        settings.load_settings()

        assert settings.settings_store.values == settings.DEFAULT_SETTINGS

    def test_non_dict_file_is_ignored(self, temp_settings_file, monkeypatch):
        temp_settings_file.write_text("[1, 2, 3]")
        monkeypatch.setattr("cellwidgets.config.settings.SETTINGS_PATH", temp_settings_file)

        settings.load_settings()

        assert settings.settings_store.values == settings.DEFAULT_SETTINGS


class TestSaveSettings:
    """Tests for save_settings() and set_setting()."""

    def test_set_setting_persists(self, temp_settings_file, monkeypatch):
        monkeypatch.setattr("cellwidgets.config.settings.SETTINGS_PATH", temp_settings_file)

        settings.set_setting("web_port", 8100)

        saved = json.loads(temp_settings_file.read_text())
        assert saved["web_port"] == 8100

    def test_save_creates_parent_directory(self, tmp_path, monkeypatch):
        target = tmp_path / "a" / "b" / "settings.json"
        monkeypatch.setattr("cellwidgets.config.settings.SETTINGS_PATH", target)

        settings.save_settings()

        assert target.exists()


class TestTypedGetters:
    """Tests for get_bool, get_float and get_int."""

    def test_get_bool(self):
        settings.settings_store.values["mouse_enabled"] = 0

        assert settings.get_bool("mouse_enabled", True) is False
        assert settings.get_bool("missing", True) is True

    def test_get_float_with_bad_value(self):
        settings.settings_store.values["poll_timeout"] = "soon"

        assert settings.get_float("poll_timeout", 0.5) == 0.5

    def test_get_int_parses_strings(self):
        settings.settings_store.values["web_port"] = "9001"

        assert settings.get_int("web_port", 1) == 9001

    def test_get_int_with_bad_value(self):
        settings.settings_store.values["web_port"] = None

        assert settings.get_int("web_port", 8023) == 8023
