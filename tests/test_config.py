"""Tests for configuration settings."""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml

from marky.archive import SettingsBundle
from marky.config.settings import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    BackupConfig,
    ConfigurationError,
    PreferencesConfig,
    Settings,
    _apply_environment_overrides,
    _set_nested_attr,
    _settings_to_dict,
    _validate_config,
    get_config_path,
    load_config,
    save_config,
)


class TestSettingsDefaults(unittest.TestCase):
    """Tests for default settings values."""

    def test_defaults(self) -> None:
        settings = Settings()

        self.assertEqual(settings.workspace_dir, "")
        self.assertEqual(settings.log_level, "INFO")
        self.assertIsInstance(settings.backup, BackupConfig)
        self.assertIsInstance(settings.preferences, PreferencesConfig)
        self.assertEqual(settings.backup.output_dir, ".")
        self.assertTrue(settings.backup.include_settings)
        self.assertFalse(settings.backup.overwrite_existing)

    def test_default_paths(self) -> None:
        self.assertEqual(DEFAULT_CONFIG_DIR, Path.home() / ".marky")
        self.assertEqual(DEFAULT_CONFIG_FILE, DEFAULT_CONFIG_DIR / "config.yaml")

    def test_preferences_to_bundle(self) -> None:
        preferences = PreferencesConfig(theme_id="gruvbox", accent_color_id="orange", vim_mode=True)

        bundle = preferences.to_bundle()

        self.assertIsInstance(bundle, SettingsBundle)
        self.assertEqual(bundle.theme_id, "gruvbox")
        self.assertEqual(bundle.accent_color_id, "orange")
        self.assertTrue(bundle.vim_mode)
        self.assertTrue(bundle.scroll_sync_enabled)


class TestConfigPath(unittest.TestCase):
    """Tests for get_config_path."""

    def test_default(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(get_config_path(), DEFAULT_CONFIG_FILE)

    def test_env_override(self) -> None:
        with patch.dict(os.environ, {"MARKY_CONFIG": "/tmp/custom.yaml"}, clear=True):
            self.assertEqual(get_config_path(), Path("/tmp/custom.yaml"))


class TestLoadConfig(unittest.TestCase):
    """Tests for load_config and save_config."""

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_path = Path(self.temp_dir.name) / "config.yaml"
        self.env = patch.dict(os.environ, {}, clear=True)
        self.env.start()

    def tearDown(self) -> None:
        self.env.stop()
        self.temp_dir.cleanup()

    def _write(self, data) -> None:
        with open(self.config_path, "w") as f:
            yaml.safe_dump(data, f)

    def test_missing_file_gives_defaults(self) -> None:
        settings = load_config(self.config_path)
        self.assertEqual(settings, Settings())

    def test_load_values(self) -> None:
        self._write(
            {
                "marky": {"workspace_dir": "/home/me/notes", "log_level": "debug"},
                "backup": {"output_dir": "/backups", "include_settings": False, "overwrite_existing": True},
                "preferences": {"theme_id": "light", "vim_mode": True, "scroll_sync_enabled": False},
            }
        )

        settings = load_config(self.config_path)

        self.assertEqual(settings.workspace_dir, "/home/me/notes")
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.backup.output_dir, "/backups")
        self.assertFalse(settings.backup.include_settings)
        self.assertTrue(settings.backup.overwrite_existing)
        self.assertEqual(settings.preferences.theme_id, "light")
        self.assertTrue(settings.preferences.vim_mode)
        self.assertFalse(settings.preferences.scroll_sync_enabled)
        self.assertEqual(settings.preferences.accent_color_id, "blue")

    def test_empty_file(self) -> None:
        self.config_path.write_text("")
        self.assertEqual(load_config(self.config_path), Settings())

    def test_invalid_yaml(self) -> None:
        self.config_path.write_text("marky: [unclosed")
        with self.assertRaises(ConfigurationError):
            load_config(self.config_path)

    def test_non_mapping(self) -> None:
        self.config_path.write_text("- a\n- b\n")
        with self.assertRaises(ConfigurationError):
            load_config(self.config_path)

    def test_invalid_log_level(self) -> None:
        self._write({"marky": {"log_level": "chatty"}})
        with self.assertRaises(ConfigurationError):
            load_config(self.config_path)

    def test_environment_overrides(self) -> None:
        self._write({"marky": {"workspace_dir": "/from/file"}})
        env = {
            "MARKY_WORKSPACE_DIR": "/from/env",
            "MARKY_LOG_LEVEL": "warning",
            "MARKY_BACKUP_DIR": "/env/backups",
            "MARKY_OVERWRITE_EXISTING": "yes",
        }

        with patch.dict(os.environ, env):
            settings = load_config(self.config_path)

        self.assertEqual(settings.workspace_dir, "/from/env")
        self.assertEqual(settings.log_level, "WARNING")
        self.assertEqual(settings.backup.output_dir, "/env/backups")
        self.assertTrue(settings.backup.overwrite_existing)

    def test_invalid_boolean_override(self) -> None:
        with patch.dict(os.environ, {"MARKY_OVERWRITE_EXISTING": "maybe"}):
            with self.assertRaises(ConfigurationError):
                _apply_environment_overrides(Settings())

    def test_save_and_reload(self) -> None:
        settings = Settings(workspace_dir="/notes")
        settings.preferences.theme_id = "slate"
        settings.backup.overwrite_existing = True

        save_config(settings, self.config_path)

        self.assertEqual(load_config(self.config_path), settings)

    def test_save_creates_directory(self) -> None:
        path = Path(self.temp_dir.name) / "nested" / "config.yaml"

        save_config(Settings(), path)

        self.assertTrue(path.exists())


class TestHelpers(unittest.TestCase):
    """Tests for private helpers."""

    def test_set_nested_attr(self) -> None:
        settings = Settings()
        _set_nested_attr(settings, "backup.output_dir", "/x")
        self.assertEqual(settings.backup.output_dir, "/x")

    def test_settings_to_dict_sections(self) -> None:
        data = _settings_to_dict(Settings())
        self.assertEqual(list(data), ["marky", "backup", "preferences"])
        self.assertEqual(data["preferences"]["theme_id"], "midnight")

    def test_validate_empty_output_dir(self) -> None:
        settings = Settings()
        settings.backup.output_dir = ""
        with self.assertRaises(ConfigurationError):
            _validate_config(settings)


if __name__ == "__main__":
    unittest.main()
