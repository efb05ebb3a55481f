"""
Configuration settings management for Marky.

This module handles loading, validating, and saving configuration settings
from YAML files with support for environment variable overrides.

Configuration is loaded from ~/.marky/config.yaml by default, with the
path overridable via the MARKY_CONFIG environment variable.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from marky.archive.manifest import SettingsBundle

# Default configuration directory
DEFAULT_CONFIG_DIR = Path.home() / ".marky"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"


@dataclass
class BackupConfig:
    """Backup and restore settings."""

    output_dir: str = "."
    include_settings: bool = True
    overwrite_existing: bool = False


@dataclass
class PreferencesConfig:
    """User preferences embedded in backups."""

    theme_id: str = "midnight"
    accent_color_id: str = "blue"
    vim_mode: bool = False
    scroll_sync_enabled: bool = True

    def to_bundle(self) -> SettingsBundle:
        """Snapshot these preferences for an export."""
        return SettingsBundle(
            theme_id=self.theme_id,
            accent_color_id=self.accent_color_id,
            vim_mode=self.vim_mode,
            scroll_sync_enabled=self.scroll_sync_enabled,
        )


@dataclass
class Settings:
    """
    Complete Marky configuration settings.

    Settings are loaded from a YAML configuration file and can be overridden
    by environment variables prefixed with MARKY_.

    Attributes:
        workspace_dir: Default workspace root folder for backups.
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR).
        backup: Backup and restore settings.
        preferences: User preferences captured in backups.
    """

    workspace_dir: str = ""
    log_level: str = "INFO"

    backup: BackupConfig = field(default_factory=BackupConfig)
    preferences: PreferencesConfig = field(default_factory=PreferencesConfig)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


def get_config_path() -> Path:
    """
    Get the configuration file path.

    Returns the path from MARKY_CONFIG environment variable if set,
    otherwise returns the default path (~/.marky/config.yaml).
    """
    env_path = os.environ.get("MARKY_CONFIG")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_FILE


def load_config(config_path: Path | None = None) -> Settings:
    """
    Load configuration from YAML file.

    Reads configuration from the specified path (or default if not provided),
    applies environment variable overrides, and validates the configuration.

    Args:
        config_path: Optional path to configuration file. If not provided,
                    uses MARKY_CONFIG environment variable or default path.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If the configuration file cannot be read or
                          contains invalid settings.
    """
    if config_path is None:
        config_path = get_config_path()

    settings = Settings()

    if config_path.exists():
        try:
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigurationError("Config file must contain a mapping")

        settings = _apply_config_data(settings, config_data)

    settings = _apply_environment_overrides(settings)

    _validate_config(settings)

    return settings


def save_config(settings: Settings, config_path: Path | None = None) -> None:
    """
    Save configuration to YAML file.

    Raises:
        ConfigurationError: If the configuration cannot be written.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    config_data = _settings_to_dict(settings)

    try:
        with open(config_path, "w") as f:
            yaml.safe_dump(config_data, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigurationError(f"Cannot write config file: {e}") from e


def _parse_bool(value: str) -> bool:
    """Parse a boolean from an environment variable."""
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ConfigurationError(f"Invalid boolean value: {value!r}")


def _apply_config_data(settings: Settings, data: dict[str, Any]) -> Settings:
    """Apply configuration data from parsed YAML to settings."""
    marky_data = data.get("marky") or {}

    if "workspace_dir" in marky_data:
        settings.workspace_dir = str(marky_data["workspace_dir"] or "")
    if "log_level" in marky_data:
        settings.log_level = str(marky_data["log_level"]).upper()

    backup = data.get("backup") or {}
    if "output_dir" in backup:
        settings.backup.output_dir = str(backup["output_dir"])
    if "include_settings" in backup:
        settings.backup.include_settings = bool(backup["include_settings"])
    if "overwrite_existing" in backup:
        settings.backup.overwrite_existing = bool(backup["overwrite_existing"])

    preferences = data.get("preferences") or {}
    if "theme_id" in preferences:
        settings.preferences.theme_id = str(preferences["theme_id"])
    if "accent_color_id" in preferences:
        settings.preferences.accent_color_id = str(preferences["accent_color_id"])
    if "vim_mode" in preferences:
        settings.preferences.vim_mode = bool(preferences["vim_mode"])
    if "scroll_sync_enabled" in preferences:
        settings.preferences.scroll_sync_enabled = bool(preferences["scroll_sync_enabled"])

    return settings


def _apply_environment_overrides(settings: Settings) -> Settings:
    """Apply environment variable overrides to settings."""
    env_map: dict[str, tuple[str, Callable[[str], Any]]] = {
        "MARKY_WORKSPACE_DIR": ("workspace_dir", str),
        "MARKY_LOG_LEVEL": ("log_level", lambda x: x.upper()),
        "MARKY_BACKUP_DIR": ("backup.output_dir", str),
        "MARKY_OVERWRITE_EXISTING": ("backup.overwrite_existing", _parse_bool),
    }

    for env_var, (attr_path, converter) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            _set_nested_attr(settings, attr_path, converter(value))

    return settings


def _set_nested_attr(obj: Any, path: str, value: Any) -> None:
    """Set a nested attribute on an object using dot notation."""
    parts = path.split(".")
    for part in parts[:-1]:
        obj = getattr(obj, part)
    setattr(obj, parts[-1], value)


def _validate_config(settings: Settings) -> None:
    """
    Validate configuration settings.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if settings.log_level not in valid_log_levels:
        raise ConfigurationError(
            f"Invalid log_level: {settings.log_level}. "
            f"Must be one of: {', '.join(sorted(valid_log_levels))}"
        )

    if not settings.backup.output_dir:
        raise ConfigurationError("backup.output_dir must not be empty")

    if not settings.preferences.theme_id:
        raise ConfigurationError("preferences.theme_id must not be empty")


def _settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Convert Settings instance to dictionary for YAML serialization."""
    return {
        "marky": {
            "workspace_dir": settings.workspace_dir,
            "log_level": settings.log_level,
        },
        "backup": {
            "output_dir": settings.backup.output_dir,
            "include_settings": settings.backup.include_settings,
            "overwrite_existing": settings.backup.overwrite_existing,
        },
        "preferences": {
            "theme_id": settings.preferences.theme_id,
            "accent_color_id": settings.preferences.accent_color_id,
            "vim_mode": settings.preferences.vim_mode,
            "scroll_sync_enabled": settings.preferences.scroll_sync_enabled,
        },
    }
