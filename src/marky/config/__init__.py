"""
Configuration management for Marky.

This module handles loading, validating, and saving configuration settings.
"""

from marky.config.settings import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    BackupConfig,
    ConfigurationError,
    PreferencesConfig,
    Settings,
    get_config_path,
    load_config,
    save_config,
)

__all__ = [
    "Settings",
    "BackupConfig",
    "PreferencesConfig",
    "load_config",
    "save_config",
    "get_config_path",
    "ConfigurationError",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_CONFIG_FILE",
]
