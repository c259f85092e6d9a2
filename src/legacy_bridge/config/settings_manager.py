# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
SettingsManager module.

Loads the TOML configuration of the legacy bridge and keeps it in memory.

The first readable file wins, in this order:

1. the path given on the command line,
2. `./config.toml`,
3. the `platformdirs` user config directory,
4. the `platformdirs` site config directory.

A file only needs to contain the values it changes; everything else is
taken from `SettingsManager.DEFAULT_CONFIG`. If no file exists at all, the
defaults are written to the first writable location so they can be edited.

Sections:
---------
- `logger`, `console_handler`, `file_handler`, `limited_file_handler`:
  read by the `LoggingManager`.
- `framework`: root directory, default language, request-token name,
  installer routes and the warning categories ignored during the bootstrap.
- `language`: resource directories of the language files.
- `install`: installation state.
"""

from __future__ import annotations

import copy
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

import platformdirs
import structlog
import tomli_w

from legacy_bridge.__about__ import __app_config_name__, __app_name__
from legacy_bridge.exceptions import (
    ConfigFileNotFoundError,
    SettingsConfigurationError,
    SettingsWriteConfigurationError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

log: structlog.stdlib.BoundLogger
log = structlog.get_logger(__name__)

T = TypeVar("T")


def merge_settings(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return `defaults` updated recursively with `overrides`; neither input is changed."""
    merged = copy.deepcopy(dict(defaults))
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class SettingsManager:
    """
    Load, hold and persist the bridge configuration.

    Attributes
    ----------
    DEFAULT_SETTINGS_LOCATIONS (ClassVar[list[Path]]):
        Locations searched, in order, when no CLI path is given.
    DEFAULT_CONFIG (ClassVar[dict[str, dict[str, Any]]]):
        Built-in values; loaded files are merged on top of them.
    """

    APP_NAME: ClassVar[str] = __app_name__.lower()
    CONF_NAME: ClassVar[str] = __app_config_name__.lower()

    DEFAULT_SETTINGS_LOCATIONS: ClassVar[list[Path]] = [
        Path(CONF_NAME),
        Path(platformdirs.user_config_dir(APP_NAME, appauthor=False)) / CONF_NAME,
        Path(platformdirs.site_config_dir(APP_NAME, appauthor=False)) / CONF_NAME,
    ]

    DEFAULT_CONFIG: ClassVar[dict[str, dict[str, Any]]] = {
        "logger": {
            "level": "INFO",
            "log_directory": str(platformdirs.user_log_dir(APP_NAME, appauthor=False)),
        },
        "console_handler": {"enabled": True},
        "file_handler": {
            "enabled": False,
            "file_name": APP_NAME + ".log",
        },
        "limited_file_handler": {
            "enabled": False,
            "file_name": "limited_" + APP_NAME + ".log",
            "max_bytes": 1024 * 1024,
            "backup_count": 5,
        },
        "framework": {
            "root_dir": ".",
            "default_language": "en",
            "csrf_token_name": "request_token",
            "installer_routes": ["installer", "installer_redirect"],
            "error_reporting": {"ignore": ["DeprecationWarning", "PendingDeprecationWarning"]},
        },
        "language": {
            "resource_dirs": ["languages"],
        },
        "install": {"completed": False},
    }

    def __init__(self) -> None:
        self._settings: dict[str, dict[str, Any]] = {}
        self._loaded_config_file: Path | None = None
        self._internal_errors: list[str] = []
        self.logger = structlog.get_logger(__name__)

    @property
    def loaded_config_file(self) -> Path | None:
        """Return the file the settings came from (or were written to), if any."""
        return self._loaded_config_file

    @property
    def internal_errors(self) -> list[str]:
        """Return the list of internal errors."""
        return self._internal_errors

    def load_settings(self, config_path_from_cli: Path | None = None) -> None:
        """
        Load the settings, replacing whatever was loaded before.

        Raises:
            SettingsConfigurationError: If the selected file is not valid TOML.
            ConfigFileNotFoundError: If the selected file cannot be read.
            SettingsWriteConfigurationError: If no file exists and the defaults
                cannot be written anywhere.
        """
        self._settings = {}
        self._internal_errors = []
        self._loaded_config_file = None

        path = self._find_config_file(config_path_from_cli)
        if path is None:
            self.logger.warning("No valid configuration file found; using default settings.")
            self._internal_errors.append("No configuration file found; using default settings.")
            try:
                self._save_default_config()
            except SettingsWriteConfigurationError as e:
                self._internal_errors.append(f"Failed to save default config: {e}")
                raise
            self._settings = copy.deepcopy(self.DEFAULT_CONFIG)
            return

        try:
            self._settings = merge_settings(self.DEFAULT_CONFIG, self._read_file(path))
        except (SettingsConfigurationError, ConfigFileNotFoundError) as e:
            self._internal_errors.append(f"Config '{path!s}' error: {e}")
            raise
        self._loaded_config_file = path

    def _find_config_file(self, config_path_from_cli: Path | None) -> Path | None:
        if config_path_from_cli is not None:
            if config_path_from_cli.exists():
                return config_path_from_cli
            self.logger.warning(
                "Specified configuration file does not exist. Searching predefined locations.",
                path=str(config_path_from_cli),
            )
            self._internal_errors.append(f"CLI config '{config_path_from_cli}' not found.")

        self.logger.debug(
            "Searching for configuration file in predefined locations",
            locations=[str(p) for p in self.DEFAULT_SETTINGS_LOCATIONS],
        )
        return next((Path(p) for p in self.DEFAULT_SETTINGS_LOCATIONS if Path(p).exists()), None)

    def _read_file(self, path: Path) -> dict[str, Any]:
        self.logger.info("Loading configuration from file", path=str(path))
        try:
            with path.open("rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"TOML decoding failed for configuration file: {path!s}"
            self.logger.exception(msg, path=str(path), exc_info=e)
            raise SettingsConfigurationError(msg) from e
        except OSError as e:
            msg = f"Could not access file: {path!s}"
            self.logger.exception("Operating system error accessing configuration file", path=str(path), exc_info=e)
            raise ConfigFileNotFoundError(msg) from e

    def _save_default_config(self) -> None:
        """Write `DEFAULT_CONFIG` to the first location that accepts it."""
        for candidate in self.DEFAULT_SETTINGS_LOCATIONS:
            path = Path(candidate)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("wb") as f:
                    tomli_w.dump(self.DEFAULT_CONFIG, f)
            except OSError as e:
                self.logger.warning("Unable to write default configuration to this location.", path=str(path))
                self._internal_errors.append(f"Failed to save default config to '{path!s}': {e}")
                continue

            self.logger.info("Default configuration written successfully.", path=str(path))
            self._loaded_config_file = path
            return

        msg = "Failed to write default configuration to any specified location."
        self.logger.error(msg)
        raise SettingsWriteConfigurationError(msg)

    def get(self, section: str, key: str, default: T | None = None) -> T | Any:
        """Return `section.key`; a missing or None value yields `default`."""
        value = self._settings.get(section, {}).get(key)
        return default if value is None else value

    def get_setting(self, section: str, key: str, default: Any = None) -> Any:
        """Return `section.key` as stored, `default` only if the key is absent."""
        return self._settings.get(section, {}).get(key, default)

    def get_section(self, section: str) -> dict[str, Any]:
        """Return a whole section, or an empty dict."""
        return self._settings.get(section, {})

    def set_setting(self, section: str, key: str, value: Any) -> None:
        """Change a value in memory; nothing is written to disk."""
        self._settings.setdefault(section, {})[key] = value

    def as_dict(self) -> dict[str, dict[str, Any]]:
        """Return a deep copy of all settings."""
        return copy.deepcopy(self._settings)


class SettingsManagerSingleton:
    """
    Singleton class for SettingsManager.

    Holds the one settings instance of the process.
    """

    _instance: SettingsManager | None = None
    _initialization_errors: ClassVar[list[str]] = []
    _is_configured: ClassVar[bool] = False

    @classmethod
    def get_instance(cls) -> SettingsManager:
        """Return the single instance of SettingsManager, creating it on first use."""
        if cls._instance is None:
            cls._instance = SettingsManager()
        return cls._instance

    @classmethod
    def initialize_from_context(cls, config_path: Path | None = None) -> None:
        """
        Load the settings of the single instance.

        Subsequent calls are ignored and recorded as initialization errors.
        """
        if cls._is_configured:
            cls._initialization_errors.append("SettingsManagerSingleton already configured. Cannot re-configure.")
            return

        instance = cls.get_instance()
        cls._initialization_errors.clear()

        try:
            instance.load_settings(config_path)
        except Exception as e:
            cls._initialization_errors.append(f"Unexpected error during SettingsManager initialization: {e}")
            raise

        cls._initialization_errors.extend(instance.internal_errors)
        cls._is_configured = True

    @classmethod
    def get_initialization_errors(cls) -> list[str]:
        """Exposes initialization errors for testing/debugging."""
        errors = list(cls._initialization_errors)
        if cls._instance:
            errors.extend(cls._instance.internal_errors)
        return list(set(errors))

    @classmethod
    def reset(cls) -> None:
        """
        Reset the singleton instance and its configuration state.

        Primarily for testing.
        """
        cls._instance = None
        cls._initialization_errors.clear()
        cls._is_configured = False
