# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
language_manager.py: LanguageManager for the legacy language table.

Loads named language files (`<resource_dir>/<language>/<name>.xlf`) through
the `XliffFileLoader` into the `TL_LANG` table. English is always loaded
first, so labels missing in the requested language fall back to English.

Typical usage:
--------------
>>> lm = LanguageManager()
>>> lm.configure(root_dir="/var/www", resource_dirs=["languages"], language="de")
>>> lm.load_language_file("default")
>>> lm.get_label("MSC", "first")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Final

import structlog

from legacy_bridge.config.loader.xliff_file_loader import XliffFileLoader
from legacy_bridge.legacy.globals import LegacyGlobalsSingleton

if TYPE_CHECKING:
    from collections.abc import Iterable

    from legacy_bridge.config.settings_manager import SettingsManager
    from legacy_bridge.legacy.language_table import Key, LanguageTable

log: structlog.stdlib.BoundLogger
log = structlog.get_logger(__name__)


class LanguageManager:
    """
    Load language files for the active language.

    Attributes
    ----------
    resource_dirs : list[Path]
        Directories containing one sub-directory per language.
    language_table : LanguageTable
        The table the labels are written to.
    """

    FALLBACK_LANGUAGE: Final[str] = "en"
    FILE_SUFFIX: Final[str] = ".xlf"

    def __init__(self, language_table: LanguageTable | None = None) -> None:
        """
        Initialize LanguageManager attributes.

        Does NOT load anything yet. Call .configure() first.
        """
        if language_table is None:
            language_table = LegacyGlobalsSingleton.get_instance().language_table
        self.language_table = language_table
        self.resource_dirs: list[Path] = []
        self.root_dir: Path = Path()
        self._current_language: str = self.FALLBACK_LANGUAGE
        self._loader = XliffFileLoader(self.root_dir, add_to_globals=True, language_table=self.language_table)
        self._loaded: set[tuple[str, str]] = set()
        self._internal_errors: list[str] = []

    @property
    def internal_errors(self) -> list[str]:
        """Return the list of internal errors."""
        return self._internal_errors

    @property
    def current_language(self) -> str:
        """Return the current language code."""
        return self._current_language

    def configure(
        self,
        *,
        root_dir: str | Path,
        resource_dirs: Iterable[str | Path],
        language: str | None = None,
    ) -> None:
        """
        Set the resource directories and the active language.

        Relative resource directories are resolved against `root_dir`.
        Directories that do not exist are recorded as internal errors.
        """
        self.root_dir = Path(root_dir)
        self.resource_dirs = []
        self._internal_errors.clear()
        for directory in resource_dirs:
            path = Path(directory)
            if not path.is_absolute():
                path = self.root_dir / path
            if not path.is_dir():
                msg = f"Language resource directory does not exist: {path!s}"
                self._internal_errors.append(msg)
                log.warning(msg, path=str(path))
                continue
            self.resource_dirs.append(path)

        self._loader = XliffFileLoader(self.root_dir, add_to_globals=True, language_table=self.language_table)
        if language:
            self.set_language(language)

    def set_language(self, language: str) -> None:
        """Change the active language; already loaded labels are kept."""
        self._current_language = language

    def is_loaded(self, name: str, language: str | None = None) -> bool:
        return (name, language or self._current_language) in self._loaded

    def load_language_file(self, name: str, language: str | None = None, *, no_cache: bool = False) -> None:
        """
        Load the language file `name` into the table.

        Args:
            name: File name without suffix, e.g. "default".
            language: Language to load; the current language by default.
            no_cache: Reload even if the file has been loaded before.

        Raises:
            LanguageFileError: If a file cannot be parsed.
            NestingLevelExceededError: If a unit id has an unsupported depth.
        """
        language = language or self._current_language
        if not no_cache and (name, language) in self._loaded:
            return

        languages = [self.FALLBACK_LANGUAGE]
        if language != self.FALLBACK_LANGUAGE:
            languages.append(language)

        files_loaded = 0
        for lang in languages:
            for directory in self.resource_dirs:
                path = directory / lang / f"{name}{self.FILE_SUFFIX}"
                if path.is_file() and self._loader.supports(path):
                    self._loader.load(path, lang)
                    files_loaded += 1

        if not files_loaded:
            log.warning("No language file found", name=name, language=language)

        self._loaded.add((name, language))

    def get_label(self, *path: Key, default: Any = None) -> Any:
        """Return the label at `path`, e.g. `get_label("MSC", "first")`."""
        return self.language_table.get_path(path, default)


class LanguageManagerSingleton:
    """
    Singleton class for LanguageManager.

    Ensures a single instance manages the language files
    and handles its controlled initialization.
    """

    _instance: LanguageManager | None = None
    _initialization_errors: ClassVar[list[str]] = []
    _is_configured: ClassVar[bool] = False

    @classmethod
    def get_instance(cls) -> LanguageManager:
        """Return the single instance of LanguageManager."""
        if cls._instance is None:
            cls._instance = LanguageManager()
        return cls._instance

    @classmethod
    def configure_instance(cls, settings: SettingsManager, language: str | None = None) -> None:
        """
        Configure the instance from the `framework` and `language` settings.

        This should be called once during application startup.
        """
        if cls._is_configured:
            cls._initialization_errors.append("LanguageManagerSingleton already configured. Cannot re-configure.")
            return

        instance = cls.get_instance()
        cls._initialization_errors.clear()
        instance.configure(
            root_dir=settings.get("framework", "root_dir", "."),
            resource_dirs=settings.get("language", "resource_dirs", []),
            language=language or settings.get("framework", "default_language", LanguageManager.FALLBACK_LANGUAGE),
        )
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
