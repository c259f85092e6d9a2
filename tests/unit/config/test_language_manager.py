# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
Pytest suite for the LanguageManager and its singleton.

Uses the language files below `tests/fixtures/languages`.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from legacy_bridge.config.language_manager import LanguageManager, LanguageManagerSingleton
from legacy_bridge.exceptions import NestingLevelExceededError
from legacy_bridge.legacy.globals import LegacyGlobalsSingleton
from legacy_bridge.legacy.language_table import LanguageTable

if TYPE_CHECKING:
    from pytest_mock import MockerFixture
    from structlog.typing import EventDict

    from legacy_bridge.config.settings_manager import SettingsManager


@pytest.fixture
def table() -> LanguageTable:
    return LanguageTable()


@pytest.fixture
def manager(table: LanguageTable, fixtures_dir: Path) -> LanguageManager:
    instance = LanguageManager(table)
    instance.configure(root_dir=fixtures_dir, resource_dirs=["languages"])
    return instance


class TestLanguageManager:
    @pytest.mark.unit
    def test_defaults(self) -> None:
        manager = LanguageManager()

        assert manager.current_language == "en"
        assert manager.resource_dirs == []
        assert manager.language_table is LegacyGlobalsSingleton.get_instance().language_table

    @pytest.mark.unit
    def test_configure_resolves_relative_directories(self, manager: LanguageManager, fixtures_dir: Path) -> None:
        assert manager.resource_dirs == [fixtures_dir / "languages"]
        assert manager.internal_errors == []

    @pytest.mark.unit
    def test_configure_records_missing_directories(
        self,
        table: LanguageTable,
        fixtures_dir: Path,
        tmp_path: Path,
        caplog_structlog: list[EventDict],
        assert_log_contains,
    ) -> None:
        manager = LanguageManager(table)

        manager.configure(root_dir=fixtures_dir, resource_dirs=["languages", tmp_path / "missing"], language="de")

        assert manager.resource_dirs == [fixtures_dir / "languages"]
        assert manager.current_language == "de"
        assert len(manager.internal_errors) == 1
        assert_log_contains(caplog_structlog, "Language resource directory does not exist", "warning")

    @pytest.mark.unit
    def test_loads_english(self, manager: LanguageManager) -> None:
        manager.load_language_file("modules")

        assert manager.get_label("MOD", "article", 0) == "Articles"
        assert manager.is_loaded("modules")

    @pytest.mark.unit
    def test_falls_back_to_english_labels(self, manager: LanguageManager) -> None:
        manager.set_language("de")

        manager.load_language_file("modules")

        assert manager.get_label("MOD", "article", 0) == "Artikel"
        assert manager.get_label("MOD", "files", 0) == "File manager"
        assert manager.is_loaded("modules", "de")
        assert not manager.is_loaded("modules", "en")

    @pytest.mark.unit
    def test_uses_cache(self, manager: LanguageManager, mocker: MockerFixture) -> None:
        load = mocker.spy(manager._loader, "load")  # noqa: SLF001

        manager.load_language_file("modules")
        manager.load_language_file("modules")
        assert load.call_count == 1

        manager.load_language_file("modules", no_cache=True)
        assert load.call_count == 2

    @pytest.mark.unit
    def test_missing_file_is_logged(
        self,
        manager: LanguageManager,
        caplog_structlog: list[EventDict],
        assert_log_contains,
    ) -> None:
        manager.load_language_file("tl_missing", "de")

        assert_log_contains(caplog_structlog, "No language file found", "warning")
        assert manager.get_label("tl_missing", "label", default="fallback") == "fallback"

    @pytest.mark.unit
    def test_propagates_loader_errors(self, manager: LanguageManager) -> None:
        with pytest.raises(NestingLevelExceededError):
            manager.load_language_file("error")

        assert not manager.is_loaded("error")


class TestLanguageManagerSingleton:
    @pytest.mark.unit
    def test_returns_the_same_instance(self) -> None:
        assert LanguageManagerSingleton.get_instance() is LanguageManagerSingleton.get_instance()

    @pytest.mark.unit
    def test_configure_instance_from_settings(self, settings: SettingsManager, fixtures_dir: Path) -> None:
        LanguageManagerSingleton.configure_instance(settings)

        instance = LanguageManagerSingleton.get_instance()
        assert instance.resource_dirs == [fixtures_dir / "languages"]
        assert instance.current_language == "en"
        assert LanguageManagerSingleton.get_initialization_errors() == []

        instance.load_language_file("default")
        table = LegacyGlobalsSingleton.get_instance().language_table
        assert table.get_path(["MSC", "first"]) == "This is the first source"

    @pytest.mark.unit
    def test_explicit_language_wins(self, settings: SettingsManager) -> None:
        LanguageManagerSingleton.configure_instance(settings, language="de")

        assert LanguageManagerSingleton.get_instance().current_language == "de"

    @pytest.mark.unit
    def test_cannot_be_configured_twice(self, settings: SettingsManager) -> None:
        LanguageManagerSingleton.configure_instance(settings)
        LanguageManagerSingleton.configure_instance(settings)

        assert LanguageManagerSingleton.get_initialization_errors() == [
            "LanguageManagerSingleton already configured. Cannot re-configure."
        ]

    @pytest.mark.unit
    def test_reset(self, settings: SettingsManager) -> None:
        LanguageManagerSingleton.configure_instance(settings)
        first = LanguageManagerSingleton.get_instance()

        LanguageManagerSingleton.reset()

        assert LanguageManagerSingleton.get_instance() is not first
