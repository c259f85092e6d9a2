# conftest.py
# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
import structlog
import tomli_w

from legacy_bridge.config.appcontext import AppContext
from legacy_bridge.config.language_manager import LanguageManagerSingleton
from legacy_bridge.config.logging_manager import LoggingManagerSingleton
from legacy_bridge.config.settings_manager import SettingsManager, SettingsManagerSingleton
from legacy_bridge.framework.http import Request, RequestStack, Session
from legacy_bridge.framework.request_token import CsrfTokenManager
from legacy_bridge.framework.routing import Router
from legacy_bridge.legacy.globals import LegacyGlobals, LegacyGlobalsSingleton

if TYPE_CHECKING:
    from collections.abc import Generator

    from pytest_mock import MockerFixture
    from structlog.typing import EventDict

FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"


# --- Core Logging Setup Fixture ---
# Runs before any application code gets its first logger.
@pytest.fixture(autouse=True)
def structlog_base_config() -> Generator[None, None, None]:
    """
    Set up and tear down a structlog configuration for each test function.

    Ensures that structlog.get_logger() returns a concrete BoundLogger, not a LazyProxy.
    """
    structlog.reset_defaults()
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.NOTSET)

    test_handler = logging.StreamHandler(sys.stdout)
    test_handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    root_logger.addHandler(test_handler)
    root_logger.setLevel(logging.DEBUG)

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield

    # --- Teardown Phase ---
    structlog.reset_defaults()
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.NOTSET)
    logging.disable(logging.NOTSET)


# --- Logging Assertion Fixtures ---
@pytest.fixture
def caplog_structlog() -> Generator[list[EventDict], None, None]:
    """
    Capture `structlog` events for the duration of a test.

    Requires `structlog` to be configured beforehand (e.g., by `structlog_base_config`).
    """
    with structlog.testing.capture_logs() as captured_events:
        yield captured_events


@pytest.fixture
def assert_log_contains() -> Any:
    """Provide a helper asserting that a `structlog` capture contains a specific entry."""

    def _assert(log: list[EventDict], text: str, level: str | None = None) -> None:
        matches = [
            entry
            for entry in log
            if text in entry["event"] and (level is None or entry["log_level"].lower() == level.lower())
        ]
        assert matches, f"No log entry found with text '{text}' and level '{level}'"

    return _assert


# --- Singletons ---
@pytest.fixture(autouse=True)
def cleanup_singletons() -> Generator[None, None, None]:
    """Reset all application singletons to ensure clean state between tests."""
    SettingsManagerSingleton.reset()
    LanguageManagerSingleton.reset()
    LegacyGlobalsSingleton.reset()
    LoggingManagerSingleton._instance = None  # noqa: SLF001
    LoggingManagerSingleton._initialization_errors.clear()  # noqa: SLF001
    LoggingManagerSingleton._is_configured = False  # noqa: SLF001

    yield

    if LoggingManagerSingleton._instance:  # noqa: SLF001
        LoggingManagerSingleton.reset()
    SettingsManagerSingleton.reset()
    LanguageManagerSingleton.reset()
    LegacyGlobalsSingleton.reset()


# --- Environment Isolation Fixture ---
@pytest.fixture
def isolated_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[dict[str, Path], None, None]:
    """
    Set up an isolated temporary environment for settings tests.

    - Points the settings search locations into `tmp_path`.
    - Changes the current working directory to a sub-directory of `tmp_path`,
      so no existing 'config.toml' interferes with the local lookup.
    """
    original_cwd = Path.cwd()
    test_cwd = tmp_path / "test_run_cwd"
    test_cwd.mkdir()
    user_config_dir = tmp_path / "user_config"
    site_config_dir = tmp_path / "site_config"

    monkeypatch.setattr(
        SettingsManager,
        "DEFAULT_SETTINGS_LOCATIONS",
        [
            test_cwd / SettingsManager.CONF_NAME,
            user_config_dir / SettingsManager.CONF_NAME,
            site_config_dir / SettingsManager.CONF_NAME,
        ],
    )
    os.chdir(test_cwd)
    try:
        yield {
            "current_working_dir": test_cwd,
            "user_config_dir": user_config_dir,
            "site_config_dir": site_config_dir,
        }
    finally:
        os.chdir(original_cwd)


# --- Settings ---
@pytest.fixture
def sample_config(tmp_path: Path) -> dict[str, Any]:
    """Return a complete configuration rooted in `tmp_path`."""
    return {
        "logger": {"level": "DEBUG", "log_directory": str(tmp_path / "logs")},
        "console_handler": {"enabled": False},
        "file_handler": {"enabled": False, "file_name": "test.log"},
        "limited_file_handler": {"enabled": False, "file_name": "limited_test.log"},
        "framework": {
            "root_dir": str(FIXTURES_DIR),
            "default_language": "en",
            "csrf_token_name": "contao_csrf_token",
            "installer_routes": ["installer", "installer_redirect"],
            "error_reporting": {"ignore": ["DeprecationWarning"]},
        },
        "language": {"resource_dirs": ["languages"]},
        "install": {"completed": True},
    }


@pytest.fixture
def config_file(tmp_path: Path, sample_config: dict[str, Any]) -> Path:
    """Write `sample_config` to a temporary TOML file."""
    path = tmp_path / "config.toml"
    with path.open("wb") as f:
        tomli_w.dump(sample_config, f)
    return path


@pytest.fixture
def settings(config_file: Path) -> SettingsManager:
    """Return a SettingsManager loaded from `config_file`."""
    manager = SettingsManager()
    manager.load_settings(config_file)
    return manager


# --- Framework ---
@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def legacy_globals() -> LegacyGlobals:
    """Return a fresh, non-shared `LegacyGlobals` store."""
    return LegacyGlobals()


@pytest.fixture
def session() -> Session:
    return Session("test-session")


@pytest.fixture
def token_manager(session: Session) -> CsrfTokenManager:
    return CsrfTokenManager(session.attributes)


@pytest.fixture
def app_context(settings: SettingsManager, token_manager: CsrfTokenManager) -> AppContext:
    return AppContext.create(settings, services={"csrf_token_manager": token_manager})


@pytest.fixture
def router() -> Router:
    return Router(
        {
            "dummy": "/index.html",
            "article": "/articles/{alias}.html",
            "installer": "/install",
            "installer_redirect": "/install/redirect",
        }
    )


@pytest.fixture
def request_stack() -> RequestStack:
    return RequestStack()


@pytest.fixture
def make_request(session: Session) -> Any:
    """Return a factory for requests carrying the test session."""

    def _make(
        route: str | None = "dummy",
        scope: str | None = "frontend",
        **kwargs: Any,
    ) -> Request:
        attributes: dict[str, Any] = {}
        if route is not None:
            attributes["_route"] = route
        if scope is not None:
            attributes["_scope"] = scope
        attributes.update(kwargs.pop("attributes", {}))
        kwargs.setdefault("session", session)
        return Request(attributes=attributes, **kwargs)

    return _make


@pytest.fixture
def mock_structlog_configure(mocker: MockerFixture) -> Any:
    """Mock structlog.configure to capture its arguments."""
    return mocker.patch("structlog.configure")
