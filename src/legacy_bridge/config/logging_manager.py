# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
The LoggingManager.

Applies the logging sections of the settings on top of the bootstrap
configuration: a colorized console handler, a JSON file handler and a size
limited, rotating JSON file handler, all fed through `structlog`.

Configuration sections:
-----------------------
- `logger`: `level` and `log_directory`.
- `console_handler`: `enabled`.
- `file_handler`: `enabled`, `file_name`.
- `limited_file_handler`: `enabled`, `file_name`, `max_bytes`, `backup_count`.

Example Usage:
--------------
```python
SettingsManagerSingleton.initialize_from_context()
LoggingManagerSingleton.initialize_from_context(settings=SettingsManagerSingleton.get_instance())
log = LoggingManagerSingleton.get_instance().get_logger(__name__)
log.info("Framework bootstrap starting")
```
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Final, Self

import structlog
from rich.console import Console
from structlog.stdlib import ProcessorFormatter

from legacy_bridge.__about__ import __app_name__
from legacy_bridge.exceptions import InvalidLogLevelError, LogDirectoryError, LogHandlerError

if TYPE_CHECKING:
    from types import TracebackType

    from structlog.typing import Processor

    from legacy_bridge.config.settings_manager import SettingsManager

# Console for errors raised while handlers are torn down
_error_console = Console(file=sys.stderr)

APP_NAME: Final[str] = __app_name__.lower()
DEFAULT_LOG_FILENAME: Final[str] = f"{APP_NAME}.log"
DEFAULT_LIMITED_LOG_FILENAME: Final[str] = f"limited_{APP_NAME}.log"
DEFAULT_MAX_BYTES: Final[int] = 1024 * 1024
DEFAULT_BACKUP_COUNT: Final[int] = 5

LOGGING_SECTIONS: Final[tuple[str, ...]] = ("logger", "console_handler", "file_handler", "limited_file_handler")


class LoggingManager:
    """Manage the full configuration and lifecycle of the logging system."""

    def __init__(self) -> None:
        self._internal_errors: list[str] = []
        self.log_config: dict[str, Any] = {}
        self.effective_log_level: int = logging.NOTSET
        self._logger: structlog.stdlib.BoundLogger = structlog.get_logger("LoggingManagerInit")

    @property
    def internal_errors(self) -> list[str]:
        """Return the list of internal errors."""
        return self._internal_errors

    def apply_configuration(self, *, log_config: dict[str, Any], cli_log_level: int | None = None) -> None:
        """
        Apply the logging configuration.

        Args:
            log_config: The logging sections of the settings, keyed by section.
            cli_log_level: Optional override; wins if it is more verbose.

        Raises:
            InvalidLogLevelError: If the configured level is unknown.
            LogDirectoryError: If the log directory cannot be created.
            LogHandlerError: If a handler cannot be set up.
        """
        self._internal_errors.clear()
        self.log_config = log_config

        try:
            self._setup_logging_pipeline(cli_log_level)
        except (InvalidLogLevelError, LogDirectoryError, LogHandlerError) as e:
            self._internal_errors.append(f"Critical error during logging configuration: {e}")
            self._logger.exception("Critical error during logging configuration", exc_info=e)
            raise

        self._logger.info("Full logging configuration applied.", level=logging.getLevelName(self.effective_log_level))

    def shutdown(self) -> None:
        """Close and detach all handlers of the root logger."""
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            try:
                handler.close()
                root_logger.removeHandler(handler)
            except (OSError, ValueError) as e:
                _error_console.print(
                    f"[bold red]Error[/bold red]: Failed to close log handler {handler.__class__.__name__}: {e}"
                )

    def get_logger(self, name: str | None = None) -> structlog.stdlib.BoundLogger:
        """Return a structlog logger, named after the application by default."""
        return structlog.get_logger(name or APP_NAME)

    def _get_effective_log_level(self, logger_settings: dict[str, Any], cli_log_level: int | None) -> int:
        level_name = str(logger_settings.get("level", "INFO")).upper()
        level = logging.getLevelNamesMapping().get(level_name)
        if level is None:
            msg = f"Invalid log level '{level_name}' in config."
            raise InvalidLogLevelError(msg)

        if cli_log_level is not None:
            # lower value is more verbose
            level = min(level, cli_log_level)
        return level

    @staticmethod
    def _pre_chain() -> list[Processor]:
        return [
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

    def _formatter(self, renderer: Processor) -> ProcessorFormatter:
        return ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[*self._pre_chain(), structlog.stdlib.PositionalArgumentsFormatter()],
        )

    def _log_directory(self) -> Path:
        log_dir_str = self.log_config.get("logger", {}).get("log_directory")
        if not log_dir_str:
            msg = "Log directory not specified in settings."
            raise LogDirectoryError(msg)
        log_dir = Path(log_dir_str)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create log directory: {log_dir!s}"
            raise LogDirectoryError(msg) from e
        return log_dir

    def _build_handlers(self) -> list[logging.Handler]:
        handlers: list[logging.Handler] = []

        if self.log_config.get("console_handler", {}).get("enabled"):
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(self._formatter(structlog.dev.ConsoleRenderer(colors=True)))
            handlers.append(console_handler)

        file_settings = self.log_config.get("file_handler", {})
        if file_settings.get("enabled"):
            path = self._log_directory() / file_settings.get("file_name", DEFAULT_LOG_FILENAME)
            try:
                file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
            except OSError as e:
                msg = f"Failed to set up file handler: {path!s}"
                raise LogHandlerError(msg) from e
            file_handler.setFormatter(self._formatter(structlog.processors.JSONRenderer()))
            handlers.append(file_handler)

        limited_settings = self.log_config.get("limited_file_handler", {})
        if limited_settings.get("enabled"):
            path = self._log_directory() / limited_settings.get("file_name", DEFAULT_LIMITED_LOG_FILENAME)
            try:
                rotating_handler = logging.handlers.RotatingFileHandler(
                    path,
                    maxBytes=limited_settings.get("max_bytes", DEFAULT_MAX_BYTES),
                    backupCount=limited_settings.get("backup_count", DEFAULT_BACKUP_COUNT),
                    encoding="utf-8",
                )
            except OSError as e:
                msg = f"Failed to set up limited file handler: {path!s}"
                raise LogHandlerError(msg) from e
            rotating_handler.setFormatter(self._formatter(structlog.processors.JSONRenderer()))
            handlers.append(rotating_handler)

        return handlers

    def _setup_logging_pipeline(self, cli_log_level: int | None) -> None:
        self.effective_log_level = self._get_effective_log_level(self.log_config.get("logger", {}), cli_log_level)
        handlers = self._build_handlers()

        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        root_logger.setLevel(self.effective_log_level)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                *self._pre_chain(),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        for handler in handlers:
            handler.setLevel(self.effective_log_level)
            root_logger.addHandler(handler)

        self._logger = structlog.get_logger("LoggingManager")

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.shutdown()


class LoggingManagerSingleton:
    """Singleton class for `LoggingManager`."""

    _instance: LoggingManager | None = None
    _initialization_errors: ClassVar[list[str]] = []
    _is_configured: ClassVar[bool] = False

    @classmethod
    def get_instance(cls) -> LoggingManager:
        """
        Return the configured `LoggingManager`.

        Raises:
            RuntimeError: If `initialize_from_context` has not been called yet.
        """
        if cls._instance is None:
            msg = "LoggingManager has not been initialized. Call initialize_from_context first."
            raise RuntimeError(msg)
        return cls._instance

    @classmethod
    def initialize_from_context(cls, *, settings: SettingsManager, cli_log_level: int | None = None) -> None:
        """Configure logging once from the settings' logging sections."""
        if cls._is_configured:
            cls._initialization_errors.append("LoggingManagerSingleton already configured. Cannot re-configure.")
            return

        if cls._instance is None:
            cls._instance = LoggingManager()

        cls._initialization_errors.clear()
        log_config = {section: settings.get_section(section) for section in LOGGING_SECTIONS}
        try:
            cls._instance.apply_configuration(log_config=log_config, cli_log_level=cli_log_level)
        except Exception as e:
            cls._initialization_errors.append(f"Unexpected error during LoggingManager configuration: {e}")
            raise

        cls._initialization_errors.extend(cls._instance.internal_errors)
        cls._is_configured = True

    @classmethod
    def get_initialization_errors(cls) -> list[str]:
        """Return the unique errors of the singleton and its instance."""
        errors = list(cls._initialization_errors)
        if cls._instance:
            errors.extend(cls._instance.internal_errors)
        return list(set(errors))

    @classmethod
    def reset(cls) -> None:
        """
        Shut down and forget the instance.

        Primarily for testing.
        """
        if cls._instance:
            cls._instance.shutdown()
        cls._instance = None
        cls._initialization_errors.clear()
        cls._is_configured = False
