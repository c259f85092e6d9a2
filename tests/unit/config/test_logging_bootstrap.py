# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""Tests for the early logging set up by `bootstrap_logging`."""

from __future__ import annotations

import inspect
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest
import structlog
from structlog.stdlib import LoggerFactory

from legacy_bridge.config.logging_bootstrap import bootstrap_logging
from legacy_bridge.exceptions import LanguageFileError

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence


def _processor_names(processors: Sequence[Any]) -> list[str]:
    return [
        p.__name__ if inspect.isfunction(p) or inspect.isbuiltin(p) or inspect.isclass(p) else type(p).__name__
        for p in processors
    ]


def _clear_root_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def unconfigured_logging() -> Generator[None, None, None]:
    """Start every test with structlog and the root logger unconfigured."""
    structlog.reset_defaults()
    _clear_root_handlers()
    yield
    structlog.reset_defaults()
    _clear_root_handlers()


class TestBootstrapConfiguration:
    @pytest.mark.unit
    def test_is_a_no_op_once_configured(self, mocker, mock_structlog_configure) -> None:
        mocker.patch("structlog.is_configured", side_effect=[False, True])

        bootstrap_logging()
        bootstrap_logging()

        mock_structlog_configure.assert_called_once()

    @pytest.mark.unit
    def test_configures_structlog(self) -> None:
        assert structlog.is_configured() is False

        bootstrap_logging()

        assert structlog.is_configured() is True

    @pytest.mark.unit
    def test_processor_chain(self, mock_structlog_configure) -> None:
        bootstrap_logging()

        kwargs = mock_structlog_configure.call_args.kwargs
        assert _processor_names(kwargs["processors"]) == [
            "filter_by_level",
            "add_logger_name",
            "add_log_level",
            "TimeStamper",
            "StackInfoRenderer",
            "ExceptionRenderer",
            "UnicodeDecoder",
            "wrap_for_formatter",
        ]
        assert isinstance(kwargs["logger_factory"], LoggerFactory)
        assert "boundloggerfiltering" in kwargs["wrapper_class"].__name__.lower()
        assert kwargs["context_class"] is dict
        assert kwargs["cache_logger_on_first_use"] is True

    @pytest.mark.unit
    def test_installs_a_stderr_handler_on_the_root_logger(self, mocker) -> None:
        stderr = mocker.patch("sys.stderr")
        root = mocker.MagicMock(spec=logging.Logger)
        root.handlers = []
        get_logger = mocker.patch("logging.getLogger", return_value=root)
        stream_handler = mocker.patch("logging.StreamHandler")
        formatter = mocker.patch("legacy_bridge.config.logging_bootstrap.ProcessorFormatter")

        bootstrap_logging(logging.WARNING)

        get_logger.assert_called_once_with()
        stream_handler.assert_called_once_with(stderr)
        handler = stream_handler.return_value
        handler.setFormatter.assert_called_once_with(formatter.return_value)
        handler.setLevel.assert_called_once_with(logging.WARNING)
        root.addHandler.assert_called_once_with(handler)
        root.setLevel.assert_called_once_with(logging.WARNING)


class TestBootstrapOutput:
    @pytest.mark.unit
    def test_renders_structlog_events(self, capsys) -> None:
        bootstrap_logging()
        log = structlog.get_logger("legacy_bridge.framework")

        log.info("Framework bootstrap starting", mode="FE")

        err = capsys.readouterr().err
        assert "Framework bootstrap starting" in err
        assert "mode" in err
        assert "legacy_bridge.framework" in err
        assert "info" in err.lower()
        assert str(datetime.now(UTC).date()) in err

    @pytest.mark.unit
    def test_renders_exceptions(self, capsys) -> None:
        bootstrap_logging()
        log = structlog.get_logger("legacy_bridge.loader")

        try:
            msg = "languages/en/default.xlf is not a valid XLIFF document"
            raise LanguageFileError(msg)
        except LanguageFileError as e:
            log.exception("Language file rejected", exc_info=e)

        err = capsys.readouterr().err
        assert "Language file rejected" in err
        assert "LanguageFileError" in err

    @pytest.mark.unit
    def test_filters_standard_logging_by_level(self, capsys) -> None:
        bootstrap_logging(logging.INFO)
        std_logger = logging.getLogger("legacy_bridge.legacy")

        std_logger.info("Constant defined")
        std_logger.debug("Variable assigned")

        err = capsys.readouterr().err
        assert "Constant defined" in err
        assert "legacy_bridge.legacy" in err
        assert "Variable assigned" not in err
