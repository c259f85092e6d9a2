# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

from __future__ import annotations

import logging
import sys

import structlog
from structlog.dev import ConsoleRenderer
from structlog.stdlib import ProcessorFormatter


def bootstrap_logging(level: int = logging.INFO) -> None:
    """
    Configure a minimal structlog setup.

    Used before the settings are loaded, e.g. while the language files of
    the first request are read. Logs to stderr in a human-readable format.
    Does nothing if structlog has already been configured.
    """
    if structlog.is_configured():
        return

    pre_chain_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        ProcessorFormatter(
            processor=ConsoleRenderer(colors=False),
            foreign_pre_chain=[
                *pre_chain_processors,
                structlog.stdlib.PositionalArgumentsFormatter(),
            ],
        )
    )
    console_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)
