"""Logging configuration for the xcmake CLI: structlog rendering of stdlib records.

Library modules log through ``logging.getLogger(__name__)``; this module only
decides how those records are rendered. Output goes to stderr because the
translated makefile may be written to stdout.
"""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
    structlog.processors.format_exc_info,
]


def build_formatter(log_format: str) -> structlog.stdlib.ProcessorFormatter:
    """ProcessorFormatter rendering records as console text or JSON lines."""
    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_PRE_CHAIN,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def setup_logging(level: str | None = None) -> None:
    """Configure the ``xcmake`` logger hierarchy.

    Reads from environment variables:
        XCMAKE_LOG_LEVEL  : log level (default: INFO); ``level`` overrides it
        XCMAKE_LOG_FORMAT : console | json (default: console)
    """
    log_level = (level or os.environ.get("XCMAKE_LOG_LEVEL", "INFO")).upper()
    log_format = os.environ.get("XCMAKE_LOG_FORMAT", "console").lower()

    structlog.configure(
        processors=_PRE_CHAIN + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {"()": build_formatter, "log_format": log_format},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {"handlers": ["stderr"], "level": "WARNING"},
            "loggers": {"xcmake": {"level": log_level}},
        }
    )
