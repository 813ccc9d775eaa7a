"""Structured logging configuration: structlog on top of stdlib logging.

Logs always go to stderr. ``report --json`` writes its document to stdout,
and audits typically run in CI where stdout is captured separately.
"""

from __future__ import annotations

import logging
import logging.config
import os
import sys

import structlog

LOG_FORMATS = ("console", "json")

# Libraries whose INFO output is one line per HTTP request.
_HTTP_LOGGERS = ("httpx", "httpcore")


def _resolve_level(name: str) -> str:
    level = name.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"unknown log level: {name!r}")
    return level


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog and stdlib logging.

    Explicit arguments win over the environment:
        DOTGITHUBINDEXER_LOG_LEVEL  (default: INFO)
        DOTGITHUBINDEXER_LOG_FORMAT console | json (default: console)

    At DEBUG the GitHub client's request lines are shown too; otherwise
    the HTTP libraries only report warnings. Raises ``ValueError`` for an
    unknown level or format.
    """
    log_level = _resolve_level(level or os.environ.get("DOTGITHUBINDEXER_LOG_LEVEL", "INFO"))
    fmt = (log_format or os.environ.get("DOTGITHUBINDEXER_LOG_FORMAT", "console")).lower()
    if fmt not in LOG_FORMATS:
        choices = ", ".join(LOG_FORMATS)
        raise ValueError(f"unknown log format: {fmt!r} (expected one of {choices})")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    http_level = "INFO" if log_level == "DEBUG" else "WARNING"
    loggers: dict[str, dict[str, str]] = {"dotgithubindexer": {"level": log_level}}
    loggers.update({name: {"level": http_level} for name in _HTTP_LOGGERS})

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": log_level,
            },
            "loggers": loggers,
        }
    )
