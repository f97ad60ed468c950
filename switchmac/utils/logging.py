"""structlog configuration shared by the CLI and the HTTP service."""

from __future__ import annotations

import logging
import sys

import structlog

from switchmac.config import settings


def setup_logging(level: str | None = None, *, json: bool | None = None) -> None:
    """Configure stdlib logging and structlog.

    Log lines go to stderr so that a report written to stdout stays clean.
    """
    lvl = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    use_json = settings.log_json if json is None else json

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=lvl,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
