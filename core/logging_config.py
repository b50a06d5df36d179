"""
Structured logging configuration built on structlog.
Call configure_logging() once at process start; modules use get_logger(__name__).
"""

import logging
import sys
from typing import Optional

import structlog


def configure_logging(log_level: str = "INFO", json_logs: Optional[bool] = None) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        log_level: Minimum level name (e.g. "INFO", "DEBUG")
        json_logs: Render JSON lines instead of the console format.
            Defaults to JSON when stdout is not a terminal.
    """
    if json_logs is None:
        json_logs = not sys.stdout.isatty()

    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # SQLAlchemy engine chatter only at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level <= logging.DEBUG else logging.WARNING
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given module name."""
    return structlog.get_logger(name)
