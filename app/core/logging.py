"""Structured logging configuration using structlog.

JSON lines in production, coloured console output elsewhere. A generation
run binds its id and trigger into the context so every event emitted while
the run is active (coordinator, generators, storage) carries them.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from app.core.config import get_config

# Chatty client libraries; their per-request INFO lines drown the run log
NOISY_LOGGERS = ("httpx", "httpcore", "LiteLLM", "botocore", "boto3", "urllib3")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with the application name and environment."""
    config = get_config()
    event_dict["app"] = config.app_name
    event_dict["env"] = config.app_env
    return event_dict


def _renderers(is_production: bool) -> list[Processor]:
    if is_production:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.processors.format_exc_info, structlog.dev.ConsoleRenderer(colors=True)]


def setup_logging(level: str | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Log level name; defaults to ``LOG_LEVEL`` from the config

    Example:
        >>> setup_logging()
        >>> get_logger(__name__).info("Worker started", queue="generation")
    """
    config = get_config()
    log_level = getattr(logging, (level or config.log_level).upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if config.is_development:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )

    processors.extend(_renderers(config.is_production))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def run_context(run_id: str, trigger: str) -> Iterator[None]:
    """Bind ``run_id`` and ``trigger`` to every event logged inside the block.

    Example:
        >>> with run_context("3f2c...", "cron"):
        ...     logger.info("Processing series")  # carries run_id and trigger
    """
    with structlog.contextvars.bound_contextvars(run_id=run_id, trigger=trigger):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name (defaults to calling module)

    Returns:
        Configured structlog logger

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Generation started", series_id="123")
        >>> logger.error("Generation failed", series_id="123", error="Quota exceeded")
    """
    return structlog.get_logger(name)
