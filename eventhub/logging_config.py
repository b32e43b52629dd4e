"""Structured logging for eventhub.

Modules log snake_case events with key/value context through structlog:

    logger = get_logger(__name__)
    logger.debug("event_subscribed", event_name="Error", handler="log")

The event name goes in ``event_name``; ``event`` is structlog's own key for
the log message.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

from eventhub.config import RegistryConfig


def configure_logging(config: RegistryConfig | None = None) -> None:
    """Route structlog through the stdlib root logger using a RegistryConfig.

    Args:
        config: Logging settings, defaults to RegistryConfig.from_env()
    """
    config = config or RegistryConfig.from_env()
    stream: TextIO = sys.stderr
    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        stream = open(config.log_file, "a")  # noqa: SIM115

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, config.log_level),
        force=True,
    )

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    if config.json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=config.log_file is None))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)
