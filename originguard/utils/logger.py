"""Structured logging utilities for OriginGuard.

All modules log through structlog with keyword event fields. Header values
taken from requests are attacker-controlled, so anything echoed into a log
line goes through sanitize_header_value() first.

The package never configures structlog on import; the host application owns
the global logging setup and may call configure_logging() to get the
OriginGuard defaults.
"""

import logging
import sys
import time
from typing import Optional

import structlog
from structlog.types import EventDict, Processor

from originguard.constants import MAX_LOGGED_HEADER_CHARS


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add epoch timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True
) -> None:
    """Configure structured logging for the guard.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_timestamp,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=True),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "originguard") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def sanitize_header_value(value: Optional[str], limit: int = MAX_LOGGED_HEADER_CHARS) -> Optional[str]:
    """Return a log-safe rendering of a raw request header value.

    Control characters (CR, LF, ESC, ...) are backslash-escaped so a crafted
    header cannot forge extra log lines, and the result is truncated to
    ``limit`` characters with a trailing marker.
    """
    if value is None:
        return None
    escaped = value.encode("unicode_escape").decode("ascii")
    if len(escaped) > limit:
        return escaped[:limit] + "...[truncated]"
    return escaped
