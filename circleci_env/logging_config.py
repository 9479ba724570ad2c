"""Structured logging setup for the command-line interface.

Logs go to standard error so that standard output only carries
``key=value`` lines.
"""

import sys
from typing import Any

import structlog


def configure_logging(log_level: str = "WARNING") -> None:
    """Configure structlog with JSON output on stderr.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        # The CLI may be configured more than once per process (tests)
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.debug("operation_dispatched", operation="list", project="webapp")
    """
    return structlog.get_logger(name)
