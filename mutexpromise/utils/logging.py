"""
Logging Utilities

This module provides structlog-based logging for promise lifecycle tracing.
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog


_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def get_logger(name: str) -> Any:
    """
    Get a logger for the specified name

    Args:
        name: Logger name (usually module name)

    Returns:
        structlog bound logger
    """
    if not structlog.is_configured():
        structlog.configure(
            processors=_SHARED_PROCESSORS
            + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    return structlog.get_logger(name)


def configure_logging(
    level: str = "INFO", format_string: Optional[str] = None
) -> None:
    """
    Configure logging for mutexpromise components

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for the stdlib handler
    """
    structlog.configure(
        processors=_SHARED_PROCESSORS + [structlog.dev.ConsoleRenderer()],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def log_promise_event(
    logger: Any,
    promise_id: int,
    event_type: str,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log a promise lifecycle event at debug level

    Args:
        logger: Logger instance
        promise_id: Identifier of the promise
        event_type: Type of event (e.g., "resolve", "reject", "assimilate")
        details: Additional event details
    """
    logger.debug(
        f"Promise {event_type}",
        promise_id=promise_id,
        event_type=event_type,
        **(details or {}),
    )
