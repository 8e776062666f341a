"""Utility helpers"""

from .logging import get_logger, configure_logging, log_promise_event

__all__ = ["get_logger", "configure_logging", "log_promise_event"]
