"""MutexPromise exception module

Provides all exception classes raised by the package
"""

from .errors import (
    MutexPromiseError,
    UsageError,
    ExecutorNotCallableError,
    SelfResolutionError,
    SchedulerError,
    ConfigError,
)

__all__ = [
    "MutexPromiseError",
    "UsageError",
    "ExecutorNotCallableError",
    "SelfResolutionError",
    "SchedulerError",
    "ConfigError",
]
