"""
MutexPromise Exception Definitions

Usage errors are raised synchronously at the call site and are never
converted into rejections. Everything else flows through the promise chain.
"""

from typing import Any, Dict, Optional


class MutexPromiseError(Exception):
    """MutexPromise base exception"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UsageError(MutexPromiseError, TypeError):
    """
    Usage error

    Raised when the promise API is misused, such as constructing a promise
    without a callable executor or resolving a promise with itself.
    """

    pass


class ExecutorNotCallableError(UsageError):
    """The executor passed to the constructor is not callable"""

    def __init__(self, executor: Any):
        super().__init__(
            f"{executor!r} is not a function",
            {"executor_type": type(executor).__name__},
        )


class SelfResolutionError(UsageError):
    """A promise was resolved or rejected with itself"""

    def __init__(self):
        super().__init__("Cannot resolve promise with itself.")


class SchedulerError(MutexPromiseError):
    """
    Scheduler error

    Raised when a scheduler cannot dispatch a callback, such as an asyncio
    scheduler used outside of a running event loop.
    """

    pass


class ConfigError(MutexPromiseError):
    """Invalid configuration value"""

    pass
