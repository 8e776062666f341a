"""MutexPromise - deferred values with lifecycle events and epoch fencing."""

from typing import Any, Callable

from .combinators import promise_all, promise_race
from .config import MutexConfig, get_default_config, load_config_from_env, load_config_from_file
from .core import (
    Continuation,
    Failure,
    MutexPromise,
    PromiseState,
    Rejection,
    Success,
    Thenable,
    is_thenable,
)
from .events import EventBus, PromiseEvent, TrespassInfo
from .exceptions import (
    ConfigError,
    ExecutorNotCallableError,
    MutexPromiseError,
    SchedulerError,
    SelfResolutionError,
    UsageError,
)
from .executor import (
    AsyncioScheduler,
    ManualScheduler,
    MutexContext,
    Scheduler,
    get_default_context,
    set_default_context,
)

__version__ = "0.1.0"


def create(executor: Callable[..., Any]) -> MutexPromise:
    """Create a promise in the default context"""
    return MutexPromise(executor)


def resolve(value: Any = None) -> MutexPromise:
    """Create a promise resolved with ``value`` in the default context"""
    return MutexPromise.resolved(value)


def reject(reason: Any = None) -> MutexPromise:
    """Create a promise rejected with ``reason`` in the default context"""
    return MutexPromise.rejected(reason)


def subscribe(name: Any, callback: Callable[..., Any]) -> None:
    """Subscribe to a lifecycle event of the default context"""
    get_default_context().subscribe(name, callback)


def unsubscribe(name: Any, callback: Callable[..., Any]) -> None:
    """Unsubscribe from a lifecycle event of the default context"""
    get_default_context().unsubscribe(name, callback)


def set_epoch(token: Any) -> Any:
    """Replace the epoch of the default context, returning the previous one"""
    return get_default_context().set_epoch(token)


def get_epoch() -> Any:
    """Get the epoch of the default context"""
    return get_default_context().epoch


__all__ = [
    "__version__",
    # Promise
    "MutexPromise",
    "PromiseState",
    "Continuation",
    "Thenable",
    "is_thenable",
    "Success",
    "Failure",
    "Rejection",
    # Module-level API
    "create",
    "resolve",
    "reject",
    "promise_all",
    "promise_race",
    "subscribe",
    "unsubscribe",
    "set_epoch",
    "get_epoch",
    # Events
    "EventBus",
    "PromiseEvent",
    "TrespassInfo",
    # Context and scheduling
    "MutexContext",
    "get_default_context",
    "set_default_context",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    # Configuration
    "MutexConfig",
    "get_default_config",
    "load_config_from_env",
    "load_config_from_file",
    # Errors
    "MutexPromiseError",
    "UsageError",
    "ExecutorNotCallableError",
    "SelfResolutionError",
    "SchedulerError",
    "ConfigError",
]
