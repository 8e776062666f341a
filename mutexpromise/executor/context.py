"""
Promise context

A context bundles the state promises share: the current epoch, the event bus,
the scheduler and the configuration. Independent contexts give independent
mutex domains; a default shared instance serves the module-level API.
"""

from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from ..config import MutexConfig, load_config_from_env
from ..events.bus import EventBus, EventName, Subscriber
from ..utils.logging import configure_logging, get_logger
from .scheduler import AsyncioScheduler, Scheduler

if TYPE_CHECKING:
    from ..core.deferred import MutexPromise

logger = get_logger(__name__)


class MutexContext:
    """
    Promise context

    Holds the epoch token, event bus, scheduler and configuration used by
    every promise created in it.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        bus: Optional[EventBus] = None,
        config: Optional[MutexConfig] = None,
        epoch: Any = None,
    ):
        """
        Initialize the context

        Args:
            scheduler: Scheduling collaborator, defaults to AsyncioScheduler
            bus: Event bus, a fresh one if omitted
            config: Configuration, defaults to MutexConfig()
            epoch: Initial epoch token
        """
        self.scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self.bus = bus if bus is not None else EventBus()
        self.config = config if config is not None else MutexConfig()
        self._epoch = epoch

    @property
    def epoch(self) -> Any:
        """Current epoch token"""
        return self._epoch

    def set_epoch(self, token: Any) -> Any:
        """
        Replace the current epoch

        Promises created before the change trespass when used afterwards.

        Args:
            token: New epoch token

        Returns:
            The previous token
        """
        previous = self._epoch
        self._epoch = token
        logger.debug("Epoch changed", from_epoch=repr(previous), to_epoch=repr(token))
        return previous

    def subscribe(self, name: EventName, callback: Subscriber) -> None:
        """Subscribe to a lifecycle event"""
        self.bus.subscribe(name, callback)

    def unsubscribe(self, name: EventName, callback: Subscriber) -> None:
        """Unsubscribe from a lifecycle event"""
        self.bus.unsubscribe(name, callback)

    def promise(self, executor: Callable[..., Any]) -> "MutexPromise":
        """Create a promise in this context"""
        from ..core.deferred import MutexPromise

        return MutexPromise(executor, context=self)

    def resolved(self, value: Any = None) -> "MutexPromise":
        """Create a promise resolved with ``value`` in this context"""
        from ..core.deferred import MutexPromise

        return MutexPromise.resolved(value, context=self)

    def rejected(self, reason: Any = None) -> "MutexPromise":
        """Create a promise rejected with ``reason`` in this context"""
        from ..core.deferred import MutexPromise

        return MutexPromise.rejected(reason, context=self)

    def all(self, items: Iterable[Any]) -> "MutexPromise":
        """Aggregate ``items`` with ``all`` in this context"""
        from ..combinators import promise_all

        return promise_all(items, context=self)

    def race(self, items: Iterable[Any]) -> "MutexPromise":
        """Aggregate ``items`` with ``race`` in this context"""
        from ..combinators import promise_race

        return promise_race(items, context=self)


_default_context: Optional[MutexContext] = None


def get_default_context() -> MutexContext:
    """
    Get the shared default context

    Created on first use with an AsyncioScheduler and configuration read from
    the environment. Debug configuration turns on console logging.
    """
    global _default_context
    if _default_context is None:
        config = load_config_from_env()
        if config.debug:
            configure_logging(config.log_level)
        _default_context = MutexContext(config=config)
    return _default_context


def set_default_context(context: Optional[MutexContext]) -> Optional[MutexContext]:
    """
    Replace the shared default context

    Args:
        context: New default, or None to recreate lazily

    Returns:
        The previous default
    """
    global _default_context
    previous = _default_context
    _default_context = context
    return previous
