"""
Event Bus

Named-subscriber registry for promise lifecycle notifications. Subscribers
run synchronously in registration order; their exceptions propagate to the
emitting call site.
"""

from typing import Any, Callable, Dict, List, Union

from ..utils.logging import get_logger
from .types import PromiseEvent

logger = get_logger(__name__)

EventName = Union[PromiseEvent, str]
Subscriber = Callable[..., Any]


def _key(name: EventName) -> str:
    if isinstance(name, PromiseEvent):
        return name.value
    return name


class EventBus:
    """
    Event bus

    Maps an event name to an ordered list of subscribers. Duplicates are
    allowed; each registration is invoked once per emit.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def subscribe(self, name: EventName, callback: Subscriber) -> None:
        """
        Register a subscriber

        Args:
            name: Event name
            callback: Called as ``callback(promise, *data)``
        """
        self._subscribers.setdefault(_key(name), []).append(callback)

    def unsubscribe(self, name: EventName, callback: Subscriber) -> None:
        """Remove every registration of ``callback`` for ``name``"""
        subscribers = self._subscribers.get(_key(name))
        if not subscribers:
            return
        subscribers[:] = [cb for cb in subscribers if cb != callback]

    def emit(self, name: EventName, promise: Any, *data: Any) -> None:
        """
        Invoke subscribers of ``name`` synchronously

        The list is snapshotted first so subscribers may (un)subscribe while
        the event is being delivered.

        Args:
            name: Event name
            promise: The emitting promise, passed as first argument
            *data: Event payload
        """
        for callback in list(self._subscribers.get(_key(name), ())):
            callback(promise, *data)

    def subscribers(self, name: EventName) -> List[Subscriber]:
        """Get a copy of the subscribers for ``name``"""
        return list(self._subscribers.get(_key(name), ()))

    def count(self, name: EventName) -> int:
        """Get the number of registrations for ``name``"""
        return len(self._subscribers.get(_key(name), ()))

    def clear(self) -> None:
        """Drop every subscriber"""
        self._subscribers.clear()
        logger.debug("Event bus cleared")
