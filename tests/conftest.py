"""Shared fixtures for the mutexpromise test suite."""

from typing import Any, List, Tuple

import pytest

from mutexpromise import (
    ManualScheduler,
    MutexConfig,
    MutexContext,
    PromiseEvent,
    set_default_context,
)


class EventRecorder:
    """Records every lifecycle event emitted on a context"""

    def __init__(self, context: MutexContext):
        self.events: List[Tuple[str, Any, Tuple[Any, ...]]] = []
        for event in PromiseEvent:
            context.subscribe(event, self._make_handler(event.value))

    def _make_handler(self, name: str):
        def handler(promise: Any, *data: Any) -> None:
            self.events.append((name, promise, data))

        return handler

    def of(self, name: str) -> List[Tuple[Any, Tuple[Any, ...]]]:
        """Get (promise, data) pairs recorded for ``name``"""
        return [(p, d) for n, p, d in self.events if n == name]

    def count(self, name: str) -> int:
        return len(self.of(name))


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Deterministic scheduler with a virtual clock"""
    return ManualScheduler()


@pytest.fixture
def context(scheduler: ManualScheduler) -> MutexContext:
    """Fresh context bound to the manual scheduler"""
    return MutexContext(
        scheduler=scheduler,
        config=MutexConfig(uncaught_grace_ms=25.0),
        epoch="test",
    )


@pytest.fixture
def recorder(context: MutexContext) -> EventRecorder:
    """Event recorder subscribed to every event of ``context``"""
    return EventRecorder(context)


@pytest.fixture
def default_context(context: MutexContext):
    """Install ``context`` as the shared default for the test"""
    previous = set_default_context(context)
    yield context
    set_default_context(previous)


@pytest.fixture
def deferred(context: MutexContext):
    """Factory returning (promise, resolve, reject) for a pending promise"""

    def factory():
        resolvers = {}

        def executor(resolve, reject):
            resolvers["resolve"] = resolve
            resolvers["reject"] = reject

        promise = context.promise(executor)
        return promise, resolvers["resolve"], resolvers["reject"]

    return factory
