"""
Aggregate Combinators

``all`` and ``race`` compose many promises into one, built on ``then``.
Non-promise items are wrapped with ``MutexPromise.resolved`` so plain values
count as already fulfilled and foreign thenables are assimilated.
"""

from typing import Any, Callable, Iterable, List, Optional

from .core.deferred import MutexPromise
from .executor.context import MutexContext, get_default_context
from .utils.logging import get_logger

logger = get_logger(__name__)


def _as_promise(item: Any, context: MutexContext) -> MutexPromise:
    return MutexPromise.resolved(item, context=context)


def promise_all(
    items: Iterable[Any], context: Optional[MutexContext] = None
) -> MutexPromise:
    """
    Wait for every item

    Args:
        items: Promises, thenables or plain values
        context: Owning context, the shared default if omitted

    Returns:
        A promise fulfilled with a list of values in input order, or rejected
        with the first rejection reason observed. Empty input fulfills with
        an empty list.
    """
    context = context if context is not None else get_default_context()
    items = list(items)
    results: List[Any] = [None] * len(items)
    remaining = len(items)

    def executor(resolve: Callable[[Any], None], reject: Callable[[Any], None]) -> None:
        if not items:
            resolve([])
            return

        def collect(index: int) -> Callable[[Any], None]:
            def on_value(value: Any) -> None:
                nonlocal remaining
                results[index] = value
                remaining -= 1
                if remaining == 0:
                    resolve(list(results))

            return on_value

        for index, item in enumerate(items):
            _as_promise(item, context).then(collect(index), reject)

    aggregate = MutexPromise(executor, context=context)
    aggregate.ancestors.extend(
        item for item in items if isinstance(item, MutexPromise)
    )
    logger.debug("Aggregating with all", promise_id=aggregate.id, count=len(items))
    return aggregate


def promise_race(
    items: Iterable[Any], context: Optional[MutexContext] = None
) -> MutexPromise:
    """
    Settle like the first item to settle

    Losing items are not cancelled; their outcomes are discarded. Empty input
    stays pending.

    Args:
        items: Promises, thenables or plain values
        context: Owning context, the shared default if omitted

    Returns:
        A promise
    """
    context = context if context is not None else get_default_context()
    items = list(items)

    def executor(resolve: Callable[[Any], None], reject: Callable[[Any], None]) -> None:
        for item in items:
            _as_promise(item, context).then(resolve, reject)

    aggregate = MutexPromise(executor, context=context)
    aggregate.ancestors.extend(
        item for item in items if isinstance(item, MutexPromise)
    )
    logger.debug("Aggregating with race", promise_id=aggregate.id, count=len(items))
    return aggregate
