"""
Caught-Tracker

Back-propagates the "has a rejection handler" flag through still-pending
ancestors. Used only to suppress uncaught-rejection reporting.
"""

from typing import TYPE_CHECKING, List, Set

from .state import PromiseState

if TYPE_CHECKING:
    from .deferred import MutexPromise


def set_caught(promise: "MutexPromise") -> int:
    """
    Mark ``promise`` and its pending ancestors as caught

    The walk uses an explicit stack; a settled promise halts the walk along
    its path.

    Args:
        promise: Promise that gained a rejection handler

    Returns:
        Number of promises marked
    """
    marked = 0
    stack: List["MutexPromise"] = [promise]
    seen: Set[int] = set()

    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))

        if current.state is not PromiseState.PENDING:
            continue

        current.caught = True
        marked += 1
        stack.extend(current.ancestors)

    return marked
