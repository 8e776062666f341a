"""
Resolution Procedure

Assimilates a candidate value into a terminal settlement. Rejections are
settled as-is; fulfillment candidates exposing the continuation capability are
unwrapped recursively until a plain value or a rejection is reached.
"""

import asyncio
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..exceptions import SelfResolutionError
from ..utils.logging import get_logger, log_promise_event
from .fence import check_fence
from .state import PromiseState
from .thenable import is_thenable

if TYPE_CHECKING:
    from .deferred import MutexPromise

logger = get_logger(__name__)


def read_capability(candidate: Any) -> Optional[Callable[..., Any]]:
    """
    Read the continuation capability of ``candidate``

    Returns:
        The bound ``then`` method, or None for plain values

    Raises:
        Exception: Whatever reading the attribute raises
    """
    if not is_thenable(candidate):
        return None
    then = candidate.then
    if not callable(then):
        return None
    return then


def run_resolution(
    promise: "MutexPromise", candidate: Any, kind: PromiseState
) -> None:
    """
    Settle ``promise`` from ``candidate``

    Args:
        promise: Promise being settled
        candidate: Value, reason or thenable
        kind: Requested terminal state
    """
    check_fence(promise, "resolution")

    if promise.state is not PromiseState.PENDING:
        return

    if kind is PromiseState.REJECTED:
        promise._settle(PromiseState.REJECTED, candidate)
        return

    try:
        then = read_capability(candidate)
    except (Exception, asyncio.CancelledError) as e:
        promise._settle_rejected(e)
        return

    if then is None:
        promise._settle(PromiseState.FULFILLED, candidate)
    else:
        assimilate(promise, then)


def assimilate(promise: "MutexPromise", then: Callable[..., Any]) -> None:
    """
    Adopt the eventual state of a thenable

    ``then`` is invoked with two one-shot callbacks; the first call wins and
    later calls are ignored. A synchronous error raised by ``then`` rejects
    ``promise`` unless a callback already fired.

    Args:
        promise: Promise being settled
        then: Bound continuation capability of the thenable
    """
    called = False

    def on_inner(value: Any = None) -> None:
        nonlocal called
        if called:
            return
        called = True
        if value is promise:
            promise._settle_rejected(SelfResolutionError())
            return
        run_resolution(promise, value, PromiseState.FULFILLED)

    def on_inner_err(reason: Any = None) -> None:
        nonlocal called
        if called:
            return
        called = True
        promise._settle_rejected(reason)

    log_promise_event(logger, promise.id, "assimilate")

    try:
        then(on_inner, on_inner_err)
    except (Exception, asyncio.CancelledError) as e:
        if called:
            logger.debug(
                "Discarding error raised after thenable settled",
                promise_id=promise.id,
                error=repr(e),
            )
            return
        called = True
        promise._settle_rejected(e)
