"""
MutexPromise

A deferred value that settles exactly once, supports chained continuations,
assimilates foreign thenables, emits lifecycle events and flags continuations
that cross epoch boundaries.

Events emitted for every promise:
- new       - a promise was created
- resolve   - a promise was fulfilled
- reject    - a promise was rejected
- uncaught  - a rejection was not caught within the grace period
- trespass  - a promise was used outside its epoch
"""

import asyncio
import itertools
import traceback
from typing import Any, Callable, Iterable, List, Optional

from ..events.types import PromiseEvent
from ..exceptions import ExecutorNotCallableError, SelfResolutionError
from ..executor.context import MutexContext, get_default_context
from ..utils.logging import get_logger, log_promise_event
from .caught import set_caught
from .continuation import Continuation
from .fence import check_fence
from .outcome import Failure, Rejection, Success
from .resolution import run_resolution
from .state import PromiseState

logger = get_logger(__name__)

_ids = itertools.count(1)


def _noop(resolve: Callable[[Any], None], reject: Callable[[Any], None]) -> None:
    pass


class MutexPromise:
    """
    MutexPromise

    The executor is called synchronously with the bound ``resolve`` and
    ``reject`` methods. Settlement, assimilation and continuation firing all
    run through the context's scheduler, never synchronously.

    Example:
        >>> p = MutexPromise(lambda resolve, reject: resolve("x"))
        >>> p.then(str.upper)
    """

    def __init__(
        self,
        executor: Callable[..., Any],
        context: Optional[MutexContext] = None,
    ):
        """
        Create a promise

        Args:
            executor: Called as ``executor(resolve, reject)``
            context: Owning context, the shared default if omitted

        Raises:
            ExecutorNotCallableError: If ``executor`` is not callable
        """
        if not callable(executor):
            raise ExecutorNotCallableError(executor)

        self.id = next(_ids)
        self.context = context if context is not None else get_default_context()
        self.epoch = self.context.epoch
        self.caught = False

        # Promises "above" us; if we catch, so do they
        self.ancestors: List["MutexPromise"] = []

        self._state = PromiseState.PENDING
        self._resolution: Any = None
        self._continuations: List[Continuation] = []
        self._locked = False

        self.creation_stack: Optional[str] = None
        self.resolution_stack: Optional[str] = None
        if self.context.config.capture_stacks:
            self.creation_stack = "".join(traceback.format_stack()[:-1])

        self.context.bus.emit(PromiseEvent.NEW, self)

        executor(self.resolve, self.reject)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> PromiseState:
        return self._state

    @property
    def resolution(self) -> Any:
        """Value or reason; None while pending"""
        return self._resolution

    @property
    def is_pending(self) -> bool:
        return self._state is PromiseState.PENDING

    @property
    def is_fulfilled(self) -> bool:
        return self._state is PromiseState.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self._state is PromiseState.REJECTED

    @property
    def continuations(self) -> List[Continuation]:
        """Registered continuations still waiting for settlement"""
        return list(self._continuations)

    # ------------------------------------------------------------------
    # Resolver pair
    # ------------------------------------------------------------------

    def resolve(self, value: Any = None) -> None:
        """
        Resolve with ``value``

        No-op once settled or already resolved/rejected. Thenables are
        assimilated.

        Raises:
            SelfResolutionError: If ``value`` is this promise
        """
        if self._state is not PromiseState.PENDING:
            return
        if value is self:
            raise SelfResolutionError()
        if self._locked:
            return
        self._conclude(value, PromiseState.FULFILLED)

    def reject(self, reason: Any = None) -> None:
        """
        Reject with ``reason``

        No-op once settled or already resolved/rejected. Arms the uncaught
        rejection check.

        Raises:
            SelfResolutionError: If ``reason`` is this promise
        """
        if self._state is not PromiseState.PENDING:
            return
        if reason is self:
            raise SelfResolutionError()
        if self._locked:
            return
        self._conclude(reason, PromiseState.REJECTED)

    def _conclude(self, candidate: Any, kind: PromiseState) -> None:
        self.context.scheduler.schedule(
            lambda: run_resolution(self, candidate, kind)
        )
        self._locked = True
        if kind is PromiseState.REJECTED:
            self._watch_uncaught(candidate)

    def _watch_uncaught(self, reason: Any) -> None:
        def check() -> None:
            if self.caught:
                return
            logger.warning(
                "Uncaught promise rejection",
                promise_id=self.id,
                reason=repr(reason),
            )
            self.context.bus.emit(PromiseEvent.UNCAUGHT, self, reason)

        self.context.scheduler.after(self.context.config.uncaught_grace_ms, check)

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def _settle(self, state: PromiseState, resolution: Any) -> None:
        """Enter a terminal state, fire continuations and emit the event"""
        if self._state is not PromiseState.PENDING:
            return

        self._state = state
        self._resolution = resolution
        self._locked = True
        if self.context.config.capture_stacks:
            self.resolution_stack = "".join(traceback.format_stack()[:-1])

        log_promise_event(logger, self.id, state.value)

        continuations, self._continuations = self._continuations, []
        for continuation in continuations:
            continuation.conclude(state, resolution)

        if state is PromiseState.FULFILLED:
            self.context.bus.emit(PromiseEvent.RESOLVE, self, resolution)
        else:
            self.context.bus.emit(PromiseEvent.REJECT, self, resolution)

    def _settle_rejected(self, reason: Any) -> None:
        """Reject immediately, arming the uncaught check"""
        if self._state is not PromiseState.PENDING:
            return
        self._watch_uncaught(reason)
        self._settle(PromiseState.REJECTED, reason)

    def _pass_through(self, state: PromiseState, resolution: Any) -> None:
        """Adopt an upstream settlement unchanged"""
        if state is PromiseState.REJECTED:
            self._settle_rejected(resolution)
        else:
            self._settle(state, resolution)

    # ------------------------------------------------------------------
    # Continuations
    # ------------------------------------------------------------------

    def then(
        self,
        on_fulfilled: Optional[Callable[[Any], Any]] = None,
        on_rejected: Optional[Callable[[Any], Any]] = None,
    ) -> "MutexPromise":
        """
        Register continuation handlers

        Handlers never run synchronously within this call, even when this
        promise has already settled.

        Args:
            on_fulfilled: Called with the value on fulfillment
            on_rejected: Called with the reason on rejection

        Returns:
            A new promise settled from the handler's outcome
        """
        check_fence(self, "then")

        child = MutexPromise(_noop, context=self.context)
        continuation = Continuation(child, on_fulfilled, on_rejected)

        if self._state is PromiseState.PENDING:
            self._continuations.append(continuation)
        else:
            state, resolution = self._state, self._resolution
            self.context.scheduler.schedule(
                lambda: continuation.conclude(state, resolution)
            )

        child.ancestors.append(self)

        if callable(on_rejected):
            set_caught(child)

        return child

    def catch(self, on_rejected: Callable[[Any], Any]) -> "MutexPromise":
        """Register a rejection handler; same as ``then(None, on_rejected)``"""
        return self.then(None, on_rejected)

    def finally_(self, tap: Callable[[], Any]) -> "MutexPromise":
        """
        Run ``tap()`` on settlement of either kind

        The original value or reason is propagated after ``tap`` completes,
        waiting for it if it returns a thenable. A failure raised by ``tap``
        supersedes the original outcome.

        Args:
            tap: Zero-argument callback

        Returns:
            A new promise
        """
        context = self.context

        def after_tap(outcome: Any) -> "MutexPromise":
            def restore(_: Any) -> Any:
                return outcome.unwrap()

            return MutexPromise.resolved(tap(), context=context).then(restore)

        return self.then(
            lambda value: after_tap(Success(value)),
            lambda reason: after_tap(Failure(reason)),
        )

    # ------------------------------------------------------------------
    # Constructors and combinators
    # ------------------------------------------------------------------

    @classmethod
    def resolved(
        cls, value: Any = None, context: Optional[MutexContext] = None
    ) -> "MutexPromise":
        """
        Create a promise resolved with ``value``

        A MutexPromise ``value`` is adopted and recorded as an ancestor.
        """
        promise = cls(lambda resolve, reject: resolve(value), context=context)
        if isinstance(value, MutexPromise):
            promise.ancestors.append(value)
        return promise

    @classmethod
    def rejected(
        cls, reason: Any = None, context: Optional[MutexContext] = None
    ) -> "MutexPromise":
        """Create a promise rejected with ``reason``"""
        return cls(lambda resolve, reject: reject(reason), context=context)

    @classmethod
    def all(
        cls, items: Iterable[Any], context: Optional[MutexContext] = None
    ) -> "MutexPromise":
        """Fulfill with every item's value in input order; first rejection wins"""
        from ..combinators import promise_all

        return promise_all(items, context=context)

    @classmethod
    def race(
        cls, items: Iterable[Any], context: Optional[MutexContext] = None
    ) -> "MutexPromise":
        """Settle like the first item to settle"""
        from ..combinators import promise_race

        return promise_race(items, context=context)

    @classmethod
    def from_future(
        cls, future: "asyncio.Future[Any]", context: Optional[MutexContext] = None
    ) -> "MutexPromise":
        """
        Adopt the outcome of an asyncio future

        A cancelled future rejects with ``asyncio.CancelledError``.
        """

        def executor(resolve: Callable[[Any], None], reject: Callable[[Any], None]) -> None:
            def on_done(fut: "asyncio.Future[Any]") -> None:
                if fut.cancelled():
                    reject(asyncio.CancelledError())
                elif fut.exception() is not None:
                    reject(fut.exception())
                else:
                    resolve(fut.result())

            future.add_done_callback(on_done)

        return cls(executor, context=context)

    # ------------------------------------------------------------------
    # asyncio interop
    # ------------------------------------------------------------------

    def __await__(self):
        """
        Await the promise from a coroutine

        Requires the context's scheduler to run on the current event loop.
        Non-exception reasons are raised wrapped in ``Rejection``.
        """
        future = asyncio.get_running_loop().create_future()

        def on_fulfilled(value: Any) -> None:
            if not future.done():
                future.set_result(value)

        def on_rejected(reason: Any) -> None:
            if future.done():
                return
            if isinstance(reason, BaseException):
                future.set_exception(reason)
            else:
                future.set_exception(Rejection(reason))

        self.then(on_fulfilled, on_rejected)
        return future.__await__()

    def __repr__(self) -> str:
        if self._state is PromiseState.PENDING:
            return f"<MutexPromise #{self.id} pending>"
        return (
            f"<MutexPromise #{self.id} {self._state.value}: {self._resolution!r}>"
        )
