"""
Continuation

A registered handler pair plus the downstream promise awaiting its upstream's
settlement. Created by ``then``, concluded exactly once.
"""

from typing import TYPE_CHECKING, Any, Callable, Optional

from ..exceptions import SelfResolutionError
from .outcome import capture
from .state import PromiseState

if TYPE_CHECKING:
    from .deferred import MutexPromise


class Continuation:
    """
    Continuation

    Binds ``on_fulfilled`` / ``on_rejected`` to the downstream promise.
    """

    def __init__(
        self,
        downstream: "MutexPromise",
        on_fulfilled: Optional[Callable[[Any], Any]] = None,
        on_rejected: Optional[Callable[[Any], Any]] = None,
    ):
        self.downstream = downstream
        self.on_fulfilled = on_fulfilled
        self.on_rejected = on_rejected
        self.concluded = False

    def conclude(self, state: PromiseState, resolution: Any) -> None:
        """
        Fire with the upstream's terminal state and resolution

        A callable handler's return value resolves the downstream; a raised
        error rejects it. Without a callable handler the upstream settlement
        passes through unchanged.

        Args:
            state: Upstream terminal state
            resolution: Upstream value or reason
        """
        if self.concluded:
            return
        self.concluded = True

        if state is PromiseState.FULFILLED:
            handler = self.on_fulfilled
        else:
            handler = self.on_rejected

        if callable(handler):
            outcome = capture(handler, resolution)
            if outcome.ok:
                value = outcome.value
            else:
                value = outcome.error
            if value is self.downstream:
                self.downstream.reject(SelfResolutionError())
            elif outcome.ok:
                self.downstream.resolve(value)
            else:
                self.downstream.reject(value)
        else:
            self.downstream._pass_through(state, resolution)

    def __repr__(self) -> str:
        return (
            f"Continuation(downstream={self.downstream!r}, "
            f"concluded={self.concluded})"
        )
