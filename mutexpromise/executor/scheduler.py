"""
Scheduling collaborators

A scheduler provides two primitives:

- ``schedule(callback)``: run later, after the current synchronous execution,
  in FIFO order, ahead of timer callbacks
- ``after(delay_ms, callback)``: one-shot delayed callback

``AsyncioScheduler`` maps them onto an event loop; ``ManualScheduler`` is a
deterministic queue with a virtual clock for tests and embedding.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from ..exceptions import SchedulerError

Callback = Callable[[], Any]


class Scheduler(ABC):
    """
    Scheduler abstract base class

    Defines the deferred-execution interface the promise engine relies on.
    """

    def __init__(self):
        self._stats = {
            "total_scheduled": 0,
            "total_timers": 0,
        }

    @abstractmethod
    def schedule(self, callback: Callback) -> None:
        """
        Run ``callback`` after the current synchronous execution

        Args:
            callback: Zero-argument callable
        """
        pass

    @abstractmethod
    def after(self, delay_ms: float, callback: Callback) -> None:
        """
        Run ``callback`` once after ``delay_ms`` milliseconds

        Args:
            delay_ms: Delay in milliseconds
            callback: Zero-argument callable
        """
        pass

    def get_execution_stats(self) -> Dict[str, Any]:
        """Get scheduling statistics"""
        return dict(self._stats)


class AsyncioScheduler(Scheduler):
    """
    Event-loop backed scheduler

    Uses ``call_soon`` for deferred execution and ``call_later`` for timers.
    When no loop is given the running loop is looked up on every call.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        super().__init__()
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise SchedulerError(
                "AsyncioScheduler requires a running event loop",
                {"hint": "pass a loop explicitly or use ManualScheduler"},
            ) from e

    def schedule(self, callback: Callback) -> None:
        self._get_loop().call_soon(callback)
        self._stats["total_scheduled"] += 1

    def after(self, delay_ms: float, callback: Callback) -> None:
        self._get_loop().call_later(delay_ms / 1000.0, callback)
        self._stats["total_timers"] += 1


class ManualScheduler(Scheduler):
    """
    Deterministic scheduler

    Callbacks are queued until explicitly run. Timers use a virtual clock
    advanced with ``advance``; queued callbacks are always drained before and
    between timers. Callback exceptions propagate to the caller.
    """

    def __init__(self, max_callbacks: int = 100_000):
        """
        Initialize the scheduler

        Args:
            max_callbacks: Upper bound on callbacks run by a single drain,
                guards against runaway self-scheduling loops
        """
        super().__init__()
        self._queue: Deque[Callback] = deque()
        self._timers: List[Tuple[float, int, Callback]] = []
        self._seq = itertools.count()
        self._max_callbacks = max_callbacks
        self.now_ms: float = 0.0
        self.rounds: int = 0

    def schedule(self, callback: Callback) -> None:
        self._queue.append(callback)
        self._stats["total_scheduled"] += 1

    def after(self, delay_ms: float, callback: Callback) -> None:
        heapq.heappush(
            self._timers, (self.now_ms + delay_ms, next(self._seq), callback)
        )
        self._stats["total_timers"] += 1

    @property
    def pending_count(self) -> int:
        """Number of queued callbacks"""
        return len(self._queue)

    @property
    def timer_count(self) -> int:
        """Number of armed timers"""
        return len(self._timers)

    def run_round(self) -> int:
        """
        Run the callbacks queued at the start of the round

        Callbacks scheduled while the round runs wait for the next round.

        Returns:
            Number of callbacks run
        """
        count = len(self._queue)
        for _ in range(count):
            self._queue.popleft()()
        self.rounds += 1
        return count

    def run_until_idle(self) -> int:
        """
        Drain the queue, including callbacks scheduled while draining

        Timers are not fired.

        Returns:
            Number of callbacks run
        """
        ran = 0
        while self._queue:
            if ran >= self._max_callbacks:
                raise SchedulerError(
                    "Scheduler did not become idle",
                    {"max_callbacks": self._max_callbacks},
                )
            self._queue.popleft()()
            ran += 1
        return ran

    def advance(self, delay_ms: float) -> int:
        """
        Move the virtual clock forward, firing timers that come due

        Args:
            delay_ms: Milliseconds to advance

        Returns:
            Number of timers fired

        Raises:
            SchedulerError: If delay_ms is negative
        """
        if delay_ms < 0:
            raise SchedulerError(
                "delay_ms must be non-negative",
                {"delay_ms": delay_ms},
            )

        target = self.now_ms + delay_ms
        fired = 0
        self.run_until_idle()
        while self._timers and self._timers[0][0] <= target:
            due, _, callback = heapq.heappop(self._timers)
            self.now_ms = due
            callback()
            fired += 1
            self.run_until_idle()
        self.now_ms = target
        return fired

    def run_all(self) -> int:
        """
        Drain the queue and fire every timer, advancing the clock as needed

        Returns:
            Number of timers fired
        """
        fired = 0
        self.run_until_idle()
        while self._timers:
            fired += self.advance(self._timers[0][0] - self.now_ms)
        return fired
