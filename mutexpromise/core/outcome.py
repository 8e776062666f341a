"""
Handler outcomes

A handler either returns a value or fails. The firing harness maps both cases
into an explicit tagged result instead of letting exceptions cross the
asynchronous boundary.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Union


class Rejection(Exception):
    """
    Reject with an arbitrary reason

    Python can only raise exceptions, so a handler that wants to reject its
    downstream promise with a non-exception reason raises ``Rejection(reason)``.
    The harness unwraps it and the downstream is rejected with ``reason``.
    """

    def __init__(self, reason: Any):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class Success:
    """Handler returned normally"""

    value: Any

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Handler raised; ``error`` is the rejection reason"""

    error: Any

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise the reason, wrapping non-exceptions in ``Rejection``"""
        if isinstance(self.error, Exception):
            raise self.error
        raise Rejection(self.error)


Outcome = Union[Success, Failure]


def capture(fn: Callable[..., Any], *args: Any) -> Outcome:
    """
    Call ``fn`` and tag the result

    Args:
        fn: Handler to call
        *args: Handler arguments

    Returns:
        Success with the return value, or Failure with the raised error.
        Cancellation is captured like any other failure.
    """
    try:
        return Success(fn(*args))
    except Rejection as e:
        return Failure(e.reason)
    except (Exception, asyncio.CancelledError) as e:
        return Failure(e)
