"""
Thenable capability

Any foreign future-like type interoperates with MutexPromise by exposing a
``then(on_fulfilled, on_rejected)`` method.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class Thenable(Protocol):
    """Continuation capability protocol"""

    def then(
        self,
        on_fulfilled: Optional[Callable[[Any], Any]] = None,
        on_rejected: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """Register completion callbacks"""
        ...


def is_thenable(value: Any) -> bool:
    """
    Check whether ``value`` exposes the continuation capability

    Classes are excluded; only instances can be assimilated.
    """
    if isinstance(value, type):
        return False
    return isinstance(value, Thenable)
