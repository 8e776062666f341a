"""
Mutex Fence

Flags promises used under an epoch other than the one they were created in.
The fence is advisory: it emits ``trespass`` and never blocks settlement or
continuation firing.
"""

from typing import TYPE_CHECKING

from ..events.types import PromiseEvent, TrespassInfo
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from .deferred import MutexPromise

logger = get_logger(__name__)


def check_fence(promise: "MutexPromise", phase: str) -> bool:
    """
    Compare the promise's creation epoch with the current epoch

    Args:
        promise: Promise being used
        phase: "then" or "resolution"

    Returns:
        True if the promise is within its epoch
    """
    context = promise.context
    current = context.epoch
    if promise.epoch == current:
        return True

    info = TrespassInfo(from_epoch=promise.epoch, to_epoch=current, phase=phase)
    logger.warning(
        "Promise used outside its epoch",
        promise_id=promise.id,
        from_epoch=repr(info.from_epoch),
        to_epoch=repr(info.to_epoch),
        phase=phase,
    )
    context.bus.emit(PromiseEvent.TRESPASS, promise, info)
    return False
