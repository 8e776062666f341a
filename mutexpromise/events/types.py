"""
Lifecycle event names and payloads
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class PromiseEvent(str, Enum):
    """Lifecycle events emitted by every promise"""

    NEW = "new"  # a promise was created
    RESOLVE = "resolve"  # a promise was fulfilled
    REJECT = "reject"  # a promise was rejected
    UNCAUGHT = "uncaught"  # a rejection was not caught within the grace period
    TRESPASS = "trespass"  # a promise was used outside its epoch


class TrespassInfo(BaseModel):
    """
    Payload of the ``trespass`` event

    - from_epoch: epoch the promise was created under
    - to_epoch: epoch current when the crossing was observed
    - phase: where the crossing was observed
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    from_epoch: Any = None
    to_epoch: Any = None
    phase: Literal["then", "resolution"]
