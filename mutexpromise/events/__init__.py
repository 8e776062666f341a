"""Lifecycle events and the event bus"""

from .bus import EventBus
from .types import PromiseEvent, TrespassInfo

__all__ = ["EventBus", "PromiseEvent", "TrespassInfo"]
