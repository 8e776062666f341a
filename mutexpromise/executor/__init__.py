"""Scheduling collaborators and promise contexts"""

from .scheduler import Scheduler, AsyncioScheduler, ManualScheduler
from .context import MutexContext, get_default_context, set_default_context

__all__ = [
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "MutexContext",
    "get_default_context",
    "set_default_context",
]
