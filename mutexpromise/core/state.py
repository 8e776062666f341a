"""Promise states"""

from enum import Enum


class PromiseState(Enum):
    """Promise state; transitions PENDING -> terminal at most once"""

    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"
