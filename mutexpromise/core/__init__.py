"""Settlement and continuation engine"""

from .state import PromiseState
from .outcome import Outcome, Success, Failure, Rejection, capture
from .thenable import Thenable, is_thenable
from .continuation import Continuation
from .caught import set_caught
from .fence import check_fence
from .resolution import run_resolution, assimilate
from .deferred import MutexPromise

__all__ = [
    "PromiseState",
    "Outcome",
    "Success",
    "Failure",
    "Rejection",
    "capture",
    "Thenable",
    "is_thenable",
    "Continuation",
    "set_caught",
    "check_fence",
    "run_resolution",
    "assimilate",
    "MutexPromise",
]
