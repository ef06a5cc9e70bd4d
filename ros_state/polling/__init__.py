"""State-convergence polling primitives.

- refresh: ``StateRefreshFunc`` single-shot predicates and ``RefreshResult``
- waiter: ``wait_for_state`` fixed-interval driver
"""

from ros_state.polling.refresh import ABSENT, RefreshResult, StateRefreshFunc
from ros_state.polling.waiter import UnexpectedStatusError, WaitTimeoutError, wait_for_state

__all__ = [
    "ABSENT",
    "RefreshResult",
    "StateRefreshFunc",
    "UnexpectedStatusError",
    "WaitTimeoutError",
    "wait_for_state",
]
