"""State refresh predicates — one status check per call.

A ``StateRefreshFunc`` performs exactly one describe call and classifies
the outcome.  It never sleeps and never loops: waiting is the job of
whatever convergence driver invokes it (``wait_for_state`` or the
caller's own), so one driver serves every resource kind.

Outcomes, as ``RefreshResult(state, status, error)``:

==========  =========================  ==========  ==================================
outcome     state                      status      error
==========  =========================  ==========  ==================================
gone        ``None``                   ``""``      ``None``
error       ``None``                   ``""``      the describe error
failed      last snapshot              fail state  ``FailedToReachTargetStatusError``
in flight   snapshot                   status      ``None``
==========  =========================  ==========  ==================================
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import NamedTuple

from ros_state.core.exceptions import (
    FailedToReachTargetStatusError,
    ResourceNotFoundError,
    RosError,
)
from ros_state.models.state import DescribedState

logger = logging.getLogger(__name__)

#: Status reported for a resource that no longer exists.
ABSENT = ""


class RefreshResult(NamedTuple):
    """Outcome of one poll attempt.  Unpacks as ``(state, status, error)``."""

    state: DescribedState | None
    status: str
    error: RosError | None

    @property
    def found(self) -> bool:
        """Return ``True`` when the resource exists."""
        return self.state is not None

    @property
    def failed(self) -> bool:
        """Return ``True`` when the resource reached a declared fail state."""
        return isinstance(self.error, FailedToReachTargetStatusError)


class StateRefreshFunc:
    """Callable performing one poll attempt for one resource.

    Args:
        describe: Zero-argument callable returning the current snapshot
            or raising a ``RosError``.
        fail_states: Status values that mean the resource failed for good.
        name: Kind name, for logging.
        resource_id: Resource handle, for logging and error context.
    """

    def __init__(
        self,
        describe: Callable[[], DescribedState],
        fail_states: Iterable[str] = (),
        *,
        name: str = "",
        resource_id: str = "",
    ) -> None:
        self._describe = describe
        self._fail_states = frozenset(fail_states)
        self.name = name
        self.resource_id = resource_id

    @property
    def fail_states(self) -> frozenset[str]:
        """Return the status values treated as permanent failure."""
        return self._fail_states

    def __call__(self) -> RefreshResult:
        try:
            state = self._describe()
        except ResourceNotFoundError:
            # Absence is a legitimate outcome (e.g. a deletion target).
            logger.debug("Refresh: resource absent | kind=%s | id=%s", self.name, self.resource_id)
            return RefreshResult(None, ABSENT, None)
        except RosError as exc:
            return RefreshResult(None, "", exc)

        status = state.status
        if status in self._fail_states:
            error = FailedToReachTargetStatusError(
                status,
                state=state,
                resource_id=self.resource_id,
            )
            return RefreshResult(state, status, error)
        return RefreshResult(state, status, None)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, resource_id={self.resource_id!r}, "
            f"fail_states={sorted(self._fail_states)!r})"
        )
