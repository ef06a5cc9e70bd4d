"""Fixed-interval convergence driver for state refresh predicates.

``wait_for_state`` invokes any zero-argument ``RefreshResult`` producer
until the reported status reaches a target, the predicate reports an
error, or the timeout expires.  It is deliberately small: callers with
their own scheduling (durable timers, reconcilers) drive the predicate
themselves.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from ros_state.core.exceptions import PermanentError, ResourceNotFoundError, TransientError
from ros_state.polling.refresh import ABSENT, RefreshResult

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
DEFAULT_NOT_FOUND_CHECKS = 20


class WaitTimeoutError(TransientError):
    """The resource did not reach a target status before the timeout.

    Attributes:
        last_status: Last status observed (``""`` if none).
        poll_count: Number of refresh calls made.
    """

    default_stage = "wait"
    default_code = "WAIT_TIMEOUT"

    def __init__(self, timeout_s: float, last_status: str, poll_count: int, resource_id: str = "") -> None:
        self.last_status = last_status
        self.poll_count = poll_count
        super().__init__(
            f"Timed out after {timeout_s:g}s waiting for {resource_id or 'resource'} "
            f"(last status {last_status!r}, {poll_count} polls)",
            resource_id=resource_id,
        )


class UnexpectedStatusError(PermanentError):
    """The resource reported a status that is neither pending nor a target.

    Attributes:
        status: The unexpected status.
    """

    default_stage = "wait"
    default_code = "UNEXPECTED_STATUS"

    def __init__(self, status: str, expected: Iterable[str], resource_id: str = "") -> None:
        self.status = status
        super().__init__(
            f"Unexpected status {status!r} for {resource_id or 'resource'}; "
            f"expected one of {sorted(expected)!r}",
            resource_id=resource_id,
        )


def wait_for_state(
    refresh: Callable[[], RefreshResult],
    target: Iterable[str],
    *,
    pending: Iterable[str] = (),
    timeout_s: float,
    interval_s: float = DEFAULT_POLL_INTERVAL_SECONDS,
    not_found_checks: int = DEFAULT_NOT_FOUND_CHECKS,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> RefreshResult:
    """Poll *refresh* until its status is in *target*.

    Args:
        refresh: One-shot state predicate (e.g. a ``StateRefreshFunc``).
        target: Statuses that end the wait successfully.  Include
            ``ABSENT`` (``""``) to wait for deletion.
        pending: Statuses allowed while waiting.  Empty means any
            non-target status is allowed.
        timeout_s: Maximum total wait in seconds.
        interval_s: Seconds between polls.
        not_found_checks: Consecutive "absent" results tolerated when
            absence is not a target.
        sleep: Sleep function (injectable for tests).
        clock: Monotonic clock (injectable for tests).

    Returns:
        The ``RefreshResult`` that reached a target.

    Raises:
        RosError: The error reported by the predicate (including
            ``FailedToReachTargetStatusError`` for fail states).
        ResourceNotFoundError: If the resource stayed absent for
            ``not_found_checks`` polls and absence is not a target.
        UnexpectedStatusError: If a status outside *pending* and *target*
            is observed.
        WaitTimeoutError: If *timeout_s* elapses first.
    """
    targets = frozenset(target)
    # An existing resource with no status must not satisfy an absence target.
    found_targets = targets - {ABSENT}
    allowed = frozenset(pending)
    kind = str(getattr(refresh, "name", ""))
    resource_id = str(getattr(refresh, "resource_id", ""))

    deadline = clock() + timeout_s
    poll_count = 0
    absent_count = 0
    last_status = ""

    while True:
        poll_count += 1
        result = refresh()

        if result.error is not None:
            logger.warning(
                "Wait aborted | kind=%s | id=%s | poll_count=%d | error=%s",
                kind,
                resource_id,
                poll_count,
                result.error,
            )
            raise result.error

        if not result.found:
            if ABSENT in targets:
                logger.info("Wait complete: resource absent | kind=%s | id=%s", kind, resource_id)
                return result
            absent_count += 1
            if absent_count >= not_found_checks:
                raise ResourceNotFoundError(kind or "resource", resource_id)
        else:
            absent_count = 0
            last_status = result.status
            if result.status in found_targets:
                logger.info(
                    "Wait complete | kind=%s | id=%s | status=%s | poll_count=%d",
                    kind,
                    resource_id,
                    result.status,
                    poll_count,
                )
                return result
            if allowed and result.status not in allowed | targets:
                raise UnexpectedStatusError(result.status, allowed | targets, resource_id)

        if clock() >= deadline:
            raise WaitTimeoutError(timeout_s, last_status, poll_count, resource_id)

        logger.debug(
            "Waiting | kind=%s | id=%s | status=%s | poll_count=%d",
            kind,
            resource_id,
            result.status,
            poll_count,
        )
        sleep(interval_s)
