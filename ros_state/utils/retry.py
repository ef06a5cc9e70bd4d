"""Error classifiers and the retrying call wrapper.

Retries are in-process and blocking: tenacity drives a sleep-then-retry
loop with incremental waits until a wall-clock deadline expires or a
non-retryable error is raised.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Collection
from typing import TYPE_CHECKING, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_delay,
    wait_incrementing,
)

from ros_state.core.constants import RETRYABLE_ERROR_CODES, THROTTLING
from ros_state.core.exceptions import ApiError

if TYPE_CHECKING:
    from ros_state.core.constants import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RETRYABLE_HTTP_STATUSES = frozenset({429, 500, 502, 503, 504})


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


def is_expected_error(error: BaseException, codes: Collection[str]) -> bool:
    """Return ``True`` if *error* is an API error whose code is in *codes*."""
    return isinstance(error, ApiError) and error.code in codes


def is_throttling(error: BaseException) -> bool:
    """Return ``True`` for throttling errors only."""
    return is_expected_error(error, (THROTTLING,))


def need_retry(error: BaseException) -> bool:
    """Return ``True`` for transient faults worth another attempt.

    Covers throttling, momentary service unavailability, internal server
    errors and network-level failures.
    """
    if not isinstance(error, ApiError):
        return False
    if error.code in RETRYABLE_ERROR_CODES or error.code.startswith(f"{THROTTLING}."):
        return True
    return error.http_status in _RETRYABLE_HTTP_STATUSES


# ---------------------------------------------------------------------------
# Retrying call
# ---------------------------------------------------------------------------


def call_with_retry(
    fn: Callable[[], T],
    policy: RetryPolicy,
    *,
    retry_if: Callable[[BaseException], bool] = need_retry,
    action: str = "",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call *fn* until it succeeds, fails permanently, or the deadline passes.

    Args:
        fn: Zero-argument callable issuing one remote call.
        policy: Deadline and incremental wait timings.
        retry_if: Classifier deciding whether an exception is retryable.
        action: Action name, for logging.
        sleep: Sleep function (injectable for tests).

    Returns:
        The first successful return value of *fn*.

    Raises:
        Exception: The last exception raised by *fn*, unchanged.  This is
            either a non-retryable error or the final retryable one once
            the deadline expired.
    """

    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Retrying RPC call | action=%s | attempt=%d | wait=%.1fs | error=%s",
            action,
            retry_state.attempt_number,
            delay,
            error,
        )

    retrying = Retrying(
        stop=stop_after_delay(policy.timeout_s),
        wait=wait_incrementing(start=policy.wait_start_s, increment=policy.wait_increment_s),
        retry=retry_if_exception(retry_if),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    )
    return retrying(fn)
