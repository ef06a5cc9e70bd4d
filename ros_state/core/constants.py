"""Shared ROS accessor constants — single source of truth.

Centralises the service coordinates, error codes, tag prefixes and
retry timings that the service layer, the RPC client and the resource
kind registry all need.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Service coordinates
# ---------------------------------------------------------------------------

ROS_API_VERSION: str = "2019-09-10"
"""RPC API version every action is issued against."""

DEFAULT_ENDPOINT: str = "ros.aliyuncs.com"
"""Public ROS endpoint host."""

RESOURCE_ID_DELIMITER: str = ":"
"""Separator joining the parts of a composite resource id."""

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

THROTTLING: str = "Throttling"

#: Codes the transient-fault classifier treats as retryable.
RETRYABLE_ERROR_CODES: frozenset[str] = frozenset(
    {
        THROTTLING,
        "Throttling.User",
        "Throttling.Api",
        "ServiceUnavailable",
        "ServiceBusy",
        "SystemBusy",
        "InternalError",
        "UnknownError",
        "LastTokenProcessing",
        "IncorrectStackStatus.Processing",
        "NetworkError",
        "RequestTimeout",
    }
)

# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

#: Tag keys with these prefixes are system-managed and never removed.
IGNORED_TAG_PREFIXES: tuple[str, ...] = ("aliyun", "acs:", "http://", "https://")

# ---------------------------------------------------------------------------
# Retry timings
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Incremental backoff bounded by a wall-clock deadline.

    Attributes:
        timeout_s: Overall deadline in seconds, measured from the first attempt.
        wait_start_s: Wait before the second attempt.
        wait_increment_s: Amount added to the wait after every further attempt.
    """

    timeout_s: float
    wait_start_s: float
    wait_increment_s: float


#: Read calls on heavyweight resources (stacks, instances, scratches).
DESCRIBE_RETRY = RetryPolicy(timeout_s=5 * 60, wait_start_s=3, wait_increment_s=3)

#: Each page of a tag listing (throttling only).
LIST_TAGS_RETRY = RetryPolicy(timeout_s=5 * 60, wait_start_s=3, wait_increment_s=5)

#: Tag and untag mutations.
MUTATE_TAGS_RETRY = RetryPolicy(timeout_s=10 * 60, wait_start_s=2, wait_increment_s=1)
