"""Unified ROS accessor exception taxonomy.

Every error raised by the accessor layer inherits from ``RosError`` and
carries structured context fields that let the surrounding convergence
loop make consistent retry and abort decisions.

Taxonomy categories
-------------------
- ``ValidationError``   — malformed local input (bad ids), never retryable.
- ``TransientError``    — throttling or service hiccups, retryable.
- ``PermanentError``    — a resource reached a declared fail state.
- ``ContractError``     — response shape drift, never retryable.
- ``ResourceNotFoundError`` — the remote object is absent.  Expected and
  non-fatal for deletion flows.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging and state bookkeeping.
"""

from __future__ import annotations

from typing import Any


class RosError(Exception):
    """Base exception for all accessor-layer errors.

    Attributes:
        message: Human-readable error description.
        stage: Operation where the error occurred
            (e.g. ``"describe"``, ``"list_tags"``).
        code: Machine-readable error code (e.g. ``"StackNotFound"``).
        retryable: Whether the caller may retry the operation.
        resource_id: Remote resource handle the error relates to.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        resource_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.resource_id = resource_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ResourceNotFoundError):
            return "not_found"
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, TransientError):
            return "transient"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "resource_id": self.resource_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(RosError):
    """Local input validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)


class TransientError(RosError):
    """Temporary failure that may succeed on retry."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)


class PermanentError(RosError):
    """Unrecoverable domain failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)


class ContractError(RosError):
    """Response shape drift between the API and the typed models. Never retryable."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)


# ---------------------------------------------------------------------------
# Concrete errors
# ---------------------------------------------------------------------------


class ResourceNotFoundError(RosError):
    """The remote resource does not exist (or no longer exists).

    Attributes:
        kind: Resource kind name (e.g. ``"RosStack"``).
        request_id: Server request id of the failed call, when known.
    """

    default_stage = "describe"
    default_code = "ResourceNotFound"

    def __init__(self, kind: str, resource_id: str, *, code: str = "", request_id: str = "") -> None:
        self.kind = kind
        self.request_id = request_id
        super().__init__(
            f"the resource {kind} {resource_id} is not found",
            code=code,
            resource_id=resource_id,
        )


class MalformedResourceIdError(ValidationError):
    """A composite resource id does not split into the expected number of parts.

    Attributes:
        expected: Number of parts the id must have.
        actual: Number of parts found.
    """

    default_stage = "parse_resource_id"
    default_code = "MalformedResourceId"

    def __init__(self, resource_id: str, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid resource id {resource_id!r}: expected {expected} parts, got {actual}",
            resource_id=resource_id,
        )


class FailedToReachTargetStatusError(PermanentError):
    """A polled resource reported one of the caller's fail states.

    The last observed state travels with the error so the caller can
    inspect it before giving up.

    Attributes:
        status: The fail status that was observed.
        state: The described state snapshot that reported it.
    """

    default_stage = "refresh"
    default_code = "FailedToReachTargetStatus"

    def __init__(self, status: str, *, state: Any = None, resource_id: str = "") -> None:
        self.status = status
        self.state = state
        super().__init__(
            f"Failed to reach target status. Current status is {status}.",
            resource_id=resource_id,
        )


class ResponseShapeError(ContractError):
    """The API response has no usable content at the expected path.

    Attributes:
        path: JSON path that was queried.
        response: The raw response mapping.
    """

    default_stage = "extract"
    default_code = "FailedGetAttribute"

    def __init__(
        self,
        resource_id: str,
        path: str,
        response: object,
        reason: str = "",
    ) -> None:
        self.path = path
        self.response = response
        detail = f": {reason}" if reason else ""
        super().__init__(
            f"Getting resource {resource_id} attribute by path {path} failed{detail}. "
            f"Body: {response!r}",
            resource_id=resource_id,
        )


class ApiError(RosError):
    """Raw failure returned by the RPC endpoint (or the network under it).

    Attributes:
        http_status: HTTP status code (``0`` for network-level failures).
        request_id: Server request id, when the error body carried one.
    """

    default_stage = "rpc"

    def __init__(
        self,
        code: str,
        message: str = "",
        *,
        http_status: int = 0,
        request_id: str = "",
    ) -> None:
        self.http_status = http_status
        self.request_id = request_id
        super().__init__(message or code, code=code)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.http_status:
            parts.append(f"status={self.http_status}")
        if self.request_id:
            parts.append(f"request_id={self.request_id}")
        return " | ".join(parts)


class RemoteCallError(RosError):
    """A remote call failed for a reason other than "not found".

    Wraps the underlying error with the call metadata needed to diagnose
    it: the action, the request echo and the resource handle.

    Attributes:
        action: RPC action name (e.g. ``"GetStack"``).
        request: The request parameters that were sent.
        request_id: Server request id, when known.
    """

    default_stage = "rpc"
    default_code = "RemoteCallFailed"

    def __init__(
        self,
        action: str,
        resource_id: str,
        cause: BaseException,
        *,
        request: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        self.action = action
        self.request = dict(request or {})
        self.request_id = getattr(cause, "request_id", "")
        code = getattr(cause, "code", "") or self.default_code
        super().__init__(
            f"[ERROR] {resource_id} {action} Failed!!! {cause}",
            code=code,
            retryable=retryable,
            resource_id=resource_id,
        )


class TransientFaultError(RemoteCallError, TransientError):
    """A remote call failed with a retryable-class fault.

    Raised when retries ran out before the deadline, or when the call
    does not retry that fault (e.g. a 503 on a throttling-only listing).
    The caller may try the operation again later.
    """

    def __init__(
        self,
        action: str,
        resource_id: str,
        cause: BaseException,
        *,
        request: dict[str, Any] | None = None,
    ) -> None:
        RemoteCallError.__init__(
            self, action, resource_id, cause, request=request, retryable=True
        )
