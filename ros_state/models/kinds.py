"""Resource kind descriptors — the closed set of describable ROS objects.

Every ``Get*`` action the accessor issues differs only in a handful of
parameters: the action name, the request fields the resource handle maps
onto, which error codes mean "not found", where in the response the
object lives, and whether the call retries on transient faults.  Those
parameters live here so the service layer has one generic describe
operation instead of one hand-written copy per kind.

Usage::

    from ros_state.models.kinds import STACK, get_kind

    request = STACK.build_request("cn-hangzhou", stack_id)
    kind = get_kind("RosStackInstance")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ros_state.core.constants import DESCRIBE_RETRY, RetryPolicy
from ros_state.core.exceptions import ValidationError
from ros_state.models.state import (
    DescribedState,
    RosChangeSet,
    RosStack,
    RosStackGroup,
    RosStackInstance,
    RosStackPolicy,
    RosTemplate,
    RosTemplateScratch,
)
from ros_state.utils.helpers import build_client_token
from ros_state.utils.resource_id import parse_resource_id

logger = logging.getLogger(__name__)


class UnknownResourceKindError(ValidationError):
    """Raised when a resource kind name is not registered."""

    default_stage = "resource_kind"
    default_code = "UNKNOWN_RESOURCE_KIND"


@dataclass(frozen=True, slots=True)
class ResourceKind:
    """Describe-operation parameters for one ROS resource kind.

    Attributes:
        name: Kind name used in messages and the registry (``"RosStack"``).
        action: RPC action returning the resource (``"GetStack"``).
        id_fields: Request fields the resource handle maps onto, in
            order.  More than one field means the handle is a composite
            id that must split into exactly that many parts.
        not_found_codes: Error codes meaning the resource is absent.
        model: Typed model the extracted object is validated into.
        path: JSONPath of the object inside the response.
        retry: Retry policy for transient faults (``None`` = single attempt).
        client_token: Whether each request carries a fresh ``ClientToken``.
        static_params: Extra request parameters sent on every call.
    """

    name: str
    action: str
    id_fields: tuple[str, ...]
    not_found_codes: frozenset[str]
    model: type[DescribedState]
    path: str = "$"
    retry: RetryPolicy | None = None
    client_token: bool = False
    static_params: tuple[tuple[str, Any], ...] = ()

    def build_request(self, region_id: str, resource_id: str) -> dict[str, Any]:
        """Return the request parameters addressing *resource_id*.

        Raises:
            MalformedResourceIdError: If a composite id has the wrong arity.
        """
        if len(self.id_fields) > 1:
            parts = parse_resource_id(resource_id, len(self.id_fields))
        else:
            parts = [resource_id]

        request: dict[str, Any] = {"RegionId": region_id}
        request.update(zip(self.id_fields, parts, strict=True))
        request.update(self.static_params)
        if self.client_token:
            request["ClientToken"] = build_client_token(self.action)
        return request


# ---------------------------------------------------------------------------
# Built-in kinds
# ---------------------------------------------------------------------------

CHANGE_SET = ResourceKind(
    name="RosChangeSet",
    action="GetChangeSet",
    id_fields=("ChangeSetId",),
    not_found_codes=frozenset({"ChangeSetNotFound"}),
    model=RosChangeSet,
    static_params=(("ShowTemplate", True),),
)

STACK = ResourceKind(
    name="RosStack",
    action="GetStack",
    id_fields=("StackId",),
    not_found_codes=frozenset({"StackNotFound"}),
    model=RosStack,
    retry=DESCRIBE_RETRY,
    client_token=True,
)

STACK_POLICY = ResourceKind(
    name="RosStackPolicy",
    action="GetStackPolicy",
    id_fields=("StackId",),
    not_found_codes=frozenset({"StackNotFound"}),
    model=RosStackPolicy,
)

STACK_GROUP = ResourceKind(
    name="RosStackGroup",
    action="GetStackGroup",
    id_fields=("StackGroupName",),
    not_found_codes=frozenset({"StackGroupNotFound"}),
    model=RosStackGroup,
    path="$.StackGroup",
)

# GetTemplate also reports change-set and stack ids that no longer resolve.
TEMPLATE = ResourceKind(
    name="RosTemplate",
    action="GetTemplate",
    id_fields=("TemplateId",),
    not_found_codes=frozenset({"ChangeSetNotFound", "StackNotFound", "TemplateNotFound"}),
    model=RosTemplate,
)

STACK_INSTANCE = ResourceKind(
    name="RosStackInstance",
    action="GetStackInstance",
    id_fields=("StackGroupName", "StackInstanceAccountId", "StackInstanceRegionId"),
    not_found_codes=frozenset({"StackInstanceNotFound", "StackGroupNotFound"}),
    model=RosStackInstance,
    path="$.StackInstance",
    retry=DESCRIBE_RETRY,
)

TEMPLATE_SCRATCH = ResourceKind(
    name="RosTemplateScratch",
    action="GetTemplateScratch",
    id_fields=("TemplateScratchId",),
    not_found_codes=frozenset({"TemplateScratchNotFound"}),
    model=RosTemplateScratch,
    path="$.TemplateScratch",
    retry=DESCRIBE_RETRY,
)

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_KIND_REGISTRY: dict[str, ResourceKind] = {
    kind.name: kind
    for kind in (
        CHANGE_SET,
        STACK,
        STACK_POLICY,
        STACK_GROUP,
        TEMPLATE,
        STACK_INSTANCE,
        TEMPLATE_SCRATCH,
    )
}


def register_kind(kind: ResourceKind) -> None:
    """Register an additional resource kind.

    Registered kinds cannot be replaced, so the built-in descriptors stay
    fixed for the life of the process.

    Raises:
        ValueError: If the kind name is empty or already registered.
    """
    if not kind.name:
        msg = "Resource kind name must be non-empty"
        raise ValueError(msg)
    if kind.name in _KIND_REGISTRY:
        msg = f"Resource kind already registered: {kind.name!r}"
        raise ValueError(msg)
    _KIND_REGISTRY[kind.name] = kind
    logger.debug("Registered resource kind: %s", kind.name)


def get_kind(name: str) -> ResourceKind:
    """Return the registered kind called *name*.

    Raises:
        UnknownResourceKindError: If no such kind is registered.
    """
    kind = _KIND_REGISTRY.get(name)
    if kind is None:
        available = ", ".join(sorted(_KIND_REGISTRY))
        msg = f"Unknown resource kind: {name!r}. Available: {available}"
        raise UnknownResourceKindError(msg)
    return kind


def list_kinds() -> list[str]:
    """Return the names of all registered resource kinds."""
    return sorted(_KIND_REGISTRY)
