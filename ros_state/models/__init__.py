"""Data models and resource kind descriptors.

- state: Typed described-state snapshots per ROS resource kind
- kinds: The closed set of describable kinds and their parameters
"""

from ros_state.models.kinds import (
    CHANGE_SET,
    STACK,
    STACK_GROUP,
    STACK_INSTANCE,
    STACK_POLICY,
    TEMPLATE,
    TEMPLATE_SCRATCH,
    ResourceKind,
    UnknownResourceKindError,
    get_kind,
    list_kinds,
    register_kind,
)
from ros_state.models.state import (
    DescribedState,
    RosChangeSet,
    RosStack,
    RosStackGroup,
    RosStackInstance,
    RosStackPolicy,
    RosTemplate,
    RosTemplateScratch,
    TagResource,
)

__all__ = [
    "CHANGE_SET",
    "STACK",
    "STACK_GROUP",
    "STACK_INSTANCE",
    "STACK_POLICY",
    "TEMPLATE",
    "TEMPLATE_SCRATCH",
    "DescribedState",
    "ResourceKind",
    "RosChangeSet",
    "RosStack",
    "RosStackGroup",
    "RosStackInstance",
    "RosStackPolicy",
    "RosTemplate",
    "RosTemplateScratch",
    "TagResource",
    "UnknownResourceKindError",
    "get_kind",
    "list_kinds",
    "register_kind",
]
