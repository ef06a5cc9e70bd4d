"""Typed described-state models, one per ROS resource kind.

Each model is a frozen snapshot of a ``Get*`` response (or the
sub-object at the kind's extraction path).  Known fields are typed and
use snake_case names aliased to the API's PascalCase keys; fields the
model does not declare are kept as extras so nothing in the payload is
lost.

Design notes:
- ``status`` is always present and always a string, coerced with
  ``coerce_status``.  Kinds without a lifecycle status (templates,
  stack policies) report ``""``.
- ``to_dict()`` returns the API-shaped mapping with only the keys the
  server actually sent.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_pascal

from ros_state.utils.helpers import coerce_status


class DescribedState(BaseModel):
    """Base snapshot of a described ROS resource.

    Attributes:
        status: Lifecycle status (``"CREATE_COMPLETE"``, ``"ACTIVE"``, ...).
    """

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    status: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: object) -> str:
        return coerce_status(value)

    def to_dict(self) -> dict[str, Any]:
        """Return the snapshot keyed by API field names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class RosStack(DescribedState):
    """A deployed stack (``GetStack``)."""

    stack_id: str | None = None
    stack_name: str | None = None
    status_reason: str | None = None
    description: str | None = None
    disable_rollback: bool | None = None
    timeout_in_minutes: int | None = None
    parent_stack_id: str | None = None
    resource_group_id: str | None = None
    ram_role_name: str | None = None
    create_time: str | None = None
    update_time: str | None = None
    parameters: list[dict[str, Any]] | None = None
    outputs: list[dict[str, Any]] | None = None
    tags: list[dict[str, Any]] | None = None


class RosChangeSet(DescribedState):
    """A change set previewed against a stack (``GetChangeSet``)."""

    change_set_id: str | None = None
    change_set_name: str | None = None
    change_set_type: str | None = None
    execution_status: str | None = None
    stack_id: str | None = None
    stack_name: str | None = None
    description: str | None = None
    status_reason: str | None = None
    disable_rollback: bool | None = None
    timeout_in_minutes: int | None = None
    template_body: str | None = None
    create_time: str | None = None
    parameters: list[dict[str, Any]] | None = None
    changes: list[dict[str, Any]] | None = None


class RosStackGroup(DescribedState):
    """A stack group (``GetStackGroup``, ``$.StackGroup``)."""

    stack_group_id: str | None = None
    stack_group_name: str | None = None
    description: str | None = None
    template_body: str | None = None
    administration_role_name: str | None = None
    execution_role_name: str | None = None
    permission_model: str | None = None
    resource_group_id: str | None = None
    parameters: list[dict[str, Any]] | None = None


class RosStackInstance(DescribedState):
    """One account/region deployment of a stack group (``$.StackInstance``)."""

    stack_group_id: str | None = None
    stack_group_name: str | None = None
    account_id: str | None = None
    region_id: str | None = None
    stack_id: str | None = None
    status_reason: str | None = None
    drift_detection_time: str | None = None
    stack_drift_status: str | None = None
    rd_folder_id: str | None = None
    parameter_overrides: list[dict[str, Any]] | None = None


class RosTemplate(DescribedState):
    """A stored template (``GetTemplate``)."""

    template_id: str | None = None
    template_name: str | None = None
    template_body: str | None = None
    template_version: str | None = None
    description: str | None = None
    share_type: str | None = None
    owner_id: str | None = None
    resource_group_id: str | None = None
    create_time: str | None = None
    update_time: str | None = None


class RosTemplateScratch(DescribedState):
    """A template scratch (``GetTemplateScratch``, ``$.TemplateScratch``)."""

    template_scratch_id: str | None = None
    template_scratch_type: str | None = None
    description: str | None = None
    status_reason: str | None = None
    logical_id_strategy: str | None = None
    execution_mode: str | None = None
    create_time: str | None = None
    failed_code: str | None = None
    source_resources: list[dict[str, Any]] | None = None
    source_tag: dict[str, Any] | None = None
    source_resource_group: dict[str, Any] | None = None
    preference_parameters: list[dict[str, Any]] | None = None
    stacks: list[dict[str, Any]] | None = None


class RosStackPolicy(DescribedState):
    """A stack's update policy (``GetStackPolicy``)."""

    stack_policy_body: dict[str, Any] | None = None


class TagResource(BaseModel):
    """One tag attached to one resource, as returned by ``ListTagResources``."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    resource_id: str = ""
    resource_type: str = ""
    tag_key: str = ""
    tag_value: str = ""
