"""Tests for the described-state models.

Covers:
- PascalCase API keys populate snake_case fields
- Status coercion on every kind
- Unknown response fields are preserved
- Snapshots are immutable
"""

from __future__ import annotations

import pydantic
import pytest

from ros_state.models.state import (
    RosChangeSet,
    RosStack,
    RosStackGroup,
    RosStackInstance,
    RosStackPolicy,
    RosTemplate,
    RosTemplateScratch,
    TagResource,
)


class TestRosStack:
    """``GetStack`` snapshot."""

    def test_from_api_keys(self) -> None:
        stack = RosStack.model_validate(
            {
                "StackId": "s-1",
                "StackName": "demo",
                "Status": "CREATE_COMPLETE",
                "DisableRollback": False,
                "TimeoutInMinutes": 60,
                "Outputs": [{"OutputKey": "Url", "OutputValue": "http://x"}],
            }
        )
        assert stack.stack_id == "s-1"
        assert stack.stack_name == "demo"
        assert stack.status == "CREATE_COMPLETE"
        assert stack.disable_rollback is False
        assert stack.timeout_in_minutes == 60
        assert stack.outputs == [{"OutputKey": "Url", "OutputValue": "http://x"}]

    def test_populate_by_name(self) -> None:
        assert RosStack(stack_id="s-1", status="X").stack_id == "s-1"

    def test_extra_fields_preserved(self) -> None:
        stack = RosStack.model_validate({"StackId": "s-1", "StackType": "ROS"})
        assert stack.model_extra == {"StackType": "ROS"}

    def test_to_dict_uses_api_keys(self) -> None:
        stack = RosStack.model_validate({"StackId": "s-1", "Status": "CREATE_COMPLETE"})
        assert stack.to_dict() == {"StackId": "s-1", "Status": "CREATE_COMPLETE"}

    def test_frozen(self) -> None:
        stack = RosStack.model_validate({"StackId": "s-1"})
        with pytest.raises(pydantic.ValidationError):
            stack.status = "DELETE_COMPLETE"  # type: ignore[misc]


class TestStatusCoercion:
    """``status`` is always a string."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(None, ""), (True, "true"), (7, "7"), (1.0, "1"), ("ACTIVE", "ACTIVE")],
    )
    def test_coerced(self, raw: object, expected: str) -> None:
        assert RosStackGroup.model_validate({"Status": raw}).status == expected

    def test_missing_status_is_empty(self) -> None:
        assert RosTemplate.model_validate({"TemplateId": "t-1"}).status == ""


class TestOtherKinds:
    """Spot checks of kind-specific fields."""

    def test_change_set(self) -> None:
        cs = RosChangeSet.model_validate(
            {"ChangeSetId": "cs-1", "Status": "CREATE_COMPLETE", "ExecutionStatus": "AVAILABLE"}
        )
        assert cs.change_set_id == "cs-1"
        assert cs.execution_status == "AVAILABLE"

    def test_stack_instance(self) -> None:
        inst = RosStackInstance.model_validate(
            {
                "StackGroupName": "g",
                "AccountId": "123",
                "RegionId": "cn-beijing",
                "Status": "CURRENT",
            }
        )
        assert inst.account_id == "123"
        assert inst.region_id == "cn-beijing"
        assert inst.status == "CURRENT"

    def test_template_scratch(self) -> None:
        scratch = RosTemplateScratch.model_validate(
            {"TemplateScratchId": "ts-1", "Status": "GENERATE_COMPLETE"}
        )
        assert scratch.template_scratch_id == "ts-1"

    def test_stack_policy(self) -> None:
        policy = RosStackPolicy.model_validate(
            {"StackPolicyBody": {"Statement": []}, "RequestId": "r"}
        )
        assert policy.stack_policy_body == {"Statement": []}
        assert policy.status == ""

    def test_tag_resource(self) -> None:
        tag = TagResource.model_validate(
            {
                "ResourceId": "s-1",
                "ResourceType": "stack",
                "TagKey": "env",
                "TagValue": "prod",
            }
        )
        assert (tag.resource_id, tag.resource_type, tag.tag_key, tag.tag_value) == (
            "s-1",
            "stack",
            "env",
            "prod",
        )

    def test_wrong_field_type_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            RosStack.model_validate({"Parameters": "not-a-list"})
