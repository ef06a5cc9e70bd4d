"""ROS accessor service — describe, poll and tag ROS resources.

``RosService`` is the single entry point the provider's resources use to
read remote state.  Every describe goes through one generic operation
parameterised by a ``ResourceKind``; every polling predicate is a
``StateRefreshFunc`` bound to that describe.

Lifecycle of one describe:
    1. Build the request from the kind (split composite ids, add
       ``ClientToken`` / static parameters).
    2. Issue the RPC, retrying transient faults if the kind has a policy.
    3. Map "not found" error codes to ``ResourceNotFoundError``; wrap
       anything else in ``RemoteCallError`` / ``TransientFaultError``.
    4. Extract the object at the kind's path and validate it into the
       kind's model.

The service holds no mutable state; one instance can serve any number
of independent poll loops.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

import pydantic

from ros_state.client.rpc import RpcClient
from ros_state.core.config import RosConfig
from ros_state.core.constants import LIST_TAGS_RETRY, MUTATE_TAGS_RETRY
from ros_state.core.exceptions import (
    ApiError,
    RemoteCallError,
    ResourceNotFoundError,
    ResponseShapeError,
    TransientFaultError,
)
from ros_state.models.kinds import (
    CHANGE_SET,
    STACK,
    STACK_GROUP,
    STACK_INSTANCE,
    STACK_POLICY,
    TEMPLATE,
    TEMPLATE_SCRATCH,
    ResourceKind,
    get_kind,
)
from ros_state.models.state import TagResource
from ros_state.polling.refresh import StateRefreshFunc
from ros_state.utils.helpers import extract_mapping, extract_path
from ros_state.utils.retry import call_with_retry, is_expected_error, is_throttling, need_retry
from ros_state.utils.tags import TagDiff, diff_tags, is_ignored_tag
from ros_state.utils.wire import encode_indexed, encode_tags

if TYPE_CHECKING:
    from ros_state.client.rpc import RpcCaller
    from ros_state.core.constants import RetryPolicy
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

logger = logging.getLogger(__name__)

_LIST_TAGS_ACTION = "ListTagResources"
_UNTAG_ACTION = "UntagResources"
_TAG_ACTION = "TagResources"


class RosService:
    """Accessor for ROS resource state and tags.

    Example usage::

        service = RosService.from_env()
        stack = service.describe_ros_stack(stack_id)
        refresh = service.ros_stack_state_refresh_func(stack_id, ["CREATE_FAILED"])
        state, status, error = refresh()
    """

    def __init__(
        self,
        client: RpcCaller,
        config: RosConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._config = config
        self._sleep = sleep

    @classmethod
    def from_env(cls) -> RosService:
        """Build a service with an ``RpcClient`` configured from the environment."""
        config = RosConfig.from_env()
        return cls(RpcClient(config), config)

    @property
    def config(self) -> RosConfig:
        """Return the service configuration (read-only)."""
        return self._config

    def close(self) -> None:
        """Release the RPC client's connections, if it holds any."""
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> RosService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Generic describe / refresh
    # ------------------------------------------------------------------

    def describe(self, kind: ResourceKind | str, resource_id: str) -> DescribedState:
        """Fetch the current state of one resource.

        Args:
            kind: A ``ResourceKind`` or its registered name.
            resource_id: Resource handle (composite for stack instances).

        Returns:
            The kind's typed snapshot.

        Raises:
            MalformedResourceIdError: If a composite id has the wrong arity.
            ResourceNotFoundError: If the error code is in the kind's
                not-found whitelist.
            TransientFaultError: If the last failure was a transient fault.
            RemoteCallError: On any other remote failure.
            ResponseShapeError: If the response has no valid object at
                the kind's path.
        """
        if isinstance(kind, str):
            kind = get_kind(kind)

        request = kind.build_request(self._config.region_id, resource_id)
        try:
            response = self._call(kind.action, request, kind.retry)
        except ApiError as exc:
            if is_expected_error(exc, kind.not_found_codes):
                logger.debug(
                    "Resource not found | kind=%s | id=%s | code=%s",
                    kind.name,
                    resource_id,
                    exc.code,
                )
                raise ResourceNotFoundError(
                    kind.name,
                    resource_id,
                    code=exc.code,
                    request_id=exc.request_id,
                ) from exc
            raise _wrap_remote_error(kind.action, resource_id, exc, request) from exc

        obj = extract_mapping(response, kind.path, resource_id=resource_id)
        try:
            return kind.model.model_validate(obj)
        except pydantic.ValidationError as exc:
            raise ResponseShapeError(resource_id, kind.path, response, reason=str(exc)) from exc

    def state_refresh_func(
        self,
        kind: ResourceKind | str,
        resource_id: str,
        fail_states: Iterable[str] = (),
    ) -> StateRefreshFunc:
        """Return a single-shot polling predicate for one resource."""
        if isinstance(kind, str):
            kind = get_kind(kind)

        def _describe() -> DescribedState:
            return self.describe(kind, resource_id)

        return StateRefreshFunc(
            _describe,
            fail_states,
            name=kind.name,
            resource_id=resource_id,
        )

    # ------------------------------------------------------------------
    # Per-kind describes
    # ------------------------------------------------------------------

    def describe_ros_change_set(self, change_set_id: str) -> RosChangeSet:
        """``GetChangeSet`` (template included)."""
        return self.describe(CHANGE_SET, change_set_id)  # type: ignore[return-value]

    def describe_ros_stack(self, stack_id: str) -> RosStack:
        """``GetStack`` with retry on transient faults."""
        return self.describe(STACK, stack_id)  # type: ignore[return-value]

    def get_stack_policy(self, stack_id: str) -> RosStackPolicy:
        """``GetStackPolicy``; a missing stack is reported as not found."""
        return self.describe(STACK_POLICY, stack_id)  # type: ignore[return-value]

    def describe_ros_stack_group(self, stack_group_name: str) -> RosStackGroup:
        """``GetStackGroup``."""
        return self.describe(STACK_GROUP, stack_group_name)  # type: ignore[return-value]

    def describe_ros_template(self, template_id: str) -> RosTemplate:
        """``GetTemplate``."""
        return self.describe(TEMPLATE, template_id)  # type: ignore[return-value]

    def describe_ros_stack_instance(self, stack_instance_id: str) -> RosStackInstance:
        """``GetStackInstance`` for ``<group>:<account>:<region>``."""
        return self.describe(STACK_INSTANCE, stack_instance_id)  # type: ignore[return-value]

    def describe_ros_template_scratch(self, template_scratch_id: str) -> RosTemplateScratch:
        """``GetTemplateScratch``."""
        return self.describe(TEMPLATE_SCRATCH, template_scratch_id)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Per-kind refresh predicates
    # ------------------------------------------------------------------

    def ros_change_set_state_refresh_func(
        self, change_set_id: str, fail_states: Iterable[str] = ()
    ) -> StateRefreshFunc:
        return self.state_refresh_func(CHANGE_SET, change_set_id, fail_states)

    def ros_stack_state_refresh_func(
        self, stack_id: str, fail_states: Iterable[str] = ()
    ) -> StateRefreshFunc:
        return self.state_refresh_func(STACK, stack_id, fail_states)

    def ros_stack_group_state_refresh_func(
        self, stack_group_name: str, fail_states: Iterable[str] = ()
    ) -> StateRefreshFunc:
        return self.state_refresh_func(STACK_GROUP, stack_group_name, fail_states)

    def ros_stack_instance_state_refresh_func(
        self, stack_instance_id: str, fail_states: Iterable[str] = ()
    ) -> StateRefreshFunc:
        return self.state_refresh_func(STACK_INSTANCE, stack_instance_id, fail_states)

    def ros_template_scratch_state_refresh_func(
        self, template_scratch_id: str, fail_states: Iterable[str] = ()
    ) -> StateRefreshFunc:
        return self.state_refresh_func(TEMPLATE_SCRATCH, template_scratch_id, fail_states)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def list_tag_resources(self, resource_id: str, resource_type: str) -> list[TagResource]:
        """List every tag attached to a resource, following ``NextToken``.

        Each page retries on throttling only.  Any other failure on any
        page aborts the whole listing.

        Raises:
            RemoteCallError: If a page fails.
            ResponseShapeError: If a page has no ``TagResources`` list.
        """
        request: dict[str, Any] = {
            "RegionId": self._config.region_id,
            "ResourceType": resource_type,
            **encode_indexed("ResourceId", [resource_id]),
        }
        tags: list[TagResource] = []
        page_count = 0

        while True:
            page_count += 1
            try:
                response = self._call(
                    _LIST_TAGS_ACTION,
                    dict(request),
                    LIST_TAGS_RETRY,
                    retry_if=is_throttling,
                )
            except ApiError as exc:
                raise _wrap_remote_error(_LIST_TAGS_ACTION, resource_id, exc, request) from exc

            page = extract_path(response, "$.TagResources", resource_id=resource_id)
            if page is not None:
                if not isinstance(page, list):
                    raise ResponseShapeError(
                        resource_id,
                        "$.TagResources",
                        response,
                        reason=f"expected a list, got {type(page).__name__}",
                    )
                try:
                    tags.extend(TagResource.model_validate(item) for item in page)
                except pydantic.ValidationError as exc:
                    raise ResponseShapeError(
                        resource_id, "$.TagResources", response, reason=str(exc)
                    ) from exc

            next_token = response.get("NextToken")
            if not next_token:
                break
            request["NextToken"] = next_token

        logger.debug(
            "Listed tags | id=%s | type=%s | pages=%d | tags=%d",
            resource_id,
            resource_type,
            page_count,
            len(tags),
        )
        return tags

    def set_resource_tags(
        self,
        resource_id: str,
        resource_type: str,
        previous: Mapping[str, str] | None,
        desired: Mapping[str, str] | None,
    ) -> TagDiff:
        """Bring a resource's tags from *previous* to *desired*.

        Returns:
            The diff that was applied (reserved keys excluded from removal).

        Raises:
            RemoteCallError: If ``UntagResources`` or ``TagResources``
                fails.  When untagging succeeded and tagging failed the
                remote tags are left partially updated.
        """
        return self.apply_tag_diff(resource_id, resource_type, diff_tags(previous, desired))

    def apply_tag_diff(self, resource_id: str, resource_type: str, diff: TagDiff) -> TagDiff:
        """Apply a precomputed tag diff: at most one untag and one tag call."""
        prefixes = self._config.ignored_tag_prefixes
        removed = [key for key in diff.removed if not is_ignored_tag(key, prefixes)]
        applied = TagDiff(added=dict(diff.added), removed=removed)
        if applied.is_empty:
            return applied

        base: dict[str, Any] = {
            "RegionId": self._config.region_id,
            "ResourceType": resource_type,
            **encode_indexed("ResourceId", [resource_id]),
        }

        if applied.removed:
            self._mutate_tags(
                _UNTAG_ACTION,
                resource_id,
                {**base, **encode_indexed("TagKey", applied.removed)},
            )
        if applied.added:
            self._mutate_tags(_TAG_ACTION, resource_id, {**base, **encode_tags(applied.added)})

        logger.info(
            "Tags updated | id=%s | type=%s | added=%d | removed=%d",
            resource_id,
            resource_type,
            len(applied.added),
            len(applied.removed),
        )
        return applied

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _mutate_tags(self, action: str, resource_id: str, request: dict[str, Any]) -> None:
        try:
            self._call(action, request, MUTATE_TAGS_RETRY)
        except ApiError as exc:
            raise _wrap_remote_error(action, resource_id, exc, request) from exc

    def _call(
        self,
        action: str,
        request: dict[str, Any],
        policy: RetryPolicy | None,
        *,
        retry_if: Callable[[BaseException], bool] = need_retry,
    ) -> dict[str, Any]:
        """Issue one RPC (retried under *policy* when given) and log it."""

        def _once() -> dict[str, Any]:
            try:
                response = self._client.call(action, request)
            except ApiError as exc:
                logger.debug(
                    "ROS call failed | action=%s | request=%s | error=%s",
                    action,
                    request,
                    exc,
                )
                raise
            logger.debug(
                "ROS call | action=%s | request=%s | response=%s",
                action,
                request,
                response,
            )
            return response

        if policy is None:
            return _once()
        return call_with_retry(_once, policy, retry_if=retry_if, action=action, sleep=self._sleep)


def _wrap_remote_error(
    action: str,
    resource_id: str,
    error: ApiError,
    request: Mapping[str, Any],
) -> RemoteCallError:
    """Wrap *error* with call context, keeping the transient classification."""
    if need_retry(error):
        return TransientFaultError(action, resource_id, error, request=dict(request))
    return RemoteCallError(action, resource_id, error, request=dict(request))
