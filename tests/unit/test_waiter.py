"""Tests for the ``wait_for_state`` convergence driver.

A fake clock advances by the slept interval so timeouts are
deterministic and no real sleeping happens.
"""

from __future__ import annotations

import pytest

from ros_state.core.exceptions import (
    ApiError,
    FailedToReachTargetStatusError,
    RemoteCallError,
    ResourceNotFoundError,
)
from ros_state.models.state import RosStack, RosTemplate
from ros_state.polling.refresh import ABSENT, RefreshResult
from ros_state.polling.waiter import UnexpectedStatusError, WaitTimeoutError, wait_for_state


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class _Script:
    """Refresh predicate returning scripted results; repeats the last one."""

    name = "RosStack"
    resource_id = "s-1"

    def __init__(self, *results: RefreshResult) -> None:
        self.results = list(results)
        self.calls = 0

    def __call__(self) -> RefreshResult:
        self.calls += 1
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


def _status(status: str) -> RefreshResult:
    return RefreshResult(RosStack(stack_id="s-1", status=status), status, None)


_GONE = RefreshResult(None, ABSENT, None)


@pytest.fixture()
def clock() -> _FakeClock:
    return _FakeClock()


class TestWaitForState:
    """Polling until a target status."""

    def test_returns_on_target(self, clock: _FakeClock) -> None:
        refresh = _Script(_status("CREATE_IN_PROGRESS"), _status("CREATE_IN_PROGRESS"), _status("CREATE_COMPLETE"))

        result = wait_for_state(
            refresh,
            ["CREATE_COMPLETE"],
            timeout_s=60,
            interval_s=5,
            sleep=clock.sleep,
            clock=clock,
        )

        assert result.status == "CREATE_COMPLETE"
        assert refresh.calls == 3
        assert clock.sleeps == [5, 5]

    def test_immediate_target_does_not_sleep(self, clock: _FakeClock) -> None:
        result = wait_for_state(
            _Script(_status("ACTIVE")), ["ACTIVE"], timeout_s=60, sleep=clock.sleep, clock=clock
        )
        assert result.found
        assert clock.sleeps == []

    def test_deletion_target(self, clock: _FakeClock) -> None:
        refresh = _Script(_status("DELETE_IN_PROGRESS"), _GONE)

        result = wait_for_state(
            refresh,
            [ABSENT],
            pending=["DELETE_IN_PROGRESS"],
            timeout_s=60,
            sleep=clock.sleep,
            clock=clock,
        )

        assert result == _GONE

    def test_existing_resource_without_status_is_not_absent(self, clock: _FakeClock) -> None:
        template = RosTemplate(template_id="t-1", template_body="{}")
        refresh = _Script(RefreshResult(template, "", None))

        with pytest.raises(WaitTimeoutError):
            wait_for_state(
                refresh,
                [ABSENT],
                pending=["DELETE_IN_PROGRESS"],
                timeout_s=10,
                interval_s=5,
                sleep=clock.sleep,
                clock=clock,
            )

        assert refresh.calls == 3

    def test_statusless_resource_then_deleted(self, clock: _FakeClock) -> None:
        template = RosTemplate(template_id="t-1")
        refresh = _Script(RefreshResult(template, "", None), _GONE)

        result = wait_for_state(refresh, [ABSENT], timeout_s=60, sleep=clock.sleep, clock=clock)

        assert not result.found
        assert refresh.calls == 2

    def test_predicate_error_raised(self, clock: _FakeClock) -> None:
        stack = RosStack(status="CREATE_FAILED")
        error = FailedToReachTargetStatusError("CREATE_FAILED", state=stack)
        refresh = _Script(_status("CREATE_IN_PROGRESS"), RefreshResult(stack, "CREATE_FAILED", error))

        with pytest.raises(FailedToReachTargetStatusError) as exc_info:
            wait_for_state(refresh, ["CREATE_COMPLETE"], timeout_s=60, sleep=clock.sleep, clock=clock)

        assert exc_info.value.state is stack

    def test_remote_error_raised(self, clock: _FakeClock) -> None:
        error = RemoteCallError("GetStack", "s-1", ApiError("InvalidParameter"))
        with pytest.raises(RemoteCallError):
            wait_for_state(
                _Script(RefreshResult(None, "", error)),
                ["CREATE_COMPLETE"],
                timeout_s=60,
                sleep=clock.sleep,
                clock=clock,
            )

    def test_unexpected_status(self, clock: _FakeClock) -> None:
        refresh = _Script(_status("CREATE_IN_PROGRESS"), _status("ROLLBACK_IN_PROGRESS"))

        with pytest.raises(UnexpectedStatusError) as exc_info:
            wait_for_state(
                refresh,
                ["CREATE_COMPLETE"],
                pending=["CREATE_IN_PROGRESS"],
                timeout_s=60,
                sleep=clock.sleep,
                clock=clock,
            )

        assert exc_info.value.status == "ROLLBACK_IN_PROGRESS"
        assert exc_info.value.resource_id == "s-1"

    def test_timeout(self, clock: _FakeClock) -> None:
        refresh = _Script(_status("CREATE_IN_PROGRESS"))

        with pytest.raises(WaitTimeoutError) as exc_info:
            wait_for_state(
                refresh,
                ["CREATE_COMPLETE"],
                timeout_s=20,
                interval_s=5,
                sleep=clock.sleep,
                clock=clock,
            )

        err = exc_info.value
        assert err.last_status == "CREATE_IN_PROGRESS"
        assert err.poll_count == 5
        assert err.retryable is True
        assert refresh.calls == 5

    def test_absent_too_long(self, clock: _FakeClock) -> None:
        refresh = _Script(_GONE)

        with pytest.raises(ResourceNotFoundError) as exc_info:
            wait_for_state(
                refresh,
                ["CREATE_COMPLETE"],
                timeout_s=600,
                interval_s=1,
                not_found_checks=3,
                sleep=clock.sleep,
                clock=clock,
            )

        assert exc_info.value.kind == "RosStack"
        assert refresh.calls == 3

    def test_absent_counter_resets(self, clock: _FakeClock) -> None:
        refresh = _Script(_GONE, _GONE, _status("CREATE_IN_PROGRESS"), _GONE, _GONE, _status("CREATE_COMPLETE"))

        result = wait_for_state(
            refresh,
            ["CREATE_COMPLETE"],
            timeout_s=600,
            interval_s=1,
            not_found_checks=3,
            sleep=clock.sleep,
            clock=clock,
        )

        assert result.status == "CREATE_COMPLETE"
        assert refresh.calls == 6

    def test_drives_service_predicate(self, make_service, clock: _FakeClock) -> None:
        service, client = make_service(
            {"StackId": "s-1", "Status": "CREATE_IN_PROGRESS"},
            {"StackId": "s-1", "Status": "CREATE_COMPLETE"},
        )
        refresh = service.ros_stack_state_refresh_func("s-1", ["CREATE_FAILED"])

        result = wait_for_state(refresh, ["CREATE_COMPLETE"], timeout_s=60, sleep=clock.sleep, clock=clock)

        assert result.status == "CREATE_COMPLETE"
        assert client.actions == ["GetStack", "GetStack"]
