"""Shared pytest fixtures for the ROS accessor test suite."""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from typing import Any

import pytest

from ros_state.core.config import RosConfig
from ros_state.services.ros import RosService

REGION_ID = "cn-hangzhou"

# ---------------------------------------------------------------------------
# Fake RPC client
# ---------------------------------------------------------------------------


class FakeRpcClient:
    """Scripted ``RpcCaller``: each call consumes the next outcome.

    An outcome is either a response mapping (returned as a deep copy) or
    an exception instance (raised).
    """

    def __init__(self, *script: Mapping[str, Any] | BaseException) -> None:
        self.script = list(script)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def call(self, action: str, request: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append((action, dict(request)))
        if not self.script:
            msg = f"Unexpected RPC call: {action}"
            raise AssertionError(msg)
        outcome = self.script.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return copy.deepcopy(dict(outcome))

    @property
    def actions(self) -> list[str]:
        return [action for action, _ in self.calls]

    @property
    def requests(self) -> list[dict[str, Any]]:
        return [request for _, request in self.calls]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def ros_config() -> RosConfig:
    """Minimal valid configuration."""
    return RosConfig(region_id=REGION_ID, access_key_id="test-id", access_key_secret="test-secret")


@pytest.fixture()
def sleeps() -> list[float]:
    """Records every backoff sleep instead of sleeping."""
    return []


@pytest.fixture()
def make_service(
    ros_config: RosConfig, sleeps: list[float]
) -> Callable[..., tuple[RosService, FakeRpcClient]]:
    """Factory: ``make_service(*script, config=None)`` → ``(service, fake_client)``."""

    def _make(
        *script: Mapping[str, Any] | BaseException,
        config: RosConfig | None = None,
    ) -> tuple[RosService, FakeRpcClient]:
        client = FakeRpcClient(*script)
        return RosService(client, config or ros_config, sleep=sleeps.append), client

    return _make
