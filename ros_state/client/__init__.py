"""RPC transport for the ROS API."""

from ros_state.client.rpc import RpcCaller, RpcClient, percent_encode, sign_parameters

__all__ = [
    "RpcCaller",
    "RpcClient",
    "percent_encode",
    "sign_parameters",
]
