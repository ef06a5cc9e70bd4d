"""ROS accessor service.

The service is the only component that talks to the RPC client: the
models, polling and utility packages are pure.
"""

from ros_state.services.ros import RosService

__all__ = ["RosService"]
