"""Composite resource id helpers.

Some ROS resources are addressed by more than one request field (a stack
instance needs its group, account and region).  The provider stores them
as a single handle joined with ``:``.
"""

from __future__ import annotations

from ros_state.core.constants import RESOURCE_ID_DELIMITER
from ros_state.core.exceptions import MalformedResourceIdError


def parse_resource_id(resource_id: str, length: int) -> list[str]:
    """Split *resource_id* into exactly *length* positional parts.

    Raises:
        MalformedResourceIdError: If the id has a different number of parts.
    """
    parts = resource_id.split(RESOURCE_ID_DELIMITER)
    if len(parts) != length:
        raise MalformedResourceIdError(resource_id, length, len(parts))
    return parts


def build_resource_id(*parts: str) -> str:
    """Join *parts* into a composite resource id."""
    return RESOURCE_ID_DELIMITER.join(parts)
