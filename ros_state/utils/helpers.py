"""Shared helper functions used across the accessor modules.

Centralises response extraction, status coercion and client-token
generation so the service layer and the models agree on them.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Mapping
from typing import Any

from jsonpath_ng import parse as parse_jsonpath

from ros_state.core.exceptions import ResponseShapeError


def extract_path(response: Mapping[str, Any], path: str, *, resource_id: str = "") -> Any:
    """Return the value found at *path* (``$`` or ``$.Field``) in *response*.

    Args:
        response: Parsed JSON response body.
        path: JSONPath expression.
        resource_id: Handle used in the error message.

    Returns:
        The single matched value.  For ``$`` this is the response itself.

    Raises:
        ResponseShapeError: If the path is invalid or matches nothing.
    """
    try:
        expression = parse_jsonpath(path)
    except Exception as exc:
        raise ResponseShapeError(resource_id, path, response, reason=str(exc)) from exc

    matches = [match.value for match in expression.find(response)]
    if not matches:
        raise ResponseShapeError(resource_id, path, response, reason="unknown key")
    return matches[0]


def extract_mapping(response: Mapping[str, Any], path: str, *, resource_id: str = "") -> dict[str, Any]:
    """Like ``extract_path`` but require the matched value to be a mapping."""
    value = extract_path(response, path, resource_id=resource_id)
    if not isinstance(value, Mapping):
        raise ResponseShapeError(
            resource_id,
            path,
            response,
            reason=f"expected an object, got {type(value).__name__}",
        )
    return dict(value)


def coerce_status(value: object) -> str:
    """Coerce a heterogeneous ``Status`` value to its canonical text form.

    Contract:
        - ``None`` becomes ``""``.
        - Strings pass through unchanged.
        - Booleans become ``"true"`` / ``"false"``.
        - Integers use their decimal form.
        - Floats use the shortest round-tripping form; integral finite
          floats drop the fractional part (``3.0`` → ``"3"``).
        - Anything else uses ``str()``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def build_client_token(action: str) -> str:
    """Return an idempotency token for *action* (``ClientToken`` field).

    Format: ``TF-<action>-<uuid4 hex>``, at most 64 characters.
    """
    return f"TF-{action}-{uuid.uuid4().hex}"[:64]
