"""RPC wire encoding for list-valued request parameters.

The RPC API takes a flat string-keyed form.  Lists are spelled as
1-based indexed keys: ``TagKey.1``, ``ResourceId.1``, ``Tag.1.Key`` /
``Tag.1.Value``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def encode_indexed(name: str, values: Iterable[Any]) -> dict[str, Any]:
    """Encode *values* as ``{name}.1``, ``{name}.2``, ..."""
    return {f"{name}.{i}": value for i, value in enumerate(values, start=1)}


def encode_tags(tags: Mapping[str, str], name: str = "Tag") -> dict[str, str]:
    """Encode a tag mapping as ``Tag.N.Key`` / ``Tag.N.Value`` pairs."""
    request: dict[str, str] = {}
    for i, (key, value) in enumerate(tags.items(), start=1):
        request[f"{name}.{i}.Key"] = key
        request[f"{name}.{i}.Value"] = value
    return request


def format_value(value: Any) -> str:
    """Render a request value the way the RPC endpoint expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
