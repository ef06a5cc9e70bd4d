"""Tag diffing and reserved-prefix filtering."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from ros_state.core.constants import IGNORED_TAG_PREFIXES


@dataclass(frozen=True, slots=True)
class TagDiff:
    """Tag changes between a resource's previous and desired tag sets.

    Attributes:
        added: Keys to create or overwrite, with their new values.
        removed: Keys to delete.
    """

    added: dict[str, str] = field(default_factory=dict)
    removed: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when applying the diff needs no remote call."""
        return not self.added and not self.removed


def diff_tags(previous: Mapping[str, str] | None, desired: Mapping[str, str] | None) -> TagDiff:
    """Compute the tags to add and the keys to remove.

    A key whose value changed appears in ``added`` only; ``TagResources``
    overwrites it in place.
    """
    previous = previous or {}
    desired = desired or {}
    added = {k: v for k, v in desired.items() if k not in previous or previous[k] != v}
    removed = [k for k in previous if k not in desired]
    return TagDiff(added=added, removed=removed)


def is_ignored_tag(key: str, prefixes: Iterable[str] = IGNORED_TAG_PREFIXES) -> bool:
    """Return ``True`` for system-managed tag keys that must never be removed."""
    return any(key.startswith(prefix) for prefix in prefixes)
