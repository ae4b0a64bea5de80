"""Collapse state for status groups and parent tasks.

The view functions take collapse maps as plain arguments; this value type
is what a store or settings file holds between recomputations. Toggles
return a new state and leave the original untouched.
"""

from dataclasses import dataclass, field
from collections.abc import Iterable
from typing import Any, Mapping

from tasktree.models import GroupKey

DEFAULT_STATUS_COLLAPSED_STATE: dict[str, bool] = {
    GroupKey.OPEN.value: False,
    GroupKey.DEFERRED.value: True,
    GroupKey.CLOSED.value: True,
}


def _group_value(group: "GroupKey | str") -> str:
    return GroupKey(group).value


@dataclass
class CollapseState:
    """Collapsed flags keyed by group value and by parent task id."""

    status: dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_STATUS_COLLAPSED_STATE))
    parent: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CollapseState":
        """Create collapse state, filling missing groups from the defaults."""
        status = dict(DEFAULT_STATUS_COLLAPSED_STATE)
        for key, value in (payload.get("status_collapsed") or {}).items():
            status[_group_value(key)] = bool(value)
        parent = {str(key): bool(value) for key, value in (payload.get("parent_collapsed") or {}).items()}
        return cls(status=status, parent=parent)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status_collapsed": dict(self.status),
            "parent_collapsed": dict(self.parent),
        }

    def toggle_status_group(self, group: "GroupKey | str") -> "CollapseState":
        key = _group_value(group)
        status = dict(self.status)
        status[key] = not status.get(key, False)
        return CollapseState(status=status, parent=dict(self.parent))

    def toggle_parent_group(self, task_id: str) -> "CollapseState":
        parent = dict(self.parent)
        parent[task_id] = not parent.get(task_id, False)
        return CollapseState(status=dict(self.status), parent=parent)

    def with_overrides(
        self,
        *,
        collapsed_groups: Iterable[str] = (),
        collapsed_parents: Iterable[str] = (),
    ) -> "CollapseState":
        """Return a copy with the given groups and parents marked collapsed."""
        status = dict(self.status)
        parent = dict(self.parent)
        for group in collapsed_groups:
            status[_group_value(group)] = True
        for task_id in collapsed_parents:
            parent[task_id] = True
        return CollapseState(status=status, parent=parent)
