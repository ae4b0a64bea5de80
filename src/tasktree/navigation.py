"""Flattened visible-id list and cursor movement over it."""

from collections.abc import Mapping

from tasktree.models import Group, GroupKey

# Groups shown even when they have no tasks.
_ALWAYS_SHOWN_GROUPS = frozenset({GroupKey.OPEN, GroupKey.CLOSED})


def select_visible_groups(groups: list[Group], show_empty_groups: bool = False) -> list[Group]:
    """Drop the deferred group while it is empty, unless empty groups are shown."""
    if show_empty_groups:
        return list(groups)
    return [group for group in groups if group.key in _ALWAYS_SHOWN_GROUPS or group.total_count > 0]


def is_group_collapsed(status_collapsed_state: Mapping, key: GroupKey) -> bool:
    """Look up a group by member or by its string value; absent means expanded."""
    if key in status_collapsed_state:
        return bool(status_collapsed_state[key])
    return bool(status_collapsed_state.get(key.value, False))


def compute_visible_ids(
    groups: list[Group],
    status_collapsed_state: Mapping | None = None,
    parent_collapsed_state: Mapping[str, bool] | None = None,
) -> list[str]:
    """Ordered ids of every task currently on screen.

    Walks each expanded group's trees in pre-order. A collapsed node
    contributes its own id but hides its descendants.
    """
    status_collapsed_state = status_collapsed_state or {}
    parent_collapsed_state = parent_collapsed_state or {}

    ids: list[str] = []
    for group in groups:
        if is_group_collapsed(status_collapsed_state, group.key):
            continue
        stack = list(reversed(group.trees))
        while stack:
            node = stack.pop()
            ids.append(node.task.id)
            if not parent_collapsed_state.get(node.task.id, False):
                stack.extend(reversed(node.children))
    return ids


def select_next(visible_ids: list[str], selected_id: str | None) -> str | None:
    """Id below the selection; the first id when nothing visible is selected."""
    if not visible_ids:
        return None
    if selected_id not in visible_ids:
        return visible_ids[0]
    position = visible_ids.index(selected_id)
    return visible_ids[min(position + 1, len(visible_ids) - 1)]


def select_previous(visible_ids: list[str], selected_id: str | None) -> str | None:
    """Id above the selection; the last id when nothing visible is selected."""
    if not visible_ids:
        return None
    if selected_id not in visible_ids:
        return visible_ids[-1]
    position = visible_ids.index(selected_id)
    return visible_ids[max(position - 1, 0)]
