"""Text formatters for CLI output."""

from collections.abc import Collection, Mapping
from zoneinfo import ZoneInfo

from tasktree.models import Group, GroupKey, TaskProgress, TaskTreeNode
from tasktree.navigation import is_group_collapsed
from tasktree.time_filter import ClosedTimeFilter, parse_timestamp
from tasktree.tree import count_descendants

_INDENT = "  "


def format_local_time(timestamp: str | None, timezone_str: str) -> str | None:
    """Render an ISO timestamp as local YYYY-MM-DD HH:MM, or None if unusable."""
    if not timestamp:
        return None
    try:
        local_dt = parse_timestamp(timestamp).astimezone(ZoneInfo(timezone_str))
    except ValueError:
        return None
    return local_dt.strftime("%Y-%m-%d %H:%M")


def format_task_line(
    node: TaskTreeNode,
    *,
    timezone_str: str,
    collapsed: bool,
    active_ids: Collection[str],
) -> str:
    """Render one node: marker, priority, id, title and status details."""
    task = node.task
    marker = ("▸" if collapsed else "▾") if node.children else "-"
    parts = [marker]
    if task.priority is not None:
        parts.append(f"[P{task.priority}]")
    parts.append(task.id)
    parts.append(task.title)

    details = [task.status.value]
    if task.is_bug:
        details.append("bug")
    closed_at = format_local_time(task.closed_at, timezone_str)
    if closed_at is not None:
        details.append(f"closed {closed_at}")
    parts.append(f"({', '.join(details)})")

    if task.id in active_ids:
        parts.append("*")
    if collapsed and node.children:
        parts.append(f"+{count_descendants(node)} hidden")
    return " ".join(parts)


def format_groups(
    groups: list[Group],
    *,
    status_collapsed_state: Mapping | None = None,
    parent_collapsed_state: Mapping[str, bool] | None = None,
    timezone_str: str = "UTC",
    closed_time_filter: ClosedTimeFilter | None = None,
    active_ids: Collection[str] = frozenset(),
    search_query: str = "",
) -> str:
    """Render grouped trees as indented text."""
    if not any(group.total_count for group in groups):
        return "No matching tasks." if search_query.strip() else "No tasks."

    status_collapsed_state = status_collapsed_state or {}
    parent_collapsed_state = parent_collapsed_state or {}

    lines: list[str] = []
    for group_index, group in enumerate(groups):
        group_collapsed = is_group_collapsed(status_collapsed_state, group.key)
        header = f"{'▸' if group_collapsed else '▾'} {group.label} ({group.total_count})"
        if group.key is GroupKey.CLOSED and closed_time_filter is not None:
            header += f" [{closed_time_filter.label}]"
        lines.append(header)

        if not group_collapsed:
            stack: list[tuple[TaskTreeNode, int]] = [(tree, 1) for tree in reversed(group.trees)]
            while stack:
                node, depth = stack.pop()
                collapsed = parent_collapsed_state.get(node.task.id, False)
                line = format_task_line(
                    node,
                    timezone_str=timezone_str,
                    collapsed=collapsed,
                    active_ids=active_ids,
                )
                lines.append(f"{_INDENT * depth}{line}")
                if not collapsed:
                    stack.extend((child, depth + 1) for child in reversed(node.children))

        if group_index < len(groups) - 1:
            lines.append("")

    return "\n".join(lines)


def format_visible_ids(visible_ids: list[str]) -> str:
    if not visible_ids:
        return "No visible tasks."
    return "\n".join(visible_ids)


def format_progress(progress: TaskProgress) -> str:
    if progress.total == 0:
        return "No tasks."
    percent = round(100 * progress.closed / progress.total)
    return f"{progress} closed ({percent}%)"
