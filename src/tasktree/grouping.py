"""Partition task trees into the open, deferred and closed groups.

Whole subtrees stay together under an open root, so an epic that is still
being worked on keeps its closed children nested beneath it. A closed or
deferred root only keeps the direct children that land in its own group;
children of another family are detached and placed as top-level trees of
their own. That way a closed epic never hides a reopened child.

Placement runs as an explicit worklist over the index maps rather than
nested recursion, and every placed task id goes into one shared set so
nothing is placed twice.
"""

import logging
from collections.abc import Collection
from datetime import datetime

from tasktree.models import Group, GroupKey, Task, TaskIndex, TaskStatus, TaskTreeNode
from tasktree.sorting import sort_tree_nodes
from tasktree.time_filter import (
    DEFAULT_CLOSED_TIME_FILTER,
    ClosedTimeFilter,
    get_time_filter_cutoff,
)
from tasktree.tree import build_task_tree, count_all_nodes, find_root_ancestor, iter_tree_ids
from tasktree.visibility import is_task_visible

logger = logging.getLogger(__name__)

_STATUS_GROUPS: dict[TaskStatus, GroupKey] = {
    TaskStatus.OPEN: GroupKey.OPEN,
    TaskStatus.IN_PROGRESS: GroupKey.OPEN,
    TaskStatus.BLOCKED: GroupKey.OPEN,
    TaskStatus.DEFERRED: GroupKey.DEFERRED,
    TaskStatus.CLOSED: GroupKey.CLOSED,
}

_TERMINAL_STATUSES = frozenset({TaskStatus.CLOSED, TaskStatus.DEFERRED})


def group_for_status(status: TaskStatus) -> GroupKey:
    return _STATUS_GROUPS[status]


def is_terminal_status(status: TaskStatus) -> bool:
    return status in _TERMINAL_STATUSES


def get_status_group_for_task(task: Task, task_map: dict[str, Task]) -> GroupKey:
    """Group a task is shown in.

    Uses the root ancestor's family while that ancestor is open, and the
    task's own status once the ancestor is closed or deferred.
    """
    root = find_root_ancestor(task, task_map)
    if not is_terminal_status(root.status):
        return group_for_status(root.status)
    return group_for_status(task.status)


def build_filtered_tree(
    task: Task,
    include_task: bool,
    children_map: dict[str, list[Task]],
    visible_ids: Collection[str],
) -> TaskTreeNode | None:
    """Rebuild task's subtree keeping visible nodes and their ancestors.

    A node survives when it is visible itself (include_task for the
    starting task, membership in visible_ids below it) or when any of its
    descendants survives. Returns None when nothing survives.
    """
    built: dict[str, TaskTreeNode | None] = {}
    seen = {task.id}
    # Each entry is visited twice: first to expand children, then (with the
    # expanded child list attached) to assemble the node.
    stack: list[tuple[Task, list[Task] | None]] = [(task, None)]

    while stack:
        current, children = stack.pop()
        if children is None:
            children = [child for child in children_map.get(current.id, []) if child.id not in seen]
            seen.update(child.id for child in children)
            stack.append((current, children))
            stack.extend((child, None) for child in reversed(children))
            continue

        kept = [
            node
            for node in (built.pop(child.id) for child in children)
            if node is not None
        ]
        passes = include_task if current is task else current.id in visible_ids
        built[current.id] = TaskTreeNode(task=current, children=kept) if passes or kept else None

    return built[task.id]


def classify_tasks(
    tasks: list[Task],
    index: TaskIndex,
    visible_ids: Collection[str],
) -> dict[GroupKey, list[TaskTreeNode]]:
    """Assign filtered trees to groups, unsorted, in placement order."""
    trees: dict[GroupKey, list[TaskTreeNode]] = {key: [] for key in GroupKey}
    added: set[str] = set()

    _place_all([node.task for node in index.roots], index, visible_ids, added, trees)

    # Dangling parents normally make a task a root already; this picks up
    # anything with a missing parent that the root pass left unplaced.
    root_ids = {node.task.id for node in index.roots}
    orphans = [
        task
        for task in tasks
        if task.parent
        and task.parent not in index.task_map
        and task.id not in root_ids
        and task.id in visible_ids
    ]
    if orphans:
        logger.debug("Placing %d orphaned tasks", len(orphans))
        _place_all(orphans, index, visible_ids, added, trees)

    unplaced = [task_id for task_id in visible_ids if task_id not in added]
    if unplaced:
        logger.debug("Skipped %d visible tasks outside any root tree: %s", len(unplaced), sorted(unplaced))

    return trees


def _place_all(
    start: list[Task],
    index: TaskIndex,
    visible_ids: Collection[str],
    added: set[str],
    trees: dict[GroupKey, list[TaskTreeNode]],
) -> None:
    # LIFO so detached children are placed right after the tree they left.
    stack = list(reversed(start))
    while stack:
        task = stack.pop()
        detached = _place_tree(task, index, visible_ids, added, trees)
        stack.extend(reversed(detached))


def _place_tree(
    task: Task,
    index: TaskIndex,
    visible_ids: Collection[str],
    added: set[str],
    trees: dict[GroupKey, list[TaskTreeNode]],
) -> list[Task]:
    """Place task as a top-level tree. Returns children to place separately."""
    if task.id in added:
        return []

    group_key = get_status_group_for_task(task, index.task_map)
    kept: list[TaskTreeNode] = []
    detached: list[Task] = []

    for child in index.children_map.get(task.id, []):
        if child.id in added:
            continue
        child_node = build_filtered_tree(child, child.id in visible_ids, index.children_map, visible_ids)
        if child_node is None:
            continue
        if (
            is_terminal_status(task.status)
            and get_status_group_for_task(child, index.task_map) is not group_key
        ):
            detached.append(child)
        else:
            kept.append(child_node)

    if detached:
        logger.debug(
            "Splitting %s %s: %d children placed in other groups",
            task.status.value,
            task.id,
            len(detached),
        )

    if task.id in visible_ids or kept:
        node = TaskTreeNode(task=task, children=kept)
        trees[group_key].append(node)
        added.update(iter_tree_ids(node))

    return detached


def compute_groups(
    tasks: list[Task],
    search_query: str = "",
    closed_time_filter: "str | ClosedTimeFilter" = DEFAULT_CLOSED_TIME_FILTER,
    actively_working_task_ids: Collection[str] = frozenset(),
    *,
    now: datetime | None = None,
) -> list[Group]:
    """Build the open, deferred and closed groups, in that order.

    Args:
        tasks: Flat task list with unique ids
        search_query: Free-text query; blank shows everything
        closed_time_filter: Window for closed tasks, ignored while searching
        actively_working_task_ids: Ids of tasks with a running session
        now: Reference time for the closed window (defaults to current UTC)

    Returns:
        One Group per GroupKey with sorted trees and total_count
    """
    cutoff = get_time_filter_cutoff(closed_time_filter, now)
    index = build_task_tree(tasks)
    visible_ids = {task.id for task in tasks if is_task_visible(task, search_query, cutoff)}
    trees = classify_tasks(tasks, index, visible_ids)

    groups: list[Group] = []
    for key in GroupKey:
        sorted_trees = sort_tree_nodes(trees[key], key, actively_working_task_ids)
        groups.append(
            Group(
                key=key,
                label=key.label,
                trees=sorted_trees,
                total_count=sum(count_all_nodes(tree) for tree in sorted_trees),
            )
        )

    logger.debug(
        "Grouped %d tasks (%d visible): %s",
        len(tasks),
        len(visible_ids),
        ", ".join(f"{group.key.value}={group.total_count}" for group in groups),
    )
    return groups
