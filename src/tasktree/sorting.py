"""Ordering of task trees within a status group.

Closed and deferred groups list the most recently closed task first.
The open group orders by:
    1. Trees containing an actively worked task
    2. Priority, ascending (missing priority counts as 4)
    3. Bugs before other issue types
    4. created_at, oldest first (missing counts as the epoch)

The same ordering is applied at every level of every tree. Python's sort
is stable, so fully tied nodes keep their input order.
"""

from collections.abc import Collection

from tasktree.models import GroupKey, TaskTreeNode
from tasktree.time_filter import timestamp_seconds


def tree_has_active_task(node: TaskTreeNode, active_ids: Collection[str]) -> bool:
    """True if node or any descendant is in active_ids."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.task.id in active_ids:
            return True
        stack.extend(current.children)
    return False


def _post_order(nodes: list[TaskTreeNode]) -> list[TaskTreeNode]:
    order: list[TaskTreeNode] = []
    stack = list(nodes)
    while stack:
        current = stack.pop()
        order.append(current)
        stack.extend(current.children)
    order.reverse()
    return order


def sort_tree_nodes(
    nodes: list[TaskTreeNode],
    group_key: GroupKey,
    active_ids: Collection[str] = frozenset(),
) -> list[TaskTreeNode]:
    """Return new, recursively sorted copies of nodes.

    Input nodes are left untouched. Children of every node are sorted with
    the same group's ordering.
    """
    # Bottom-up: a node's children are rebuilt before the node itself.
    has_active: dict[int, bool] = {}
    rebuilt: dict[int, TaskTreeNode] = {}

    for node in _post_order(nodes):
        has_active[id(node)] = node.task.id in active_ids or any(
            has_active[id(child)] for child in node.children
        )
        children = sorted(
            node.children,
            key=lambda child: _sort_key(child, group_key, has_active[id(child)]),
        )
        rebuilt[id(node)] = TaskTreeNode(
            task=node.task,
            children=[rebuilt[id(child)] for child in children],
        )

    ordered = sorted(nodes, key=lambda node: _sort_key(node, group_key, has_active[id(node)]))
    return [rebuilt[id(node)] for node in ordered]


def _sort_key(node: TaskTreeNode, group_key: GroupKey, is_active: bool) -> tuple:
    task = node.task
    if group_key.is_terminal:
        return (-timestamp_seconds(task.closed_at),)
    return (
        0 if is_active else 1,
        task.effective_priority,
        0 if task.is_bug else 1,
        timestamp_seconds(task.created_at),
    )
