"""Tree reconstruction from flat parent references.

Tasks reference their parent by id. This module turns a flat list into
root nodes plus the lookup maps the grouping pass works from, and resolves
the top-most ancestor of a task.

Functions:
    build_task_tree: Index tasks and build full (unfiltered) trees
    find_root_ancestor: Follow parent links to the top-most loaded ancestor
    count_all_nodes: Node plus all descendants
    count_descendants: Descendants only
    flatten_tree: Pre-order list of tasks in a tree
    iter_tree_ids: Pre-order iterator over task ids in a tree
"""

import logging
from collections.abc import Iterator

from tasktree.models import Task, TaskIndex, TaskTreeNode

logger = logging.getLogger(__name__)


def build_task_tree(tasks: list[Task]) -> TaskIndex:
    """Index a flat task list in O(n).

    A task is a root when it has no parent or its parent is not in the
    list. Children keep input order. Task ids must be unique.

    Example:
        >>> index = build_task_tree([Task("a", "A", "open"), Task("b", "B", "open", parent="a")])
        >>> [node.task.id for node in index.roots]
        ['a']
        >>> [child.id for child in index.children_map["a"]]
        ['b']
    """
    task_map: dict[str, Task] = {task.id: task for task in tasks}
    children_map: dict[str, list[Task]] = {}
    nodes: dict[str, TaskTreeNode] = {task.id: TaskTreeNode(task=task) for task in tasks}
    roots: list[TaskTreeNode] = []

    for task in tasks:
        node = nodes[task.id]
        if task.parent and task.parent in task_map:
            children_map.setdefault(task.parent, []).append(task)
            nodes[task.parent].children.append(node)
        else:
            roots.append(node)

    return TaskIndex(roots=roots, task_map=task_map, children_map=children_map)


def find_root_ancestor(task: Task, task_map: dict[str, Task]) -> Task:
    """Return the top-most ancestor of task that is present in task_map.

    Returns the task itself when it has no loaded parent. A parent chain
    that loops back on itself stops at the last task before the repeat.
    """
    visited = {task.id}
    current = task

    while current.parent and current.parent in task_map:
        if current.parent in visited:
            logger.debug("Parent cycle detected at %s -> %s", current.id, current.parent)
            break
        visited.add(current.parent)
        current = task_map[current.parent]

    return current


def iter_tree_ids(node: TaskTreeNode) -> Iterator[str]:
    """Yield task ids of node and its descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current.task.id
        stack.extend(reversed(current.children))


def flatten_tree(node: TaskTreeNode) -> list[Task]:
    """Return tasks of node and its descendants in pre-order."""
    result: list[Task] = []
    stack = [node]
    while stack:
        current = stack.pop()
        result.append(current.task)
        stack.extend(reversed(current.children))
    return result


def count_all_nodes(node: TaskTreeNode) -> int:
    return sum(1 for _ in iter_tree_ids(node))


def count_descendants(node: TaskTreeNode) -> int:
    return count_all_nodes(node) - 1
