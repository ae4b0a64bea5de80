"""Hierarchical, filtered and sorted task views for task-tracking UIs."""

from tasktree.grouping import compute_groups
from tasktree.models import Group, GroupKey, Task, TaskStatus, TaskTreeNode
from tasktree.navigation import compute_visible_ids

__all__ = [
    "Group",
    "GroupKey",
    "Task",
    "TaskStatus",
    "TaskTreeNode",
    "compute_groups",
    "compute_visible_ids",
]
