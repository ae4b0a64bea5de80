"""Per-task visibility predicates: search match and closed-time window."""

from datetime import datetime

from tasktree.models import Task, TaskStatus
from tasktree.time_filter import parse_timestamp


def matches_search(task: Task, query: str) -> bool:
    """Case-insensitive substring match on id, title and description.

    A blank or whitespace-only query matches everything.
    """
    if not query.strip():
        return True
    needle = query.lower()
    return (
        needle in task.id.lower()
        or needle in task.title.lower()
        or (task.description is not None and needle in task.description.lower())
    )


def within_time_window(task: Task, cutoff: datetime | None) -> bool:
    """Check a closed task against the closed-time cutoff.

    Only closed tasks are limited; deferred tasks are always shown. A
    missing or unreadable closed_at counts as just closed.
    """
    if task.status is not TaskStatus.CLOSED or cutoff is None:
        return True
    if not task.closed_at:
        return True
    try:
        closed_at = parse_timestamp(task.closed_at)
    except ValueError:
        return True
    return closed_at >= cutoff


def is_task_visible(task: Task, query: str, cutoff: datetime | None) -> bool:
    """Combined filter. A non-blank query bypasses the time window."""
    if not matches_search(task, query):
        return False
    if query.strip():
        return True
    return within_time_window(task, cutoff)
