"""Closed/total counts for the progress bar."""

from datetime import datetime

from tasktree.models import Task, TaskProgress, TaskStatus
from tasktree.time_filter import ClosedTimeFilter, get_time_filter_cutoff
from tasktree.visibility import within_time_window


def compute_progress(
    tasks: list[Task],
    closed_time_filter: "str | ClosedTimeFilter" = ClosedTimeFilter.ALL_TIME,
    now: datetime | None = None,
) -> TaskProgress:
    """Count closed tasks against all tasks inside the closed-time window.

    Epics are containers and are left out of both counts.
    """
    cutoff = get_time_filter_cutoff(closed_time_filter, now)
    counted = [
        task
        for task in tasks
        if task.issue_type != "epic" and within_time_window(task, cutoff)
    ]
    closed = sum(1 for task in counted if task.status is TaskStatus.CLOSED)
    return TaskProgress(closed=closed, total=len(counted))
