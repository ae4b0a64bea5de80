"""Tests for formatters module."""

from datetime import datetime, timezone

from tasktree.formatters import (
    format_groups,
    format_local_time,
    format_progress,
    format_task_line,
    format_visible_ids,
)
from tasktree.grouping import compute_groups
from tasktree.models import Task, TaskProgress, TaskTreeNode
from tasktree.time_filter import ClosedTimeFilter

NOW = datetime(2026, 2, 9, 10, 0, 0, tzinfo=timezone.utc)

EXPANDED = {"open": False, "deferred": False, "closed": False}


class TestFormatLocalTime:
    """Test format_local_time function."""

    def test_converts_to_timezone(self):
        """Test UTC to local conversion."""
        assert format_local_time("2026-02-09T09:00:00Z", "Asia/Tokyo") == "2026-02-09 18:00"

    def test_missing_or_invalid(self):
        """Test that unusable timestamps give None."""
        assert format_local_time(None, "UTC") is None
        assert format_local_time("soon", "UTC") is None


class TestFormatTaskLine:
    """Test format_task_line function."""

    def test_leaf(self):
        """Test a leaf task with priority and bug marker."""
        node = TaskTreeNode(Task(id="bd-2", title="Fix reset", status="in_progress", priority=1, issue_type="bug"))

        line = format_task_line(node, timezone_str="UTC", collapsed=False, active_ids={"bd-2"})

        assert line == "- [P1] bd-2 Fix reset (in_progress, bug) *"

    def test_collapsed_parent_counts_hidden(self):
        """Test that a collapsed parent shows how many tasks it hides."""
        grandchild = TaskTreeNode(Task(id="c", title="C", status="open"))
        child = TaskTreeNode(Task(id="b", title="B", status="open"), [grandchild])
        node = TaskTreeNode(Task(id="a", title="A", status="open"), [child])

        line = format_task_line(node, timezone_str="UTC", collapsed=True, active_ids=())

        assert line == "▸ a A (open) +2 hidden"


class TestFormatGroups:
    """Test format_groups function."""

    def test_sample_layout(self, sample_tasks):
        """Test the full grouped rendering."""
        groups = compute_groups(sample_tasks, now=NOW)

        output = format_groups(
            groups,
            status_collapsed_state=EXPANDED,
            parent_collapsed_state={},
            timezone_str="Asia/Tokyo",
            closed_time_filter=ClosedTimeFilter.PAST_DAY,
        )

        assert output == "\n".join([
            "▾ Open (4)",
            "  - [P0] bd-6 Invoice rounding (open)",
            "  ▾ [P1] bd-1 Login epic (open)",
            "    - [P1] bd-2 Fix password reset (in_progress, bug)",
            "    - [P2] bd-3 Write login docs (closed, closed 2026-02-09 18:00)",
            "",
            "▾ Deferred (1)",
            "  - [P3] bd-7 Dark mode (deferred)",
            "",
            "▾ Closed (2) [Past day]",
            "  ▾ [P2] bd-4 Billing epic (closed, closed 2026-02-09 17:00)",
            "    - bd-5 Invoice totals (closed, closed 2026-02-09 16:00)",
        ])

    def test_collapsed_group_and_parent(self, sample_tasks):
        """Test that collapsed groups show only a header."""
        groups = compute_groups(sample_tasks, now=NOW)

        output = format_groups(
            groups,
            status_collapsed_state={"open": False, "deferred": True, "closed": True},
            parent_collapsed_state={"bd-1": True},
        )

        assert output.splitlines() == [
            "▾ Open (4)",
            "  - [P0] bd-6 Invoice rounding (open)",
            "  ▸ [P1] bd-1 Login epic (open) +2 hidden",
            "",
            "▸ Deferred (1)",
            "",
            "▸ Closed (2)",
        ]

    def test_empty_states(self):
        """Test the messages for no tasks and no matches."""
        groups = compute_groups([], now=NOW)

        assert format_groups(groups) == "No tasks."
        assert format_groups(groups, search_query="login") == "No matching tasks."


class TestSimpleFormatters:
    """Test id and progress formatters."""

    def test_format_visible_ids(self):
        assert format_visible_ids(["a", "b"]) == "a\nb"
        assert format_visible_ids([]) == "No visible tasks."

    def test_format_progress(self):
        assert format_progress(TaskProgress(closed=1, total=3)) == "1/3 closed (33%)"
        assert format_progress(TaskProgress()) == "No tasks."
