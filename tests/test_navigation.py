"""Tests for navigation module."""

import pytest

from tasktree.models import Group, GroupKey, Task, TaskTreeNode
from tasktree.navigation import (
    compute_visible_ids,
    select_next,
    select_previous,
    select_visible_groups,
)


def _node(task_id: str, *children: TaskTreeNode) -> TaskTreeNode:
    return TaskTreeNode(task=Task(id=task_id, title=task_id, status="open"), children=list(children))


def _group(key: GroupKey, *trees: TaskTreeNode, total_count: int | None = None) -> Group:
    count = total_count if total_count is not None else len(trees)
    return Group(key=key, label=key.label, trees=list(trees), total_count=count)


@pytest.fixture
def groups():
    return [
        _group(GroupKey.OPEN, _node("root", _node("child", _node("grandchild"))), _node("solo")),
        _group(GroupKey.DEFERRED),
        _group(GroupKey.CLOSED, _node("done")),
    ]


class TestComputeVisibleIds:
    """Test compute_visible_ids function."""

    def test_everything_expanded(self, groups):
        """Test pre-order across groups when nothing is collapsed."""
        assert compute_visible_ids(groups, {}, {}) == ["root", "child", "grandchild", "solo", "done"]

    def test_collapsed_parent_hides_descendants(self, groups):
        """Test that collapsing child keeps its id but hides grandchild."""
        ids = compute_visible_ids(groups, {}, {"child": True})

        assert ids == ["root", "child", "solo", "done"]

    def test_collapsed_group_hides_everything_in_it(self, groups):
        """Test that a collapsed open group contributes nothing."""
        ids = compute_visible_ids(groups, {"open": True}, {"child": False})

        assert ids == ["done"]

    def test_group_state_accepts_enum_keys(self, groups):
        """Test that collapse maps keyed by GroupKey work too."""
        assert compute_visible_ids(groups, {GroupKey.CLOSED: True}, {}) == ["root", "child", "grandchild", "solo"]

    def test_false_flags_mean_expanded(self, groups):
        """Test that explicit False entries behave like absent ones."""
        ids = compute_visible_ids(groups, {"open": False, "closed": False}, {"root": False})

        assert ids == ["root", "child", "grandchild", "solo", "done"]

    def test_defaults_when_maps_omitted(self, groups):
        """Test that omitted maps mean fully expanded."""
        assert compute_visible_ids(groups) == ["root", "child", "grandchild", "solo", "done"]

    def test_no_groups(self):
        """Test that no groups gives no ids."""
        assert compute_visible_ids([], {}, {}) == []


class TestSelectVisibleGroups:
    """Test select_visible_groups function."""

    def test_hides_empty_deferred(self, groups):
        """Test that an empty deferred group is dropped."""
        assert [g.key for g in select_visible_groups(groups)] == [GroupKey.OPEN, GroupKey.CLOSED]

    def test_keeps_empty_open_and_closed(self):
        """Test that open and closed are always shown."""
        empty = [_group(GroupKey.OPEN), _group(GroupKey.DEFERRED), _group(GroupKey.CLOSED)]

        assert [g.key for g in select_visible_groups(empty)] == [GroupKey.OPEN, GroupKey.CLOSED]

    def test_show_empty_groups(self, groups):
        """Test that show_empty_groups keeps every group."""
        assert len(select_visible_groups(groups, show_empty_groups=True)) == 3

    def test_non_empty_deferred_shown(self):
        """Test that deferred is shown once it has tasks."""
        with_deferred = [_group(GroupKey.OPEN), _group(GroupKey.DEFERRED, _node("later")), _group(GroupKey.CLOSED)]

        assert [g.key for g in select_visible_groups(with_deferred)] == [
            GroupKey.OPEN,
            GroupKey.DEFERRED,
            GroupKey.CLOSED,
        ]


class TestSelection:
    """Test keyboard cursor movement."""

    ids = ["a", "b", "c"]

    def test_next(self):
        """Test moving down."""
        assert select_next(self.ids, "a") == "b"

    def test_next_at_end_stays(self):
        """Test that the last item stays selected."""
        assert select_next(self.ids, "c") == "c"

    def test_previous(self):
        """Test moving up."""
        assert select_previous(self.ids, "c") == "b"

    def test_previous_at_start_stays(self):
        """Test that the first item stays selected."""
        assert select_previous(self.ids, "a") == "a"

    @pytest.mark.parametrize("selected", [None, "hidden"])
    def test_no_visible_selection(self, selected):
        """Test entry points when nothing visible is selected."""
        assert select_next(self.ids, selected) == "a"
        assert select_previous(self.ids, selected) == "c"

    def test_empty_list(self):
        """Test that an empty list selects nothing."""
        assert select_next([], "a") is None
        assert select_previous([], None) is None
