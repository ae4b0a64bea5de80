"""Typed domain models for tasktree."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class TaskStatus(str, Enum):
    """Task lifecycle statuses as reported by the issue tracker."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DEFERRED = "deferred"
    CLOSED = "closed"


class GroupKey(str, Enum):
    """Status families used for top-level partitioning, in display order."""

    OPEN = "open"
    DEFERRED = "deferred"
    CLOSED = "closed"

    @property
    def label(self) -> str:
        return _GROUP_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        """Closed and deferred groups sort by recency instead of priority."""
        return self is not GroupKey.OPEN


_GROUP_LABELS = {
    GroupKey.OPEN: "Open",
    GroupKey.DEFERRED: "Deferred",
    GroupKey.CLOSED: "Closed",
}

DEFAULT_PRIORITY = 4
_PRIORITY_RANGE = range(0, 5)


def _coerce_task_status(value: Any) -> TaskStatus:
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValueError(f"Invalid task status: {value}") from None


def _optional_str(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    return None if value is None else str(value)


@dataclass
class Task:
    """A single tracker issue as seen by the view.

    Only the fields the view reads are modelled; everything else in the
    tracker payload is ignored on load.
    """

    id: str
    title: str
    status: TaskStatus
    priority: int | None = None
    issue_type: str | None = None
    parent: str | None = None
    created_at: str | None = None
    closed_at: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        self.status = _coerce_task_status(self.status)

    @property
    def effective_priority(self) -> int:
        return DEFAULT_PRIORITY if self.priority is None else self.priority

    @property
    def is_bug(self) -> bool:
        return self.issue_type == "bug"

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Task":
        """Create task from a dict-like payload."""
        required_fields = {"id", "title", "status"}
        missing = required_fields - set(payload.keys())
        if missing:
            raise ValueError(f"Task missing required fields: {', '.join(sorted(missing))}")

        if not payload["id"]:
            raise ValueError("Task id must be a non-empty string")

        priority = payload.get("priority")
        if priority is not None:
            if isinstance(priority, bool) or not isinstance(priority, int):
                raise ValueError(f"Task priority must be an integer: {priority!r}")
            if priority not in _PRIORITY_RANGE:
                raise ValueError(f"Task priority out of range 0-4: {priority}")

        return cls(
            id=str(payload["id"]),
            title=str(payload["title"]),
            status=payload["status"],
            priority=priority,
            issue_type=_optional_str(payload, "issue_type"),
            parent=_optional_str(payload, "parent") or None,
            created_at=_optional_str(payload, "created_at"),
            closed_at=_optional_str(payload, "closed_at"),
            description=_optional_str(payload, "description"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize task to dict payload, omitting unset optional fields."""
        payload: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
        }
        for key in ("priority", "issue_type", "parent", "created_at", "closed_at", "description"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


@dataclass
class TaskTreeNode:
    """A task with its ordered children.

    Nodes are rebuilt on every recomputation; a children list belongs to
    exactly one node.
    """

    task: Task
    children: list["TaskTreeNode"] = field(default_factory=list)


@dataclass
class TaskIndex:
    """Lookup structures built from a flat task list."""

    roots: list[TaskTreeNode] = field(default_factory=list)
    task_map: dict[str, Task] = field(default_factory=dict)
    children_map: dict[str, list[Task]] = field(default_factory=dict)


@dataclass
class Group:
    """One status family with its sorted top-level trees."""

    key: GroupKey
    label: str
    trees: list[TaskTreeNode] = field(default_factory=list)
    total_count: int = 0


@dataclass
class TaskProgress:
    """Closed vs. total counts for progress display."""

    closed: int = 0
    total: int = 0

    def __str__(self) -> str:
        return f"{self.closed}/{self.total}"
