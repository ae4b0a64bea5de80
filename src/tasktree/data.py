"""Task snapshot loading from JSON and JSONL exports."""

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from tasktree.errors import StorageError, ValidationError
from tasktree.models import Task

logger = logging.getLogger(__name__)


def parse_tasks(raw_tasks: Any) -> list[Task]:
    """Convert a list of task payloads into Task models.

    Raises:
        ValidationError: If the list or any task payload is malformed
    """
    if not isinstance(raw_tasks, list):
        raise ValidationError("Invalid tasks structure: 'tasks' must be an array")

    tasks: list[Task] = []
    for i, raw_task in enumerate(raw_tasks):
        if isinstance(raw_task, Task):
            tasks.append(raw_task)
            continue
        if not isinstance(raw_task, Mapping):
            raise ValidationError(f"Task {i} is not a valid object")
        try:
            tasks.append(Task.from_dict(raw_task))
        except ValueError as e:
            raise ValidationError(f"Task {i}: {e}") from e
    return tasks


def _load_json(task_path: Path) -> list[Task]:
    try:
        with open(task_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise StorageError(f"Invalid JSON in tasks file: {e}") from e

    if isinstance(data, dict):
        if "tasks" not in data:
            raise StorageError("Invalid tasks file structure: missing 'tasks' key")
        data = data["tasks"]
    return parse_tasks(data)


def _load_jsonl(task_path: Path) -> list[Task]:
    raw_tasks: list[Any] = []
    with open(task_path, "r", encoding="utf-8") as f:
        for line_num, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                raw_tasks.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise StorageError(f"Invalid JSON on line {line_num} of tasks file: {e}") from e
    return parse_tasks(raw_tasks)


def load_tasks(path: str) -> list[Task]:
    """Load a task snapshot.

    Args:
        path: Path to a .jsonl export (one task per line) or a .json file
            holding either a task array or {"tasks": [...]}

    Returns:
        Tasks in file order

    Raises:
        StorageError: If the file is missing, unreadable or not valid JSON
        ValidationError: If a task payload is malformed
    """
    task_path = Path(path).expanduser()

    if not task_path.exists():
        raise StorageError(f"Tasks file not found: {task_path}")

    try:
        if task_path.suffix.lower() == ".jsonl":
            tasks = _load_jsonl(task_path)
        else:
            tasks = _load_json(task_path)
    except OSError as e:
        raise StorageError(f"Could not read tasks file {task_path}: {e}") from e

    logger.info("Loaded %d tasks from %s", len(tasks), task_path)
    return tasks
