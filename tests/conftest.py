"""Pytest configuration and fixtures for tasktree tests."""

import json
import logging
import tempfile
from pathlib import Path

import pytest

from tasktree.models import Task


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging.disable() calls made by CLI runs."""
    yield
    logging.disable(logging.NOTSET)


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def frozen_time():
    """Freeze time for consistent time-dependent tests."""
    from freezegun import freeze_time
    with freeze_time("2026-02-09 10:00:00"):
        yield


@pytest.fixture
def sample_tasks_data():
    """Tracker payloads: an open epic with mixed children, a closed epic with a
    reopened child, a deferred task and an old closed task."""
    return [
        {"id": "bd-1", "title": "Login epic", "status": "open", "priority": 1,
         "issue_type": "epic", "created_at": "2026-02-01T10:00:00Z"},
        {"id": "bd-2", "title": "Fix password reset", "status": "in_progress", "priority": 1,
         "issue_type": "bug", "parent": "bd-1", "created_at": "2026-02-02T10:00:00Z"},
        {"id": "bd-3", "title": "Write login docs", "status": "closed", "priority": 2,
         "parent": "bd-1", "created_at": "2026-02-03T10:00:00Z",
         "closed_at": "2026-02-09T09:00:00Z"},
        {"id": "bd-4", "title": "Billing epic", "status": "closed", "priority": 2,
         "issue_type": "epic", "created_at": "2026-01-20T10:00:00Z",
         "closed_at": "2026-02-09T08:00:00Z"},
        {"id": "bd-5", "title": "Invoice totals", "status": "closed", "parent": "bd-4",
         "created_at": "2026-01-21T10:00:00Z", "closed_at": "2026-02-09T07:00:00Z"},
        {"id": "bd-6", "title": "Invoice rounding", "status": "open", "priority": 0,
         "parent": "bd-4", "created_at": "2026-01-22T10:00:00Z"},
        {"id": "bd-7", "title": "Dark mode", "status": "deferred", "priority": 3,
         "created_at": "2026-01-05T10:00:00Z"},
        {"id": "bd-8", "title": "Old cleanup", "status": "closed", "priority": 4,
         "created_at": "2025-12-01T10:00:00Z", "closed_at": "2026-01-01T10:00:00Z"},
    ]


@pytest.fixture
def sample_tasks(sample_tasks_data):
    return [Task.from_dict(payload) for payload in sample_tasks_data]


@pytest.fixture
def sample_tasks_file(temp_dir, sample_tasks_data):
    """Write sample tasks as a JSONL export."""
    path = temp_dir / "issues.jsonl"
    with open(path, "w", encoding="utf-8") as f:
        for payload in sample_tasks_data:
            f.write(json.dumps(payload) + "\n")
    return path


@pytest.fixture
def sample_settings(temp_dir):
    """Create sample settings JSON for testing."""
    raw = {
        "timezone": "Asia/Tokyo",
        "closed_time_filter": "past_day",
        "show_empty_groups": False,
        "status_collapsed": {"open": False, "deferred": False, "closed": False},
        "parent_collapsed": {},
    }
    path = temp_dir / "settings.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(raw, f, indent=2)
    return path
