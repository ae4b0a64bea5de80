"""Closed-task time windows and timestamp helpers."""

from datetime import datetime, timedelta, timezone
from enum import Enum

from tasktree.errors import UsageError


class ClosedTimeFilter(str, Enum):
    """Named windows limiting which closed tasks are shown."""

    PAST_HOUR = "past_hour"
    PAST_4_HOURS = "past_4_hours"
    PAST_DAY = "past_day"
    PAST_WEEK = "past_week"
    ALL_TIME = "all_time"

    @property
    def label(self) -> str:
        return _FILTER_LABELS[self]


_FILTER_LABELS = {
    ClosedTimeFilter.PAST_HOUR: "Past hour",
    ClosedTimeFilter.PAST_4_HOURS: "Past 4 hours",
    ClosedTimeFilter.PAST_DAY: "Past day",
    ClosedTimeFilter.PAST_WEEK: "Past week",
    ClosedTimeFilter.ALL_TIME: "All time",
}

_FILTER_WINDOWS = {
    ClosedTimeFilter.PAST_HOUR: timedelta(hours=1),
    ClosedTimeFilter.PAST_4_HOURS: timedelta(hours=4),
    ClosedTimeFilter.PAST_DAY: timedelta(days=1),
    ClosedTimeFilter.PAST_WEEK: timedelta(days=7),
}

DEFAULT_CLOSED_TIME_FILTER = ClosedTimeFilter.PAST_DAY

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_closed_time_filter(value: "str | ClosedTimeFilter") -> ClosedTimeFilter:
    """Resolve a filter name, raising UsageError for unknown names."""
    if isinstance(value, ClosedTimeFilter):
        return value
    try:
        return ClosedTimeFilter(value)
    except ValueError:
        names = ", ".join(f.value for f in ClosedTimeFilter)
        raise UsageError(f"Unknown closed time filter: {value}. Expected one of: {names}") from None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_time_filter_cutoff(
    closed_filter: "str | ClosedTimeFilter",
    now: datetime | None = None,
) -> datetime | None:
    """Return the oldest closed_at still shown, or None for all_time.

    Args:
        closed_filter: Filter name or ClosedTimeFilter member
        now: Reference time (defaults to current UTC time)

    Returns:
        Aware UTC datetime cutoff, or None when nothing is hidden
    """
    resolved = parse_closed_time_filter(closed_filter)
    if resolved is ClosedTimeFilter.ALL_TIME:
        return None
    reference = utc_now() if now is None else _as_utc(now)
    return reference - _FILTER_WINDOWS[resolved]


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    A trailing 'Z' is accepted and naive values are treated as UTC.

    Raises:
        ValueError: If the string is not ISO 8601
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    return _as_utc(parsed)


def timestamp_seconds(value: str | None) -> float:
    """Seconds since the epoch, with missing or unparseable values at 0."""
    if not value:
        return 0.0
    try:
        return (parse_timestamp(value) - _EPOCH).total_seconds()
    except ValueError:
        return 0.0


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
