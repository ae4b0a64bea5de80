"""View settings: loading, creation, validation and collapse-state saving."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tasktree.collapse import CollapseState
from tasktree.errors import ConfigError, StorageError
from tasktree.models import GroupKey
from tasktree.time_filter import DEFAULT_CLOSED_TIME_FILTER, ClosedTimeFilter

_GROUP_VALUES = {key.value for key in GroupKey}
_FILTER_VALUES = {f.value for f in ClosedTimeFilter}

logger = logging.getLogger(__name__)


@dataclass
class ViewSettings:
    """In-memory settings model."""

    timezone: str
    closed_time_filter: ClosedTimeFilter = DEFAULT_CLOSED_TIME_FILTER
    show_empty_groups: bool = False
    collapse: CollapseState = field(default_factory=CollapseState)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ViewSettings":
        """Create settings from a validated dict payload."""
        return cls(
            timezone=str(payload["timezone"]),
            closed_time_filter=ClosedTimeFilter(
                payload.get("closed_time_filter", DEFAULT_CLOSED_TIME_FILTER.value)
            ),
            show_empty_groups=payload.get("show_empty_groups", False),
            collapse=CollapseState.from_dict(payload),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize settings to dict payload."""
        return {
            "timezone": self.timezone,
            "closed_time_filter": self.closed_time_filter.value,
            "show_empty_groups": self.show_empty_groups,
            **self.collapse.to_dict(),
        }


def _resolve_path(path: str) -> Path:
    if "\0" in path:
        raise ConfigError("Path cannot contain NUL bytes")
    return Path(path).expanduser().resolve()


def _validate_bool_map(settings: dict[str, Any], field_name: str, allowed_keys: set[str] | None = None) -> None:
    value = settings.get(field_name)
    if value is None:
        return
    if not isinstance(value, dict):
        raise ConfigError(f"{field_name} must be an object")
    for key, flag in value.items():
        if allowed_keys is not None and key not in allowed_keys:
            raise ConfigError(f"{field_name} has unknown group: {key}")
        if not isinstance(flag, bool):
            raise ConfigError(f"{field_name}.{key} must be a boolean")


def detect_timezone() -> str:
    """Return the system IANA timezone name, or UTC when it cannot be detected."""
    try:
        from tzlocal import get_localzone_name
        name = get_localzone_name()
    except Exception as e:
        logger.warning("Could not detect system timezone (%s), falling back to UTC", e)
        return "UTC"
    return name or "UTC"


def validate_settings(settings: dict[str, Any]) -> None:
    """Validate settings structure.

    Args:
        settings: Settings dictionary to validate

    Raises:
        ConfigError: If settings are invalid
    """
    if not isinstance(settings, dict):
        raise ConfigError("Settings must be a JSON object")

    if "timezone" not in settings:
        raise ConfigError("Settings missing required fields: timezone")

    timezone_str = settings["timezone"]
    if not isinstance(timezone_str, str) or not timezone_str:
        raise ConfigError("timezone must be a non-empty string")

    try:
        ZoneInfo(timezone_str)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Invalid timezone: {timezone_str}") from e

    closed_filter = settings.get("closed_time_filter", DEFAULT_CLOSED_TIME_FILTER.value)
    if closed_filter not in _FILTER_VALUES:
        raise ConfigError(
            f"Invalid closed_time_filter: {closed_filter}. "
            f"Expected one of: {', '.join(sorted(_FILTER_VALUES))}"
        )

    if "show_empty_groups" in settings and not isinstance(settings["show_empty_groups"], bool):
        raise ConfigError("show_empty_groups must be a boolean")

    _validate_bool_map(settings, "status_collapsed", _GROUP_VALUES)
    _validate_bool_map(settings, "parent_collapsed")


def _read_settings_file(settings_path: Path) -> dict[str, Any]:
    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in settings file: {e}") from e
    except OSError as e:
        raise StorageError(f"Could not read settings file {settings_path}: {e}") from e


def _write_settings_file(settings_path: Path, raw: dict[str, Any]) -> None:
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_path, "w", encoding="utf-8") as f:
            json.dump(raw, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise StorageError(f"Could not write settings file {settings_path}: {e}") from e


def load_settings(path: str) -> ViewSettings:
    """Load and validate settings from JSON file.

    Raises:
        FileNotFoundError: If the settings file doesn't exist
        ConfigError: If settings data is invalid
        StorageError: If the file cannot be read
    """
    settings_path = _resolve_path(path)

    if not settings_path.exists():
        raise FileNotFoundError(
            f"Settings not found: {settings_path}\n"
            "Use 'new' command to create a settings file"
        )

    raw = _read_settings_file(settings_path)
    validate_settings(raw)
    return ViewSettings.from_dict(raw)


def default_settings() -> ViewSettings:
    """Settings used when no file is given."""
    return ViewSettings(timezone=detect_timezone())


def create_settings(path: str) -> ViewSettings:
    """Create new settings file with defaults.

    Defaults:
        - timezone: system timezone (tzlocal), UTC if detection fails
        - closed_time_filter: "past_day"
        - show_empty_groups: false
        - status_collapsed: open expanded, deferred and closed collapsed
        - parent_collapsed: empty
    """
    settings_path = _resolve_path(path)
    if settings_path.exists():
        raise ConfigError(f"Settings already exist: {settings_path}")

    settings = default_settings()
    _write_settings_file(settings_path, settings.to_dict())
    return settings


def save_collapse_state(path: str, state: CollapseState) -> None:
    """Persist collapse state into an existing settings file."""
    settings_path = _resolve_path(path)
    raw = _read_settings_file(settings_path)
    validate_settings(raw)
    raw.update(state.to_dict())
    _write_settings_file(settings_path, raw)
