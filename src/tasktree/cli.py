"""Command-line interface for tasktree."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from tasktree import data, formatters, settings
from tasktree.collapse import CollapseState
from tasktree.errors import AppError
from tasktree.grouping import compute_groups
from tasktree.models import GroupKey
from tasktree.navigation import compute_visible_ids, select_visible_groups
from tasktree.progress import compute_progress
from tasktree.time_filter import ClosedTimeFilter, parse_closed_time_filter

logger = logging.getLogger(__name__)

_GROUP_CHOICES = [key.value for key in GroupKey]
_FILTER_CHOICES = [f.value for f in ClosedTimeFilter]


def setup_logging(log_file: str | None = None, verbose: bool = False) -> None:
    """Set up logging configuration.

    Logs go to log_file when given; otherwise logging is disabled so CLI
    output stays clean.
    """
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(log_path), encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logging.disable(logging.NOTSET)
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            handlers=[handler],
            force=True,
        )
    else:
        logging.disable(logging.CRITICAL)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--log-file", help="Write logs to this file")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Include debug records in the log file",
    )


def _add_view_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("tasks_file", help="Task snapshot (.json or .jsonl)")
    parser.add_argument("--settings", "-s", help="Path to settings JSON file")
    parser.add_argument("--search", "-q", default="", help="Filter by id, title or description")
    parser.add_argument(
        "--closed-filter", "-c",
        choices=_FILTER_CHOICES,
        help="Time window for closed tasks (default from settings)",
    )
    parser.add_argument(
        "--active", "-a",
        action="append",
        default=[],
        metavar="ID",
        help="Task id with a running session (repeatable)",
    )
    parser.add_argument(
        "--collapse",
        action="append",
        default=[],
        metavar="ID",
        help="Collapse this parent task (repeatable)",
    )
    parser.add_argument(
        "--collapse-group",
        action="append",
        default=[],
        choices=_GROUP_CHOICES,
        help="Collapse this status group (repeatable)",
    )
    parser.add_argument(
        "--expand-all",
        action="store_true",
        help="Ignore saved collapse state",
    )
    parser.add_argument(
        "--all-groups",
        action="store_true",
        help="Show empty status groups",
    )
    _add_common_options(parser)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasktree",
        description="tasktree - grouped, filtered and sorted task trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a settings file
  tasktree new --settings ~/.tasktree/settings.json

  # Show the grouped tree of an issue export
  tasktree show .beads/issues.jsonl --closed-filter past_week

  # Print the ids reachable with up/down navigation
  tasktree ids .beads/issues.jsonl --search login --expand-all
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    parser_new = subparsers.add_parser("new", help="Create a settings file")
    parser_new.add_argument("--settings", "-s", required=True, help="Where to save the settings")
    _add_common_options(parser_new)

    parser_show = subparsers.add_parser("show", help="Print grouped task trees")
    _add_view_options(parser_show)

    parser_ids = subparsers.add_parser("ids", help="Print visible task ids in navigation order")
    _add_view_options(parser_ids)

    parser_progress = subparsers.add_parser("progress", help="Print closed/total counts")
    parser_progress.add_argument("tasks_file", help="Task snapshot (.json or .jsonl)")
    parser_progress.add_argument("--settings", "-s", help="Path to settings JSON file")
    parser_progress.add_argument("--closed-filter", "-c", choices=_FILTER_CHOICES)
    _add_common_options(parser_progress)

    parser_toggle = subparsers.add_parser("toggle", help="Toggle saved collapse state")
    parser_toggle.add_argument("--settings", "-s", required=True, help="Path to settings JSON file")
    target = parser_toggle.add_mutually_exclusive_group(required=True)
    target.add_argument("--group", choices=_GROUP_CHOICES, help="Status group to toggle")
    target.add_argument("--task", metavar="ID", help="Parent task id to toggle")
    _add_common_options(parser_toggle)

    return parser


def _load_view_settings(path: str | None) -> settings.ViewSettings:
    if path:
        return settings.load_settings(path)
    return settings.default_settings()


def _resolve_filter(args: argparse.Namespace, view_settings: settings.ViewSettings) -> ClosedTimeFilter:
    if args.closed_filter:
        return parse_closed_time_filter(args.closed_filter)
    return view_settings.closed_time_filter


def cmd_new(args: argparse.Namespace) -> str:
    created = settings.create_settings(args.settings)
    return (
        f"Settings created: {args.settings}\n"
        f"Timezone: {created.timezone}\n"
        f"Closed time filter: {created.closed_time_filter.label}"
    )


def cmd_view(args: argparse.Namespace) -> str:
    """Shared implementation of 'show' and 'ids'."""
    view_settings = _load_view_settings(args.settings)
    closed_filter = _resolve_filter(args, view_settings)
    tasks = data.load_tasks(args.tasks_file)
    active_ids = set(args.active)

    groups = compute_groups(tasks, args.search, closed_filter, active_ids)
    groups = select_visible_groups(groups, view_settings.show_empty_groups or args.all_groups)

    collapse = CollapseState(status={}, parent={}) if args.expand_all else view_settings.collapse
    collapse = collapse.with_overrides(
        collapsed_groups=args.collapse_group,
        collapsed_parents=args.collapse,
    )

    if args.command == "ids":
        return formatters.format_visible_ids(
            compute_visible_ids(groups, collapse.status, collapse.parent)
        )
    return formatters.format_groups(
        groups,
        status_collapsed_state=collapse.status,
        parent_collapsed_state=collapse.parent,
        timezone_str=view_settings.timezone,
        closed_time_filter=closed_filter,
        active_ids=active_ids,
        search_query=args.search,
    )


def cmd_progress(args: argparse.Namespace) -> str:
    view_settings = _load_view_settings(args.settings)
    closed_filter = _resolve_filter(args, view_settings)
    tasks = data.load_tasks(args.tasks_file)
    return formatters.format_progress(compute_progress(tasks, closed_filter))


def cmd_toggle(args: argparse.Namespace) -> str:
    current = settings.load_settings(args.settings).collapse
    if args.group:
        updated = current.toggle_status_group(args.group)
        state = "collapsed" if updated.status[args.group] else "expanded"
        message = f"Group {args.group} {state}"
    else:
        updated = current.toggle_parent_group(args.task)
        state = "collapsed" if updated.parent[args.task] else "expanded"
        message = f"Task {args.task} {state}"
    settings.save_collapse_state(args.settings, updated)
    return message


_COMMANDS: dict[str, Any] = {
    "new": cmd_new,
    "show": cmd_view,
    "ids": cmd_view,
    "progress": cmd_progress,
    "toggle": cmd_toggle,
}


def main(argv: list[str] | None = None) -> None:
    """Main entry point for tasktree CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        print(_COMMANDS[args.command](args))
    except (AppError, FileNotFoundError) as e:
        logger.error("Command %s failed: %s", args.command, e)
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
