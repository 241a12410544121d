"""Command-line entry for schedulebuilder.

Reads an events file (YAML or JSON list of event records) and answers the
engine's questions for it: which events fall on a date, whether a candidate
event would double-book, and how a day's hour grid is laid out.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, NoReturn, Optional

import yaml

from .conflicts import find_conflicts
from .config_loader import Config, load_full_config
from .exceptions import EventValidationError
from .lite_logging import configure_lite_logging
from .models import Event
from .occurrences import events_in_slot, events_on_date, layout_within_hour
from .records import event_from_record, events_from_records, format_time, parse_date

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFLICT = 1
EXIT_INVALID = 2


def _date_arg(value: str) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}; expected YYYY-MM-DD")
    return parsed


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the schedulebuilder CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="schedulebuilder",
        description="Schedule Builder - event occurrences and double-booking checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m schedulebuilder day --events events.yaml --date 2024-01-15
  python -m schedulebuilder check --events events.yaml --candidate new.yaml
  python -m schedulebuilder grid --events events.yaml --date 2024-01-15
        """,
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Config file (default: ./schedulebuilder.yaml)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    day = subparsers.add_parser("day", help="List the events occurring on a date")
    day.add_argument("--events", metavar="FILE", help="Events file (YAML or JSON list)")
    day.add_argument("--date", required=True, type=_date_arg, metavar="YYYY-MM-DD")

    check = subparsers.add_parser("check", help="Check a candidate event for conflicts")
    check.add_argument("--events", metavar="FILE", help="Events file (YAML or JSON list)")
    check.add_argument(
        "--candidate", required=True, metavar="FILE", help="Candidate event record (YAML or JSON)"
    )
    check.add_argument(
        "--exclude-id",
        metavar="ID",
        help="Ignore this event id (the event being edited)",
    )

    grid = subparsers.add_parser("grid", help="Show the hour grid of a date")
    grid.add_argument("--events", metavar="FILE", help="Events file (YAML or JSON list)")
    grid.add_argument("--date", required=True, type=_date_arg, metavar="YYYY-MM-DD")

    return parser


def _read_yaml(path: str) -> Any:
    return yaml.safe_load(Path(path).read_text(encoding="utf-8"))


def load_events_file(path: str) -> list[Event]:
    """Load and leniently decode the events stored in ``path``.

    Raises:
        ValueError: If the file does not hold a list of records
    """
    raw = _read_yaml(path)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"Events file {path} must contain a list of event records")
    events = events_from_records(raw)
    logger.info("Loaded %d events from %s", len(events), path)
    return events


def _describe(event: Event) -> str:
    if event.all_day:
        when = "all day"
    elif event.start_time is not None and event.end_time is not None:
        when = f"{format_time(event.start_time)} - {format_time(event.end_time)}"
    else:
        when = "time not set"
    repeats = f" (repeats {event.recurrence_type.value})" if event.recurring else ""
    return f"{event.title} [{event.id}] {when}{repeats}"


def _cmd_day(events: list[Event], day: date) -> int:
    matching = events_on_date(events, day)
    if not matching:
        print(f"No events on {day.isoformat()}")
        return EXIT_OK
    print(f"{len(matching)} event(s) on {day.isoformat()}:")
    for event in matching:
        print(f"  {_describe(event)}")
    return EXIT_OK


def _cmd_check(events: list[Event], candidate_path: str, exclude_id: Optional[str]) -> int:
    try:
        candidate = event_from_record(_read_yaml(candidate_path), strict=True)
    except EventValidationError as e:
        print(f"Invalid event: {e}", file=sys.stderr)
        for message in e.validation_errors:
            print(f"  - {message}", file=sys.stderr)
        return EXIT_INVALID

    conflicts = find_conflicts(candidate, events, exclude_id=exclude_id)
    if not conflicts:
        print(f"No conflicts for {candidate.title}")
        return EXIT_OK
    print(f"Schedule conflict detected for {candidate.title}:")
    for other in conflicts:
        print(f"  {_describe(other)}")
    return EXIT_CONFLICT


def _cmd_grid(events: list[Event], day: date, config: Config) -> int:
    print(f"Hour grid for {day.isoformat()}:")
    for hour in range(24):
        for event in events_in_slot(events, day, hour):
            top, height = layout_within_hour(event, hour, config.min_event_height_percent)
            print(f"  {hour:02d}:00  {event.title}  top={top:.1f}% height={height:.1f}%")
    return EXIT_OK


def run(argv: Optional[list[str]] = None) -> int:
    """Run the CLI and return its exit status."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_full_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Failed to load config: {e}", file=sys.stderr)
        return EXIT_INVALID

    configure_lite_logging(debug_mode=args.debug or config.log_level == "DEBUG")

    events_path = args.events or config.events_file
    if not events_path:
        print("No events file given (use --events or events_file in the config)", file=sys.stderr)
        return EXIT_INVALID

    try:
        events = load_events_file(events_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Failed to load events: {e}", file=sys.stderr)
        return EXIT_INVALID

    if args.command == "day":
        return _cmd_day(events, args.date)
    if args.command == "check":
        try:
            return _cmd_check(events, args.candidate, args.exclude_id)
        except (OSError, yaml.YAMLError) as e:
            print(f"Failed to load candidate: {e}", file=sys.stderr)
            return EXIT_INVALID
    return _cmd_grid(events, args.date, config)


def main() -> NoReturn:
    """Run the schedulebuilder CLI."""
    sys.exit(run())


if __name__ == "__main__":
    main()
