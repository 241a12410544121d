"""Conversion between stored/submitted event records and Event values.

Records use the JSON shape shared with the storage and transport layers:
camelCase keys, calendar dates as ``YYYY-MM-DD`` and times as 24-hour
``HH:MM``. Older records written by earlier versions of the schedule form are
accepted too (``_id`` for ``id``, ``course`` for ``title``, ``date`` for
``anchorDate``).

Decoding is lenient by default. Stored data has passed validation once, so
optional fields that cannot be parsed are dropped with a warning and the
engine's fail-safe defaults take over. Pass ``strict=True`` for user input
that must satisfy every rule before it is scheduled.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from typing import Any, Optional

from .exceptions import EventValidationError, RecordDecodeError
from .models import (
    Event,
    NoRecurrence,
    RecurrenceType,
    WeeklyRecurrence,
    recurrence_from_fields,
    validate_event,
)

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

EventRecord = dict[str, Any]


def parse_date(value: Any) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` string (or pass through a date); None if unusable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip()[:10], DATE_FORMAT).date()
    except ValueError:
        return None


def parse_time(value: Any) -> Optional[time]:
    """Parse an ``HH:MM`` 24-hour string (or pass through a time); None if unusable."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip()[:5], TIME_FORMAT).time()
    except ValueError:
        return None


def format_time(value: time) -> str:
    """Format a time for display as ``h:MM AM``/``h:MM PM`` (``13:05`` -> ``1:05 PM``)."""
    suffix = "PM" if value.hour >= 12 else "AM"
    hour12 = value.hour % 12 or 12
    return f"{hour12}:{value.minute:02d} {suffix}"


def _first_present(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if record.get(key) not in (None, ""):
            return record[key]
    return None


def _decode_time(record: Mapping[str, Any], key: str, event_id: str) -> Optional[time]:
    raw = record.get(key)
    parsed = parse_time(raw)
    if parsed is None and raw not in (None, ""):
        logger.warning("Event %s: unparseable %s %r; treating as missing", event_id, key, raw)
    return parsed


def _decode_excluded_dates(raw: Any, event_id: str) -> frozenset[date]:
    if raw is None:
        return frozenset()
    if isinstance(raw, (str, date)):
        raw = [raw]
    excluded = set()
    for item in raw:
        parsed = parse_date(item)
        if parsed is None:
            logger.warning("Event %s: failed to parse excluded date %r; skipping", event_id, item)
            continue
        excluded.add(parsed)
    return frozenset(excluded)


def _decode_recurrence(record: Mapping[str, Any], event_id: str, strict: bool) -> Any:
    recurring = record.get("recurring")
    if not isinstance(recurring, bool):
        recurring = False
    recurrence_type = record.get("recurrenceType") or RecurrenceType.WEEKLY.value
    repeat_limited = bool(record.get("repeatLimited", False))

    repeat_weeks: Optional[int] = None
    raw_weeks = record.get("repeatWeeks")
    if raw_weeks not in (None, ""):
        try:
            repeat_weeks = int(raw_weeks)
        except (TypeError, ValueError):
            if strict:
                raise EventValidationError(
                    "Repeat weeks must be a whole number",
                    field_name="repeat_weeks",
                    field_value=raw_weeks,
                ) from None
            repeat_weeks = None

    try:
        return recurrence_from_fields(recurring, recurrence_type, repeat_limited, repeat_weeks)
    except EventValidationError:
        if strict:
            raise
        # Unlimited weekly is a superset of every limited weekly rule.
        if str(recurrence_type).lower() == RecurrenceType.WEEKLY.value:
            logger.warning(
                "Event %s: invalid weekly repeat limit %r; treating as unlimited",
                event_id,
                raw_weeks,
            )
            return WeeklyRecurrence()
        logger.warning(
            "Event %s: unsupported recurrence type %r; treating as non-recurring",
            event_id,
            recurrence_type,
        )
        return NoRecurrence()


def event_from_record(record: Mapping[str, Any], strict: bool = False) -> Event:
    """Decode one record into an Event.

    Args:
        record: Mapping in the storage/transport shape
        strict: Also enforce every business rule (for user-submitted records)

    Returns:
        Decoded Event

    Raises:
        RecordDecodeError: If the record is not a mapping or has no usable anchor date
        EventValidationError: In strict mode, if any rule is broken
    """
    if not isinstance(record, Mapping):
        raise RecordDecodeError("Event record must be a mapping", field_value=type(record).__name__)

    raw_id = _first_present(record, "id", "_id")
    event_id = str(raw_id) if raw_id is not None else None

    raw_anchor = _first_present(record, "anchorDate", "date")
    anchor_date = parse_date(raw_anchor)
    if anchor_date is None:
        raise RecordDecodeError(
            "Event record has no valid date", field_name="anchor_date", field_value=raw_anchor
        )
    label = event_id or "<new>"

    raw_end = record.get("endDate")
    end_date = parse_date(raw_end)
    if end_date is None and raw_end not in (None, ""):
        if strict:
            raise EventValidationError(
                "End date is not a valid date", field_name="end_date", field_value=raw_end
            )
        logger.warning("Event %s: unparseable endDate %r; treating as single-day", label, raw_end)

    start_time = _decode_time(record, "startTime", label)
    end_time = _decode_time(record, "endTime", label)
    all_day = record.get("allDay") is True

    title = _first_present(record, "title", "course")
    fields: dict[str, Any] = {
        "title": str(title).strip() if title is not None else "",
        "anchor_date": anchor_date,
        "end_date": end_date,
        "start_time": start_time,
        "end_time": end_time,
        "all_day": all_day,
        "recurrence": _decode_recurrence(record, label, strict),
        "excluded_dates": _decode_excluded_dates(record.get("excludedDates"), label),
        "color": str(record["color"]) if record.get("color") is not None else None,
        "description": str(record.get("description") or ""),
    }
    if event_id is not None:
        fields["id"] = event_id

    event = Event(**fields)
    if strict:
        validate_event(event)
    return event


def events_from_records(records: Iterable[Mapping[str, Any]], strict: bool = False) -> list[Event]:
    """Decode many records.

    In lenient mode records that cannot be decoded at all are skipped with a
    warning; in strict mode the first failure is raised.
    """
    events: list[Event] = []
    for index, record in enumerate(records):
        try:
            events.append(event_from_record(record, strict=strict))
        except EventValidationError as e:
            if strict:
                raise
            logger.warning("Skipping event record #%d: %s", index, e)
    logger.debug("Decoded %d events", len(events))
    return events


def event_to_record(event: Event) -> EventRecord:
    """Encode an Event in the storage/transport shape."""
    return {
        "id": event.id,
        "title": event.title,
        "anchorDate": event.anchor_date.isoformat(),
        "endDate": event.end_date.isoformat() if event.end_date else None,
        "startTime": event.start_time.strftime(TIME_FORMAT) if event.start_time else None,
        "endTime": event.end_time.strftime(TIME_FORMAT) if event.end_time else None,
        "allDay": event.all_day,
        "recurring": event.recurring,
        "recurrenceType": event.recurrence_type.value,
        "repeatLimited": event.repeat_limited,
        "repeatWeeks": event.repeat_weeks,
        "excludedDates": sorted(d.isoformat() for d in event.excluded_dates),
        "color": event.color,
        "description": event.description,
    }
