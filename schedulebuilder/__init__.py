"""schedulebuilder - occurrence resolution and conflict detection for calendar events.

The public surface is a set of pure functions over immutable ``Event`` values:

- ``is_occurrence(event, day)``: does the event happen on a calendar date
- ``has_conflict(candidate, existing, exclude_id)``: would saving the candidate double-book
- ``occurs_in_slot(event, day, hour)``: does the event render in an hour cell
- ``layout_within_hour(event, hour)``: where inside the hour cell it renders

Nothing here holds state or performs I/O, so every function may be called from
any number of threads at once. The caller owns the event collection and is
responsible for serializing check-then-save against its own store.
"""

__version__ = "0.1.0"

from .conflicts import dates_overlap, find_conflicts, first_shared_date, has_conflict
from .exceptions import EventValidationError, RecordDecodeError, ScheduleError
from .models import (
    Event,
    EventBuilder,
    MonthlyRecurrence,
    NoRecurrence,
    RecurrenceType,
    WeeklyRecurrence,
    YearlyRecurrence,
    recurrence_from_fields,
    validate_event,
)
from .occurrences import events_in_slot, events_on_date, layout_within_hour, occurs_in_slot
from .overlap import times_overlap
from .recurrence import is_occurrence, occurrence_dates
from .records import event_from_record, event_to_record, events_from_records

__all__ = [
    "Event",
    "EventBuilder",
    "EventValidationError",
    "MonthlyRecurrence",
    "NoRecurrence",
    "RecordDecodeError",
    "RecurrenceType",
    "ScheduleError",
    "WeeklyRecurrence",
    "YearlyRecurrence",
    "dates_overlap",
    "event_from_record",
    "event_to_record",
    "events_from_records",
    "events_in_slot",
    "events_on_date",
    "find_conflicts",
    "first_shared_date",
    "has_conflict",
    "is_occurrence",
    "layout_within_hour",
    "occurrence_dates",
    "occurs_in_slot",
    "recurrence_from_fields",
    "times_overlap",
    "validate_event",
]
