"""Calendar-grid placement of events.

Answers which events render in a given date/hour cell of a day or week grid
and where inside the hour cell they sit. Geometry is expressed in percent of
the cell height so any renderer can scale it.
"""

import logging
from collections.abc import Iterable
from datetime import date, time

from .models import Event
from .recurrence import is_occurrence

logger = logging.getLogger(__name__)

# Events without a usable time range (all-day, legacy records) render here.
FIRST_SLOT_HOUR = 0
DEFAULT_MIN_EVENT_HEIGHT_PERCENT = 10.0


def _fractional_hour(t: time) -> float:
    return t.hour + t.minute / 60


def occurs_in_slot(event: Event, day: date, hour: int) -> bool:
    """Return True if ``event`` renders in the ``hour`` cell of ``day``.

    A timed event renders in each hour cell whose top edge falls inside its
    ``[start, end)`` range, i.e. ``start <= hour < end`` in fractional hours.
    All-day events and events without a usable time range render only in the
    first slot.
    """
    if not is_occurrence(event, day):
        return False

    time_range = event.time_range
    if event.all_day or time_range is None:
        if not event.all_day:
            logger.debug("Event %s has no usable times; placing it in the first slot", event.id)
        return hour == FIRST_SLOT_HOUR

    start, end = (_fractional_hour(t) for t in time_range)
    return start <= hour < end


def layout_within_hour(
    event: Event,
    hour: int,
    min_height_percent: float = DEFAULT_MIN_EVENT_HEIGHT_PERCENT,
) -> tuple[float, float]:
    """Compute ``(top_percent, height_percent)`` of the event inside an hour cell.

    The hour holding the start is offset by ``start_minute / 60 * 100`` and the
    hour holding the end is cut at ``end_minute / 60 * 100``; hours in between
    are filled. Heights below ``min_height_percent`` are raised to it and the
    box is moved up if needed to stay inside the cell. Hours the event does not
    touch give ``(0.0, 0.0)``.

    Args:
        event: Event to place
        hour: Hour cell (0-23)
        min_height_percent: Smallest visible height

    Returns:
        Tuple of (top_percent, height_percent)
    """
    min_height = min(max(min_height_percent, 0.0), 100.0)

    time_range = event.time_range
    if event.all_day or time_range is None:
        return (0.0, 100.0) if hour == FIRST_SLOT_HOUR else (0.0, 0.0)

    start, end = (_fractional_hour(t) for t in time_range)
    if not (start < hour + 1 and end > hour):
        return 0.0, 0.0

    top = max(start - hour, 0.0) * 100
    bottom = min(end - hour, 1.0) * 100
    height = max(bottom - top, min_height)
    top = min(top, 100.0 - height)
    return top, height


def events_on_date(events: Iterable[Event], day: date) -> list[Event]:
    """Return the events occurring on ``day``, in input order."""
    return [event for event in tuple(events) if is_occurrence(event, day)]


def events_in_slot(events: Iterable[Event], day: date, hour: int) -> list[Event]:
    """Return the events rendering in the ``hour`` cell of ``day``, in input order."""
    return [event for event in tuple(events) if occurs_in_slot(event, day, hour)]
