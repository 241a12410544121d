"""Double-booking detection between a candidate event and an existing schedule.

Two events conflict when their occurrence sets share at least one date and,
on that shared date, their times collide:

- an all-day event on either side collides with anything
- two timed events collide when their half-open time ranges overlap
- an event with missing or unordered times is assumed to collide, so
  ambiguous legacy data blocks a booking instead of silently allowing it

The date test is exact for every recurrence combination. When one side has a
finite occurrence set its dates are enumerated and checked against the other
side. When both sides recur forever, the sparser pattern is enumerated over
one full period of the combined pattern, which is enough to find a shared
date if one exists anywhere.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import date
from itertools import chain
from typing import Optional

from .date_math import add_days
from .models import Event, MonthlyRecurrence, WeeklyRecurrence, YearlyRecurrence
from .overlap import times_overlap
from .recurrence import (
    DAYS_PER_WEEK,
    is_occurrence,
    last_occurrence_date,
    occurrence_dates,
)

logger = logging.getLogger(__name__)

# The Gregorian calendar repeats every 400 years; 146097 is also a multiple of 7.
GREGORIAN_CYCLE_DAYS = 146097


def has_conflict(
    candidate: Event,
    existing: Iterable[Event],
    exclude_id: Optional[str] = None,
) -> bool:
    """Return True if ``candidate`` collides with any event in ``existing``.

    Args:
        candidate: Event about to be created or saved
        existing: Current schedule (treated as a snapshot)
        exclude_id: Id to skip, typically the id of the event being edited so
            it does not conflict with its own previous version

    Returns:
        True on the first conflicting event, False if there is none
    """
    return next(_iter_conflicts(candidate, existing, exclude_id), None) is not None


def find_conflicts(
    candidate: Event,
    existing: Iterable[Event],
    exclude_id: Optional[str] = None,
) -> list[Event]:
    """Return every event in ``existing`` that collides with ``candidate``, in input order."""
    return list(_iter_conflicts(candidate, existing, exclude_id))


def _iter_conflicts(
    candidate: Event,
    existing: Iterable[Event],
    exclude_id: Optional[str],
) -> Iterator[Event]:
    for other in tuple(existing):
        if exclude_id is not None and other.id == exclude_id:
            continue
        # Order of the two tests does not affect the result.
        if not times_collide(candidate, other):
            continue
        shared = first_shared_date(candidate, other)
        if shared is None:
            continue
        logger.debug(
            "Conflict: %r (%s) collides with %r (%s) on %s",
            candidate.title,
            candidate.id,
            other.title,
            other.id,
            shared,
        )
        yield other


def times_collide(a: Event, b: Event) -> bool:
    """Apply the time-of-day part of the conflict rule to two events."""
    if a.all_day or b.all_day:
        return True
    a_range, b_range = a.time_range, b.time_range
    if a_range is None or b_range is None:
        logger.debug(
            "Missing or unordered times on %s or %s; assuming a collision", a.id, b.id
        )
        return True
    return times_overlap(*a_range, *b_range)


def dates_overlap(a: Event, b: Event) -> bool:
    """Return True if the two events occur on at least one common date."""
    return first_shared_date(a, b) is not None


def first_shared_date(a: Event, b: Event) -> Optional[date]:
    """Return a date on which both events occur, or None if there is none.

    For finite events this is the earliest shared date; for two unbounded
    recurring events it is the earliest one within the scanned period.
    """
    # Only bounded events have a last occurrence date.
    for finite, other in ((a, b), (b, a)):
        last = last_occurrence_date(finite)
        if last is not None:
            return _first_match(finite, other, finite.anchor_date, last)

    sparse, dense = sorted((a, b), key=_density)
    lo = _scan_start(a, b)
    both_weekly = isinstance(a.recurrence, WeeklyRecurrence) and isinstance(
        b.recurrence, WeeklyRecurrence
    )
    period = DAYS_PER_WEEK if both_weekly else GREGORIAN_CYCLE_DAYS
    latest_excluded = max(chain(a.excluded_dates, b.excluded_dates), default=lo)
    hi = add_days(
        max(lo, latest_excluded), period + max(a.duration_days, b.duration_days)
    )
    return _first_match(sparse, dense, lo, hi)


def _first_match(source: Event, other: Event, lo: date, hi: date) -> Optional[date]:
    for day in occurrence_dates(source, lo, hi):
        if is_occurrence(other, day):
            return day
    return None


def _density(event: Event) -> int:
    rule = event.recurrence
    if isinstance(rule, YearlyRecurrence):
        return 0
    if isinstance(rule, MonthlyRecurrence):
        return 1
    return 2


def _scan_start(a: Event, b: Event) -> date:
    # Weekly rules start at their anchor; monthly and yearly rules match in
    # both directions, so any date works as the start of a full period.
    weekly_anchors = [
        e.anchor_date for e in (a, b) if isinstance(e.recurrence, WeeklyRecurrence)
    ]
    if weekly_anchors:
        return max(weekly_anchors)
    return min(a.anchor_date, b.anchor_date)
