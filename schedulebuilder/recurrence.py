"""Occurrence resolution for single-day, multi-day and recurring events.

Recurrence is resolved on demand for one candidate date at a time instead of
being expanded into a list of future occurrences: calendar views ask about
arbitrary bounded date ranges, and an unlimited recurring event has no finite
occurrence list to expand.
"""

import logging
from collections.abc import Iterator
from datetime import date
from typing import Optional

from .date_math import (
    add_days,
    day_difference,
    day_of_month,
    day_of_week,
    in_range,
    iter_dates,
    month_and_day,
    safe_date,
    shift_month,
)
from .models import (
    Event,
    MonthlyRecurrence,
    NoRecurrence,
    WeeklyRecurrence,
    YearlyRecurrence,
)

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


def is_occurrence(event: Event, candidate: date) -> bool:
    """Return True if ``event`` occurs on the calendar date ``candidate``.

    Excluded dates always win. Otherwise the answer depends on the recurrence:

    - none: the anchor date, or any date of the multi-day span
    - weekly: the anchor weekday on or after the anchor, limited to
      week offsets below ``repeat_weeks`` when set (spill days included);
      multi-day spans are tested against every weekly window that can
      reach the candidate
    - monthly: the anchor's day-of-month in every month
    - yearly: the anchor's month and day in every year

    Months (or years) in which the anchor day does not exist, such as the 31st
    in April or February 29 in a common year, have no occurrence.

    Args:
        event: Event to test
        candidate: Calendar date to test

    Returns:
        True when the event is active on that date
    """
    if candidate in event.excluded_dates:
        return False

    rule = event.recurrence
    if isinstance(rule, WeeklyRecurrence):
        return _matches_weekly(event, rule, candidate)
    if isinstance(rule, MonthlyRecurrence):
        return _matches_monthly(event, candidate)
    if isinstance(rule, YearlyRecurrence):
        return _matches_yearly(event, candidate)
    return _matches_once(event, candidate)


def _matches_once(event: Event, candidate: date) -> bool:
    if event.is_multi_day:
        return in_range(candidate, event.anchor_date, event.last_date)
    return candidate == event.anchor_date


def _matches_weekly(event: Event, rule: WeeklyRecurrence, candidate: date) -> bool:
    anchor = event.anchor_date
    offset = day_difference(anchor, candidate)
    if offset < 0:
        return False

    week_offset = offset // DAYS_PER_WEEK
    # The limit bounds week offsets, spill days included.
    if rule.repeat_weeks is not None and week_offset >= rule.repeat_weeks:
        return False

    if not event.is_multi_day:
        return day_of_week(candidate) == day_of_week(anchor)

    # A span can reach past the end of its own week, so the window that covers
    # the candidate may have started in an earlier week.
    duration = event.duration_days
    first_week = max(0, -(-(offset - duration) // DAYS_PER_WEEK))
    for week in range(first_week, week_offset + 1):
        occ_start = add_days(anchor, DAYS_PER_WEEK * week)
        if in_range(candidate, occ_start, add_days(occ_start, duration)):
            return True
    return False


def _matches_monthly(event: Event, candidate: date) -> bool:
    anchor_day = day_of_month(event.anchor_date)
    if not event.is_multi_day:
        return day_of_month(candidate) == anchor_day

    duration = event.duration_days
    # Windows anchored in earlier months can spill into the candidate's month.
    for months_back in range(duration // 28 + 2):
        year, month = shift_month(candidate.year, candidate.month, -months_back)
        occ_start = safe_date(year, month, anchor_day)
        if occ_start is None:
            continue
        if in_range(candidate, occ_start, add_days(occ_start, duration)):
            return True
    return False


def _matches_yearly(event: Event, candidate: date) -> bool:
    anchor_month, anchor_day = month_and_day(event.anchor_date)
    if not event.is_multi_day:
        return month_and_day(candidate) == (anchor_month, anchor_day)

    duration = event.duration_days
    for years_back in range(duration // 365 + 2):
        occ_start = safe_date(candidate.year - years_back, anchor_month, anchor_day)
        if occ_start is None:
            continue
        if in_range(candidate, occ_start, add_days(occ_start, duration)):
            return True
    return False


def is_bounded(event: Event) -> bool:
    """True when the event has a finite set of occurrence dates."""
    rule = event.recurrence
    if isinstance(rule, NoRecurrence):
        return True
    return isinstance(rule, WeeklyRecurrence) and rule.repeat_weeks is not None


def last_occurrence_date(event: Event) -> Optional[date]:
    """Return the last date of the last occurrence, or None if unbounded."""
    rule = event.recurrence
    if isinstance(rule, NoRecurrence):
        return event.last_date
    if isinstance(rule, WeeklyRecurrence) and rule.repeat_weeks is not None:
        last_start = add_days(event.anchor_date, DAYS_PER_WEEK * (rule.repeat_weeks - 1))
        return min(add_days(last_start, event.duration_days), _weekly_limit_end(event, rule))
    return None


def _weekly_limit_end(event: Event, rule: WeeklyRecurrence) -> date:
    """Last date of week offset ``repeat_weeks - 1`` (``date.max`` when unlimited)."""
    if rule.repeat_weeks is None:
        return date.max
    return add_days(event.anchor_date, DAYS_PER_WEEK * rule.repeat_weeks - 1)


def iter_occurrence_windows(event: Event, lo: date, hi: date) -> Iterator[tuple[date, date]]:
    """Yield ``(first_date, last_date)`` of each occurrence touching ``[lo, hi]``.

    Windows are yielded in ascending order of their first date. Excluded dates
    are not applied here; they only remove single dates from a window, which
    ``occurrence_dates`` takes care of.
    """
    if hi < lo:
        return

    rule = event.recurrence
    duration = event.duration_days
    anchor = event.anchor_date

    if isinstance(rule, NoRecurrence):
        if anchor <= hi and event.last_date >= lo:
            yield anchor, event.last_date
        return

    if isinstance(rule, WeeklyRecurrence):
        lead = day_difference(anchor, lo) - duration
        week = max(0, -(-lead // DAYS_PER_WEEK))
        limit_end = _weekly_limit_end(event, rule)
        while rule.repeat_weeks is None or week < rule.repeat_weeks:
            occ_start = add_days(anchor, DAYS_PER_WEEK * week)
            if occ_start > hi or occ_start == date.max:
                return
            yield occ_start, min(add_days(occ_start, duration), limit_end)
            week += 1
        return

    if isinstance(rule, MonthlyRecurrence):
        anchor_day = day_of_month(anchor)
        year, month = shift_month(lo.year, lo.month, -(duration // 28 + 1))
        while (year, month) <= (hi.year, hi.month):
            occ_start = safe_date(year, month, anchor_day)
            if occ_start is not None and occ_start <= hi:
                occ_end = add_days(occ_start, duration)
                if occ_end >= lo:
                    yield occ_start, occ_end
            year, month = shift_month(year, month, 1)
        return

    if isinstance(rule, YearlyRecurrence):
        anchor_month, anchor_day = month_and_day(anchor)
        for year in range(lo.year - (duration // 365 + 1), hi.year + 1):
            occ_start = safe_date(year, anchor_month, anchor_day)
            if occ_start is None or occ_start > hi:
                continue
            occ_end = add_days(occ_start, duration)
            if occ_end >= lo:
                yield occ_start, occ_end
        return

    logger.warning("Unknown recurrence rule %r on event %s", rule, event.id)


def occurrence_dates(event: Event, start: date, end: date) -> Iterator[date]:
    """Yield every date in ``[start, end]`` on which ``event`` occurs, ascending.

    Dates covered by more than one occurrence window (long weekly spans) are
    yielded once. Excluded dates are skipped.
    """
    next_day = start
    for window_start, window_end in iter_occurrence_windows(event, start, end):
        lo = max(window_start, next_day)
        hi = min(window_end, end)
        for day in iter_dates(lo, hi):
            if day not in event.excluded_dates:
                yield day
        if hi >= next_day:
            next_day = add_days(hi, 1)
