"""Calendar-date arithmetic for schedulebuilder.

All helpers operate on time-zone-less ``datetime.date`` values. No instant or
clock arithmetic happens here, so daylight-saving changes and host locale
cannot shift a date by one day.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from datetime import date, timedelta
from typing import Optional


def day_difference(a: date, b: date) -> int:
    """Return ``b - a`` in whole days (negative when ``b`` is before ``a``)."""
    return (b - a).days


def day_of_week(d: date) -> int:
    """Return the weekday with Monday as 0 and Sunday as 6."""
    return d.weekday()


def day_of_month(d: date) -> int:
    return d.day


def month_and_day(d: date) -> tuple[int, int]:
    return d.month, d.day


def in_range(d: date, lo: date, hi: date) -> bool:
    """Return True when ``lo <= d <= hi`` (inclusive on both ends)."""
    return lo <= d <= hi


def add_days(d: date, days: int) -> date:
    """Shift a date by ``days``, saturating at ``date.min`` / ``date.max``."""
    try:
        return d + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def safe_date(year: int, month: int, day: int) -> Optional[date]:
    """Build a date, or return None when the day does not exist in that month.

    ``safe_date(2024, 2, 30)`` and ``safe_date(2023, 2, 29)`` both return None.
    Years outside the range supported by ``datetime.date`` also return None.
    """
    if not date.min.year <= year <= date.max.year:
        return None
    if day < 1 or day > calendar.monthrange(year, month)[1]:
        return None
    return date(year, month, day)


def shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    """Move ``(year, month)`` by a signed number of months."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def iter_dates(lo: date, hi: date) -> Iterator[date]:
    """Yield every date from ``lo`` to ``hi`` inclusive (nothing if ``hi < lo``)."""
    current = lo
    while current <= hi:
        yield current
        if current == hi:
            return
        current += timedelta(days=1)
