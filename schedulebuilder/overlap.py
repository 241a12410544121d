"""Time-of-day interval overlap."""

from datetime import time


def times_overlap(start1: time, end1: time, start2: time, end2: time) -> bool:
    """Return True if ``[start1, end1)`` and ``[start2, end2)`` overlap.

    Intervals are half-open, so back-to-back intervals (one ends exactly when
    the other starts) do not overlap. The test is symmetric and works for any
    mutually comparable values (``time`` objects, fractional hours, zero-padded
    ``HH:MM`` strings).

    The all-day rule is not applied here; see ``conflicts.has_conflict``.
    """
    return not (end1 <= start2 or start1 >= end2)
