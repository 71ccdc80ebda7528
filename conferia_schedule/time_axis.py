"""
Time-of-day and day axis helpers.

The schedule board stacks every day onto the same vertical time axis, so most
of these helpers throw away the calendar date (and zone) and only look at the
wall-clock time of each instant.
"""
from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

from .records import Record

# Shortest interval the board will scale to, in seconds (5 minutes)
MINIMUM_INTERVAL = 300
# Time gutter ticks grow in steps of this many seconds
TICK_STEP = 300
# Minimum pixel height of one tick in the time gutter
MINIMUM_TICK_HEIGHT = 25
DEFAULT_MINIMUM_CARD_HEIGHT = 75


def _instants(records: Iterable[Record]) -> List[datetime]:
    out: List[datetime] = []
    for r in records:
        out.append(r.date_start)
        out.append(r.date_end)
    return out


def time_of_day(value: datetime | time) -> time:
    """Wall-clock time of ``value`` with date, zone and sub-seconds dropped."""
    return time(value.hour, value.minute, value.second)


def _seconds_of_day(value: datetime | time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def earliest_time_of_day(records: Iterable[Record]) -> Optional[time]:
    """Earliest start or end time of day across all records, whatever the date."""
    times = [time_of_day(d) for d in _instants(records)]
    return min(times) if times else None


def latest_time_of_day(records: Iterable[Record]) -> Optional[time]:
    times = [time_of_day(d) for d in _instants(records)]
    return max(times) if times else None


def earliest_day(records: Iterable[Record]) -> Optional[datetime]:
    starts = [r.date_start for r in records]
    return min(starts) if starts else None


def latest_day(records: Iterable[Record]) -> Optional[datetime]:
    ends = [r.date_end for r in records]
    return max(ends) if ends else None


def day_count(records: Iterable[Record]) -> int:
    """
    Number of calendar days the board needs: from midnight of the earliest
    start to the latest end, rounded up, and at least up to the day of the
    latest start (see ``day_index``).
    """
    records = list(records)
    first = earliest_day(records)
    last = latest_day(records)
    if first is None or last is None:
        return 0
    # Compare wall-clock values in the zone of the earliest event so DST days
    # still count as one day each.
    if first.tzinfo is not None and last.tzinfo is not None:
        last = last.astimezone(first.tzinfo)
    midnight = datetime.combine(first.date(), time())
    span = last.replace(tzinfo=None) - midnight
    days = max(1, math.ceil(span / timedelta(days=1)))
    # A zero-length event at midnight still needs its own day
    last_start = max(day_index(r.date_start, first) for r in records)
    return max(days, last_start + 1)


def shortest_interval(records: Iterable[Record]) -> Optional[float]:
    """Shortest event duration in seconds (unclamped)."""
    durations = [(r.date_end - r.date_start).total_seconds() for r in records]
    return min(durations) if durations else None


def effective_interval(shortest: Optional[float]) -> float:
    """Clamp the shortest interval so zero-length events do not collapse rows."""
    if shortest is None:
        return MINIMUM_INTERVAL
    return max(MINIMUM_INTERVAL, shortest)


def time_offset(value: datetime | time, reference: datetime | time) -> int:
    """
    Seconds between two times of day, ignoring their dates and zones.

    ``time_offset(10:30 on Monday, 09:00 on Sunday) == 5400``.
    """
    return _seconds_of_day(value) - _seconds_of_day(reference)


def day_offset(value: datetime | date, reference: datetime | date) -> int:
    """Whole calendar days between the civil dates of two values."""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(reference, datetime):
        reference = reference.date()
    return (value - reference).days


def day_index(value: datetime, first: datetime) -> int:
    """
    Board day of ``value``: its calendar date in the zone of ``first``,
    counted from the date of ``first``.

    Rows may carry different UTC offsets, so every instant is read in one zone
    before its date is taken.
    """
    if value.tzinfo is not None and first.tzinfo is not None:
        value = value.astimezone(first.tzinfo)
    return day_offset(value, first)


def pixels_per_second(
    shortest: Optional[float],
    minimum_card_height: float = DEFAULT_MINIMUM_CARD_HEIGHT,
) -> float:
    """Vertical scale: the shortest event gets exactly ``minimum_card_height`` pixels."""
    if minimum_card_height <= 0:
        raise ValueError(f"minimum_card_height must be positive, got {minimum_card_height}")
    return minimum_card_height / effective_interval(shortest)


def tick_interval(
    shortest: Optional[float],
    minimum_card_height: float = DEFAULT_MINIMUM_CARD_HEIGHT,
    suggested: int = TICK_STEP,
    minimum_tick_height: float = MINIMUM_TICK_HEIGHT,
) -> int:
    """
    Pick the time gutter tick size in seconds: grow ``suggested`` in 5-minute
    steps until one tick is at least ``minimum_tick_height`` pixels tall.
    """
    if minimum_tick_height <= 0:
        raise ValueError(f"minimum_tick_height must be positive, got {minimum_tick_height}")
    if suggested <= 0:
        raise ValueError(f"suggested tick interval must be positive, got {suggested}")
    pps = pixels_per_second(shortest, minimum_card_height)
    interval = suggested
    while interval * pps < minimum_tick_height:
        interval += TICK_STEP
    return interval


def time_ticks(start: time, end: time, interval: int) -> List[time]:
    """Labels for the time gutter, one every ``interval`` seconds from ``start``."""
    span = time_offset(end, start)
    count = max(0, math.ceil(span / interval))
    base = datetime.combine(date.min, time_of_day(start))
    return [(base + timedelta(seconds=i * interval)).time() for i in range(count + 1)]
