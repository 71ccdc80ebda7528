"""
Time conflicts between events and the room columns they require.

A room only gets its own column on a day if one of its events overlaps some
other event that day. Rooms without conflicts (and events without a room)
are drawn across the full width of the day.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Sequence

from .records import Record
from .time_axis import day_count, day_index, earliest_day


def intervals_conflict(
    start: datetime,
    end: datetime,
    other_start: datetime,
    other_end: datetime,
) -> bool:
    """
    True if the interval ``[start, end)`` conflicts with ``[other_start, other_end)``.

    Intervals that only touch (one ends when the other starts) do not conflict.
    """
    if start >= other_start and end <= other_end:
        return True  # contained in the other
    if start < other_start and end > other_end:
        return True  # contains the other
    if start < other_start and end > other_start:
        return True  # overlaps the other's start
    if start < other_end and end > other_end:
        return True  # overlaps the other's end
    return False


def has_conflict(record: Record, candidates: Sequence[Record]) -> bool:
    """
    True if ``record`` overlaps at least one *other* record in ``candidates``.

    ``candidates`` may contain ``record`` itself (matched by identity); it is
    then not counted as its own conflict.
    """
    includes_self = any(c is record for c in candidates)
    matches = sum(
        1
        for c in candidates
        if intervals_conflict(record.date_start, record.date_end, c.date_start, c.date_end)
    )
    return matches > 1 if includes_self else matches > 0


def records_on_day(records: Sequence[Record], day: int) -> List[Record]:
    """Records starting on board day ``day`` (0 = earliest day in ``records``)."""
    first = earliest_day(records)
    if first is None:
        return []
    return [r for r in records if day_index(r.date_start, first) == day]


def _has_location(record: Record) -> bool:
    return bool(record.location and record.location.strip())


def rooms_per_day(records: Sequence[Record]) -> Dict[int, List[str]]:
    """
    For each day index, the sorted rooms that need a dedicated column.

    A day without conflicts maps to an empty list (drawn as one column).
    """
    table: Dict[int, List[str]] = {}
    for day in range(day_count(records)):
        todays = records_on_day(records, day)
        rooms = {
            r.location
            for r in todays
            if _has_location(r) and has_conflict(r, todays)
        }
        table[day] = sorted(rooms)
    return table


# ──────────────────────────────────────────────────────────────────
#  Placement primitives
# ──────────────────────────────────────────────────────────────────

def columns_for_day(rooms: Sequence[str]) -> int:
    """Column count of a day; a day without room columns still has one."""
    return max(1, len(rooms))


def day_column_start(table: Dict[int, List[str]], day: int) -> int:
    """Horizontal offset, in columns, of the first column of ``day``."""
    return sum(columns_for_day(table.get(d, [])) for d in range(day))


def column_in_day(record: Record, rooms: Sequence[str], conflict: bool) -> int:
    """Column of ``record`` inside its day; 0 when it spans the whole day."""
    if not conflict or not _has_location(record) or record.location not in rooms:
        return 0
    return list(rooms).index(record.location)


def column_span(record: Record, rooms: Sequence[str], conflict: bool) -> int:
    """Conflicting events with a room get one column, all others the full day."""
    if conflict and _has_location(record):
        return 1
    return columns_for_day(rooms)
