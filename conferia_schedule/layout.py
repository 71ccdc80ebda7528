"""
Lay out a set of records on the schedule board.

``build_board`` turns the visible records into everything a renderer needs:
the time and day axes, the room columns per day, and one ``Placement`` per
record with its grid position and pixel box. Call it again whenever the
visible records change; it keeps no state.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Dict, List, Optional, Sequence

from .conflicts import (
    column_in_day,
    column_span,
    columns_for_day,
    day_column_start,
    has_conflict,
    records_on_day,
    rooms_per_day,
)
from .records import Record
from .time_axis import (
    DEFAULT_MINIMUM_CARD_HEIGHT,
    day_count,
    day_index,
    earliest_day,
    earliest_time_of_day,
    effective_interval,
    latest_time_of_day,
    pixels_per_second,
    shortest_interval,
    tick_interval,
    time_offset,
    time_ticks,
)

DEFAULT_CARD_PADDING = 10
DEFAULT_COLUMN_WIDTH = 250


@dataclass
class LayoutOptions:
    """Board settings; the defaults match the stock board."""

    minimum_card_height: float = DEFAULT_MINIMUM_CARD_HEIGHT
    event_card_padding: float = DEFAULT_CARD_PADDING
    column_width: float = DEFAULT_COLUMN_WIDTH
    # Column zoom; never below 100%
    column_scale_factor: float = 1.0
    # Fixed grid line interval in seconds, e.g. 900 for 15 minutes
    time_grid_seconds: Optional[int] = None

    def __post_init__(self):
        for name in ("minimum_card_height", "column_width"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.time_grid_seconds is not None and self.time_grid_seconds <= 0:
            raise ValueError(f"time_grid_seconds must be positive, got {self.time_grid_seconds}")
        if self.column_scale_factor < 1:
            self.column_scale_factor = 1.0

    @property
    def scaled_column_width(self) -> float:
        return self.column_width * self.column_scale_factor


@dataclass
class Box:
    top: float
    left: float
    width: float
    height: float


@dataclass
class Placement:
    record: Record
    day_offset: int
    time_offset: int
    duration: int
    has_conflict: bool
    # Column inside the day, and first column of the day on the whole board
    column_offset: int
    day_column: int
    column_span: int
    z_index: int
    box: Box


@dataclass
class Board:
    earliest_time: Optional[time] = None
    latest_time: Optional[time] = None
    earliest_day: Optional[date] = None
    day_count: int = 0
    shortest_interval: float = 0
    pixels_per_second: float = 0
    grid_interval: float = 0
    tick_interval: int = 0
    rooms_per_day: Dict[int, List[str]] = field(default_factory=dict)
    day_columns: List[int] = field(default_factory=list)
    placements: List[Placement] = field(default_factory=list)

    @property
    def total_columns(self) -> int:
        return sum(self.day_columns)

    def ticks(self) -> List[time]:
        """Time gutter labels from the earliest to the latest time of day."""
        if self.earliest_time is None or self.latest_time is None:
            return []
        return time_ticks(self.earliest_time, self.latest_time, self.tick_interval)


def build_board(records: Sequence[Record], options: LayoutOptions | None = None) -> Board:
    """Compute axes, room columns and placements for ``records``."""
    opt = options or LayoutOptions()
    records = list(records)
    if not records:
        return Board()

    first_time = earliest_time_of_day(records)
    first_day = earliest_day(records)
    shortest = effective_interval(shortest_interval(records))
    pps = pixels_per_second(shortest, opt.minimum_card_height)
    table = rooms_per_day(records)

    board = Board(
        earliest_time=first_time,
        latest_time=latest_time_of_day(records),
        earliest_day=first_day.date(),
        day_count=day_count(records),
        shortest_interval=shortest,
        pixels_per_second=pps,
        grid_interval=opt.time_grid_seconds or shortest,
        tick_interval=tick_interval(shortest, opt.minimum_card_height),
        rooms_per_day=table,
        day_columns=[columns_for_day(table[d]) for d in sorted(table)],
    )

    # Conflicts are checked within the record's own day, like the room table.
    by_day: Dict[int, List[Record]] = {}
    for r in records:
        d = day_index(r.date_start, first_day)
        if d not in by_day:
            by_day[d] = records_on_day(records, d)

    pad = opt.event_card_padding
    col_width = opt.scaled_column_width
    for r in records:
        d = day_index(r.date_start, first_day)
        rooms = table.get(d, [])
        conflict = has_conflict(r, by_day[d])
        first_column = day_column_start(table, d)
        column = column_in_day(r, rooms, conflict)
        span = column_span(r, rooms, conflict)
        offset = time_offset(r.date_start, first_time)
        duration = time_offset(r.date_end, r.date_start)

        box = Box(
            top=offset * pps + pad,
            left=col_width * (first_column + column) + pad,
            width=col_width * span - pad * 2,
            # Every card is at least as tall as the shortest interval
            height=max(pps * shortest, duration * pps) - pad * 2,
        )
        board.placements.append(
            Placement(
                record=r,
                day_offset=d,
                time_offset=offset,
                duration=duration,
                has_conflict=conflict,
                column_offset=column,
                day_column=first_column,
                column_span=span,
                z_index=1 if r.type == "meta" else 0,
                box=box,
            )
        )
    return board
