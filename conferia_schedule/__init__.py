"""
Parse conference schedule CSVs and lay the events out on a day/time board.
"""
from __future__ import annotations

__version__ = "0.3.0"

from .conflicts import has_conflict, intervals_conflict, rooms_per_day
from .layout import Board, LayoutOptions, Placement, build_board
from .records import (
    MetaRecord,
    Record,
    SessionPresentationRecord,
    SessionRecord,
    SingleRecord,
)
from .schedule_csv import (
    Diagnostic,
    ParseResult,
    ScheduleFormatError,
    ScheduleWarning,
    parse_csv,
    parse_csv_line,
    parse_schedule_csv,
)
from .search import filter_records, match_event

__all__ = [
    "Board",
    "Diagnostic",
    "LayoutOptions",
    "MetaRecord",
    "ParseResult",
    "Placement",
    "Record",
    "ScheduleFormatError",
    "ScheduleWarning",
    "SessionPresentationRecord",
    "SessionRecord",
    "SingleRecord",
    "build_board",
    "filter_records",
    "has_conflict",
    "intervals_conflict",
    "match_event",
    "parse_csv",
    "parse_csv_line",
    "parse_schedule_csv",
    "rooms_per_day",
]
