"""
Parse a conference schedule CSV into event records.

The CSV has one header row followed by one row per event. Required columns
(case-insensitive, any order):

    date_start, date_end, type, title, abstract, author,
    location, session, session_order, chair

``notes`` is optional. Extra columns are allowed and can be picked up with a
``row_parser`` callback.

Structural problems (missing column, wrong cell count, broken quoting,
unreadable date) raise a ``ScheduleFormatError`` and the whole parse is
discarded. Rows with an unknown ``type`` are skipped; they are reported in
``ParseResult.diagnostics`` and through ``warnings``.
"""
from __future__ import annotations

import re
import warnings
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

import pytz

from .records import (
    MetaRecord,
    Record,
    SessionPresentationRecord,
    SingleRecord,
    SINGLE_TYPES,
    record_id,
)
from .sessions import aggregate_sessions

REQUIRED_COLUMNS = (
    "date_start",
    "date_end",
    "type",
    "title",
    "abstract",
    "author",
    "location",
    "session",
    "session_order",
    "chair",
)
OPTIONAL_COLUMNS = ("notes",)


# ──────────────────────────────────────────────────────────────────
#  Errors and diagnostics
# ──────────────────────────────────────────────────────────────────

class ScheduleFormatError(ValueError):
    """The schedule CSV is structurally broken; nothing was parsed."""


class InsufficientRowsError(ScheduleFormatError):
    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"Invalid CSV: Less than 2 rows! Need a header and at least one event (found {count})."
        )


class MissingColumnError(ScheduleFormatError):
    def __init__(self, column: str):
        self.column = column
        super().__init__(f"The CSV did not contain a `{column}` column.")


class RowLengthError(ScheduleFormatError):
    def __init__(self, row_number: int, expected: int, actual: int, line: str):
        self.row_number = row_number
        self.expected = expected
        self.actual = actual
        self.line = line
        super().__init__(
            f"Wrong number of columns in row {row_number} ({actual}; expected {expected}): {line}"
        )


class MalformedRowError(ScheduleFormatError):
    def __init__(self, line: str, reason: str = "Malformed cell"):
        self.line = line
        super().__init__(f"Could not parse CSV line: {reason}: {line}")


class DateParseError(ScheduleFormatError):
    def __init__(self, value: str, reason: str = "Could not parse date string to ISO"):
        self.value = value
        super().__init__(f"{reason}: {value}")


class ScheduleWarning(UserWarning):
    """Non-fatal problem with a single schedule row."""


@dataclass
class Diagnostic:
    row_number: int
    message: str


@dataclass
class ParseResult:
    records: List[Record] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


DateParser = Callable[[str], str]
RowParser = Callable[[List[str], List[str], object], object]


# ──────────────────────────────────────────────────────────────────
#  Line tokenizer
# ──────────────────────────────────────────────────────────────────

def parse_csv_line(line: str, sep: str = ",") -> List[str]:
    """
    Split one CSV line into cells.

    Cells may be wrapped in double quotes, in which case they can contain the
    separator; a doubled quote inside a quoted cell is a literal quote.
    A quote anywhere else, or a quoted cell left open at the end of the line,
    raises ``MalformedRowError``.
    """
    cells: List[str] = []
    current = ""
    is_quoted = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == sep:
            if is_quoted:
                current += char
            else:
                cells.append(current)
                current = ""
        elif char == '"':
            if is_quoted:
                next_char = line[i + 1] if i + 1 < len(line) else None
                if next_char == '"':
                    # Escaped quote
                    current += char
                    i += 1
                elif next_char == sep or next_char is None:
                    is_quoted = False
                else:
                    raise MalformedRowError(line)
            elif current == "":
                is_quoted = True
            else:
                raise MalformedRowError(line)
        else:
            current += char
        i += 1

    if is_quoted:
        raise MalformedRowError(line, "Unterminated quoted cell")
    # Final cell has no trailing separator
    cells.append(current)
    return cells


def _split_lines(csv_data: str, sep: str) -> List[str]:
    # Spreadsheets often leave spacer rows made of separators only
    spacer = re.compile(r"^[\s" + re.escape(sep) + r"]+$")
    return [
        line
        for line in re.split(r"[\r\n]+", csv_data)
        if line.strip() != "" and not spacer.match(line)
    ]


# ──────────────────────────────────────────────────────────────────
#  Dates
# ──────────────────────────────────────────────────────────────────

def _resolve_zone(time_zone: Optional[str]):
    if not time_zone:
        return None
    try:
        return pytz.timezone(time_zone)
    except pytz.UnknownTimeZoneError as e:
        raise DateParseError(time_zone, "Unknown time zone") from e


def parse_datetime(
    value: str,
    tz=None,
    date_parser: Optional[DateParser] = None,
) -> datetime:
    """
    Parse an ISO 8601 date-time cell into an aware datetime.

    A string without an offset is placed in ``tz`` (a pytz zone), or in the
    local system zone when no zone is given. A string with an offset keeps
    the instant and is converted to ``tz`` if one is given.
    """
    raw = value
    if date_parser is not None:
        value = date_parser(value)
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (ValueError, TypeError, AttributeError) as e:
        raise DateParseError(raw) from e

    if parsed.tzinfo is None:
        if tz is not None:
            return tz.localize(parsed)
        return parsed.astimezone()
    if tz is not None:
        return parsed.astimezone(tz)
    return parsed


# ──────────────────────────────────────────────────────────────────
#  Record builder
# ──────────────────────────────────────────────────────────────────

def _column_indices(header: List[str]) -> dict[str, int]:
    indices: dict[str, int] = {}
    for name in REQUIRED_COLUMNS:
        if name not in header:
            raise MissingColumnError(name)
        indices[name] = header.index(name)
    for name in OPTIONAL_COLUMNS:
        if name in header:
            indices[name] = header.index(name)
    return indices


def _optional(value: str) -> Optional[str]:
    return value if value.strip() else None


def parse_schedule_csv(
    csv_data: str,
    time_zone: str | None = None,
    date_parser: Optional[DateParser] = None,
    row_parser: Optional[RowParser] = None,
    sep: str = ",",
) -> ParseResult:
    """
    Parse the full text of a schedule CSV.

    :param csv_data: Raw CSV text, header row first.
    :param time_zone: Optional IANA zone name (e.g. 'Europe/Berlin'). Dates
        without an offset are read in this zone and all dates are converted to it.
    :param date_parser: Optional callback to fix up a raw date cell before it
        is parsed, e.g. for spreadsheet exports that are not quite ISO 8601.
    :param row_parser: Optional callback ``(row, header, record) -> record`` to
        enrich a record from extra columns. Not called for aggregated sessions.
    :param sep: Cell separator.

    Returns a ``ParseResult`` with records sorted by start date, sessions
    already aggregated.
    """
    lines = _split_lines(csv_data, sep)
    if len(lines) < 2:
        raise InsufficientRowsError(len(lines))

    header = [cell.strip().lower() for cell in parse_csv_line(lines[0], sep)]
    idx = _column_indices(header)
    tz = _resolve_zone(time_zone)

    result = ParseResult()
    records: List[Record] = []
    presentations: List[SessionPresentationRecord] = []

    for row_number, line in enumerate(lines[1:], start=2):
        row = parse_csv_line(line, sep)
        if len(row) != len(header):
            raise RowLengthError(row_number, len(header), len(row), line)

        start = parse_datetime(row[idx["date_start"]], tz, date_parser)
        end = parse_datetime(row[idx["date_end"]], tz, date_parser)
        kind = row[idx["type"]].strip()
        title = row[idx["title"]]
        location = _optional(row[idx["location"]])
        chair = _optional(row[idx["chair"]])
        notes = _optional(row[idx["notes"]]) if "notes" in idx else None
        rid = record_id(start, end, kind, title)

        if kind == "session_presentation":
            order_cell = row[idx["session_order"]].strip()
            try:
                order = int(order_cell)
            except ValueError as e:
                raise MalformedRowError(line, f"Invalid session_order {order_cell!r}") from e
            record = SessionPresentationRecord(
                id=rid, type=kind, date_start=start, date_end=end, title=title,
                location=location, chair=chair, notes=notes,
                abstract=row[idx["abstract"]], author=row[idx["author"]],
                session=row[idx["session"]], session_order=order,
            )
        elif kind in SINGLE_TYPES:
            record = SingleRecord(
                id=rid, type=kind, date_start=start, date_end=end, title=title,
                location=location, chair=chair, notes=notes,
                abstract=row[idx["abstract"]], author=row[idx["author"]],
            )
        elif kind == "meta":
            record = MetaRecord(
                id=rid, type=kind, date_start=start, date_end=end, title=title,
                location=location, notes=notes,
            )
        else:
            message = f"Unknown type detected in entry: {kind!r}. Skipping row."
            result.diagnostics.append(Diagnostic(row_number, message))
            warnings.warn(f"Row {row_number}: {message}", ScheduleWarning, stacklevel=2)
            continue

        if row_parser is not None:
            record = row_parser(row, header, record)

        if isinstance(record, SessionPresentationRecord):
            presentations.append(record)
        else:
            records.append(record)

    records.extend(aggregate_sessions(presentations))
    records.sort(key=lambda r: r.date_start)
    result.records = records
    return result


def parse_csv(
    csv_data: str,
    time_zone: str | None = None,
    date_parser: Optional[DateParser] = None,
    row_parser: Optional[RowParser] = None,
    sep: str = ",",
) -> List[Record]:
    """Like ``parse_schedule_csv`` but returns the records only."""
    return parse_schedule_csv(csv_data, time_zone, date_parser, row_parser, sep).records
