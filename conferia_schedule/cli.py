"""
Command-line interface: parse a conference schedule CSV, then show its room
columns / layout or export the visible events to a file.
"""
from __future__ import annotations

import argparse
import sys
import warnings
from pathlib import Path

from . import __version__
from .conflicts import rooms_per_day
from .export import export
from .layout import build_board
from .schedule_csv import ScheduleFormatError, ScheduleWarning, parse_schedule_csv
from .search import filter_records


def _load_agenda_ids(args) -> list[str]:
    ids = []
    if args.agenda:
        ids.extend(s.strip() for s in args.agenda.split(",") if s.strip())
    if args.agenda_file:
        p = Path(args.agenda_file)
        if not p.exists():
            print(f"Error: --agenda-file not found: {p}", file=sys.stderr)
            sys.exit(1)
        ids.extend(
            s
            for line in p.read_text(encoding="utf-8").splitlines()
            if (s := line.strip()) and not s.startswith("#")
        )
    return ids


def _print_rooms(records) -> None:
    table = rooms_per_day(records)
    print("Day | Rooms with their own column")
    print("-" * 60)
    for day, rooms in table.items():
        print(f"{day:>3} | {', '.join(rooms) if rooms else '(full width)'}")


def _print_layout(records) -> None:
    board = build_board(records)
    print(f"Days: {board.day_count}  Columns: {board.total_columns}  "
          f"Time axis: {board.earliest_time} - {board.latest_time}  Tick: {board.tick_interval}s")
    print("Day | Time off. | Col | Span | Title")
    print("-" * 60)
    for p in board.placements:
        print(f"{p.day_offset:>3} | {p.time_offset:>9} | {p.day_column + p.column_offset:>3} | "
              f"{p.column_span:>4} | {p.record.title[:40]}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Lay out a conference schedule CSV and export it to ICS / CSV / JSON.\n"
            "The CSV needs the columns date_start, date_end, type, title, abstract, "
            "author, location, session, session_order and chair (notes optional)."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("csv_path", metavar="CSV_PATH", help="Schedule CSV file.")
    parser.add_argument(
        "-o",
        "--output",
        default="schedule",
        help="Output path (without extension). Default: schedule",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["ics", "csv", "json"],
        default="ics",
        help="Export format. Default: ics",
    )
    parser.add_argument(
        "--time-zone",
        metavar="ZONE",
        help="IANA time zone of the event, e.g. Europe/Berlin. Dates without an offset are read in this zone.",
    )
    parser.add_argument(
        "--separator",
        default=",",
        help="Cell separator of the CSV. Default: ,",
    )
    parser.add_argument(
        "--filter",
        metavar="QUERY",
        default="",
        help="Only keep events whose title, id, room, chair, author or abstract contains QUERY.",
    )
    parser.add_argument(
        "--agenda",
        metavar="LIST",
        help="Comma-separated list of event ids in your personal agenda.",
    )
    parser.add_argument(
        "--agenda-file",
        metavar="PATH",
        help="Path to a file with one event id per line (same format as --agenda).",
    )
    parser.add_argument(
        "--agenda-only",
        action="store_true",
        help="Only keep events from your personal agenda (see --agenda / --agenda-file).",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--rooms",
        action="store_true",
        help="Print which rooms need their own column on each day, then exit.",
    )
    mode.add_argument(
        "--layout",
        action="store_true",
        help="Print the board position of every visible event, then exit.",
    )
    args = parser.parse_args()

    csv_path = Path(args.csv_path)
    if not csv_path.exists():
        print(f"Error: schedule CSV not found: {csv_path}", file=sys.stderr)
        return 1

    try:
        with warnings.catch_warnings():
            # Row problems are printed from the diagnostics below
            warnings.simplefilter("ignore", ScheduleWarning)
            result = parse_schedule_csv(
                csv_path.read_text(encoding="utf-8"),
                time_zone=args.time_zone,
                sep=args.separator,
            )
    except ScheduleFormatError as e:
        print(f"Error parsing schedule: {e}", file=sys.stderr)
        return 1

    for d in result.diagnostics:
        print(f"Warning: row {d.row_number}: {d.message}", file=sys.stderr)

    agenda_ids = _load_agenda_ids(args)
    if args.agenda_only and not agenda_ids:
        print(
            "Error: --agenda-only requires event ids. Use --agenda ID1,ID2 or --agenda-file my_agenda.txt.",
            file=sys.stderr,
        )
        return 1
    records = filter_records(
        result.records,
        query=args.filter,
        agenda_ids=set(agenda_ids),
        agenda_only=args.agenda_only,
    )

    if args.rooms:
        _print_rooms(records)
        return 0
    if args.layout:
        _print_layout(records)
        return 0

    ext = {"ics": ".ics", "csv": ".csv", "json": ".json"}[args.format]
    out_path = Path(args.output).with_suffix(ext) if Path(args.output).suffix else Path(args.output + ext)
    export(records, out_path, args.format)
    print(f"Exported {len(records)} event(s) to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
