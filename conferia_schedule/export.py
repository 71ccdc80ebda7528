"""
Export schedule records to ICS, CSV, and JSON.
"""
from __future__ import annotations

import csv
import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

import icalendar
import pytz

from .records import Record, SessionRecord

PRODID = "-//Conferia Schedule//EN"

CSV_FIELDS = [
    "id",
    "type",
    "date_start",
    "date_end",
    "title",
    "location",
    "chair",
    "notes",
    "abstract",
    "author",
    "session",
    "session_order",
]


def record_to_dict(record) -> dict:
    """Plain dict of a record with ISO 8601 dates (sessions keep their presentations)."""
    data = asdict(record)

    def _iso(d: dict) -> dict:
        for key in ("date_start", "date_end"):
            if isinstance(d.get(key), datetime):
                d[key] = d[key].isoformat()
        return d

    _iso(data)
    for p in data.get("presentations", []):
        _iso(p)
    return data


def _description(record: Record) -> str:
    if isinstance(record, SessionRecord):
        titles = "\n\n".join(
            f"{i}.\t{p.title}" for i, p in enumerate(record.presentations, start=1)
        )
        return ("Presentations:\n\n" + titles).replace("\r", "")
    abstract = getattr(record, "abstract", None)
    if abstract:
        return abstract.replace("\r", "")
    return ""


def export_ics(records: list[Record], out_path: str | Path, prodid: str = PRODID) -> None:
    """Export records to iCalendar (.ics). All times are written in UTC."""
    cal = icalendar.Calendar()
    cal.add("prodid", prodid)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")

    stamp = datetime.now(timezone.utc)
    for r in records:
        event = icalendar.Event()
        # The record id is stable across reloads, so calendar apps update
        # instead of duplicating re-imported events.
        event.add("uid", f"{r.id}@conferia-schedule")
        event.add("summary", r.title)
        event.add("dtstart", r.date_start.astimezone(pytz.utc))
        event.add("dtend", r.date_end.astimezone(pytz.utc))
        event.add("dtstamp", stamp)
        if r.location:
            event.add("location", r.location)
        event.add("description", _description(r))
        cal.add_component(event)

    Path(out_path).write_bytes(cal.to_ical())


def export_csv(records: list[Record], out_path: str | Path) -> None:
    """Export records to CSV, session presentations on the rows after their session."""
    if not records:
        Path(out_path).write_text("", encoding="utf-8")
        return
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
        w.writeheader()
        for r in records:
            row = record_to_dict(r)
            w.writerow(row)
            for p in row.get("presentations", []):
                w.writerow(p)


def export_json(records: list[Record], out_path: str | Path) -> None:
    """Export records to JSON."""
    Path(out_path).write_text(
        json.dumps([record_to_dict(r) for r in records], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )


def export(records: list[Record], out_path: str | Path, fmt: str) -> None:
    """Export to the given format: ics, csv, or json."""
    fmt = fmt.lower()
    if fmt == "ics":
        export_ics(records, out_path)
    elif fmt == "csv":
        export_csv(records, out_path)
    elif fmt == "json":
        export_json(records, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, or json.")
