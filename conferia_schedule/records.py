"""
Event record types for a parsed conference schedule.

Every row of the schedule CSV becomes one of these records. Rows of type
``session_presentation`` are only an intermediate form: they are folded into
``SessionRecord`` objects before the parse returns (see ``sessions.py``).
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Union

# Values accepted in the ``type`` column
SINGLE_TYPES = ("single", "keynote", "special")
RECORD_TYPES = SINGLE_TYPES + ("meta", "session_presentation")


def record_id(date_start: datetime, date_end: datetime, kind: str, title: str) -> str:
    """
    Deterministic identifier for a record.

    Bookmarks are stored by id outside of this package, so the same row must
    hash to the same id on every parse. Two rows sharing start, end, type and
    title collide.
    """
    key = f"{date_start.isoformat()}{date_end.isoformat()}{kind}{title}"
    return hashlib.md5(key.encode("utf-8")).hexdigest()


@dataclass
class BaseRecord:
    id: str
    type: str
    date_start: datetime
    date_end: datetime
    title: str
    location: Optional[str] = None
    chair: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class SingleRecord(BaseRecord):
    """A single event: talk, keynote or special event."""

    abstract: str = ""
    author: str = ""


@dataclass
class MetaRecord(BaseRecord):
    """Breaks, lunches and other non-content slots."""


@dataclass
class SessionPresentationRecord(BaseRecord):
    """One presentation inside a session (never returned on its own)."""

    abstract: str = ""
    author: str = ""
    session: str = ""
    session_order: int = 0


@dataclass
class SessionRecord(BaseRecord):
    presentations: List[SessionPresentationRecord] = field(default_factory=list)


Record = Union[SingleRecord, MetaRecord, SessionRecord]
