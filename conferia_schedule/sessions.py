"""
Fold session presentations into session records.
"""
from __future__ import annotations

from typing import List

from .records import SessionPresentationRecord, SessionRecord, record_id


def aggregate_sessions(presentations: List[SessionPresentationRecord]) -> List[SessionRecord]:
    """
    Group presentations by session name, one ``SessionRecord`` per name.

    Sessions come out in order of the first row naming them. Presentations are
    sorted by ``session_order``. The session's dates, location, chair and notes
    come from the first presentation in row order, not the first after sorting.
    """
    names: List[str] = []
    for p in presentations:
        if p.session not in names:
            names.append(p.session)

    sessions: List[SessionRecord] = []
    for name in names:
        members = [p for p in presentations if p.session == name]
        first = members[0]
        members.sort(key=lambda p: p.session_order)

        # Hashing on the session name keeps the id (and any bookmark on it)
        # stable when individual presentations change.
        sessions.append(
            SessionRecord(
                id=record_id(first.date_start, first.date_end, "session", name),
                type="session",
                date_start=first.date_start,
                date_end=first.date_end,
                title=name,
                location=first.location,
                chair=first.chair,
                notes=first.notes,
                presentations=members,
            )
        )
    return sessions
