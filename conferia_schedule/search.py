"""
Filter records by a free-text query and by the user's agenda.
"""
from __future__ import annotations

import re
import unicodedata
from typing import Collection, List, Optional, Sequence

from .records import Record, SessionPresentationRecord, SessionRecord

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")
_TEXT_FIELDS = ("chair", "location", "author", "abstract")


def strip_diacritics(text: str) -> str:
    """'Café Müller' -> 'Cafe Muller'."""
    return _COMBINING_MARKS.sub("", unicodedata.normalize("NFD", text))


def match_event(record: Record | SessionPresentationRecord, query: str) -> bool:
    """
    True if ``query`` occurs in the record's title, id, chair, location,
    author or abstract, or in any presentation of a session.

    ``query`` is expected lower-case; accents are ignored on both sides.
    """
    query = strip_diacritics(query)
    if query in strip_diacritics(record.title.lower()) or query in record.id:
        return True

    for name in _TEXT_FIELDS:
        value = getattr(record, name, None)
        if isinstance(value, str) and query in strip_diacritics(value.lower()):
            return True

    if isinstance(record, SessionRecord):
        return any(match_event(p, query) for p in record.presentations)
    return False


def agenda_records(records: Sequence[Record], agenda_ids: Collection[str]) -> List[Record]:
    """Records whose id is in the user's agenda."""
    return [r for r in records if r.id in agenda_ids]


def filter_records(
    records: Sequence[Record],
    query: str = "",
    agenda_ids: Optional[Collection[str]] = None,
    agenda_only: bool = False,
) -> List[Record]:
    """The records currently visible for a query and the agenda-only toggle."""
    q = query.strip().lower()
    visible = list(records)
    if agenda_only:
        visible = agenda_records(visible, agenda_ids or ())
    if q == "":
        return visible
    return [r for r in visible if match_event(r, q)]
