"""
icsgen Document - In-memory calendar, serialized to .ics by ICSWriter.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from icsgen.spec import DEFAULT_PRODID


@dataclass
class CalendarEvent:
    """A single VEVENT."""
    uid: str
    dtstamp: datetime
    start: datetime | date
    end: datetime | date | None = None
    summary: str = ""
    description: str = ""
    location: str = ""
    categories: list[str] = field(default_factory=list)
    geo: tuple[float, float] | None = None
    transparent: bool = False

    @property
    def all_day(self) -> bool:
        return not isinstance(self.start, datetime)


@dataclass
class CalendarDocument:
    """
    In-memory representation of a VCALENDAR object.

    Usage:
        doc = CalendarDocument.create(name="Team")
        doc.add_event(start=date(2024, 6, 26), summary="Midsummer")
        doc.write("team.ics")
    """

    prodid: str = DEFAULT_PRODID
    name: str = ""
    method: str = ""
    events: list[CalendarEvent] = field(default_factory=list)

    @classmethod
    def create(cls, prodid: str | None = None, name: str = "", method: str = "") -> CalendarDocument:
        """Create a document. PRODID comes from ICSGEN_PRODID when not given."""
        return cls(
            prodid=prodid or os.environ.get("ICSGEN_PRODID") or DEFAULT_PRODID,
            name=name,
            method=method,
        )

    def add_event(
        self,
        start: datetime | date,
        summary: str = "",
        end: datetime | date | None = None,
        uid: str = "",
        dtstamp: datetime | None = None,
        description: str = "",
        location: str = "",
        categories: list[str] | None = None,
        geo: tuple[float, float] | None = None,
        transparent: bool = False,
    ) -> CalendarEvent:
        """Add an event. Returns it for chaining.

        Only the Python types are checked here; characters are checked when
        the document is serialized.
        """
        if not isinstance(start, date):
            raise TypeError(f"Event start must be a date or datetime, got {type(start).__name__}")
        if end is not None:
            if not isinstance(end, date):
                raise TypeError(f"Event end must be a date or datetime, got {type(end).__name__}")
            if isinstance(start, datetime) != isinstance(end, datetime):
                raise ValueError("Event start and end must both be dates or both be datetimes")
        if dtstamp is None:
            dtstamp = datetime.now(timezone.utc).replace(microsecond=0)
        elif not isinstance(dtstamp, datetime) or dtstamp.utcoffset() != timedelta(0):
            raise ValueError("Event dtstamp must be a timezone-aware UTC datetime")
        if geo is not None:
            if len(geo) != 2:
                raise ValueError(f"Event geo must be a (latitude, longitude) pair, got {geo!r}")
            geo = (float(geo[0]), float(geo[1]))

        event = CalendarEvent(
            uid=uid or f"{uuid.uuid4()}@icsgen",
            dtstamp=dtstamp,
            start=start,
            end=end,
            summary=summary,
            description=description,
            location=location,
            categories=list(categories or []),
            geo=geo,
            transparent=transparent,
        )
        self.events.append(event)
        return event

    def get_event(self, uid: str) -> CalendarEvent | None:
        for ev in self.events:
            if ev.uid == uid:
                return ev
        return None

    def write(self, path: str) -> int:
        """Write this document to an .ics file. Returns bytes written."""
        from icsgen.writer import ICSWriter
        return ICSWriter.write(self, path)

    def to_bytes(self) -> bytes:
        from icsgen.writer import ICSWriter
        return ICSWriter.serialize(self)

    def __repr__(self) -> str:
        return f"CalendarDocument(prodid={self.prodid!r}, events={len(self.events)})"
