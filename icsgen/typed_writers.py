"""
Typed writers for an iCalendar stream (RFC 5545 §3.4, §3.6.1).

Thin wrappers over stream.Writer with one method per common property, so
the usual case reads like the object it produces:

    with ICalStreamWriter(sink) as stream:
        cal = stream.icalendar_object("-//example//EN")
        ev = cal.event()
        ev.dtstamp(datetime(2024, 6, 26, 12, tzinfo=timezone.utc))
        ev.uid("1@example.com")
        ev.dtstart(date(2024, 6, 26))
        ev.summary("Midsummer")
        ev.end()
        cal.end()
        stream.close()
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, BinaryIO, Iterable

from icsgen import catalog
from icsgen.catalog import Component, Property
from icsgen.errors import ContractViolation
from icsgen.folding import TextSink
from icsgen.io_adapters import BinarySink
from icsgen.spec import ICALENDAR_VERSION
from icsgen.stream import ComponentWriter, PropertyWriter, Writer


class TimeTransparency(str, Enum):
    """TRANSP values. OPAQUE is the default and is not written."""
    OPAQUE = "OPAQUE"
    TRANSPARENT = "TRANSPARENT"


class _TypedComponent:
    """Common part of the typed component writers."""

    def __init__(self, inner: ComponentWriter) -> None:
        self._inner = inner

    @property
    def closed(self) -> bool:
        return self._inner.closed

    def property(self, prop: Property) -> PropertyWriter:
        return self._inner.property(prop)

    def simple_property(self, prop: Property, value: Any) -> None:
        self._inner.simple_property(prop, value)

    def component(self, component: Component) -> ComponentWriter:
        return self._inner.component(component)

    def end(self) -> None:
        self._inner.end()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._inner.__exit__(exc_type, exc, tb)


class ICalStreamWriter:
    """An iCalendar stream: a sequence of VCALENDAR objects."""

    def __init__(self, sink: TextSink) -> None:
        self._inner = Writer(sink)

    @classmethod
    def for_binary(cls, stream: BinaryIO) -> ICalStreamWriter:
        return cls(BinarySink(stream))

    @property
    def lines_written(self) -> int:
        return self._inner.lines_written

    def component(self, component: Component) -> ComponentWriter:
        return self._inner.component(component)

    def icalendar_object(self, prodid: str) -> ICalObjectWriter:
        """Begin a VCALENDAR and write VERSION:2.0 and PRODID."""
        return ICalObjectWriter(self.component(catalog.VCALENDAR), prodid)

    def close(self) -> TextSink:
        return self._inner.close()

    def __enter__(self) -> ICalStreamWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._inner.__exit__(exc_type, exc, tb)


class ICalObjectWriter(_TypedComponent):
    """One VCALENDAR object."""

    def __init__(self, inner: ComponentWriter, prodid: str) -> None:
        super().__init__(inner)
        self.simple_property(catalog.VERSION, ICALENDAR_VERSION)
        self.simple_property(catalog.PRODID, prodid)

    def event(self) -> EventWriter:
        return EventWriter(self.component(catalog.VEVENT))


class EventWriter(_TypedComponent):
    """One VEVENT."""

    def __init__(self, inner: ComponentWriter) -> None:
        if inner.kind != catalog.VEVENT:
            raise ContractViolation(f"EventWriter needs a VEVENT, got {inner.kind.name}")
        super().__init__(inner)

    def dtstamp(self, value: datetime) -> None:
        self.simple_property(catalog.DTSTAMP, value)

    def uid(self, value: str) -> None:
        self.simple_property(catalog.UID, value)

    def dtstart(self, value: datetime | date) -> None:
        self.simple_property(catalog.DTSTART, value)

    def dtend(self, value: datetime | date) -> None:
        self.simple_property(catalog.DTEND, value)

    def summary(self, value: str) -> None:
        self.simple_property(catalog.SUMMARY, value)

    def description(self, value: str) -> None:
        self.simple_property(catalog.DESCRIPTION, value)

    def location(self, value: str) -> None:
        self.simple_property(catalog.LOCATION, value)

    def categories(self, values: Iterable[str]) -> None:
        self.simple_property(catalog.CATEGORIES, list(values))

    def geo(self, latitude: float, longitude: float) -> None:
        self.simple_property(catalog.GEO, (latitude, longitude))

    def time_transparency(self, value: TimeTransparency) -> None:
        value = TimeTransparency(value)
        if value is not TimeTransparency.OPAQUE:
            self.simple_property(catalog.TRANSP, value.value)

    def recurrence_datetimes(self, values: Iterable[Any]) -> None:
        self.simple_property(catalog.RDATE, list(values))
