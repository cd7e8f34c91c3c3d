"""
Catalog of components, properties and parameters (RFC 5545 §3.2, §3.6-3.8).

Pure data: a name plus the declared value type. The writers only ever use
the names and the declared types; nothing here writes output.

Only a working subset of the RFC is listed. Anything else, including
experimental X- names, can be declared by the caller the same way:

    X_SCORE = Property("X-SCORE", INTEGER)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from icsgen.spec import VALUE_PARAM, needs_quoting
from icsgen.value_types import (
    CAL_ADDRESS,
    DATE,
    DATE_TIME,
    DATE_TIME_UTC,
    DURATION,
    FLOAT,
    INTEGER,
    PERIOD,
    TEXT,
    URI,
    UTC_OFFSET,
    AnyOf,
    Declared,
    ListOf,
    TupleOf,
)


@dataclass(frozen=True)
class Component:
    name: str


@dataclass(frozen=True)
class Property:
    name: str
    value_type: Declared


# =============================================================================
# Parameter values
# =============================================================================

@dataclass(frozen=True)
class ParamItem:
    """One parameter value, written quoted or as plain paramtext."""
    text: str
    quoted: bool = False


@dataclass(frozen=True)
class One:
    item: ParamItem


@dataclass(frozen=True)
class SetOf:
    """Several values of one parameter: NAME=a,b,"c"."""
    items: tuple[ParamItem, ...]


ParamValue = Union[One, SetOf]


@dataclass(frozen=True)
class Param:
    """
    A property parameter.

    quoted=True always writes a quoted-string (URIs, CAL-ADDRESSes),
    quoted=False never does, quoted=None quotes only values that need it.
    multiple=True allows a comma-separated set of values.
    """
    name: str
    quoted: bool | None = None
    multiple: bool = False

    def item(self, text: str) -> ParamItem:
        text = str(text)
        quoted = needs_quoting(text) if self.quoted is None else self.quoted
        return ParamItem(text, quoted)

    def values(self, value: ParamValue | str | Iterable[str]) -> ParamValue:
        if isinstance(value, (One, SetOf)):
            return value
        if isinstance(value, str):
            return One(self.item(value))
        if not self.multiple:
            raise TypeError(f"Parameter {self.name} takes a single value")
        return SetOf(tuple(self.item(v) for v in value))


# =============================================================================
# Components
# =============================================================================

VCALENDAR = Component("VCALENDAR")
VEVENT = Component("VEVENT")
VTODO = Component("VTODO")
VJOURNAL = Component("VJOURNAL")
VFREEBUSY = Component("VFREEBUSY")
VTIMEZONE = Component("VTIMEZONE")
STANDARD = Component("STANDARD")
DAYLIGHT = Component("DAYLIGHT")
VALARM = Component("VALARM")

# =============================================================================
# Parameters
# =============================================================================

VALUE = Param(VALUE_PARAM, quoted=False)
TZID_PARAM = Param("TZID")
LANGUAGE = Param("LANGUAGE", quoted=False)
ALTREP = Param("ALTREP", quoted=True)
CN = Param("CN")
ROLE = Param("ROLE", quoted=False)
PARTSTAT = Param("PARTSTAT", quoted=False)
RSVP = Param("RSVP", quoted=False)
MEMBER = Param("MEMBER", quoted=True, multiple=True)
DELEGATED_TO = Param("DELEGATED-TO", quoted=True, multiple=True)
DELEGATED_FROM = Param("DELEGATED-FROM", quoted=True, multiple=True)

# =============================================================================
# Properties
# =============================================================================

# Calendar (3.7)
VERSION = Property("VERSION", TEXT)
PRODID = Property("PRODID", TEXT)
CALSCALE = Property("CALSCALE", TEXT)
METHOD = Property("METHOD", TEXT)

# Descriptive (3.8.1)
CATEGORIES = Property("CATEGORIES", ListOf(TEXT))
DESCRIPTION = Property("DESCRIPTION", TEXT)
GEO = Property("GEO", TupleOf(FLOAT, FLOAT))
LOCATION = Property("LOCATION", TEXT)
PRIORITY = Property("PRIORITY", INTEGER)
STATUS = Property("STATUS", TEXT)
SUMMARY = Property("SUMMARY", TEXT)

# Date and time (3.8.2)
DTEND = Property("DTEND", AnyOf(DATE_TIME, DATE))
DUE = Property("DUE", AnyOf(DATE_TIME, DATE))
DTSTART = Property("DTSTART", AnyOf(DATE_TIME, DATE))
DURATION_PROP = Property("DURATION", DURATION)
TRANSP = Property("TRANSP", TEXT)

# Time zone (3.8.3)
TZID = Property("TZID", TEXT)
TZOFFSETFROM = Property("TZOFFSETFROM", UTC_OFFSET)
TZOFFSETTO = Property("TZOFFSETTO", UTC_OFFSET)

# Relationship (3.8.4)
ATTENDEE = Property("ATTENDEE", CAL_ADDRESS)
ORGANIZER = Property("ORGANIZER", CAL_ADDRESS)
UID = Property("UID", TEXT)
URL = Property("URL", URI)

# Recurrence (3.8.5)
EXDATE = Property("EXDATE", AnyOf(ListOf(DATE_TIME), ListOf(DATE)))
RDATE = Property("RDATE", AnyOf(ListOf(DATE_TIME), ListOf(DATE), ListOf(PERIOD)))

# Alarm (3.8.6)
ACTION = Property("ACTION", TEXT)
TRIGGER = Property("TRIGGER", AnyOf(DURATION, DATE_TIME_UTC))

# Change management (3.8.7)
CREATED = Property("CREATED", DATE_TIME_UTC)
DTSTAMP = Property("DTSTAMP", DATE_TIME_UTC)
LAST_MODIFIED = Property("LAST-MODIFIED", DATE_TIME_UTC)
SEQUENCE = Property("SEQUENCE", INTEGER)
