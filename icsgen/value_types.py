"""
Value types (RFC 5545 §3.3) and their wire formatting.

Each ValueType has its registered name (used in VALUE=<name>) and formats
Python values into the text of one value slot. Escaping is not done here:
every slot is written through a TextWriter.

    Python type          Value type     Example
    bool                 BOOLEAN        TRUE
    int                  INTEGER        -42
    float                FLOAT          37.386013
    str                  TEXT           any text
    datetime (naive)     DATE-TIME      20240626T120000      (floating)
    datetime (UTC)       DATE-TIME      20240626T120000Z
    date                 DATE           20240626
    time                 TIME           120000
    timedelta            DURATION       P1DT2H
    Period               PERIOD         20240626T120000Z/PT1H

Declared property types combine value types:
    TupleOf(FLOAT, FLOAT)       GEO
    ListOf(TEXT)                CATEGORIES
    AnyOf(DATE_TIME, DATE)      DTSTART, the first alternative is the default
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Callable, Iterable, Union

from icsgen.composite import (
    Choice,
    Shape,
    Single,
    Slot,
    SlotFormatter,
    ValueList,
    ValueTuple,
)
from icsgen.errors import FormatError
from icsgen.validating_writers import TextWriter


class ValueType(SlotFormatter):
    """A registered value type: name, accepted Python types, formatter."""

    def __init__(
        self,
        name: str,
        formatter: Callable[[Any], str],
        python_types: tuple[type, ...] = (),
        excluded_types: tuple[type, ...] = (),
    ) -> None:
        self.name = name
        self._formatter = formatter
        self._python_types = python_types
        self._excluded_types = excluded_types

    def accepts(self, value: Any) -> bool:
        if self._excluded_types and isinstance(value, self._excluded_types):
            return False
        return isinstance(value, self._python_types)

    def format(self, value: Any) -> str:
        if not self.accepts(value):
            raise TypeError(
                f"{type(value).__name__} value {value!r} cannot be written as {self.name}"
            )
        return self._formatter(value)

    def fmt(self, value: Any, w: TextWriter) -> None:
        w.write(self.format(value))

    def __repr__(self) -> str:
        return f"ValueType({self.name})"


# =============================================================================
# Formatters
# =============================================================================

def _format_boolean(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def _format_integer(value: int) -> str:
    return str(value)


def _format_float(value: float) -> str:
    """Decimal notation only: the grammar has no exponent."""
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise FormatError(f"FLOAT cannot represent {value!r}")
        return format(value, "f")
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        raise FormatError(f"FLOAT cannot represent {value!r}")
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def _format_text(value: str) -> str:
    return str(value)


def _format_date(value: date) -> str:
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


def _is_utc(value: datetime | time) -> bool:
    offset = value.utcoffset()
    return offset is not None and offset == timedelta(0)


def _format_time_of_day(value: datetime | time) -> str:
    return f"{value.hour:02d}{value.minute:02d}{value.second:02d}"


def _format_datetime(value: datetime) -> str:
    """Floating form for naive datetimes, UTC form for UTC datetimes.

    Other offsets would need time-zone handling: write them as a naive local
    time with a TZID parameter, or convert to UTC first.
    """
    text = f"{_format_date(value)}T{_format_time_of_day(value)}"
    if value.tzinfo is None:
        return text
    if _is_utc(value):
        return text + "Z"
    raise FormatError(f"DATE-TIME must be floating or UTC, got offset {value.utcoffset()}")


def _format_datetime_utc(value: datetime) -> str:
    if not _is_utc(value):
        raise FormatError(f"DATE-TIME must be in UTC here, got {value.isoformat()}")
    return _format_datetime(value)


def _format_time(value: time) -> str:
    text = _format_time_of_day(value)
    if value.tzinfo is None:
        return text
    if _is_utc(value):
        return text + "Z"
    raise FormatError(f"TIME must be floating or UTC, got {value.isoformat()}")


def _format_duration(value: timedelta) -> str:
    """
    dur-value  = (["+"] / "-") "P" (dur-date / dur-time / dur-week)

    Whole weeks use the week form. Otherwise days, then a time part with
    H, M and S in order; a designator is only skipped at the ends.
    """
    if value.microseconds:
        raise FormatError(f"DURATION has no sub-second precision: {value}")
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    if total == 0:
        return "PT0S"

    weeks, rem = divmod(total, 7 * 86400)
    if weeks and not rem:
        return f"{sign}P{weeks}W"

    days, rem = divmod(total, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)

    out = [sign, "P"]
    if days:
        out.append(f"{days}D")
    if hours or minutes or seconds:
        out.append("T")
        if hours:
            out.append(f"{hours}H")
        if minutes or (hours and seconds):
            out.append(f"{minutes}M")
        if seconds:
            out.append(f"{seconds}S")
    return "".join(out)


def _format_utc_offset(value: timedelta) -> str:
    """("+" / "-") HHMM [SS]; zero is written "+0000", never "-0000"."""
    if value.microseconds:
        raise FormatError(f"UTC-OFFSET has no sub-second precision: {value}")
    total = int(value.total_seconds())
    sign = "-" if total < 0 else "+"
    total = abs(total)
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    if hours > 23:
        raise FormatError(f"UTC-OFFSET out of range: {value}")
    text = f"{sign}{hours:02d}{minutes:02d}"
    if seconds:
        text += f"{seconds:02d}"
    return text


@dataclass(frozen=True)
class Period:
    """PERIOD value: an explicit start/end, or a start and a duration."""
    start: datetime
    end: datetime | None = None
    duration: timedelta | None = None

    def __post_init__(self) -> None:
        if (self.end is None) == (self.duration is None):
            raise ValueError("Period needs exactly one of end or duration")

    @classmethod
    def start_end(cls, start: datetime, end: datetime) -> Period:
        return cls(start=start, end=end)

    @classmethod
    def start_duration(cls, start: datetime, duration: timedelta) -> Period:
        return cls(start=start, duration=duration)


def _format_period(value: Period) -> str:
    start = _format_datetime(value.start)
    if value.end is not None:
        return f"{start}/{_format_datetime(value.end)}"
    return f"{start}/{_format_duration(value.duration)}"


# =============================================================================
# Registry
# =============================================================================

BOOLEAN = ValueType("BOOLEAN", _format_boolean, (bool,))
INTEGER = ValueType("INTEGER", _format_integer, (int,), excluded_types=(bool,))
FLOAT = ValueType("FLOAT", _format_float, (float, int, Decimal), excluded_types=(bool,))
TEXT = ValueType("TEXT", _format_text, (str,))
DATE = ValueType("DATE", _format_date, (date,), excluded_types=(datetime,))
DATE_TIME = ValueType("DATE-TIME", _format_datetime, (datetime,))
# Only form #2, "date with UTC time", e.g. for DTSTAMP.
DATE_TIME_UTC = ValueType("DATE-TIME", _format_datetime_utc, (datetime,))
TIME = ValueType("TIME", _format_time, (time,))
DURATION = ValueType("DURATION", _format_duration, (timedelta,))
PERIOD = ValueType("PERIOD", _format_period, (Period,))
UTC_OFFSET = ValueType("UTC-OFFSET", _format_utc_offset, (timedelta,))
URI = ValueType("URI", _format_text, (str,))
CAL_ADDRESS = ValueType("CAL-ADDRESS", _format_text, (str,))

VALUE_TYPES = {
    vt.name: vt
    for vt in (
        BOOLEAN, INTEGER, FLOAT, TEXT, DATE, DATE_TIME, TIME,
        DURATION, PERIOD, UTC_OFFSET, URI, CAL_ADDRESS,
    )
}

# Order matters: bool before int, datetime before date.
_DEFAULT_FOR_PYTHON_TYPE: tuple[tuple[type, ValueType], ...] = (
    (bool, BOOLEAN),
    (int, INTEGER),
    (float, FLOAT),
    (Decimal, FLOAT),
    (str, TEXT),
    (datetime, DATE_TIME),
    (date, DATE),
    (time, TIME),
    (timedelta, DURATION),
    (Period, PERIOD),
)


def value_type_for(value: Any) -> ValueType:
    """Default value type of a Python value."""
    for py_type, vt in _DEFAULT_FOR_PYTHON_TYPE:
        if isinstance(value, py_type):
            return vt
    raise TypeError(f"No iCalendar value type for {type(value).__name__}")


# =============================================================================
# Declared (property) value types
# =============================================================================

@dataclass(frozen=True)
class TupleOf:
    types: tuple[ValueType, ...]

    def __init__(self, *types: ValueType) -> None:
        object.__setattr__(self, "types", tuple(types))

    @property
    def name(self) -> str:
        return ";".join(t.name for t in self.types)


@dataclass(frozen=True)
class ListOf:
    item: ValueType

    @property
    def name(self) -> str:
        return self.item.name


@dataclass(frozen=True)
class AnyOf:
    """Choice between value types. The first alternative is the default."""
    alternatives: tuple[Union[ValueType, ListOf], ...]

    def __init__(self, *alternatives: Union[ValueType, ListOf]) -> None:
        if not alternatives:
            raise ValueError("AnyOf needs at least one alternative")
        object.__setattr__(self, "alternatives", tuple(alternatives))

    @property
    def default(self) -> Union[ValueType, ListOf]:
        return self.alternatives[0]

    @property
    def name(self) -> str:
        return self.default.name


Declared = Union[ValueType, TupleOf, ListOf, AnyOf]

_SHAPES = (Single, ValueTuple, ValueList, Choice)


def _is_iterable_collection(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes))


def _check(vt: ValueType, value: Any) -> Any:
    if not vt.accepts(value):
        raise TypeError(
            f"{type(value).__name__} value {value!r} cannot be written as {vt.name}"
        )
    return value


def _pick_alternative(declared: AnyOf, value: Any) -> Union[ValueType, ListOf]:
    if _is_iterable_collection(value):
        items = list(value)
        lists = [a for a in declared.alternatives if isinstance(a, ListOf)]
        if not lists:
            raise TypeError(f"{declared.name} does not take a list")
        if not items:
            return lists[0]
        probe = value_type_for(items[0])
        for alt in lists:
            if alt.item.name == probe.name and alt.item.accepts(items[0]):
                return alt
        raise TypeError(f"List of {probe.name} is not one of {_names(declared)}")

    probe = value_type_for(value)
    for alt in declared.alternatives:
        if isinstance(alt, ValueType) and alt.name == probe.name and alt.accepts(value):
            return alt
    raise TypeError(f"{probe.name} is not one of {_names(declared)}")


def _names(declared: AnyOf) -> str:
    return ", ".join(a.name for a in declared.alternatives)


def to_shape(declared: Declared, value: Any) -> Shape:
    """Build the value shape for `value` written as a `declared` type.

    A shape built by hand is passed through; for an AnyOf it is wrapped in a
    Choice after checking its type is one of the alternatives.
    """
    if isinstance(value, _SHAPES):
        if isinstance(declared, AnyOf) and not isinstance(value, Choice):
            if value.type_name not in {a.name for a in declared.alternatives}:
                raise TypeError(f"{value.type_name} is not one of {_names(declared)}")
            return Choice(declared.name, value)
        return value

    if isinstance(declared, ValueType):
        return Single(Slot(declared, _check(declared, value)))

    if isinstance(declared, TupleOf):
        items = tuple(value) if _is_iterable_collection(value) else (value,)
        if len(items) != len(declared.types):
            raise TypeError(
                f"{declared.name} takes {len(declared.types)} values, got {len(items)}"
            )
        return ValueTuple(tuple(Slot(t, _check(t, v)) for t, v in zip(declared.types, items)))

    if isinstance(declared, ListOf):
        if not _is_iterable_collection(value):
            raise TypeError(f"List of {declared.name} needs an iterable, got {value!r}")
        items = tuple(value)
        for v in items:
            _check(declared.item, v)
        return ValueList(declared.item, items)

    if isinstance(declared, AnyOf):
        # Iterators are read once here and the tuple is used from then on.
        if _is_iterable_collection(value):
            value = tuple(value)
        alt = _pick_alternative(declared, value)
        return Choice(declared.name, to_shape(alt, value))

    raise TypeError(f"Not a declared value type: {declared!r}")
