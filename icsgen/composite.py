"""
Composite value composition.

A property value occupies one or more value slots on the wire. The shape of
a value decides how many slots are written, which separator goes between
them and whether a VALUE parameter has to select the value type:

    Single      one slot                          DTSTAMP:20240626T120000Z
    ValueTuple  fixed slots, ";"-separated        GEO:37.386013;-122.082932
    ValueList   zero or more slots, ","-separated CATEGORIES:a,b,c
    Choice      one active shape; VALUE=<name>    DTSTART;VALUE=DATE:20240626
                when it is not the default

write_composite() is the only place that dispatches on the shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Sequence, Union

from icsgen.errors import ContractViolation
from icsgen.spec import VALUE_PARAM

if TYPE_CHECKING:
    from icsgen.content_line import ContentLine
    from icsgen.validating_writers import TextWriter


class SlotFormatter:
    """Anything with a registered grammar name that can format a value."""

    name: str

    def fmt(self, value: Any, w: TextWriter) -> None:  # pragma: no cover
        raise NotImplementedError


@dataclass(frozen=True)
class Slot:
    """One value slot: a formatter and the value it formats."""
    value_type: SlotFormatter
    value: Any

    def write_to(self, w: TextWriter) -> None:
        self.value_type.fmt(self.value, w)


@dataclass(frozen=True)
class Single:
    slot: Slot

    @property
    def type_name(self) -> str:
        return self.slot.value_type.name


@dataclass(frozen=True)
class ValueTuple:
    slots: tuple[Slot, ...]

    def __post_init__(self) -> None:
        if not self.slots:
            raise ContractViolation("A value tuple needs at least one slot")

    @property
    def type_name(self) -> str:
        return ";".join(s.value_type.name for s in self.slots)


@dataclass(frozen=True)
class ValueList:
    value_type: SlotFormatter
    values: tuple[Any, ...] = ()

    @property
    def type_name(self) -> str:
        return self.value_type.name

    @property
    def slots(self) -> tuple[Slot, ...]:
        return tuple(Slot(self.value_type, v) for v in self.values)


@dataclass(frozen=True)
class Choice:
    """The active shape out of several declared ones.

    `default` is the registered name of the declared default value type.
    """
    default: str
    shape: Union[Single, ValueTuple, ValueList]

    @property
    def type_name(self) -> str:
        return self.shape.type_name

    @property
    def needs_value_param(self) -> bool:
        return self.shape.type_name != self.default


Shape = Union[Single, ValueTuple, ValueList, Choice]


def single(value_type: SlotFormatter, value: Any) -> Single:
    return Single(Slot(value_type, value))


def value_tuple(*pairs: tuple[SlotFormatter, Any]) -> ValueTuple:
    return ValueTuple(tuple(Slot(vt, v) for vt, v in pairs))


def value_list(value_type: SlotFormatter, values: Sequence[Any]) -> ValueList:
    return ValueList(value_type, tuple(values))


def write_composite(
    line: ContentLine,
    shape: Shape,
    write_param: Callable[[str, str], None] | None = None,
) -> None:
    """Write `shape` as the value of `line`, parameters first if needed.

    `write_param(name, value)` emits an unquoted parameter; it defaults to
    line.param_unquoted.
    """
    if isinstance(shape, Choice):
        if isinstance(shape.shape, Choice):
            raise ContractViolation("A Choice cannot select another Choice")
        if shape.needs_value_param:
            (write_param or line.param_unquoted)(VALUE_PARAM, shape.type_name)
        shape = shape.shape

    if isinstance(shape, Single):
        tw = line.value_tuple_writer()
        shape.slot.write_to(tw.next_value_writer())
    elif isinstance(shape, ValueTuple):
        tw = line.value_tuple_writer()
        for slot in shape.slots:
            slot.write_to(tw.next_value_writer())
    elif isinstance(shape, ValueList):
        lw = line.value_list_writer()
        for slot in shape.slots:
            slot.write_to(lw.next_value_writer())
    else:
        raise ContractViolation(f"Not a value shape: {shape!r}")
