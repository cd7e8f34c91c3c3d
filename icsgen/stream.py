"""
icsgen Stream Writers - content lines, components and properties on one sink.

Layers, top to bottom:
    Writer            BEGIN/END components, properties from the catalog
    PropertyWriter    one property: params, then the value
    LineStream        hands out one LineWriter at a time
    LineWriter        write_name / write_param / write_value / close
    ContentLine       state machine, punctuation, validation, folding

Every writer that has to be finished (LineWriter, PropertyWriter,
ComponentWriter, Writer) is a context manager and reports a missing
close/end as a ContractViolation when its block is left normally.

Usage:
    buf = io.StringIO()
    with Writer(buf) as w:
        with w.component(VCALENDAR) as cal:
            cal.simple_property(VERSION, "2.0")
            cal.simple_property(PRODID, "-//example//EN")
            cal.end()
        w.close()
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Iterable

from icsgen.catalog import Component, One, Param, ParamItem, ParamValue, Property
from icsgen.composite import Shape, write_composite
from icsgen.content_line import ContentLine
from icsgen.errors import ContractViolation
from icsgen.folding import TextSink
from icsgen.io_adapters import BinarySink
from icsgen.spec import BEGIN, END, needs_quoting
from icsgen.value_types import to_shape

logger = logging.getLogger(__name__)


class LineWriter:
    """
    One content line, as seen by the catalog layer.

    write_name() first, then any number of write_param(), then exactly one
    write_value(), then close().
    """

    def __init__(self, stream: LineStream, sink: TextSink) -> None:
        self._stream = stream
        self._line = ContentLine(sink)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write_name(self, name: str) -> None:
        self._line.name(name)

    def write_param(self, name: str, value: ParamValue | str) -> None:
        """Write `;NAME=value[,value...]`.

        A plain string is quoted only if it has to be.
        """
        if isinstance(value, str):
            value = One(ParamItem(value, needs_quoting(value)))
        items = (value.item,) if isinstance(value, One) else value.items
        if not items:
            raise ContractViolation(f"Parameter {name} written without a value")
        self._line.param_name(name)
        for item in items:
            if item.quoted:
                self._line.param_value_quoted(item.text)
            else:
                self._line.param_value_unquoted(item.text)

    def write_value(self, shape: Shape) -> None:
        write_composite(self._line, shape)

    def close(self) -> TextSink:
        sink = self._line.eol()
        self._closed = True
        self._stream._line_closed(self)
        return sink

    def __enter__(self) -> LineWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._closed:
            raise ContractViolation("LineWriter.close() must be called before leaving the block")


class LineStream:
    """Opens content lines on a sink, one at a time."""

    def __init__(self, sink: TextSink) -> None:
        self._sink = sink
        self._open: LineWriter | None = None
        self.lines_written = 0

    @property
    def sink(self) -> TextSink:
        return self._sink

    @property
    def has_open_line(self) -> bool:
        return self._open is not None

    def open_line(self) -> LineWriter:
        if self._open is not None:
            raise ContractViolation("A content line is still open; close() it first")
        self._open = LineWriter(self, self._sink)
        return self._open

    def simple_line(self, name: str, value: str) -> None:
        """Write `name:value` with the value TEXT-escaped."""
        with self.open_line() as lw:
            lw.write_name(name)
            lw._line.value(value)
            lw.close()

    def _line_closed(self, line: LineWriter) -> None:
        if line is self._open:
            self._open = None
            self.lines_written += 1


class PropertyWriter:
    """
    Writes one property from the catalog.

    Usage:
        with writer.property(DTSTART) as p:
            p.param(TZID_PARAM, "Europe/Oslo")
            p.value(datetime(2024, 6, 26, 12, 0))
            p.end()
    """

    def __init__(self, stream: LineStream, prop: Property) -> None:
        self.prop = prop
        self._line = stream.open_line()
        self._line.write_name(prop.name)

    @property
    def closed(self) -> bool:
        return self._line.closed

    def param(self, param: Param, value: ParamValue | str | Iterable[str]) -> None:
        self._line.write_param(param.name, param.values(value))

    def value(self, value: Any) -> None:
        self._line.write_value(to_shape(self.prop.value_type, value))

    def end(self) -> None:
        self._line.close()

    def __enter__(self) -> PropertyWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self.closed:
            raise ContractViolation(
                f"PropertyWriter.end() must be called for {self.prop.name}"
            )


class Writer:
    """
    Writes components and properties to a text sink.

    Components nest: the innermost open component has to end first.
    """

    def __init__(self, sink: TextSink) -> None:
        self._stream = LineStream(sink)
        self._components: list[ComponentWriter] = []
        self._closed = False

    @classmethod
    def for_binary(cls, stream: BinaryIO) -> Writer:
        """Writer over a binary stream, UTF-8 encoded."""
        return cls(BinarySink(stream))

    @property
    def lines_written(self) -> int:
        return self._stream.lines_written

    @property
    def depth(self) -> int:
        return len(self._components)

    def _check_open(self) -> None:
        if self._closed:
            raise ContractViolation("Writer used after close()")

    def component(self, component: Component) -> ComponentWriter:
        self._check_open()
        return ComponentWriter(self, component)

    def property(self, prop: Property) -> PropertyWriter:
        self._check_open()
        return PropertyWriter(self._stream, prop)

    def simple_property(self, prop: Property, value: Any) -> None:
        with self.property(prop) as p:
            p.value(value)
            p.end()

    def line(self) -> LineWriter:
        """Raw content line for names outside the catalog."""
        self._check_open()
        return self._stream.open_line()

    def close(self) -> TextSink:
        """Finish the stream. All components and lines must be ended."""
        self._check_open()
        if self._components:
            names = ", ".join(c.kind.name for c in self._components)
            raise ContractViolation(f"Components still open: {names}")
        if self._stream.has_open_line:
            raise ContractViolation("A content line is still open")
        self._closed = True
        return self._stream.sink

    def _begin(self, cw: ComponentWriter) -> None:
        self._stream.simple_line(BEGIN, cw.kind.name)
        self._components.append(cw)
        logger.debug("BEGIN:%s (depth %d)", cw.kind.name, len(self._components))

    def _end(self, cw: ComponentWriter) -> None:
        if not self._components or self._components[-1] is not cw:
            raise ContractViolation(
                f"END:{cw.kind.name} while an inner component is still open"
            )
        self._stream.simple_line(END, cw.kind.name)
        self._components.pop()
        logger.debug("END:%s", cw.kind.name)

    def __enter__(self) -> Writer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._closed:
            raise ContractViolation("Writer.close() must be called before leaving the block")


class ComponentWriter:
    """BEGIN:<name> on creation, END:<name> on end(). end() is mandatory."""

    def __init__(self, writer: Writer, component: Component) -> None:
        self._writer = writer
        self.kind = component
        self._closed = False
        writer._begin(self)

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ContractViolation(f"{self.kind.name} used after end()")

    def component(self, component: Component) -> ComponentWriter:
        self._check_open()
        return self._writer.component(component)

    def property(self, prop: Property) -> PropertyWriter:
        self._check_open()
        return self._writer.property(prop)

    def simple_property(self, prop: Property, value: Any) -> None:
        self._check_open()
        self._writer.simple_property(prop, value)

    def line(self) -> LineWriter:
        self._check_open()
        return self._writer.line()

    def end(self) -> None:
        self._check_open()
        self._writer._end(self)
        self._closed = True

    def __enter__(self) -> ComponentWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._closed:
            raise ContractViolation(
                f"ComponentWriter.end() must be called for {self.kind.name}"
            )
