"""
Content-line state machine.

Produces exactly one content line:

    name *(";" param-name "=" param-value *("," param-value)) ":" value CRLF

The punctuation is inserted on each transition, the characters of every
field are checked by the validating writers, and all output goes through a
single FoldingWriter.

    INITIAL --name--> AFTER_NAME --param_name--> AFTER_PARAM_NAME
    AFTER_PARAM_NAME --param_value--> AFTER_PARAM_VALUE (--param_value--> ...)
    AFTER_PARAM_VALUE --param_name--> AFTER_PARAM_NAME
    AFTER_NAME | AFTER_PARAM_VALUE --value--> VALUE --eol--> CLOSED

Calling an operation in any other state raises ContractViolation.
"""

from __future__ import annotations

from enum import Enum

from icsgen.errors import ContractViolation
from icsgen.folding import FoldingWriter, TextSink
from icsgen.spec import (
    LIST_SEPARATOR,
    PARAM_ASSIGN,
    PARAM_SEPARATOR,
    PARAM_VALUE_SEPARATOR,
    TUPLE_SEPARATOR,
    VALUE_SEPARATOR,
)
from icsgen.validating_writers import (
    NameWriter,
    ParamtextWriter,
    QuotedStringWriter,
    TextWriter,
)


class State(Enum):
    INITIAL = "initial"
    AFTER_NAME = "after-name"
    AFTER_PARAM_NAME = "after-param-name"
    AFTER_PARAM_VALUE = "after-param-value"
    VALUE = "value"
    CLOSED = "closed"


class ContentLine:
    """
    Writer for a single content line.

    Usage:
        with ContentLine(sink) as cl:
            cl.name("X-PARAM-TEST")
            cl.param_unquoted("UNQUOTED", "unquoted text")
            cl.param_quoted("QUOTED", "Quoted text, with comma and a ;")
            cl.value("value")
            cl.eol()
    """

    def __init__(self, sink: TextSink) -> None:
        self._inner = FoldingWriter(sink)
        self._state = State.INITIAL
        # Field writer handed out last; retired on the next operation.
        self._field: NameWriter | ParamtextWriter | QuotedStringWriter | TextWriter | None = None

    @property
    def state(self) -> State:
        return self._state

    def _retire_field(self, op: str) -> None:
        field = self._field
        if field is None or field.closed:
            return
        if isinstance(field, QuotedStringWriter):
            raise ContractViolation(
                f"ContentLine.{op}() called while a quoted parameter value is open"
            )
        field.close()

    def _hand_out(self, field):
        self._field = field
        return field

    def _transition(self, allowed: tuple[State, ...], to: State, op: str) -> State:
        self._retire_field(op)
        if self._state not in allowed:
            expected = " or ".join(s.name for s in allowed)
            raise ContractViolation(
                f"ContentLine.{op}() requires state {expected}, not {self._state.name}"
            )
        previous = self._state
        self._state = to
        return previous

    # --- name ---

    def name_writer(self) -> NameWriter:
        self._transition((State.INITIAL,), State.AFTER_NAME, "name_writer")
        return self._hand_out(NameWriter(self._inner))

    def name(self, name: str) -> None:
        self.name_writer().write(name)

    # --- parameters ---

    def param_name_writer(self) -> NameWriter:
        self._transition(
            (State.AFTER_NAME, State.AFTER_PARAM_VALUE),
            State.AFTER_PARAM_NAME,
            "param_name_writer",
        )
        self._inner.write(PARAM_SEPARATOR)
        return self._hand_out(NameWriter(self._inner))

    def param_name(self, name: str) -> None:
        self.param_name_writer().write(name)

    def _goto_param_value(self, op: str) -> None:
        previous = self._transition(
            (State.AFTER_PARAM_NAME, State.AFTER_PARAM_VALUE),
            State.AFTER_PARAM_VALUE,
            op,
        )
        if previous is State.AFTER_PARAM_NAME:
            self._inner.write(PARAM_ASSIGN)
        else:
            self._inner.write(PARAM_VALUE_SEPARATOR)

    def param_value_unquoted_writer(self) -> ParamtextWriter:
        self._goto_param_value("param_value_unquoted_writer")
        return self._hand_out(ParamtextWriter(self._inner))

    def param_value_unquoted(self, value: str) -> None:
        self.param_value_unquoted_writer().write(value)

    def param_value_quoted_writer(self) -> QuotedStringWriter:
        self._goto_param_value("param_value_quoted_writer")
        return self._hand_out(QuotedStringWriter(self._inner))

    def param_value_quoted(self, value: str) -> None:
        with self.param_value_quoted_writer() as pv:
            pv.write(value)
            pv.close()

    def param_unquoted(self, name: str, value: str) -> None:
        self.param_name(name)
        self.param_value_unquoted(value)

    def param_quoted(self, name: str, value: str) -> None:
        self.param_name(name)
        self.param_value_quoted(value)

    # --- value ---

    def _value_writer(self, op: str) -> FoldingWriter:
        self._transition(
            (State.AFTER_NAME, State.AFTER_PARAM_VALUE), State.VALUE, op
        )
        self._inner.write(VALUE_SEPARATOR)
        return self._inner

    def value_tuple_writer(self) -> ValueTupleWriter:
        """Begin the value; slots are separated by ";"."""
        return ValueTupleWriter(self._value_writer("value_tuple_writer"), self)

    def value_list_writer(self) -> ValueListWriter:
        """Begin the value; items are separated by ","."""
        return ValueListWriter(self._value_writer("value_list_writer"), self)

    def value(self, text: str) -> None:
        """Write a single, escaped value."""
        self.value_tuple_writer().next_value_writer().write(text)

    def eol(self) -> TextSink:
        """Terminate the line. Returns the sink."""
        self._transition((State.VALUE,), State.CLOSED, "eol")
        return self._inner.eol()

    def _check_value_state(self) -> None:
        if self._state is not State.VALUE:
            raise ContractViolation(
                f"Value slot written in state {self._state.name}, expected VALUE"
            )

    def __enter__(self) -> ContentLine:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and self._state is not State.CLOSED:
            raise ContractViolation(
                f"ContentLine left in state {self._state.name}; eol() must be called"
            )


class _SlotWriter:
    """Hands out one TextWriter per value slot, separated by `separator`."""

    separator = ""

    def __init__(self, inner: FoldingWriter, line: ContentLine) -> None:
        self._inner = inner
        self._line = line
        self._first = True

    def next_value_writer(self) -> TextWriter:
        self._line._check_value_state()
        self._line._retire_field("next_value_writer")
        if self._first:
            self._first = False
        else:
            self._inner.write(self.separator)
        return self._line._hand_out(TextWriter(self._inner))


class ValueTupleWriter(_SlotWriter):
    separator = TUPLE_SEPARATOR


class ValueListWriter(_SlotWriter):
    separator = LIST_SEPARATOR
