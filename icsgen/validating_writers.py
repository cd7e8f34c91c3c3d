"""
Charset-validating writers.

Each writer wraps an inner sink (normally a FoldingWriter) and enforces one
grammar production on every fragment before forwarding it. A fragment with a
forbidden character raises FormatError and nothing of it is forwarded.

    NameWriter          iana-token       letters, digits, "-"
    ParamtextWriter     paramtext        SAFE-CHAR
    QuotedStringWriter  quoted-string    QSAFE-CHAR, wrapped in DQUOTEs
    TextWriter          TEXT escaping    transforms instead of rejecting

Writers are created per field and closed right after it. close() hands back
the inner sink; writing after close() is a ContractViolation.
"""

from __future__ import annotations

from typing import Callable

from icsgen.errors import ContractViolation, FormatError
from icsgen.folding import TextSink
from icsgen.spec import (
    DQUOTE,
    escape_text,
    is_name_char,
    is_qsafe_char,
    is_safe_char,
)


class _FieldWriter:
    """Base for writers that check one character class."""

    grammar = ""
    _accepts: Callable[[str], bool] = staticmethod(lambda c: True)

    def __init__(self, inner: TextSink) -> None:
        self._inner = inner
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, s: str) -> None:
        self._check_open()
        for c in s:
            if not self._accepts(c):
                raise FormatError(f"{c!r} is not allowed in {self.grammar}: {s!r}")
        self._inner.write(s)

    def close(self) -> TextSink:
        self._check_open()
        self._closed = True
        return self._inner

    def _check_open(self) -> None:
        if self._closed:
            raise ContractViolation(f"{type(self).__name__} used after close()")


class NameWriter(_FieldWriter):
    """
    Validates the `name` grammar (property, parameter and component names).

    Only the iana-token character class is checked. x-name is a subset of it
    as far as characters go, and the vendorid rules are widely ignored in
    practice anyway.
    """

    grammar = "iana-token"
    _accepts = staticmethod(is_name_char)


class ParamtextWriter(_FieldWriter):
    """Validates an unquoted parameter value (paramtext).

    Use QuotedStringWriter for values containing ";", ":" or ",".
    """

    grammar = "paramtext"
    _accepts = staticmethod(is_safe_char)


class QuotedStringWriter(_FieldWriter):
    """
    Writes a quoted-string parameter value.

    The opening DQUOTE is written on construction, the closing one by close().
    There is no escaping mechanism inside a quoted-string: a URI containing
    DQUOTE has to be percent-encoded (%22) by the caller.

    close() is mandatory. Used as a context manager, leaving the block
    without closing raises ContractViolation.
    """

    grammar = "quoted-string"
    _accepts = staticmethod(is_qsafe_char)

    def __init__(self, inner: TextSink) -> None:
        super().__init__(inner)
        inner.write(DQUOTE)

    def close(self) -> TextSink:
        self._check_open()
        self._closed = True
        self._inner.write(DQUOTE)
        return self._inner

    def __enter__(self) -> QuotedStringWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._closed:
            raise ContractViolation(
                "QuotedStringWriter.close() must be called before leaving the block"
            )


class TextWriter(_FieldWriter):
    """
    Backslash-escapes TEXT values: "\\", newline, ";" and ",".

    No other value type may contain these characters, so every value slot goes
    through this writer regardless of its type.

    Reference: RFC 5545 3.3.11
    """

    grammar = "TEXT"

    def write(self, s: str) -> None:
        self._check_open()
        # Whole fragment in one write: forwarded completely or not at all.
        if s:
            self._inner.write(escape_text(s))
