"""
Folding Writer - the single point of contact with the output sink.

Every fragment of a content line passes through here on its way out:
  1. Reject control characters (VALUE-CHAR check)
  2. Split the fragment so no physical line exceeds 75 octets
  3. Fold on UTF-8 codepoint boundaries with CRLF SPACE

Usage:
    buf = io.StringIO()
    with FoldingWriter(buf) as w:
        w.write("DESCRIPTION:")
        w.write("a long value ...")
        w.eol()
"""

from __future__ import annotations

from typing import Protocol

from icsgen.errors import ContractViolation, FormatError
from icsgen.spec import (
    CONTINUATION,
    CONTINUATION_LINE_LENGTH,
    CRLF,
    MAX_LINE_LENGTH,
    MAX_UTF8_CONTINUATION_BYTES,
    is_control_byte,
)


class TextSink(Protocol):
    def write(self, s: str, /) -> object: ...


class FoldingWriter:
    """
    Writes one content line, folded at 75 octets.

    The writer must be finished with eol(). Use it as a context manager to
    have a missing eol() reported.
    """

    def __init__(self, sink: TextSink) -> None:
        self._sink = sink
        self._remaining = MAX_LINE_LENGTH
        self._passed_eol = False

    @property
    def closed(self) -> bool:
        return self._passed_eol

    @property
    def remaining(self) -> int:
        """Octets left on the current physical line."""
        return self._remaining

    def write(self, fragment: str) -> None:
        if self._passed_eol:
            raise ContractViolation("FoldingWriter.write() called after eol()")

        try:
            b = fragment.encode("utf-8")
        except UnicodeEncodeError as e:
            raise FormatError(f"Not encodable as UTF-8: {fragment!r}") from e

        # Control chars are not valid at this level of the syntax. TEXT
        # values transport newlines as "\n".
        if any(is_control_byte(x) for x in b):
            raise FormatError(f"Control character in {fragment!r}")

        start = 0
        while len(b) - start > self._remaining:
            end = start + self._remaining
            steps = 0
            while b[end] & 0xC0 == 0x80:
                end -= 1
                steps += 1
                if steps > MAX_UTF8_CONTINUATION_BYTES:
                    raise FormatError("Malformed UTF-8 sequence")

            self._emit(b[start:end].decode("utf-8"))
            self._emit(CONTINUATION)
            start = end
            self._remaining = CONTINUATION_LINE_LENGTH

        self._remaining -= len(b) - start
        self._emit(b[start:].decode("utf-8"))

    def eol(self) -> TextSink:
        """Terminate the line with CRLF. Returns the sink."""
        if self._passed_eol:
            raise ContractViolation("FoldingWriter.eol() called twice")
        self._passed_eol = True
        self._emit(CRLF)
        return self._sink

    def _emit(self, s: str) -> None:
        if not s:
            return
        try:
            self._sink.write(s)
        except (OSError, UnicodeError) as e:
            raise FormatError(f"Sink write failed: {e}") from e

    def __enter__(self) -> FoldingWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._passed_eol:
            raise ContractViolation(
                "FoldingWriter.eol() must be called before leaving the block"
            )
