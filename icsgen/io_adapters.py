"""
Adapters between the text-sink protocol used by the writers and other
kinds of output.
"""

from __future__ import annotations

from typing import BinaryIO

from icsgen.spec import CRLF


class BinarySink:
    """
    Text sink over a binary stream: UTF-8 encodes every fragment.

    An OSError from the stream propagates; the FoldingWriter turns it into a
    FormatError. The last error is kept on `error` for inspection.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self.error: OSError | None = None
        self.bytes_written = 0

    def write(self, s: str) -> int:
        data = s.encode("utf-8")
        try:
            self.stream.write(data)
        except OSError as e:
            self.error = e
            raise
        self.error = None
        self.bytes_written += len(data)
        return len(s)


class LineRecorder:
    """
    Text sink that keeps what was written, split into content lines.

    Each entry is the raw text of one content line including its folds and
    the final CRLF. Used by the viewer and the CLI to show folding.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self._current: list[str] = []

    def write(self, s: str) -> int:
        self._current.append(s)
        if s == CRLF:
            self.lines.append("".join(self._current))
            self._current = []
        return len(s)

    def getvalue(self) -> str:
        return "".join(self.lines) + "".join(self._current)
