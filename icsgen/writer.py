"""
icsgen Writer - Serializes CalendarDocument to .ics (RFC 5545).

Output is built through the typed stream writers, so every line is folded
and every field is checked on the way out; a document holding characters
the format cannot carry fails with FormatError and nothing is written to
the target path.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from typing import TYPE_CHECKING

from icsgen.catalog import METHOD, Property
from icsgen.io_adapters import LineRecorder
from icsgen.spec import EXTENSION
from icsgen.typed_writers import ICalStreamWriter, TimeTransparency
from icsgen.value_types import TEXT

if TYPE_CHECKING:
    from icsgen.document import CalendarDocument, CalendarEvent
    from icsgen.typed_writers import ICalObjectWriter

logger = logging.getLogger(__name__)

# Calendar display name, understood by most clients.
X_WR_CALNAME = Property("X-WR-CALNAME", TEXT)


class ICSWriter:

    @staticmethod
    def _write_event(cal: ICalObjectWriter, event: CalendarEvent) -> None:
        ev = cal.event()
        ev.dtstamp(event.dtstamp)
        ev.uid(event.uid)
        ev.dtstart(event.start)
        if event.end is not None:
            ev.dtend(event.end)
        if event.summary:
            ev.summary(event.summary)
        if event.description:
            ev.description(event.description)
        if event.location:
            ev.location(event.location)
        if event.categories:
            ev.categories(event.categories)
        if event.geo is not None:
            ev.geo(*event.geo)
        ev.time_transparency(
            TimeTransparency.TRANSPARENT if event.transparent else TimeTransparency.OPAQUE
        )
        ev.end()

    @staticmethod
    def _write_document(stream: ICalStreamWriter, doc: CalendarDocument) -> None:
        with stream:
            cal = stream.icalendar_object(doc.prodid)
            if doc.method:
                cal.simple_property(METHOD, doc.method)
            if doc.name:
                cal.simple_property(X_WR_CALNAME, doc.name)
            for event in doc.events:
                ICSWriter._write_event(cal, event)
            cal.end()
            stream.close()
        logger.debug("Serialized %d events in %d lines", len(doc.events), stream.lines_written)

    @staticmethod
    def serialize(doc: CalendarDocument) -> bytes:
        """Serialize a CalendarDocument to bytes. Pure, does not mutate the input."""
        buf = io.BytesIO()
        ICSWriter._write_document(ICalStreamWriter.for_binary(buf), doc)
        return buf.getvalue()

    @staticmethod
    def content_lines(doc: CalendarDocument) -> list[str]:
        """The content lines of `doc`, each with its folds and final CRLF."""
        recorder = LineRecorder()
        ICSWriter._write_document(ICalStreamWriter(recorder), doc)
        return recorder.lines

    @staticmethod
    def write(doc: CalendarDocument, path: str, mode: int = 0o644) -> int:
        """Write a CalendarDocument to a file atomically. Returns bytes written.

        The document is serialized completely before the file is touched, then
        written to a temp file in the target directory and renamed over the
        target.
        """
        data = ICSWriter.serialize(doc)
        dir_name = os.path.dirname(os.path.abspath(path)) or "."
        fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=f"{EXTENSION}.tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return len(data)
