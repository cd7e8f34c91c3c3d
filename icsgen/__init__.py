"""
icsgen - iCalendar (RFC 5545) content-line generator.

Folding, character validation and escaping happen while writing, so
nothing malformed ever reaches the sink.
"""

__version__ = "0.1.0"

from icsgen.errors import ContractViolation, FormatError
from icsgen.folding import FoldingWriter
from icsgen.content_line import ContentLine
from icsgen.stream import LineStream, Writer
from icsgen.typed_writers import ICalStreamWriter
from icsgen.document import CalendarDocument, CalendarEvent
from icsgen.writer import ICSWriter
