"""
Security Tests - Content-line injection through names, parameters and values.

Untrusted strings end up in names, parameter values and property values.
None of them may start a new content line or a new component.
"""

import io
import subprocess
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from icsgen.catalog import ATTENDEE, CN, DELEGATED_TO, SUMMARY, VCALENDAR
from icsgen.content_line import ContentLine
from icsgen.document import CalendarDocument
from icsgen.errors import FormatError
from icsgen.spec import unfold
from icsgen.stream import Writer
from icsgen.writer import ICSWriter

STAMP = datetime(2024, 6, 26, 12, tzinfo=timezone.utc)


def _lines(data: bytes) -> list[str]:
    return unfold(data.decode("utf-8")).split("\r\n")


class TestValueInjection:

    def test_newline_in_text_is_escaped(self):
        doc = CalendarDocument.create(prodid="-//sec//EN")
        doc.add_event(
            uid="u", dtstamp=STAMP, start=date(2024, 1, 1),
            summary="Lunch\nEND:VEVENT\nBEGIN:VEVENT\nSUMMARY:Injected",
        )
        lines = _lines(ICSWriter.serialize(doc))
        assert lines.count("BEGIN:VEVENT") == 1
        assert lines.count("END:VEVENT") == 1
        assert "SUMMARY:Lunch\\nEND:VEVENT\\nBEGIN:VEVENT\\nSUMMARY:Injected" in lines

    @pytest.mark.parametrize("payload", [
        "Lunch\r\nATTENDEE:mailto:evil@example.com",
        "Lunch\rATTENDEE:x",
        "null\x00byte",
        "escape\x1b[31m",
    ])
    def test_control_in_text_is_rejected(self, payload):
        doc = CalendarDocument.create(prodid="-//sec//EN")
        doc.add_event(uid="u", dtstamp=STAMP, start=date(2024, 1, 1), summary=payload)
        with pytest.raises(FormatError):
            ICSWriter.serialize(doc)

    def test_control_in_uid_is_rejected(self):
        doc = CalendarDocument.create(prodid="-//sec//EN")
        doc.add_event(uid="a\r\nb", dtstamp=STAMP, start=date(2024, 1, 1))
        with pytest.raises(FormatError):
            ICSWriter.serialize(doc)

    def test_crlf_in_prodid_is_rejected(self):
        doc = CalendarDocument.create(prodid="-//sec//EN\r\nMETHOD:CANCEL")
        with pytest.raises(FormatError):
            ICSWriter.serialize(doc)


class TestNameInjection:

    @pytest.mark.parametrize("name", [
        "SUMMARY:x\r\nATTENDEE",
        "X;CN=a",
        "X:y",
        "X Y",
    ])
    def test_bad_property_name(self, name):
        line = ContentLine(io.StringIO())
        with pytest.raises(FormatError):
            line.name(name)

    def test_bad_param_name(self):
        line = ContentLine(io.StringIO())
        line.name("X")
        with pytest.raises(FormatError):
            line.param_name("CN=evil")


class TestParamInjection:

    def test_unquoted_separator_rejected(self):
        line = ContentLine(io.StringIO())
        line.name("X")
        line.param_name("P")
        with pytest.raises(FormatError):
            line.param_value_unquoted("a;ROLE=CHAIR")

    def test_dquote_in_quoted_rejected(self):
        line = ContentLine(io.StringIO())
        line.name("X")
        line.param_name("P")
        with pytest.raises(FormatError):
            line.param_value_quoted('a":evil')

    def test_separators_are_quoted(self):
        buf = io.StringIO()
        with Writer(buf) as w:
            with w.property(ATTENDEE) as p:
                p.param(CN, "Doe, Jane;ROLE=CHAIR")
                p.value("mailto:jane@example.com")
                p.end()
            w.close()
        assert buf.getvalue() == 'ATTENDEE;CN="Doe, Jane;ROLE=CHAIR":mailto:jane@example.com\r\n'

    def test_dquote_through_catalog_rejected(self):
        w = Writer(io.StringIO())
        p = w.property(ATTENDEE)
        with pytest.raises(FormatError):
            p.param(CN, 'Jane "The Boss" Doe')

    def test_newline_in_param_set_rejected(self):
        w = Writer(io.StringIO())
        p = w.property(ATTENDEE)
        with pytest.raises(FormatError):
            p.param(DELEGATED_TO, ["mailto:a@example.com", "mailto:b@example.com\r\nX:y"])


class TestComponentInjection:

    def test_component_end_cannot_be_forged(self):
        buf = io.StringIO()
        with Writer(buf) as w:
            with w.component(VCALENDAR) as cal:
                cal.simple_property(SUMMARY, "x\nEND:VCALENDAR")
                cal.end()
            w.close()
        assert buf.getvalue().count("END:VCALENDAR") == 2
        assert buf.getvalue().splitlines()[-1] == "END:VCALENDAR"
        assert "SUMMARY:x\\nEND:VCALENDAR\r\n" in buf.getvalue()


class TestCLIPaths:

    def test_output_path_traversal_rejected(self, tmp_path):
        src = tmp_path / "cal.json"
        src.write_text('{"events": []}', encoding="utf-8")
        result = subprocess.run(
            [sys.executable, "-m", "icsgen.cli", "convert", str(src), "-o", "../escape.ics"],
            capture_output=True,
            text=True,
            cwd=str(Path(__file__).parent.parent),
        )
        assert result.returncode == 1
        assert "path traversal" in result.stderr
