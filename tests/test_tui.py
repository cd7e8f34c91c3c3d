"""
TUI Tests - Folding helpers and line filtering of the viewer.
"""

from datetime import date, datetime, timezone

import pytest

pytest.importorskip("textual")

from icsgen.document import CalendarDocument
from icsgen.tui.viewer import ICSViewerApp
from icsgen.tui.widgets import FoldPanel, logical_text, physical_lines


FOLDED = "DESCRIPTION:" + "a" * 63 + "\r\n " + "b" * 10 + "\r\n"


def _doc():
    doc = CalendarDocument.create(prodid="-//tui//EN", name="Viewer")
    doc.add_event(
        uid="one@tui",
        dtstamp=datetime(2024, 6, 26, 12, tzinfo=timezone.utc),
        start=date(2024, 6, 26),
        summary="Midsummer",
        description="long " * 40,
    )
    return doc


class TestHelpers:

    def test_physical_lines(self):
        assert physical_lines(FOLDED) == ["DESCRIPTION:" + "a" * 63, " " + "b" * 10]

    def test_physical_lines_unfolded(self):
        assert physical_lines("BEGIN:VCALENDAR\r\n") == ["BEGIN:VCALENDAR"]

    def test_logical_text(self):
        assert logical_text(FOLDED) == "DESCRIPTION:" + "a" * 63 + "b" * 10

    def test_describe(self):
        rows = FoldPanel.describe(FOLDED).split("\n")
        assert rows[0] == "  1  75 | DESCRIPTION:" + "a" * 63
        assert rows[1] == "  2  11 |  " + "b" * 10
        assert rows[-1] == logical_text(FOLDED)

    def test_describe_flags_long_lines(self):
        assert " !" in FoldPanel.describe("X:" + "a" * 80 + "\r\n")


class TestViewerApp:

    def test_lines(self):
        app = ICSViewerApp(_doc())
        assert app.lines[0] == "BEGIN:VCALENDAR\r\n"
        assert app.lines[-1] == "END:VCALENDAR\r\n"

    def test_filter_lines(self):
        app = ICSViewerApp(_doc())
        hits = app.filter_lines("summary")
        assert [logical_text(app.lines[i]) for i in hits] == ["SUMMARY:Midsummer"]

    def test_filter_empty_query(self):
        app = ICSViewerApp(_doc())
        assert app.filter_lines("  ") == list(range(len(app.lines)))

    def test_filter_matches_across_folds(self):
        app = ICSViewerApp(_doc())
        hits = app.filter_lines("long long long long long long long long long long long long long long long")
        assert len(hits) == 1
        assert len(physical_lines(app.lines[hits[0]])) > 1

    def test_info(self):
        info = ICSViewerApp(_doc())._info()
        assert info["prodid"] == "-//tui//EN"
        assert info["name"] == "Viewer"
        assert info["events"] == "1"
        assert int(info["folded lines"]) >= 1
