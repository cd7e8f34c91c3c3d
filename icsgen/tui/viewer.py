"""icsgen TUI Viewer - Content lines of a calendar, with their folding."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header, Input

from icsgen.document import CalendarDocument
from icsgen.tui.widgets import CalendarPanel, FoldPanel, LineList, logical_text, physical_lines
from icsgen.writer import ICSWriter


class ICSViewerApp(App):
    """TUI viewer for generated .ics output. 3-panel layout with keyboard navigation."""

    TITLE = "icsgen Viewer"
    CSS = """
    Screen {
        layout: vertical;
    }
    #main-area {
        height: 1fr;
    }
    #search-bar {
        dock: bottom;
        display: none;
        height: 3;
        padding: 0 1;
    }
    #search-bar.visible {
        display: block;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("slash", "toggle_search", "Search", show=True),
        Binding("escape", "close_search", "Close search", show=False),
        Binding("j", "next_line", "Next", show=True),
        Binding("k", "prev_line", "Prev", show=True),
    ]

    def __init__(self, doc: CalendarDocument, title: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self._doc = doc
        self._source = title
        # FormatError propagates before the app starts.
        self._lines = ICSWriter.content_lines(doc)
        self._all_indices = list(range(len(self._lines)))

    @property
    def lines(self) -> list[str]:
        return self._lines

    def _info(self) -> dict[str, str]:
        folded = sum(1 for line in self._lines if len(physical_lines(line)) > 1)
        info = {"prodid": self._doc.prodid}
        if self._doc.name:
            info["name"] = self._doc.name
        if self._doc.method:
            info["method"] = self._doc.method
        info["events"] = str(len(self._doc.events))
        info["content lines"] = str(len(self._lines))
        info["folded lines"] = str(folded)
        info["octets"] = str(sum(len(line.encode("utf-8")) for line in self._lines))
        return info

    def compose(self) -> ComposeResult:
        if self._source:
            self.title = f"icsgen Viewer - {self._source}"

        yield Header()

        with Horizontal(id="main-area"):
            yield CalendarPanel(self._info(), id="calendar")
            yield LineList(self._lines, self._all_indices, id="lines")
            yield FoldPanel(id="folds")

        yield Input(placeholder="Filter lines... (Escape to close)", id="search-bar")
        yield Footer()

    def on_mount(self) -> None:
        if self._lines:
            self.query_one("#folds", FoldPanel).show_line(0, self._lines[0])
            self.query_one("#lines", LineList).focus()

    def on_line_list_line_selected(self, event: LineList.LineSelected) -> None:
        self.query_one("#folds", FoldPanel).show_line(
            event.line_index, self._lines[event.line_index]
        )

    def action_next_line(self) -> None:
        self.query_one("#lines", LineList).action_cursor_down()

    def action_prev_line(self) -> None:
        self.query_one("#lines", LineList).action_cursor_up()

    def action_toggle_search(self) -> None:
        search = self.query_one("#search-bar", Input)
        search.toggle_class("visible")
        if search.has_class("visible"):
            search.focus()
        else:
            search.value = ""
            self._update_line_list(self._all_indices)
            self.query_one("#lines", LineList).focus()

    def action_close_search(self) -> None:
        search = self.query_one("#search-bar", Input)
        search.remove_class("visible")
        search.value = ""
        self._update_line_list(self._all_indices)
        self.query_one("#lines", LineList).focus()

    def filter_lines(self, query: str) -> list[int]:
        """Indices of the content lines whose unfolded text contains `query`."""
        query = query.lower().strip()
        if not query:
            return list(self._all_indices)
        return [i for i in self._all_indices if query in logical_text(self._lines[i]).lower()]

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "search-bar":
            return
        self._update_line_list(self.filter_lines(event.value))

    def _update_line_list(self, indices: list[int]) -> None:
        old = self.query_one("#lines", LineList)
        new_list = LineList(self._lines, indices, id="lines")
        old.remove()
        self.query_one("#main-area", Horizontal).mount(new_list, before="#folds")
        if indices:
            self.query_one("#folds", FoldPanel).show_line(indices[0], self._lines[indices[0]])


def run_viewer(doc: CalendarDocument, title: str = "") -> None:
    """Launch the icsgen TUI viewer."""
    app = ICSViewerApp(doc, title=title)
    app.run()
