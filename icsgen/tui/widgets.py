"""icsgen TUI Widgets - Panels for the content-line viewer."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Label, ListItem, ListView, Static

from icsgen.spec import CONTINUATION, CRLF, MAX_LINE_LENGTH, unfold


def physical_lines(content_line: str) -> list[str]:
    """Split one folded content line into its physical lines, without CRLF.

    Continuation lines keep their leading space.
    """
    body = content_line[:-len(CRLF)] if content_line.endswith(CRLF) else content_line
    parts = body.split(CONTINUATION)
    return parts[:1] + [" " + p for p in parts[1:]]


def logical_text(content_line: str) -> str:
    """The content line unfolded, without its CRLF."""
    return unfold(content_line).removesuffix(CRLF)


class CalendarPanel(Static):
    """Sidebar panel with the calendar header and line statistics."""

    DEFAULT_CSS = """
    CalendarPanel {
        width: 32;
        border: solid $accent;
        padding: 1;
        overflow-y: auto;
    }
    CalendarPanel .cal-title {
        text-style: bold;
        color: $text;
        margin-bottom: 1;
    }
    CalendarPanel .cal-key {
        color: $text-muted;
    }
    CalendarPanel .cal-val {
        color: $text;
    }
    """

    def __init__(self, info: dict[str, str], **kwargs) -> None:
        super().__init__(**kwargs)
        self._info = info

    def compose(self) -> ComposeResult:
        yield Label("VCALENDAR", classes="cal-title")
        for key, val in self._info.items():
            display = val if len(val) <= 24 else val[:21] + "..."
            yield Label(f"{key}:", classes="cal-key")
            yield Label(f"  {display}", classes="cal-val", markup=False)


class LineList(ListView):
    """One entry per content line, showing its property name."""

    DEFAULT_CSS = """
    LineList {
        width: 36;
        border: solid $accent;
    }
    LineList > ListItem {
        padding: 0 1;
    }
    LineList > ListItem.--highlight {
        background: $accent;
    }
    """

    class LineSelected(Message):
        """Fired when a content line is highlighted or selected."""

        def __init__(self, line_index: int) -> None:
            self.line_index = line_index
            super().__init__()

    def __init__(self, lines: list[str], indices: list[int], **kwargs) -> None:
        self._lines = lines
        self._indices = indices
        super().__init__(**kwargs)

    def compose(self) -> ComposeResult:
        for i in self._indices:
            text = logical_text(self._lines[i])
            folds = len(physical_lines(self._lines[i])) - 1
            label = text if len(text) <= 28 else text[:25] + "..."
            if folds:
                label += f" [{folds}]"
            yield ListItem(Label(label, markup=False))

    def _post_selected(self) -> None:
        pos = self.index or 0
        if 0 <= pos < len(self._indices):
            self.post_message(self.LineSelected(self._indices[pos]))

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        self._post_selected()

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        self._post_selected()


class FoldPanel(Static):
    """The physical lines of one content line, with their octet counts."""

    DEFAULT_CSS = """
    FoldPanel {
        border: solid $accent;
        padding: 1;
        overflow: auto;
    }
    FoldPanel .fold-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }
    """

    current_line = reactive(-1)

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._title_widget: Label | None = None
        self._body_widget: Static | None = None

    def compose(self) -> ComposeResult:
        self._title_widget = Label("Select a content line", classes="fold-title")
        self._body_widget = Static("", classes="fold-body", markup=False)
        yield self._title_widget
        yield self._body_widget

    @staticmethod
    def describe(content_line: str) -> str:
        rows = []
        for n, physical in enumerate(physical_lines(content_line), start=1):
            octets = len(physical.encode("utf-8"))
            flag = " !" if octets > MAX_LINE_LENGTH else ""
            rows.append(f"{n:>3} {octets:>3}{flag} | {physical}")
        rows.append("")
        rows.append("unfolded:")
        rows.append(logical_text(content_line))
        return "\n".join(rows)

    def show_line(self, index: int, content_line: str) -> None:
        self.current_line = index
        if self._title_widget:
            count = len(physical_lines(content_line))
            self._title_widget.update(f"--- line {index + 1}, {count} physical ---")
        if self._body_widget:
            self._body_widget.update(self.describe(content_line))
        self.scroll_home()
