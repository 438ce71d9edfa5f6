"""Quick filter bar shown above the issue table."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Input, Static

from jira_tui import messages as msg
from jira_tui.filter import FILTER_CHAR_LIMIT, QuickFilter

PLACEHOLDER = "type to filter..."


class FilterBar(Horizontal):
    """``/ query  N of M issues``. Hidden while the filter is inactive.

    While the filter is focused the query is typed into an ``Input``; once
    applied it is shown as plain text and the input gives up focus.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Clear filter", show=False),
        Binding("down", "confirm", "Apply filter", show=False),
    ]

    DEFAULT_CSS = """
    FilterBar {
        height: 1;
        padding: 0 1;
        background: $surface;
        display: none;
    }
    FilterBar.active {
        display: block;
    }
    #filter-prompt {
        width: 2;
        color: #4C9AFF;
        text-style: bold;
    }
    #filter-input {
        width: 1fr;
        height: 1;
        border: none;
        padding: 0;
        display: none;
    }
    #filter-query {
        width: 1fr;
    }
    #filter-count {
        width: auto;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._editing = False

    def compose(self) -> ComposeResult:
        yield Static("/ ", id="filter-prompt")
        yield Input(placeholder=PLACEHOLDER, max_length=FILTER_CHAR_LIMIT, id="filter-input")
        yield Static("", id="filter-query")
        yield Static("", id="filter-count")

    def show_filter(self, quick_filter: QuickFilter | None) -> None:
        filter_input = self.query_one("#filter-input", Input)
        query = self.query_one("#filter-query", Static)
        editing = quick_filter is not None and quick_filter.is_focused
        if editing and not self._editing:
            # The input owns the text from here until the filter is closed.
            filter_input.value = quick_filter.text
        elif not editing and self._editing:
            self._release(filter_input)
        self._editing = editing
        filter_input.display = editing
        query.display = not editing

        if quick_filter is None or not quick_filter.is_active:
            self.remove_class("active")
            return
        self.add_class("active")
        if editing:
            if not filter_input.has_focus:
                filter_input.focus()
        else:
            query.update(Text(quick_filter.query, style="dim"))
        self.query_one("#filter-count", Static).update(
            Text(f"  {quick_filter.match_text()}", style="#6B778C")
        )

    def _release(self, filter_input: Input) -> None:
        if filter_input.has_focus:
            self.screen.set_focus(None)
        filter_input.value = ""

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        if self._editing:
            self.app.feed(msg.FilterEdited(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.app.feed(msg.FilterConfirmed())

    def action_cancel(self) -> None:
        self.app.feed(msg.FilterCancelled())

    def action_confirm(self) -> None:
        self.app.feed(msg.FilterConfirmed())
