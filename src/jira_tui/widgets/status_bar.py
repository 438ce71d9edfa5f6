"""Bottom status line: user, flash message, activity spinner and key help."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from jira_tui.state import AppState

LIST_HELP = "/: filter  c: create  o: open  q: quit"
DETAIL_HELP = "enter: related  c: comment  d: done  del: delete  q: quit"

SUCCESS_STYLE = "#36B37E"
ERROR_STYLE = "bold #FF5630"
HELP_STYLE = "#6B778C"


class StatusBar(Static):

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $primary-background;
        color: $text;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)

    def show_state(self, state: AppState) -> None:
        parts: list[Text] = []
        if state.in_flight > 0:
            parts.append(Text(state.spinner, style="#4C9AFF"))
        if state.user is not None:
            parts.append(Text(state.user.display_name, style=SUCCESS_STYLE))
        if state.flash is not None:
            style = ERROR_STYLE if state.flash.is_error else SUCCESS_STYLE
            parts.append(Text(state.flash.text, style=style))
        parts.append(Text(DETAIL_HELP if state.view_stack else LIST_HELP, style=HELP_STYLE))
        self.update(Text("  │  ", style=HELP_STYLE).join(parts))
