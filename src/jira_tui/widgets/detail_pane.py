"""Detail view widget: renders the visible slice of a DetailView buffer."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from jira_tui.detail import DetailView


class DetailPane(Static):

    DEFAULT_CSS = """
    DetailPane {
        height: 1fr;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)

    def show_view(self, view: DetailView) -> None:
        self.update(Text("\n").join(view.visible_lines()))
