"""Tab bar widget."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from jira_tui.tab import Tab


class TabBar(Static):
    """A strip of `` N Label `` tabs with the active one highlighted."""

    DEFAULT_CSS = """
    TabBar {
        height: 1;
        padding: 0;
        background: $surface-darken-1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._signature: tuple = ()

    def update_tabs(self, tabs: list[Tab], active: int) -> None:
        """Rebuild the tab strip when the labels or the active tab change."""
        signature = (tuple(tab.label for tab in tabs), active)
        if signature == self._signature:
            return
        self._signature = signature
        text = Text()
        for i, tab in enumerate(tabs):
            label = f" {i + 1} {tab.label} "
            if i == active:
                text.append(label, style="bold reverse")
            else:
                text.append(label, style="dim")
        self.update(text)
