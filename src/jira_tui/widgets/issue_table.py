"""Issue list table based on DataTable."""

from __future__ import annotations

from textual.widgets import DataTable

from rich.text import Text

from jira_tui.columns import build_columns, field_value
from jira_tui.models import Issue
from jira_tui.priority import priority_color, priority_icon
from jira_tui.tab import Tab


def _make_row(issue: Issue, columns: tuple[str, ...]) -> list[Text | str]:
    row: list[Text | str] = []
    for column in columns:
        if column == "priority" and issue.fields.priority is not None:
            name = issue.fields.priority.name
            row.append(Text(priority_icon(name), style=priority_color(name) or ""))
        elif column == "key":
            row.append(Text(issue.key, style="bold"))
        else:
            row.append(field_value(issue, column))
    return row


class IssueTable(DataTable):
    """Read-only view of a tab's visible issues.

    The table never takes focus; the app owns the cursor and mirrors it here.
    Rows are only rebuilt when the visible issues or column layout change.
    """

    can_focus = False

    DEFAULT_CSS = """
    IssueTable {
        height: 1fr;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(cursor_type="row", zebra_stripes=True, **kwargs)
        self._signature: tuple = ()

    def show_tab(self, tab: Tab) -> None:
        visible = tab.visible_issues()
        layout = tuple(build_columns(tab.columns, tab.width or self.size.width))
        signature = (layout, tuple(visible))
        if signature != self._signature:
            self._signature = signature
            self.clear(columns=True)
            for (title, width), name in zip(layout, tab.columns):
                self.add_column(title, key=name, width=width)
            for issue in visible:
                self.add_row(*_make_row(issue, tab.columns), key=issue.key)
        if visible:
            self.move_cursor(row=tab.cursor, animate=False)
