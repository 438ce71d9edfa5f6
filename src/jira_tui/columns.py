"""Column definitions, widths and cell values for issue tables."""

from __future__ import annotations

from typing import NamedTuple

from jira_tui.models import Issue
from jira_tui.priority import priority_icon


class ColumnDef(NamedTuple):
    title: str
    min_width: int
    flex: bool = False


KNOWN_COLUMNS: dict[str, ColumnDef] = {
    "key": ColumnDef("Key", 12),
    "summary": ColumnDef("Summary", 20, flex=True),
    "status": ColumnDef("Status", 14),
    "priority": ColumnDef("Priority", 10),
    "assignee": ColumnDef("Assignee", 14),
    "reporter": ColumnDef("Reporter", 14),
    "type": ColumnDef("Type", 10),
    "project": ColumnDef("Project", 10),
    "created": ColumnDef("Created", 12),
    "updated": ColumnDef("Updated", 12),
}

UNKNOWN_COLUMN_WIDTH = 12
MIN_FLEX_WIDTH = 20


def column_def(name: str) -> ColumnDef:
    return KNOWN_COLUMNS.get(name, ColumnDef(name, UNKNOWN_COLUMN_WIDTH))


def build_columns(names: tuple[str, ...] | list[str], total_width: int) -> list[tuple[str, int]]:
    """Return ``(title, width)`` per column, sizing flex columns to fill *total_width*.

    Each column reserves two cells of padding. Flex columns share the
    remaining width but never drop below ``MIN_FLEX_WIDTH``.
    """
    defs = [column_def(name) for name in names]
    fixed_total = sum(d.min_width for d in defs if not d.flex)
    flex_count = sum(1 for d in defs if d.flex)

    per_flex = 0
    if flex_count:
        remaining = max(0, total_width - fixed_total - len(defs) * 2)
        per_flex = max(MIN_FLEX_WIDTH, remaining // flex_count)

    return [(d.title, per_flex if d.flex else d.min_width) for d in defs]


def format_date(value: str) -> str:
    """Trim a Jira timestamp to its date part."""
    return value[:10] if len(value) >= 10 else value


def field_value(issue: Issue, column: str) -> str:
    """Plain display value of *column* for *issue* (used for filtering and cells)."""
    fields = issue.fields
    if column == "key":
        return issue.key
    elif column == "summary":
        return fields.summary
    elif column == "status":
        return fields.status.name if fields.status else ""
    elif column == "priority":
        return fields.priority.name if fields.priority else ""
    elif column == "assignee":
        return fields.assignee.display_name if fields.assignee else ""
    elif column == "reporter":
        return fields.reporter.display_name if fields.reporter else ""
    elif column == "type":
        return fields.issue_type.name if fields.issue_type else ""
    elif column == "project":
        return fields.project.name if fields.project else ""
    elif column == "created":
        return format_date(fields.created)
    elif column == "updated":
        return format_date(fields.updated)
    return ""


def issue_to_row(issue: Issue, columns: tuple[str, ...] | list[str]) -> list[str]:
    """Table cells for one issue. Priority cells show an icon instead of the name."""
    row: list[str] = []
    for column in columns:
        if column == "priority" and issue.fields.priority is not None:
            row.append(priority_icon(issue.fields.priority.name))
        else:
            row.append(field_value(issue, column))
    return row
