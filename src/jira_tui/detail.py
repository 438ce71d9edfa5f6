"""Issue detail view: a scrollable, rebuildable content buffer for one issue."""

from __future__ import annotations

import copy
import textwrap
from dataclasses import dataclass, field

from rich.text import Text

from jira_tui.adf import extract_adf_text
from jira_tui.models import Comment, Issue, Status, User
from jira_tui.overlay import SelectionItem
from jira_tui.priority import priority_label

MIN_VIEWPORT_HEIGHT = 3
LABEL_WIDTH = 14
LINK_TYPE_WIDTH = 20

KEY_STYLE = "bold #4C9AFF"
DIM_STYLE = "#8993A4"
HINT_STYLE = "#6B778C"

_STATUS_COLORS = {
    "new": "#4C9AFF",
    "indeterminate": "#FFAB00",
    "done": "#36B37E",
}

_TYPE_COLORS = {
    "epic": "#8777D9",
    "bug": "#FF5630",
    "compliance": "#FF8B00",
}


def format_detail_date(value: str) -> str:
    """``2025-07-01T10:23:45.000+0000`` -> ``2025-07-01 10:23``."""
    if len(value) >= 16:
        return f"{value[:10]} {value[11:16]}"
    return value


def _status_style(status: Status | None) -> str:
    if status is None or not status.category:
        return "bold"
    return f"bold {_STATUS_COLORS.get(status.category, '#C1C7D0')}"


def _type_style(name: str) -> str:
    return f"bold {_TYPE_COLORS.get(name.lower(), DIM_STYLE)}"


def _user_name(user: User | None, fallback: str = "") -> str:
    return user.display_name if user else fallback


def _done_icon(issue: Issue) -> Text:
    status = issue.fields.status
    if status is not None and status.is_done:
        return Text("✓", style="#36B37E")
    return Text("·", style=DIM_STYLE)


@dataclass
class DetailView:
    """Detail view for one issue.

    The issue is a copy; updates to the same key elsewhere must also be
    applied here. ``lines`` is rebuilt from scratch whenever data or size
    changes and is never edited in place.
    """

    issue: Issue
    base_url: str = ""
    width: int = 80
    height: int = 24
    loading: bool = True
    dirty: bool = False
    comments: list[Comment] = field(default_factory=list)
    comments_loading: bool = True
    children: list[Issue] = field(default_factory=list)
    children_loading: bool = True
    offset: int = 0
    lines: list[Text] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.build_content()

    def __deepcopy__(self, memo):
        clone = copy.copy(self)
        clone.comments = list(self.comments)
        clone.children = list(self.children)
        clone.lines = list(self.lines)
        return clone

    @property
    def key(self) -> str:
        return self.issue.key

    @property
    def title(self) -> str:
        return self.issue.key

    @property
    def viewport_height(self) -> int:
        return max(MIN_VIEWPORT_HEIGHT, self.height - 3)

    # ── Data updates ──

    def set_size(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.build_content()

    def set_issue(self, issue: Issue) -> None:
        """Full issue arrived from the server."""
        self.issue = issue
        self.loading = False
        self.build_content()

    def update_issue(self, issue: Issue) -> None:
        """The issue was edited while this view is open."""
        self.issue = issue
        self.dirty = True
        self.build_content()

    def finish_loading(self) -> None:
        self.loading = False
        self.build_content()

    def set_comments(self, comments: list[Comment] | None) -> None:
        """``None`` means the fetch failed and the section is omitted."""
        self.comments = list(comments or [])
        self.comments_loading = False
        self.build_content()

    def set_children(self, children: list[Issue] | None) -> None:
        self.children = list(children or [])
        self.children_loading = False
        self.build_content()

    def add_pending_comment(self, comment: Comment) -> None:
        self.comments.insert(0, comment)
        self.build_content()

    def resolve_pending_comment(self, comment: Comment | None) -> None:
        """Replace the first pending placeholder, or drop it when *comment* is None."""
        for i, existing in enumerate(self.comments):
            if existing.pending:
                if comment is None:
                    del self.comments[i]
                else:
                    self.comments[i] = comment
                break
        self.build_content()

    # ── Scrolling ──

    def max_offset(self) -> int:
        return max(0, len(self.lines) - self.viewport_height)

    def scroll(self, delta: int) -> None:
        self.offset = max(0, min(self.offset + delta, self.max_offset()))

    def go_top(self) -> None:
        self.offset = 0

    def go_bottom(self) -> None:
        self.offset = self.max_offset()

    def scroll_key(self, key: str) -> bool:
        if key in ("up", "k"):
            self.scroll(-1)
        elif key in ("down", "j"):
            self.scroll(1)
        elif key == "pageup":
            self.scroll(-self.viewport_height)
        elif key == "pagedown":
            self.scroll(self.viewport_height)
        elif key in ("home", "g"):
            self.go_top()
        elif key in ("end", "G"):
            self.go_bottom()
        else:
            return False
        return True

    def visible_lines(self) -> list[Text]:
        return self.lines[self.offset:self.offset + self.viewport_height]

    def plain_text(self) -> str:
        return "\n".join(line.plain for line in self.lines)

    # ── Related issues ──

    def related_issues(self) -> list[SelectionItem]:
        """Drillable issues in order: parent, subtasks, children, links."""
        items: list[SelectionItem] = []
        fields = self.issue.fields
        if fields.parent is not None:
            parent = fields.parent
            items.append(SelectionItem(
                id=parent.key,
                label=f"{parent.key} {parent.summary} Parent",
                desc="Parent",
                display=f"[Parent]  {parent.key}  {parent.summary}",
                icon="▲",
            ))
        for sub in fields.subtasks:
            items.append(SelectionItem(
                id=sub.key,
                label=f"{sub.key} {sub.fields.summary} Subtask",
                desc="Subtask",
                display=f"[Subtask]  {sub.key}  {sub.fields.summary}",
                icon="▼",
            ))
        for child in self.children:
            type_name = child.fields.issue_type.name if child.fields.issue_type else "Child"
            items.append(SelectionItem(
                id=child.key,
                label=f"{child.key} {child.fields.summary} {type_name}",
                desc=type_name,
                display=f"[{type_name}]  {child.key}  {child.fields.summary}",
                icon="▼",
            ))
        for link in fields.links:
            for linked, relation in ((link.outward_issue, link.outward), (link.inward_issue, link.inward)):
                if linked is None:
                    continue
                items.append(SelectionItem(
                    id=linked.key,
                    label=f"{linked.key} {linked.fields.summary} {relation}",
                    desc=relation,
                    display=f"[{relation}]  {linked.key}  {linked.fields.summary}",
                    icon="↔",
                ))
        return items

    def find_related(self, key: str) -> Issue | None:
        """Known fields for a related issue, used to render it before it loads."""
        fields = self.issue.fields
        if fields.parent is not None and fields.parent.key == key:
            return Issue.from_api({"key": key, "fields": {"summary": fields.parent.summary}})
        for issue in list(fields.subtasks) + self.children:
            if issue.key == key:
                return issue
        for link in fields.links:
            for linked in (link.outward_issue, link.inward_issue):
                if linked is not None and linked.key == key:
                    return linked
        return None

    # ── Rendering ──

    def build_content(self) -> None:
        text = self._render()
        self.lines = list(text.split("\n", allow_blank=True))
        if self.lines and not self.lines[-1].plain:
            self.lines.pop()
        self.offset = max(0, min(self.offset, self.max_offset()))

    def _section(self, out: Text, label: str) -> None:
        max_width = max(20, self.width - 2)
        tail = "─" * max(0, max_width - 4 - len(label) - 1)
        out.append(f"─── {label} {tail}\n", style=DIM_STYLE)

    def _field(self, out: Text, label: str, value: str, hint: str = "", style: str = "") -> None:
        if not value:
            return
        if hint:
            head = Text(label)
            head.append(f"({hint})", style=HINT_STYLE)
            head.pad_right(max(0, LABEL_WIDTH - len(head)))
            head.stylize(DIM_STYLE, 0, len(label))
            out.append_text(head)
        else:
            out.append(label.ljust(LABEL_WIDTH), style=DIM_STYLE)
        out.append(value, style=style)
        out.append("\n")

    def _wrapped(self, out: Text, body: str, indent: str = "") -> None:
        width = max(20, self.width - 2 - len(indent))
        for paragraph in body.split("\n"):
            wrapped = textwrap.wrap(paragraph, width) or [""]
            for line in wrapped:
                out.append(f"{indent}{line}\n")

    def _render(self) -> Text:
        issue = self.issue
        fields = issue.fields
        out = Text()

        out.append(fields.summary, style="bold")
        out.append("  (t)\n", style=HINT_STYLE)

        out.append(issue.key, style=KEY_STYLE)
        out.append("(y,u,o)", style=HINT_STYLE)
        if fields.parent is not None:
            parent_label = fields.parent.key
            if fields.parent.summary:
                parent_label += f" {fields.parent.summary}"
            out.append(f"  ▸ {parent_label}", style=DIM_STYLE)
        out.append("\n")

        meta: list[Text] = []
        if fields.issue_type is not None:
            meta.append(Text(fields.issue_type.name, style=_type_style(fields.issue_type.name)))
        if fields.status is not None:
            status = Text(fields.status.name, style=_status_style(fields.status))
            status.append("(s)", style=HINT_STYLE)
            meta.append(status)
        if fields.priority is not None:
            priority = priority_label(fields.priority.name)
            priority.append("(p)", style=HINT_STYLE)
            meta.append(priority)
        if meta:
            out.append_text(Text(" · ", style=DIM_STYLE).join(meta))
            out.append("\n")
        out.append("\n")

        out.append("Description", style=DIM_STYLE)
        out.append(" (e)\n", style=HINT_STYLE)
        if self.loading:
            out.append("Loading…\n", style=DIM_STYLE)
        else:
            description = extract_adf_text(fields.description)
            if description:
                self._wrapped(out, description)
            else:
                out.append("No description\n", style=DIM_STYLE)

        out.append("\n")
        self._section(out, "Fields")
        self._field(out, "Assignee", _user_name(fields.assignee, "Unassigned"), hint="a,i")
        self._field(out, "Reporter", _user_name(fields.reporter))
        self._field(out, "Project", fields.project.name if fields.project else "")
        if self.loading:
            self._field(out, "Labels", "Loading…")
        else:
            self._field(out, "Labels", ", ".join(fields.labels) if fields.labels else "None")
        self._field(out, "Created", format_detail_date(fields.created))
        self._field(out, "Updated", format_detail_date(fields.updated))
        if fields.due_date:
            self._field(out, "Due Date", format_detail_date(fields.due_date), style="#FF5630")

        if not self.loading and fields.subtasks:
            out.append("\n")
            self._section(out, f"Subtasks ({len(fields.subtasks)})")
            for sub in fields.subtasks:
                out.append("  ")
                out.append_text(_done_icon(sub))
                out.append(" ")
                out.append(sub.key, style=KEY_STYLE)
                out.append(f"  {sub.fields.summary}\n")

        if not self.children_loading and self.children:
            out.append("\n")
            self._section(out, f"Children ({len(self.children)})")
            for child in self.children:
                out.append("  ")
                out.append_text(_done_icon(child))
                out.append(" ")
                if child.fields.issue_type is not None:
                    type_name = child.fields.issue_type.name
                    out.append(f"{type_name} ", style=_type_style(type_name))
                out.append(child.key, style=KEY_STYLE)
                out.append(f"  {child.fields.summary}\n")

        if not self.loading and fields.links:
            out.append("\n")
            self._section(out, f"Linked Issues ({len(fields.links)})")
            for link in fields.links:
                for linked, relation in ((link.outward_issue, link.outward), (link.inward_issue, link.inward)):
                    if linked is None:
                        continue
                    out.append("  ")
                    out.append(relation.ljust(LINK_TYPE_WIDTH), style="#FFAB00")
                    out.append(" ")
                    out.append(linked.key, style=KEY_STYLE)
                    out.append(f"  {linked.fields.summary}\n")

        if not self.loading and fields.parent is not None:
            out.append("\n")
            self._section(out, "Parent")
            out.append("  ")
            out.append(fields.parent.key, style=KEY_STYLE)
            if fields.parent.summary:
                out.append(f"  {fields.parent.summary}")
            out.append("\n")

        if self.comments_loading:
            out.append("\n")
            self._section(out, "Comments")
            out.append("  Loading…\n", style=DIM_STYLE)
        elif self.comments:
            out.append("\n")
            self._section(out, f"Comments ({len(self.comments)})")
            for i, comment in enumerate(self.comments):
                out.append("  ")
                out.append(_user_name(comment.author, "Unknown"), style="bold")
                if comment.pending:
                    out.append("  sending…\n", style=DIM_STYLE)
                else:
                    out.append(f"  {format_detail_date(comment.created)}\n", style=DIM_STYLE)
                body = extract_adf_text(comment.body)
                if body:
                    self._wrapped(out, body, indent="  ")
                if i < len(self.comments) - 1:
                    out.append("\n")

        return out
