"""Tab registry entries: one query-backed issue list per configured tab."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import parse_qs, urlparse

from jira_tui.filter import QuickFilter
from jira_tui.models import Issue, SavedFilter, TabConfig

MIN_TAB_HEIGHT = 3

# Fields always requested so the detail view has something to show before
# the full issue arrives.
BASE_SEARCH_FIELDS = (
    "summary",
    "status",
    "priority",
    "assignee",
    "reporter",
    "issuetype",
    "project",
    "created",
    "updated",
    "labels",
    "parent",
)

_COLUMN_API_FIELDS = {"type": "issuetype"}

_ORDER_BY_RE = re.compile(r"\border\s+by\b", re.IGNORECASE)


class TabState(Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    EMPTY = "empty"


def search_fields(columns: tuple[str, ...] | list[str]) -> list[str]:
    """API field names for a search: the base set plus any extra columns."""
    fields = list(BASE_SEARCH_FIELDS)
    for column in columns:
        if column == "key":
            continue
        name = _COLUMN_API_FIELDS.get(column, column)
        if name not in fields:
            fields.append(name)
    return fields


def filter_id_from_url(url: str) -> str:
    """Extract the saved filter id from a Jira filter URL (``?filter=10042``)."""
    values = parse_qs(urlparse(url).query).get("filter")
    return values[0] if values else ""


def with_sort(jql: str, sort: str) -> str:
    """Append ``ORDER BY sort`` unless the JQL already orders its results."""
    if not sort or _ORDER_BY_RE.search(jql):
        return jql
    return f"{jql} ORDER BY {sort}"


@dataclass
class Tab:
    """Issues, filter and cursor for one configured tab.

    ``cursor`` indexes the visible (filtered) issues, not ``issues``.
    """

    config: TabConfig
    issues: list[Issue] = field(default_factory=list)
    state: TabState = TabState.LOADING
    error: str = ""
    saved_filter: SavedFilter | None = None
    quick_filter: QuickFilter = field(default_factory=QuickFilter)
    cursor: int = 0
    width: int = 0
    height: int = 10

    @property
    def label(self) -> str:
        return self.config.label

    @property
    def columns(self) -> tuple[str, ...]:
        return self.config.columns

    def set_size(self, width: int, height: int) -> None:
        self.width = width
        self.height = max(MIN_TAB_HEIGHT, height)

    def set_issues(self, issues: list[Issue]) -> None:
        self.issues = list(issues)
        self.error = ""
        self.quick_filter.clear()
        self.cursor = 0
        self.state = TabState.READY if self.issues else TabState.EMPTY

    def set_error(self, message: str) -> None:
        self.state = TabState.ERROR
        self.error = message

    def set_loading(self) -> None:
        self.state = TabState.LOADING
        self.issues = []
        self.error = ""
        self.cursor = 0
        self.quick_filter.clear()

    def visible_issues(self) -> list[Issue]:
        return self.quick_filter.visible_issues(self.issues)

    def selected_issue(self) -> Issue | None:
        if self.state != TabState.READY or not self.issues:
            return None
        visible = self.visible_issues()
        if 0 <= self.cursor < len(visible):
            return visible[self.cursor]
        return None

    def index_of(self, key: str) -> int:
        for i, issue in enumerate(self.visible_issues()):
            if issue.key == key:
                return i
        return -1

    def clamp_cursor(self) -> None:
        count = len(self.visible_issues())
        self.cursor = max(0, min(self.cursor, count - 1))

    # ── Quick filter ──

    def update_filter(self, text: str) -> None:
        """Live re-filter from the typed text; the cursor returns to the top."""
        self.quick_filter.update_query(text, self.issues, self.columns)
        self.cursor = 0

    def apply_filter(self) -> None:
        self.quick_filter.apply(self.issues, self.columns)
        self.cursor = 0

    def clear_filter(self) -> None:
        """Drop the filter, keeping the selected issue under the cursor if possible."""
        selected = self.selected_issue()
        self.quick_filter.clear()
        if selected is not None:
            index = self.index_of(selected.key)
            if index >= 0:
                self.cursor = index
        self.clamp_cursor()

    # ── Synchronized copies ──

    def replace_issue(self, issue: Issue) -> bool:
        """Replace the copy of *issue* held by this tab. The cursor follows the selected key."""
        for i, existing in enumerate(self.issues):
            if existing.key == issue.key:
                break
        else:
            return False
        selected = self.selected_issue()
        self.issues[i] = issue
        self.quick_filter.refresh(self.issues, self.columns)
        if selected is not None:
            index = self.index_of(selected.key)
            if index >= 0:
                self.cursor = index
        self.clamp_cursor()
        return True

    def remove_issue(self, key: str) -> bool:
        remaining = [issue for issue in self.issues if issue.key != key]
        if len(remaining) == len(self.issues):
            return False
        self.issues = remaining
        self.quick_filter.refresh(self.issues, self.columns)
        if not self.issues and self.state == TabState.READY:
            self.state = TabState.EMPTY
        self.clamp_cursor()
        return True

    # ── Cursor movement ──

    def move_cursor(self, delta: int) -> None:
        self.cursor += delta
        self.clamp_cursor()

    def page_up(self) -> None:
        self.move_cursor(-self.height)

    def page_down(self) -> None:
        self.move_cursor(self.height)

    def go_top(self) -> None:
        self.cursor = 0

    def go_bottom(self) -> None:
        self.cursor = max(0, len(self.visible_issues()) - 1)

    def scroll_key(self, key: str) -> bool:
        """Handle a list navigation key. Returns False for other keys."""
        if key in ("up", "k"):
            self.move_cursor(-1)
        elif key in ("down", "j"):
            self.move_cursor(1)
        elif key == "pageup":
            self.page_up()
        elif key == "pagedown":
            self.page_down()
        elif key in ("home", "g"):
            self.go_top()
        elif key in ("end", "G"):
            self.go_bottom()
        else:
            return False
        return True


def tab_query(config: TabConfig) -> tuple[str, str]:
    """Return ``(jql, filter_id)`` for a tab; exactly one is non-empty when valid."""
    if config.jql:
        return config.jql, ""
    if config.filter_id:
        return "", config.filter_id
    if config.filter_url:
        return "", filter_id_from_url(config.filter_url)
    return "", ""
