"""Client-side quick filter over a tab's issues."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from jira_tui.columns import field_value
from jira_tui.models import Issue

FILTER_CHAR_LIMIT = 128


class FilterState(Enum):
    INACTIVE = "inactive"  # no filter bar
    FOCUSED = "focused"  # filter bar visible, typing
    APPLIED = "applied"  # filter bar visible, query confirmed


def filter_issues(issues: list[Issue], columns: tuple[str, ...] | list[str], query: str) -> list[Issue]:
    """Issues where any column's displayed value contains *query*, case-insensitively."""
    q = query.lower()
    return [
        issue for issue in issues
        if any(q in field_value(issue, col).lower() for col in columns)
    ]


@dataclass
class QuickFilter:
    """Filter bar state for one tab."""

    state: FilterState = FilterState.INACTIVE
    text: str = ""
    query: str = ""
    total: int = 0
    matched: int = 0
    filtered: list[Issue] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.state != FilterState.INACTIVE

    @property
    def is_focused(self) -> bool:
        return self.state == FilterState.FOCUSED

    def activate(self) -> None:
        self.state = FilterState.FOCUSED

    def apply(self, issues: list[Issue], columns: tuple[str, ...] | list[str]) -> None:
        """Confirm the typed query. An empty query clears the filter instead."""
        q = self.text.strip()
        if not q:
            self.clear()
            return
        self.query = q
        self.state = FilterState.APPLIED
        self._compute(issues, columns)

    def clear(self) -> None:
        self.state = FilterState.INACTIVE
        self.query = ""
        self.text = ""
        self.filtered = []
        self.total = 0
        self.matched = 0

    def update_query(
        self, text: str, issues: list[Issue], columns: tuple[str, ...] | list[str]
    ) -> None:
        """Re-filter live from the text typed so far."""
        self.text = text[:FILTER_CHAR_LIMIT]
        self.query = self.text.strip()
        self._compute(issues, columns)

    def refresh(self, issues: list[Issue], columns: tuple[str, ...] | list[str]) -> None:
        """Recompute the filtered set after the underlying issues changed."""
        if self.is_active:
            self._compute(issues, columns)

    def _compute(self, issues: list[Issue], columns: tuple[str, ...] | list[str]) -> None:
        if self.query:
            self.filtered = filter_issues(issues, columns, self.query)
        else:
            self.filtered = list(issues)
        self.total = len(issues)
        self.matched = len(self.filtered)

    def visible_issues(self, issues: list[Issue]) -> list[Issue]:
        if self.state == FilterState.INACTIVE or not self.query:
            return issues
        return self.filtered

    def match_text(self) -> str:
        return f"{self.matched} of {self.total} issues"
