"""Commands returned by the reducer.

Commands are plain data. ``NetworkCommand`` subclasses are executed by the
dispatcher against Jira and each produces exactly one result message; the
rest are local effects carried out by the app.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from jira_tui.models import TabConfig


@dataclass(frozen=True)
class Command:
    pass


@dataclass(frozen=True)
class NetworkCommand(Command):
    """A command that talks to Jira and counts as in flight until its result arrives."""


# ── Network ──


@dataclass(frozen=True)
class CheckConnection(NetworkCommand):
    pass


@dataclass(frozen=True)
class LoadTab(NetworkCommand):
    index: int
    config: TabConfig


@dataclass(frozen=True)
class FetchIssue(NetworkCommand):
    key: str


@dataclass(frozen=True)
class RefreshIssue(NetworkCommand):
    """Re-fetch an issue after a successful mutation."""

    key: str


@dataclass(frozen=True)
class FetchComments(NetworkCommand):
    key: str


@dataclass(frozen=True)
class FetchChildren(NetworkCommand):
    key: str


@dataclass(frozen=True)
class FetchTransitions(NetworkCommand):
    key: str
    purpose: str = "select"  # "select" opens a picker, "done" transitions straight to done


@dataclass(frozen=True)
class FetchPriorities(NetworkCommand):
    key: str


@dataclass(frozen=True)
class FetchUsers(NetworkCommand):
    key: str


@dataclass(frozen=True)
class FetchIssueTypes(NetworkCommand):
    project: str
    summary: str


@dataclass(frozen=True)
class TransitionIssue(NetworkCommand):
    key: str
    transition_id: str


@dataclass(frozen=True)
class UpdateFields(NetworkCommand):
    key: str
    fields: dict[str, Any] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class AssignIssue(NetworkCommand):
    key: str
    account_id: str


@dataclass(frozen=True)
class DeleteIssue(NetworkCommand):
    key: str


@dataclass(frozen=True)
class CreateIssue(NetworkCommand):
    project: str
    summary: str
    issue_type: str
    assignee: str = ""


@dataclass(frozen=True)
class AddComment(NetworkCommand):
    key: str
    text: str


# ── Local effects ──


@dataclass(frozen=True)
class CopyText(Command):
    text: str
    success: str


@dataclass(frozen=True)
class OpenURL(Command):
    url: str
    key: str


@dataclass(frozen=True)
class Quit(Command):
    pass
