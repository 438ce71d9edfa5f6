"""Messages consumed by the reducer.

``Overlay*`` and ``Filter*`` messages come from the text and list widgets.
``ResultMessage`` subclasses are produced by the dispatcher, one per network
command. An empty ``error`` means success.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from jira_tui.models import (
    CachedUser,
    Comment,
    Issue,
    IssueType,
    Named,
    SavedFilter,
    Transition,
    User,
)


@dataclass(frozen=True)
class AppMessage:
    pass


@dataclass(frozen=True)
class Resize(AppMessage):
    width: int
    height: int


@dataclass(frozen=True)
class KeyPress(AppMessage):
    """A key, as its printable character or a Textual key name ("escape", "ctrl+s")."""

    key: str


@dataclass(frozen=True)
class Tick(AppMessage):
    pass


@dataclass(frozen=True)
class Flash(AppMessage):
    text: str
    is_error: bool = False


@dataclass(frozen=True)
class OverlayEdited(AppMessage):
    """The text in the overlay's input, editor or selection filter changed."""

    value: str


@dataclass(frozen=True)
class OverlayHighlighted(AppMessage):
    """A selection overlay's highlight moved to *position* in the filtered list."""

    position: int


@dataclass(frozen=True)
class OverlayConfirmed(AppMessage):
    """``answer`` is only used by yes/no overlays."""

    answer: bool | None = None


@dataclass(frozen=True)
class OverlayCancelled(AppMessage):
    pass


@dataclass(frozen=True)
class FilterEdited(AppMessage):
    value: str


@dataclass(frozen=True)
class FilterConfirmed(AppMessage):
    pass


@dataclass(frozen=True)
class FilterCancelled(AppMessage):
    pass


@dataclass(frozen=True)
class ResultMessage(AppMessage):
    pass


@dataclass(frozen=True)
class ConnectionResult(ResultMessage):
    user: User | None = None
    error: str = ""


@dataclass(frozen=True)
class TabDataResult(ResultMessage):
    index: int
    issues: list[Issue] = field(default_factory=list, hash=False)
    saved_filter: SavedFilter | None = None
    error: str = ""


@dataclass(frozen=True)
class IssueDetailResult(ResultMessage):
    key: str
    issue: Issue | None = None
    error: str = ""


@dataclass(frozen=True)
class IssueUpdatedResult(ResultMessage):
    key: str
    issue: Issue | None = None
    error: str = ""


@dataclass(frozen=True)
class IssueMutatedResult(ResultMessage):
    key: str
    error: str = ""


@dataclass(frozen=True)
class IssueDeletedResult(ResultMessage):
    key: str
    error: str = ""


@dataclass(frozen=True)
class IssueCreatedResult(ResultMessage):
    key: str = ""
    error: str = ""


@dataclass(frozen=True)
class TransitionsResult(ResultMessage):
    key: str
    purpose: str = "select"
    transitions: list[Transition] = field(default_factory=list, hash=False)
    error: str = ""


@dataclass(frozen=True)
class PrioritiesResult(ResultMessage):
    key: str
    priorities: list[Named] = field(default_factory=list, hash=False)
    error: str = ""


@dataclass(frozen=True)
class UsersResult(ResultMessage):
    key: str
    users: list[CachedUser] = field(default_factory=list, hash=False)
    error: str = ""


@dataclass(frozen=True)
class IssueTypesResult(ResultMessage):
    summary: str
    issue_types: list[IssueType] = field(default_factory=list, hash=False)
    error: str = ""


@dataclass(frozen=True)
class CommentsResult(ResultMessage):
    key: str
    comments: list[Comment] = field(default_factory=list, hash=False)
    error: str = ""


@dataclass(frozen=True)
class CommentAddedResult(ResultMessage):
    key: str
    comment: Comment | None = None
    error: str = ""


@dataclass(frozen=True)
class ChildrenResult(ResultMessage):
    key: str
    children: list[Issue] = field(default_factory=list, hash=False)
    error: str = ""
