"""Data models for jira-tui."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class _Value:
    """Mixin for frozen records shared between state snapshots."""

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


@dataclass(frozen=True)
class User(_Value):
    """A Jira user."""

    account_id: str
    display_name: str = ""
    email: str = ""
    active: bool = True

    @classmethod
    def from_api(cls, data: dict | None) -> User | None:
        if not data:
            return None
        return cls(
            account_id=str(data.get("accountId", "")),
            display_name=str(data.get("displayName", "")),
            email=str(data.get("emailAddress", "") or ""),
            active=bool(data.get("active", True)),
        )


@dataclass(frozen=True)
class Named(_Value):
    """Jira entity with an id and a name (priority, issue type, project)."""

    id: str = ""
    name: str = ""

    @classmethod
    def from_api(cls, data: dict | None) -> Named | None:
        if not data:
            return None
        return cls(id=str(data.get("id", "")), name=str(data.get("name", "")))


@dataclass(frozen=True)
class Status(_Value):
    """A workflow status. ``category`` is the status category key (new/indeterminate/done)."""

    name: str
    id: str = ""
    category: str = ""

    @property
    def is_done(self) -> bool:
        return self.category == "done"

    @classmethod
    def from_api(cls, data: dict | None) -> Status | None:
        if not data:
            return None
        category = data.get("statusCategory") or {}
        return cls(
            name=str(data.get("name", "")),
            id=str(data.get("id", "")),
            category=str(category.get("key", "")),
        )


@dataclass(frozen=True)
class ParentRef(_Value):
    """Minimal reference to a parent issue."""

    key: str
    summary: str = ""

    @classmethod
    def from_api(cls, data: dict | None) -> ParentRef | None:
        if not data:
            return None
        fields = data.get("fields") or {}
        return cls(key=str(data.get("key", "")), summary=str(fields.get("summary", "") or ""))


@dataclass(frozen=True)
class IssueLink(_Value):
    """A link to another issue. Exactly one of inward/outward issue is usually set."""

    type_name: str = ""
    inward: str = ""
    outward: str = ""
    inward_issue: Issue | None = None
    outward_issue: Issue | None = None

    @classmethod
    def from_api(cls, data: dict) -> IssueLink:
        link_type = data.get("type") or {}
        inward_issue = data.get("inwardIssue")
        outward_issue = data.get("outwardIssue")
        return cls(
            type_name=str(link_type.get("name", "")),
            inward=str(link_type.get("inward", "")),
            outward=str(link_type.get("outward", "")),
            inward_issue=Issue.from_api(inward_issue) if inward_issue else None,
            outward_issue=Issue.from_api(outward_issue) if outward_issue else None,
        )


@dataclass(frozen=True)
class IssueFields(_Value):
    """Fields of a Jira issue. ``description`` is an ADF document, a string, or None."""

    summary: str = ""
    description: Any = None
    status: Status | None = None
    assignee: User | None = None
    reporter: User | None = None
    priority: Named | None = None
    issue_type: Named | None = None
    project: Named | None = None
    created: str = ""
    updated: str = ""
    due_date: str = ""
    labels: tuple[str, ...] = ()
    subtasks: tuple[Issue, ...] = ()
    links: tuple[IssueLink, ...] = ()
    parent: ParentRef | None = None

    @classmethod
    def from_api(cls, data: dict | None) -> IssueFields:
        data = data or {}
        return cls(
            summary=str(data.get("summary", "") or ""),
            description=data.get("description"),
            status=Status.from_api(data.get("status")),
            assignee=User.from_api(data.get("assignee")),
            reporter=User.from_api(data.get("reporter")),
            priority=Named.from_api(data.get("priority")),
            issue_type=Named.from_api(data.get("issuetype")),
            project=Named.from_api(data.get("project")),
            created=str(data.get("created", "") or ""),
            updated=str(data.get("updated", "") or ""),
            due_date=str(data.get("duedate", "") or ""),
            labels=tuple(str(label) for label in data.get("labels") or ()),
            subtasks=tuple(Issue.from_api(s) for s in data.get("subtasks") or ()),
            links=tuple(IssueLink.from_api(link) for link in data.get("issuelinks") or ()),
            parent=ParentRef.from_api(data.get("parent")),
        )


@dataclass(frozen=True)
class Issue(_Value):
    """A single Jira issue. Immutable; updated copies replace the old value."""

    key: str
    id: str = ""
    fields: IssueFields = field(default_factory=IssueFields)

    @classmethod
    def from_api(cls, data: dict) -> Issue:
        return cls(
            key=str(data.get("key", "")),
            id=str(data.get("id", "")),
            fields=IssueFields.from_api(data.get("fields")),
        )


@dataclass(frozen=True)
class Transition(_Value):
    """An available workflow transition."""

    id: str
    name: str
    to: Status | None = None

    @classmethod
    def from_api(cls, data: dict) -> Transition:
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            to=Status.from_api(data.get("to")),
        )


@dataclass(frozen=True)
class IssueType(_Value):
    """An issue type available in a project."""

    id: str
    name: str
    subtask: bool = False
    description: str = ""

    @classmethod
    def from_api(cls, data: dict) -> IssueType:
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            subtask=bool(data.get("subtask", False)),
            description=str(data.get("description", "") or ""),
        )


@dataclass(frozen=True)
class Comment(_Value):
    """An issue comment. ``pending`` marks a local placeholder not yet confirmed."""

    id: str = ""
    author: User | None = None
    body: Any = None
    created: str = ""
    updated: str = ""
    pending: bool = False

    @classmethod
    def from_api(cls, data: dict) -> Comment:
        return cls(
            id=str(data.get("id", "")),
            author=User.from_api(data.get("author")),
            body=data.get("body"),
            created=str(data.get("created", "") or ""),
            updated=str(data.get("updated", "") or ""),
        )


@dataclass(frozen=True)
class SavedFilter(_Value):
    """A saved Jira filter."""

    id: str
    name: str = ""
    jql: str = ""

    @classmethod
    def from_api(cls, data: dict) -> SavedFilter:
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            jql=str(data.get("jql", "")),
        )


@dataclass(frozen=True)
class CachedUser(_Value):
    """Minimal user record stored in the local user cache."""

    account_id: str
    display_name: str
    email: str = ""


# ── Configuration ──


@dataclass(frozen=True)
class TabConfig(_Value):
    """A query-backed tab. Exactly one of filter_id, filter_url or jql is set."""

    label: str
    columns: tuple[str, ...] = ("key", "summary", "status")
    filter_id: str = ""
    filter_url: str = ""
    jql: str = ""
    sort: str = ""


@dataclass
class JiraConfig:
    """Jira connection settings. Credentials come from the secrets file."""

    base_url: str = ""
    email: str = ""
    api_token: str = ""
    default_project: str = ""


@dataclass
class AppConfig:
    """Top-level application configuration."""

    jira: JiraConfig = field(default_factory=JiraConfig)
    tabs: list[TabConfig] = field(default_factory=list)
