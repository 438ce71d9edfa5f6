"""Async client for the Jira Cloud REST API (v3)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from jira_tui.models import (
    Comment,
    Issue,
    IssueType,
    Named,
    SavedFilter,
    Transition,
    User,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
USER_PAGE_SIZE = 1000


class JiraError(Exception):
    """A failed Jira request. ``status_code`` is set for HTTP error responses."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class JiraClient:
    """Thin wrapper over ``httpx.AsyncClient`` returning model objects."""

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(email, api_token),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def browse_url(self, key: str) -> str:
        return f"{self.base_url}/browse/{key}"

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty)."""
        logger.debug("%s %s", method, path)
        try:
            response = await self._http.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise JiraError(f"request failed: {e}") from e

        if response.status_code >= 400:
            logger.warning("%s %s returned %d", method, path, response.status_code)
            raise JiraError(
                f"API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise JiraError(f"invalid response from {path}: {e}") from e

    # ── Users ──

    async def get_myself(self) -> User:
        data = await self._request("GET", "/rest/api/3/myself")
        return User.from_api(data) or User(account_id="")

    async def search_all_users(self) -> list[User]:
        """Page through every user, keeping active accounts only."""
        users: list[User] = []
        start_at = 0
        while True:
            page = await self._request(
                "GET",
                "/rest/api/3/users/search",
                params={"startAt": start_at, "maxResults": USER_PAGE_SIZE},
            )
            if not page:
                break
            for item in page:
                user = User.from_api(item)
                if user is not None and user.active:
                    users.append(user)
            if len(page) < USER_PAGE_SIZE:
                break
            start_at += len(page)
        return users

    # ── Filters & search ──

    async def get_filter(self, filter_id: str) -> SavedFilter:
        data = await self._request("GET", f"/rest/api/3/filter/{filter_id}")
        return SavedFilter.from_api(data or {})

    async def search_issues(
        self, jql: str, fields: list[str] | None = None, max_results: int = 50
    ) -> list[Issue]:
        body: dict[str, Any] = {"jql": jql, "maxResults": max_results}
        if fields:
            body["fields"] = fields
        data = await self._request("POST", "/rest/api/3/search/jql", json=body)
        return [Issue.from_api(item) for item in (data or {}).get("issues") or []]

    # ── Issues ──

    async def get_issue(self, key: str) -> Issue:
        data = await self._request("GET", f"/rest/api/3/issue/{key}")
        return Issue.from_api(data or {})

    async def update_issue(self, key: str, fields: dict[str, Any]) -> None:
        await self._request("PUT", f"/rest/api/3/issue/{key}", json={"fields": fields})

    async def create_issue(self, fields: dict[str, Any]) -> str:
        """Create an issue and return its key."""
        data = await self._request("POST", "/rest/api/3/issue", json={"fields": fields})
        return str((data or {}).get("key", ""))

    async def delete_issue(self, key: str, delete_subtasks: bool = False) -> None:
        params = {"deleteSubtasks": "true"} if delete_subtasks else None
        await self._request("DELETE", f"/rest/api/3/issue/{key}", params=params)

    async def assign_issue(self, key: str, account_id: str | None) -> None:
        """Assign *key* to *account_id*; ``None`` unassigns."""
        await self._request(
            "PUT", f"/rest/api/3/issue/{key}/assignee", json={"accountId": account_id}
        )

    # ── Workflow ──

    async def get_transitions(self, key: str) -> list[Transition]:
        data = await self._request("GET", f"/rest/api/3/issue/{key}/transitions")
        return [Transition.from_api(t) for t in (data or {}).get("transitions") or []]

    async def transition_issue(self, key: str, transition_id: str) -> None:
        await self._request(
            "POST",
            f"/rest/api/3/issue/{key}/transitions",
            json={"transition": {"id": transition_id}},
        )

    # ── Comments ──

    async def get_comments(self, key: str) -> list[Comment]:
        """Newest comments first."""
        data = await self._request(
            "GET",
            f"/rest/api/3/issue/{key}/comment",
            params={"orderBy": "-created", "maxResults": 50},
        )
        return [Comment.from_api(c) for c in (data or {}).get("comments") or []]

    async def add_comment(self, key: str, body: dict[str, Any]) -> Comment:
        data = await self._request(
            "POST", f"/rest/api/3/issue/{key}/comment", json={"body": body}
        )
        return Comment.from_api(data or {})

    # ── Metadata ──

    async def get_priorities(self) -> list[Named]:
        data = await self._request("GET", "/rest/api/3/priority")
        return [p for p in (Named.from_api(item) for item in data or []) if p is not None]

    async def get_project_issue_types(self, project_key: str) -> list[IssueType]:
        """Standard (non-subtask) issue types available in a project."""
        data = await self._request("GET", f"/rest/api/3/project/{project_key}/statuses")
        types = [IssueType.from_api(item) for item in data or []]
        return [t for t in types if not t.subtask]
