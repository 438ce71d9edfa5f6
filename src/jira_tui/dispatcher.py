"""Executes commands against Jira and converts each outcome into one message."""

from __future__ import annotations

import logging
from pathlib import Path

from jira_tui import commands as cmd
from jira_tui import messages as msg
from jira_tui.adf import make_adf_document
from jira_tui.client import JiraClient, JiraError
from jira_tui.models import CachedUser, SavedFilter
from jira_tui.tab import search_fields, tab_query, with_sort
from jira_tui.usercache import save_user_cache

logger = logging.getLogger(__name__)

CHILD_FIELDS = ["summary", "status", "issuetype", "priority"]
SEARCH_LIMIT = 50
NEW_ISSUE_STATUS = "To Do"

# Which step failed, shown in front of the API error.
ERROR_PREFIXES: dict[type, str] = {
    cmd.RefreshIssue: "refresh",
    cmd.FetchTransitions: "get transitions",
    cmd.FetchPriorities: "get priorities",
    cmd.FetchUsers: "fetch users",
    cmd.FetchIssueTypes: "get issue types",
    cmd.TransitionIssue: "transition",
    cmd.UpdateFields: "update",
    cmd.AssignIssue: "assign",
    cmd.DeleteIssue: "delete",
    cmd.CreateIssue: "create issue",
}


class Dispatcher:
    """Runs network commands. ``run`` never raises ``JiraError``."""

    def __init__(self, client: JiraClient, user_cache_path: Path | None = None) -> None:
        self.client = client
        self.user_cache_path = user_cache_path

    async def run(self, command: cmd.NetworkCommand) -> msg.ResultMessage:
        try:
            return await self._execute(command)
        except JiraError as e:
            logger.warning("%s failed: %s", type(command).__name__, e)
            return self.failure(command, str(e))

    async def _execute(self, command: cmd.NetworkCommand) -> msg.ResultMessage:
        client = self.client
        if isinstance(command, cmd.CheckConnection):
            return msg.ConnectionResult(user=await client.get_myself())
        elif isinstance(command, cmd.LoadTab):
            return await self._load_tab(command)
        elif isinstance(command, cmd.FetchIssue):
            return msg.IssueDetailResult(command.key, issue=await client.get_issue(command.key))
        elif isinstance(command, cmd.RefreshIssue):
            return msg.IssueUpdatedResult(command.key, issue=await client.get_issue(command.key))
        elif isinstance(command, cmd.FetchComments):
            return msg.CommentsResult(command.key, comments=await client.get_comments(command.key))
        elif isinstance(command, cmd.FetchChildren):
            children = await client.search_issues(
                f"parent = {command.key} ORDER BY rank ASC", CHILD_FIELDS, SEARCH_LIMIT
            )
            return msg.ChildrenResult(command.key, children=children)
        elif isinstance(command, cmd.FetchTransitions):
            transitions = await client.get_transitions(command.key)
            return msg.TransitionsResult(command.key, command.purpose, transitions=transitions)
        elif isinstance(command, cmd.FetchPriorities):
            return msg.PrioritiesResult(command.key, priorities=await client.get_priorities())
        elif isinstance(command, cmd.FetchUsers):
            return await self._fetch_users(command)
        elif isinstance(command, cmd.FetchIssueTypes):
            types = await client.get_project_issue_types(command.project)
            return msg.IssueTypesResult(command.summary, issue_types=types)
        elif isinstance(command, cmd.TransitionIssue):
            await client.transition_issue(command.key, command.transition_id)
            return msg.IssueMutatedResult(command.key)
        elif isinstance(command, cmd.UpdateFields):
            await client.update_issue(command.key, command.fields)
            return msg.IssueMutatedResult(command.key)
        elif isinstance(command, cmd.AssignIssue):
            await client.assign_issue(command.key, command.account_id)
            return msg.IssueMutatedResult(command.key)
        elif isinstance(command, cmd.DeleteIssue):
            await client.delete_issue(command.key)
            return msg.IssueDeletedResult(command.key)
        elif isinstance(command, cmd.CreateIssue):
            return await self._create_issue(command)
        elif isinstance(command, cmd.AddComment):
            comment = await client.add_comment(command.key, make_adf_document(command.text))
            return msg.CommentAddedResult(command.key, comment=comment)
        raise TypeError(f"unknown command: {command!r}")

    async def _load_tab(self, command: cmd.LoadTab) -> msg.TabDataResult:
        config = command.config
        jql, filter_id = tab_query(config)
        saved_filter: SavedFilter | None = None
        if not jql:
            if not filter_id:
                return msg.TabDataResult(
                    command.index, error=f"no filter id found in filter_url {config.filter_url!r}"
                )
            saved_filter = await self.client.get_filter(filter_id)
            jql = saved_filter.jql
        try:
            issues = await self.client.search_issues(
                with_sort(jql, config.sort), search_fields(config.columns), SEARCH_LIMIT
            )
        except JiraError as e:
            logger.warning("search for tab %d failed: %s", command.index, e)
            return msg.TabDataResult(command.index, saved_filter=saved_filter, error=str(e))
        return msg.TabDataResult(command.index, issues=issues, saved_filter=saved_filter)

    async def _fetch_users(self, command: cmd.FetchUsers) -> msg.UsersResult:
        users = [
            CachedUser(account_id=u.account_id, display_name=u.display_name, email=u.email)
            for u in await self.client.search_all_users()
        ]
        if self.user_cache_path is not None:
            try:
                save_user_cache(self.user_cache_path, users)
            except OSError:
                logger.warning("Could not write user cache %s", self.user_cache_path, exc_info=True)
        return msg.UsersResult(command.key, users=users)

    async def _create_issue(self, command: cmd.CreateIssue) -> msg.IssueCreatedResult:
        fields = {
            "project": {"key": command.project},
            "summary": command.summary,
            "issuetype": {"name": command.issue_type},
        }
        if command.assignee:
            fields["assignee"] = {"accountId": command.assignee}
        key = await self.client.create_issue(fields)
        await self._move_to_new_status(key)
        return msg.IssueCreatedResult(key)

    async def _move_to_new_status(self, key: str) -> None:
        """Best effort: on failure the issue keeps the workflow's initial status."""
        try:
            for transition in await self.client.get_transitions(key):
                if transition.to is not None and transition.to.name == NEW_ISSUE_STATUS:
                    await self.client.transition_issue(key, transition.id)
                    break
        except JiraError as e:
            logger.warning("Could not move %s to %s: %s", key, NEW_ISSUE_STATUS, e)

    @staticmethod
    def failure(command: cmd.NetworkCommand, error: str) -> msg.ResultMessage:
        """The error-carrying result message for *command*."""
        prefix = ERROR_PREFIXES.get(type(command))
        if prefix:
            error = f"{prefix}: {error}"
        if isinstance(command, cmd.CheckConnection):
            return msg.ConnectionResult(error=error)
        elif isinstance(command, cmd.LoadTab):
            return msg.TabDataResult(command.index, error=error)
        elif isinstance(command, cmd.FetchIssue):
            return msg.IssueDetailResult(command.key, error=error)
        elif isinstance(command, cmd.RefreshIssue):
            return msg.IssueUpdatedResult(command.key, error=error)
        elif isinstance(command, cmd.FetchComments):
            return msg.CommentsResult(command.key, error=error)
        elif isinstance(command, cmd.FetchChildren):
            return msg.ChildrenResult(command.key, error=error)
        elif isinstance(command, cmd.FetchTransitions):
            return msg.TransitionsResult(command.key, command.purpose, error=error)
        elif isinstance(command, cmd.FetchPriorities):
            return msg.PrioritiesResult(command.key, error=error)
        elif isinstance(command, cmd.FetchUsers):
            return msg.UsersResult(command.key, error=error)
        elif isinstance(command, cmd.FetchIssueTypes):
            return msg.IssueTypesResult(command.summary, error=error)
        elif isinstance(command, (cmd.TransitionIssue, cmd.UpdateFields, cmd.AssignIssue)):
            return msg.IssueMutatedResult(command.key, error=error)
        elif isinstance(command, cmd.DeleteIssue):
            return msg.IssueDeletedResult(command.key, error=error)
        elif isinstance(command, cmd.CreateIssue):
            return msg.IssueCreatedResult(error=error)
        elif isinstance(command, cmd.AddComment):
            return msg.CommentAddedResult(command.key, error=error)
        raise TypeError(f"unknown command: {command!r}")
