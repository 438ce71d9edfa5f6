"""The application reducer.

``update(state, message)`` returns a new state and the commands to run. The
input state is never modified: handlers work on ``state.copy()``. Network
commands bump ``in_flight``; every result message lowers it again.
"""

from __future__ import annotations

import logging

from jira_tui import commands as cmd
from jira_tui import messages as msg
from jira_tui.adf import extract_adf_text, make_adf_document
from jira_tui.detail import DetailView
from jira_tui.models import Comment, Issue
from jira_tui.overlay import (
    ConfirmOverlay,
    Overlay,
    OverlayAction,
    SelectionItem,
    SelectionOverlay,
    TextEditorOverlay,
    TextInputOverlay,
)
from jira_tui.priority import priority_icon
from jira_tui.state import SPINNER_FRAMES, AppState, ConnectionStatus
from jira_tui.tab import TabState

logger = logging.getLogger(__name__)

EDIT_HOTKEYS = frozenset({"s", "p", "d", "i", "a", "t", "e", "delete", "y", "u", "o"})
TAB_KEYS = frozenset("123456789")

NOT_CONNECTED = "Not connected to Jira"


def init(state: AppState) -> tuple[AppState, list[cmd.Command]]:
    """Initial commands: check the connection when a client is configured."""
    new = state.copy()
    commands: list[cmd.Command] = []
    if new.has_client:
        new.connection = ConnectionStatus.CHECKING
        commands.append(cmd.CheckConnection())
    return new, _count(new, commands)


def update(state: AppState, message: msg.AppMessage) -> tuple[AppState, list[cmd.Command]]:
    new = state.copy()
    if isinstance(message, msg.ResultMessage):
        new.in_flight = max(0, new.in_flight - 1)
    commands = _handle(new, message)
    _layout_tabs(new)
    return new, _count(new, commands)


def _count(state: AppState, commands: list[cmd.Command]) -> list[cmd.Command]:
    state.in_flight += sum(1 for c in commands if isinstance(c, cmd.NetworkCommand))
    return commands


def _layout_tabs(state: AppState) -> None:
    """Table height: tab bar, margins and status line, plus the filter bar when shown."""
    for tab in state.tabs:
        height = state.height - 4
        if tab.quick_filter.is_active:
            height -= 1
        tab.set_size(state.width, height)


def _handle(state: AppState, message: msg.AppMessage) -> list[cmd.Command]:
    if isinstance(message, msg.KeyPress):
        return _on_key(state, message.key)
    elif isinstance(message, msg.Resize):
        return _on_resize(state, message)
    elif isinstance(message, msg.Tick):
        if state.in_flight > 0:
            state.spinner_frame = (state.spinner_frame + 1) % len(SPINNER_FRAMES)
        return []
    elif isinstance(
        message, (msg.OverlayEdited, msg.OverlayHighlighted, msg.OverlayConfirmed, msg.OverlayCancelled)
    ):
        return _on_overlay_input(state, message)
    elif isinstance(message, (msg.FilterEdited, msg.FilterConfirmed, msg.FilterCancelled)):
        return _on_filter_input(state, message)
    elif isinstance(message, msg.Flash):
        state.set_flash(message.text, message.is_error)
        return []
    elif isinstance(message, msg.ConnectionResult):
        return _on_connection(state, message)
    elif isinstance(message, msg.TabDataResult):
        return _on_tab_data(state, message)
    elif isinstance(message, msg.IssueDetailResult):
        return _on_issue_detail(state, message)
    elif isinstance(message, msg.IssueUpdatedResult):
        return _on_issue_updated(state, message)
    elif isinstance(message, msg.IssueMutatedResult):
        if message.error:
            state.set_flash(message.error, is_error=True)
            return []
        return [cmd.RefreshIssue(message.key)]
    elif isinstance(message, msg.IssueDeletedResult):
        # Success is silent: the issue was already removed locally.
        if message.error:
            state.set_flash(f"Delete failed: {message.error}", is_error=True)
        return []
    elif isinstance(message, msg.IssueCreatedResult):
        return _on_issue_created(state, message)
    elif isinstance(message, msg.TransitionsResult):
        return _on_transitions(state, message)
    elif isinstance(message, msg.PrioritiesResult):
        return _on_priorities(state, message)
    elif isinstance(message, msg.UsersResult):
        return _on_users(state, message)
    elif isinstance(message, msg.IssueTypesResult):
        return _on_issue_types(state, message)
    elif isinstance(message, msg.CommentsResult):
        view = _top_view_for(state, message.key)
        if view is not None:
            view.set_comments(None if message.error else message.comments)
        return []
    elif isinstance(message, msg.ChildrenResult):
        view = _top_view_for(state, message.key)
        if view is not None:
            view.set_children(None if message.error else message.children)
        return []
    elif isinstance(message, msg.CommentAddedResult):
        return _on_comment_added(state, message)
    logger.debug("Ignoring unknown message %r", message)
    return []


# ── Results ──


def _on_resize(state: AppState, message: msg.Resize) -> list[cmd.Command]:
    state.width = message.width
    state.height = message.height
    for view in state.view_stack:
        view.set_size(state.width, state.height)
    return []


def _on_connection(state: AppState, message: msg.ConnectionResult) -> list[cmd.Command]:
    if message.error:
        state.connection = ConnectionStatus.FAILED
        state.connection_error = message.error
        return []
    state.connection = ConnectionStatus.CONNECTED
    state.connection_error = ""
    state.user = message.user
    commands: list[cmd.Command] = []
    for index, tab in enumerate(state.tabs):
        tab.set_loading()
        commands.append(cmd.LoadTab(index, tab.config))
    return commands


def _on_tab_data(state: AppState, message: msg.TabDataResult) -> list[cmd.Command]:
    if not 0 <= message.index < len(state.tabs):
        return []
    tab = state.tabs[message.index]
    if message.saved_filter is not None:
        tab.saved_filter = message.saved_filter
    if message.error:
        tab.set_error(message.error)
    else:
        tab.set_issues(message.issues)
    return []


def _on_issue_detail(state: AppState, message: msg.IssueDetailResult) -> list[cmd.Command]:
    view = _top_view_for(state, message.key)
    if message.error or message.issue is None:
        state.set_flash(f"Failed to load {message.key}: {message.error}", is_error=True)
        if view is not None:
            view.finish_loading()
        return []
    for tab in state.tabs:
        tab.replace_issue(message.issue)
    if view is not None:
        view.set_issue(message.issue)
    return []


def _on_issue_updated(state: AppState, message: msg.IssueUpdatedResult) -> list[cmd.Command]:
    if message.error or message.issue is None:
        state.set_flash(message.error or f"Failed to refresh {message.key}", is_error=True)
        return []
    _apply_issue_update(state, message.issue)
    state.set_flash(f"{message.key} updated")
    return []


def _on_issue_created(state: AppState, message: msg.IssueCreatedResult) -> list[cmd.Command]:
    if message.error:
        state.set_flash(message.error, is_error=True)
        return []
    state.set_flash(f"Created {message.key}")
    commands = _push_detail(state, Issue(key=message.key))
    tab = state.current_tab
    if state.connection == ConnectionStatus.CONNECTED and tab is not None:
        # Reload in the background; the current list stays visible meanwhile.
        commands.append(cmd.LoadTab(state.active_tab, tab.config))
    return commands


def _on_transitions(state: AppState, message: msg.TransitionsResult) -> list[cmd.Command]:
    if message.error:
        state.set_flash(message.error, is_error=True)
        return []
    if message.purpose == "done":
        for transition in message.transitions:
            if transition.to is not None and transition.to.is_done:
                return [cmd.TransitionIssue(message.key, transition.id)]
        state.set_flash(f"no 'done' transition available for {message.key}", is_error=True)
        return []
    items = [SelectionItem(id=t.id, label=t.name) for t in message.transitions]
    _open_overlay(state, SelectionOverlay("Change Status", items), OverlayAction.TRANSITION, message.key)
    return []


def _priority_items(state: AppState) -> list[SelectionItem]:
    return [
        SelectionItem(id=p.id, label=p.name, icon=priority_icon(p.name))
        for p in state.cached_priorities
    ]


def _user_items(state: AppState) -> list[SelectionItem]:
    return [
        SelectionItem(id=u.account_id, label=u.display_name, desc=u.email)
        for u in state.cached_users
    ]


def _on_priorities(state: AppState, message: msg.PrioritiesResult) -> list[cmd.Command]:
    if message.error:
        state.set_flash(message.error, is_error=True)
        return []
    state.cached_priorities = list(message.priorities)
    _open_overlay(
        state, SelectionOverlay("Change Priority", _priority_items(state)),
        OverlayAction.PRIORITY, message.key,
    )
    return []


def _on_users(state: AppState, message: msg.UsersResult) -> list[cmd.Command]:
    if message.error:
        state.set_flash(message.error, is_error=True)
        return []
    state.cached_users = list(message.users)
    _open_overlay(state, SelectionOverlay("Assign To", _user_items(state)), OverlayAction.ASSIGN, message.key)
    return []


def _on_issue_types(state: AppState, message: msg.IssueTypesResult) -> list[cmd.Command]:
    if message.error:
        state.set_flash(message.error, is_error=True)
        state.create_summary = ""
        return []
    items = [SelectionItem(id=t.id, label=t.name, desc=t.description) for t in message.issue_types]
    if _open_overlay(state, SelectionOverlay("Issue Type", items), OverlayAction.CREATE_TYPE):
        state.create_summary = message.summary
    return []


def _on_comment_added(state: AppState, message: msg.CommentAddedResult) -> list[cmd.Command]:
    if message.error:
        state.set_flash(message.error, is_error=True)
    else:
        state.set_flash("Comment added")
    for view in state.view_stack:
        if view.key == message.key:
            view.resolve_pending_comment(None if message.error else message.comment)
    return []


# ── Shared helpers ──


def _top_view_for(state: AppState, key: str) -> DetailView | None:
    """The top detail view if it still shows *key*; late results for others are dropped."""
    view = state.top_view
    if view is not None and view.key == key:
        return view
    return None


def _open_overlay(
    state: AppState, overlay: Overlay, action: OverlayAction, key: str = ""
) -> bool:
    """Show *overlay* unless another one is already capturing input."""
    if state.overlay is not None:
        logger.debug("Dropping %s overlay; another overlay is active", action.value)
        return False
    state.overlay = overlay
    state.overlay_action = action
    state.overlay_issue = key
    return True


def _apply_issue_update(state: AppState, issue: Issue) -> None:
    """Replace every copy of an edited issue: tab rows and open detail views."""
    for tab in state.tabs:
        tab.replace_issue(issue)
    for view in state.view_stack:
        if view.key == issue.key:
            view.update_issue(issue)


def _remove_issue_everywhere(state: AppState, key: str) -> None:
    for tab in state.tabs:
        tab.remove_issue(key)
    state.view_stack = [view for view in state.view_stack if view.key != key]


def _push_detail(state: AppState, issue: Issue) -> list[cmd.Command]:
    view = DetailView(issue, base_url=state.base_url, width=state.width, height=state.height)
    state.view_stack.append(view)
    if not state.has_client:
        view.loading = view.comments_loading = view.children_loading = False
        view.build_content()
        return []
    return [cmd.FetchIssue(issue.key), cmd.FetchComments(issue.key), cmd.FetchChildren(issue.key)]


# ── Keys ──


def _on_key(state: AppState, key: str) -> list[cmd.Command]:
    state.flash = None
    if key == "ctrl+c":
        return [cmd.Quit()]
    if state.overlay is not None:
        # The overlay's own widgets take the keys.
        return []
    if key == "ctrl+q":
        return [cmd.Quit()]
    if state.view_stack:
        return _view_key(state, key)
    tab = state.current_tab
    if tab is not None and tab.quick_filter.is_focused:
        return _filter_key(state, key)
    return _tab_key(state, key)


def _on_overlay_input(state: AppState, message: msg.AppMessage) -> list[cmd.Command]:
    overlay = state.overlay
    if overlay is None:
        logger.debug("Ignoring %r; no overlay is active", message)
        return []
    if isinstance(message, msg.OverlayEdited):
        if isinstance(overlay, SelectionOverlay):
            overlay.set_query(message.value)
        elif isinstance(overlay, TextInputOverlay):
            overlay.edit(message.value)
        return []
    if isinstance(message, msg.OverlayHighlighted):
        if isinstance(overlay, SelectionOverlay):
            overlay.highlight(message.position)
        return []

    state.flash = None
    if isinstance(message, msg.OverlayConfirmed):
        overlay.confirm(message.answer)
    else:
        overlay.cancel()
    _, result = overlay.done()
    action, target = state.overlay_action, state.overlay_issue
    state.overlay = None
    state.overlay_action = None
    state.overlay_issue = ""
    return _overlay_result(state, action, target, result)


def _overlay_result(state: AppState, action: OverlayAction | None, key: str, result) -> list[cmd.Command]:
    if result is None:
        if action == OverlayAction.CREATE_TYPE:
            state.create_summary = ""
        return []

    if action == OverlayAction.TRANSITION:
        state.set_flash(f"Transitioning {key}...")
        return [cmd.TransitionIssue(key, result.id)]
    elif action == OverlayAction.PRIORITY:
        state.set_flash(f"Setting priority on {key}...")
        return [cmd.UpdateFields(key, {"priority": {"id": result.id}})]
    elif action == OverlayAction.ASSIGN:
        state.set_flash(f"Assigning {key}...")
        return [cmd.UpdateFields(key, {"assignee": {"accountId": result.id}})]
    elif action == OverlayAction.EDIT_SUMMARY:
        state.set_flash(f"Updating title of {key}...")
        return [cmd.UpdateFields(key, {"summary": result})]
    elif action == OverlayAction.EDIT_DESCRIPTION:
        state.set_flash(f"Updating description of {key}...")
        return [cmd.UpdateFields(key, {"description": make_adf_document(result)})]
    elif action == OverlayAction.DELETE:
        if result is not True:
            return []
        _remove_issue_everywhere(state, key)
        state.set_flash(f"{key} deleted")
        return [cmd.DeleteIssue(key)]
    elif action == OverlayAction.CREATE_SUMMARY:
        summary = result.strip()
        if not summary:
            state.set_flash("Summary cannot be empty", is_error=True)
            return []
        state.set_flash("Loading issue types...")
        return [cmd.FetchIssueTypes(state.default_project, summary)]
    elif action == OverlayAction.CREATE_TYPE:
        summary = state.create_summary
        state.create_summary = ""
        state.set_flash("Creating issue...")
        assignee = state.user.account_id if state.user else ""
        return [cmd.CreateIssue(state.default_project, summary, result.label, assignee)]
    elif action == OverlayAction.ADD_COMMENT:
        text = result.strip()
        if not text:
            state.set_flash("Comment cannot be empty", is_error=True)
            return []
        placeholder = Comment(author=state.user, body=make_adf_document(text), pending=True)
        for view in state.view_stack:
            if view.key == key:
                view.add_pending_comment(placeholder)
        state.set_flash("Adding comment...")
        return [cmd.AddComment(key, text)]
    elif action == OverlayAction.RELATED:
        view = state.top_view
        known = view.find_related(result.id) if view is not None else None
        return _push_detail(state, known or Issue(key=result.id))
    return []


def _view_key(state: AppState, key: str) -> list[cmd.Command]:
    if key == "q":
        return [cmd.Quit()]
    if key == "escape":
        view = state.view_stack.pop()
        if view.dirty and state.connection == ConnectionStatus.CONNECTED:
            return [cmd.FetchIssue(view.key)]
        return []

    view = state.view_stack[-1]
    if key == "enter":
        items = view.related_issues()
        if not items:
            state.set_flash("No related issues")
            return []
        _open_overlay(state, SelectionOverlay("Related Issues", items), OverlayAction.RELATED)
        return []
    if key == "c":
        if not state.has_client:
            state.set_flash(NOT_CONNECTED, is_error=True)
            return []
        _open_overlay(
            state, TextEditorOverlay("Add Comment"), OverlayAction.ADD_COMMENT, view.key
        )
        return []

    handled, commands = _edit_hotkey(state, key, view.issue)
    if handled:
        return commands
    view.scroll_key(key)
    return []


def _filter_key(state: AppState, key: str) -> list[cmd.Command]:
    # Typing happens in the filter bar's input; only the closing keys get here.
    tab = state.current_tab
    if key in ("enter", "down"):
        tab.apply_filter()
    elif key == "escape":
        tab.clear_filter()
    return []


def _on_filter_input(state: AppState, message: msg.AppMessage) -> list[cmd.Command]:
    tab = state.current_tab
    if tab is None or not tab.quick_filter.is_focused or state.view_stack:
        return []
    if isinstance(message, msg.FilterEdited):
        tab.update_filter(message.value)
        return []
    state.flash = None
    if isinstance(message, msg.FilterConfirmed):
        tab.apply_filter()
    else:
        tab.clear_filter()
    return []


def _tab_key(state: AppState, key: str) -> list[cmd.Command]:
    if key == "q":
        return [cmd.Quit()]

    tab = state.current_tab
    if key in TAB_KEYS:
        index = int(key) - 1
        if index < len(state.tabs):
            if tab is not None:
                tab.clear_filter()
            state.active_tab = index
        return []
    if tab is None:
        return []

    if key == "escape":
        if tab.quick_filter.is_active:
            tab.clear_filter()
        return []
    if key == "/":
        if tab.state == TabState.READY:
            tab.quick_filter.activate()
        return []
    if key == "r":
        if state.connection == ConnectionStatus.FAILED:
            state.connection = ConnectionStatus.CHECKING
            state.connection_error = ""
            return [cmd.CheckConnection()]
        if state.connection == ConnectionStatus.CONNECTED:
            tab.set_loading()
            return [cmd.LoadTab(state.active_tab, tab.config)]
        return []
    if key == "c":
        if not state.has_client:
            state.set_flash(NOT_CONNECTED, is_error=True)
        elif not state.default_project:
            state.set_flash("Set default_project in config to create issues", is_error=True)
        else:
            _open_overlay(state, TextInputOverlay("New Issue Summary"), OverlayAction.CREATE_SUMMARY)
        return []
    if key == "enter":
        issue = tab.selected_issue()
        if issue is not None:
            return _push_detail(state, issue)
        return []

    if tab.state == TabState.READY:
        issue = tab.selected_issue()
        if issue is not None:
            handled, commands = _edit_hotkey(state, key, issue)
            if handled:
                return commands
        tab.scroll_key(key)
    return []


def _edit_hotkey(state: AppState, key: str, issue: Issue) -> tuple[bool, list[cmd.Command]]:
    """Edit hotkeys shared by the list and the detail view."""
    if key not in EDIT_HOTKEYS:
        return False, []

    # Copying the key needs no connection.
    if key == "y":
        return True, [cmd.CopyText(issue.key, f"Copied {issue.key}")]
    if not state.has_client:
        state.set_flash(NOT_CONNECTED, is_error=True)
        return True, []
    if key == "u":
        return True, [cmd.CopyText(state.browse_url(issue.key), "Copied URL")]
    if key == "o":
        return True, [cmd.OpenURL(state.browse_url(issue.key), issue.key)]

    if key == "d":
        state.set_flash(f"Marking {issue.key} as done...")
        return True, [cmd.FetchTransitions(issue.key, purpose="done")]
    elif key == "i":
        if state.user is None:
            state.set_flash("Not logged in", is_error=True)
            return True, []
        state.set_flash(f"Assigning {issue.key} to you...")
        return True, [cmd.AssignIssue(issue.key, state.user.account_id)]
    elif key == "s":
        state.set_flash("Loading transitions...")
        return True, [cmd.FetchTransitions(issue.key, purpose="select")]
    elif key == "p":
        if state.cached_priorities:
            _open_overlay(
                state, SelectionOverlay("Change Priority", _priority_items(state)),
                OverlayAction.PRIORITY, issue.key,
            )
            return True, []
        state.set_flash("Loading priorities...")
        return True, [cmd.FetchPriorities(issue.key)]
    elif key == "a":
        if state.cached_users:
            _open_overlay(
                state, SelectionOverlay("Assign To", _user_items(state)), OverlayAction.ASSIGN, issue.key
            )
            return True, []
        state.set_flash("Loading users...")
        return True, [cmd.FetchUsers(issue.key)]
    elif key == "t":
        _open_overlay(
            state, TextInputOverlay("Edit Title", issue.fields.summary),
            OverlayAction.EDIT_SUMMARY, issue.key,
        )
    elif key == "e":
        _open_overlay(
            state,
            TextEditorOverlay("Edit Description", extract_adf_text(issue.fields.description)),
            OverlayAction.EDIT_DESCRIPTION,
            issue.key,
        )
    elif key == "delete":
        _open_overlay(
            state, ConfirmOverlay(f"Delete {issue.key}? This cannot be undone."),
            OverlayAction.DELETE, issue.key,
        )
    return True, []
