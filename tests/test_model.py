"""Tests for the application reducer: key routing, results and mutations."""

import pytest

from jira_tui import commands as cmd
from jira_tui import messages as msg
from jira_tui import model
from jira_tui.models import CachedUser, Comment, IssueType, Named, Transition
from jira_tui.overlay import ConfirmOverlay, SelectionOverlay, TextEditorOverlay, TextInputOverlay
from jira_tui.state import AppState, ConnectionStatus
from jira_tui.tab import TabState

from fakes import DONE, IN_PROGRESS, ME, make_config, make_issue

BOB_CACHED = CachedUser("acc-bob", "Bob Jones", "bob@example.com")

ISSUES = [
    make_issue("PROJ-1", "Login page broken"),
    make_issue("PROJ-2", "Add logout button"),
    make_issue("PROJ-3", "Update docs"),
]


def _press(state, *keys):
    commands = []
    for key in keys:
        state, cmds = model.update(state, msg.KeyPress(key))
        commands.extend(cmds)
    return state, commands


def _send(state, *messages):
    commands = []
    for message in messages:
        state, cmds = model.update(state, message)
        commands.extend(cmds)
    return state, commands


def _filter(state, text):
    """Open the quick filter and type *text* into it one character at a time."""
    state, _ = _press(state, "/")
    return _send(state, *(msg.FilterEdited(text[:end]) for end in range(1, len(text) + 1)))


def _edit(state, text):
    return _send(state, msg.OverlayEdited(text))


def _confirm(state, answer=None):
    return _send(state, msg.OverlayConfirmed(answer))


def _cancel(state):
    return _send(state, msg.OverlayCancelled())


@pytest.fixture
def ready():
    """Connected, both tabs loaded, 120x40 terminal."""
    state, _ = model.init(AppState.from_config(make_config()))
    state, _ = model.update(state, msg.Resize(120, 40))
    state, _ = model.update(state, msg.ConnectionResult(user=ME))
    state, _ = model.update(state, msg.TabDataResult(0, issues=list(ISSUES)))
    state, _ = model.update(state, msg.TabDataResult(1, issues=[make_issue("PROJ-9", "Crash on start")]))
    return state


@pytest.fixture
def offline():
    state, _ = model.init(AppState.from_config(make_config(), has_client=False))
    state, _ = model.update(state, msg.TabDataResult(0, issues=list(ISSUES)))
    return state


class TestStartup:
    def test_init_checks_connection(self):
        state, commands = model.init(AppState.from_config(make_config()))
        assert commands == [cmd.CheckConnection()]
        assert state.connection == ConnectionStatus.CHECKING
        assert state.in_flight == 1

    def test_init_without_client(self):
        state, commands = model.init(AppState.from_config(make_config(), has_client=False))
        assert commands == []
        assert state.connection == ConnectionStatus.DISCONNECTED
        assert state.in_flight == 0

    def test_connected_loads_every_tab(self):
        state, _ = model.init(AppState.from_config(make_config()))
        state, commands = model.update(state, msg.ConnectionResult(user=ME))
        assert state.connection == ConnectionStatus.CONNECTED
        assert state.user == ME
        assert commands == [cmd.LoadTab(0, state.tabs[0].config), cmd.LoadTab(1, state.tabs[1].config)]
        assert all(tab.state == TabState.LOADING for tab in state.tabs)
        assert state.in_flight == 2

    def test_connection_failure_and_retry(self):
        state, _ = model.init(AppState.from_config(make_config()))
        state, _ = model.update(state, msg.ConnectionResult(error="API error 401: Unauthorized"))
        assert state.connection == ConnectionStatus.FAILED
        assert state.connection_error == "API error 401: Unauthorized"
        state, commands = _press(state, "r")
        assert commands == [cmd.CheckConnection()]
        assert state.connection == ConnectionStatus.CHECKING

    def test_tab_data(self, ready):
        assert [tab.state for tab in ready.tabs] == [TabState.READY, TabState.READY]
        assert ready.in_flight == 0

    def test_tab_error(self, ready):
        state, _ = model.update(ready, msg.TabDataResult(1, error="API error 400: bad jql"))
        assert state.tabs[1].state == TabState.ERROR
        assert state.tabs[1].error == "API error 400: bad jql"
        assert state.tabs[0].state == TabState.READY

    def test_tab_data_out_of_range_ignored(self, ready):
        state, commands = model.update(ready, msg.TabDataResult(7, issues=list(ISSUES)))
        assert commands == []
        assert len(state.tabs) == 2

    def test_reload_tab(self, ready):
        state, commands = _press(ready, "r")
        assert commands == [cmd.LoadTab(0, ready.tabs[0].config)]
        assert state.tabs[0].state == TabState.LOADING


class TestReducer:
    def test_update_does_not_mutate_input(self, ready):
        after, _ = _filter(ready, "x")
        assert after.current_tab.quick_filter.is_active
        assert not ready.current_tab.quick_filter.is_active
        assert ready.current_tab.quick_filter.text == ""

    def test_in_flight_never_negative(self):
        state = AppState.from_config(make_config())
        state, _ = model.update(state, msg.IssueDeletedResult("PROJ-1"))
        assert state.in_flight == 0

    def test_in_flight_tracks_commands(self, ready):
        state, _ = _press(ready, "d")
        assert state.in_flight == 1
        state, _ = model.update(state, msg.TransitionsResult("PROJ-1", "done", transitions=[
            Transition("31", "Finish", to=DONE),
        ]))
        assert state.in_flight == 1
        state, _ = model.update(state, msg.IssueMutatedResult("PROJ-1"))
        assert state.in_flight == 1
        state, _ = model.update(state, msg.IssueUpdatedResult("PROJ-1", issue=make_issue("PROJ-1", status=DONE)))
        assert state.in_flight == 0

    def test_spinner_only_advances_in_flight(self, ready):
        state, _ = model.update(ready, msg.Tick())
        assert state.spinner_frame == 0
        state, _ = _press(state, "d")
        state, _ = model.update(state, msg.Tick())
        assert state.spinner_frame == 1

    def test_layout(self, ready):
        assert ready.current_tab.height == 36
        state, _ = _press(ready, "/")
        assert state.current_tab.height == 35
        state, _ = model.update(state, msg.Resize(80, 5))
        assert state.current_tab.height == 3

    def test_flash_cleared_by_next_key(self, ready):
        state, _ = _press(ready, "d")
        assert state.flash.text == "Marking PROJ-1 as done..."
        state, _ = _press(state, "j")
        assert state.flash is None

    def test_flash_message(self, ready):
        state, _ = model.update(ready, msg.Flash("Copied PROJ-1"))
        assert state.flash.text == "Copied PROJ-1"
        assert not state.flash.is_error

    def test_quit(self, ready):
        assert _press(ready, "q")[1] == [cmd.Quit()]
        assert _press(ready, "ctrl+c")[1] == [cmd.Quit()]
        assert _press(ready, "ctrl+q")[1] == [cmd.Quit()]


class TestQuickFilter:
    def test_two_of_three(self, ready):
        state, _ = _filter(ready, "log")
        tab = state.current_tab
        assert tab.quick_filter.is_focused
        assert [i.key for i in tab.visible_issues()] == ["PROJ-1", "PROJ-2"]
        assert tab.quick_filter.match_text() == "2 of 3 issues"

    def test_focused_filter_ignores_hotkeys(self, ready):
        state, _ = _filter(ready, "q2")
        assert state.current_tab.quick_filter.text == "q2"
        # Keys that reach the reducer while the input has focus are not hotkeys.
        state, commands = _press(state, "2", "q", "d")
        assert commands == []
        assert state.active_tab == 0
        assert state.current_tab.quick_filter.is_focused

    def test_filter_messages(self, ready):
        state, _ = _filter(ready, "log")
        state, _ = _send(state, msg.FilterConfirmed())
        assert state.current_tab.quick_filter.query == "log"
        assert not state.current_tab.quick_filter.is_focused
        state, _ = _filter(state, "docs")
        state, _ = _send(state, msg.FilterCancelled())
        assert not state.current_tab.quick_filter.is_active

    def test_filter_edits_ignored_when_not_focused(self, ready):
        state, _ = _send(ready, msg.FilterEdited("log"))
        assert not state.current_tab.quick_filter.is_active
        assert len(state.current_tab.visible_issues()) == 3

    def test_confirm_then_navigate(self, ready):
        state, _ = _filter(ready, "log")
        state, _ = _press(state, "enter", "j")
        tab = state.current_tab
        assert not tab.quick_filter.is_focused
        assert tab.quick_filter.is_active
        assert tab.selected_issue().key == "PROJ-2"

    def test_down_confirms(self, ready):
        state, _ = _filter(ready, "log")
        state, _ = _press(state, "down")
        assert not state.current_tab.quick_filter.is_focused
        assert state.current_tab.quick_filter.is_active

    def test_empty_confirm_equals_clear(self, ready):
        state, _ = _press(ready, "/", "enter")
        assert not state.current_tab.quick_filter.is_active
        assert len(state.current_tab.visible_issues()) == 3

    def test_escape_clears(self, ready):
        state, _ = _filter(ready, "log")
        state, _ = _press(state, "escape")
        assert not state.current_tab.quick_filter.is_active
        state, _ = _filter(ready, "log")
        state, _ = _press(state, "enter", "escape")
        assert not state.current_tab.quick_filter.is_active

    def test_tab_switch_clears_filter(self, ready):
        state, _ = _filter(ready, "log")
        state, _ = _press(state, "enter", "2")
        assert state.active_tab == 1
        assert not state.tabs[0].quick_filter.is_active
        state, _ = _press(state, "1")
        assert len(state.current_tab.visible_issues()) == 3

    def test_unknown_tab_number_ignored(self, ready):
        state, _ = _press(ready, "5")
        assert state.active_tab == 0

    def test_filter_needs_ready_tab(self, ready):
        state, _ = model.update(ready, msg.TabDataResult(0, error="boom"))
        state, _ = _press(state, "/")
        assert not state.current_tab.quick_filter.is_active

    def test_clear_keeps_selected_issue(self, ready):
        state, _ = _filter(ready, "docs")
        state, _ = _press(state, "enter", "escape")
        assert state.current_tab.selected_issue().key == "PROJ-3"


class TestDetailView:
    def test_enter_renders_immediately(self, ready):
        state, commands = _press(ready, "j", "enter")
        view = state.top_view
        assert view.key == "PROJ-2"
        assert "Add logout button" in view.plain_text()
        assert commands == [cmd.FetchIssue("PROJ-2"), cmd.FetchComments("PROJ-2"), cmd.FetchChildren("PROJ-2")]
        assert state.in_flight == 3

    def test_full_issue_arrives(self, ready):
        state, _ = _press(ready, "enter")
        full = make_issue("PROJ-1", "Login page broken", labels=("auth",))
        state, _ = model.update(state, msg.IssueDetailResult("PROJ-1", issue=full))
        assert not state.top_view.loading
        assert not state.top_view.dirty
        assert "auth" in state.top_view.plain_text()
        assert state.tabs[0].issues[0] == full

    def test_detail_error(self, ready):
        state, _ = _press(ready, "enter")
        state, _ = model.update(state, msg.IssueDetailResult("PROJ-1", error="boom"))
        assert state.flash.text == "Failed to load PROJ-1: boom"
        assert state.flash.is_error
        assert not state.top_view.loading

    def test_late_results_for_other_issues_ignored(self, ready):
        state, _ = _press(ready, "enter")
        state, _ = model.update(state, msg.CommentsResult("PROJ-9", comments=[Comment(id="1", body="x")]))
        assert state.top_view.comments_loading
        state, _ = model.update(state, msg.CommentsResult("PROJ-1", comments=[Comment(id="1", body="x")]))
        assert not state.top_view.comments_loading
        assert len(state.top_view.comments) == 1

    def test_failed_children_omit_section(self, ready):
        state, _ = _press(ready, "enter")
        state, _ = model.update(state, msg.ChildrenResult("PROJ-1", error="boom"))
        assert not state.top_view.children_loading
        assert state.top_view.children == []
        assert "Children" not in state.top_view.plain_text()

    def test_escape_pops(self, ready):
        state, _ = _press(ready, "enter")
        state, commands = _press(state, "escape")
        assert state.view_stack == []
        assert commands == []

    def test_keys_go_to_view(self, ready):
        state, _ = _press(ready, "enter", "j", "2")
        assert state.active_tab == 0
        assert state.current_tab.cursor == 0
        assert _press(state, "q")[1] == [cmd.Quit()]

    def test_related_navigation(self, ready):
        state, _ = _press(ready, "enter")
        full = make_issue("PROJ-1", "Login page broken", subtasks=(make_issue("PROJ-11", "Fix cookie"),))
        state, _ = model.update(state, msg.IssueDetailResult("PROJ-1", issue=full))
        state, _ = _press(state, "enter")
        assert isinstance(state.overlay, SelectionOverlay)
        assert state.overlay.title == "Related Issues"
        state, commands = _confirm(state)
        assert [v.key for v in state.view_stack] == ["PROJ-1", "PROJ-11"]
        assert "Fix cookie" in state.top_view.plain_text()
        assert cmd.FetchIssue("PROJ-11") in commands
        state, _ = _press(state, "escape")
        assert state.top_view.key == "PROJ-1"

    def test_no_related_issues(self, ready):
        state, _ = _press(ready, "enter", "enter")
        assert state.overlay is None
        assert state.flash.text == "No related issues"

    def test_add_comment(self, ready):
        state, _ = _press(ready, "enter")
        state, _ = model.update(state, msg.CommentsResult("PROJ-1"))
        state, _ = _press(state, "c")
        assert isinstance(state.overlay, TextEditorOverlay)
        state, _ = _edit(state, "hi")
        state, commands = _confirm(state)
        assert commands == [cmd.AddComment("PROJ-1", "hi")]
        assert state.overlay is None
        assert state.top_view.comments[0].pending
        assert "sending…" in state.top_view.plain_text()

        comment = Comment(id="5", author=ME, body="hi", created="2025-07-02T09:00:00.000+0000")
        state, _ = model.update(state, msg.CommentAddedResult("PROJ-1", comment=comment))
        assert state.top_view.comments == [comment]
        assert state.flash.text == "Comment added"

    def test_add_comment_failure_drops_placeholder(self, ready):
        state, _ = _press(ready, "enter", "c")
        state, _ = _edit(state, "hi")
        state, _ = _confirm(state)
        state, _ = model.update(state, msg.CommentAddedResult("PROJ-1", error="API error 403: Forbidden"))
        assert state.top_view.comments == []
        assert state.flash.is_error

    def test_empty_comment(self, ready):
        state, _ = _press(ready, "enter", "c")
        state, _ = _edit(state, " ")
        state, commands = _confirm(state)
        assert not any(isinstance(c, cmd.AddComment) for c in commands)
        assert state.flash.text == "Comment cannot be empty"


class TestEdits:
    def test_title_edit_updates_row_and_detail(self, ready):
        state, _ = _press(ready, "j", "enter", "t")
        assert isinstance(state.overlay, TextInputOverlay)
        assert state.overlay.value == "Add logout button"
        state, _ = _edit(state, "Add logout link")
        state, commands = _confirm(state)
        assert commands == [cmd.UpdateFields("PROJ-2", {"summary": "Add logout link"})]
        assert state.flash.text == "Updating title of PROJ-2..."

        state, commands = model.update(state, msg.IssueMutatedResult("PROJ-2"))
        assert commands == [cmd.RefreshIssue("PROJ-2")]
        state, _ = model.update(state, msg.IssueUpdatedResult("PROJ-2", issue=make_issue("PROJ-2", "Add logout link")))

        assert state.flash.text == "PROJ-2 updated"
        assert state.tabs[0].issues[1].fields.summary == "Add logout link"
        assert state.top_view.dirty
        assert "Add logout link" in state.top_view.plain_text()

        state, commands = _press(state, "escape")
        assert commands == [cmd.FetchIssue("PROJ-2")]
        assert state.current_tab.selected_issue().key == "PROJ-2"

    def test_update_keeps_cursor_on_same_issue(self, ready):
        state, _ = _filter(ready, "log")
        state, _ = _press(state, "enter", "j")
        assert state.current_tab.selected_issue().key == "PROJ-2"
        # PROJ-1 stops matching the filter, so PROJ-2 moves up a row.
        state, _ = model.update(state, msg.IssueUpdatedResult("PROJ-1", issue=make_issue("PROJ-1", "Sign-in page broken")))
        tab = state.current_tab
        assert [i.key for i in tab.visible_issues()] == ["PROJ-2"]
        assert tab.selected_issue().key == "PROJ-2"

    def test_mutation_error(self, ready):
        state, commands = model.update(ready, msg.IssueMutatedResult("PROJ-1", error="API error 400: bad"))
        assert commands == []
        assert state.flash.text == "API error 400: bad"
        assert state.flash.is_error

    def test_edit_description(self, ready):
        state, _ = _press(ready, "e")
        assert isinstance(state.overlay, TextEditorOverlay)
        state, _ = _edit(state, "Steps\n\nto reproduce")
        state, commands = _confirm(state)
        assert commands[0].key == "PROJ-1"
        assert commands[0].fields["description"]["type"] == "doc"
        assert len(commands[0].fields["description"]["content"]) == 2

    def test_cancelled_edit_sends_nothing(self, ready):
        state, _ = _press(ready, "t")
        state, _ = _edit(state, "x")
        state, commands = _cancel(state)
        assert commands == []
        assert state.overlay is None

    def test_mark_done(self, ready):
        state, commands = _press(ready, "d")
        assert commands == [cmd.FetchTransitions("PROJ-1", purpose="done")]
        state, commands = model.update(state, msg.TransitionsResult("PROJ-1", "done", transitions=[
            Transition("11", "Start", to=IN_PROGRESS),
            Transition("31", "Finish", to=DONE),
        ]))
        assert commands == [cmd.TransitionIssue("PROJ-1", "31")]

    def test_mark_done_without_done_transition(self, ready):
        state, _ = _press(ready, "d")
        state, commands = model.update(state, msg.TransitionsResult("PROJ-1", "done", transitions=[
            Transition("11", "Start", to=IN_PROGRESS),
        ]))
        assert commands == []
        assert state.flash.is_error
        assert "no" in state.flash.text
        assert "PROJ-1" in state.flash.text

    def test_status_picker(self, ready):
        state, commands = _press(ready, "s")
        assert commands == [cmd.FetchTransitions("PROJ-1", purpose="select")]
        state, _ = model.update(state, msg.TransitionsResult("PROJ-1", transitions=[
            Transition("11", "Start", to=IN_PROGRESS),
            Transition("31", "Finish", to=DONE),
        ]))
        assert state.overlay.title == "Change Status"
        state, commands = _send(state, msg.OverlayHighlighted(1), msg.OverlayConfirmed())
        assert commands == [cmd.TransitionIssue("PROJ-1", "31")]
        assert state.flash.text == "Transitioning PROJ-1..."

    def test_overlay_absorbs_q(self, ready):
        state, _ = _press(ready, "s")
        state, _ = model.update(state, msg.TransitionsResult("PROJ-1", transitions=[Transition("11", "Start")]))
        state, commands = _press(state, "q", "ctrl+q", "escape", "enter")
        assert commands == []
        assert state.overlay is not None
        state, _ = _edit(state, "q")
        assert state.overlay.query == "q"
        state, _ = _cancel(state)
        assert state.overlay is None

    def test_ctrl_c_quits_from_overlay(self, ready):
        state, _ = _press(ready, "t")
        assert _press(state, "ctrl+c")[1] == [cmd.Quit()]

    def test_ctrl_q_does_not_quit_from_overlay(self, ready):
        state, _ = _press(ready, "t")
        state, commands = _press(state, "ctrl+q")
        assert commands == []
        assert isinstance(state.overlay, TextInputOverlay)

    def test_overlay_messages_without_overlay_ignored(self, ready):
        state, commands = _send(ready, msg.OverlayEdited("x"), msg.OverlayConfirmed(True), msg.OverlayCancelled())
        assert commands == []
        assert state.overlay is None

    def test_selection_without_match_sends_nothing(self, ready):
        state, _ = _press(ready, "s")
        state, _ = model.update(state, msg.TransitionsResult("PROJ-1", transitions=[Transition("11", "Start")]))
        state, _ = _edit(state, "zzz")
        state, commands = _confirm(state)
        assert commands == []
        assert state.overlay is None

    def test_highlight_follows_filter(self, ready):
        state, _ = _press(ready, "s")
        state, _ = model.update(state, msg.TransitionsResult("PROJ-1", transitions=[
            Transition("11", "Start", to=IN_PROGRESS),
            Transition("31", "Finish", to=DONE),
        ]))
        state, _ = _send(state, msg.OverlayHighlighted(1), msg.OverlayEdited("sta"))
        assert state.overlay.cursor == 0
        state, commands = _confirm(state)
        assert commands == [cmd.TransitionIssue("PROJ-1", "11")]

    def test_priority_picker_uses_cache(self, ready):
        state, commands = _press(ready, "p")
        assert commands == [cmd.FetchPriorities("PROJ-1")]
        state, _ = model.update(state, msg.PrioritiesResult("PROJ-1", priorities=[
            Named("1", "High"), Named("3", "Medium"),
        ]))
        assert [i.icon for i in state.overlay.items] == ["↑", "≡"]
        state, commands = _confirm(state)
        assert commands == [cmd.UpdateFields("PROJ-1", {"priority": {"id": "1"}})]
        state, commands = _press(state, "p")
        assert commands == []
        assert state.overlay.title == "Change Priority"

    def test_assign_picker(self, ready):
        state, commands = _press(ready, "a")
        assert commands == [cmd.FetchUsers("PROJ-1")]
        state, _ = model.update(state, msg.UsersResult("PROJ-1", users=[BOB_CACHED]))
        assert state.overlay.title == "Assign To"
        state, commands = _confirm(state)
        assert commands == [cmd.UpdateFields("PROJ-1", {"assignee": {"accountId": "acc-bob"}})]

    def test_assign_to_me(self, ready):
        state, commands = _press(ready, "i")
        assert commands == [cmd.AssignIssue("PROJ-1", ME.account_id)]
        assert state.flash.text == "Assigning PROJ-1 to you..."

    def test_result_overlay_dropped_when_busy(self, ready):
        state, _ = _press(ready, "t")
        state, _ = model.update(state, msg.PrioritiesResult("PROJ-1", priorities=[Named("1", "High")]))
        assert isinstance(state.overlay, TextInputOverlay)
        assert state.cached_priorities == [Named("1", "High")]

    def test_copy_and_open(self, ready):
        assert _press(ready, "y")[1] == [cmd.CopyText("PROJ-1", "Copied PROJ-1")]
        url = "https://example.atlassian.net/browse/PROJ-1"
        assert _press(ready, "u")[1] == [cmd.CopyText(url, "Copied URL")]
        assert _press(ready, "o")[1] == [cmd.OpenURL(url, "PROJ-1")]


class TestDelete:
    def test_optimistic_delete(self, ready):
        state, _ = _press(ready, "j", "delete")
        assert isinstance(state.overlay, ConfirmOverlay)
        assert state.overlay.message == "Delete PROJ-2? This cannot be undone."
        state, commands = _confirm(state, True)
        assert commands == [cmd.DeleteIssue("PROJ-2")]
        assert [i.key for i in state.current_tab.issues] == ["PROJ-1", "PROJ-3"]
        assert state.current_tab.selected_issue().key == "PROJ-3"
        assert state.flash.text == "PROJ-2 deleted"

        state, _ = model.update(state, msg.IssueDeletedResult("PROJ-2"))
        assert [i.key for i in state.current_tab.issues] == ["PROJ-1", "PROJ-3"]
        assert state.in_flight == 0

    def test_declined(self, ready):
        state, _ = _press(ready, "delete")
        state, commands = _confirm(state, False)
        assert commands == []
        assert len(state.current_tab.issues) == 3

    def test_delete_failure(self, ready):
        state, _ = _press(ready, "delete")
        state, _ = _confirm(state, True)
        state, _ = model.update(state, msg.IssueDeletedResult("PROJ-1", error="API error 403: Forbidden"))
        assert state.flash.text == "Delete failed: API error 403: Forbidden"
        assert state.flash.is_error

    def test_delete_from_detail_closes_view(self, ready):
        state, _ = _press(ready, "enter", "delete")
        state, _ = _confirm(state, True)
        assert state.view_stack == []
        assert [i.key for i in state.current_tab.issues] == ["PROJ-2", "PROJ-3"]

    def test_deleting_last_issue_empties_tab(self, ready):
        state, _ = _press(ready, "2", "delete")
        state, _ = _confirm(state, True)
        assert state.current_tab.state == TabState.EMPTY


class TestCreate:
    def test_create_flow(self, ready):
        state, _ = _press(ready, "c")
        assert state.overlay.title == "New Issue Summary"
        state, _ = _edit(state, "Crash ")
        state, commands = _confirm(state)
        assert commands == [cmd.FetchIssueTypes("PROJ", "Crash")]

        state, _ = model.update(state, msg.IssueTypesResult("Crash", issue_types=[
            IssueType("10001", "Task"), IssueType("10004", "Bug"),
        ]))
        assert state.overlay.title == "Issue Type"
        assert state.create_summary == "Crash"
        state, commands = _send(state, msg.OverlayHighlighted(1), msg.OverlayConfirmed())
        assert commands == [cmd.CreateIssue("PROJ", "Crash", "Bug", "acc-me")]
        assert state.create_summary == ""

        state, commands = model.update(state, msg.IssueCreatedResult("PROJ-901"))
        assert state.flash.text == "Created PROJ-901"
        assert state.top_view.key == "PROJ-901"
        assert cmd.FetchIssue("PROJ-901") in commands
        assert commands[-1] == cmd.LoadTab(0, state.tabs[0].config)

    def test_empty_summary(self, ready):
        state, _ = _press(ready, "c")
        state, _ = _edit(state, " ")
        state, commands = _confirm(state)
        assert commands == []
        assert state.flash.text == "Summary cannot be empty"

    def test_needs_default_project(self):
        state, _ = model.init(AppState.from_config(make_config(default_project="")))
        state, _ = model.update(state, msg.ConnectionResult(user=ME))
        state, _ = _press(state, "c")
        assert state.overlay is None
        assert "default_project" in state.flash.text

    def test_issue_type_error(self, ready):
        state, _ = _press(ready, "c")
        state, _ = _edit(state, "Crash")
        state, _ = _confirm(state)
        state, _ = model.update(state, msg.IssueTypesResult("Crash", error="API error 404: no project"))
        assert state.overlay is None
        assert state.flash.is_error

    def test_create_error(self, ready):
        state, commands = model.update(ready, msg.IssueCreatedResult(error="create issue: API error 400"))
        assert commands == []
        assert state.flash.text == "create issue: API error 400"
        assert state.view_stack == []


class TestOffline:
    def test_edits_need_client(self, offline):
        for key in ("s", "p", "d", "i", "a", "t", "e", "delete", "u", "o"):
            state, commands = _press(offline, key)
            assert commands == []
            assert state.overlay is None
            assert state.flash.text == model.NOT_CONNECTED

    def test_copy_key_works_offline(self, offline):
        assert _press(offline, "y")[1] == [cmd.CopyText("PROJ-1", "Copied PROJ-1")]

    def test_create_needs_client(self, offline):
        state, _ = _press(offline, "c")
        assert state.flash.text == model.NOT_CONNECTED

    def test_detail_without_fetches(self, offline):
        state, commands = _press(offline, "enter")
        assert commands == []
        assert not state.top_view.loading
        assert "Loading…" not in state.top_view.plain_text()
