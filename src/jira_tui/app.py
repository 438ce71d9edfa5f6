"""Main Textual App for the Jira terminal client.

The app is a thin host around the reducer in ``jira_tui.model``: every key,
resize, tick and API result is fed through ``model.update`` and the widgets
are redrawn from the returned state. Network commands run as Textual workers
and come back as ``ResultArrived`` messages.
"""

from __future__ import annotations

import logging
import webbrowser
from functools import partial
from pathlib import Path

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import Static

from jira_tui import commands as cmd
from jira_tui import messages as msg
from jira_tui import model
from jira_tui.client import JiraClient
from jira_tui.dispatcher import Dispatcher
from jira_tui.models import AppConfig, CachedUser
from jira_tui.screens.overlay_screen import OverlayScreen
from jira_tui.state import AppState, ConnectionStatus
from jira_tui.tab import TabState
from jira_tui.widgets.detail_pane import DetailPane
from jira_tui.widgets.filter_bar import FilterBar
from jira_tui.widgets.issue_table import IssueTable
from jira_tui.widgets.status_bar import StatusBar
from jira_tui.widgets.tab_bar import TabBar

logger = logging.getLogger(__name__)

TICK_INTERVAL = 0.1  # seconds


def key_name(event: events.Key) -> str:
    """Printable keys by their character (so ``G`` stays ``G``), others by name."""
    if event.is_printable and event.character:
        return event.character
    return event.key


class ResultArrived(Message):
    """A worker finished a network command."""

    def __init__(self, result: msg.ResultMessage) -> None:
        super().__init__()
        self.result = result


def main_message(state: AppState) -> Text | None:
    """Placeholder text for the list area, or None when the table is shown."""
    if state.connection == ConnectionStatus.CHECKING:
        return Text("Connecting to Jira...", style="dim")
    if state.connection == ConnectionStatus.FAILED:
        text = Text(f"Connection failed: {state.connection_error}", style="bold #FF5630")
        text.append("\n\nPress r to retry", style="dim")
        return text
    if state.connection == ConnectionStatus.DISCONNECTED:
        return Text(model.NOT_CONNECTED, style="dim")
    tab = state.current_tab
    if tab is None:
        return Text("No tabs configured", style="dim")
    if tab.state == TabState.LOADING:
        return Text("Loading issues...", style="dim")
    if tab.state == TabState.ERROR:
        return Text(f"Error: {tab.error}", style="bold #FF5630")
    if tab.state == TabState.EMPTY:
        return Text("No issues found", style="dim")
    return None


class JiraApp(App):
    """Jira terminal client."""

    TITLE = "Jira TUI"
    ENABLE_COMMAND_PALETTE = False
    CSS = """
    #main {
        height: 1fr;
    }
    #main-message {
        height: 1fr;
        padding: 1 2;
    }
    """

    # Both replace App's own quit bindings so the reducer decides.
    BINDINGS = [
        Binding("ctrl+c", "forward_key('ctrl+c')", "Quit", priority=True, show=False),
        Binding("ctrl+q", "forward_key('ctrl+q')", "Quit", priority=True, show=False),
    ]

    def __init__(
        self,
        config: AppConfig,
        client: JiraClient | None = None,
        user_cache_path: Path | None = None,
        cached_users: list[CachedUser] | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.client = client
        self.dispatcher = Dispatcher(client, user_cache_path) if client is not None else None
        self.state = AppState.from_config(config, has_client=client is not None, cached_users=cached_users)
        self._overlay_screen: OverlayScreen | None = None
        self._ui_ready = False

    def compose(self) -> ComposeResult:
        yield TabBar(id="tab-bar")
        with Vertical(id="main"):
            yield FilterBar(id="filter-bar")
            yield IssueTable(id="issue-table")
            yield DetailPane(id="detail-pane")
            yield Static("", id="main-message")
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        self._ui_ready = True
        self.state, commands = model.init(self.state)
        self.feed(msg.Resize(self.size.width, self.size.height))
        self._run_commands(commands)
        self.set_interval(TICK_INTERVAL, self._tick)

    async def on_unmount(self) -> None:
        if self.client is not None:
            await self.client.aclose()

    # ── Input ──

    def on_key(self, event: events.Key) -> None:
        # Focused inputs and the overlay screen handle their keys through bindings.
        if self.focused is not None or isinstance(self.screen, OverlayScreen):
            return
        event.stop()
        event.prevent_default()
        self.handle_key(key_name(event))

    def on_resize(self, event: events.Resize) -> None:
        self.feed(msg.Resize(event.size.width, event.size.height))

    def action_forward_key(self, key: str) -> None:
        self.handle_key(key)

    def handle_key(self, key: str) -> None:
        self.feed(msg.KeyPress(key))

    def _tick(self) -> None:
        if self.state.in_flight > 0:
            self.feed(msg.Tick())

    # ── Update loop ──

    def feed(self, message: msg.AppMessage) -> None:
        """Run one message through the reducer, then its commands, then redraw."""
        self.state, commands = model.update(self.state, message)
        self._run_commands(commands)
        if self._ui_ready:
            self._render_state()

    def _run_commands(self, commands: list[cmd.Command]) -> None:
        for command in commands:
            if isinstance(command, cmd.Quit):
                self.exit()
            elif isinstance(command, cmd.CopyText):
                self.copy_to_clipboard(command.text)
                self.feed(msg.Flash(command.success))
            elif isinstance(command, cmd.OpenURL):
                self.run_worker(partial(self._open_url, command), thread=True, exit_on_error=False)
            elif isinstance(command, cmd.NetworkCommand):
                self.run_worker(self._execute(command), exit_on_error=False)
            else:
                logger.warning("Unhandled command %r", command)

    async def _execute(self, command: cmd.NetworkCommand) -> None:
        if self.dispatcher is None:
            result = Dispatcher.failure(command, model.NOT_CONNECTED)
        else:
            try:
                result = await self.dispatcher.run(command)
            except Exception as e:
                logger.exception("Command %r failed", command)
                result = Dispatcher.failure(command, str(e))
        self.post_message(ResultArrived(result))

    def _open_url(self, command: cmd.OpenURL) -> None:
        """Called in a worker thread."""
        if webbrowser.open(command.url):
            flash = msg.Flash(f"Opened {command.key} in browser")
        else:
            flash = msg.Flash("Could not open browser", is_error=True)
        self.call_from_thread(self.feed, flash)

    def on_result_arrived(self, event: ResultArrived) -> None:
        self.feed(event.result)

    # ── Rendering ──

    def _render_state(self) -> None:
        state = self.state
        self.query_one(TabBar).update_tabs(state.tabs, state.active_tab)
        self.query_one(StatusBar).show_state(state)

        filter_bar = self.query_one(FilterBar)
        table = self.query_one(IssueTable)
        detail = self.query_one(DetailPane)
        message = self.query_one("#main-message", Static)

        view = state.top_view
        placeholder = None if view is not None else main_message(state)
        tab = state.current_tab

        detail.display = view is not None
        message.display = placeholder is not None
        table.display = view is None and placeholder is None
        if view is not None:
            detail.show_view(view)
            filter_bar.show_filter(None)
        elif placeholder is not None:
            message.update(placeholder)
            filter_bar.show_filter(None)
        elif tab is not None:
            filter_bar.show_filter(tab.quick_filter)
            table.show_tab(tab)

        self._sync_overlay()

    def _sync_overlay(self) -> None:
        overlay = self.state.overlay
        if overlay is None:
            if self._overlay_screen is not None:
                self._overlay_screen = None
                self.pop_screen()
            return
        if self._overlay_screen is None:
            self._overlay_screen = OverlayScreen(overlay)
            self.push_screen(self._overlay_screen)
        elif not self._overlay_screen.matches(overlay):
            self.pop_screen()
            self._overlay_screen = OverlayScreen(overlay)
            self.push_screen(self._overlay_screen)
        else:
            self._overlay_screen.show_overlay(overlay)
