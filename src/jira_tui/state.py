"""Root application state."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum

from jira_tui.detail import DetailView
from jira_tui.models import AppConfig, CachedUser, Named, User
from jira_tui.overlay import Overlay, OverlayAction
from jira_tui.tab import Tab

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")


class ConnectionStatus(Enum):
    CHECKING = "checking"
    CONNECTED = "connected"
    FAILED = "failed"
    DISCONNECTED = "disconnected"  # no client configured


@dataclass(frozen=True)
class FlashState:
    text: str
    is_error: bool = False


@dataclass
class AppState:
    """Everything the reducer owns.

    Exactly one of the overlay, the top of ``view_stack`` or the active tab
    receives each key press.
    """

    tabs: list[Tab] = field(default_factory=list)
    active_tab: int = 0
    view_stack: list[DetailView] = field(default_factory=list)
    overlay: Overlay | None = None
    overlay_action: OverlayAction | None = None
    overlay_issue: str = ""
    flash: FlashState | None = None
    in_flight: int = 0
    spinner_frame: int = 0
    connection: ConnectionStatus = ConnectionStatus.DISCONNECTED
    connection_error: str = ""
    user: User | None = None
    has_client: bool = False
    base_url: str = ""
    default_project: str = ""
    width: int = 80
    height: int = 24
    cached_priorities: list[Named] = field(default_factory=list)
    cached_users: list[CachedUser] = field(default_factory=list)
    create_summary: str = ""

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        has_client: bool = True,
        cached_users: list[CachedUser] | None = None,
    ) -> AppState:
        return cls(
            tabs=[Tab(config=tab) for tab in config.tabs],
            connection=ConnectionStatus.CHECKING if has_client else ConnectionStatus.DISCONNECTED,
            has_client=has_client,
            base_url=config.jira.base_url,
            default_project=config.jira.default_project,
            cached_users=list(cached_users or []),
        )

    def copy(self) -> AppState:
        return copy.deepcopy(self)

    @property
    def current_tab(self) -> Tab | None:
        if 0 <= self.active_tab < len(self.tabs):
            return self.tabs[self.active_tab]
        return None

    @property
    def top_view(self) -> DetailView | None:
        return self.view_stack[-1] if self.view_stack else None

    @property
    def spinner(self) -> str:
        return SPINNER_FRAMES[self.spinner_frame % len(SPINNER_FRAMES)]

    def browse_url(self, key: str) -> str:
        return f"{self.base_url}/browse/{key}"

    def set_flash(self, text: str, is_error: bool = False) -> None:
        self.flash = FlashState(text, is_error)
