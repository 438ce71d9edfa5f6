"""Modal screen for the active overlay.

Text entry and list navigation are done by Textual widgets. Their events go
back to the app as reducer messages; the app pops the screen once the
overlay in ``AppState`` is finished.
"""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import Input, OptionList, Static, TextArea
from textual.widgets.option_list import Option

from jira_tui import messages as msg
from jira_tui.overlay import (
    ConfirmOverlay,
    Overlay,
    SelectionItem,
    SelectionOverlay,
    TextEditorOverlay,
    TextInputOverlay,
)

SELECTION_HINT = "↑/↓: navigate  enter: select  esc: cancel"
INPUT_HINT = "enter: confirm  esc: cancel"
EDITOR_HINT = "ctrl+s: save  esc: cancel"
CONFIRM_HINT = "y: confirm  n/esc: cancel"


def option_prompt(item: SelectionItem) -> Text:
    line = Text()
    if item.icon:
        line.append(f"{item.icon} ")
    line.append(item.display or item.label)
    if item.desc and not item.display:
        line.append(f"  {item.desc}", style="dim")
    return line


def overlay_hint(overlay: Overlay) -> str:
    if isinstance(overlay, SelectionOverlay):
        return SELECTION_HINT
    if isinstance(overlay, TextEditorOverlay):
        return EDITOR_HINT
    if isinstance(overlay, TextInputOverlay):
        return INPUT_HINT
    if isinstance(overlay, ConfirmOverlay):
        return CONFIRM_HINT
    raise TypeError(f"unknown overlay: {overlay!r}")


def overlay_title(overlay: Overlay) -> str:
    if isinstance(overlay, ConfirmOverlay):
        return "Confirm"
    return overlay.title


class OverlayScreen(ModalScreen[None]):
    """Mirror of ``AppState.overlay``."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
        Binding("ctrl+s", "save", "Save", show=False),
        Binding("up,ctrl+p", "cursor_up", "Up", show=False),
        Binding("down,ctrl+n", "cursor_down", "Down", show=False),
        Binding("y,Y", "answer(True)", "Yes", show=False),
        Binding("n,N", "answer(False)", "No", show=False),
    ]

    DEFAULT_CSS = """
    OverlayScreen {
        align: center middle;
    }
    #overlay-container {
        width: 70;
        max-width: 90%;
        height: auto;
        max-height: 90%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }
    #overlay-title {
        text-style: bold;
        margin-bottom: 1;
    }
    #overlay-list {
        height: auto;
        max-height: 15;
    }
    #overlay-list > .option-list--option-highlighted {
        background: $accent;
        color: $text;
    }
    #overlay-textarea {
        height: 8;
    }
    #overlay-hint {
        color: $text-muted;
        margin-top: 1;
    }
    """

    def __init__(self, overlay: Overlay) -> None:
        super().__init__()
        self._overlay = overlay
        self._filtered: list[int] = list(overlay.filtered) if isinstance(overlay, SelectionOverlay) else []

    @property
    def overlay(self) -> Overlay:
        return self._overlay

    def matches(self, overlay: Overlay) -> bool:
        """True if *overlay* is the one this screen was built for."""
        return type(overlay) is type(self._overlay) and overlay_title(overlay) == overlay_title(self._overlay)

    def compose(self) -> ComposeResult:
        overlay = self._overlay
        with Vertical(id="overlay-container"):
            yield Static(overlay_title(overlay), id="overlay-title", markup=False)
            if isinstance(overlay, SelectionOverlay):
                yield Input(value=overlay.query, placeholder="Type to filter...", id="overlay-input")
                yield OptionList(*self._options(overlay), id="overlay-list")
            elif isinstance(overlay, TextEditorOverlay):
                yield TextArea(overlay.value, id="overlay-textarea")
            elif isinstance(overlay, TextInputOverlay):
                yield Input(value=overlay.value, id="overlay-input")
            else:
                yield Static(overlay.message, id="overlay-message", markup=False)
            yield Static(overlay_hint(overlay), id="overlay-hint", markup=False)

    def on_mount(self) -> None:
        if isinstance(self._overlay, SelectionOverlay):
            self._sync_highlight(self._overlay)
        if isinstance(self._overlay, TextEditorOverlay):
            self.query_one("#overlay-textarea", TextArea).focus()
        elif isinstance(self._overlay, (SelectionOverlay, TextInputOverlay)):
            self.query_one("#overlay-input", Input).focus()

    @staticmethod
    def _options(overlay: SelectionOverlay) -> list[Option]:
        return [Option(option_prompt(item)) for item in overlay.visible()]

    def show_overlay(self, overlay: Overlay) -> None:
        """Follow the reducer's copy; the widgets keep their own text."""
        self._overlay = overlay
        if not isinstance(overlay, SelectionOverlay):
            return
        try:
            option_list = self.query_one("#overlay-list", OptionList)
        except NoMatches:
            return
        if overlay.filtered != self._filtered:
            self._filtered = list(overlay.filtered)
            option_list.set_options(self._options(overlay))
        self._sync_highlight(overlay)

    def _sync_highlight(self, overlay: SelectionOverlay) -> None:
        option_list = self.query_one("#overlay-list", OptionList)
        wanted = overlay.cursor if overlay.filtered else None
        if option_list.highlighted != wanted:
            option_list.highlighted = wanted

    # ── Widget events ──

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        self.app.feed(msg.OverlayEdited(event.value))

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        event.stop()
        self.app.feed(msg.OverlayEdited(event.text_area.text))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._confirm()

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        event.stop()
        if isinstance(self._overlay, SelectionOverlay) and event.option_index != self._overlay.cursor:
            self.app.feed(msg.OverlayHighlighted(event.option_index))

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.app.feed(msg.OverlayHighlighted(event.option_index))
        self.app.feed(msg.OverlayConfirmed())

    def _confirm(self, answer: bool | None = None) -> None:
        if isinstance(self._overlay, SelectionOverlay):
            highlighted = self.query_one("#overlay-list", OptionList).highlighted
            if highlighted is not None:
                self.app.feed(msg.OverlayHighlighted(highlighted))
        elif isinstance(self._overlay, TextEditorOverlay):
            self.app.feed(msg.OverlayEdited(self.query_one("#overlay-textarea", TextArea).text))
        elif isinstance(self._overlay, TextInputOverlay):
            self.app.feed(msg.OverlayEdited(self.query_one("#overlay-input", Input).value))
        self.app.feed(msg.OverlayConfirmed(answer))

    # ── Actions ──

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action == "save":
            return isinstance(self._overlay, TextEditorOverlay)
        if action in ("cursor_up", "cursor_down"):
            return isinstance(self._overlay, SelectionOverlay)
        if action == "answer":
            return isinstance(self._overlay, ConfirmOverlay)
        return True

    def action_cancel(self) -> None:
        self.app.feed(msg.OverlayCancelled())

    def action_save(self) -> None:
        self._confirm()

    # The highlight stops at either end instead of wrapping.
    def action_cursor_up(self) -> None:
        option_list = self.query_one("#overlay-list", OptionList)
        if option_list.highlighted:
            option_list.action_cursor_up()

    def action_cursor_down(self) -> None:
        option_list = self.query_one("#overlay-list", OptionList)
        if option_list.highlighted is not None and option_list.highlighted < option_list.option_count - 1:
            option_list.action_cursor_down()

    def action_answer(self, answer: bool) -> None:
        self._confirm(answer)
