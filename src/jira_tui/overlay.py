"""Modal input overlays.

The overlay screen owns the widgets (``Input``, ``TextArea``, ``OptionList``);
these classes hold what the reducer needs from them: the current text, the
highlighted option and the final answer. ``done()`` returns
``(finished, result)`` where a result of ``None`` means the overlay was
cancelled; ``""`` and ``False`` are real answers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

SELECTION_FILTER_LIMIT = 100


class OverlayAction(Enum):
    """What the application does with an overlay's result."""

    TRANSITION = "transition"
    PRIORITY = "priority"
    ASSIGN = "assign"
    EDIT_SUMMARY = "edit_summary"
    EDIT_DESCRIPTION = "edit_description"
    DELETE = "delete"
    CREATE_SUMMARY = "create_summary"
    CREATE_TYPE = "create_type"
    ADD_COMMENT = "add_comment"
    RELATED = "related"


@dataclass(frozen=True)
class SelectionItem:
    """One option. ``desc`` is shown dimmed and also matched by the filter."""

    id: str
    label: str
    desc: str = ""
    display: str = ""
    icon: str = ""


@dataclass
class SelectionOverlay:
    title: str
    items: list[SelectionItem] = field(default_factory=list)
    query: str = ""
    filtered: list[int] = field(default_factory=list)
    cursor: int = 0
    finished: bool = False
    result: SelectionItem | None = None

    def __post_init__(self) -> None:
        self.apply_filter()

    def apply_filter(self) -> None:
        query = self.query.lower()
        self.filtered = [
            i for i, item in enumerate(self.items)
            if not query or query in item.label.lower() or query in item.desc.lower()
        ]
        if self.cursor >= len(self.filtered):
            self.cursor = max(0, len(self.filtered) - 1)

    def set_query(self, query: str) -> None:
        self.query = query[:SELECTION_FILTER_LIMIT]
        self.apply_filter()

    def highlight(self, position: int) -> None:
        """Move the cursor to *position* in the filtered list."""
        if 0 <= position < len(self.filtered):
            self.cursor = position

    def visible(self) -> list[SelectionItem]:
        return [self.items[i] for i in self.filtered]

    def selected(self) -> SelectionItem | None:
        if self.filtered and self.cursor < len(self.filtered):
            return self.items[self.filtered[self.cursor]]
        return None

    def confirm(self, answer: Any = None) -> None:
        # Nothing matching the filter finishes like a cancel.
        self.result = self.selected()
        self.finished = True

    def cancel(self) -> None:
        self.finished = True
        self.result = None

    def done(self) -> tuple[bool, SelectionItem | None]:
        return self.finished, self.result


@dataclass
class TextInputOverlay:
    """Single-line input; ``enter`` confirms."""

    title: str
    value: str = ""
    finished: bool = False
    result: str | None = None

    def edit(self, value: str) -> None:
        self.value = value

    def confirm(self, answer: Any = None) -> None:
        self.finished = True
        self.result = self.value

    def cancel(self) -> None:
        self.finished = True
        self.result = None

    def done(self) -> tuple[bool, str | None]:
        return self.finished, self.result


@dataclass
class TextEditorOverlay(TextInputOverlay):
    """Multi-line text; ``enter`` inserts a newline and ``ctrl+s`` saves."""


@dataclass
class ConfirmOverlay:
    """Yes/no question: ``y`` is True, ``n`` is False, ``escape`` cancels."""

    message: str
    finished: bool = False
    result: bool | None = None

    @property
    def title(self) -> str:
        return self.message

    def confirm(self, answer: Any = None) -> None:
        self.finished = True
        self.result = bool(answer)

    def cancel(self) -> None:
        self.finished = True
        self.result = None

    def done(self) -> tuple[bool, Any]:
        return self.finished, self.result


Overlay = Union[SelectionOverlay, TextInputOverlay, TextEditorOverlay, ConfirmOverlay]
