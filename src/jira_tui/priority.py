"""Priority icons and colors."""

from __future__ import annotations

from typing import NamedTuple

from rich.text import Text


class PriorityDef(NamedTuple):
    icon: str
    color: str


# Keys match priority names as returned by Jira (case-sensitive).
PRIORITY_MAP: dict[str, PriorityDef] = {
    "Blocked": PriorityDef("⊘", "#FF5630"),
    "Blocker": PriorityDef("⊘", "#FF5630"),
    "Critical": PriorityDef("↑↑", "#FF5630"),
    "Highest": PriorityDef("↑↑", "#FF5630"),
    "High": PriorityDef("↑", "#FF7452"),
    "Medium": PriorityDef("≡", "#FFAB00"),
    "Medium-Rare": PriorityDef("↓", "#6B778C"),
    "Low": PriorityDef("↓↓", "#2684FF"),
    "Lowest": PriorityDef("↓↓", "#2684FF"),
}


def priority_icon(name: str) -> str:
    """Plain icon for a priority name, or the name itself if unknown."""
    definition = PRIORITY_MAP.get(name)
    return definition.icon if definition else name


def priority_color(name: str) -> str | None:
    definition = PRIORITY_MAP.get(name)
    return definition.color if definition else None


def priority_label(name: str) -> Text:
    """Colored "icon name" label used in the detail view."""
    definition = PRIORITY_MAP.get(name)
    if definition is None:
        return Text(name)
    text = Text()
    text.append(definition.icon, style=definition.color)
    text.append(f" {name}")
    return text
