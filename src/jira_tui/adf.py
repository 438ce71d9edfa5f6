"""Conversion between Atlassian Document Format (ADF) and plain text."""

from __future__ import annotations

from typing import Any

_BLOCK_NODES = frozenset({
    "paragraph",
    "heading",
    "blockquote",
    "codeBlock",
    "bulletList",
    "orderedList",
    "listItem",
    "rule",
    "mediaSingle",
    "mediaGroup",
    "decisionList",
    "taskList",
})


def extract_adf_text(doc: Any) -> str:
    """Extract plain text from an ADF document.

    Text nodes are concatenated, ``hardBreak`` becomes a newline, and a
    newline follows every block-level node. Plain strings pass through.
    """
    if doc is None:
        return ""
    if isinstance(doc, str):
        return doc
    if not isinstance(doc, dict):
        return str(doc)
    parts: list[str] = []
    _extract_node(parts, doc)
    return "".join(parts).strip()


def _extract_node(parts: list[str], node: dict) -> None:
    node_type = node.get("type")
    if node_type == "text":
        text = node.get("text")
        if isinstance(text, str):
            parts.append(text)
        return
    if node_type == "hardBreak":
        parts.append("\n")
        return

    content = node.get("content")
    if not isinstance(content, list):
        return
    for child in content:
        if isinstance(child, dict):
            _extract_node(parts, child)

    if node_type in _BLOCK_NODES:
        parts.append("\n")


def make_adf_document(text: str) -> dict[str, Any]:
    """Wrap plain text in a minimal ADF document, one paragraph per blank-line block."""
    content: list[dict[str, Any]] = []
    for paragraph in text.split("\n\n"):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        content.append({
            "type": "paragraph",
            "content": [{"type": "text", "text": paragraph}],
        })
    return {"version": 1, "type": "doc", "content": content}
