"""
Plain-text extraction from Jira descriptions.

Jira Cloud stores descriptions as Atlassian Document Format (ADF): a tree of
block nodes (paragraph, heading, bulletList / orderedList of listItem) whose
leaves are ``text`` runs. Jira Server and older fields return plain strings.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from story_testgen.schemas.testcase import UserStory

LIST_NODE_TYPES = ("bulletList", "orderedList")


def _children(node: Mapping[str, Any]) -> List[Any]:
    content = node.get("content")
    return content if isinstance(content, list) else []


def _inline_text(node: Mapping[str, Any]) -> str:
    return "".join(
        child.get("text") or ""
        for child in _children(node)
        if isinstance(child, Mapping) and child.get("type") == "text"
    )


def _list_text(node: Mapping[str, Any]) -> str:
    text = ""
    for item in _children(node):
        if isinstance(item, Mapping) and item.get("type") == "listItem":
            for block in _children(item):
                if isinstance(block, Mapping) and block.get("type") == "paragraph":
                    text += _inline_text(block)
        text += "\n"
    return text


def _blocks_text(blocks: Iterable[Any]) -> str:
    text = ""
    for node in blocks:
        if not isinstance(node, Mapping):
            continue
        node_type = node.get("type")
        if node_type in ("paragraph", "heading"):
            text += _inline_text(node) + "\n"
        elif node_type in LIST_NODE_TYPES:
            text += _list_text(node)
        # anything else (tables, panels, media, ...) is skipped
    return text


def extract_text(description: Any) -> str:
    """
    Return the plain text of a Jira description.

    Strings pass through unchanged, so extraction is idempotent on text that
    was already extracted. ``None`` and unrecognized shapes yield ``""``.
    """
    if not description:
        return ""
    if isinstance(description, str):
        return description
    if isinstance(description, Mapping):
        content = description.get("content")
        if isinstance(content, list):
            return _blocks_text(content).strip()
    return ""


def issue_to_story(issue: Dict[str, Any]) -> UserStory:
    """
    Convert a Jira issue from the search API into a UserStory.

    An empty description falls back to the issue summary so that every story
    carries some text for the prompt.
    """
    fields = issue.get("fields") or {}
    summary = fields.get("summary") or ""
    description = extract_text(fields.get("description")) or summary
    return UserStory(
        id=str(issue.get("id", "")),
        key=str(issue.get("key", "")),
        title=summary,
        description=description,
    )
