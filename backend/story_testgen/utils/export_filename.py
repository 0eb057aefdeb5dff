"""
Download filenames for exported test cases.

Never use raw user input in filenames.
"""
from __future__ import annotations

import re
from urllib.parse import quote

MAX_FILENAME_STEM_LENGTH: int = 100
DEFAULT_STEM: str = "export"


def sanitize_filename(name: str) -> str:
    """
    Remove characters that are unsafe in filenames, turn whitespace runs into
    underscores, and truncate to MAX_FILENAME_STEM_LENGTH.
    """
    if not name or not isinstance(name, str):
        return ""
    s = re.sub(r'[/\\?%*:|"<>]', "", name)
    s = re.sub(r"\s+", "_", s)
    return s[:MAX_FILENAME_STEM_LENGTH]


def export_filename(story_title: str, extension: str) -> str:
    """``<sanitized title>_test_cases.<ext>``, e.g. ``Login_Page_test_cases.csv``."""
    stem = sanitize_filename(story_title) or DEFAULT_STEM
    return f"{stem}_test_cases.{extension.lstrip('.')}"


def ascii_export_filename(story_title: str, extension: str) -> str:
    """ASCII-only variant of export_filename for clients that ignore ``filename*``."""
    ascii_title = (story_title or "").encode("ascii", "ignore").decode("ascii")
    stem = sanitize_filename(ascii_title).strip("_") or DEFAULT_STEM
    return f"{stem}_test_cases.{extension.lstrip('.')}"


def content_disposition(story_title: str, extension: str) -> str:
    """
    ``Content-Disposition`` value for an exported file.

    HTTP header values are latin-1, so a non-ASCII name travels in an
    RFC 5987 ``filename*`` parameter next to an ASCII ``filename`` fallback.
    """
    filename = export_filename(story_title, extension)
    if filename.isascii():
        return f'attachment; filename="{filename}"'
    fallback = ascii_export_filename(story_title, extension)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
