"""
Exception types shared by services and route handlers.

Route handlers translate these into HTTP responses; services raise them and
never build HTTP responses themselves.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional


class StoryTestGenError(Exception):
    """Base class for all application errors."""


class ProviderConfigError(StoryTestGenError):
    """The LLM provider is unknown or missing required configuration."""


class ResponseParseError(StoryTestGenError):
    """The model reply is not a JSON object matching the response contract."""

    def __init__(self, message: str, raw_preview: str = "") -> None:
        super().__init__(message)
        self.raw_preview = raw_preview


class UpstreamError(StoryTestGenError):
    """An outbound HTTP call failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class JiraApiError(UpstreamError):
    """Jira answered with a non-2xx status."""


class JiraAuthError(StoryTestGenError):
    """Jira rejected the supplied credentials."""


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """
    Render pydantic error dicts as one human-readable message.

    Each entry becomes ``<dotted.field.path>: <message>``; entries are joined
    with ``; `` so that every violated constraint is reported.
    """
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc) or "body"
        msg = str(err.get("msg", "invalid value"))
        # pydantic prefixes custom ValueError messages with "Value error, "
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{field}: {msg}")
    return "; ".join(parts)


class ApiError(StoryTestGenError):
    """Raised by the API client; the message is the server's ``error`` text."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
