from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

from pydantic import ValidationError

from story_testgen.core.errors import ResponseParseError, format_validation_errors
from story_testgen.schemas.testcase import GenerateResponse


logger = logging.getLogger(__name__)

RAW_PREVIEW_CHARS = 500


def _preview(text: str, limit: int = RAW_PREVIEW_CHARS) -> str:
    return text[:limit] if len(text) > limit else text


def strip_markdown_code_blocks(text: str) -> str:
    """Remove markdown code blocks (```json ... ``` or ``` ... ```)."""
    stripped = text.strip()
    for pattern in (r"^```\s*json\s*\n?", r"^```\s*\n?"):
        stripped = re.sub(pattern, "", stripped, flags=re.IGNORECASE)
    stripped = re.sub(r"\n?```\s*$", "", stripped)
    return stripped.strip()


def extract_json_object(text: str) -> str:
    """
    Return the outermost ``{...}`` span, or the text unchanged if there is none.

    When a ``[`` opens before the first ``{`` the outer value is an array and
    the text is returned unchanged.
    """
    start = text.find("{")
    bracket = text.find("[")
    if bracket != -1 and (start == -1 or bracket < start):
        return text
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return text
    return text[start : end + 1]


def decode_response_text(raw_text: str) -> Dict[str, Any]:
    """
    Decode model output into a JSON object.

    Tolerates markdown fences and prose around the object; anything that is
    not a JSON object afterwards is a ResponseParseError.
    """
    if not raw_text or not raw_text.strip():
        logger.warning("LLM returned empty response")
        raise ResponseParseError("LLM returned empty response; expected JSON object.")

    raw_preview = _preview(raw_text)
    logger.debug("LLM raw response (first %s chars): %s", RAW_PREVIEW_CHARS, raw_preview)

    stripped = strip_markdown_code_blocks(raw_text)
    try:
        parsed = json.loads(stripped)
    except json.JSONDecodeError:
        # only fall back to cutting out an object when the text is not JSON as-is
        cleaned = extract_json_object(stripped)
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            snippet = (cleaned[:300] + "...") if len(cleaned) > 300 else cleaned
            logger.error(
                "JSON parse error: %s; snippet: %s",
                exc,
                snippet,
                extra={"raw_preview": raw_preview},
            )
            raise ResponseParseError(
                f"LLM output is not valid JSON: {exc}. "
                f"Content received (first 300 chars): {snippet!r}",
                raw_preview=raw_preview,
            ) from exc

    if not isinstance(parsed, dict):
        logger.error("Parsed result is not an object: type=%s", type(parsed).__name__)
        raise ResponseParseError(
            "LLM output must be a JSON object with a 'cases' field; "
            f"received type {type(parsed).__name__}.",
            raw_preview=raw_preview,
        )
    return parsed


def interpret_payload(payload: Dict[str, Any], raw_preview: str = "") -> GenerateResponse:
    """
    Validate a decoded reply against the GenerateResponse contract.

    Test case ids are taken as-is; uniqueness is checked by the caller.
    """
    if "cases" not in payload:
        keys_preview = list(payload.keys())[:10]
        logger.error("Parsed object missing 'cases'; keys: %s", keys_preview)
        raise ResponseParseError(
            "LLM output must be a JSON object with a 'cases' field. "
            f"Received keys: {keys_preview!r}.",
            raw_preview=raw_preview,
        )
    try:
        response = GenerateResponse.model_validate(payload)
    except ValidationError as exc:
        message = format_validation_errors(exc.errors())
        logger.error(
            "LLM output failed validation: %s",
            message,
            extra={"raw_preview": raw_preview},
        )
        raise ResponseParseError(
            f"LLM output does not match the response schema: {message}",
            raw_preview=raw_preview,
        ) from exc

    logger.debug("Interpreted %s test cases", len(response.cases))
    return response


def interpret_response(raw_text: str) -> GenerateResponse:
    """Decode and validate raw model text in one step."""
    payload = decode_response_text(raw_text)
    return interpret_payload(payload, raw_preview=_preview(raw_text))
