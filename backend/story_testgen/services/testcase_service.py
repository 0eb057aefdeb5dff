from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional

from story_testgen.core.config import get_settings
from story_testgen.providers.base import LLMCompletion, LLMProvider
from story_testgen.providers.factory import get_provider
from story_testgen.schemas.testcase import (
    GenerateMultiRequest,
    GenerateRequest,
    GenerateResponse,
    TestCase,
)
from story_testgen.services.response_interpreter import (
    decode_response_text,
    interpret_payload,
)
from story_testgen.utils.prompt_builder import (
    SYSTEM_PROMPT,
    build_multi_prompt,
    build_prompt,
)


logger = logging.getLogger(__name__)

CASE_ID_PREFIX = "TC-"
CASE_ID_WIDTH = 3
_CASE_ID_RE = re.compile(r"^TC-(\d+)$", re.IGNORECASE)


def format_case_id(number: int) -> str:
    return f"{CASE_ID_PREFIX}{number:0{CASE_ID_WIDTH}d}"


def ensure_unique_case_ids(cases: List[TestCase]) -> List[TestCase]:
    """
    Return cases whose ids are pairwise distinct.

    The first occurrence of an id keeps it; each later duplicate is given the
    next ``TC-NNN`` number above every id already in use. Cases are copied,
    never mutated, and their order is preserved.
    """
    seen: set[str] = set()
    used_numbers = [
        int(m.group(1)) for m in (_CASE_ID_RE.match(tc.id) for tc in cases) if m
    ]
    next_number = max(used_numbers, default=0) + 1
    all_ids = {tc.id for tc in cases}

    result: List[TestCase] = []
    renamed: List[str] = []
    for tc in cases:
        if tc.id not in seen:
            seen.add(tc.id)
            result.append(tc)
            continue
        new_id = format_case_id(next_number)
        while new_id in all_ids or new_id in seen:
            next_number += 1
            new_id = format_case_id(next_number)
        next_number += 1
        seen.add(new_id)
        renamed.append(f"{tc.id}->{new_id}")
        result.append(tc.model_copy(update={"id": new_id}))

    if renamed:
        logger.warning(
            "Renumbered %d duplicate test case ids: %s",
            len(renamed),
            ", ".join(renamed),
        )
    return result


class TestCaseService:
    """
    Application service that turns stories into generated test cases.

    Business logic is concentrated here to keep route handlers thin. LLM
    calls go through the provider abstraction; one call per request, no
    retries.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        provider_factory: Callable[[], LLMProvider] = get_provider,
        renumber_duplicate_ids: Optional[bool] = None,
    ) -> None:
        self._provider_factory = provider_factory
        if renumber_duplicate_ids is None:
            renumber_duplicate_ids = get_settings().renumber_duplicate_case_ids
        self._renumber_duplicate_ids = renumber_duplicate_ids

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        logger.info(
            "Generating test cases for single story",
            extra={"story_title": request.story_title},
        )
        return await self._run(build_prompt(request), story_count=1)

    async def generate_multi(self, request: GenerateMultiRequest) -> GenerateResponse:
        logger.info(
            "Generating test cases for %d stories",
            len(request.stories),
            extra={"story_keys": [s.key for s in request.stories]},
        )
        prompt = build_multi_prompt(request.stories, request.additional_info)
        return await self._run(prompt, story_count=len(request.stories))

    async def _run(self, user_prompt: str, *, story_count: int) -> GenerateResponse:
        provider = self._provider_factory()
        completion = await provider.complete(
            SYSTEM_PROMPT,
            user_prompt,
            story_count=story_count,
        )
        response = self._interpret(completion)
        if self._renumber_duplicate_ids:
            response = response.model_copy(
                update={"cases": ensure_unique_case_ids(response.cases)}
            )
        logger.info(
            "Generated %d test cases",
            len(response.cases),
            extra={
                "provider": provider.name,
                "model": response.model,
                "prompt_tokens": response.prompt_tokens,
                "completion_tokens": response.completion_tokens,
            },
        )
        return response

    @staticmethod
    def _interpret(completion: LLMCompletion) -> GenerateResponse:
        """
        Validate the model reply, preferring provider-reported usage.

        The model is asked to echo ``model`` / token counts but cannot know
        them; provider usage overrides whatever the reply claims.
        """
        payload = decode_response_text(completion.text)
        if completion.model:
            payload["model"] = completion.model
        if completion.prompt_tokens is not None:
            payload["promptTokens"] = completion.prompt_tokens
        if completion.completion_tokens is not None:
            payload["completionTokens"] = completion.completion_tokens
        return interpret_payload(payload, raw_preview=completion.text[:500])
