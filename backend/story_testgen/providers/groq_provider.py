from __future__ import annotations

import logging
from typing import Any

from story_testgen.core.config import get_settings
from story_testgen.core.errors import ProviderConfigError
from story_testgen.providers.base import LLMCompletion, LLMProvider

logger = logging.getLogger(__name__)


class GroqProvider(LLMProvider):
    """LLM provider that calls the Groq API (groq SDK)."""

    name = "groq"

    def __init__(self, client: Any = None) -> None:
        self._settings = get_settings()
        if client is not None:
            self._client = client
            return
        api_key = self._settings.groq_api_key
        if not api_key:
            raise ProviderConfigError(
                "Groq API key is required when using Groq provider. "
                "Set STORY_TESTGEN_GROQ_API_KEY in .env."
            )
        from groq import AsyncGroq
        self._client = AsyncGroq(api_key=api_key)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        **kwargs: object,
    ) -> LLMCompletion:
        model_name = self._settings.groq_model
        max_tokens = 16384
        logger.info("Groq request: model=%s max_tokens=%s", model_name, max_tokens)
        response = await self._client.chat.completions.create(
            model=model_name,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.3,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content if response.choices else None
        usage = getattr(response, "usage", None)
        return LLMCompletion(
            text=content or "",
            model=getattr(response, "model", None) or model_name,
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
        )
