from __future__ import annotations

import logging
from typing import Optional

from openai import AsyncOpenAI

from story_testgen.core.config import get_settings
from story_testgen.core.errors import ProviderConfigError
from story_testgen.providers.base import LLMCompletion, LLMProvider
from story_testgen.utils.token_allocation import calculate_dynamic_max_tokens


logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """
    LLM provider that calls the OpenAI Chat Completions API.

    Requests JSON mode so the reply is a single JSON object. Uses dynamic
    max_tokens based on prompt size, story count, and model context window.
    """

    name = "openai"

    def __init__(self, client: Optional[AsyncOpenAI] = None) -> None:
        self._settings = get_settings()
        if client is not None:
            self._client = client
        else:
            api_key = self._settings.openai_api_key
            if not api_key:
                raise ProviderConfigError(
                    "OpenAI API key is required when using OpenAI provider. "
                    "Set STORY_TESTGEN_OPENAI_API_KEY in environment or .env."
                )
            self._client = AsyncOpenAI(api_key=api_key)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        **kwargs: object,
    ) -> LLMCompletion:
        story_count = kwargs.get("story_count") if isinstance(kwargs.get("story_count"), int) else 1
        model_name = self._settings.openai_model
        max_tokens = calculate_dynamic_max_tokens(
            prompt=system_prompt + "\n" + user_prompt,
            story_count=story_count,
            model_name=model_name,
        )

        logger.info("OpenAI request: model=%s max_tokens=%s", model_name, max_tokens)

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

        # OpenAI may echo or normalize the model name.
        response_model = getattr(response, "model", None) or model_name
        usage = getattr(response, "usage", None)
        logger.info(
            "OpenAI response: model_used=%s usage=%s",
            response_model,
            usage,
        )

        content = response.choices[0].message.content if response.choices else None
        return LLMCompletion(
            text=content or "",
            model=response_model,
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
        )
