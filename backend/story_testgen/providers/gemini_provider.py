from __future__ import annotations

import logging
from typing import Any

from story_testgen.core.config import get_settings
from story_testgen.core.errors import ProviderConfigError
from story_testgen.providers.base import LLMCompletion, LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    name = "gemini"

    def __init__(self, client: Any = None) -> None:
        self._settings = get_settings()
        if client is not None:
            self._client = client
            return
        api_key = self._settings.gemini_api_key
        if not api_key:
            raise ProviderConfigError(
                "Gemini API key is required. Set STORY_TESTGEN_GEMINI_API_KEY in .env."
            )
        from google import genai
        self._client = genai.Client(api_key=api_key)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        **kwargs: object,
    ) -> LLMCompletion:
        model_name = self._settings.gemini_model
        config = {
            "system_instruction": system_prompt,
            "temperature": 0.3,
            "max_output_tokens": 16384,
            "response_mime_type": "application/json",
        }
        logger.info("Gemini request: model=%s", model_name)
        response = await self._client.aio.models.generate_content(
            model=model_name,
            contents=user_prompt,
            config=config,
        )
        usage = getattr(response, "usage_metadata", None)
        return LLMCompletion(
            text=(response.text if response and response.text else ""),
            model=getattr(response, "model_version", None) or model_name,
            prompt_tokens=getattr(usage, "prompt_token_count", None),
            completion_tokens=getattr(usage, "candidates_token_count", None),
        )
