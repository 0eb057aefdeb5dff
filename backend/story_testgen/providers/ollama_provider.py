from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

from story_testgen.core.config import get_settings
from story_testgen.core.errors import UpstreamError
from story_testgen.providers.base import LLMCompletion, LLMProvider

logger = logging.getLogger(__name__)


class OllamaProvider(LLMProvider):
    """LLM provider that calls a local Ollama HTTP API."""

    name = "ollama"

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._settings = get_settings()
        # Generation on local models can take minutes; only connecting is bounded.
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.ollama_base_url,
            timeout=httpx.Timeout(None, connect=10.0),
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        **kwargs: object,
    ) -> LLMCompletion:
        model_name = self._settings.ollama_model
        payload: Dict[str, Any] = {
            "model": model_name,
            "system": system_prompt,
            "prompt": user_prompt,
            "stream": False,
            "format": "json",
            "options": {"temperature": 0.1, "top_p": 0.9, "num_predict": 16000},
        }
        logger.info("Requesting test case generation from Ollama", extra={"model": model_name})
        try:
            response = await self._client.post("/api/generate", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                f"Ollama API error: {exc.response.status_code} - {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise UpstreamError(f"Ollama request failed: {exc}") from exc

        data: Dict[str, Any] = response.json()
        raw_output = data.get("response")
        return LLMCompletion(
            text=raw_output if isinstance(raw_output, str) else response.text,
            model=data.get("model") or model_name,
            prompt_tokens=data.get("prompt_eval_count"),
            completion_tokens=data.get("eval_count"),
        )
