from __future__ import annotations

from story_testgen.core.config import get_settings
from story_testgen.core.errors import ProviderConfigError
from story_testgen.providers.base import LLMProvider
from story_testgen.providers.gemini_provider import GeminiProvider
from story_testgen.providers.groq_provider import GroqProvider
from story_testgen.providers.ollama_provider import OllamaProvider
from story_testgen.providers.openai_provider import OpenAIProvider

PROVIDERS: dict[str, type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "groq": GroqProvider,
    "gemini": GeminiProvider,
    "ollama": OllamaProvider,
}


def get_provider(provider_name: str | None = None) -> LLMProvider:
    """Return the LLM provider for the given name (default from settings)."""
    settings = get_settings()
    name = (provider_name or settings.default_llm_provider).strip().lower()

    provider_cls = PROVIDERS.get(name)
    if provider_cls is None:
        raise ProviderConfigError(
            f"Unsupported LLM provider: {name!r}. "
            "Use 'openai', 'groq', 'gemini', or 'ollama'."
        )
    return provider_cls()
