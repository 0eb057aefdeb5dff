from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LLMCompletion:
    """Raw model output plus the usage the provider reported, if any."""

    text: str
    model: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None


class LLMProvider(ABC):
    """
    Interface for LLM providers used to generate test cases.

    Implementations (OpenAI, Groq, Gemini, Ollama) are responsible for the
    HTTP call and for returning the raw model output. They do not retry.
    """

    name: str = "llm"

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        **kwargs: object,
    ) -> LLMCompletion:
        """
        Send the system and user instructions and return the raw reply.

        Callers are responsible for parsing and validating the output
        (a JSON object with a ``cases`` array). Optional kwargs (e.g.
        story_count) may be used by providers for token allocation.
        """
        ...
