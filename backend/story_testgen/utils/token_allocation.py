"""
Token allocation helpers for LLM providers.

Estimates prompt token usage and computes a max_tokens value for completion
based on model context window, the number of stories in the request, and a
safety buffer.
"""
from __future__ import annotations

import logging
from typing import Optional

import tiktoken

logger = logging.getLogger(__name__)

# Output budget for one story; each further story in a batch adds STORY_MAX_TOKENS more.
STORY_MAX_TOKENS: int = 4000

# Hard ceiling on the completion budget regardless of story count.
MAX_COMPLETION_TOKENS: int = 16384

# Safety buffer reserved (not used for output).
SAFETY_BUFFER_TOKENS: int = 1000

# Maximum fraction of context window allowed for prompt + output (0.7 = 70%).
MAX_CONTEXT_FRACTION: float = 0.70

CONTEXT_WINDOWS: dict[str, int] = {
    "gpt-4o-mini": 128_000,
    "gpt-4o": 128_000,
    "gpt-4-turbo": 128_000,
    "gpt-4": 8_192,
    "gpt-3.5-turbo": 16_385,
    "llama-3.3-70b-versatile": 128_000,
    "gemini-2.5-flash": 1_000_000,
    "llama3.2:3b": 128_000,
}


def get_context_window(model_name: str) -> int:
    """Return context window size for known models. Default 128k."""
    lowered = model_name.lower()
    # longest key first so "gpt-4o-mini" wins over "gpt-4"
    for key in sorted(CONTEXT_WINDOWS, key=len, reverse=True):
        if key in lowered:
            return CONTEXT_WINDOWS[key]
    return 128_000


def estimate_prompt_tokens(prompt: str, model_name: str) -> int:
    """Estimate number of tokens in prompt using tiktoken for the given model."""
    try:
        encoding = tiktoken.encoding_for_model(model_name)
    except KeyError:
        encoding = tiktoken.get_encoding("cl100k_base")
    return len(encoding.encode(prompt))


def calculate_dynamic_max_tokens(
    prompt: str,
    story_count: int = 1,
    model_name: str = "gpt-4o-mini",
    context_window: Optional[int] = None,
    safety_buffer: int = SAFETY_BUFFER_TOKENS,
    max_context_fraction: float = MAX_CONTEXT_FRACTION,
) -> int:
    """
    Compute a safe max_tokens value for completion.

    - Estimates prompt token count with tiktoken.
    - Uses model context window (or lookup by model_name).
    - Reserves a safety buffer (default 1000 tokens).
    - Scales the output cap with the number of stories, up to MAX_COMPLETION_TOKENS.
    - Never exceeds max_context_fraction (default 70%) of the context window.
    """
    prompt_tokens = estimate_prompt_tokens(prompt, model_name)
    model_limit = context_window if context_window is not None else get_context_window(model_name)
    effective_cap = int(model_limit * max_context_fraction)
    available = max(0, effective_cap - prompt_tokens - safety_buffer)

    story_cap = min(STORY_MAX_TOKENS * max(1, story_count), MAX_COMPLETION_TOKENS)
    max_tokens = min(available, story_cap)

    logger.info(
        "Token allocation: prompt_tokens=%s max_tokens=%s model_limit=%s",
        prompt_tokens,
        max_tokens,
        model_limit,
        extra={
            "prompt_tokens": prompt_tokens,
            "max_tokens": max_tokens,
            "model_limit": model_limit,
            "story_count": story_count,
        },
    )
    return max_tokens
