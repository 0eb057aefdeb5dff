from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root (parent of backend/) for .env loading when running from backend/
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.
    """

    # Core app settings
    app_name: str = Field(default="story_testgen")
    environment: str = Field(default="development")  # development | staging | production
    debug: bool = Field(default=False)

    # HTTP server
    api_prefix: str = Field(default="/api")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8081)
    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API from a browser.",
    )

    # Observability
    log_level: str = Field(default="INFO")

    # LLM provider selection ("openai" | "groq" | "gemini" | "ollama")
    default_llm_provider: str = Field(
        default="openai",
        description="LLM provider used for test case generation.",
    )

    # OpenAI
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key. Required when using OpenAI provider.",
    )
    openai_model: str = Field(default="gpt-4o-mini")

    # Groq
    groq_api_key: Optional[str] = Field(
        default=None,
        description="Groq API key. Set STORY_TESTGEN_GROQ_API_KEY in .env.",
    )
    groq_model: str = Field(default="llama-3.3-70b-versatile")

    # Gemini
    gemini_api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key. Set STORY_TESTGEN_GEMINI_API_KEY in .env.",
    )
    gemini_model: str = Field(default="gemini-2.5-flash")

    # Ollama
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL for local Ollama HTTP API.",
    )
    ollama_model: str = Field(default="llama3.2:3b")

    # Generation
    renumber_duplicate_case_ids: bool = Field(
        default=True,
        description="Renumber test cases whose id repeats an earlier case in the same response.",
    )

    # API client
    api_base_url: str = Field(
        default="http://localhost:8081/api",
        description="Backend address used by story_testgen.client.",
    )

    # Jira
    jira_timeout_seconds: float = Field(default=30.0)
    jira_max_results: int = Field(default=50, ge=1, le=100)

    model_config = SettingsConfigDict(
        env_prefix="STORY_TESTGEN_",
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return a cached settings instance for use as a dependency.
    """
    return Settings()
