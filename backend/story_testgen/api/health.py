from datetime import datetime, timezone

from fastapi import APIRouter

from story_testgen import __version__
from story_testgen.core.config import get_settings


router = APIRouter()


@router.get("/health", summary="Service health check", tags=["health"])
async def health_check() -> dict:
    """
    Report the service version and which LLM provider generation will use.

    Does not call the provider or Jira.
    """
    settings = get_settings()

    return {
        "status": "ok",
        "service": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "llmProvider": settings.default_llm_provider,
        "time": datetime.now(timezone.utc).isoformat(),
    }
