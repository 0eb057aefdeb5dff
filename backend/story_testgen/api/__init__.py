from fastapi import APIRouter, FastAPI

from story_testgen.core.config import get_settings

from . import export, generation, health, jira


def get_api_router() -> APIRouter:
    """
    Aggregate and return the root API router.
    """
    root_router = APIRouter()

    root_router.include_router(
        health.router,
        prefix="",
        tags=["health"],
    )

    root_router.include_router(
        generation.router,
        prefix="",
        tags=["generation"],
    )

    root_router.include_router(
        jira.router,
        prefix="/jira",
        tags=["jira"],
    )

    root_router.include_router(
        export.router,
        prefix="/export",
        tags=["export"],
    )

    return root_router


def register_routes(app: FastAPI) -> None:
    """
    Attach all API routes to the FastAPI application.
    """
    settings = get_settings()
    api_router = get_api_router()
    app.include_router(api_router, prefix=settings.api_prefix)
