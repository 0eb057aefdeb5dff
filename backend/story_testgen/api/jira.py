import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, status

from story_testgen.schemas.jira import (
    ConnectionTestResponse,
    JiraConnectionRequest,
    JiraSprintsRequest,
    JiraStoriesRequest,
    ProjectsResponse,
    SprintsResponse,
    StoriesResponse,
)
from story_testgen.services.jira_service import JiraService


logger = logging.getLogger(__name__)

router = APIRouter()

JiraServiceFactory = Callable[[str, str, str], JiraService]

AUTH_FAILED_MESSAGE = "Failed to authenticate with Jira. Please verify your credentials."


def get_jira_service_factory() -> JiraServiceFactory:
    """Return the callable used to build a JiraService per request."""
    return JiraService


def _error(status_code: int, message: str, list_field: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": message, list_field: [], "success": False},
    )


@router.post(
    "/test-connection",
    response_model=ConnectionTestResponse,
    summary="Check Jira credentials",
)
async def test_connection(
    payload: JiraConnectionRequest,
    make_service: JiraServiceFactory = Depends(get_jira_service_factory),
) -> ConnectionTestResponse:
    logger.info("Testing Jira connection to %s", payload.base_url)
    try:
        async with make_service(payload.base_url, payload.email, payload.api_key) as jira:
            connected = await jira.test_connection()
    except Exception as exc:
        logger.exception("Error testing Jira connection")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": f"Connection failed: {exc}", "success": False},
        ) from exc

    return ConnectionTestResponse(
        success=connected,
        message="Connected to Jira successfully" if connected else "Failed to connect to Jira",
    )


@router.post(
    "/stories",
    response_model=StoriesResponse,
    response_model_by_alias=True,
    summary="Fetch stories and tasks from Jira",
)
async def fetch_stories(
    payload: JiraStoriesRequest,
    make_service: JiraServiceFactory = Depends(get_jira_service_factory),
) -> StoriesResponse:
    """
    Credentials are verified first; a rejected login answers 401 rather than
    a generic failure.
    """
    async with make_service(payload.base_url, payload.email, payload.api_key) as jira:
        if not await jira.test_connection():
            logger.error("Failed to authenticate with Jira at %s", payload.base_url)
            raise _error(status.HTTP_401_UNAUTHORIZED, AUTH_FAILED_MESSAGE, "stories")
        try:
            stories = await jira.get_user_stories(payload.project_key, payload.sprint_id)
        except Exception as exc:
            logger.error("Error fetching Jira stories: %s", exc)
            raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "stories") from exc

    return StoriesResponse(stories=stories, count=len(stories))


@router.post(
    "/projects",
    response_model=ProjectsResponse,
    summary="List Jira projects visible to the user",
)
async def fetch_projects(
    payload: JiraConnectionRequest,
    make_service: JiraServiceFactory = Depends(get_jira_service_factory),
) -> ProjectsResponse:
    async with make_service(payload.base_url, payload.email, payload.api_key) as jira:
        try:
            projects = await jira.get_projects()
        except Exception as exc:
            logger.error("Error fetching Jira projects: %s", exc)
            raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "projects") from exc

    return ProjectsResponse(projects=projects, count=len(projects))


@router.post(
    "/sprints",
    response_model=SprintsResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    summary="List active and future sprints of a project",
)
async def fetch_sprints(
    payload: JiraSprintsRequest,
    make_service: JiraServiceFactory = Depends(get_jira_service_factory),
) -> SprintsResponse:
    """
    Authentication failure is a 401. Once authenticated, a failure to read
    boards or sprints yields an empty list.
    """
    async with make_service(payload.base_url, payload.email, payload.api_key) as jira:
        if not await jira.test_connection():
            logger.error("Failed to authenticate with Jira at %s", payload.base_url)
            raise _error(status.HTTP_401_UNAUTHORIZED, AUTH_FAILED_MESSAGE, "sprints")
        sprints = await jira.get_sprints(payload.project_key)

    return SprintsResponse(sprints=sprints, count=len(sprints))
