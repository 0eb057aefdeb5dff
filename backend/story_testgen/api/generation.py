import logging

from fastapi import APIRouter, Depends, HTTPException, status

from story_testgen.core.errors import (
    ProviderConfigError,
    ResponseParseError,
    UpstreamError,
)
from story_testgen.schemas.testcase import (
    ErrorResponse,
    GenerateMultiRequest,
    GenerateRequest,
    GenerateResponse,
)
from story_testgen.services.testcase_service import TestCaseService


logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def get_service() -> TestCaseService:
    return TestCaseService()


async def _generate(coro) -> GenerateResponse:
    """Await a generation call and translate failures into HTTP errors."""
    try:
        return await coro
    except ResponseParseError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"AI returned invalid structure: {exc}",
        ) from exc
    except ProviderConfigError as exc:
        logger.error("LLM provider misconfigured: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    except UpstreamError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    except Exception as exc:
        logger.exception("Test case generation failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate test cases from AI: {exc}",
        ) from exc


@router.post(
    "/generate-tests",
    response_model=GenerateResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Generate test cases for one user story",
)
async def generate_tests(
    payload: GenerateRequest,
    service: TestCaseService = Depends(get_service),
) -> GenerateResponse:
    return await _generate(service.generate(payload))


@router.post(
    "/generate-multi-tests",
    response_model=GenerateResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Generate test cases for several tracker stories in one call",
)
async def generate_multi_tests(
    payload: GenerateMultiRequest,
    service: TestCaseService = Depends(get_service),
) -> GenerateResponse:
    """
    Every story is covered; each case carries its source story title in
    ``storyName`` and ids are unique across the combined set.
    """
    return await _generate(service.generate_multi(payload))
