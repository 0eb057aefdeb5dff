"""
Async client for the HTTP API.

Mirrors what the browser UI does: one call per endpoint, the server's
``error`` text surfaced verbatim, and the Jira connection persisted through
a ConnectionStore once it has been validated.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from story_testgen.client.connection_store import (
    ConnectionStore,
    JiraConnection,
    MemoryConnectionStore,
    clear_connection,
    load_connection,
    save_connection,
)
from story_testgen.core.config import get_settings
from story_testgen.core.errors import ApiError
from story_testgen.schemas.jira import JiraProject, JiraSprint
from story_testgen.schemas.testcase import (
    GenerateMultiRequest,
    GenerateRequest,
    GenerateResponse,
    UserStory,
)

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS: float = 30.0


class StoryTestClient:
    """
    Thin wrapper over the backend endpoints.

    Generation calls carry no client-side timeout; connecting to Jira is
    bounded by CONNECT_TIMEOUT_SECONDS.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: httpx.AsyncClient | None = None,
        store: ConnectionStore | None = None,
    ) -> None:
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(None, connect=10.0),
        )
        self.store = store or MemoryConnectionStore()

    async def __aenter__(self) -> "StoryTestClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(path, json=body)
        except httpx.TransportError as exc:
            raise ApiError(
                f"Unable to reach backend at {self.base_url}. Start the backend or "
                "set STORY_TESTGEN_API_BASE_URL to the correct URL."
            ) from exc

        if response.is_error:
            try:
                data = response.json()
            except ValueError:
                data = {"error": "Unknown error"}
            message = data.get("error") if isinstance(data, dict) else None
            raise ApiError(
                message or f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    # Generation

    async def generate_tests(self, request: GenerateRequest) -> GenerateResponse:
        data = await self._post("/generate-tests", request.to_wire())
        return GenerateResponse.model_validate(data)

    async def generate_multi_tests(self, request: GenerateMultiRequest) -> GenerateResponse:
        data = await self._post("/generate-multi-tests", request.to_wire())
        return GenerateResponse.model_validate(data)

    # Jira

    @staticmethod
    def _credentials(connection: JiraConnection) -> Dict[str, Any]:
        return {
            "baseUrl": connection.base_url,
            "email": connection.email,
            "apiKey": connection.api_key,
        }

    async def test_jira_connection(self, connection: JiraConnection) -> bool:
        data = await self._post("/jira/test-connection", self._credentials(connection))
        return data.get("success") is True

    async def fetch_jira_stories(
        self,
        connection: JiraConnection,
        sprint_id: Optional[int] = None,
    ) -> List[UserStory]:
        body = self._credentials(connection)
        if connection.project_key:
            body["projectKey"] = connection.project_key
        if sprint_id is not None:
            body["sprintId"] = sprint_id
        data = await self._post("/jira/stories", body)
        if not data.get("success"):
            raise ApiError(data.get("error") or "Failed to fetch Jira stories")
        return [UserStory.model_validate(s) for s in data.get("stories") or []]

    async def fetch_jira_projects(self, connection: JiraConnection) -> List[JiraProject]:
        data = await self._post("/jira/projects", self._credentials(connection))
        if not data.get("success"):
            raise ApiError(data.get("error") or "Failed to fetch Jira projects")
        return [JiraProject.model_validate(p) for p in data.get("projects") or []]

    async def fetch_jira_sprints(
        self,
        connection: JiraConnection,
        project_key: str,
    ) -> List[JiraSprint]:
        body = {**self._credentials(connection), "projectKey": project_key}
        data = await self._post("/jira/sprints", body)
        if not data.get("success"):
            raise ApiError(data.get("error") or "Failed to fetch Jira sprints")
        return [JiraSprint.model_validate(s) for s in data.get("sprints") or []]

    # Saved connection

    def saved_connection(self) -> Optional[JiraConnection]:
        return load_connection(self.store)

    async def connect_jira(
        self,
        connection: JiraConnection,
        timeout: float = CONNECT_TIMEOUT_SECONDS,
    ) -> List[UserStory]:
        """
        Validate credentials by fetching stories, then save the connection.

        Nothing is saved when the fetch fails or exceeds ``timeout`` seconds.
        """
        try:
            stories = await asyncio.wait_for(self.fetch_jira_stories(connection), timeout)
        except asyncio.TimeoutError as exc:
            raise ApiError(f"Connection timed out after {timeout:g} seconds") from exc
        save_connection(self.store, connection)
        logger.info("Jira connection saved (%d stories available)", len(stories))
        return stories

    def disconnect_jira(self) -> None:
        clear_connection(self.store)
