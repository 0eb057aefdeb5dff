"""
Jira Cloud REST client.

Handles only HTTP concerns and shape conversion; route handlers decide how
failures map to responses.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from story_testgen.core.config import get_settings
from story_testgen.core.errors import JiraApiError, UpstreamError
from story_testgen.core.logging_config import mask_secret
from story_testgen.schemas.jira import JiraProject, JiraSprint
from story_testgen.schemas.testcase import UserStory
from story_testgen.utils.adf import issue_to_story

logger = logging.getLogger(__name__)

API_BASE = "/rest/api/3"
AGILE_BASE = "/rest/agile/1.0"
OPEN_SPRINT_STATES = ("active", "future")
STORY_ISSUE_TYPES = "type in (Story, Task)"


def build_stories_jql(project_key: Optional[str] = None, sprint_id: Optional[int] = None) -> str:
    clauses = []
    if project_key:
        clauses.append(f"project = {project_key}")
    if sprint_id is not None:
        clauses.append(f"sprint = {sprint_id}")
    clauses.append(STORY_ISSUE_TYPES)
    return " AND ".join(clauses) + " ORDER BY created DESC"


def filter_open_sprints(raw_sprints: List[Dict[str, Any]]) -> List[JiraSprint]:
    """Keep active and future sprints, in the order Jira returned them."""
    sprints: List[JiraSprint] = []
    for raw in raw_sprints:
        state = str(raw.get("state") or "").lower()
        if state not in OPEN_SPRINT_STATES:
            continue
        sprints.append(
            JiraSprint(
                id=raw["id"],
                name=raw.get("name") or "",
                state=state,
                start_date=raw.get("startDate"),
                end_date=raw.get("endDate"),
            )
        )
    return sprints


class JiraService:
    """
    Async client for one Jira site and one set of credentials.

    Use as an async context manager so the underlying connection pool is
    closed when the request is done.
    """

    def __init__(
        self,
        base_url: str,
        email: str,
        api_key: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = get_settings()
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            auth=httpx.BasicAuth(email, api_key),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=self._settings.jira_timeout_seconds,
        )
        logger.info(
            "JiraService initialized: base_url=%s email=%s api_key=%s",
            self.base_url,
            email,
            mask_secret(api_key),
        )

    async def __aenter__(self) -> "JiraService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise UpstreamError(f"Jira request failed: {exc}") from exc
        if response.is_error:
            logger.error("Jira API error: %s %s -> %s", method, path, response.status_code)
            raise JiraApiError(
                f"Jira API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        return response.json()

    async def test_connection(self) -> bool:
        """Return True when the credentials can read ``/myself``."""
        try:
            user = await self._request("GET", f"{API_BASE}/myself")
        except UpstreamError as exc:
            logger.warning("Jira connection test failed: %s", exc)
            return False
        logger.info("Jira connection successful; logged in as %s", user.get("displayName"))
        return True

    async def get_user_stories(
        self,
        project_key: Optional[str] = None,
        sprint_id: Optional[int] = None,
    ) -> List[UserStory]:
        jql = build_stories_jql(project_key, sprint_id)
        logger.info("Fetching Jira stories", extra={"jql": jql})
        data = await self._request(
            "POST",
            f"{API_BASE}/search/jql",
            json={
                "jql": jql,
                "maxResults": self._settings.jira_max_results,
                "fields": ["summary", "description"],
            },
        )
        issues = data.get("issues") or []
        stories = [issue_to_story(issue) for issue in issues]
        logger.info("Fetched %d Jira stories", len(stories))
        for idx, story in enumerate(stories, start=1):
            logger.debug("  %d. [%s] %s", idx, story.key, story.title)
        return stories

    async def get_projects(self) -> List[JiraProject]:
        data = await self._request(
            "GET",
            f"{API_BASE}/project/search",
            params={"maxResults": 100},
        )
        projects = [
            JiraProject(key=p.get("key", ""), name=p.get("name", ""))
            for p in data.get("values") or []
        ]
        logger.info("Fetched %d Jira projects", len(projects))
        return projects

    async def get_sprints(self, project_key: str) -> List[JiraSprint]:
        """
        Return the active and future sprints of the project's first board.

        Sprints are optional enrichment: any failure is logged and yields [].
        """
        try:
            boards = await self._request(
                "GET",
                f"{AGILE_BASE}/board",
                params={"projectKeyOrId": project_key},
            )
            board_values = boards.get("values") or []
            if not board_values:
                logger.info("No agile board found for project %s", project_key)
                return []
            board_id = board_values[0]["id"]
            data = await self._request("GET", f"{AGILE_BASE}/board/{board_id}/sprint")
            sprints = filter_open_sprints(data.get("values") or [])
        except (UpstreamError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Could not fetch sprints for project %s: %s", project_key, exc)
            return []
        logger.info("Fetched %d open sprints for project %s", len(sprints), project_key)
        return sprints
