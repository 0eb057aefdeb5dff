import re
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import Field, constr, field_validator

from story_testgen.schemas.testcase import CamelModel, UserStory

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class JiraConnectionRequest(CamelModel):
    """Credentials for a Jira Cloud site (email + API token, Basic auth)."""

    base_url: str = Field(..., description="Site URL, e.g. https://acme.atlassian.net")
    email: str
    api_key: str

    @field_validator("base_url")
    @classmethod
    def _valid_base_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid Jira base URL")
        return value

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        if not _EMAIL_RE.match(value):
            raise ValueError("Invalid email")
        return value

    @field_validator("api_key")
    @classmethod
    def _api_key_required(cls, value: str) -> str:
        if not value:
            raise ValueError("API key is required")
        return value


class JiraStoriesRequest(JiraConnectionRequest):
    project_key: Optional[str] = None
    sprint_id: Optional[int] = None


class JiraSprintsRequest(JiraConnectionRequest):
    project_key: constr(min_length=1) = Field(..., description="Project whose board sprints are listed.")


class JiraProject(CamelModel):
    key: str
    name: str


class JiraSprint(CamelModel):
    id: int
    name: str
    state: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class ConnectionTestResponse(CamelModel):
    success: bool
    message: str


class StoriesResponse(CamelModel):
    success: bool = True
    stories: List[UserStory]
    count: int


class ProjectsResponse(CamelModel):
    success: bool = True
    projects: List[JiraProject]
    count: int


class SprintsResponse(CamelModel):
    success: bool = True
    sprints: List[JiraSprint]
    count: int
