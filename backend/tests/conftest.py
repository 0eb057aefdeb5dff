import json
from typing import Callable, List, Optional

import httpx
import pytest

from story_testgen.providers.base import LLMCompletion, LLMProvider
from story_testgen.services.jira_service import JiraService


class FakeProvider(LLMProvider):
    """Returns canned text and records the prompts it was given."""

    name = "fake"

    def __init__(
        self,
        text: str,
        *,
        model: Optional[str] = "fake-model",
        prompt_tokens: Optional[int] = 120,
        completion_tokens: Optional[int] = 340,
    ) -> None:
        self.text = text
        self.model = model
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.calls: List[dict] = []

    async def complete(self, system_prompt: str, user_prompt: str, **kwargs: object) -> LLMCompletion:
        self.calls.append({"system": system_prompt, "user": user_prompt, **kwargs})
        return LLMCompletion(
            text=self.text,
            model=self.model,
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
        )


def make_case(case_id: str = "TC-001", **overrides) -> dict:
    case = {
        "id": case_id,
        "title": "Login with valid credentials",
        "steps": ["Open the login page", "Enter valid email", "Click login button"],
        "testData": "user@example.com / Secret123",
        "expectedResult": "User lands on the dashboard",
        "category": "Positive",
    }
    case.update(overrides)
    return case


def model_reply(cases: List[dict], **extra) -> str:
    return json.dumps({"cases": cases, "promptTokens": 0, "completionTokens": 0, **extra})


@pytest.fixture
def fake_provider_factory() -> Callable[..., FakeProvider]:
    def _factory(text: str, **kwargs) -> FakeProvider:
        return FakeProvider(text, **kwargs)

    return _factory


def jira_factory(handler: Callable[[httpx.Request], httpx.Response]):
    """Build JiraService instances whose HTTP traffic goes to ``handler``."""

    def _make(base_url: str, email: str, api_key: str) -> JiraService:
        client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            auth=httpx.BasicAuth(email, api_key),
            transport=httpx.MockTransport(handler),
        )
        return JiraService(base_url, email, api_key, client=client)

    return _make
