import asyncio
import json

import httpx
import pytest
from httpx import ASGITransport

from story_testgen.api.generation import get_service
from story_testgen.api.jira import get_jira_service_factory
from story_testgen.client.api_client import StoryTestClient
from story_testgen.client.connection_store import (
    CONNECTION_KEY,
    JiraConnection,
    JsonFileConnectionStore,
    MemoryConnectionStore,
    load_connection,
    save_connection,
)
from story_testgen.core.errors import ApiError
from story_testgen.main import create_app
from story_testgen.schemas.testcase import GenerateRequest
from story_testgen.services.testcase_service import TestCaseService

from conftest import FakeProvider, jira_factory, make_case, model_reply

CONNECTION = JiraConnection(
    base_url="https://acme.atlassian.net",
    email="qa@acme.io",
    api_key="token-123",
)


class TestConnectionStore:
    def test_round_trip(self):
        store = MemoryConnectionStore()
        save_connection(store, CONNECTION)
        assert json.loads(store.read(CONNECTION_KEY))["baseUrl"] == CONNECTION.base_url
        assert load_connection(store) == CONNECTION

    def test_nothing_saved_means_not_connected(self):
        assert load_connection(MemoryConnectionStore()) is None

    @pytest.mark.parametrize(
        "raw",
        ["{not json", json.dumps({"baseUrl": "https://x", "email": "a@b.c"}), json.dumps([1, 2])],
    )
    def test_corrupted_entry_is_discarded(self, raw):
        store = MemoryConnectionStore({CONNECTION_KEY: raw})
        assert load_connection(store) is None
        assert store.read(CONNECTION_KEY) is None

    def test_json_file_store(self, tmp_path):
        path = tmp_path / "state" / "connection.json"
        store = JsonFileConnectionStore(path)
        save_connection(store, CONNECTION)
        assert load_connection(JsonFileConnectionStore(path)) == CONNECTION
        store.clear(CONNECTION_KEY)
        assert load_connection(store) is None

    def test_unreadable_json_file_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "connection.json"
        path.write_text("garbage", encoding="utf-8")
        store = JsonFileConnectionStore(path)
        assert store.read(CONNECTION_KEY) is None
        store.write("other", "value")
        assert json.loads(path.read_text(encoding="utf-8")) == {"other": "value"}


def _client_for(app) -> StoryTestClient:
    http = httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test/api")
    return StoryTestClient("http://test/api", client=http)


def _jira_handler(auth_ok=True):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/rest/api/3/myself":
            return httpx.Response(200 if auth_ok else 401, json={})
        return httpx.Response(
            200,
            json={"issues": [{"id": "1", "key": "APP-1", "fields": {"summary": "Login", "description": None}}]},
        )

    return handler


def _jira_app(auth_ok=True):
    app = create_app()
    app.dependency_overrides[get_jira_service_factory] = lambda: jira_factory(_jira_handler(auth_ok))
    return app


def test_generate_tests_through_client():
    provider = FakeProvider(model_reply([make_case()]))
    app = create_app()
    app.dependency_overrides[get_service] = lambda: TestCaseService(provider_factory=lambda: provider)

    async def _go():
        async with _client_for(app) as client:
            return await client.generate_tests(
                GenerateRequest(story_title="Login", acceptance_criteria="User can log in")
            )

    response = asyncio.run(_go())
    assert response.cases[0].id == "TC-001"
    assert response.prompt_tokens == 120


def test_server_error_message_is_surfaced_verbatim():
    async def _go():
        async with _client_for(create_app()) as client:
            await client.generate_tests(GenerateRequest.model_construct(story_title="", acceptance_criteria="x"))

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(_go())
    assert exc_info.value.status_code == 400
    assert str(exc_info.value).startswith("Validation error: storyTitle")


def test_unreachable_backend_names_address():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def _go():
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://backend:8081/api")
        async with StoryTestClient("http://backend:8081/api", client=http) as client:
            await client.test_jira_connection(CONNECTION)

    with pytest.raises(ApiError, match="Unable to reach backend at http://backend:8081/api"):
        asyncio.run(_go())


def test_connect_jira_saves_connection_on_success():
    async def _go():
        async with _client_for(_jira_app()) as client:
            stories = await client.connect_jira(CONNECTION)
            return client, stories

    client, stories = asyncio.run(_go())
    assert [s.key for s in stories] == ["APP-1"]
    assert client.saved_connection() == CONNECTION
    client.disconnect_jira()
    assert client.saved_connection() is None


def test_connect_jira_does_not_save_on_auth_failure():
    store = MemoryConnectionStore()

    async def _go():
        http = httpx.AsyncClient(transport=ASGITransport(app=_jira_app(auth_ok=False)), base_url="http://test/api")
        async with StoryTestClient("http://test/api", client=http, store=store) as client:
            await client.connect_jira(CONNECTION)

    with pytest.raises(ApiError, match="Failed to authenticate with Jira") as exc_info:
        asyncio.run(_go())
    assert exc_info.value.status_code == 401
    assert load_connection(store) is None


def test_connect_jira_times_out():
    async def slow_handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={"success": True, "stories": [], "count": 0})

    async def _go():
        http = httpx.AsyncClient(transport=httpx.MockTransport(slow_handler), base_url="http://test/api")
        store = MemoryConnectionStore()
        async with StoryTestClient("http://test/api", client=http, store=store) as client:
            with pytest.raises(ApiError, match="timed out after 0.05 seconds"):
                await client.connect_jira(CONNECTION, timeout=0.05)
        return store

    store = asyncio.run(_go())
    assert load_connection(store) is None
