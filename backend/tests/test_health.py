import asyncio

from httpx import ASGITransport, AsyncClient

from story_testgen import __version__
from story_testgen.core.config import get_settings
from story_testgen.main import create_app


async def _get_health():
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get("/api/health")


def test_health_reports_version_and_provider():
    response = asyncio.run(_get_health())
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["version"] == __version__
    assert body["llmProvider"] == get_settings().default_llm_provider


def test_health_does_not_need_provider_credentials(monkeypatch):
    monkeypatch.setenv("STORY_TESTGEN_DEFAULT_LLM_PROVIDER", "gemini")
    monkeypatch.delenv("STORY_TESTGEN_GEMINI_API_KEY", raising=False)
    get_settings.cache_clear()
    try:
        response = asyncio.run(_get_health())
    finally:
        get_settings.cache_clear()
    assert response.status_code == 200
    assert response.json()["llmProvider"] == "gemini"
