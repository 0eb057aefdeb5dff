"""
Development entrypoint for the backend server.

From backend/: uvicorn story_testgen.main:app --reload --port 8081
Or: cd backend && python main.py
"""
if __name__ == "__main__":
    import uvicorn

    from story_testgen.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "story_testgen.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
