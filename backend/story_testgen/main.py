"""
Single entrypoint for the Story Test Case Generator service.

Run from backend directory: uvicorn story_testgen.main:app --reload
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from story_testgen import __version__
from story_testgen.api import register_routes
from story_testgen.api.errors import register_exception_handlers
from story_testgen.core.config import get_settings
from story_testgen.core.logging_config import configure_logging


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.
    """
    configure_logging()
    settings = get_settings()

    app = FastAPI(
        title="Story Test Case Generator",
        description=(
            "Backend service that turns user stories, typed in or pulled "
            "from Jira, into structured test cases with an LLM and exports "
            "them to CSV / Excel."
        ),
        version=__version__,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routes(app)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "story_testgen.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )
