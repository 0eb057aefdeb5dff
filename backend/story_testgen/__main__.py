"""
Allow running as: python -m story_testgen
"""
import uvicorn

from story_testgen.core.config import get_settings
from story_testgen.main import create_app


def main() -> None:
    settings = get_settings()
    app = create_app()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        reload=False,
        workers=1,
    )


if __name__ == "__main__":
    main()
