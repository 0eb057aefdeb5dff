import logging
import sys
from typing import Optional

from story_testgen.core.config import get_settings


_configured = False


def configure_logging(level_override: Optional[str] = None) -> None:
    """
    Configure logging for the service.

    This is idempotent and safe to call multiple times.
    """
    global _configured

    if _configured:
        return

    settings = get_settings()
    log_level = (level_override or settings.log_level).upper()

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )

    # Request bodies to Jira carry credentials in headers; keep httpx quiet.
    for noisy_logger in ("uvicorn", "uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    _configured = True


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Return a short, log-safe preview of a credential."""
    if not value:
        return "<empty>"
    if len(value) <= visible:
        return "***"
    return f"{value[:visible]}***"
