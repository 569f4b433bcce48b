from __future__ import annotations

import uvicorn

from resume_chat.core.config import get_settings


def main() -> None:
    """Serve the chat API and UI with uvicorn."""

    settings = get_settings()
    uvicorn.run(
        "resume_chat.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
