"""
Server entrypoint for Info Cards.

Run with:
    uvicorn app.main:app --reload
or:
    python -m app.main
"""

import uvicorn

from infocards.api import create_app
from infocards.config import get_settings

app = create_app()


if __name__ == "__main__":
    settings = get_settings().app
    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.debug_mode,
        log_level=settings.log_level.lower(),
    )
