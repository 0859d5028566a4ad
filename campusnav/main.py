"""Application entry point for the Campus Navigator API.

Run locally:
    uvicorn campusnav.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging

import uvicorn

from campusnav.api import create_app
from campusnav.config import Settings, load_local_env

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


load_local_env()
settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_app(settings=settings)


if __name__ == "__main__":
    uvicorn.run("campusnav.main:app", host=settings.api_host, port=settings.api_port, reload=settings.api_reload)
