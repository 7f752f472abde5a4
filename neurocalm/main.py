"""Facade to start the FastAPI server with settings from the environment."""

from __future__ import annotations

import asyncio

import uvicorn

from neurocalm.app.api import create_app
from neurocalm.config import Settings
from neurocalm.logging_setup import configure_logging


def run() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    app = create_app(settings)
    config = uvicorn.Config(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    server = uvicorn.Server(config)
    asyncio.run(server.serve())


if __name__ == "__main__":
    run()
