"""Application factory wiring heart, playback, coach and user routers together."""

from __future__ import annotations

import random
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from neurocalm.app.coach_api import router as coach_router
from neurocalm.app.container import build_container
from neurocalm.app.heart_api import router as heart_router
from neurocalm.app.playback_api import router as playback_router
from neurocalm.app.playback import AudioBackend
from neurocalm.app.scheduler import Clock
from neurocalm.app.users_api import router as users_router
from neurocalm.config import Settings
from neurocalm.db import UserDirectory


def create_app(
    settings: Settings | None = None,
    *,
    clock: Clock | None = None,
    rng: random.Random | None = None,
    audio: AudioBackend | None = None,
    directory: UserDirectory | None = None,
) -> FastAPI:
    container = build_container(settings, clock=clock, rng=rng, audio=audio, directory=directory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("NeuroCalm API ready (sources: synthetic, text, serial, push)")
        try:
            yield
        finally:
            container.close()
            logger.info("NeuroCalm API shut down")

    app = FastAPI(title="NeuroCalm API", lifespan=lifespan)
    app.state.container = container
    app.include_router(heart_router)
    app.include_router(playback_router)
    app.include_router(coach_router)
    app.include_router(users_router)
    return app


__all__ = ["create_app"]
