from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from app.api import router
from logging_config import configure_logging
from services.dashboard import build_default_controller


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    controller = build_default_controller()
    # Data is only fetched once this probe reports the API as connected.
    await run_in_threadpool(controller.check_connectivity)
    try:
        yield
    finally:
        controller.close()
        build_default_controller.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Rainfall Dashboard",
        description="Read-only dashboard over a remote rainfall records API.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()
