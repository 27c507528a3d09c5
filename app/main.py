"""ASGI entry point, served as ``app.main:app``."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.processor import build_default_processor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    processor = build_default_processor()
    logger.info("Processor ready", extra={"timeout_ms": processor.timeout_ms})
    try:
        yield
    finally:
        # The next startup rebuilds from fresh settings.
        build_default_processor.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    application = FastAPI(
        title="Batch File Processor",
        description="Process CSV, JSON and log files sequentially, in parallel or as a benchmark.",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.include_router(router, tags=["executions"])
    return application


app = create_app()
