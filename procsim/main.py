"""
PROCSIM — FastAPI Application
===============================
Application factory with lifecycle management and middleware pipeline.

Usage:
    uvicorn procsim.main:app --host 127.0.0.1 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from procsim.api.health import router as health_router
from procsim.api.routes import items_router, scheduler_router
from procsim.core.config import get_settings
from procsim.core.logging import configure_logging, get_logger
from procsim.core.middleware import CorrelationMiddleware
from procsim.core.runtime import close_runtime, init_runtime


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifecycle.

    Startup: configure logging, build the runtime (and start the monitor).
    Shutdown: stop the monitor and drain the worker pool.
    """
    logger = get_logger("procsim.main")

    # ── Startup ──────────────────────────────────────────────────────
    configure_logging()
    logger.info("app.starting", environment=get_settings().environment.value)

    runtime = init_runtime()
    logger.info("app.started", monitor=runtime.monitor.is_running)
    yield

    # ── Shutdown ─────────────────────────────────────────────────────
    logger.info("app.stopping")
    close_runtime()
    logger.info("app.stopped")


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    application = FastAPI(
        title="procsim",
        description="Foreground/background process scheduler simulator",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    application.add_middleware(CorrelationMiddleware)

    application.include_router(health_router)
    application.include_router(items_router)
    application.include_router(scheduler_router)

    return application


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("procsim.main:app", host=settings.host, port=settings.port)


# Module-level instance for ``uvicorn procsim.main:app``
app = create_app()
