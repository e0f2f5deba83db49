"""
PROCSIM — Health Endpoint
==========================
Reports whether the runtime is up and whether the tick monitor is alive.
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from procsim.core.runtime import get_runtime

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""
    status: str
    scheduler: str
    monitor: str


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="System health check",
    description="Returns runtime and tick monitor status.",
)
async def health_check() -> HealthResponse:
    """
    Health endpoint.

    ``scheduler`` is 'ok' once the runtime is initialized; ``monitor`` is
    'running' or 'stopped'.  A stopped monitor is not an error: ticks may
    be driven through the API instead.
    """
    try:
        runtime = get_runtime()
    except RuntimeError:
        return HealthResponse(status="degraded", scheduler="error", monitor="stopped")

    return HealthResponse(
        status="healthy",
        scheduler="ok",
        monitor="running" if runtime.monitor.is_running else "stopped",
    )
