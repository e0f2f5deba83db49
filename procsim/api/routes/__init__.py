"""
PROCSIM — API Routes Package
==============================
Aggregates route modules under ``/api/v1``.
"""

from procsim.api.routes.items import router as items_router
from procsim.api.routes.scheduler import router as scheduler_router

__all__ = [
    "items_router",
    "scheduler_router",
]
