"""
PROCSIM — API Dependencies
============================
Shared FastAPI dependency injectors for the API layer.

Route handlers reach the scheduler only through these, so tests can swap
the runtime with ``app.dependency_overrides``.
"""

from __future__ import annotations

from procsim.core.middleware import correlation_id_ctx
from procsim.core.runtime import Runtime, get_runtime


def get_current_runtime() -> Runtime:
    """Return the process-wide runtime (scheduler, dispatcher, monitor)."""
    return get_runtime()


def get_correlation_id() -> str | None:
    """Return the correlation ID set by ``CorrelationMiddleware``."""
    return correlation_id_ctx.get(None)
