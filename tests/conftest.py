"""
PROCSIM — Test Fixtures
========================
Shared pytest fixtures: fresh settings, a fresh scheduler/runtime per test,
and an HTTP client wired to the FastAPI app.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Ensure a fresh Settings instance for each test."""
    from procsim.core.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(monkeypatch):
    """Return a settings instance with test defaults."""
    monkeypatch.setenv("PROCSIM_ENVIRONMENT", "development")
    monkeypatch.setenv("PROCSIM_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PROCSIM_LOG_FORMAT", "console")
    monkeypatch.setenv("PROCSIM_MONITOR_AUTOSTART", "false")
    monkeypatch.setenv("PROCSIM_MAX_BACKGROUND_WORKERS", "2")
    from procsim.core.config import get_settings
    return get_settings()


@pytest.fixture
def scheduler():
    from procsim.scheduler.scheduler import Scheduler
    return Scheduler()


@pytest.fixture
def dispatcher(scheduler):
    from procsim.scheduler.dispatcher import Dispatcher
    d = Dispatcher(scheduler, max_workers=2)
    yield d
    d.shutdown(wait=True)


@pytest.fixture
def runtime(settings):
    """Module-level runtime with the monitor stopped; ticks are explicit."""
    from procsim.core.runtime import close_runtime, init_runtime
    rt = init_runtime(start_monitor=False)
    yield rt
    close_runtime()


@pytest.fixture
async def client(runtime):
    """
    AsyncClient wired to the FastAPI app.

    ``ASGITransport`` does not run the lifespan, so the ``runtime`` fixture
    stands in for startup/shutdown.
    """
    from procsim.main import create_app
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
