"""
PROCSIM — Runtime Singleton
=============================
Process-wide wiring of the scheduler, dispatcher and tick monitor.

There is exactly one scheduler per process; the HTTP layer and the
scripts reach it through ``get_runtime()``.

Usage:
    from procsim.core.runtime import init_runtime, get_runtime, close_runtime
    runtime = init_runtime(start_monitor=True)
    runtime.dispatcher.submit_line("& sum 1 2 3")
"""

from __future__ import annotations

from dataclasses import dataclass

from procsim.core.config import get_settings
from procsim.core.logging import get_logger
from procsim.scheduler.dispatcher import Dispatcher
from procsim.scheduler.monitor import TickMonitor
from procsim.scheduler.scheduler import Scheduler

logger = get_logger(__name__)


@dataclass
class Runtime:
    scheduler: Scheduler
    dispatcher: Dispatcher
    monitor: TickMonitor

    def close(self) -> None:
        self.monitor.stop()
        self.dispatcher.shutdown(wait=True)


_runtime: Runtime | None = None


def init_runtime(start_monitor: bool | None = None) -> Runtime:
    """
    Build the module-level runtime, replacing (and closing) any previous one.

    ``start_monitor`` defaults to ``Settings.monitor_autostart``.
    """
    global _runtime
    settings = get_settings()
    if _runtime is not None:
        _runtime.close()

    scheduler = Scheduler()
    _runtime = Runtime(
        scheduler=scheduler,
        dispatcher=Dispatcher(
            scheduler, max_workers=settings.max_background_workers
        ),
        monitor=TickMonitor(scheduler, interval=settings.tick_interval_seconds),
    )

    if start_monitor is None:
        start_monitor = settings.monitor_autostart
    if start_monitor:
        _runtime.monitor.start()

    logger.info("runtime.initialized", monitor=start_monitor)
    return _runtime


def get_runtime() -> Runtime:
    """Return the initialized runtime.  Raises if not initialized."""
    if _runtime is None:
        raise RuntimeError(
            "Runtime not initialized. Call init_runtime() during startup."
        )
    return _runtime


def close_runtime() -> None:
    """Stop the monitor and the worker pool."""
    global _runtime
    if _runtime is not None:
        _runtime.close()
        _runtime = None
        logger.info("runtime.closed")
