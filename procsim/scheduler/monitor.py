"""
PROCSIM — Tick Monitor
========================
Periodic caller of ``Scheduler.tick`` on a daemon thread.

One tick per ``interval`` seconds of wall-clock time.  ``stop()`` cancels
the loop promptly; a tick in progress always finishes first.  A failing
tick or callback is logged and the clock keeps running.  Log lines emitted
from ``on_tick`` carry the ``tick`` they report.

Usage:
    monitor = TickMonitor(scheduler, interval=1.0, on_tick=print)
    monitor.start()
    ...
    monitor.stop()
"""

from __future__ import annotations

import threading
from typing import Callable

from procsim.core.config import get_settings
from procsim.core.exceptions import ConfigurationError
from procsim.core.logging import get_logger, log_context
from procsim.scheduler.scheduler import Scheduler, TickReport

logger = get_logger(__name__)


class TickMonitor:
    """Cancellable wake-up loop driving the scheduler's clock."""

    def __init__(
        self,
        scheduler: Scheduler,
        interval: float | None = None,
        on_tick: Callable[[TickReport], None] | None = None,
    ) -> None:
        if interval is None:
            interval = get_settings().tick_interval_seconds
        if interval <= 0:
            raise ConfigurationError(
                f"Tick interval must be positive, got {interval!r}."
            )
        self._scheduler = scheduler
        self._interval = interval
        self._on_tick = on_tick
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the loop if it is not already running."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="procsim-monitor", daemon=True
        )
        self._thread.start()
        logger.info("monitor.started", interval=self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("monitor.stopped")

    def __enter__(self) -> TickMonitor:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                report = self._scheduler.tick()
            except Exception as exc:
                # A failed tick is logged; the next interval tries again.
                logger.error("monitor.tick_failed", error=str(exc))
                continue
            if self._on_tick is None:
                continue
            with log_context(tick=report.tick):
                try:
                    self._on_tick(report)
                except Exception as exc:
                    logger.error("monitor.on_tick_failed", error=str(exc))
