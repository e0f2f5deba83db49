"""
PROCSIM — Dispatcher
======================
Glue between the command collaborators and the scheduler.

This module connects:
- command_parser (text → TaskRequest)
- Scheduler (submit / next_to_run / complete)
- PayloadRegistry (what a dispatched item actually runs)

Foreground items run synchronously on the caller's thread.  Background
items are handed to a worker pool and retire themselves through
``Scheduler.complete`` when their payload returns.

Usage:
    dispatcher = Dispatcher(scheduler)
    dispatcher.submit_script("echo hi\\n& prime 100\\n")
    result = dispatcher.run_next()
"""

from __future__ import annotations

import functools
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass

from procsim.core.command_parser import TaskRequest, parse_line, parse_script
from procsim.core.config import get_settings
from procsim.core.exceptions import DispatchError
from procsim.core.logging import get_logger
from procsim.scheduler.scheduler import Scheduler
from procsim.scheduler.work_item import ItemClass, WorkItemView
from procsim.services.payloads import PayloadRegistry

logger = get_logger(__name__)


@dataclass
class DispatchResult:
    """Result of a dispatch operation."""

    success: bool
    item_id: int | None = None
    item_class: ItemClass | None = None
    output: str | None = None
    detached: bool = False
    error: str | None = None


class Dispatcher:
    """
    Submits parsed requests and runs whatever the scheduler hands out next.

    Responsibilities:
    1. Turn text commands into ``Scheduler.submit`` calls
    2. Run foreground payloads to completion before returning
    3. Detach background payloads onto a thread pool
    4. Report every completion back to the scheduler
    """

    def __init__(
        self,
        scheduler: Scheduler,
        registry: PayloadRegistry | None = None,
        max_workers: int | None = None,
        result_retention: int | None = None,
    ) -> None:
        settings = get_settings()
        self._scheduler = scheduler
        self._registry = registry or PayloadRegistry.with_defaults()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or settings.max_background_workers,
            thread_name_prefix="procsim-bg",
        )
        self._pending: dict[int, Future[DispatchResult]] = {}
        # finished background results not yet collected; oldest dropped first
        self._finished: deque[DispatchResult] = deque(
            maxlen=result_retention or settings.background_result_retention
        )
        self._lock = threading.Lock()

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def registry(self) -> PayloadRegistry:
        return self._registry

    @property
    def pending_count(self) -> int:
        """Background items detached but not yet finished."""
        with self._lock:
            return len(self._pending)

    # ── Submission ──────────────────────────────────────────────────────

    def submit_request(self, request: TaskRequest) -> int:
        return self._scheduler.submit(request.item_class, request.payload)

    def submit_line(self, line: str) -> int | None:
        """
        Parse and submit one line.

        Returns ``None`` for blank/comment lines; raises ``CommandParseError``.
        """
        request = parse_line(line)
        if request is None:
            return None
        return self.submit_request(request)

    def submit_script(self, text: str) -> list[int]:
        """
        Parse the whole script first, then submit every request in order.

        A parse error submits nothing.
        """
        return [self.submit_request(r) for r in parse_script(text)]

    # ── Execution ───────────────────────────────────────────────────────

    def run_next(self) -> DispatchResult | None:
        """
        Dispatch the next ready item.

        Returns ``None`` when nothing is ready.  Background items return
        immediately with ``detached=True``; their final result is available
        from ``wait_background``.

        If the worker pool is already shut down the item is retired and a
        failed result returned.
        """
        view = self._scheduler.next_to_run()
        if view is None:
            return None

        if view.item_class is ItemClass.FOREGROUND:
            return self._execute(view)

        try:
            future = self._executor.submit(self._execute, view)
        except RuntimeError as exc:
            # pool already shut down: the item will never run
            self._scheduler.complete(view.id)
            logger.error("dispatcher.submit_failed", item_id=view.id, error=str(exc))
            return DispatchResult(
                success=False,
                item_id=view.id,
                item_class=view.item_class,
                error=f"Background pool unavailable: {exc}",
            )

        with self._lock:
            self._pending[view.id] = future
        future.add_done_callback(functools.partial(self._collect, view.id))

        logger.info("dispatcher.detached", item_id=view.id)
        return DispatchResult(
            success=True,
            item_id=view.id,
            item_class=view.item_class,
            detached=True,
        )

    def drain(self) -> list[DispatchResult]:
        """Dispatch until the ready structure is empty."""
        results: list[DispatchResult] = []
        while (result := self.run_next()) is not None:
            results.append(result)
        return results

    def wait_background(self, timeout: float | None = None) -> list[DispatchResult]:
        """
        Block until detached items finish and collect their results.

        Also returns results of items that finished since the last call.
        Each result is returned once; items still running after ``timeout``
        stay pending for the next call.
        """
        with self._lock:
            futures = list(self._pending.values())
        wait_futures(futures, timeout=timeout)

        with self._lock:
            results = list(self._finished)
            self._finished.clear()
            for item_id, future in list(self._pending.items()):
                if future.done():
                    del self._pending[item_id]
                    results.append(future.result())
        return sorted(results, key=lambda r: r.item_id or 0)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
        logger.info("dispatcher.shutdown")

    # ── Internals ───────────────────────────────────────────────────────

    def _collect(self, item_id: int, future: Future[DispatchResult]) -> None:
        """Move a finished background result out of the pending table."""
        with self._lock:
            if self._pending.pop(item_id, None) is None:
                return  # already handed out by wait_background
            self._finished.append(future.result())

    def _execute(self, view: WorkItemView) -> DispatchResult:
        """Run the item's payload and retire it, whatever the outcome."""
        payload = view.payload
        try:
            if payload is None:
                output = ""
            else:
                output = self._registry.run(payload.command, payload.args)
        except DispatchError as exc:
            logger.warning(
                "dispatcher.payload_failed",
                item_id=view.id,
                error_code=exc.error_code,
                error=str(exc),
            )
            return DispatchResult(
                success=False,
                item_id=view.id,
                item_class=view.item_class,
                detached=view.item_class is ItemClass.BACKGROUND,
                error=str(exc),
            )
        except Exception as exc:
            logger.error(
                "dispatcher.payload_crashed",
                item_id=view.id,
                error=str(exc),
            )
            return DispatchResult(
                success=False,
                item_id=view.id,
                item_class=view.item_class,
                detached=view.item_class is ItemClass.BACKGROUND,
                error=f"Payload crashed: {exc}",
            )
        finally:
            self._scheduler.complete(view.id)

        logger.info(
            "dispatcher.completed",
            item_id=view.id,
            command=payload.command if payload else None,
        )
        return DispatchResult(
            success=True,
            item_id=view.id,
            item_class=view.item_class,
            output=output,
            detached=view.item_class is ItemClass.BACKGROUND,
        )
