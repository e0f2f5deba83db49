"""
PROCSIM — Scheduler
=====================
Owns the ready structure, the wait set and the in-flight table, and
serialises every operation on them through a single lock.

Architecture:
    Dispatcher → submit → ReadyStructure
    TickMonitor → tick → WaitSet.advance → ReadyStructure.admit → promote_step
    Reporter   → snapshot

Invariants enforced:
- An item lives in exactly one of ReadyStructure, WaitSet, in-flight table
- ready + waiting + in-flight == submitted - completed, at every snapshot
- Core errors become result values before the lock is released

Usage:
    scheduler = Scheduler()
    item_id = scheduler.submit(ItemClass.BACKGROUND, Payload("sum", ("1", "2")))
    result = scheduler.sleep(item_id, 3)
    report = scheduler.tick()
    print(scheduler.snapshot().ready_count)
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from enum import StrEnum

from procsim.core.exceptions import (
    InvalidDurationError,
    UnknownIdError,
)
from procsim.core.logging import get_logger
from procsim.scheduler.ready_structure import ReadyStructure
from procsim.scheduler.state_machine import ItemState
from procsim.scheduler.wait_set import WaitSet
from procsim.scheduler.work_item import (
    ItemClass,
    Payload,
    WorkItem,
    WorkItemView,
)

logger = get_logger(__name__)


# ── Result values ───────────────────────────────────────────────────────


class SleepOutcome(StrEnum):
    OK = "ok"
    UNKNOWN_ID = "unknown_id"
    INVALID_DURATION = "invalid_duration"


@dataclass(frozen=True, slots=True)
class SleepResult:
    """Outcome of ``Scheduler.sleep``."""

    outcome: SleepOutcome
    item_id: int
    ticks: object
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is SleepOutcome.OK

    def raise_for_outcome(self) -> None:
        """Re-raise the failure as its exception, for callers that prefer it."""
        if self.outcome is SleepOutcome.UNKNOWN_ID:
            raise UnknownIdError(self.item_id)
        if self.outcome is SleepOutcome.INVALID_DURATION:
            raise InvalidDurationError(self.ticks, item_id=self.item_id)


@dataclass(frozen=True, slots=True)
class TickReport:
    """What a single ``tick`` changed."""

    tick: int
    released: tuple[int, ...]
    promoted: int | None


@dataclass(frozen=True, slots=True)
class SchedulerSnapshot:
    """Consistent point-in-time view of the whole scheduler."""

    levels: tuple[tuple[WorkItemView, ...], ...]
    waiting: tuple[WorkItemView, ...]
    running_count: int
    background_count: int
    tick: int
    top_first: bool = True

    @property
    def ready_count(self) -> int:
        return sum(len(level) for level in self.levels)

    @property
    def waiting_count(self) -> int:
        return len(self.waiting)

    @property
    def in_flight_count(self) -> int:
        return self.running_count + self.background_count

    @property
    def total(self) -> int:
        return self.ready_count + self.waiting_count + self.in_flight_count


# ── Scheduler ───────────────────────────────────────────────────────────


class Scheduler:
    """
    Thread-safe front for the ready structure and the wait set.

    All public methods take ``self._lock`` exactly once, so no caller can
    observe a half-applied ``tick`` or ``sleep``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ready = ReadyStructure()
        self._waiting = WaitSet()
        self._in_flight: dict[int, WorkItem] = {}
        self._ids = itertools.count()
        self._tick = 0
        self._running_count = 0
        self._background_count = 0

    def submit(
        self, item_class: ItemClass, payload: Payload | None = None
    ) -> int:
        """Create a work item, admit it to the ready structure, return its id."""
        with self._lock:
            item = WorkItem(id=next(self._ids), item_class=item_class, payload=payload)
            self._ready.admit(item)
            levels = self._ready.level_count

        logger.info(
            "scheduler.submitted",
            item_id=item.id,
            item_class=item_class.value,
            command=payload.command if payload else None,
            levels=levels,
        )
        return item.id

    def sleep(self, item_id: int, ticks: int) -> SleepResult:
        """
        Move a ready item into the wait set for ``ticks`` ticks.

        Returns a ``SleepResult``; nothing is mutated unless it is ``OK``.
        """
        try:
            WaitSet.validate_ticks(ticks)
        except InvalidDurationError as exc:
            logger.warning("scheduler.sleep_rejected", item_id=item_id, ticks=ticks)
            return SleepResult(
                SleepOutcome.INVALID_DURATION, item_id, ticks, error=str(exc)
            )

        with self._lock:
            try:
                item = self._ready.take(item_id)
            except UnknownIdError as exc:
                error = str(exc)
            else:
                self._waiting.put(item, ticks)
                error = None

        if error is not None:
            logger.warning("scheduler.sleep_unknown_id", item_id=item_id)
            return SleepResult(SleepOutcome.UNKNOWN_ID, item_id, ticks, error=error)

        logger.info("scheduler.sleeping", item_id=item_id, ticks=ticks)
        return SleepResult(SleepOutcome.OK, item_id, ticks)

    def tick(self) -> TickReport:
        """
        Advance simulated time by one tick.

        Releases expired sleepers back to the ready structure, then runs
        one promotion step.  This is the only entry point for the monitor.
        """
        with self._lock:
            self._tick += 1
            released = self._waiting.advance()
            for item in released:
                self._ready.admit(item)
            promoted = self._ready.promote_step()
            report = TickReport(
                tick=self._tick,
                released=tuple(item.id for item in released),
                promoted=promoted.id if promoted is not None else None,
            )

        logger.debug(
            "scheduler.tick",
            tick=report.tick,
            released=list(report.released),
            promoted=report.promoted,
        )
        return report

    def next_to_run(self) -> WorkItemView | None:
        """
        Pop the most preferred ready item and mark it in flight.

        Foreground items become RUNNING, background items DETACHED.
        Returns ``None`` immediately when nothing is ready.
        """
        with self._lock:
            item = self._ready.remove_next()
            if item is None:
                return None
            if item.is_foreground:
                item.transition(ItemState.RUNNING)
                self._running_count += 1
            else:
                item.transition(ItemState.DETACHED)
                self._background_count += 1
            self._in_flight[item.id] = item
            view = item.view()

        logger.info(
            "scheduler.dispatched",
            item_id=view.id,
            item_class=view.item_class.value,
            state=view.state.value,
        )
        return view

    def complete(self, item_id: int) -> bool:
        """
        Retire an in-flight item.

        Safe to call from worker threads.  Returns ``False`` if the id is
        not in flight.
        """
        with self._lock:
            item = self._in_flight.pop(item_id, None)
            if item is None:
                return False
            if item.state is ItemState.RUNNING:
                self._running_count -= 1
            else:
                self._background_count -= 1
            item.transition(ItemState.DONE)

        logger.info("scheduler.completed", item_id=item_id)
        return True

    def snapshot(self, top_first: bool = True) -> SchedulerSnapshot:
        """Return a consistent, non-mutating view of all scheduler state."""
        with self._lock:
            return SchedulerSnapshot(
                levels=self._ready.snapshot_order(top_first=top_first),
                waiting=self._waiting.snapshot(),
                running_count=self._running_count,
                background_count=self._background_count,
                tick=self._tick,
                top_first=top_first,
            )
