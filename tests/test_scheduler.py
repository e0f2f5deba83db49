"""
Scheduler Tests
================
Validates:
- submit / sleep / tick / next_to_run / complete semantics
- Sleep failures are result values and mutate nothing
- The ready + waiting + in-flight total tracks successful operations
- Concurrent producers, consumers and the ticker never expose a
  half-applied state
"""

from __future__ import annotations

import threading

import pytest

from procsim.core.exceptions import InvalidDurationError, UnknownIdError
from procsim.scheduler.scheduler import Scheduler, SleepOutcome
from procsim.scheduler.state_machine import ItemState
from procsim.scheduler.work_item import ItemClass, Payload

F = ItemClass.FOREGROUND
B = ItemClass.BACKGROUND


def _level_ids(scheduler: Scheduler) -> list[list[int]]:
    return [[v.id for v in level] for level in scheduler.snapshot().levels]


class TestSleepWakeScenario:
    """The canonical foreground/background sleep walk-through."""

    def test_full_scenario(self, scheduler: Scheduler):
        assert scheduler.submit(F) == 0
        assert scheduler.submit(B) == 1
        assert _level_ids(scheduler) == [[0], [1]]

        result = scheduler.sleep(1, 2)
        assert result.success
        snap = scheduler.snapshot()
        assert [(v.id, v.item_class, v.remaining_ticks) for v in snap.waiting] == [
            (1, B, 2)
        ]
        assert _level_ids(scheduler) == [[0]]

        first = scheduler.tick()
        assert first.released == ()
        snap = scheduler.snapshot()
        assert snap.waiting[0].remaining_ticks == 1
        assert _level_ids(scheduler) == [[0]]

        second = scheduler.tick()
        assert second.released == (1,)
        snap = scheduler.snapshot()
        assert snap.waiting == ()
        assert _level_ids(scheduler) == [[0], [1]]
        bottom = snap.levels[-1][0]
        assert bottom.item_class is B
        assert bottom.state is ItemState.READY
        assert bottom.promoted is False


class TestSubmit:
    def test_ids_are_sequential_and_unique(self, scheduler: Scheduler):
        ids = [scheduler.submit(F if i % 2 else B) for i in range(10)]
        assert ids == list(range(10))

    def test_payload_is_carried_untouched(self, scheduler: Scheduler):
        payload = Payload("gcd", ("12", "18"))
        item_id = scheduler.submit(F, payload)
        view = scheduler.snapshot().levels[0][0]
        assert view.id == item_id
        assert view.payload is payload


class TestSleep:
    """Sleep outcomes are values, never exceptions."""

    @pytest.mark.parametrize("ticks", [0, -3])
    def test_invalid_duration(self, scheduler: Scheduler, ticks):
        scheduler.submit(B)
        result = scheduler.sleep(0, ticks)

        assert result.outcome is SleepOutcome.INVALID_DURATION
        assert not result.success
        assert result.error
        assert _level_ids(scheduler) == [[0]]
        assert scheduler.snapshot().waiting == ()

    def test_invalid_duration_checked_before_lookup(self, scheduler: Scheduler):
        result = scheduler.sleep(123, 0)
        assert result.outcome is SleepOutcome.INVALID_DURATION

    def test_unknown_id(self, scheduler: Scheduler):
        scheduler.submit(F)
        result = scheduler.sleep(5, 2)

        assert result.outcome is SleepOutcome.UNKNOWN_ID
        assert _level_ids(scheduler) == [[0]]

    def test_sleeping_item_cannot_sleep_again(self, scheduler: Scheduler):
        scheduler.submit(B)
        assert scheduler.sleep(0, 3).success
        assert scheduler.sleep(0, 1).outcome is SleepOutcome.UNKNOWN_ID
        assert scheduler.snapshot().waiting[0].remaining_ticks == 3

    def test_in_flight_item_is_unknown(self, scheduler: Scheduler):
        scheduler.submit(F)
        scheduler.next_to_run()
        assert scheduler.sleep(0, 1).outcome is SleepOutcome.UNKNOWN_ID

    def test_raise_for_outcome(self, scheduler: Scheduler):
        with pytest.raises(UnknownIdError):
            scheduler.sleep(9, 1).raise_for_outcome()
        with pytest.raises(InvalidDurationError):
            scheduler.sleep(9, 0).raise_for_outcome()

        scheduler.submit(F)
        scheduler.sleep(0, 1).raise_for_outcome()

    def test_foreground_keeps_class_through_sleep(self, scheduler: Scheduler):
        scheduler.submit(B)
        scheduler.submit(F)
        scheduler.sleep(1, 1)
        scheduler.tick()

        top = scheduler.snapshot().levels[0]
        assert [(v.id, v.item_class) for v in top] == [(1, F)]


class TestTick:
    def test_tick_counter(self, scheduler: Scheduler):
        for expected in range(1, 4):
            assert scheduler.tick().tick == expected
        assert scheduler.snapshot().tick == 3

    def test_tick_promotes_one_item(self, scheduler: Scheduler):
        scheduler.submit(F)
        scheduler.submit(B)
        scheduler.submit(B)

        assert scheduler.tick().promoted is None  # cursor on the top level
        assert scheduler.tick().promoted == 1
        assert _level_ids(scheduler) == [[0, 1], [2]]

    def test_background_reaches_top_eventually(self, scheduler: Scheduler):
        scheduler.submit(F)
        for _ in range(4):
            scheduler.submit(B)
        for _ in range(20):
            scheduler.tick()
        assert len(scheduler.snapshot().levels) == 1


class TestRunAndComplete:
    def test_empty_returns_none(self, scheduler: Scheduler):
        assert scheduler.next_to_run() is None

    def test_foreground_first_then_background(self, scheduler: Scheduler):
        scheduler.submit(B)
        scheduler.submit(F)

        first = scheduler.next_to_run()
        assert (first.id, first.state) == (1, ItemState.RUNNING)
        second = scheduler.next_to_run()
        assert (second.id, second.state) == (0, ItemState.DETACHED)

        snap = scheduler.snapshot()
        assert snap.running_count == 1
        assert snap.background_count == 1
        assert snap.ready_count == 0
        assert snap.total == 2

    def test_complete_retires_once(self, scheduler: Scheduler):
        scheduler.submit(F)
        scheduler.submit(B)
        scheduler.next_to_run()
        scheduler.next_to_run()

        assert scheduler.complete(0) is True
        assert scheduler.complete(0) is False
        assert scheduler.complete(1) is True

        snap = scheduler.snapshot()
        assert (snap.running_count, snap.background_count, snap.total) == (0, 0, 0)

    def test_complete_unknown_id(self, scheduler: Scheduler):
        scheduler.submit(F)
        assert scheduler.complete(0) is False  # still ready, not in flight
        assert scheduler.snapshot().ready_count == 1


class TestConcurrency:
    """Totals stay exact with producers, consumers and a ticker racing."""

    def test_totals_under_contention(self, scheduler: Scheduler):
        producers, per_producer = 6, 60
        completed = 0
        completed_lock = threading.Lock()
        stop = threading.Event()
        errors: list[str] = []

        def produce(seed: int) -> None:
            for n in range(per_producer):
                item_id = scheduler.submit(B if (seed + n) % 3 else F)
                if n % 4 == 0:
                    scheduler.sleep(item_id, 1 + n % 3)

        def consume() -> None:
            nonlocal completed
            while not stop.is_set():
                view = scheduler.next_to_run()
                if view is None:
                    continue
                scheduler.complete(view.id)
                with completed_lock:
                    completed += 1

        def tick() -> None:
            while not stop.is_set():
                scheduler.tick()

        def observe() -> None:
            while not stop.is_set():
                snap = scheduler.snapshot()
                seen = [v.id for lvl in snap.levels for v in lvl]
                seen += [v.id for v in snap.waiting]
                if len(seen) != len(set(seen)):
                    errors.append(f"duplicate ids at tick {snap.tick}")

        threads = [
            threading.Thread(target=produce, args=(i,)) for i in range(producers)
        ]
        background = [
            threading.Thread(target=consume),
            threading.Thread(target=consume),
            threading.Thread(target=tick),
            threading.Thread(target=observe),
        ]
        for t in background + threads:
            t.start()
        for t in threads:
            t.join()
        stop.set()
        for t in background:
            t.join()

        assert errors == []
        snap = scheduler.snapshot()
        assert snap.in_flight_count == 0
        assert snap.total == producers * per_producer - completed

        # Drain what is left: everything sleeping wakes within 3 ticks.
        for _ in range(3):
            scheduler.tick()
        while (view := scheduler.next_to_run()) is not None:
            scheduler.complete(view.id)
        assert scheduler.snapshot().total == 0
