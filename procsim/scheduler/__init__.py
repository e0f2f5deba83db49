"""
PROCSIM — Scheduling Core
===========================
Foreground/background multilevel ready queue, wait set and their
thread-safe orchestrator.

Public API:
    Scheduler - submit, sleep, tick, next_to_run, complete, snapshot
    ReadyStructure, WaitSet - the two owned structures
    TickMonitor - periodic tick driver
"""

from procsim.scheduler.state_machine import (
    InvalidTransitionError,
    ItemState,
    ItemStateMachine,
)
from procsim.scheduler.work_item import ItemClass, Payload, WorkItem, WorkItemView
from procsim.scheduler.ready_structure import ReadyStructure
from procsim.scheduler.wait_set import WaitSet
from procsim.scheduler.scheduler import (
    Scheduler,
    SchedulerSnapshot,
    SleepOutcome,
    SleepResult,
    TickReport,
)
from procsim.scheduler.monitor import TickMonitor

__all__ = [
    "ItemState",
    "ItemStateMachine",
    "InvalidTransitionError",
    "ItemClass",
    "Payload",
    "WorkItem",
    "WorkItemView",
    "ReadyStructure",
    "WaitSet",
    "Scheduler",
    "SchedulerSnapshot",
    "SleepOutcome",
    "SleepResult",
    "TickReport",
    "TickMonitor",
]
