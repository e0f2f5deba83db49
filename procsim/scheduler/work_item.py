"""
PROCSIM — Work Item
=====================
The schedulable unit and its read-only view.

A ``WorkItem`` is owned by exactly one of ``ReadyStructure``, ``WaitSet``
or the scheduler's in-flight table.  Everything outside the scheduler sees
``WorkItemView`` snapshots only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from procsim.scheduler.state_machine import ItemState, ItemStateMachine


class ItemClass(StrEnum):
    """Foreground (interactive) or background (detached) work."""

    FOREGROUND = "F"
    BACKGROUND = "B"

    @classmethod
    def parse(cls, raw: str) -> ItemClass:
        """Accept ``F``/``B`` as well as ``foreground``/``background``."""
        value = raw.strip().lower()
        if value in ("f", "fg", "foreground"):
            return cls.FOREGROUND
        if value in ("b", "bg", "background"):
            return cls.BACKGROUND
        raise ValueError(f"Unknown item class '{raw}'.")


@dataclass(frozen=True, slots=True)
class Payload:
    """Opaque command description; only collaborators interpret it."""

    command: str
    args: tuple[str, ...] = ()

    def __str__(self) -> str:
        return " ".join((self.command, *self.args))


@dataclass(frozen=True, slots=True)
class WorkItemView:
    """Immutable point-in-time view of a work item."""

    id: int
    item_class: ItemClass
    payload: Payload | None
    promoted: bool
    remaining_ticks: int
    state: ItemState

    @property
    def label(self) -> str:
        """Report label, e.g. ``[4B]`` or ``[4B*]`` once promoted."""
        star = "*" if self.promoted else ""
        return f"[{self.id}{self.item_class.value}{star}]"


@dataclass(slots=True)
class WorkItem:
    """Mutable scheduler-side record."""

    id: int
    item_class: ItemClass
    payload: Payload | None = None
    promoted: bool = False
    remaining_ticks: int = 0
    state: ItemState = field(default=ItemState.CREATED)

    @property
    def is_foreground(self) -> bool:
        return self.item_class is ItemClass.FOREGROUND

    def transition(self, to_state: ItemState) -> None:
        """Move to ``to_state``; raises ``InvalidTransitionError`` if undefined."""
        ItemStateMachine.validate_transition(self.state, to_state)
        self.state = to_state

    def view(self) -> WorkItemView:
        return WorkItemView(
            id=self.id,
            item_class=self.item_class,
            payload=self.payload,
            promoted=self.promoted,
            remaining_ticks=self.remaining_ticks,
            state=self.state,
        )
