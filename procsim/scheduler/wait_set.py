"""
PROCSIM — Wait Set
====================
Sleeping work items keyed by id, each with a tick countdown.

Every ``advance`` decrements all counters by exactly one and releases the
items that reach zero, in ascending id order.

Thread safety: NOT thread-safe.  ``Scheduler`` serialises all access.
"""

from __future__ import annotations

from procsim.core.exceptions import InvalidDurationError
from procsim.scheduler.state_machine import ItemState
from procsim.scheduler.work_item import WorkItem, WorkItemView


class WaitSet:
    """Countdown holding area for sleeping items."""

    def __init__(self) -> None:
        self._items: dict[int, WorkItem] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    @staticmethod
    def validate_ticks(ticks: object) -> int:
        """
        Return ``ticks`` if it is a positive int.

        Raises ``InvalidDurationError`` otherwise (``bool`` is rejected too).
        """
        if isinstance(ticks, bool) or not isinstance(ticks, int) or ticks <= 0:
            raise InvalidDurationError(ticks)
        return ticks

    def put(self, item: WorkItem, ticks: int) -> None:
        """
        Start ``item``'s countdown at ``ticks``.

        Raises ``InvalidDurationError`` for a non-positive duration and
        ``ValueError`` if the id is already sleeping.  Nothing is mutated
        when either is raised.
        """
        try:
            self.validate_ticks(ticks)
        except InvalidDurationError as exc:
            exc.item_id = item.id
            raise
        if item.id in self._items:
            raise ValueError(f"Work item {item.id} is already in the wait set.")

        item.transition(ItemState.SLEEPING)
        item.remaining_ticks = ticks
        self._items[item.id] = item

    def advance(self) -> list[WorkItem]:
        """Decrement every countdown; return expired items by ascending id."""
        released: list[WorkItem] = []
        for item_id in sorted(self._items):
            item = self._items[item_id]
            item.remaining_ticks -= 1
            if item.remaining_ticks == 0:
                released.append(self._items.pop(item_id))
        return released

    def remaining(self, item_id: int) -> int | None:
        """Remaining ticks for ``item_id``, or ``None`` if it is not sleeping."""
        item = self._items.get(item_id)
        return item.remaining_ticks if item is not None else None

    def snapshot(self) -> tuple[WorkItemView, ...]:
        return tuple(self._items[i].view() for i in sorted(self._items))
