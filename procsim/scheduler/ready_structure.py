"""
PROCSIM — Ready Structure
===========================
Multilevel ready queue separating foreground from background work.

Levels are held in an indexable list of FIFO runs (``collections.deque``);
index 0 is the top (most preferred) level, the last index is the bottom.

Placement:
    Foreground items join the top level when it is empty or holds only
    foreground items, otherwise a new top level is opened.  Background
    items join the bottom level when it is empty or holds only background
    items, otherwise a new bottom level is opened.

Minimality:
    After every mutation, empty levels are dropped (one empty level is kept
    when the structure is empty) and adjacent levels holding only items of
    the same class are merged, upper run first.

Promotion:
    A round-robin cursor walks the levels.  Visiting a non-empty level below
    the top moves its front item to the back of the level above and marks
    it ``promoted``.
    Dropping or merging levels keeps the cursor on the level it was
    visiting.

Thread safety: NOT thread-safe.  ``Scheduler`` serialises all access.

Usage:
    ready = ReadyStructure()
    ready.admit(item)
    nxt = ready.remove_next()
"""

from __future__ import annotations

from collections import deque
from typing import Iterator

from procsim.core.exceptions import UnknownIdError
from procsim.scheduler.state_machine import ItemState
from procsim.scheduler.work_item import ItemClass, WorkItem, WorkItemView

Level = deque[WorkItem]

# Lookup order for targeted removal; foreground first.
_TAKE_ORDER: tuple[ItemClass, ...] = (ItemClass.FOREGROUND, ItemClass.BACKGROUND)


def _pure_class(level: Level) -> ItemClass | None:
    """Return the single class shared by every item of ``level``, if any."""
    if not level:
        return None
    first = level[0].item_class
    if all(item.item_class is first for item in level):
        return first
    return None


def _accepts(level: Level, item_class: ItemClass) -> bool:
    return not level or _pure_class(level) is item_class


class ReadyStructure:
    """Variable-depth ready queue with merge-on-empty and aging."""

    def __init__(self) -> None:
        self._levels: list[Level] = [deque()]
        self._cursor: int = 0

    def __len__(self) -> int:
        return sum(len(level) for level in self._levels)

    def __contains__(self, item_id: object) -> bool:
        return any(item.id == item_id for item in self._iter_items())

    def _iter_items(self) -> Iterator[WorkItem]:
        for level in self._levels:
            yield from level

    @property
    def level_count(self) -> int:
        return len(self._levels)

    # ── Mutators ────────────────────────────────────────────────────────

    def admit(self, item: WorkItem) -> None:
        """
        Insert ``item`` per the placement rule.

        Always succeeds; opens at most one new level.
        """
        item.transition(ItemState.READY)

        if item.is_foreground:
            top = self._levels[0]
            if _accepts(top, ItemClass.FOREGROUND):
                top.append(item)
            else:
                self._levels.insert(0, deque([item]))
                # keep the cursor on the level it was pointing at
                self._cursor += 1
        else:
            bottom = self._levels[-1]
            if _accepts(bottom, ItemClass.BACKGROUND):
                bottom.append(item)
            else:
                self._levels.append(deque([item]))

        self._compact()

    def remove_next(self) -> WorkItem | None:
        """
        Remove and return the front item of the most preferred non-empty level.

        Returns ``None`` if the structure is empty.
        """
        for level in self._levels:
            if level:
                item = level.popleft()
                self._compact()
                return item
        return None

    def take(self, item_id: int) -> WorkItem:
        """
        Remove a specific item wherever it sits.

        Foreground items are searched before background items.
        Raises ``UnknownIdError`` if no ready item has ``item_id``.
        """
        for item_class in _TAKE_ORDER:
            for level in self._levels:
                for item in level:
                    if item.id == item_id and item.item_class is item_class:
                        level.remove(item)
                        self._compact()
                        return item
        raise UnknownIdError(item_id)

    def promote_step(self) -> WorkItem | None:
        """
        Run one aging step and return the promoted item, if any.

        The top level and empty levels only advance the cursor.
        """
        index = self._cursor % len(self._levels)
        self._cursor = index + 1

        promoted: WorkItem | None = None
        level = self._levels[index]
        if index > 0 and level:
            promoted = level.popleft()
            promoted.promoted = True
            self._levels[index - 1].append(promoted)
            self._compact()

        self._cursor %= len(self._levels)
        return promoted

    # ── Read-only ───────────────────────────────────────────────────────

    def snapshot_order(
        self, top_first: bool = True
    ) -> tuple[tuple[WorkItemView, ...], ...]:
        """Return item views per level, top-to-bottom unless ``top_first`` is False."""
        levels = tuple(
            tuple(item.view() for item in level) for level in self._levels
        )
        return levels if top_first else levels[::-1]

    # ── Internals ───────────────────────────────────────────────────────

    def _compact(self) -> None:
        """
        Drop empty levels and merge same-class neighbours.

        The cursor follows the level it pointed at: onto the run it was
        merged into, or onto the next surviving level if it was dropped.
        """
        merged: list[Level] = []
        cursor: int | None = None
        for index, level in enumerate(self._levels):
            if index == self._cursor:
                cursor = len(merged)
            if not level:
                continue
            if merged:
                above = _pure_class(merged[-1])
                if above is not None and above is _pure_class(level):
                    merged[-1].extend(level)
                    if index == self._cursor:
                        cursor -= 1
                    continue
            merged.append(level)
        self._levels = merged or [deque()]
        # a cursor past the last level keeps wrapping to the top
        self._cursor = len(merged) if cursor is None else cursor
