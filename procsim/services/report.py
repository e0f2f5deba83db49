"""
PROCSIM — Snapshot Report
===========================
Plain-text rendering of a ``SchedulerSnapshot``.

Example (top first):

    Running: [1] Background: [0]
    ---------------------------
    DQ: [0F] [2F] (top)
    P => [1B] (bottom)
    ---------------------------
    WQ: [3B] - remaining: 2s
"""

from __future__ import annotations

from procsim.scheduler.scheduler import SchedulerSnapshot
from procsim.scheduler.work_item import WorkItemView

RULE = "-" * 27


def _render_level(level: tuple[WorkItemView, ...]) -> str:
    return " ".join(view.label for view in level) if level else "(empty)"


def render_levels(snapshot: SchedulerSnapshot) -> list[str]:
    """One line per ready level, annotated with ``(top)`` / ``(bottom)``."""
    levels = snapshot.levels
    count = len(levels)
    lines: list[str] = []
    for position, level in enumerate(levels):
        prefix = "DQ: " if position == 0 else "P => "
        # index counted from the top, whatever the rendering direction
        index = position if snapshot.top_first else count - 1 - position
        tags = []
        if index == 0:
            tags.append("(top)")
        if index == count - 1:
            tags.append("(bottom)")
        lines.append(f"{prefix}{_render_level(level)} {' '.join(tags)}")
    return lines


def render_wait_queue(snapshot: SchedulerSnapshot) -> str:
    if not snapshot.waiting:
        return "WQ: (empty)"
    entries = [
        f"{view.label} - remaining: {view.remaining_ticks}s"
        for view in snapshot.waiting
    ]
    return "WQ: " + ", ".join(entries)


def render_snapshot(snapshot: SchedulerSnapshot) -> str:
    """Render counters, ready levels and the wait queue as text."""
    lines = [
        f"Running: [{snapshot.running_count}] "
        f"Background: [{snapshot.background_count}]",
        RULE,
        *render_levels(snapshot),
        RULE,
        render_wait_queue(snapshot),
    ]
    return "\n".join(lines)
