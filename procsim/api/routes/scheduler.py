"""
PROCSIM — Scheduler API Routes
================================
Clock, dispatch and reporting endpoints.

Usage:
    POST /api/v1/scheduler/tick      — Advance one tick
    POST /api/v1/scheduler/dispatch  — Run the next ready item
    GET  /api/v1/scheduler/snapshot  — JSON snapshot
    GET  /api/v1/scheduler/report    — Text report
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from procsim.api.deps import get_current_runtime
from procsim.core.config import get_settings
from procsim.core.runtime import Runtime
from procsim.scheduler.work_item import WorkItemView
from procsim.services.report import render_snapshot

router = APIRouter(prefix="/api/v1/scheduler", tags=["scheduler"])


# ── Response Schemas ────────────────────────────────────────────────────


class ItemResponse(BaseModel):
    id: int
    item_class: str
    command: str | None
    args: list[str]
    promoted: bool
    remaining_ticks: int
    state: str

    @classmethod
    def from_view(cls, view: WorkItemView) -> ItemResponse:
        return cls(
            id=view.id,
            item_class=view.item_class.value,
            command=view.payload.command if view.payload else None,
            args=list(view.payload.args) if view.payload else [],
            promoted=view.promoted,
            remaining_ticks=view.remaining_ticks,
            state=view.state.value,
        )


class SnapshotResponse(BaseModel):
    tick: int
    running: int
    background: int
    top_first: bool
    levels: list[list[ItemResponse]]
    waiting: list[ItemResponse]


class TickResponse(BaseModel):
    tick: int
    released: list[int]
    promoted: int | None


class DispatchResponse(BaseModel):
    dispatched: bool
    item_id: int | None = None
    item_class: str | None = None
    detached: bool = False
    success: bool | None = None
    output: str | None = None
    error: str | None = None


# ── Routes ──────────────────────────────────────────────────────────────


@router.post("/tick", response_model=TickResponse)
async def tick(runtime: Runtime = Depends(get_current_runtime)) -> TickResponse:
    report = runtime.scheduler.tick()
    return TickResponse(
        tick=report.tick, released=list(report.released), promoted=report.promoted
    )


@router.post("/dispatch", response_model=DispatchResponse)
async def dispatch(
    runtime: Runtime = Depends(get_current_runtime),
) -> DispatchResponse:
    """Run the next item; foreground payloads run off the event loop."""
    result = await asyncio.to_thread(runtime.dispatcher.run_next)
    if result is None:
        return DispatchResponse(dispatched=False)
    return DispatchResponse(
        dispatched=True,
        item_id=result.item_id,
        item_class=result.item_class.value if result.item_class else None,
        detached=result.detached,
        success=result.success,
        output=result.output,
        error=result.error,
    )


@router.get("/snapshot", response_model=SnapshotResponse)
async def snapshot(
    top_first: bool | None = Query(default=None),
    runtime: Runtime = Depends(get_current_runtime),
) -> SnapshotResponse:
    if top_first is None:
        top_first = get_settings().report_top_first
    snap = runtime.scheduler.snapshot(top_first=top_first)
    return SnapshotResponse(
        tick=snap.tick,
        running=snap.running_count,
        background=snap.background_count,
        top_first=snap.top_first,
        levels=[[ItemResponse.from_view(v) for v in level] for level in snap.levels],
        waiting=[ItemResponse.from_view(v) for v in snap.waiting],
    )


@router.get("/report", response_class=PlainTextResponse)
async def report(
    top_first: bool | None = Query(default=None),
    runtime: Runtime = Depends(get_current_runtime),
) -> PlainTextResponse:
    if top_first is None:
        top_first = get_settings().report_top_first
    text = render_snapshot(runtime.scheduler.snapshot(top_first=top_first))
    return PlainTextResponse(text)
