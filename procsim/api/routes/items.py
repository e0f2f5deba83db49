"""
PROCSIM — Work Item API Routes
================================
Submission endpoints: the HTTP face of the dispatcher.

Usage:
    POST /api/v1/items                 — Submit one work item
    POST /api/v1/items/{item_id}/sleep — Move a ready item to the wait set
    POST /api/v1/commands              — Submit a command script
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from procsim.api.deps import get_correlation_id, get_current_runtime
from procsim.core.command_parser import TaskRequest
from procsim.core.exceptions import CommandParseError
from procsim.core.logging import get_logger
from procsim.core.runtime import Runtime
from procsim.scheduler.scheduler import SleepOutcome
from procsim.scheduler.work_item import ItemClass, Payload

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["items"])


# ── Request / Response Schemas ──────────────────────────────────────────


class ItemCreateRequest(BaseModel):
    """Request body for a single submission."""

    item_class: str = Field(
        default="foreground",
        description="'foreground'/'F' or 'background'/'B'.",
    )
    command: str = Field(..., min_length=1, max_length=128)
    args: list[str] = Field(default_factory=list)

    @field_validator("item_class")
    @classmethod
    def _known_class(cls, value: str) -> str:
        return ItemClass.parse(value).value


class ItemCreatedResponse(BaseModel):
    id: int
    item_class: str


class SleepRequest(BaseModel):
    ticks: int = Field(..., description="Positive tick count.")


class SleepResponse(BaseModel):
    item_id: int
    ticks: int
    outcome: str


class ScriptRequest(BaseModel):
    """One command per line; a leading '&' requests background execution."""

    script: str


class ScriptResponse(BaseModel):
    ids: list[int]


# ── Routes ──────────────────────────────────────────────────────────────


@router.post("/items", response_model=ItemCreatedResponse, status_code=201)
async def submit_item(
    body: ItemCreateRequest,
    runtime: Runtime = Depends(get_current_runtime),
    correlation_id: str | None = Depends(get_correlation_id),
) -> ItemCreatedResponse:
    request = TaskRequest(
        item_class=ItemClass(body.item_class),
        payload=Payload(command=body.command, args=tuple(body.args)),
    )
    item_id = runtime.dispatcher.submit_request(request)
    logger.info(
        "api.item_submitted",
        item_id=item_id,
        correlation_id=correlation_id,
    )
    return ItemCreatedResponse(id=item_id, item_class=body.item_class)


@router.post("/items/{item_id}/sleep", response_model=SleepResponse)
async def sleep_item(
    item_id: int,
    body: SleepRequest,
    runtime: Runtime = Depends(get_current_runtime),
) -> SleepResponse:
    """
    Put a ready item to sleep.

    404 when the id is not ready, 422 when ``ticks`` is not positive.
    """
    result = runtime.scheduler.sleep(item_id, body.ticks)
    if result.outcome is SleepOutcome.UNKNOWN_ID:
        raise HTTPException(status_code=404, detail=result.error)
    if result.outcome is SleepOutcome.INVALID_DURATION:
        raise HTTPException(status_code=422, detail=result.error)
    return SleepResponse(
        item_id=item_id, ticks=body.ticks, outcome=result.outcome.value
    )


@router.post("/commands", response_model=ScriptResponse, status_code=201)
async def submit_commands(
    body: ScriptRequest,
    runtime: Runtime = Depends(get_current_runtime),
) -> ScriptResponse:
    """Parse and submit a whole script; a parse error submits nothing (400)."""
    try:
        ids = runtime.dispatcher.submit_script(body.script)
    except CommandParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None
    return ScriptResponse(ids=ids)
