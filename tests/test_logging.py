"""
Logging & Correlation ID Tests
================================
Validates:
- Correlation IDs are minted or echoed on every HTTP response
- Structured log lines carry app context and the correlation ID
"""

from __future__ import annotations

import json
import logging
import uuid

import pytest

from procsim.core.middleware import correlation_id_ctx


@pytest.mark.asyncio
async def test_correlation_id_generated_when_absent(client):
    resp = await client.get("/health")
    cid = resp.headers.get("X-Correlation-ID")

    assert cid is not None
    assert str(uuid.UUID(cid, version=4)) == cid


@pytest.mark.asyncio
async def test_correlation_id_propagated_from_header(client):
    custom_id = str(uuid.uuid4())
    resp = await client.get("/health", headers={"X-Correlation-ID": custom_id})
    assert resp.headers["X-Correlation-ID"] == custom_id


def test_json_log_line_has_context(settings, monkeypatch, capsys):
    monkeypatch.setenv("PROCSIM_LOG_FORMAT", "json")
    from procsim.core.config import get_settings
    from procsim.core.logging import configure_logging, get_logger, log_context

    get_settings.cache_clear()
    configure_logging()
    logger = get_logger("procsim.test")

    token = correlation_id_ctx.set("log-test-cid")
    try:
        logger.info("test.event", item_id=3)
    finally:
        correlation_id_ctx.reset(token)
    with log_context(tick=7):
        logger.info("test.in_tick")
    logger.info("test.after_tick")

    logging.getLogger().handlers.clear()

    lines = capsys.readouterr().err.strip().splitlines()[-3:]
    record, in_tick, after_tick = (json.loads(line) for line in lines)
    assert record["event"] == "test.event"
    assert record["item_id"] == 3
    assert record["app"] == "procsim"
    assert record["correlation_id"] == "log-test-cid"
    assert record["level"] == "info"
    assert record["thread_name"] == "MainThread"

    assert in_tick["tick"] == 7
    assert "correlation_id" not in in_tick
    assert "tick" not in after_tick


def test_correlation_id_context_isolation():
    assert correlation_id_ctx.get(None) is None

    token = correlation_id_ctx.set("isolated-id")
    assert correlation_id_ctx.get() == "isolated-id"
    correlation_id_ctx.reset(token)

    assert correlation_id_ctx.get(None) is None
