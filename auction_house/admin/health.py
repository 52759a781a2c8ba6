"""Liveness of the command consumer and the broadcast sink."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    state = request.app.state
    started = getattr(state, "start_time", None)
    uptime = int((datetime.now(timezone.utc) - started).total_seconds()) if started else 0
    runner = state.runner
    broadcaster = state.broadcaster
    live = runner.engine.live_item
    return {
        # A dead consumer means commands would hang forever.
        "status": "healthy" if runner.alive else "degraded",
        "uptime_seconds": uptime,
        "version": request.app.version,
        "engine_state": runner.engine.state.value,
        "live_item_id": live.item_id if live else None,
        "observers": broadcaster.subscriber_count,
        "snapshots_published": broadcaster.published,
    }
