"""Expose currently loaded server config for debugging."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..config import ServerConfig

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_config(request: Request) -> ServerConfig:
    return request.app.state.server_config


@router.get("/config")
async def config(
    request: Request,
    config: ServerConfig = Depends(_get_config),
) -> dict:
    auction = config.auction
    return {
        "timer_seconds": auction.timer_seconds,
        "tick_seconds": auction.tick_seconds,
        "sale_display_seconds": auction.sale_display_seconds,
        "unsold_resume_seconds": auction.unsold_resume_seconds,
        "max_rounds": auction.max_rounds,
        "increments": [
            {"threshold": threshold, "increment": increment}
            for threshold, increment in auction.increments
        ],
        "broadcast_backend": config.broadcast.backend,
        "debounce_ms": config.broadcast.debounce_ms,
        "version": request.app.version,
    }
