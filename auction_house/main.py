from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect

from .admin import config as admin_config
from .admin import health as admin_health
from .admin import roster as admin_roster
from .admin import stats as admin_stats
from .auction.fanout import SnapshotBroadcaster
from .auction.runner import AuctionRunner
from .catalog.registry import CatalogRegistry
from .config import ServerConfig, get_catalog_path, get_server_config
from .transport.canonical_json import canonical_dumps
from .validation.validator import SchemaRegistry, get_schema_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    server_config = get_server_config()
    schema_registry = get_schema_registry()
    catalog = CatalogRegistry.from_path(get_catalog_path(), schema_registry)
    broadcast = server_config.broadcast
    broadcaster = SnapshotBroadcaster(
        backend=broadcast.backend,
        debounce_ms=broadcast.debounce_ms,
        options=broadcast.options,
    )
    runner = AuctionRunner(catalog, server_config.auction, broadcaster)
    await runner.start()

    app.state.server_config = server_config
    app.state.schema_registry = schema_registry
    app.state.catalog = catalog
    app.state.broadcaster = broadcaster
    app.state.runner = runner
    app.state.start_time = datetime.now(timezone.utc)

    yield

    await runner.stop()
    await broadcaster.close()


app = FastAPI(
    title="Auction House",
    version="1.0.0",
    docs_url="/docs",
    lifespan=lifespan,
)

app.include_router(admin_health.router)
app.include_router(admin_stats.router)
app.include_router(admin_config.router)
app.include_router(admin_roster.router)


# Dependency helpers ---------------------------------------------------------


def get_server_settings(request: Request) -> ServerConfig:
    return request.app.state.server_config


def get_schema_service(request: Request) -> SchemaRegistry:
    return request.app.state.schema_registry


def get_runner(request: Request) -> AuctionRunner:
    return request.app.state.runner


# Routes ---------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root(settings: ServerConfig = Depends(get_server_settings)) -> dict[str, Any]:
    return {
        "service": "auction-house",
        "version": app.version,
        "auction": {
            "timer_seconds": settings.auction.timer_seconds,
            "sale_display_seconds": settings.auction.sale_display_seconds,
            "broadcast_backend": settings.broadcast.backend,
        },
    }


@app.get("/auction/ping", tags=["auction"])
async def ping() -> dict[str, Any]:
    return {"status": "ok", "version": app.version}


@app.get("/auction/state", tags=["auction"])
async def auction_state(runner: AuctionRunner = Depends(get_runner)) -> dict[str, Any]:
    return runner.snapshot().to_dict()


@app.post("/auction/start", tags=["auction"])
async def start_auction(runner: AuctionRunner = Depends(get_runner)) -> dict[str, Any]:
    return await _dispatch(runner, "start")


@app.post("/auction/pause", tags=["auction"])
async def pause_auction(runner: AuctionRunner = Depends(get_runner)) -> dict[str, Any]:
    return await _dispatch(runner, "pause")


@app.post("/auction/bids", tags=["auction"])
async def place_bid(
    payload: dict[str, Any] = Body(...),
    runner: AuctionRunner = Depends(get_runner),
    schemas: SchemaRegistry = Depends(get_schema_service),
) -> dict[str, Any]:
    problems = schemas.errors("place_bid", payload)
    if problems:
        raise HTTPException(status_code=422, detail=problems)
    return await _dispatch(runner, "place_bid", payload["team_id"])


@app.post("/auction/bids/undo", tags=["auction"])
async def undo_bid(runner: AuctionRunner = Depends(get_runner)) -> dict[str, Any]:
    return await _dispatch(runner, "undo_bid")


@app.post("/auction/sell", tags=["auction"])
async def sell(runner: AuctionRunner = Depends(get_runner)) -> dict[str, Any]:
    return await _dispatch(runner, "sell")


@app.post("/auction/unsold", tags=["auction"])
async def mark_unsold(runner: AuctionRunner = Depends(get_runner)) -> dict[str, Any]:
    return await _dispatch(runner, "mark_unsold")


@app.post("/auction/skip", tags=["auction"])
async def skip(runner: AuctionRunner = Depends(get_runner)) -> dict[str, Any]:
    return await _dispatch(runner, "skip")


@app.post("/auction/reset", tags=["auction"])
async def reset(runner: AuctionRunner = Depends(get_runner)) -> dict[str, Any]:
    return await _dispatch(runner, "reset")


@app.websocket("/auction/stream")
async def stream(websocket: WebSocket) -> None:
    """Push every published snapshot to a read-only observer."""
    await websocket.accept()
    runner: AuctionRunner = websocket.app.state.runner
    broadcaster: SnapshotBroadcaster = websocket.app.state.broadcaster
    queue = broadcaster.subscribe()
    try:
        await websocket.send_bytes(canonical_dumps(runner.snapshot().to_dict()))
        while True:
            payload = await queue.get()
            await websocket.send_bytes(payload)
    except WebSocketDisconnect:
        logger.info("Observer disconnected")
    finally:
        broadcaster.unsubscribe(queue)


async def _dispatch(runner: AuctionRunner, command: str, *args: Any) -> dict[str, Any]:
    result = await runner.submit(command, *args)
    if not result.accepted:
        logger.info(f"Command {command} rejected: {result.reason.value if result.reason else 'unknown'}")
    return result.to_dict()
