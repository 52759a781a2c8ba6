"""Snapshot distribution to observers with trailing-edge coalescing."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from redis import asyncio as aioredis

from ..transport.canonical_json import canonical_dumps
from .models import AuctionSnapshot

logger = logging.getLogger(__name__)


class _PublisherProtocol:
    async def publish(self, payload: bytes) -> None:  # pragma: no cover - protocol
        raise NotImplementedError

    async def close(self) -> None:
        return None


class _LocalPublisher(_PublisherProtocol):
    async def publish(self, payload: bytes) -> None:
        logger.info("[local-broadcast] snapshot delivered bytes=%d", len(payload))


class _RedisPublisher(_PublisherProtocol):
    def __init__(self, options: Mapping[str, Any]) -> None:
        url = options.get("url")
        if not url:
            raise ValueError("redis broadcast backend requires url")
        self._channel = options.get("channel", "auction:state")
        self._redis = aioredis.from_url(url)

    async def publish(self, payload: bytes) -> None:
        await self._redis.publish(self._channel, payload)

    async def close(self) -> None:
        await self._redis.aclose()


class SnapshotBroadcaster:
    """Fire-and-forget sink sitting downstream of the engine.

    The first snapshot after a quiet period opens a window of ``debounce_ms``;
    snapshots arriving inside the window replace the pending one and only the
    latest is published when it closes. Publish failures are logged and
    dropped.
    """

    def __init__(
        self,
        backend: str = "local",
        *,
        debounce_ms: int = 150,
        options: Mapping[str, Any] | None = None,
        subscriber_buffer: int = 16,
    ) -> None:
        options = options or {}
        if backend == "redis":
            self._publisher: _PublisherProtocol = _RedisPublisher(options)
        elif backend == "local":
            self._publisher = _LocalPublisher()
        else:
            raise ValueError(f"unknown broadcast backend {backend}")
        self.backend = backend
        self._debounce = debounce_ms / 1000
        self._subscriber_buffer = subscriber_buffer
        self._subscribers: set[asyncio.Queue[bytes]] = set()
        self._latest: AuctionSnapshot | None = None
        self._flush_task: asyncio.Task | None = None
        self.published = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[bytes]:
        queue: asyncio.Queue[bytes] = asyncio.Queue(maxsize=self._subscriber_buffer)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[bytes]) -> None:
        self._subscribers.discard(queue)

    def notify(self, snapshot: AuctionSnapshot) -> None:
        self._latest = snapshot
        if self._flush_task is None or self._flush_task.done():
            self._flush_task = asyncio.create_task(self._flush_later())

    async def flush(self) -> None:
        snapshot, self._latest = self._latest, None
        if snapshot is None:
            return
        try:
            payload = canonical_dumps(snapshot.to_dict())
            for queue in list(self._subscribers):
                if queue.full():
                    # Slow observers only need the newest state.
                    queue.get_nowait()
                queue.put_nowait(payload)
            await self._publisher.publish(payload)
        except Exception as exc:
            logger.error(f"Snapshot publish failed (version={snapshot.version}): {exc}", exc_info=True)
            return
        self.published += 1

    async def close(self) -> None:
        if self._flush_task is not None and not self._flush_task.done():
            self._flush_task.cancel()
            try:
                await self._flush_task
            except asyncio.CancelledError:
                pass
        await self._publisher.close()

    async def _flush_later(self) -> None:
        await asyncio.sleep(self._debounce)
        await self.flush()
