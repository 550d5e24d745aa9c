# selfpark/server/sse.py
"""Fan-out of telemetry frames to connected viewers over Server-Sent Events.

Viewers may follow a single run (``run_id``) or every run (``None``). A viewer
that connects mid-episode is sent the last frame of the runs it follows, so
the readout is never blank while waiting for the next tick.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import NamedTuple

from .config import settings

logger = logging.getLogger("selfpark.server")


class Frame(NamedTuple):
    event_id: str
    event_type: str
    data: str

    def encode(self) -> str:
        return f"id: {self.event_id}\nevent: {self.event_type}\ndata: {self.data}\n\n"


_CLOSE = Frame("", "_close", "")


@dataclass
class Viewer:
    viewer_id: str
    run_id: str | None
    queue: asyncio.Queue[Frame]
    connected_at: float = field(default_factory=time.monotonic)
    closed: bool = False

    def follows(self, run_id: str) -> bool:
        return self.run_id is None or self.run_id == run_id

    def close(self) -> None:
        self.closed = True
        # Wake a pending queue.get()
        with contextlib.suppress(asyncio.QueueFull):
            self.queue.put_nowait(_CLOSE)


class SSEManager:
    """Registry of viewers plus the last frame sent for each run."""

    def __init__(self, max_viewers: int | None = None, queue_size: int = 32) -> None:
        self.max_viewers = max_viewers or settings.SSE_MAX_CLIENTS
        self.queue_size = queue_size
        self._viewers: dict[str, Viewer] = {}
        self._last_frames: dict[str, Frame] = {}
        self._lock = asyncio.Lock()
        self._next_id = 0
        self.is_shutdown = False

    @property
    def client_count(self) -> int:
        return len(self._viewers)

    async def register(self, run_id: str | None = None) -> Viewer:
        async with self._lock:
            if len(self._viewers) >= self.max_viewers:
                stale = min(self._viewers.values(), key=lambda v: v.connected_at)
                self._drop(stale)
                logger.warning(f"Viewer limit reached, dropped {stale.viewer_id}")

            viewer = Viewer(uuid.uuid4().hex[:8], run_id, asyncio.Queue(maxsize=self.queue_size))
            replay = [f for run, f in self._last_frames.items() if viewer.follows(run)]
            for frame in replay[-self.queue_size :]:
                viewer.queue.put_nowait(frame)
            self._viewers[viewer.viewer_id] = viewer

        logger.info(f"Viewer {viewer.viewer_id} connected (run={run_id or '*'}, total={self.client_count})")
        return viewer

    async def unregister(self, viewer: Viewer) -> None:
        async with self._lock:
            if self._viewers.pop(viewer.viewer_id, None) is not None:
                logger.info(f"Viewer {viewer.viewer_id} disconnected (total={self.client_count})")

    async def broadcast(self, event_type: str, data: str, run_id: str = "default") -> int:
        """Queue a frame for every viewer following ``run_id``; returns how many got it."""
        self._next_id += 1
        frame = Frame(str(self._next_id), event_type, data)

        async with self._lock:
            self._last_frames[run_id] = frame
            targets = [v for v in self._viewers.values() if v.follows(run_id) and not v.closed]

        notified = 0
        for viewer in targets:
            try:
                await asyncio.wait_for(viewer.queue.put(frame), timeout=settings.SSE_BROADCAST_TIMEOUT_S)
            except asyncio.TimeoutError:
                logger.warning(f"Viewer {viewer.viewer_id} is not draining its queue, dropping it")
                async with self._lock:
                    self._drop(viewer)
                continue
            notified += 1
        return notified

    def close_all(self) -> None:
        """Stop streaming to everyone. Safe to call from a signal handler."""
        self.is_shutdown = True
        for viewer in list(self._viewers.values()):
            viewer.close()
        self._viewers.clear()

    async def shutdown(self) -> None:
        async with self._lock:
            self.close_all()
        logger.info("SSE manager stopped")

    def _drop(self, viewer: Viewer) -> None:
        # Caller holds self._lock.
        viewer.close()
        self._viewers.pop(viewer.viewer_id, None)


async def stream_frames(viewer: Viewer, manager: SSEManager) -> AsyncIterator[str]:
    """Encoded SSE frames for one viewer, with keepalive comments while idle."""
    try:
        while not viewer.closed and not manager.is_shutdown:
            try:
                frame = await asyncio.wait_for(viewer.queue.get(), timeout=settings.SSE_KEEPALIVE_S)
            except asyncio.TimeoutError:
                yield f": keepalive {int(time.time())}\n\n"
                continue
            if frame is _CLOSE:
                break
            yield frame.encode()
    finally:
        await manager.unregister(viewer)


sse_manager = SSEManager()
