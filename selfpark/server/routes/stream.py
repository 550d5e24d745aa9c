"""Live telemetry stream."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from ..sse import sse_manager, stream_frames

router = APIRouter()


@router.get("/events")
async def telemetry_events(run_id: str | None = None):
    """
    Server-Sent Events for one run, or every run when ``run_id`` is omitted.

    - tick: snapshot of a running episode
    - episode_end: final snapshot of a terminated episode
    """
    viewer = await sse_manager.register(run_id)
    return StreamingResponse(
        stream_frames(viewer, sse_manager),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
