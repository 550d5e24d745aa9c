"""Telemetry push/read endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from ..models import PushResponse, TelemetryPayload
from ..sse import sse_manager
from ..telemetry_store import telemetry_store

logger = logging.getLogger("selfpark.server")

router = APIRouter(prefix="/api/telemetry", tags=["telemetry"])


@router.post("", response_model=PushResponse)
async def push_telemetry(payload: TelemetryPayload) -> PushResponse:
    """Receive a snapshot from a running env and fan it out to viewers."""
    prev = telemetry_store.latest(payload.run_id)
    restarted = prev is not None and payload.episode_id == 1 and prev.episode_id > 1
    if restarted:
        # Env processes number episodes from 1, so this is a fresh process on the same run.
        logger.info(f"Run {payload.run_id} restarted (was at episode {prev.episode_id})")
    elif prev is not None and payload.episode_id < prev.episode_id:
        raise HTTPException(
            status_code=409,
            detail=f"episode {payload.episode_id} is older than current episode {prev.episode_id}",
        )
    telemetry_store.put(payload)

    event_type = "episode_end" if payload.phase == "terminated" else "tick"
    notified = await sse_manager.broadcast(event_type, payload.model_dump_json(), run_id=payload.run_id)
    if payload.phase == "terminated":
        logger.info(
            f"Run {payload.run_id} episode {payload.episode_id} ended after {payload.step_count} steps "
            f"(reward={payload.cumulative_reward:.2f}, viewers={notified})"
        )
    return PushResponse(
        status="ok",
        run_id=payload.run_id,
        episode_id=payload.episode_id,
        clients_notified=notified,
    )


@router.get("/latest")
def get_latest(run_id: str = "default") -> dict[str, Any]:
    """Most recent snapshot for a run."""
    latest = telemetry_store.latest(run_id)
    if latest is None:
        return {"active": False}
    return {"active": True, **latest.model_dump()}


@router.get("/episodes")
def get_finished_episodes(run_id: str | None = None, limit: int = 50) -> list[dict[str, Any]]:
    """Recently finished episodes, newest last."""
    items = telemetry_store.finished(run_id)
    return [p.model_dump() for p in items[-limit:]] if limit > 0 else []


@router.delete("")
def clear_telemetry() -> dict[str, str]:
    telemetry_store.clear()
    return {"status": "ok"}
