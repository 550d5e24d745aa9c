"""Pydantic models for API requests/responses."""

from typing import Literal

from pydantic import BaseModel, Field


class TelemetryPayload(BaseModel):
    """One telemetry snapshot pushed by a running env."""

    episode_id: int = Field(ge=1)
    step_count: int = Field(ge=0)
    cumulative_reward: float
    phase: Literal["running", "terminated"] = "running"
    run_id: str = "default"


class PushResponse(BaseModel):
    """Response to a telemetry push."""

    status: str
    run_id: str
    episode_id: int
    clients_notified: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    clients: int
    runs: int
    uptime_s: float
