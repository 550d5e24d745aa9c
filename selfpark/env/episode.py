from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Phase(str, Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


class TerminationReason(str, Enum):
    COLLISION = "collision"
    SUCCESS = "success"
    TIMEOUT = "timeout"  # only when ParkingConfig.max_steps is set


@dataclass
class EpisodeState:
    """Identity and progress of the current episode.

    Owned by ParkingEnv; everything else gets read-only snapshots.
    """

    episode_id: int = 1
    step_count: int = 0
    cumulative_reward: float = 0.0
    phase: Phase = Phase.RUNNING
    termination_reason: TerminationReason | None = None

    @property
    def running(self) -> bool:
        return self.phase is Phase.RUNNING

    def begin_next(self) -> None:
        self.episode_id += 1
        self.step_count = 0
        self.cumulative_reward = 0.0
        self.phase = Phase.RUNNING
        self.termination_reason = None

    def terminate(self, reason: TerminationReason) -> None:
        self.phase = Phase.TERMINATED
        self.termination_reason = reason
