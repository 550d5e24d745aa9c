from __future__ import annotations

from dataclasses import dataclass, field

from .constants import FLASH_DELAY_S
from .errors import ConfigurationError


@dataclass(frozen=True)
class RewardWeights:
    """Reward increments.

    The per-tick time penalty is applied on every running step; the other two
    are one-shot terminal deltas. No intermediate shaping.
    """

    time_penalty: float = -0.001
    collision_penalty: float = -1.0
    success_bonus: float = 2.0


@dataclass(frozen=True)
class ObjectHandles:
    """Opaque ids passed to the physics collaborator."""

    agent: str = "agent"
    target: str = "target"
    spawn: str = "spawn"


@dataclass(frozen=True)
class ParkingConfig:
    move_speed: float = 30.0
    turn_speed: float = 100.0  # degrees per second
    tick_duration: float = 0.02  # fixed physics step (s)
    rewards: RewardWeights = field(default_factory=RewardWeights)
    handles: ObjectHandles = field(default_factory=ObjectHandles)
    flash_delay_s: float = FLASH_DELAY_S
    # None keeps episodes unbounded; an int truncates after that many steps.
    max_steps: int | None = None
    # False keeps the episode running on wall contact (penalty still applies).
    terminate_on_collision: bool = True
    # Stepping a terminated episode starts the next one instead of raising.
    auto_reset: bool = True
    # Input width of the consuming policy; checked against OBS_DIM at env init.
    expected_obs_dim: int | None = None

    def __post_init__(self) -> None:
        if self.tick_duration <= 0.0:
            raise ConfigurationError(f"tick_duration must be > 0, got {self.tick_duration}")
        if self.flash_delay_s < 0.0:
            raise ConfigurationError(f"flash_delay_s must be >= 0, got {self.flash_delay_s}")
        if self.max_steps is not None and self.max_steps < 1:
            raise ConfigurationError(f"max_steps must be >= 1 or None, got {self.max_steps}")
