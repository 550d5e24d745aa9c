from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np
from gymnasium import spaces

from .geometry import FORWARD, UP, quat_rotate

if TYPE_CHECKING:
    from .config import ParkingConfig


class ActionIndex(IntEnum):
    MOVE = 0  # throttle, forward/back
    TURN = 1  # steering, yaw rate


ACTION_DIM = len(ActionIndex)


@dataclass(frozen=True)
class ActionCommand:
    """Continuous (move, turn) command.

    Both signals are expected in [-1, 1]; that range is the policy's contract
    and is not enforced here.
    """

    move_signal: float = 0.0
    turn_signal: float = 0.0

    @classmethod
    def from_array(cls, action) -> ActionCommand:
        a = np.asarray(action, dtype=np.float64).reshape(-1)
        if a.size != ACTION_DIM:
            raise ValueError(f"action has size {a.size}, expected {ACTION_DIM}")
        if not np.all(np.isfinite(a)):
            raise ValueError(f"action contains non-finite values: {a.tolist()}")
        return cls(move_signal=float(a[ActionIndex.MOVE]), turn_signal=float(a[ActionIndex.TURN]))

    def as_array(self) -> np.ndarray:
        return np.array([self.move_signal, self.turn_signal], dtype=np.float32)


@dataclass(frozen=True)
class ControlSignal:
    """Physical controls for the physics collaborator to integrate."""

    force: np.ndarray
    angular_delta: np.ndarray  # axis * degrees for this tick

    @property
    def turn_degrees(self) -> float:
        return float(np.dot(self.angular_delta, UP))


def interpret(command: ActionCommand, agent_rotation: np.ndarray, config: ParkingConfig) -> ControlSignal:
    """Map a command to (force, rotation) without applying either."""
    forward = quat_rotate(agent_rotation, FORWARD)
    force = forward * command.move_signal * config.move_speed
    angular_delta = UP * command.turn_signal * config.turn_speed * config.tick_duration
    return ControlSignal(force=force, angular_delta=angular_delta)


def action_space() -> spaces.Box:
    return spaces.Box(low=-1.0, high=1.0, shape=(ACTION_DIM,), dtype=np.float32)
