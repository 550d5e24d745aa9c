from __future__ import annotations

import math

import numpy as np

from ..actions import ACTION_DIM, ActionIndex
from ..env.observations import ObsIndex


class HeuristicPolicy:
    """
    Simple baseline driver working purely from the observation vector.

    Behavior:
    - Turn toward the target (bearing in the local x/z plane).
    - Drive forward when the target is ahead, reverse when it is behind.
    - Ease off the throttle inside ``slow_radius``.
    """

    def __init__(self, turn_gain: float = 2.0, slow_radius: float = 3.0, max_throttle: float = 1.0):
        self.turn_gain = float(turn_gain)
        self.slow_radius = float(slow_radius)
        self.max_throttle = float(max_throttle)

    def act(self, obs: np.ndarray) -> np.ndarray:
        obs = np.asarray(obs, dtype=np.float32)
        x = float(obs[ObsIndex.TARGET_X])
        z = float(obs[ObsIndex.TARGET_Z])
        dist = math.hypot(x, z)

        action = np.zeros(ACTION_DIM, dtype=np.float32)
        if dist < 1e-6:
            return action

        ahead = z >= 0.0
        bearing = math.atan2(x, z) if ahead else math.atan2(x, -z)
        turn = float(np.clip(self.turn_gain * bearing, -1.0, 1.0))
        if not ahead:
            # Reversing flips which way the nose swings.
            turn = -turn

        throttle = self.max_throttle * min(1.0, dist / max(1e-6, self.slow_radius))
        action[ActionIndex.MOVE] = throttle if ahead else -throttle
        action[ActionIndex.TURN] = turn
        return action
