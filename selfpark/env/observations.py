"""Observation encoding for ParkingEnv.

Layout (OBS_DIM = 5):
    [target_local_x, target_local_y, target_local_z, vel_x, vel_z]

The target position is expressed in the agent's local frame so the policy
sees the same input regardless of where in the lot the agent spawned. The
vertical velocity component is dropped because the task is planar.
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np
from gymnasium import spaces

from ..constants import OBS_DIM
from ..errors import ConfigurationError
from ..geometry import Pose, as_vec3


class ObsIndex(IntEnum):
    TARGET_X = 0
    TARGET_Y = 1
    TARGET_Z = 2
    VEL_X = 3
    VEL_Z = 4


assert len(ObsIndex) == OBS_DIM


def encode(agent_pose: Pose, target_pose: Pose, agent_velocity) -> np.ndarray:
    vel = as_vec3(agent_velocity)
    local_target = agent_pose.inverse_transform_point(target_pose.position)

    obs = np.empty(OBS_DIM, dtype=np.float32)
    obs[ObsIndex.TARGET_X : ObsIndex.TARGET_Z + 1] = local_target
    obs[ObsIndex.VEL_X] = vel[0]
    obs[ObsIndex.VEL_Z] = vel[2]
    return obs


def observation_space() -> spaces.Box:
    return spaces.Box(low=-np.inf, high=np.inf, shape=(OBS_DIM,), dtype=np.float32)


def check_obs_dim(expected: int | None) -> None:
    """Fail fast when a consumer expects a different observation width."""
    if expected is None:
        return
    if int(expected) != OBS_DIM:
        raise ConfigurationError(f"policy expects observations of size {expected}, env produces {OBS_DIM}")
