"""Rigid-body pose math.

Positions are 3-vectors with y as the vertical axis; the agent drives in the
x/z plane. Rotations are unit quaternions stored as (w, x, y, z). Angles passed
to the helpers here are in degrees to match the physics collaborator's
``rotate`` call.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

UP = np.array([0.0, 1.0, 0.0], dtype=np.float64)
FORWARD = np.array([0.0, 0.0, 1.0], dtype=np.float64)
IDENTITY_QUAT = np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)


def as_vec3(v) -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64).reshape(-1)
    if arr.size != 3:
        raise ValueError(f"expected a 3-vector, got shape {np.shape(v)}")
    return arr.copy()


def quat_normalize(q) -> np.ndarray:
    q = np.asarray(q, dtype=np.float64).reshape(4)
    n = float(np.linalg.norm(q))
    if n < 1e-12:
        raise ValueError("quaternion has zero length")
    return q / n


def quat_conjugate(q: np.ndarray) -> np.ndarray:
    w, x, y, z = q
    return np.array([w, -x, -y, -z], dtype=np.float64)


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product ``a * b`` (apply ``b`` first, then ``a``)."""
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ],
        dtype=np.float64,
    )


def quat_rotate(q: np.ndarray, v) -> np.ndarray:
    """Rotate vector ``v`` by unit quaternion ``q``."""
    v = np.asarray(v, dtype=np.float64)
    u = np.asarray(q[1:], dtype=np.float64)
    w = float(q[0])
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def quat_from_axis_angle(axis, angle_deg: float) -> np.ndarray:
    axis = as_vec3(axis)
    n = float(np.linalg.norm(axis))
    if n < 1e-12:
        return IDENTITY_QUAT.copy()
    axis = axis / n
    half = math.radians(angle_deg) * 0.5
    s = math.sin(half)
    return np.array([math.cos(half), axis[0] * s, axis[1] * s, axis[2] * s], dtype=np.float64)


def quat_from_yaw(yaw_deg: float) -> np.ndarray:
    """Rotation about world up. Positive yaw turns +z toward +x."""
    return quat_from_axis_angle(UP, yaw_deg)


@dataclass(frozen=True)
class Pose:
    """Position + orientation snapshot of a scene object."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    rotation: np.ndarray = field(default_factory=lambda: IDENTITY_QUAT.copy())

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_vec3(self.position))
        object.__setattr__(self, "rotation", quat_normalize(self.rotation))

    @classmethod
    def from_yaw(cls, position, yaw_deg: float = 0.0) -> Pose:
        return cls(position=position, rotation=quat_from_yaw(yaw_deg))

    @property
    def forward(self) -> np.ndarray:
        return quat_rotate(self.rotation, FORWARD)

    def transform_point(self, point) -> np.ndarray:
        """Local -> world."""
        return quat_rotate(self.rotation, as_vec3(point)) + self.position

    def inverse_transform_point(self, point) -> np.ndarray:
        """World -> local (translate, then rotate by the inverse orientation)."""
        return quat_rotate(quat_conjugate(self.rotation), as_vec3(point) - self.position)

    def transformed_by(self, rotation, translation) -> Pose:
        """Apply a rigid motion (rotate about the world origin, then translate)."""
        rotation = quat_normalize(rotation)
        return Pose(
            position=quat_rotate(rotation, self.position) + as_vec3(translation),
            rotation=quat_multiply(rotation, self.rotation),
        )
