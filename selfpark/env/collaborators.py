"""Interfaces ParkingEnv expects from the host simulation.

None of these are implemented in selfpark. The physics host owns collision
detection and integration; rendering and input are optional.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import numpy as np

    from ..constants import Color
    from ..geometry import Pose
    from .telemetry import TelemetrySnapshot


@runtime_checkable
class PhysicsBackend(Protocol):
    def get_pose(self, obj: str) -> Pose: ...

    def get_velocity(self, obj: str) -> np.ndarray: ...

    def set_velocity(self, obj: str, velocity: np.ndarray) -> None: ...

    def set_angular_velocity(self, obj: str, velocity: np.ndarray) -> None: ...

    def set_pose(self, obj: str, pose: Pose) -> None: ...

    def apply_force(self, obj: str, force: np.ndarray) -> None: ...

    def rotate(self, obj: str, axis: np.ndarray, angle_deg: float) -> None: ...


@runtime_checkable
class Renderer(Protocol):
    def set_color(self, surface: str, color: Color) -> None: ...

    def get_color(self, surface: str) -> Color: ...


@runtime_checkable
class TelemetrySink(Protocol):
    def publish(self, snapshot: TelemetrySnapshot) -> None: ...


@runtime_checkable
class InputDevice(Protocol):
    def read_axis(self, name: str) -> float: ...


@runtime_checkable
class Policy(Protocol):
    def act(self, obs: np.ndarray) -> np.ndarray: ...
