from __future__ import annotations

import numpy as np

from ..actions import ActionCommand
from ..constants import AXIS_HORIZONTAL, AXIS_VERTICAL
from ..env.collaborators import InputDevice


class ManualPolicy:
    """Drives from an input device: "Vertical" is throttle, "Horizontal" is steering."""

    def __init__(self, device: InputDevice):
        self.device = device

    def command(self) -> ActionCommand:
        return ActionCommand(
            move_signal=float(self.device.read_axis(AXIS_VERTICAL)),
            turn_signal=float(self.device.read_axis(AXIS_HORIZONTAL)),
        )

    def act(self, obs: np.ndarray) -> np.ndarray:
        return self.command().as_array()
