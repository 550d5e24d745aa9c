"""Per-tick telemetry: episode id, step count, cumulative reward.

Sinks are read-only consumers. ParkingEnv hands each one a snapshot once per
step; a sink never mutates episode state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

import requests

if TYPE_CHECKING:
    from .episode import EpisodeState

logger = logging.getLogger("selfpark.env")


@dataclass(frozen=True)
class TelemetrySnapshot:
    episode_id: int
    step_count: int
    cumulative_reward: float
    phase: str

    @classmethod
    def from_state(cls, state: EpisodeState) -> TelemetrySnapshot:
        return cls(
            episode_id=state.episode_id,
            step_count=state.step_count,
            cumulative_reward=float(state.cumulative_reward),
            phase=state.phase.value,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def format_telemetry(snapshot: TelemetrySnapshot) -> str:
    return "\n".join(
        [
            f"Episode: {snapshot.episode_id}",
            f"Steps: {snapshot.step_count}",
            f"Reward: {snapshot.cumulative_reward:.2f}",
        ]
    )


class TextTelemetry:
    """Formats each snapshot as text and hands it to ``display``."""

    def __init__(self, display: Callable[[str], None] | None = None) -> None:
        self.display = display
        self.last_text: str | None = None

    def publish(self, snapshot: TelemetrySnapshot) -> None:
        self.last_text = format_telemetry(snapshot)
        if self.display is not None:
            self.display(self.last_text)


class LoggingTelemetry:
    """Logs one line every ``every_n_steps`` steps."""

    def __init__(self, every_n_steps: int = 100, level: int = logging.INFO) -> None:
        self.every_n_steps = max(1, int(every_n_steps))
        self.level = level

    def publish(self, snapshot: TelemetrySnapshot) -> None:
        if snapshot.step_count % self.every_n_steps != 0:
            return
        logger.log(self.level, format_telemetry(snapshot).replace("\n", " | "))


class BroadcastTelemetry:
    """POSTs snapshots to a running telemetry server (``python -m selfpark.server``).

    Network failures and rejected pushes are logged and dropped; the episode
    loop never waits on the viewer.
    """

    def __init__(
        self, url: str, run_id: str = "default", every_n_steps: int = 10, timeout_s: float = 1.0
    ) -> None:
        self.url = url
        self.run_id = run_id
        self.every_n_steps = max(1, int(every_n_steps))
        self.timeout_s = float(timeout_s)
        self._session = requests.Session()

    def publish(self, snapshot: TelemetrySnapshot) -> None:
        # Terminal snapshots always go out so the viewer sees every episode end.
        if snapshot.step_count % self.every_n_steps != 0 and snapshot.phase == "running":
            return
        payload = {**snapshot.to_dict(), "run_id": self.run_id}
        try:
            response = self._session.post(self.url, json=payload, timeout=self.timeout_s)
        except requests.RequestException as e:
            logger.warning(f"Failed to push telemetry: {e}")
            return
        if not response.ok:
            logger.warning(
                f"Telemetry push rejected for run {self.run_id} episode {snapshot.episode_id}: "
                f"{response.status_code} {response.reason}"
            )

    def close(self) -> None:
        self._session.close()
