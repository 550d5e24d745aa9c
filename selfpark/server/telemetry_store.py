# selfpark/server/telemetry_store.py
"""In-memory store of the latest snapshot per run and recent finished episodes."""

from __future__ import annotations

import logging
import threading
from collections import deque

from .config import settings
from .models import TelemetryPayload

logger = logging.getLogger("selfpark.server")


class TelemetryStore:
    """Thread-safe holder for live telemetry."""

    def __init__(self, history_max: int | None = None) -> None:
        self._lock = threading.Lock()
        self._latest: dict[str, TelemetryPayload] = {}
        self._finished: deque[TelemetryPayload] = deque(maxlen=history_max or settings.EPISODE_HISTORY_MAX)

    def put(self, payload: TelemetryPayload) -> None:
        with self._lock:
            prev = self._latest.get(payload.run_id)
            self._latest[payload.run_id] = payload
            # Record each episode once, on its first terminated snapshot.
            if payload.phase == "terminated" and not (
                prev is not None and prev.phase == "terminated" and prev.episode_id == payload.episode_id
            ):
                self._finished.append(payload)
                logger.debug(
                    f"Run {payload.run_id} episode {payload.episode_id} finished "
                    f"reward={payload.cumulative_reward:.3f}"
                )

    def latest(self, run_id: str = "default") -> TelemetryPayload | None:
        with self._lock:
            return self._latest.get(run_id)

    def finished(self, run_id: str | None = None) -> list[TelemetryPayload]:
        with self._lock:
            items = list(self._finished)
        if run_id is None:
            return items
        return [p for p in items if p.run_id == run_id]

    def clear(self) -> None:
        with self._lock:
            self._latest.clear()
            self._finished.clear()

    def __len__(self) -> int:
        return len(self._latest)


# Global instance
telemetry_store = TelemetryStore()
