"""Transient visual feedback (the "flash") and its delayed revert.

A flash writes a color to a rendering surface and schedules a revert to the
surface's default color after a fixed real-time delay. The delay runs on the
scheduler's wall clock, so simulation time scale never affects it.

Scheduling goes through anything with ``call_later(delay, callback)`` that
returns a handle with ``cancel()``. An ``asyncio`` event loop fits as-is; in
that case ticks and reverts are serialized on the loop. ``ThreadScheduler``
runs reverts on timer threads, so the flag cell is guarded by a lock.

A new episode does not cancel pending reverts. Each revert targets the default
color captured when the flash was scheduled; overlapping flashes race and the
last one to fire wins.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from ..constants import FLASH_DELAY_S, GREEN, RED, Color

if TYPE_CHECKING:
    from .collaborators import Renderer

logger = logging.getLogger("selfpark.env")


class FlagKind(str, Enum):
    NORMAL = "normal"
    ALERT = "alert"
    SUCCESS = "success"


@dataclass(frozen=True)
class VisualFlag:
    kind: FlagKind
    color: Color

    @classmethod
    def normal(cls, color: Color) -> VisualFlag:
        return cls(FlagKind.NORMAL, color)

    @classmethod
    def alert(cls, color: Color = RED) -> VisualFlag:
        return cls(FlagKind.ALERT, color)

    @classmethod
    def success(cls, color: Color = GREEN) -> VisualFlag:
        return cls(FlagKind.SUCCESS, color)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


def default_scheduler() -> Scheduler:
    """Use the running event loop if there is one, else timer threads."""
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return ThreadScheduler()


@dataclass(eq=False)
class FlashHandle:
    """A scheduled revert. Cancelling before it fires leaves the flash color in place."""

    surface: str
    flag: VisualFlag
    revert_to: Color
    episode_id: int | None = None
    fired: bool = False
    cancelled: bool = False
    _timer: TimerHandle | None = field(default=None, repr=False)

    def cancel(self) -> None:
        if self.fired or self.cancelled:
            return
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()


class FeedbackTimer:
    def __init__(
        self,
        renderer: Renderer | None,
        scheduler: Scheduler | None = None,
        delay_s: float = FLASH_DELAY_S,
    ) -> None:
        self.renderer = renderer
        self.scheduler = scheduler or default_scheduler()
        self.delay_s = float(delay_s)
        self._lock = threading.Lock()
        self._flags: dict[str, VisualFlag] = {}
        self._defaults: dict[str, Color] = {}
        self._pending: list[FlashHandle] = []

    def capture_defaults(self, *surfaces: str) -> None:
        """Record each surface's current color as its NORMAL color."""
        if self.renderer is None:
            return
        with self._lock:
            for surface in surfaces:
                color = tuple(self.renderer.get_color(surface))
                self._defaults[surface] = color
                self._flags[surface] = VisualFlag.normal(color)

    def default_color(self, surface: str) -> Color | None:
        return self._defaults.get(surface)

    def flag(self, surface: str) -> VisualFlag | None:
        with self._lock:
            return self._flags.get(surface)

    def set_flag(self, surface: str, flag: VisualFlag) -> None:
        if self.renderer is None:
            return
        with self._lock:
            self._write(surface, flag)

    def restore(self, surface: str) -> None:
        """Put a surface back to its captured default immediately."""
        default = self._defaults.get(surface)
        if default is None:
            return
        self.set_flag(surface, VisualFlag.normal(default))

    def flash(self, surface: str, flag: VisualFlag, episode_id: int | None = None) -> FlashHandle | None:
        if self.renderer is None:
            return None
        with self._lock:
            revert_to = self._defaults.get(surface)
            if revert_to is None:
                revert_to = tuple(self.renderer.get_color(surface))
                self._defaults[surface] = revert_to
            self._write(surface, flag)
            handle = FlashHandle(surface=surface, flag=flag, revert_to=revert_to, episode_id=episode_id)
            self._pending.append(handle)
        handle._timer = self.scheduler.call_later(self.delay_s, lambda: self._revert(handle))
        logger.debug(f"Flash {flag.kind.value} on {surface} for {self.delay_s:.2f}s (episode {episode_id})")
        return handle

    @property
    def pending(self) -> tuple[FlashHandle, ...]:
        with self._lock:
            return tuple(self._pending)

    def cancel_all(self) -> None:
        with self._lock:
            handles = list(self._pending)
            self._pending.clear()
        for handle in handles:
            handle.cancel()

    def _revert(self, handle: FlashHandle) -> None:
        with self._lock:
            if handle in self._pending:
                self._pending.remove(handle)
            if handle.cancelled:
                return
            handle.fired = True
            self._write(handle.surface, VisualFlag.normal(handle.revert_to))

    def _write(self, surface: str, flag: VisualFlag) -> None:
        # Caller holds self._lock.
        self._flags[surface] = flag
        assert self.renderer is not None
        self.renderer.set_color(surface, flag.color)
