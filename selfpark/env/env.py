from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence
from typing import Any

import numpy as np

from ..actions import ACTION_DIM, ActionCommand, action_space, interpret
from ..config import ParkingConfig
from ..agents.manual import ManualPolicy
from ..constants import OBS_DIM, SURFACE_CAR, SURFACE_FLOOR
from ..errors import EpisodeStateError
from ..geometry import UP
from .collaborators import InputDevice, PhysicsBackend, Renderer, TelemetrySink
from .episode import EpisodeState, Phase, TerminationReason
from .events import ContactKind, ParkingEvent, event_from_contact
from .feedback import FeedbackTimer, FlashHandle, Scheduler, VisualFlag
from .observations import check_obs_dim, encode, observation_space
from .rewards import RewardModel
from .telemetry import TelemetrySnapshot

logger = logging.getLogger("selfpark.env")


class ParkingEnv:
    """
    Single-agent parking loop with a gymnasium-like API:

      obs, info = env.reset()
      obs, reward, terminated, truncated, info = env.step(action)

    action: float32 [move, turn], nominally in [-1, 1].
    obs: float32 [target_local_x, target_local_y, target_local_z, vel_x, vel_z].

    The host simulation owns physics. It reports contacts through
    ``on_collision_enter`` / ``on_collision_exit`` / ``on_trigger_enter``.
    Contacts reported while ``step()`` runs are handled at the end of that
    step; contacts reported between steps are handled immediately, and the
    resulting terminal transition is returned by the next ``step()`` call
    without applying its action. The step after that starts a new episode
    (``auto_reset``) or raises ``EpisodeStateError``.

    Termination:
    - "Wall" collision: collision penalty, car turns ALERT, floor flashes red
    - "ParkingSpot" trigger: success bonus, floor flashes green
    - optional ``max_steps`` cap: truncation, no reward delta, no flash
    """

    OBS_DIM = OBS_DIM
    ACTION_DIM = ACTION_DIM

    def __init__(
        self,
        physics: PhysicsBackend,
        config: ParkingConfig | None = None,
        *,
        renderer: Renderer | None = None,
        telemetry: TelemetrySink | Sequence[TelemetrySink] | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.config = config or ParkingConfig()
        check_obs_dim(self.config.expected_obs_dim)

        self.physics = physics
        self.renderer = renderer
        if telemetry is None:
            self.telemetry: list[TelemetrySink] = []
        elif isinstance(telemetry, Sequence):
            self.telemetry = list(telemetry)
        else:
            self.telemetry = [telemetry]

        self.observation_space = observation_space()
        self.action_space = action_space()

        self.rewards = RewardModel(self.config.rewards)
        self.feedback = FeedbackTimer(renderer, scheduler, delay_s=self.config.flash_delay_s)
        self.feedback.capture_defaults(SURFACE_CAR, SURFACE_FLOOR)

        self._state: EpisodeState | None = None
        self._events: deque[ParkingEvent] = deque()
        self._in_step = False
        self._unreported_reward = 0.0
        self._outcome_reported = False
        self.last_flash: FlashHandle | None = None
        self.last_outcome: dict[str, Any] | None = None

    # ------------------------------------------------------------------
    # Episode lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> EpisodeState:
        if self._state is None:
            raise EpisodeStateError("no episode yet; call reset() first")
        return self._state

    def reset(self, seed: int | None = None) -> tuple[np.ndarray, dict[str, Any]]:
        # seed is accepted for API parity; spawn placement belongs to the host.
        if self._state is None:
            self._state = EpisodeState()
        else:
            self._state.begin_next()
        self.rewards.reset()
        self._events.clear()
        self._unreported_reward = 0.0
        self._outcome_reported = False
        self.last_flash = None

        h = self.config.handles
        zero = np.zeros(3, dtype=np.float64)
        self.physics.set_velocity(h.agent, zero)
        self.physics.set_angular_velocity(h.agent, zero)
        self.feedback.restore(SURFACE_CAR)
        self.physics.set_pose(h.agent, self.physics.get_pose(h.spawn))

        logger.info(f"Episode {self._state.episode_id} started")
        self._publish()
        return self.observe(), self._info()

    def step(self, action) -> tuple[np.ndarray, float, bool, bool, dict[str, Any]]:
        state = self.state
        command = action if isinstance(action, ActionCommand) else ActionCommand.from_array(action)

        if state.phase is Phase.TERMINATED:
            if not self._outcome_reported:
                # Terminal contact arrived between steps; report it before anything else.
                return self._report()
            if not self.config.auto_reset:
                raise EpisodeStateError(f"episode {state.episode_id} has terminated; call reset()")
            self.reset()
            state = self.state

        self._in_step = True
        try:
            h = self.config.handles
            pose = self.physics.get_pose(h.agent)
            signal = interpret(command, pose.rotation, self.config)
            self.physics.apply_force(h.agent, signal.force)
            self.physics.rotate(h.agent, UP, signal.turn_degrees)

            self._add_reward(self.rewards.tick())
            state.step_count += 1
        finally:
            self._in_step = False

        self.process_events()

        max_steps = self.config.max_steps
        if state.running and max_steps is not None and state.step_count >= max_steps:
            self._terminate(TerminationReason.TIMEOUT)

        self._publish()
        return self._report()

    def observe(self) -> np.ndarray:
        h = self.config.handles
        return encode(
            self.physics.get_pose(h.agent),
            self.physics.get_pose(h.target),
            self.physics.get_velocity(h.agent),
        )

    def heuristic(self, device: InputDevice) -> ActionCommand:
        """Manual override: W/S drives, A/D turns."""
        return ManualPolicy(device).command()

    def close(self) -> None:
        self.feedback.cancel_all()

    # ------------------------------------------------------------------
    # Contact events
    # ------------------------------------------------------------------

    def on_collision_enter(self, tag: str) -> None:
        self._contact(ContactKind.COLLISION_ENTER, tag)

    def on_collision_exit(self, tag: str) -> None:
        self._contact(ContactKind.COLLISION_EXIT, tag)

    def on_trigger_enter(self, tag: str) -> None:
        self._contact(ContactKind.TRIGGER_ENTER, tag)

    def notify(self, event: ParkingEvent) -> None:
        self._events.append(event)
        if not self._in_step:
            self.process_events()
            self._publish()

    def process_events(self) -> None:
        while self._events:
            self._handle(self._events.popleft())

    def _contact(self, kind: ContactKind, tag: str) -> None:
        event = event_from_contact(kind, tag)
        if event is None:
            logger.debug(f"Ignoring {kind.value} with untracked tag {tag!r}")
            return
        self.notify(event)

    def _handle(self, event: ParkingEvent) -> None:
        state = self._state
        if state is None or not state.running:
            logger.debug(f"Dropping {event.value}: no running episode")
            return

        if event is ParkingEvent.COLLISION_WITH_WALL:
            self.feedback.set_flag(SURFACE_CAR, VisualFlag.alert())
            self._add_reward(self.rewards.collision())
            self._flash(VisualFlag.alert())
            if self.config.terminate_on_collision:
                self._terminate(TerminationReason.COLLISION)
        elif event is ParkingEvent.WALL_CONTACT_ENDED:
            # Only reachable while collisions keep the episode alive.
            self.feedback.restore(SURFACE_CAR)
        elif event is ParkingEvent.ENTRY_TO_TARGET_ZONE:
            self._add_reward(self.rewards.success())
            self._flash(VisualFlag.success())
            self._terminate(TerminationReason.SUCCESS)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _add_reward(self, value: float) -> None:
        state = self.state
        state.cumulative_reward = self.rewards.total
        self._unreported_reward += value

    def _flash(self, flag: VisualFlag) -> None:
        handle = self.feedback.flash(SURFACE_FLOOR, flag, episode_id=self.state.episode_id)
        if handle is not None:
            self.last_flash = handle

    def _terminate(self, reason: TerminationReason) -> None:
        state = self.state
        state.terminate(reason)
        self.last_outcome = {
            "episode_id": state.episode_id,
            "reason": reason.value,
            "steps": state.step_count,
            "cumulative_reward": state.cumulative_reward,
            "rewards": self.rewards.breakdown(),
        }
        logger.info(
            f"Episode {state.episode_id} ended ({reason.value}) after {state.step_count} steps, "
            f"reward={state.cumulative_reward:.3f}"
        )

    def _report(self) -> tuple[np.ndarray, float, bool, bool, dict[str, Any]]:
        state = self.state
        reward = self._unreported_reward
        self._unreported_reward = 0.0

        truncated = state.termination_reason is TerminationReason.TIMEOUT
        terminated = state.phase is Phase.TERMINATED and not truncated
        if state.phase is Phase.TERMINATED:
            self._outcome_reported = True
        return self.observe(), reward, terminated, truncated, self._info()

    def _info(self) -> dict[str, Any]:
        state = self.state
        info: dict[str, Any] = {
            "episode_id": state.episode_id,
            "step_count": state.step_count,
            "cumulative_reward": state.cumulative_reward,
            "phase": state.phase.value,
        }
        if state.phase is Phase.TERMINATED and self.last_outcome is not None:
            info["outcome"] = dict(self.last_outcome)
        return info

    def _publish(self) -> None:
        if not self.telemetry or self._state is None:
            return
        snapshot = TelemetrySnapshot.from_state(self._state)
        for sink in self.telemetry:
            sink.publish(snapshot)
