"""Reward computation for ParkingEnv.

Three sources, all additive:
1. Per-tick time penalty while the episode runs
2. Terminal penalty on wall collision
3. Terminal bonus on entering the parking spot

Design:
- RewardWeights (config): the increment values
- RewardModel: running accumulator, reset once per episode

Values are never clamped. The running total is kept as exact partial sums
(Shewchuk), so after any number of ticks it equals the correctly rounded sum
of the increments rather than drifting with each `+=`. Every increment is
also kept for auditing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from ..config import RewardWeights


class RewardSource(str, Enum):
    TIME = "time"
    COLLISION = "collision"
    SUCCESS = "success"


@dataclass(frozen=True)
class RewardIncrement:
    source: RewardSource
    value: float


class RewardModel:
    def __init__(self, weights: RewardWeights | None = None) -> None:
        self.weights = weights or RewardWeights()
        self._increments: list[RewardIncrement] = []
        self._partials: list[float] = []
        self._total = 0.0

    def reset(self) -> None:
        self._increments.clear()
        self._partials.clear()
        self._total = 0.0

    def add(self, value: float, source: RewardSource) -> float:
        value = float(value)
        self._increments.append(RewardIncrement(source=source, value=value))
        self._accumulate(value)
        return value

    def _accumulate(self, x: float) -> None:
        # Partials are non-overlapping and increasing in magnitude; their exact
        # sum is the exact sum of everything added so far.
        i = 0
        for y in self._partials:
            if abs(x) < abs(y):
                x, y = y, x
            hi = x + y
            lo = y - (hi - x)
            if lo:
                self._partials[i] = lo
                i += 1
            x = hi
        self._partials[i:] = [x]
        self._total = math.fsum(self._partials)

    def tick(self) -> float:
        return self.add(self.weights.time_penalty, RewardSource.TIME)

    def collision(self) -> float:
        return self.add(self.weights.collision_penalty, RewardSource.COLLISION)

    def success(self) -> float:
        return self.add(self.weights.success_bonus, RewardSource.SUCCESS)

    @property
    def total(self) -> float:
        return self._total

    @property
    def increments(self) -> tuple[RewardIncrement, ...]:
        return tuple(self._increments)

    def exact_total(self) -> float:
        """fsum over the recorded increments; always equal to ``total``."""
        return math.fsum(inc.value for inc in self._increments)

    def breakdown(self) -> dict[str, float]:
        out = {source.value: 0.0 for source in RewardSource}
        for inc in self._increments:
            out[inc.source.value] += inc.value
        return out
