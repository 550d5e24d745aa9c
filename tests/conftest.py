from __future__ import annotations

import pytest

from selfpark.config import ParkingConfig
from selfpark.env.env import ParkingEnv
from tests.fakes import FakePhysics, FakeRenderer, ManualScheduler, RecordingTelemetry


@pytest.fixture
def physics():
    return FakePhysics()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def telemetry():
    return RecordingTelemetry()


@pytest.fixture
def make_env(physics, renderer, scheduler, telemetry):
    def _make(**config_kwargs) -> ParkingEnv:
        return ParkingEnv(
            physics,
            ParkingConfig(**config_kwargs),
            renderer=renderer,
            telemetry=telemetry,
            scheduler=scheduler,
        )

    return _make


@pytest.fixture
def env(make_env):
    """Env after its first reset (episode 1)."""
    e = make_env()
    e.reset()
    yield e
    e.close()
