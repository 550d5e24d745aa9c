import numpy as np
import pytest

from selfpark.actions import ActionIndex
from selfpark.agents import HeuristicPolicy, ManualPolicy
from selfpark.env.env import ParkingEnv
from selfpark.geometry import Pose
from tests.fakes import FakePhysics, ScriptedInput


def _obs(x, z):
    return np.array([x, 0.0, z, 0.0, 0.0], dtype=np.float32)


class TestHeuristicPolicy:
    def test_target_dead_ahead(self):
        action = HeuristicPolicy().act(_obs(0.0, 10.0))
        assert action[ActionIndex.MOVE] == pytest.approx(1.0)
        assert action[ActionIndex.TURN] == pytest.approx(0.0)

    def test_target_ahead_right_turns_right(self):
        action = HeuristicPolicy().act(_obs(2.0, 4.0))
        assert action[ActionIndex.MOVE] > 0.0
        assert action[ActionIndex.TURN] > 0.0

    def test_target_behind_reverses(self):
        action = HeuristicPolicy().act(_obs(1.0, -6.0))
        assert action[ActionIndex.MOVE] < 0.0
        assert action[ActionIndex.TURN] < 0.0

    def test_slows_near_target(self):
        policy = HeuristicPolicy(slow_radius=4.0)
        assert policy.act(_obs(0.0, 1.0))[ActionIndex.MOVE] == pytest.approx(0.25)

    def test_at_target_idles(self):
        np.testing.assert_array_equal(HeuristicPolicy().act(_obs(0.0, 0.0)), [0.0, 0.0])

    def test_actions_stay_in_range(self):
        rng = np.random.default_rng(0)
        policy = HeuristicPolicy(turn_gain=10.0)
        for _ in range(100):
            action = policy.act(_obs(*rng.uniform(-20, 20, size=2)))
            assert np.all(np.abs(action) <= 1.0)

    def test_turning_in_place_closes_bearing(self):
        # Target off to the right; repeated steps rotate the agent toward it.
        env = ParkingEnv(FakePhysics(target=Pose.from_yaw((5.0, 0.0, 5.0))))
        obs, _ = env.reset()
        start = abs(np.arctan2(obs[0], obs[2]))
        policy = HeuristicPolicy()
        for _ in range(10):
            action = policy.act(obs)
            obs, *_ = env.step(action)
        assert abs(np.arctan2(obs[0], obs[2])) < start


def test_manual_policy_reads_axes():
    policy = ManualPolicy(ScriptedInput(Vertical=-1.0, Horizontal=0.25))
    np.testing.assert_allclose(policy.act(_obs(0.0, 1.0)), [-1.0, 0.25])
    cmd = policy.command()
    assert cmd.move_signal == -1.0
    assert cmd.turn_signal == 0.25
