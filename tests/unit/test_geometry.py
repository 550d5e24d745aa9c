import numpy as np
import pytest

from selfpark.geometry import Pose, as_vec3, quat_from_yaw, quat_multiply, quat_rotate


def test_identity_pose_is_a_pure_translation():
    pose = Pose(position=(1.0, 2.0, 3.0))
    np.testing.assert_allclose(pose.inverse_transform_point((1.0, 2.0, 8.0)), [0.0, 0.0, 5.0], atol=1e-12)


def test_positive_yaw_turns_forward_toward_plus_x():
    pose = Pose.from_yaw((0.0, 0.0, 0.0), 90.0)
    np.testing.assert_allclose(pose.forward, [1.0, 0.0, 0.0], atol=1e-12)


def test_yaw_composition_adds_angles():
    q = quat_multiply(quat_from_yaw(60.0), quat_from_yaw(30.0))
    np.testing.assert_allclose(quat_rotate(q, [0.0, 0.0, 1.0]), [1.0, 0.0, 0.0], atol=1e-12)


def test_inverse_transform_undoes_transform():
    pose = Pose.from_yaw((4.0, 0.5, -2.0), 37.0)
    local = np.array([1.5, -0.25, 3.0])
    np.testing.assert_allclose(pose.inverse_transform_point(pose.transform_point(local)), local, atol=1e-12)


def test_rotation_is_normalized_on_construction():
    pose = Pose(rotation=(2.0, 0.0, 0.0, 0.0))
    np.testing.assert_allclose(pose.rotation, [1.0, 0.0, 0.0, 0.0])


def test_as_vec3_rejects_wrong_size():
    with pytest.raises(ValueError, match="3-vector"):
        as_vec3([1.0, 2.0])


def test_zero_quaternion_rejected():
    with pytest.raises(ValueError):
        Pose(rotation=(0.0, 0.0, 0.0, 0.0))
