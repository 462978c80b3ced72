import numpy as np
import pytest

from scancloud.motion.pose import Pose, interpolate_transforms
from scancloud.motion.quaternion import (
    quat_from_rpy,
    quat_multiply,
    quat_slerp,
    quat_to_matrix,
    quat_to_rpy,
)


def test_yaw_quarter_turn_maps_x_to_y() -> None:
    pose = Pose.from_xyz_rpy((0.0, 0.0, 0.0), (0.0, 0.0, 90.0))
    np.testing.assert_allclose(pose.apply(np.array([1.0, 0.0, 0.0])), [0.0, 1.0, 0.0], atol=1e-12)


def test_quaternion_matrix_matches_rpy_composition() -> None:
    roll, pitch, yaw = np.deg2rad([10.0, -20.0, 35.0])
    cx, sx = np.cos(roll), np.sin(roll)
    cy, sy = np.cos(pitch), np.sin(pitch)
    cz, sz = np.cos(yaw), np.sin(yaw)
    Rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    Ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    Rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
    np.testing.assert_allclose(quat_to_matrix(quat_from_rpy(roll, pitch, yaw)), Rz @ Ry @ Rx, atol=1e-12)
    np.testing.assert_allclose(quat_to_rpy(quat_from_rpy(roll, pitch, yaw)), [roll, pitch, yaw], atol=1e-12)


def test_quaternion_product_matches_matrix_product() -> None:
    a = quat_from_rpy(0.3, 0.1, -0.7)
    b = quat_from_rpy(-0.2, 0.4, 1.1)
    np.testing.assert_allclose(quat_to_matrix(quat_multiply(a, b)), quat_to_matrix(a) @ quat_to_matrix(b), atol=1e-12)


def test_compose_and_inverse() -> None:
    a = Pose.from_xyz_rpy((1.0, 2.0, 3.0), (5.0, -10.0, 30.0))
    b = Pose.from_xyz_rpy((-0.5, 0.2, 0.0), (0.0, 0.0, -45.0))
    p = np.array([[0.3, -1.2, 2.0], [4.0, 0.0, -1.0]])
    np.testing.assert_allclose(a.compose(b).apply(p), a.apply(b.apply(p)), atol=1e-12)
    assert a.compose(a.inverse()).allclose(Pose.identity())
    assert (a * b).allclose(a.compose(b))


def test_slerp_midpoint_and_endpoints() -> None:
    q0 = quat_from_rpy(0.0, 0.0, 0.0)
    q1 = quat_from_rpy(0.0, 0.0, np.pi / 2)
    out = quat_slerp(q0, q1, np.array([0.0, 0.5, 1.0]))
    assert out.shape == (3, 4)
    yaws = [quat_to_rpy(q)[2] for q in out]
    np.testing.assert_allclose(yaws, [0.0, np.pi / 4, np.pi / 2], atol=1e-12)


def test_slerp_takes_shortest_path() -> None:
    q0 = quat_from_rpy(0.0, 0.0, 0.0)
    q1 = -quat_from_rpy(0.0, 0.0, 0.5)
    mid = quat_slerp(q0, q1, 0.5)
    assert mid.shape == (4,)
    np.testing.assert_allclose(quat_to_rpy(mid)[2], 0.25, atol=1e-12)


def test_slerp_nearly_parallel_is_stable() -> None:
    q = quat_from_rpy(0.1, 0.2, 0.3)
    out = quat_slerp(q, q, np.linspace(0.0, 1.0, 5))
    assert np.all(np.isfinite(out))
    np.testing.assert_allclose(np.abs(out @ q), 1.0, atol=1e-12)


def test_interpolate_transforms_endpoints_match_poses() -> None:
    start = Pose.from_xyz_rpy((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    end = Pose.from_xyz_rpy((2.0, -4.0, 1.0), (0.0, 0.0, 60.0))
    translations, rotations = interpolate_transforms(start, end, np.array([0.0, 0.5, 1.0]))
    np.testing.assert_allclose(translations[0], start.t)
    np.testing.assert_allclose(translations[1], [1.0, -2.0, 0.5])
    np.testing.assert_allclose(translations[2], end.t)
    np.testing.assert_allclose(rotations[0], start.R, atol=1e-12)
    np.testing.assert_allclose(rotations[2], end.R, atol=1e-12)
    mid = start.interpolate(end, 0.5)
    np.testing.assert_allclose(rotations[1], mid.R, atol=1e-12)


def test_zero_norm_rotation_is_rejected() -> None:
    with pytest.raises(ValueError):
        Pose(t=np.zeros(3), q=np.zeros(4))
