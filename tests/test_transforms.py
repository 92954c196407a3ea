import math

import numpy as np
import pytest

from planarodom.transforms import (
    get_yaw,
    invert_isometry,
    isometry,
    matrix_roll_pitch_yaw,
    matrix_yaw,
    quaternion_to_matrix,
    sign,
    yaw_to_quaternion,
)


@pytest.mark.parametrize("value, expected", [(-2.5, -1), (0.0, 1), (3, 1), (-1, -1)])
def test_sign(value, expected):
    assert sign(value) == expected


@pytest.mark.parametrize("yaw", [0.0, 0.7, -1.2, 3.0])
def test_get_yaw_of_matrix_yaw(yaw):
    assert get_yaw(matrix_yaw(yaw)) == pytest.approx(yaw)


def test_get_yaw_of_pose():
    pose = isometry(matrix_yaw(0.4), (1.0, 2.0))
    assert get_yaw(pose) == pytest.approx(0.4)


def test_matrix_yaw_zero_is_identity():
    assert np.allclose(matrix_yaw(0.0), np.eye(3))


def test_roll_pitch_yaw_is_rotation():
    r = matrix_roll_pitch_yaw(0.3, -0.2, 1.1)
    assert np.allclose(r @ r.T, np.eye(3))
    assert np.linalg.det(r) == pytest.approx(1.0)


def test_roll_pitch_yaw_order():
    r = matrix_roll_pitch_yaw(0.3, -0.2, 1.1)
    expected = matrix_roll_pitch_yaw(0, 0, 1.1) @ matrix_roll_pitch_yaw(
        0, -0.2, 0
    ) @ matrix_roll_pitch_yaw(0.3, 0, 0)
    assert np.allclose(r, expected)


def test_isometry_places_translation():
    pose = isometry(matrix_yaw(0.5), (1.5, -2.0))
    assert pose[0, 3] == 1.5
    assert pose[1, 3] == -2.0
    assert pose[2, 3] == 0.0
    assert np.allclose(pose[:3, :3], matrix_yaw(0.5))


def test_isometry_rejects_bad_shapes():
    with pytest.raises(ValueError):
        isometry(np.eye(2))
    with pytest.raises(ValueError):
        isometry(None, (1, 2, 3, 4))


def test_invert_isometry_round_trip():
    pose = isometry(matrix_roll_pitch_yaw(0.1, 0.2, 0.3), (1.0, 2.0, 3.0))
    assert np.allclose(pose @ invert_isometry(pose), np.eye(4))
    assert np.allclose(invert_isometry(pose) @ pose, np.eye(4))


def test_invert_isometry_rejects_bad_shape():
    with pytest.raises(ValueError):
        invert_isometry(np.eye(3))


@pytest.mark.parametrize("yaw", [0.0, 0.9, -2.3])
def test_quaternion_matches_yaw_matrix(yaw):
    q = yaw_to_quaternion(yaw)
    assert np.allclose(quaternion_to_matrix(*q), matrix_yaw(yaw))


def test_yaw_to_quaternion_zero():
    assert yaw_to_quaternion(0.0) == (1.0, 0.0, 0.0, 0.0)


def test_zero_quaternion_gives_identity():
    assert np.allclose(quaternion_to_matrix(0.0, 0.0, 0.0, 0.0), np.eye(3))


def test_unit_quaternion_norm():
    w, x, y, z = yaw_to_quaternion(1.3)
    assert math.isclose(w * w + x * x + y * y + z * z, 1.0)