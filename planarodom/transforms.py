"""Rigid-body helpers for planar odometry.

Poses are 4x4 homogeneous matrices; rotations are 3x3 matrices.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np


def sign(x: float) -> int:
    """-1 for negative values, 1 otherwise (zero included)."""
    return 1 - 2 * int(x < 0)


def get_yaw(rotation: np.ndarray) -> float:
    """Heading of a rotation matrix, or of the rotation block of a pose."""
    r = np.asarray(rotation, dtype=float)
    return math.atan2(r[1, 0], r[0, 0])


def _rot_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def _rot_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def _rot_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def matrix_roll_pitch_yaw(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """Rotation about z by ``yaw``, then y by ``pitch``, then x by ``roll``."""
    return _rot_z(yaw) @ _rot_y(pitch) @ _rot_x(roll)


def matrix_yaw(yaw: float) -> np.ndarray:
    """Rotation about the z axis."""
    return matrix_roll_pitch_yaw(0.0, 0.0, yaw)


def isometry(
    rotation: np.ndarray | None = None, translation: Sequence[float] = ()
) -> np.ndarray:
    """A 4x4 pose from a 3x3 rotation and a translation of up to three values."""
    pose = np.eye(4)
    if rotation is not None:
        r = np.asarray(rotation, dtype=float)
        if r.shape != (3, 3):
            raise ValueError("rotation must be a 3x3 matrix")
        pose[:3, :3] = r
    t = [float(v) for v in translation]
    if len(t) > 3:
        raise ValueError("translation has at most three components")
    pose[: len(t), 3] = t
    return pose


def invert_isometry(pose: np.ndarray) -> np.ndarray:
    """Inverse of a rigid-body pose."""
    p = np.asarray(pose, dtype=float)
    if p.shape != (4, 4):
        raise ValueError("pose must be a 4x4 matrix")
    rt = p[:3, :3].T
    inverse = np.eye(4)
    inverse[:3, :3] = rt
    inverse[:3, 3] = -rt @ p[:3, 3]
    return inverse


def quaternion_to_matrix(w: float, x: float, y: float, z: float) -> np.ndarray:
    """Rotation matrix of a quaternion, taken as given without normalising."""
    tx, ty, tz = 2.0 * x, 2.0 * y, 2.0 * z
    twx, twy, twz = tx * w, ty * w, tz * w
    txx, txy, txz = tx * x, ty * x, tz * x
    tyy, tyz, tzz = ty * y, tz * y, tz * z
    return np.array(
        [
            [1.0 - (tyy + tzz), txy - twz, txz + twy],
            [txy + twz, 1.0 - (txx + tzz), tyz - twx],
            [txz - twy, tyz + twx, 1.0 - (txx + tyy)],
        ]
    )


def yaw_to_quaternion(yaw: float) -> Tuple[float, float, float, float]:
    """Quaternion ``(w, x, y, z)`` of a pure rotation about the z axis."""
    half = 0.5 * yaw
    return (math.cos(half), 0.0, 0.0, math.sin(half))