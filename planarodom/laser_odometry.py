"""Planar odometry from consecutive range scans by coarse-to-fine range flow.

Each new scan is compared with the previous one on a multi-resolution
pyramid. On every level the scan is warped by the motion found so far, the
range-flow constraint is solved by iteratively reweighted least squares
(Cauchy M-estimator), and the level's solution is filtered in the eigen
basis of its covariance before it is accumulated.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from planarodom.pyramid import build_pyramid, pyramid_levels, warp_scan
from planarodom.transforms import (
    get_yaw,
    invert_isometry,
    isometry,
    matrix_yaw,
    quaternion_to_matrix,
    sign,
)

logger = logging.getLogger(__name__)

_G_MASK = (1.0 / 16.0, 0.25, 6.0 / 16.0, 0.25, 1.0 / 16.0)


@dataclass
class LaserScan:
    """A planar range scan; ``ranges[0]`` is taken at ``angle_min``."""

    ranges: Sequence[float]
    angle_min: float = 0.0
    angle_max: float = 0.0
    stamp: float = 0.0
    frame_id: str = "laser"


@dataclass
class InitialPose:
    """The robot's starting pose: position and orientation quaternion."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    qw: float = 1.0
    qx: float = 0.0
    qy: float = 0.0
    qz: float = 0.0

    def to_isometry(self) -> np.ndarray:
        """The planar part of the pose as a 4x4 matrix (height is dropped)."""
        rotation = quaternion_to_matrix(self.qw, self.qx, self.qy, self.qz)
        return isometry(rotation, (self.x, self.y))


def _lstsq(matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
    try:
        return np.linalg.lstsq(matrix, vector, rcond=None)[0]
    except np.linalg.LinAlgError:
        return np.full(matrix.shape[1], np.nan)


class LaserOdometry2D:
    """Estimates the motion of a 2D lidar, and of the robot carrying it."""

    def __init__(self) -> None:
        self.verbose = False
        self.module_initialized = False
        self.first_laser_scan = True
        self.last_odom_time = 0.0
        self.current_scan_time = 0.0

        self.last_increment = np.eye(4)
        self.laser_pose_on_robot = np.eye(4)
        self.laser_pose_on_robot_inv = np.eye(4)
        self.laser_pose = np.eye(4)
        self.laser_oldpose = np.eye(4)
        self.robot_pose = np.eye(4)
        self.robot_oldpose = np.eye(4)

        self.width = 0
        self.cols = 0
        self.cols_i = 0
        self.fovh = 0.0
        self.ctf_levels = 5
        self.iter_irls = 5
        self.fps = 1.0
        self.level = 0
        self.image_level = 0
        self.num_valid_range = 0
        self.g_mask = _G_MASK

        self.lin_speed = 0.0
        self.ang_speed = 0.0

        self.cov_odo = np.zeros((3, 3))
        self.kai_abs = np.zeros(3)
        self.kai_loc = np.zeros(3)
        self.kai_loc_old = np.zeros(3)
        self.kai_loc_level = np.zeros(3)

        self.range_wf = np.zeros(0)
        self.transformations: List[np.ndarray] = []
        self._empty_pyramid(0)

    # -- public state -----------------------------------------------------

    @property
    def initialized(self) -> bool:
        return self.module_initialized

    @property
    def increment(self) -> np.ndarray:
        """Laser motion found by the last calculation, as a 4x4 pose."""
        return self.last_increment

    @property
    def increment_covariance(self) -> np.ndarray:
        """Covariance of the last level's velocity estimate (vx, vy, wz)."""
        return self.cov_odo

    @property
    def pose(self) -> np.ndarray:
        """Current robot pose."""
        return self.robot_pose

    def set_laser_pose(self, laser_pose: np.ndarray) -> None:
        """Set where the laser is mounted on the robot base."""
        self.laser_pose_on_robot = np.array(laser_pose, dtype=float)
        self.laser_pose_on_robot_inv = invert_isometry(self.laser_pose_on_robot)

    # -- setup ------------------------------------------------------------

    def _empty_pyramid(self, levels: int) -> None:
        sizes = [math.ceil(self.width / 2 ** i) for i in range(levels)]

        def zeros() -> List[np.ndarray]:
            return [np.zeros(n) for n in sizes]

        self.range, self.range_old, self.range_inter, self.range_warped = (
            zeros(), zeros(), zeros(), zeros())
        self.xx, self.xx_old, self.xx_inter, self.xx_warped = (
            zeros(), zeros(), zeros(), zeros())
        self.yy, self.yy_old, self.yy_inter, self.yy_warped = (
            zeros(), zeros(), zeros(), zeros())

    def init(self, scan: LaserScan, initial_pose: InitialPose) -> None:
        """Configure from the first scan and start from ``initial_pose``."""
        logger.info("Got first Laser Scan .... Configuring node")
        self.width = len(scan.ranges)
        self.cols = self.width
        self.fovh = abs(scan.angle_max - scan.angle_min)
        self.ctf_levels = 5
        self.iter_irls = 5
        if self.fovh == 0.0:
            raise ValueError("the scan has no field of view")
        if self.width == 0 or math.ceil(self.width / 2 ** (self.ctf_levels - 1)) < 2:
            raise ValueError("the scan has too few readings for the pyramid")

        robot_initial_pose = initial_pose.to_isometry()
        self.laser_pose = robot_initial_pose @ self.laser_pose_on_robot

        self.range_wf = np.ones(self.width)
        self.transformations = [np.eye(3) for _ in range(self.ctf_levels)]
        self._pyr_levels = pyramid_levels(self.width, self.cols, self.ctf_levels)
        self._empty_pyramid(self._pyr_levels)

        self.cov_odo = np.zeros((3, 3))
        self.fps = 1.0
        self.num_valid_range = 0
        self.kai_abs = np.zeros(3)
        self.kai_loc_old = np.zeros(3)

        self.module_initialized = True
        self.last_odom_time = scan.stamp

    def _require_init(self) -> None:
        if not self.module_initialized:
            raise RuntimeError("the odometry has not been initialised with a scan")

    # -- main loop --------------------------------------------------------

    def odometry_calculation(self, scan: LaserScan) -> bool:
        """Estimate the motion since the previous scan and update the poses.

        Returns False when a level's solution cannot be filtered; the poses
        are then left unchanged.
        """
        self._require_init()
        ranges = np.asarray(scan.ranges, dtype=float)
        if len(ranges) != self.width:
            raise ValueError("the scan size differs from the configured width")
        self.range_wf = ranges.copy()
        self.current_scan_time = scan.stamp

        start = time.perf_counter()
        self._create_image_pyramid()
        offset = self._pyr_levels - self.ctf_levels

        for i in range(self.ctf_levels):
            self.transformations[i] = np.eye(3)
            self.level = i
            self.cols_i = math.ceil(self.cols / 2 ** (self.ctf_levels - (i + 1)))
            self.image_level = self.ctf_levels - i - 1 + offset
            il = self.image_level

            if i == 0:
                self.range_warped[il] = self.range[il].copy()
                self.xx_warped[il] = self.xx[il].copy()
                self.yy_warped[il] = self.yy[il].copy()
            else:
                self._perform_warping()

            self._calculate_coord()
            self._find_null_points()
            self._calculate_range_derivatives()
            self._compute_weights()

            if self.num_valid_range <= 3:
                continue
            self._solve_system_nonlinear()
            if not self._filter_level_solution():
                return False

        logger.info("execution time (ms): %f", (time.perf_counter() - start) * 1000.0)
        self._pose_update()
        return True

    def reset(self, initial_pose: np.ndarray) -> None:
        """Restart from ``initial_pose`` using the last stored ranges."""
        self._require_init()
        self.laser_pose = np.array(initial_pose, dtype=float)
        self.laser_oldpose = np.array(initial_pose, dtype=float)
        self._create_image_pyramid()

    # -- steps ------------------------------------------------------------

    def _create_image_pyramid(self) -> None:
        self.range_old, self.range = self.range, self.range_old
        self.xx_old, self.xx = self.xx, self.xx_old
        self.yy_old, self.yy = self.yy, self.yy_old
        self.range, self.xx, self.yy = build_pyramid(
            self.range_wf, self._pyr_levels, self.fovh
        )

    def _perform_warping(self) -> None:
        acu_trans = np.eye(3)
        for i in range(1, self.level + 1):
            acu_trans = self.transformations[i - 1] @ acu_trans
        il = self.image_level
        self.range_warped[il], self.xx_warped[il], self.yy_warped[il] = warp_scan(
            self.range[il], self.xx[il], self.yy[il], acu_trans, self.fovh
        )

    def _calculate_coord(self) -> None:
        il = self.image_level
        old = self.range_old[il]
        warped = self.range_warped[il]
        empty = (old == 0.0) | (warped == 0.0)
        self.range_inter[il] = np.where(empty, 0.0, 0.5 * (old + warped))
        self.xx_inter[il] = np.where(empty, 0.0, 0.5 * (self.xx_old[il] + self.xx_warped[il]))
        self.yy_inter[il] = np.where(empty, 0.0, 0.5 * (self.yy_old[il] + self.yy_warped[il]))

    def _find_null_points(self) -> None:
        ri = self.range_inter[self.image_level]
        valid = np.zeros(self.cols_i, dtype=bool)
        valid[1:-1] = ri[1:-1] != 0.0
        self.valid = valid
        self.num_valid_range = int(valid.sum())

    def _calculate_range_derivatives(self) -> None:
        il = self.image_level
        ri = self.range_inter[il]
        n = self.cols_i
        dist = np.diff(self.xx_inter[il]) ** 2 + np.diff(self.yy_inter[il]) ** 2
        rtita = np.ones(n)
        rtita[:-1] = np.where(dist > 0.0, np.sqrt(np.maximum(dist, 0.0)), 1.0)

        dtita = np.zeros(n)
        dtita[1:-1] = (
            rtita[:-2] * (ri[2:] - ri[1:-1]) + rtita[1:-1] * (ri[1:-1] - ri[:-2])
        ) / (rtita[1:-1] + rtita[:-2])
        dtita[0] = dtita[1]
        dtita[-1] = dtita[-2]
        self.rtita = rtita
        self.dtita = dtita
        self.dt = self.fps * (self.range_warped[il] - self.range_old[il])

    def _compute_weights(self) -> None:
        il = self.image_level
        old = self.range_old[il]
        warped = self.range_warped[il]
        dtita = self.dtita
        kdtita = 1.0
        kdt = kdtita / (self.fps * self.fps)
        k2d = 0.2

        weights = np.zeros(self.cols_i)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            dtitat = (old[2:] - old[:-2]) - (warped[2:] - warped[:-2])
            dtita2 = dtita[2:] - dtita[:-2]
            w_der = (
                kdt * self.dt[1:-1] ** 2
                + kdtita * dtita[1:-1] ** 2
                + k2d * (np.abs(dtitat) + np.abs(dtita2))
            )
            values = np.sqrt(1.0 / w_der)
            weights[1:-1] = np.where(self.valid[1:-1], values, 0.0)
            weights = weights * (1.0 / weights.max())
        self.weights = weights

    def _solve_system_nonlinear(self) -> None:
        il = self.image_level
        u = np.nonzero(self.valid)[0]
        kdtita = (self.cols_i - 1) / self.fovh
        tita = -0.5 * self.fovh + u / kdtita
        cos_t, sin_t = np.cos(tita), np.sin(tita)
        tw = self.weights[u]
        dti = self.dtita[u]
        ri = self.range_inter[il][u]

        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            a = np.column_stack(
                (
                    tw * (cos_t + dti * kdtita * sin_t / ri),
                    tw * (sin_t - dti * kdtita * cos_t / ri),
                    tw * (-self.yy[il][u] * cos_t + self.xx[il][u] * sin_t - dti * kdtita),
                )
            )
            b = tw * (-self.dt[u])

            ata = a.T @ a
            var = _lstsq(ata, a.T @ b)
            res = a @ var - b

            aver_dt = np.mean(np.abs(self.dt[u]))
            k = np.float64(10.0) / aver_dt

            for _ in range(self.iter_irls):
                res_weight = np.sqrt(1.0 / (1.0 + (k * res) ** 2))
                aw = a * res_weight[:, None]
                bw = b * res_weight
                ata = aw.T @ aw
                var = _lstsq(ata, aw.T @ bw)
                res = a @ var - b

            try:
                inverse = np.linalg.inv(ata)
            except np.linalg.LinAlgError:
                inverse = np.full((3, 3), np.nan)
            self.cov_odo = (1.0 / (self.num_valid_range - 3)) * inverse * float(res @ res)
        self.kai_loc_level = var

    def _filter_level_solution(self) -> bool:
        cov = self.cov_odo
        if not np.all(np.isfinite(cov)):
            logger.warning("Eigensolver couldn't find a solution. Pose is not updated")
            return False
        try:
            eigenvalues, bii = np.linalg.eigh(cov)
            kai_b = np.linalg.solve(bii, self.kai_loc_level)
        except np.linalg.LinAlgError:
            logger.warning("Eigensolver couldn't find a solution. Pose is not updated")
            return False

        acu_trans = np.eye(3)
        for i in range(self.level):
            acu_trans = self.transformations[i] @ acu_trans

        kai_loc_sub = np.array(
            [
                -self.fps * acu_trans[0, 2],
                -self.fps * acu_trans[1, 2],
                0.0
                if acu_trans[0, 0] > 1.0
                else -self.fps * math.acos(max(-1.0, acu_trans[0, 0])) * sign(acu_trans[1, 0]),
            ]
        )
        kai_loc_sub += self.kai_loc_old
        kai_b_old = np.linalg.solve(bii, kai_loc_sub)

        cf = 15e3 * math.exp(-self.level)
        df = 0.05 * math.exp(-self.level)
        gain = cf * eigenvalues + df
        kai_b_fil = (kai_b + gain * kai_b_old) / (1.0 + gain)
        kai_loc_fil = bii @ kai_b_fil

        incrx, incry, rot = kai_loc_fil / self.fps
        c, s = math.cos(rot), math.sin(rot)
        self.transformations[self.level] = np.array(
            [[c, -s, incrx], [s, c, incry], [0.0, 0.0, 1.0]]
        )
        return True

    def _pose_update(self) -> None:
        acu_trans = np.eye(3)
        for i in range(1, self.ctf_levels + 1):
            acu_trans = self.transformations[i - 1] @ acu_trans

        rot = (
            0.0
            if acu_trans[0, 0] > 1.0
            else self.fps * math.acos(max(-1.0, acu_trans[0, 0])) * sign(acu_trans[1, 0])
        )
        self.kai_loc = np.array([self.fps * acu_trans[0, 2], self.fps * acu_trans[1, 2], rot])

        phi = get_yaw(self.laser_pose)
        c, s = math.cos(phi), math.sin(phi)
        self.kai_abs = np.array(
            [
                self.kai_loc[0] * c - self.kai_loc[1] * s,
                self.kai_loc[0] * s + self.kai_loc[1] * c,
                self.kai_loc[2],
            ]
        )

        self.laser_oldpose = self.laser_pose
        pose_aux = isometry(
            matrix_yaw(self.kai_loc[2] / self.fps), (acu_trans[0, 2], acu_trans[1, 2])
        )
        self.laser_pose = self.laser_pose @ pose_aux
        self.last_increment = pose_aux

        phi = get_yaw(self.laser_pose)
        c, s = math.cos(phi), math.sin(phi)
        self.kai_loc_old = np.array(
            [
                self.kai_abs[0] * c + self.kai_abs[1] * s,
                -self.kai_abs[0] * s + self.kai_abs[1] * c,
                self.kai_abs[2],
            ]
        )
        logger.info(
            "Laser odom [x,y,yaw]=[%f %f %f]",
            self.laser_pose[0, 3], self.laser_pose[1, 3], get_yaw(self.laser_pose),
        )

        self.robot_pose = self.laser_pose @ self.laser_pose_on_robot_inv
        logger.info(
            "Robot-base odom [x,y,yaw]=[%f %f %f]",
            self.robot_pose[0, 3], self.robot_pose[1, 3], get_yaw(self.robot_pose),
        )

        time_inc = np.float64(self.current_scan_time - self.last_odom_time)
        self.last_odom_time = self.current_scan_time
        ang_inc = get_yaw(self.robot_pose) - get_yaw(self.robot_oldpose)
        if ang_inc > 3.14159:
            ang_inc -= 2 * 3.14159
        if ang_inc < -3.14159:
            ang_inc += 2 * 3.14159
        with np.errstate(divide="ignore", invalid="ignore"):
            self.lin_speed = float(np.float64(acu_trans[0, 2]) / time_inc)
            self.ang_speed = float(np.float64(ang_inc) / time_inc)
        self.robot_oldpose = self.robot_pose