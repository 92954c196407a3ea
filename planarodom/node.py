"""Driver that feeds laser scans to the odometry and publishes its estimate.

Transport is left to the caller: transforms are looked up, and odometry
and transforms are sent, through callables handed to the node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import numpy as np

from planarodom.laser_odometry import InitialPose, LaserOdometry2D, LaserScan
from planarodom.transforms import get_yaw, yaw_to_quaternion

logger = logging.getLogger(__name__)

Quaternion = Tuple[float, float, float, float]


@dataclass
class NodeParameters:
    """Topics, frames and rates of the odometry node."""

    laser_scan_topic: str = "/scan"
    odom_topic: str = "/odom_rf2o"
    base_frame_id: str = "base_link"
    odom_frame_id: str = "odom"
    publish_tf: bool = True
    init_pose_from_topic: str = "/base_pose_ground_truth"
    freq: float = 10.0


@dataclass
class Odometry:
    """An odometry estimate: pose in ``frame_id``, velocity in ``child_frame_id``."""

    stamp: float = 0.0
    frame_id: str = ""
    child_frame_id: str = ""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    orientation: Quaternion = (1.0, 0.0, 0.0, 0.0)
    linear_x: float = 0.0
    linear_y: float = 0.0
    angular_z: float = 0.0


@dataclass
class TransformStamped:
    """A timed transform from ``frame_id`` to ``child_frame_id``."""

    stamp: float = 0.0
    frame_id: str = ""
    child_frame_id: str = ""
    translation: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: Quaternion = (1.0, 0.0, 0.0, 0.0)


TransformLookup = Callable[[str, str], np.ndarray]


class LaserOdometryNode:
    """Keeps the latest scan and turns scan pairs into published odometry.

    ``tf_lookup(target_frame, source_frame)`` returns the 4x4 pose of the
    source frame in the target frame and raises ``LookupError`` when it is
    unknown.
    """

    def __init__(
        self,
        parameters: Optional[NodeParameters] = None,
        tf_lookup: Optional[TransformLookup] = None,
        odom_publisher: Optional[Callable[[Odometry], None]] = None,
        tf_broadcaster: Optional[Callable[[TransformStamped], None]] = None,
    ) -> None:
        logger.info("Initializing RF2O node...")
        self.parameters = parameters if parameters is not None else NodeParameters()
        self.tf_lookup = tf_lookup
        self.odom_publisher = odom_publisher
        self.tf_broadcaster = tf_broadcaster

        self.odometry = LaserOdometry2D()
        self.last_scan: Optional[LaserScan] = None
        self.new_scan_available = False

        if self.parameters.init_pose_from_topic != "":
            self.gt_pose_initialized = False
            self.initial_robot_pose = InitialPose()
        else:
            self.gt_pose_initialized = True
            self.initial_robot_pose = InitialPose(qw=0.0)

        self.odometry.module_initialized = False
        self.odometry.first_laser_scan = True

    def laser_callback(self, scan: LaserScan) -> None:
        """Store a scan; the first one configures the odometry."""
        if not self.gt_pose_initialized:
            return
        self.last_scan = scan
        self.odometry.current_scan_time = scan.stamp
        if not self.odometry.first_laser_scan:
            self.odometry.range_wf = np.asarray(
                list(scan.ranges)[: self.odometry.width], dtype=float
            )
            self.new_scan_available = True
        else:
            self.set_laser_pose_from_tf()
            self.odometry.init(scan, self.initial_robot_pose)
            self.odometry.first_laser_scan = False

    def init_pose_callback(self, pose: InitialPose) -> None:
        """Take the first ground-truth pose as the starting pose; ignore later ones."""
        if not self.gt_pose_initialized:
            self.initial_robot_pose = pose
            self.gt_pose_initialized = True

    def set_laser_pose_from_tf(self) -> bool:
        """Look up where the laser sits on the robot base.

        Returns False when the transform is unknown; the laser is then taken
        to sit at the base origin.
        """
        laser_tf = np.eye(4)
        retrieved = False
        frame = self.last_scan.frame_id if self.last_scan is not None else ""
        if self.tf_lookup is None:
            logger.error("no transform source to look up %s", frame)
        else:
            try:
                laser_tf = np.array(
                    self.tf_lookup(self.parameters.base_frame_id, frame), dtype=float
                )
                retrieved = True
            except LookupError as exc:
                logger.error("%s", exc)
        self.odometry.set_laser_pose(laser_tf)
        return retrieved

    def scan_available(self) -> bool:
        """Whether a scan has arrived since the last processing."""
        return self.new_scan_available

    def process(self) -> bool:
        """Run the odometry on the newest scan and publish; False when idle."""
        if self.odometry.initialized and self.scan_available():
            self.odometry.odometry_calculation(self.last_scan)
            self.publish()
            self.new_scan_available = False
            return True
        logger.warning("Waiting for laser_scans....")
        return False

    def publish(self) -> Odometry:
        """Send the current estimate as odometry and, if enabled, as a transform."""
        params = self.parameters
        pose = self.odometry.robot_pose
        quaternion = yaw_to_quaternion(get_yaw(pose))
        stamp = self.odometry.last_odom_time
        odom = Odometry(
            stamp=stamp,
            frame_id=params.odom_frame_id,
            child_frame_id=params.base_frame_id,
            x=float(pose[0, 3]),
            y=float(pose[1, 3]),
            z=0.0,
            orientation=quaternion,
            linear_x=self.odometry.lin_speed,
            linear_y=0.0,
            angular_z=self.odometry.ang_speed,
        )
        logger.debug("Publishing odom over topic:[%s]", params.odom_topic)
        if self.odom_publisher is not None:
            self.odom_publisher(odom)
        if params.publish_tf:
            logger.debug("Publishing TF: [base_link] to [odom]")
            transform = TransformStamped(
                stamp=stamp,
                frame_id=params.odom_frame_id,
                child_frame_id=params.base_frame_id,
                translation=(odom.x, odom.y, 0.0),
                rotation=quaternion,
            )
            if self.tf_broadcaster is not None:
                self.tf_broadcaster(transform)
        return odom


@dataclass
class _Recorder:
    """Collects what a node sends; handy as publisher or broadcaster."""

    items: List[object] = field(default_factory=list)

    def __call__(self, item: object) -> None:
        self.items.append(item)