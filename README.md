# planarodom

Planar odometry for a robot carrying a 2D laser scanner. The package
estimates the motion of the scanner between consecutive range scans with a
coarse-to-fine range-flow method (iteratively reweighted least squares with
a Cauchy weight on every pyramid level), and ships the geometric and
statistical tools that go with it.

Requires Python 3.10 or later and NumPy.

## Modules

- `planarodom.laser_odometry`: `LaserOdometry2D`, the estimator. Call
  `init(scan, initial_pose)` with the first `LaserScan` and an
  `InitialPose`, then `odometry_calculation(scan)` with each new scan.
  The robot pose is available as the 4x4 matrix `pose`, the last laser
  motion as `increment` and its covariance as `increment_covariance`;
  `lin_speed` and `ang_speed` hold the estimated velocities.
  `set_laser_pose` sets where the laser is mounted on the robot, and
  `reset` restarts from a given pose.
- `planarodom.node`: `LaserOdometryNode`, which receives scans through
  `laser_callback` and a starting pose through `init_pose_callback`,
  runs the estimator in `process` and produces `Odometry` and
  `TransformStamped` records in `publish`. It is configured by
  `NodeParameters` and talks to the outside world only through the
  callables given to it: `tf_lookup`, `odom_publisher` and
  `tf_broadcaster`.
- `planarodom.pyramid`: `build_pyramid`, `filter_first_level`,
  `downsample_level`, `to_cartesian`, `warp_scan` and `pyramid_levels`.
- `planarodom.transforms`: `sign`, `get_yaw`, `matrix_roll_pitch_yaw`,
  `matrix_yaw`, `isometry`, `invert_isometry`, `quaternion_to_matrix` and
  `yaw_to_quaternion`.
- `planarodom.movement`: `Point`, `OrientedPoint` and `FSRMovement`
  (forward, sideward, rotate) with composition, inversion, application to
  a pose and `frame_transformation`.
- `planarodom.sensors`: `Sensor`, `SensorReading`, `OdometrySensor`,
  `OdometryReading`, `Beam`, `RangeSensor` and `RangeReading`, whose
  `raw_view` and `active_beams` thin beams by density and whose
  `cartesian_form` gives beam end points.
- `planarodom.eig3`: `eigen_decomposition` of a symmetric matrix, returning
  eigenvectors as columns and eigenvalues in ascending order.
- `planarodom.gridline`: `grid_line` and `grid_line_core`, Bresenham
  traversal between two grid cells.
- `planarodom.stat`: `pf_ran_gaussian`, `sample_gaussian`,
  `eval_log_gaussian` and `Gaussian3`.
- `planarodom.datasmoother`: `DataSmoother`, Parzen-window smoothing,
  integration, sampling and comparison with a Gaussian for weighted 1D data.
- `planarodom.dmatrix`: `DMatrix` with `det`, `inv`, `transpose` and
  `identity`, raising `NotInvertibleMatrixError`, `IncompatibleMatrixError`
  or `NotSquareMatrixError` (all `MatrixError`).
- `planarodom.bbox`: `OrientedBoundingBox` of a point set along its
  principal axes, with `area`.
- `planarodom.lumiles`: `lu_miles_step`, closed-form alignment of two
  corresponding point sets.
- `planarodom.pgm`: `write_pgm`, writing a grid of values as a binary PGM.
- `planarodom.memusage`: `read_mem_usage` and `print_mem_usage`, reading
  `VmData` and `VmSize` from a process status file.

## Examples

Movements between poses:

```python
from planarodom.movement import FSRMovement, OrientedPoint

start = OrientedPoint(0.0, 0.0, 0.0)
end = OrientedPoint(1.0, 1.0, 1.5707963)

step = FSRMovement.move_between_points(start, end)
print(step.move(start))
```

Laser odometry from two scans:

```python
import math

from planarodom.laser_odometry import InitialPose, LaserOdometry2D, LaserScan

first = LaserScan(ranges=[2.0] * 64, angle_min=-math.pi / 2, angle_max=math.pi / 2, stamp=0.0)
second = LaserScan(ranges=[2.0] * 64, angle_min=-math.pi / 2, angle_max=math.pi / 2, stamp=0.1)

odometry = LaserOdometry2D()
odometry.init(first, InitialPose())
if odometry.odometry_calculation(second):
    print(odometry.pose)
```

## What the package does not do

- It has no command-line program; it is used as a library.
- `LaserOdometryNode` does not subscribe to or publish on any message bus
  and has no run loop of its own. The caller delivers scans and poses to
  its callbacks, calls `process` at the desired rate, and supplies the
  functions that look up and send transforms and odometry.
- It does not build occupancy maps or match scans against a map.