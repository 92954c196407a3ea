"""Sensors and their readings: odometry and planar range finders."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from planarodom.movement import OrientedPoint, Point


class Sensor:
    """A named sensor."""

    def __init__(self, name: str = "") -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


@dataclass
class SensorReading:
    """A reading taken by ``sensor`` at ``time``."""

    sensor: Optional[Sensor] = None
    time: float = 0.0


class OdometrySensor(Sensor):
    """An odometry source; ``ideal`` marks noise-free odometry."""

    def __init__(self, name: str = "", ideal: bool = False) -> None:
        super().__init__(name)
        self.ideal = ideal


@dataclass
class OdometryReading(SensorReading):
    """A reading of an odometry sensor."""


@dataclass
class Beam:
    """One beam of a range sensor, with its sine and cosine cached."""

    pose: OrientedPoint = field(default_factory=OrientedPoint)
    span: float = 0.0
    max_range: float = 0.0
    s: float = 0.0
    c: float = 1.0


class RangeSensor(Sensor):
    """A planar range finder whose beams fan out symmetrically about its heading."""

    def __init__(
        self,
        name: str = "",
        beams_num: int = 0,
        res: float = 0.0,
        position: Optional[OrientedPoint] = None,
        span: float = 0.0,
        max_range: float = 0.0,
    ) -> None:
        super().__init__(name)
        self.pose = position if position is not None else OrientedPoint()
        self.new_format = 0
        self.beams: List[Beam] = []
        angle = -0.5 * res * beams_num
        for _ in range(beams_num):
            self.beams.append(
                Beam(pose=OrientedPoint(0.0, 0.0, angle), span=span, max_range=max_range)
            )
            angle += res
        self.update_beams_lookup()

    def update_beams_lookup(self) -> None:
        """Refresh each beam's cached sine and cosine from its heading."""
        for beam in self.beams:
            beam.s = math.sin(beam.pose.theta)
            beam.c = math.cos(beam.pose.theta)


class RangeReading(list):
    """The ranges measured by a range sensor, one per beam."""

    def __init__(
        self,
        sensor: Optional[RangeSensor] = None,
        time: float = 0.0,
        readings: Iterable[float] = (),
        pose: Optional[OrientedPoint] = None,
    ) -> None:
        values = [float(v) for v in readings]
        if values and (sensor is None or len(values) != len(sensor.beams)):
            raise ValueError("the number of readings must match the sensor's beams")
        super().__init__(values)
        self.sensor = sensor
        self.time = time
        self.pose = pose if pose is not None else OrientedPoint()

    def _range_sensor(self) -> RangeSensor:
        if not isinstance(self.sensor, RangeSensor):
            raise TypeError("the reading does not come from a range sensor")
        return self.sensor

    def _thinned(self, density: float) -> List[bool]:
        """For each beam, whether it survives density thinning."""
        sensor = self._range_sensor()
        kept: List[bool] = []
        last = Point(0.0, 0.0)
        for beam, value in zip(sensor.beams, self):
            lp = Point(math.cos(beam.pose.theta) * value, math.sin(beam.pose.theta) * value)
            dp = last - lp
            if math.sqrt(dp * dp) < density:
                kept.append(False)
            else:
                last = lp
                kept.append(True)
        return kept

    def raw_view(self, density: float = 0.0) -> List[float]:
        """The ranges, with beams closer than ``density`` to the last kept one
        replaced by the largest float."""
        if density == 0:
            return list(self)
        return [
            value if keep else sys.float_info.max
            for value, keep in zip(self, self._thinned(density))
        ]

    def active_beams(self, density: float = 0.0) -> int:
        """How many beams survive thinning at ``density``."""
        if density == 0.0:
            return len(self)
        return sum(self._thinned(density))

    def cartesian_form(self, max_range: float = 1e6) -> List[Point]:
        """End points of the beams in the sensor's parent frame.

        Beams at or beyond ``max_range`` give the origin.
        """
        sensor = self._range_sensor()
        if not sensor.beams:
            raise ValueError("the range sensor has no beams")
        ps = math.sin(sensor.pose.theta)
        pc = math.cos(sensor.pose.theta)
        points: List[Point] = []
        for beam, rho in zip(sensor.beams, self):
            if rho >= max_range:
                points.append(Point(0.0, 0.0))
                continue
            px = beam.pose.x + beam.c * rho
            py = beam.pose.y + beam.s * rho
            points.append(
                Point(sensor.pose.x + pc * px - ps * py, sensor.pose.y + ps * px + pc * py)
            )
        return points