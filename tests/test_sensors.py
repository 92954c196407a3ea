import math
import sys

import pytest

from planarodom.movement import OrientedPoint, Point
from planarodom.sensors import (
    Beam,
    OdometryReading,
    OdometrySensor,
    RangeReading,
    RangeSensor,
    Sensor,
    SensorReading,
)


def test_sensor_keeps_name():
    assert Sensor("FLASER").name == "FLASER"


def test_odometry_sensor_and_reading():
    odo = OdometrySensor("ODOM", ideal=True)
    reading = OdometryReading(odo, 12.5)
    assert odo.ideal is True
    assert odo.name == "ODOM"
    assert reading.sensor is odo
    assert reading.time == 12.5
    assert isinstance(reading, SensorReading)


def test_range_sensor_beam_angles():
    sensor = RangeSensor("FLASER", 4, 0.5, OrientedPoint(1.0, 2.0, 0.3), 0.1, 30.0)
    angles = [b.pose.theta for b in sensor.beams]
    assert len(angles) == 4
    assert angles[0] == pytest.approx(-1.0)
    for a, b in zip(angles, angles[1:]):
        assert b - a == pytest.approx(0.5)
    for beam in sensor.beams:
        assert beam.span == 0.1
        assert beam.max_range == 30.0
        assert beam.s == pytest.approx(math.sin(beam.pose.theta))
        assert beam.c == pytest.approx(math.cos(beam.pose.theta))
    assert sensor.pose == OrientedPoint(1.0, 2.0, 0.3)


def test_update_beams_lookup_follows_heading_change():
    sensor = RangeSensor("L", 2, 0.1)
    sensor.beams[0].pose.theta = math.pi / 2
    sensor.update_beams_lookup()
    assert sensor.beams[0].s == pytest.approx(1.0)
    assert sensor.beams[0].c == pytest.approx(0.0, abs=1e-12)


def test_name_only_sensor_has_no_beams():
    sensor = RangeSensor("L")
    assert sensor.beams == []
    assert isinstance(Beam(), Beam)


def test_reading_size_must_match_beams():
    sensor = RangeSensor("L", 3, 0.1)
    with pytest.raises(ValueError):
        RangeReading(sensor, 0.0, [1.0, 2.0])


def test_raw_view_without_density_is_copy():
    sensor = RangeSensor("L", 3, 0.1)
    reading = RangeReading(sensor, 1.0, [1.0, 2.0, 3.0])
    view = reading.raw_view(0)
    assert view == [1.0, 2.0, 3.0]
    view[0] = 9.0
    assert reading[0] == 1.0


def test_raw_view_suppresses_close_beams():
    sensor = RangeSensor("L", 3, 0.0)
    reading = RangeReading(sensor, 0.0, [1.0, 1.05, 2.0])
    assert reading.raw_view(0.1) == [1.0, sys.float_info.max, 2.0]


def test_active_beams_counts_kept():
    sensor = RangeSensor("L", 3, 0.0)
    reading = RangeReading(sensor, 0.0, [1.0, 1.05, 2.0])
    assert reading.active_beams(0.0) == 3
    assert reading.active_beams(0.1) == 2
    kept = [v for v in reading.raw_view(0.1) if v != sys.float_info.max]
    assert len(kept) == reading.active_beams(0.1)


def test_density_needs_range_sensor():
    reading = RangeReading()
    reading.extend([1.0, 2.0])
    reading.sensor = OdometrySensor("O")
    with pytest.raises(TypeError):
        reading.raw_view(0.5)


def test_cartesian_form_distances_and_max_range():
    sensor = RangeSensor("L", 5, 0.3, OrientedPoint(0.0, 0.0, 0.7))
    ranges = [1.0, 2.0, 10.0, 0.5, 3.0]
    reading = RangeReading(sensor, 0.0, ranges)
    points = reading.cartesian_form(5.0)
    assert points[2] == Point(0.0, 0.0)
    for idx in (0, 1, 3, 4):
        p = points[idx]
        assert math.hypot(p.x, p.y) == pytest.approx(ranges[idx])
        expected = sensor.pose.theta + sensor.beams[idx].pose.theta
        assert math.atan2(p.y, p.x) == pytest.approx(expected)


def test_cartesian_form_translates_by_sensor_pose():
    origin = RangeSensor("L", 2, 0.4)
    shifted = RangeSensor("L", 2, 0.4, OrientedPoint(3.0, -1.0, 0.0))
    a = RangeReading(origin, 0.0, [1.0, 2.0]).cartesian_form()
    b = RangeReading(shifted, 0.0, [1.0, 2.0]).cartesian_form()
    for p, q in zip(a, b):
        assert q.x - p.x == pytest.approx(3.0)
        assert q.y - p.y == pytest.approx(-1.0)


def test_cartesian_form_needs_beams():
    reading = RangeReading(RangeSensor("L"))
    with pytest.raises(ValueError):
        reading.cartesian_form()