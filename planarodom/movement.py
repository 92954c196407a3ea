"""Planar points, poses and forward/sideward/rotate movements."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Union


def _wrap_angle(angle: float) -> float:
    """Bring an angle into [-pi, pi)."""
    if -math.pi <= angle < math.pi:
        return angle
    multiplier = int(angle / (2 * math.pi))
    angle -= multiplier * 2 * math.pi
    if angle >= math.pi:
        angle -= 2 * math.pi
    if angle < -math.pi:
        angle += 2 * math.pi
    return angle


@dataclass
class Point:
    """A point in the plane."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, other: Union[Point, float]) -> Union[Point, float]:
        if isinstance(other, Point):
            return self.x * other.x + self.y * other.y
        return Point(self.x * other, self.y * other)

    __rmul__ = __mul__


@dataclass
class OrientedPoint(Point):
    """A planar pose: position and heading."""

    theta: float = 0.0

    def __add__(self, other: Point) -> OrientedPoint:
        return OrientedPoint(
            self.x + other.x, self.y + other.y, self.theta + getattr(other, "theta", 0.0)
        )

    def __sub__(self, other: Point) -> OrientedPoint:
        return OrientedPoint(
            self.x - other.x, self.y - other.y, self.theta - getattr(other, "theta", 0.0)
        )

    def __mul__(self, other: Union[Point, float]) -> Union[OrientedPoint, float]:
        if isinstance(other, Point):
            return self.x * other.x + self.y * other.y
        return OrientedPoint(self.x * other, self.y * other, self.theta * other)

    __rmul__ = __mul__

    def normalize(self) -> None:
        """Bring the heading into [-pi, pi)."""
        self.theta = _wrap_angle(self.theta)


@dataclass
class FSRMovement:
    """A relative movement: forward ``f``, sideward ``s`` and rotation ``r``."""

    f: float = 0.0
    s: float = 0.0
    r: float = 0.0

    def normalize(self) -> None:
        """Bring the rotation into [-pi, pi)."""
        self.r = _wrap_angle(self.r)

    def invert(self) -> None:
        """Turn this movement into its inverse."""
        inverse = FSRMovement.invert_move(self)
        self.f, self.s, self.r = inverse.f, inverse.s, inverse.r

    def compose(self, other: FSRMovement) -> None:
        """Append ``other`` to this movement."""
        composed = FSRMovement.compose_moves(self, other)
        self.f, self.s, self.r = composed.f, composed.s, composed.r

    def move(self, point: OrientedPoint) -> OrientedPoint:
        """Apply this movement to a pose."""
        return FSRMovement.move_point(point, self)

    @staticmethod
    def compose_moves(first: FSRMovement, second: FSRMovement) -> FSRMovement:
        c, s = math.cos(first.r), math.sin(first.r)
        composed = FSRMovement(
            c * second.f - s * second.s + first.f,
            s * second.f + c * second.s + first.s,
            first.r + second.r,
        )
        composed.normalize()
        return composed

    @staticmethod
    def move_point(point: OrientedPoint, movement: FSRMovement) -> OrientedPoint:
        c, s = math.cos(point.theta), math.sin(point.theta)
        moved = replace(point)
        moved.x += movement.f * c - movement.s * s
        moved.y += movement.f * s + movement.s * c
        moved.theta = movement.r + point.theta
        moved.normalize()
        return moved

    @staticmethod
    def move_between_points(start: OrientedPoint, end: OrientedPoint) -> FSRMovement:
        c, s = math.cos(start.theta), math.sin(start.theta)
        dx = end.x - start.x
        dy = end.y - start.y
        movement = FSRMovement(dy * s + dx * c, dy * c - dx * s, end.theta - start.theta)
        movement.normalize()
        return movement

    @staticmethod
    def invert_move(movement: FSRMovement) -> FSRMovement:
        c, s = math.cos(movement.r), math.sin(movement.r)
        inverse = FSRMovement(
            -c * movement.f - s * movement.s,
            s * movement.f - c * movement.s,
            -movement.r,
        )
        inverse.normalize()
        return inverse

    @staticmethod
    def frame_transformation(
        reference_frame1: OrientedPoint,
        reference_frame2: OrientedPoint,
        point: OrientedPoint,
    ) -> OrientedPoint:
        """Map ``point`` from frame 1 into frame 2, given one pose known in both."""
        zero = OrientedPoint()
        itrans_ref1 = FSRMovement.move_between_points(zero, reference_frame1)
        itrans_ref1.invert()
        trans_ref2 = FSRMovement.move_between_points(zero, reference_frame2)
        trans_pt = FSRMovement.move_between_points(zero, point)
        total = FSRMovement.compose_moves(
            FSRMovement.compose_moves(trans_ref2, itrans_ref1), trans_pt
        )
        return total.move(zero)