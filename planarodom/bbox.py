"""Oriented bounding box of a planar point set along its principal axes."""

from __future__ import annotations

import math
from typing import Sequence, Union

from planarodom.movement import Point

PointLike = Union[Point, Sequence[float]]


def _xy(p: PointLike):
    if isinstance(p, Point):
        return p.x, p.y
    return p[0], p[1]


class OrientedBoundingBox:
    """Box aligned with the eigenvectors of the points' covariance.

    The corners are ``ul``, ``ur``, ``ll`` and ``lr``.
    """

    def __init__(self, points: Sequence[PointLike]) -> None:
        coords = [_xy(p) for p in points]
        if not coords:
            raise ValueError("a bounding box needs at least one point")
        count = len(coords)
        cx = sum(x for x, _ in coords) / count
        cy = sum(y for _, y in coords) / count

        x1 = sum((x - cx) ** 2 for x, _ in coords) / count
        x2 = sum((x - cx) * (y - cy) for x, y in coords) / count
        x3 = x2
        x4 = sum((y - cy) ** 2 for _, y in coords) / count

        term = x4 * x4 - 2.0 * x1 * x4 + x1 * x1 + 4.0 * x2 * x3
        if x3 == 0 or x2 == 0 or term < 0:
            raise ValueError(
                f"error computing the eigenvectors: x3={x3}, x2={x2}, term={term}"
            )

        root = math.sqrt(term)
        lamda1 = 0.5 * (x4 + x1 + root)
        lamda2 = 0.5 * (x4 + x1 - root)

        def eigenvector(lam: float):
            vx = -(x4 - lam) * (x4 - lam) * (x1 - lam) / (x2 * x3 * x3)
            vy = (x4 - lam) * (x1 - lam) / (x2 * x3)
            norm = math.hypot(vx, vy)
            return vx / norm, vy / norm

        v1x, v1y = eigenvector(lamda1)
        v2x, v2y = eigenvector(lamda2)

        xs = [(x - cx) * v1x + (y - cy) * v1y for x, y in coords]
        ys = [(x - cx) * v2x + (y - cy) * v2y for x, y in coords]
        xmin, xmax = min(xs), max(xs)
        ymin, ymax = min(ys), max(ys)

        def corner(a: float, b: float) -> Point:
            return Point(cx + a * v1x + b * v2x, cy + a * v1y + b * v2y)

        self.ul = corner(xmin, ymin)
        self.ur = corner(xmax, ymin)
        self.ll = corner(xmin, ymax)
        self.lr = corner(xmax, ymax)

    def area(self) -> float:
        """Area of the box."""
        return math.dist(_xy(self.ul), _xy(self.ll)) * math.dist(_xy(self.ul), _xy(self.ur))