"""Closed-form rigid alignment of two corresponding planar point sets."""

from __future__ import annotations

import math
from typing import Sequence

from planarodom.movement import OrientedPoint, Point


def lu_miles_step(source: Sequence[Point], destination: Sequence[Point]) -> OrientedPoint:
    """The rotation and translation that best map ``source`` onto ``destination``."""
    if len(source) != len(destination):
        raise ValueError("point sets must have the same size")
    if not source:
        raise ValueError("point sets must not be empty")
    n = len(source)
    smx = sum(p.x for p in source) / n
    smy = sum(p.y for p in source) / n
    dmx = sum(p.x for p in destination) / n
    dmy = sum(p.y for p in destination) / n

    sxx = sxy = syx = syy = 0.0
    for s, d in zip(source, destination):
        sxx += (s.x - smx) * (d.x - dmx)
        sxy += (s.x - smx) * (d.y - dmy)
        syx += (s.y - smy) * (d.x - dmx)
        syy += (s.y - smy) * (d.y - dmy)
    omega = math.atan2(sxy - syx, sxx + syy)
    c, s = math.cos(omega), math.sin(omega)
    return OrientedPoint(dmx - smx * c + smy * s, dmy - smx * s - smy * c, omega)