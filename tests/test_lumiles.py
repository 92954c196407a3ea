import math
import random

import pytest

from planarodom.lumiles import lu_miles_step
from planarodom.movement import Point


def _transform(points, tx, ty, theta):
    c, s = math.cos(theta), math.sin(theta)
    return [Point(c * p.x - s * p.y + tx, s * p.x + c * p.y + ty) for p in points]


@pytest.mark.parametrize("tx,ty,theta", [(1.0, -2.0, 0.3), (0.0, 0.0, -1.2), (5.0, 3.0, 2.5)])
def test_recovers_rigid_transform(tx, ty, theta):
    rng = random.Random(11)
    src = [Point(rng.uniform(-5, 5), rng.uniform(-5, 5)) for _ in range(20)]
    dst = _transform(src, tx, ty, theta)
    t = lu_miles_step(src, dst)
    assert t.x == pytest.approx(tx)
    assert t.y == pytest.approx(ty)
    assert t.theta == pytest.approx(theta)


def test_identity_for_equal_sets():
    src = [Point(1.0, 2.0), Point(-3.0, 0.5), Point(0.0, 4.0)]
    t = lu_miles_step(src, list(src))
    assert (t.x, t.y, t.theta) == pytest.approx((0.0, 0.0, 0.0))


def test_size_mismatch_raises():
    with pytest.raises(ValueError):
        lu_miles_step([Point(0, 0)], [])


def test_empty_raises():
    with pytest.raises(ValueError):
        lu_miles_step([], [])