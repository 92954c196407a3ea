import math

import numpy as np
import pytest

from planarodom.pyramid import (
    build_pyramid,
    downsample_level,
    filter_first_level,
    pyramid_levels,
    to_cartesian,
    warp_scan,
)

FOVH = math.pi


def test_pyramid_levels_equal_width():
    assert pyramid_levels(10, 10, 5) == 5


def test_pyramid_levels_rejects_non_positive():
    with pytest.raises(ValueError):
        pyramid_levels(0, 10, 5)
    with pytest.raises(ValueError):
        pyramid_levels(10, 0, 5)


def test_filter_constant_scan_unchanged():
    ranges = [2.0] * 9
    assert np.allclose(filter_first_level(ranges), ranges)


def test_filter_invalid_readings_become_zero():
    ranges = [1.0, float("nan"), 1.0, 0.0, 1.0, float("inf"), 1.0]
    out = filter_first_level(ranges)
    assert out[1] == 0.0
    assert out[3] == 0.0
    assert out[5] == 0.0
    assert np.allclose(out[[0, 2, 4, 6]], 1.0)


def test_filter_keeps_edges_apart():
    ranges = [1.0, 1.0, 1.0, 5.0, 1.0, 1.0, 1.0]
    out = filter_first_level(ranges)
    assert out[3] == pytest.approx(5.0)
    assert np.allclose(np.delete(out, 3), 1.0)


def test_downsample_constant():
    out = downsample_level([3.0] * 9, 5)
    assert len(out) == 5
    assert np.allclose(out, 3.0)


def test_downsample_zero_center_stays_zero():
    out = downsample_level([1.0, 1.0, 0.0, 1.0, 1.0], 3)
    assert out[1] == 0.0
    assert np.allclose(out[[0, 2]], 1.0)


def test_downsample_rejects_short_input():
    with pytest.raises(ValueError):
        downsample_level([1.0, 1.0], 3)


def test_to_cartesian_geometry():
    ranges = np.array([1.0, 2.0, 0.0, 3.0, 4.0])
    xx, yy = to_cartesian(ranges, FOVH)
    assert np.allclose(np.hypot(xx, yy), ranges)
    assert xx[2] == 0.0 and yy[2] == 0.0
    assert math.atan2(yy[0], xx[0]) == pytest.approx(-FOVH / 2)
    assert math.atan2(yy[-1], xx[-1]) == pytest.approx(FOVH / 2)


def test_build_pyramid_sizes():
    width = 21
    ranges, xx, yy = build_pyramid([1.5] * width, 4, FOVH)
    assert [len(r) for r in ranges] == [math.ceil(width / 2 ** i) for i in range(4)]
    assert all(len(a) == len(b) for a, b in zip(ranges, xx))
    assert all(len(a) == len(b) for a, b in zip(ranges, yy))
    assert all(np.allclose(r, 1.5) for r in ranges)


def test_warp_identity_keeps_scan():
    ranges = np.linspace(1.0, 2.0, 11)
    xx, yy = to_cartesian(ranges, FOVH)
    warped, xw, yw = warp_scan(ranges, xx, yy, np.eye(3), FOVH)
    # the last pixel lies on the field-of-view limit and is not resampled
    assert np.allclose(warped[:-1], ranges[:-1])
    assert np.allclose(xw[:-1], xx[:-1])
    assert np.allclose(yw[:-1], yy[:-1])


def test_warp_rotation_by_one_pixel_shifts_scan():
    n = 11
    ranges = np.ones(n)
    xx, yy = to_cartesian(ranges, FOVH)
    step = FOVH / (n - 1)
    c, s = math.cos(step), math.sin(step)
    transform = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    warped, _, _ = warp_scan(ranges, xx, yy, transform, FOVH)
    assert warped[0] == 0.0
    assert np.allclose(warped[1:-1], 1.0)


def test_warp_rejects_mismatched_inputs():
    with pytest.raises(ValueError):
        warp_scan([1.0, 1.0], [1.0], [1.0, 1.0], np.eye(3), FOVH)
    with pytest.raises(ValueError):
        warp_scan([1.0, 1.0], [1.0, 1.0], [1.0, 1.0], np.eye(2), FOVH)