"""Multi-resolution range-scan pyramid and scan warping."""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

import numpy as np

_MAX_RANGE_DIF = 0.3
_G_MASK = (1.0 / 16.0, 0.25, 6.0 / 16.0, 0.25, 1.0 / 16.0)


def _round(x: float) -> int:
    """Round half away from zero."""
    return math.floor(x + 0.5) if x >= 0 else -math.floor(-x + 0.5)


def pyramid_levels(width: int, cols: int, ctf_levels: int) -> int:
    """Number of pyramid levels needed for ``ctf_levels`` coarse-to-fine levels."""
    if width <= 0 or cols <= 0:
        raise ValueError("width and cols must be positive")
    ratio = _round(width / cols)
    if ratio <= 0:
        raise ValueError("cols must not exceed twice the width")
    return _round(math.log2(ratio)) + ctf_levels


def _weighted(values: np.ndarray, center: int, dcenter: float) -> float:
    """Edge-preserving Gaussian average around ``values[center]``."""
    total = 0.0
    weight = 0.0
    for offset, mask in zip(range(-2, 3), _G_MASK):
        index = center + offset
        if 0 <= index < len(values):
            value = values[index]
            abs_dif = abs(value - dcenter)
            if abs_dif < _MAX_RANGE_DIF:
                aux_w = mask * (_MAX_RANGE_DIF - abs_dif)
                weight += aux_w
                total += aux_w * value
    return total / weight


def filter_first_level(ranges: Sequence[float]) -> np.ndarray:
    """Smooth a raw scan at full resolution; invalid readings become 0."""
    r = np.asarray(ranges, dtype=float)
    out = np.zeros(len(r))
    for u, dcenter in enumerate(r):
        if math.isfinite(dcenter) and dcenter > 0.0:
            out[u] = _weighted(r, u, dcenter)
    return out


def downsample_level(previous: Sequence[float], cols: int) -> np.ndarray:
    """Halve the resolution of a filtered level into ``cols`` samples."""
    prev = np.asarray(previous, dtype=float)
    if 2 * (cols - 1) >= len(prev):
        raise ValueError("the previous level is too short for the requested size")
    out = np.zeros(cols)
    for u in range(cols):
        dcenter = prev[2 * u]
        if dcenter > 0.0:
            out[u] = _weighted(prev, 2 * u, dcenter)
    return out


def _angles(count: int, fovh: float) -> np.ndarray:
    if count > 1:
        return -0.5 * fovh + np.arange(count) * fovh / (count - 1)
    return np.full(count, -0.5 * fovh)


def to_cartesian(ranges: Sequence[float], fovh: float) -> Tuple[np.ndarray, np.ndarray]:
    """Coordinates of each reading over a field of view ``fovh``; 0 where invalid."""
    r = np.asarray(ranges, dtype=float)
    tita = _angles(len(r), fovh)
    valid = r > 0.0
    xx = np.where(valid, r * np.cos(tita), 0.0)
    yy = np.where(valid, r * np.sin(tita), 0.0)
    return xx, yy


def build_pyramid(
    ranges: Sequence[float], levels: int, fovh: float
) -> Tuple[List[np.ndarray], List[np.ndarray], List[np.ndarray]]:
    """Range, x and y arrays for each of ``levels`` resolutions, finest first."""
    width = len(ranges)
    range_levels: List[np.ndarray] = []
    xx_levels: List[np.ndarray] = []
    yy_levels: List[np.ndarray] = []
    for i in range(levels):
        cols_i = math.ceil(width / 2 ** i)
        if i == 0:
            level = filter_first_level(ranges)
        else:
            level = downsample_level(range_levels[-1], cols_i)
        xx, yy = to_cartesian(level, fovh)
        range_levels.append(level)
        xx_levels.append(xx)
        yy_levels.append(yy)
    return range_levels, xx_levels, yy_levels


def warp_scan(
    ranges: Sequence[float],
    xx: Sequence[float],
    yy: Sequence[float],
    transform: np.ndarray,
    fovh: float,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Move a scan by a 3x3 planar transform and resample it onto its pixels.

    Returns the warped ranges and their x and y coordinates.
    """
    r = np.asarray(ranges, dtype=float)
    x = np.asarray(xx, dtype=float)
    y = np.asarray(yy, dtype=float)
    t = np.asarray(transform, dtype=float)
    if not (len(r) == len(x) == len(y)):
        raise ValueError("ranges and coordinates must have the same length")
    if t.shape != (3, 3):
        raise ValueError("transform must be a 3x3 matrix")

    cols_i = len(r)
    cols_lim = float(cols_i - 1)
    kdtita = cols_lim / fovh
    warped = np.zeros(cols_i)
    wacu = np.zeros(cols_i)

    for rj, xj, yj in zip(r, x, y):
        if rj <= 0.0:
            continue
        x_w = t[0, 0] * xj + t[0, 1] * yj + t[0, 2]
        y_w = t[1, 0] * xj + t[1, 1] * yj + t[1, 2]
        range_w = math.sqrt(x_w * x_w + y_w * y_w)
        uwarp = kdtita * (math.atan2(y_w, x_w) + 0.5 * fovh)
        if not 0.0 <= uwarp < cols_lim:
            continue
        uwarp_l = int(uwarp)
        uwarp_r = uwarp_l + 1
        nearest = _round(uwarp)
        if abs(nearest - uwarp) < 0.05:
            warped[nearest] += range_w
            wacu[nearest] += 1.0
        else:
            delta_r = uwarp_r - uwarp
            delta_l = uwarp - uwarp_l
            w_r = delta_l * delta_l
            warped[uwarp_r] += w_r * range_w
            wacu[uwarp_r] += w_r
            w_l = delta_r * delta_r
            warped[uwarp_l] += w_l * range_w
            wacu[uwarp_l] += w_l

    filled = wacu > 0.0
    warped = np.where(filled, warped / np.where(filled, wacu, 1.0), 0.0)
    tita = -0.5 * fovh + np.arange(cols_i) / kdtita
    xx_w = np.where(filled, warped * np.cos(tita), 0.0)
    yy_w = np.where(filled, warped * np.sin(tita), 0.0)
    return warped, xx_w, yy_w