"""Parzen-window smoothing of weighted one-dimensional samples."""

from __future__ import annotations

import bisect
import math
import random
import sys
from dataclasses import dataclass
from typing import IO, Iterator, List, Optional, Tuple

from planarodom.stat import sample_gaussian

_MAXDOUBLE = sys.float_info.max


def _grid(start: float, stop: float, step: float) -> Iterator[float]:
    """Values ``start, start+step, ...`` up to ``stop`` by repeated addition."""
    if step <= 0:
        raise ValueError("step must be positive")
    x = start
    while x <= stop:
        yield x
        x += step


@dataclass
class DataPoint:
    """A sample position ``x`` with weight ``y``."""

    x: float = 0.0
    y: float = 0.0


class DataSmoother:
    """Kernel density estimate over weighted samples with a Gaussian kernel."""

    def __init__(self, parzen_window: float, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.reset(parzen_window)

    def reset(self, parzen_window: float) -> None:
        """Drop all samples and set a new kernel width."""
        self.data: List[DataPoint] = []
        self.cumulated: List[float] = []
        self.total_mass = -1.0
        self.parzen_window = parzen_window
        self.lower = _MAXDOUBLE
        self.upper = -_MAXDOUBLE
        self.last_step = 0.001

    def _require_data(self) -> None:
        if not self.data:
            raise ValueError("the smoother holds no data")

    def set_min_to_zero(self) -> None:
        """Shift all weights so that the smallest becomes zero."""
        minval = min((d.y for d in self.data), default=_MAXDOUBLE)
        for d in self.data:
            d.y -= minval
        self.cumulated.clear()

    def add(self, x: float, p: float) -> None:
        """Add a sample at ``x`` with weight ``p``."""
        self.data.append(DataPoint(x, p))
        self.total_mass = -1.0
        margin = 3.0 * self.parzen_window
        self.lower = min(self.lower, x - margin)
        self.upper = max(self.upper, x + margin)
        self.cumulated.clear()

    def integrate(self, step: float) -> float:
        """Integrate the smoothed density over its whole support and keep the result."""
        self.last_step = step
        self.total_mass = self.integral(step, self.upper)
        return self.total_mass

    def integral(self, step: float, x_to: float) -> float:
        """Integral of the smoothed density from the lower bound to ``x_to``."""
        return sum(self.smoothed_data(x) * step for x in _grid(self.lower, x_to, step))

    def smoothed_data(self, x: float) -> float:
        """Smoothed density at ``x``."""
        self._require_data()
        p = 0.0
        sum_y = 0.0
        for d in self.data:
            dist = abs(x - d.x)
            p += d.y * math.exp(-0.5 * (dist / self.parzen_window) ** 2)
            sum_y += d.y
        denom = math.sqrt(2.0 * math.pi) * sum_y * self.parzen_window
        return p * (1.0 / denom)

    def sample_numeric(self, step: float) -> float:
        """Draw from the smoothed density by numeric inversion on a grid."""
        self._require_data()
        if self.total_mass < 0 or step != self.last_step:
            self.integrate(step)
        r = self.rng.uniform(0.0, self.total_mass)
        acc = 0.0
        for x in _grid(self.lower, self.upper, step):
            acc += self.smoothed_data(x) * step
            if acc > r:
                return x - 0.5 * step
        return self.upper

    def compute_cumulated(self) -> List[float]:
        """Running sums of the sample weights."""
        self._require_data()
        total = 0.0
        self.cumulated = []
        for d in self.data:
            total += d.y
            self.cumulated.append(total)
        return self.cumulated

    def _thresholds(self) -> List[float]:
        if not self.cumulated:
            self.compute_cumulated()
        return self.cumulated

    def sample(self) -> float:
        """Draw a sample position, jittered by the kernel."""
        self._require_data()
        cumulated = self._thresholds()
        target = self.rng.uniform(0.0, cumulated[-1])
        acc = 0.0
        for point, c in zip(self.data, cumulated):
            acc += c
            if acc >= target:
                return point.x + sample_gaussian(self.parzen_window, rng=self.rng)
        raise RuntimeError("sampling failed to select a data point")

    def sample_multiple(self, num: int) -> List[float]:
        """Draw ``num`` samples, ordered by the data point they come from."""
        self._require_data()
        cumulated = self._thresholds()
        randoms = sorted(self.rng.uniform(0.0, cumulated[-1]) for _ in range(num))
        samples: List[float] = []
        acc = 0.0
        j = 0
        for point, c in zip(self.data, cumulated):
            if j >= num:
                break
            acc += c
            k = bisect.bisect_right(randoms, acc, lo=j)
            for _ in range(j, k):
                samples.append(point.x + sample_gaussian(self.parzen_window, rng=self.rng))
            j = k
        return samples

    def approx_gauss(self, step: float) -> Tuple[float, float]:
        """Mean and standard deviation of the smoothed density on a grid."""
        self._require_data()
        grid = list(_grid(self.lower, self.upper, step))
        values = [self.smoothed_data(x) for x in grid]
        total = sum(values)
        mean = sum(x * d for x, d in zip(grid, values)) / total
        var = sum((x - mean) ** 2 * d for x, d in zip(grid, values)) / total
        return mean, math.sqrt(var)

    @staticmethod
    def gauss(x: float, mean: float, sigma: float) -> float:
        """Normal density at ``x``."""
        return 1.0 / (math.sqrt(2.0 * math.pi) * sigma) * math.exp(-0.5 * ((x - mean) / sigma) ** 2)

    def cramer_von_mises_to_gauss(self, step: float, mean: float, sigma: float) -> float:
        """Sum of squared differences between the two cumulative distributions."""
        p = 0.0
        sint = 0.0
        gint = 0.0
        for x in _grid(self.lower, self.upper, step):
            sint += self.smoothed_data(x) * step
            gint += self.gauss(x, mean, sigma) * step
            p += (sint - gint) ** 2
        return p

    def kld_to_gauss(self, step: float, mean: float, sigma: float) -> float:
        """Kullback-Leibler divergence from the smoothed density to a Gaussian."""
        p = 0.0
        sd = 0.0
        sg = 0.0
        for x in _grid(self.lower, self.upper, step):
            d = 1e-10 + self.smoothed_data(x)
            g = 1e-10 + self.gauss(x, mean, sigma)
            sd += d
            sg += g
            p += d * math.log(d / g)
        if abs(sd * step - sg * step) > 0.1:
            raise ValueError("the Gaussian does not cover the smoothed support")
        return p * step

    def dump_data(self, stream: IO[str]) -> None:
        """Write the raw samples as ``x y`` lines."""
        for d in self.data:
            stream.write("%f %f\n" % (d.x, d.y))

    def dump_smoothed_data(self, stream: IO[str], step: float) -> None:
        """Write the smoothed density on a grid as ``x p`` lines."""
        for x in _grid(self.lower, self.upper, step):
            stream.write("%f %f\n" % (x, self.smoothed_data(x)))