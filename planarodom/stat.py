"""Gaussian sampling and evaluation helpers."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from planarodom.movement import OrientedPoint


def _nonzero(rng: random.Random) -> float:
    while True:
        r = rng.random()
        if r != 0.0:
            return r


def pf_ran_gaussian(sigma: float, rng: Optional[random.Random] = None) -> float:
    """Draw from a zero-mean Gaussian with the polar Box-Muller method."""
    rng = rng if rng is not None else random.Random()
    while True:
        x1 = 2.0 * _nonzero(rng) - 1.0
        _nonzero(rng)
        x2 = 2.0 * rng.random() - 1.0
        w = x1 * x1 + x2 * x2
        if 0.0 < w <= 1.0:
            break
    return sigma * x2 * math.sqrt(-2.0 * math.log(w) / w)


def sample_gaussian(
    sigma: float, seed: int = 0, rng: Optional[random.Random] = None
) -> float:
    """Draw from a zero-mean Gaussian; a non-zero ``seed`` reseeds ``rng`` first."""
    rng = rng if rng is not None else random.Random()
    if seed != 0:
        rng.seed(seed)
    if sigma == 0:
        return 0.0
    return pf_ran_gaussian(sigma, rng)


def eval_log_gaussian(sigma_square: float, delta: float) -> float:
    """Log density of a zero-mean Gaussian with variance ``sigma_square`` at ``delta``."""
    if sigma_square <= 0:
        sigma_square = 1e-4
    return -0.5 * delta * delta / sigma_square - 0.5 * math.log(2 * math.pi * sigma_square)


@dataclass
class Gaussian3:
    """A Gaussian over planar poses, stored in its eigen basis.

    ``eigenvectors`` holds the eigenvectors as columns, ``eigenvalues`` the
    matching variances.
    """

    mean: OrientedPoint = field(default_factory=OrientedPoint)
    eigenvalues: Sequence[float] = (1.0, 1.0, 1.0)
    eigenvectors: Sequence[Sequence[float]] = (
        (1.0, 0.0, 0.0),
        (0.0, 1.0, 0.0),
        (0.0, 0.0, 1.0),
    )

    def eval(self, pose: OrientedPoint) -> float:
        """Log density at ``pose``."""
        dtheta = pose.theta - self.mean.theta
        q: List[float] = [
            pose.x - self.mean.x,
            pose.y - self.mean.y,
            math.atan2(math.sin(dtheta), math.cos(dtheta)),
        ]
        evec = self.eigenvectors
        total = 0.0
        for column, variance in enumerate(self.eigenvalues):
            projection = sum(evec[row][column] * q[row] for row in range(3))
            total += eval_log_gaussian(variance, projection)
        return total