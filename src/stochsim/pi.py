r"""
Monte Carlo estimation of :math:`\pi`.

Points :math:`(X_i, Y_i)` are drawn uniformly on :math:`[0, 1)^2` and

.. math::
   \widehat{\pi}_n = \frac{4}{n} \sum_{i=1}^n \mathbf{1}\{X_i^2 + Y_i^2 \le 1\},

since the quarter unit disk covers :math:`\pi / 4` of the unit square.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable

import numpy as np

from .config import require_positive_int
from .sampler import RandomSampler
from .simulation import BlockSimulation

logger = logging.getLogger(__name__)

__all__ = ["PiEstimate", "PiEstimator"]


@dataclass(frozen=True)
class PiEstimate:
    """One point of the convergence table."""

    n_points: int
    estimate: float

    @property
    def abs_error(self) -> float:
        return abs(self.estimate - math.pi)

    def result_to_string(self) -> str:
        return (
            f"Samples: {self.n_points:>10} | Pi Estimate: {self.estimate:.12f}"
            f" | Error: {self.abs_error:.12f}"
        )


def _count_inside(start: int, stop: int, sampler: RandomSampler) -> int:
    """Count points of the block ``[start, stop)`` inside the quarter disk."""
    n = stop - start
    x = sampler.uniform_array(n)
    y = sampler.uniform_array(n)
    return int(np.count_nonzero(x * x + y * y <= 1.0))


class PiEstimator(BlockSimulation):
    r"""
    Estimate :math:`\pi` by geometric probability on the unit square.

    Examples
    --------
    >>> est = PiEstimator(RandomSampler(42))
    >>> 0.0 <= est.estimate(10_000) <= 4.0
    True
    """

    def __init__(self, sampler: RandomSampler | None = None, **kwargs):
        super().__init__("Pi Estimation", sampler, **kwargs)

    def estimate(
        self,
        n_points: int,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> float:
        r"""
        Throw ``n_points`` darts at :math:`[0, 1)^2` and return :math:`\widehat{\pi}`.

        Parameters
        ----------
        n_points : int
            Number of uniform pairs. Must be positive.
        progress_callback : callable, optional
            ``f(completed, total)`` forwarded to the backend.

        Returns
        -------
        float
            ``4.0 * inside / n_points``, always in :math:`[0, 4]`.

        Raises
        ------
        InvalidArgumentError
            If ``n_points`` is not a positive integer.
        """
        n_points = require_positive_int(n_points, "n_points")
        parts = self._execute(_count_inside, n_points, progress_callback)
        # Python ints: no overflow however many points are thrown
        inside = sum(count for _, count in parts)
        return 4.0 * inside / n_points

    def estimate_many(self, sample_sizes: Iterable[int]) -> list[PiEstimate]:
        """Run :meth:`estimate` once per sample size, in the given order."""
        out = []
        for n in sample_sizes:
            value = self.estimate(n)
            out.append(PiEstimate(n_points=int(n), estimate=value))
        return out
