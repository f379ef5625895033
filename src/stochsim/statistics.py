r"""
Summary statistics of the terminal price distribution.

:func:`summarize` reduces a :class:`~stochsim.paths.PathMatrix` to its final
prices, evaluates them with the default :class:`~stochsim.stats_engine.StatsEngine`
and sets the result next to the closed-form GBM expectation

.. math::
   \mathbb{E}[S_T] = S_0 \, e^{\mu T}.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .config import SimulationParameters
from .exceptions import InvalidArgumentError, NumericAnomalyError
from .paths import PathMatrix
from .stats_engine import DEFAULT_ENGINE, StatsContext, StatsEngine

__all__ = ["Statistics", "summarize", "theoretical_mean"]

_REQUIRED = ("mean", "variance", "std", "min", "max", "ci_mean")


@dataclass(frozen=True)
class Statistics:
    r"""
    Container for the terminal-price summary of one GBM run.

    Attributes
    ----------
    n_paths : int
        Number of simulated paths.
    initial_price, horizon_years : float
        Echoed from the run's :class:`~stochsim.config.SimulationParameters`.
    mean : float
        Sample mean of the final prices.
    variance : float
        Population variance (divide by ``n_paths``).
    stddev : float
        :math:`\sqrt{\max(\text{variance}, 0)}`.
    min, max : float
        Extremes of the final prices.
    theoretical_mean : float
        :math:`S_0 e^{\mu T}`, for comparison only.
    std_error : float
        Standard error of the mean, using the sample standard deviation.
    confidence : float
        Level of the interval ``[ci_low, ci_high]`` around ``mean``.
    """

    n_paths: int
    initial_price: float
    horizon_years: float
    mean: float
    variance: float
    stddev: float
    min: float
    max: float
    theoretical_mean: float
    std_error: float
    confidence: float
    ci_low: float
    ci_high: float

    def result_to_string(self) -> str:
        """Human-readable report, one statistic per line."""
        lines = [
            "Simulation Statistics:",
            "---------------------",
            f"Number of paths: {self.n_paths}",
            f"Initial price: ${self.initial_price:.2f}",
            f"Time period: {self.horizon_years:g} years",
            f"Mean final price: ${self.mean:.2f}",
            f"Standard deviation: ${self.stddev:.2f}",
            f"Min final price: ${self.min:.2f}",
            f"Max final price: ${self.max:.2f}",
            f"Theoretical expected price: ${self.theoretical_mean:.2f}",
            f"{int(round(self.confidence * 100))}% CI for the mean: "
            f"[${self.ci_low:.2f}, ${self.ci_high:.2f}]",
        ]
        return "\n".join(lines)


def theoretical_mean(params: SimulationParameters) -> float:
    r"""Closed-form :math:`\mathbb{E}[S_T] = S_0 e^{\mu T}`."""
    return params.initial_price * math.exp(params.drift * params.horizon_years)


def summarize(
    matrix: PathMatrix,
    params: SimulationParameters,
    *,
    confidence: float = 0.95,
    engine: StatsEngine | None = None,
) -> Statistics:
    r"""
    Summarise the final prices of ``matrix``.

    Parameters
    ----------
    matrix : PathMatrix
        Simulated paths.
    params : SimulationParameters
        Parameters the matrix was generated with.
    confidence : float, default 0.95
        Level of the interval around the mean.
    engine : StatsEngine, optional
        Custom engine; defaults to :data:`~stochsim.stats_engine.DEFAULT_ENGINE`.

    Raises
    ------
    InvalidArgumentError
        If the matrix has no paths.
    NumericAnomalyError
        If a final price is NaN or infinite, or a statistic cannot be computed.

    Examples
    --------
    >>> m = PathMatrix([[100.0, 110.0], [100.0, 90.0]])
    >>> s = summarize(m, SimulationParameters(step_count=1, path_count=2))
    >>> s.mean, s.stddev
    (100.0, 10.0)
    """
    if matrix.n_paths == 0:
        raise InvalidArgumentError("cannot summarize an empty path matrix")

    finals = np.asarray(matrix.final_prices(), dtype=float)
    if not np.isfinite(finals).all():
        n_bad = int(np.count_nonzero(~np.isfinite(finals)))
        raise NumericAnomalyError(f"{n_bad} final prices are NaN or infinite")

    eng = engine or DEFAULT_ENGINE
    stats = eng.compute(finals, StatsContext(n=int(finals.size), confidence=confidence))
    missing = [k for k in _REQUIRED if k not in stats]
    if missing:
        raise NumericAnomalyError(f"statistics could not be computed: {missing}")

    ci = stats["ci_mean"]
    return Statistics(
        n_paths=matrix.n_paths,
        initial_price=params.initial_price,
        horizon_years=params.horizon_years,
        mean=stats["mean"],
        variance=stats["variance"],
        stddev=stats["std"],
        min=stats["min"],
        max=stats["max"],
        theoretical_mean=theoretical_mean(params),
        std_error=float(ci["se"]),
        confidence=confidence,
        ci_low=float(ci["low"]),
        ci_high=float(ci["high"]),
    )
