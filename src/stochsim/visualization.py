r"""
Optional matplotlib figures for both pipelines.

Requires the ``plot`` extra (``pip install stochsim[plot]``).
"""

from __future__ import annotations

import math
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np

from .config import SimulationParameters
from .paths import PathMatrix
from .pi import PiEstimate
from .statistics import theoretical_mean

__all__ = ["plot_paths", "plot_pi_convergence"]


def plot_paths(matrix: PathMatrix, params: SimulationParameters, n_show: int = 20):
    """Plot the first ``n_show`` trajectories against the expected price curve."""
    fig, ax = plt.subplots(figsize=(10, 6))
    t = np.linspace(0.0, params.horizon_years, matrix.n_steps + 1)
    for row in matrix.values[: max(0, n_show)]:
        ax.plot(t, row, linewidth=0.8, alpha=0.7)
    ax.plot(
        t,
        params.initial_price * np.exp(params.drift * t),
        color="black",
        linestyle="--",
        linewidth=2,
        label=f"E[S_T] = {theoretical_mean(params):.2f}",
    )
    ax.set_xlabel("Time (years)")
    ax.set_ylabel("Price")
    ax.set_title(f"GBM paths ({min(n_show, matrix.n_paths)} of {matrix.n_paths})")
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def plot_pi_convergence(estimates: Sequence[PiEstimate]):
    """Absolute error against sample size on log-log axes, with the 1/sqrt(n) reference."""
    fig, ax = plt.subplots(figsize=(8, 5))
    n = np.array([e.n_points for e in estimates], dtype=float)
    err = np.array([e.abs_error for e in estimates], dtype=float)
    ax.loglog(n, np.maximum(err, np.finfo(float).tiny), "o-", label="|estimate - π|")
    # Standard error of the estimator: 4 sqrt(p(1-p)/n) with p = π/4
    p = math.pi / 4.0
    ax.loglog(n, 4.0 * np.sqrt(p * (1.0 - p) / n), "--", color="gray", label="standard error")
    ax.set_xlabel("Samples")
    ax.set_ylabel("Absolute error")
    ax.set_title("Monte Carlo π convergence")
    ax.legend()
    ax.grid(True, which="both", alpha=0.3)
    fig.tight_layout()
    return fig
