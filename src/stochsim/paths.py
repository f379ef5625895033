r"""
Geometric Brownian motion path generation.

The solution of

.. math::
   dS_t = \mu S_t\,dt + \sigma S_t\,dW_t

is :math:`S_t = S_0 \exp\left((\mu - \tfrac{1}{2}\sigma^2)t + \sigma W_t\right)`.
On a uniform grid with :math:`\Delta t = T / M` each path draws
:math:`Z_k \sim \mathcal{N}(0, 1)` and sets

.. math::
   S_{t_{k+1}} = S_{t_k} \exp\left((\mu - \tfrac{1}{2}\sigma^2)\Delta t
   + \sigma \sqrt{\Delta t}\,Z_k\right).

The multiplicative update keeps every price positive for finite draws.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, Iterator

import numpy as np

from .config import SimulationParameters
from .exceptions import InvalidArgumentError, NumericAnomalyError
from .sampler import RandomSampler
from .simulation import BlockSimulation

logger = logging.getLogger(__name__)

__all__ = ["PathMatrix", "PathSimulator"]


class PathMatrix:
    r"""
    Read-only ``n_paths x (n_steps + 1)`` grid of prices.

    Row ``i`` is the trajectory of path ``i``; column 0 holds the initial
    price. Values live in one contiguous float64 buffer whose ``writeable``
    flag is cleared, so accessors hand out views that cannot be mutated.

    Parameters
    ----------
    data : array_like
        Two-dimensional price data with at least one column.
    copy : bool, default True
        Copy ``data``. Pass ``False`` only for a freshly built buffer that
        nobody else references.
    """

    __slots__ = ("_data",)

    def __init__(self, data, *, copy: bool = True):
        arr = np.array(data, dtype=float) if copy else np.ascontiguousarray(data, dtype=float)
        if arr.ndim != 2 or arr.shape[1] < 1:
            raise InvalidArgumentError(f"path data must be 2-D with at least one column, got shape {arr.shape}")
        arr.flags.writeable = False
        self._data = arr

    @property
    def n_paths(self) -> int:
        return self._data.shape[0]

    @property
    def n_steps(self) -> int:
        return self._data.shape[1] - 1

    @property
    def shape(self) -> tuple[int, int]:
        return self._data.shape

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the whole grid."""
        return self._data

    def row(self, i: int) -> np.ndarray:
        return self._data[i]

    def column(self, j: int) -> np.ndarray:
        return self._data[:, j]

    def final_prices(self) -> np.ndarray:
        """Last column: the terminal price of every path."""
        return self._data[:, -1]

    def __len__(self) -> int:
        return self.n_paths

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._data)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PathMatrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"PathMatrix(n_paths={self.n_paths}, n_steps={self.n_steps})"


def _simulate_block(
    start: int,
    stop: int,
    sampler: RandomSampler,
    *,
    params: SimulationParameters,
) -> np.ndarray:
    """Generate paths ``[start, stop)``; one independent draw per path and step."""
    n_rows = stop - start
    z = sampler.normal_array((n_rows, params.step_count))
    drift_term = (params.drift - 0.5 * params.volatility * params.volatility) * params.dt
    block = np.empty((n_rows, params.step_count + 1), dtype=float)
    block[:, 0] = params.initial_price
    block[:, 1:] = np.exp(drift_term + params.volatility * params.sqrt_dt * z)
    # Running product left to right: price[j+1] = price[j] * growth[j]
    np.cumprod(block, axis=1, out=block)
    return block


class PathSimulator(BlockSimulation):
    r"""
    Simulate independent GBM paths.

    Parameters
    ----------
    sampler : RandomSampler, optional
        Random stream. A fresh OS-seeded sampler is created if omitted.
    **kwargs :
        ``backend`` and ``n_workers``, see :class:`~stochsim.simulation.BlockSimulation`.

    Examples
    --------
    >>> sim = PathSimulator(RandomSampler(7))
    >>> m = sim.simulate(SimulationParameters(step_count=10, path_count=5))
    >>> m.shape
    (5, 11)
    """

    def __init__(self, sampler: RandomSampler | None = None, **kwargs):
        super().__init__("GBM Path Simulation", sampler, **kwargs)

    def simulate(
        self,
        params: SimulationParameters,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> PathMatrix:
        r"""
        Generate a :class:`PathMatrix` for ``params``.

        Raises
        ------
        InvalidArgumentError
            If ``params`` is not a :class:`SimulationParameters` (validation of
            counts happens when it is constructed, before any allocation).
        NumericAnomalyError
            If any generated price is NaN or infinite.
        """
        if not isinstance(params, SimulationParameters):
            raise InvalidArgumentError(f"expected SimulationParameters, got {type(params).__name__}")

        kernel = functools.partial(_simulate_block, params=params)
        parts = self._execute(kernel, params.path_count, progress_callback)

        prices = np.empty((params.path_count, params.step_count + 1), dtype=float)
        for (i, j), block in parts:
            prices[i:j] = block

        bad_rows = ~np.isfinite(prices).all(axis=1)
        if bad_rows.any():
            n_bad = int(np.count_nonzero(bad_rows))
            first = int(np.argmax(bad_rows))
            logger.error(
                "Non-finite prices in %d of %d paths (first: path %d)", n_bad, params.path_count, first + 1
            )
            raise NumericAnomalyError(
                f"{n_bad} of {params.path_count} paths contain NaN or infinite prices"
            )
        return PathMatrix(prices, copy=False)
