r"""
Shared base for the block-structured simulations.

This module provides:

Classes
    :class:`BlockSimulation` — owns a :class:`~stochsim.sampler.RandomSampler`
    and dispatches kernels to an execution backend.

The simulation class handles:

- Explicit, injectable seeding (no global RNG state)
- Sequential and parallel execution (delegated to :mod:`stochsim.backends`)
- Logging of how each run is executed

See Also
--------
stochsim.pi.PiEstimator
stochsim.paths.PathSimulator
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from typing import Any, Callable

from .backends import ProcessBackend, SequentialBackend, ThreadBackend, is_windows_platform
from .config import VALID_BACKENDS
from .exceptions import InvalidArgumentError
from .sampler import RandomSampler

logger = logging.getLogger(__name__)

__all__ = ["BlockSimulation"]


class BlockSimulation:
    r"""
    Base class for simulations made of independent work items.

    Parameters
    ----------
    name : str
        Label used in log messages.
    sampler : RandomSampler, optional
        Random stream to use. A fresh OS-seeded sampler is created if omitted.
    backend : {"sequential", "thread", "process", "auto"}, default "sequential"
        Execution strategy.
    n_workers : int, optional
        Worker count for parallel backends. Defaults to the CPU count.

    Notes
    -----
    ``"auto"`` maps to sequential for jobs below :attr:`_PARALLEL_THRESHOLD`
    items, otherwise to threads on POSIX-like platforms (NumPy releases the
    GIL) and to processes on Windows.
    """

    # Minimum work items before "auto" goes parallel
    _PARALLEL_THRESHOLD = 20_000

    def __init__(
        self,
        name: str,
        sampler: RandomSampler | None = None,
        *,
        backend: str = "sequential",
        n_workers: int | None = None,
    ):
        if backend not in VALID_BACKENDS:
            raise InvalidArgumentError(f"backend must be one of {VALID_BACKENDS}, got '{backend}'")
        if n_workers is not None and n_workers <= 0:
            raise InvalidArgumentError("n_workers must be positive")
        self.name = name
        self.sampler = sampler if sampler is not None else RandomSampler()
        self.backend = backend
        self.n_workers = n_workers

    def set_seed(self, seed: int | None) -> None:
        """Re-seed the owned sampler."""
        self.sampler.set_seed(seed)

    def _resolve_backend(self, n_items: int) -> str:
        if self.backend != "auto":
            return self.backend
        n_workers = self.n_workers or mp.cpu_count()
        if n_workers <= 1 or n_items < self._PARALLEL_THRESHOLD:
            return "sequential"
        if is_windows_platform():
            logger.info("Parallel backend 'auto' resolved to 'process' on Windows platform.")
            return "process"
        return "thread"

    def _create_backend(self, backend: str) -> SequentialBackend | ThreadBackend | ProcessBackend:
        if backend == "sequential":
            return SequentialBackend()
        n_workers = self.n_workers or mp.cpu_count()
        if backend == "thread":
            return ThreadBackend(n_workers=n_workers)
        return ProcessBackend(n_workers=n_workers)

    def _execute(
        self,
        kernel: Callable[[int, int, RandomSampler], Any],
        n_items: int,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> list[tuple[tuple[int, int], Any]]:
        r"""
        Run ``kernel`` over ``[0, n_items)`` with the resolved backend.

        Returns
        -------
        list
            ``((start, stop), partial)`` pairs in completion order.
        """
        backend = self._resolve_backend(n_items)
        if backend == "sequential":
            logger.info("%s: computing %d items sequentially...", self.name, n_items)
        else:
            logger.info(
                "%s: computing %d items in parallel using %s backend with %d workers...",
                self.name, n_items, backend, self.n_workers or mp.cpu_count(),
            )
        return self._create_backend(backend).run(kernel, n_items, self.sampler, progress_callback)
