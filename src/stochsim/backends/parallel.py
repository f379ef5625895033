r"""
Parallel execution backends.

This module provides:

Classes
    :class:`ThreadBackend` — Thread-based parallelism using ThreadPoolExecutor
    :class:`ProcessBackend` — Process-based parallelism using ProcessPoolExecutor

Both split the work into ``n_workers * chunks_per_worker`` blocks and give
every block its own child :class:`~stochsim.sampler.RandomSampler`, so no
generator is ever shared between workers.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Callable

import numpy as np

from ..sampler import RandomSampler
from .base import make_blocks, worker_run_block

if TYPE_CHECKING:
    from .base import BlockResult, Kernel

logger = logging.getLogger(__name__)

__all__ = [
    "ThreadBackend",
    "ProcessBackend",
]

# Number of chunks per worker for load balancing
_CHUNKS_PER_WORKER = 8


class _PoolBackend:
    def __init__(self, n_workers: int, chunks_per_worker: int = _CHUNKS_PER_WORKER):
        if n_workers <= 0:
            raise ValueError("n_workers must be positive")
        self.n_workers = n_workers
        self.chunks_per_worker = chunks_per_worker

    def _prepare_blocks(
        self, n_items: int, sampler: RandomSampler
    ) -> tuple[list[tuple[int, int]], list[np.random.SeedSequence]]:
        """Prepare work blocks and independent random seeds."""
        block_size = max(1, n_items // (self.n_workers * self.chunks_per_worker))
        blocks = make_blocks(n_items, block_size)
        child_seqs = sampler.seed_seq.spawn(len(blocks))
        return blocks, child_seqs


class ThreadBackend(_PoolBackend):
    r"""
    Thread-based parallel execution backend.

    Effective because NumPy releases the GIL while filling large random arrays
    and evaluating vectorised expressions.

    Parameters
    ----------
    n_workers : int
        Number of worker threads to use.
    chunks_per_worker : int, default 8
        Number of work chunks per worker for load balancing.
    """

    def run(
        self,
        kernel: "Kernel",
        n_items: int,
        sampler: RandomSampler,
        progress_callback: Callable[[int, int], None] | None,
    ) -> list["BlockResult"]:
        blocks, child_seqs = self._prepare_blocks(n_items, sampler)
        out = []
        completed = 0
        max_workers = min(self.n_workers, len(blocks))

        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            futs = [ex.submit(worker_run_block, kernel, i, j, ss) for (i, j), ss in zip(blocks, child_seqs)]
            for f in as_completed(futs):
                (i, j), part = f.result()
                out.append(((i, j), part))
                completed += j - i
                if progress_callback:
                    progress_callback(completed, n_items)

        return out


class ProcessBackend(_PoolBackend):
    r"""
    Process-based parallel execution backend.

    Uses :class:`concurrent.futures.ProcessPoolExecutor` with the ``spawn``
    start method. Preferred on Windows, where threads tend to serialize.

    Notes
    -----
    The kernel must be pickleable: a module-level function or a
    :func:`functools.partial` of one.
    """

    def run(
        self,
        kernel: "Kernel",
        n_items: int,
        sampler: RandomSampler,
        progress_callback: Callable[[int, int], None] | None,
    ) -> list["BlockResult"]:
        blocks, child_seqs = self._prepare_blocks(n_items, sampler)
        out = []
        completed = 0
        max_workers = min(self.n_workers, len(blocks))

        with ProcessPoolExecutor(
            max_workers=max_workers,
            mp_context=mp.get_context("spawn"),
        ) as ex:
            futs = [ex.submit(worker_run_block, kernel, i, j, ss) for (i, j), ss in zip(blocks, child_seqs)]
            try:
                for f in as_completed(futs):
                    (i, j), part = f.result()
                    out.append(((i, j), part))
                    completed += j - i
                    if progress_callback:
                        progress_callback(completed, n_items)
            except KeyboardInterrupt:  # pragma: no cover
                for f in futs:
                    f.cancel()
                raise

        return out
