r"""
Base protocol and helpers for block execution backends.

A backend partitions ``n_items`` independent work items (points, paths) into
half-open blocks and evaluates a *kernel* on each block:

.. code-block:: python

   def kernel(start: int, stop: int, sampler: RandomSampler) -> Any: ...

It returns ``[((start, stop), partial), ...]`` in no particular order. Callers
reduce partials with commutative operations only (sums, row placement by
index), so completion order never matters.

This module provides:

Protocol
    :class:`ExecutionBackend` — Interface for block executors

Functions
    :func:`make_blocks` — Chunking helper for parallel work distribution
    :func:`worker_run_block` — Top-level worker for process pools
    :func:`is_windows_platform` — Platform detection helper
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any, Callable, Protocol

import numpy as np

from ..sampler import RandomSampler

if TYPE_CHECKING:
    Kernel = Callable[[int, int, RandomSampler], Any]
    BlockResult = tuple[tuple[int, int], Any]

__all__ = [
    "ExecutionBackend",
    "make_blocks",
    "worker_run_block",
    "is_windows_platform",
]


def is_windows_platform() -> bool:
    """Return True when running on a Windows platform."""
    return sys.platform.startswith("win") or (sys.platform == "cli")


def make_blocks(n: int, block_size: int = 10_000) -> list[tuple[int, int]]:
    r"""
    Partition an integer range :math:`[0, n)` into half-open blocks :math:`(i, j)`.

    Parameters
    ----------
    n : int
        Total number of items.
    block_size : int, default: 10_000
        Target block length.

    Returns
    -------
    list of tuple[int, int]
        List of ``(i, j)`` index pairs covering ``[0, n)``.

    Examples
    --------
    >>> make_blocks(5, block_size=2)
    [(0, 2), (2, 4), (4, 5)]
    """
    if block_size <= 0:
        raise ValueError("block_size must be positive")
    blocks = []
    i = 0
    while i < n:
        j = min(i + block_size, n)
        blocks.append((i, j))
        i = j
    return blocks


def worker_run_block(
    kernel: "Kernel",
    start: int,
    stop: int,
    seed_seq: np.random.SeedSequence,
) -> "BlockResult":
    r"""
    Evaluate ``kernel`` on ``[start, stop)`` in a **separate worker**.

    Parameters
    ----------
    kernel : callable
        Block kernel. Must be pickleable when used with a process backend, i.e.
        a module-level function or a :func:`functools.partial` of one.
    start, stop : int
        Half-open item range of this block.
    seed_seq : :class:`numpy.random.SeedSequence`
        Seed sequence for an **independent** RNG stream in the worker.

    Returns
    -------
    tuple
        ``((start, stop), partial)``.
    """
    sampler = RandomSampler.from_seed_sequence(seed_seq)
    return (start, stop), kernel(start, stop, sampler)


class ExecutionBackend(Protocol):
    r"""
    Protocol defining the interface for execution backends.

    Backends hide sequential vs parallel execution, thread vs process pools,
    per-block RNG streams and progress reporting.
    """

    def run(
        self,
        kernel: "Kernel",
        n_items: int,
        sampler: RandomSampler,
        progress_callback: Callable[[int, int], None] | None,
    ) -> list["BlockResult"]:
        r"""
        Evaluate ``kernel`` over ``[0, n_items)``.

        Parameters
        ----------
        kernel : callable
            ``kernel(start, stop, sampler) -> partial``.
        n_items : int
            Number of independent work items.
        sampler : RandomSampler
            Root sampler; parallel backends spawn children from it.
        progress_callback : callable or None
            Optional callback ``f(completed, total)`` for progress reporting.

        Returns
        -------
        list
            ``((start, stop), partial)`` pairs covering ``[0, n_items)``.
        """
