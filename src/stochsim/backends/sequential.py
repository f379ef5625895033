r"""
Sequential execution backend.

Runs every block on the calling thread with the caller's own sampler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from .base import make_blocks

if TYPE_CHECKING:
    from ..sampler import RandomSampler
    from .base import BlockResult, Kernel

__all__ = ["SequentialBackend"]

# Upper bound on items drawn at once; keeps 10^7-point runs within a few MB per block
_DEFAULT_BLOCK_SIZE = 1_000_000


class SequentialBackend:
    r"""
    Sequential (single-threaded) execution backend.

    Parameters
    ----------
    block_size : int, default 1_000_000
        Items handed to the kernel per call.

    Examples
    --------
    >>> backend = SequentialBackend()
    >>> parts = backend.run(kernel, n_items=1000, sampler=sampler, progress_callback=None)  # doctest: +SKIP
    """

    def __init__(self, block_size: int = _DEFAULT_BLOCK_SIZE):
        self.block_size = block_size

    def run(
        self,
        kernel: "Kernel",
        n_items: int,
        sampler: "RandomSampler",
        progress_callback: Callable[[int, int], None] | None,
    ) -> list["BlockResult"]:
        out = []
        for i, j in make_blocks(n_items, self.block_size):
            out.append(((i, j), kernel(i, j, sampler)))
            if progress_callback:
                progress_callback(j, n_items)
        return out
