r"""
Explicitly owned random number streams.

:class:`RandomSampler` wraps a :class:`numpy.random.Generator` together with
the :class:`numpy.random.SeedSequence` it was built from. Every consumer owns
or is handed a sampler; nothing in :mod:`stochsim` touches the global NumPy
RNG.

Parallel execution spawns one child sampler per work block via
:meth:`RandomSampler.spawn`, giving statistically independent streams that are
reproducible for a fixed seed and block layout.
"""

from __future__ import annotations

import numpy as np

__all__ = ["RandomSampler"]


class RandomSampler:
    r"""
    Source of uniform :math:`[0, 1)` and standard-normal draws.

    Parameters
    ----------
    seed : int or None, default None
        Seed for :class:`numpy.random.SeedSequence`. ``None`` chooses entropy
        from the OS.

    Examples
    --------
    >>> s = RandomSampler(42)
    >>> 0.0 <= s.uniform() < 1.0
    True
    """

    def __init__(self, seed: int | None = None):
        self.set_seed(seed)

    @classmethod
    def from_seed_sequence(cls, seed_seq: np.random.SeedSequence) -> "RandomSampler":
        """Build a worker sampler on a :class:`numpy.random.Philox` stream."""
        sampler = cls.__new__(cls)
        sampler.seed_seq = seed_seq
        sampler.rng = np.random.Generator(np.random.Philox(seed_seq))
        return sampler

    def set_seed(self, seed: int | None) -> None:
        r"""
        Re-seed the sampler in place.

        Parameters
        ----------
        seed : int or None
            Seed for :class:`numpy.random.SeedSequence`. ``None`` chooses entropy
            from the OS.
        """
        self.seed_seq = np.random.SeedSequence(seed)
        self.rng = np.random.default_rng(self.seed_seq)

    def uniform(self) -> float:
        r"""One draw from :math:`U[0, 1)`."""
        return float(self.rng.random())

    def normal(self) -> float:
        r"""One draw from :math:`\mathcal{N}(0, 1)`."""
        return float(self.rng.standard_normal())

    def uniform_array(self, size) -> np.ndarray:
        return self.rng.random(size)

    def normal_array(self, size) -> np.ndarray:
        return self.rng.standard_normal(size)

    def spawn(self, n: int) -> list["RandomSampler"]:
        r"""
        Create ``n`` independent child samplers.

        Notes
        -----
        Children come from :meth:`numpy.random.SeedSequence.spawn`, so repeated
        calls yield fresh streams while remaining deterministic given the root
        seed.
        """
        return [RandomSampler.from_seed_sequence(ss) for ss in self.seed_seq.spawn(n)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entropy={self.seed_seq.entropy})"
