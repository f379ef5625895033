"""Error types raised by :mod:`stochsim`."""

from __future__ import annotations

__all__ = [
    "InvalidArgumentError",
    "NumericAnomalyError",
    "PathFormatError",
]


class InvalidArgumentError(ValueError):
    """A count, step or parameter is outside its valid range."""


class NumericAnomalyError(ArithmeticError):
    """A generated price or statistic is NaN or infinite."""


class PathFormatError(ValueError):
    """A persisted path file does not follow the ``index,p0,...,pM`` layout."""
