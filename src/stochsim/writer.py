r"""
Persistence of simulated paths.

Each path is one line: its 1-based index followed by the comma-separated
prices of columns ``0..n_steps``::

    1,100.0,101.2741023,...
    2,100.0,99.01834556,...

Prices are written with :func:`repr`, the shortest text that converts back
to the same float, so :func:`read_paths` reproduces a written matrix exactly.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

import numpy as np

from .exceptions import PathFormatError
from .paths import PathMatrix

logger = logging.getLogger(__name__)

__all__ = ["PathWriter", "read_paths"]

PathLike = Union[str, os.PathLike]


def _format_row(index: int, prices: np.ndarray) -> str:
    return ",".join([str(index), *map(repr, prices.tolist())]) + "\n"


class PathWriter:
    """Write a :class:`~stochsim.paths.PathMatrix` as delimited text."""

    def write(self, matrix: PathMatrix, destination: PathLike) -> bool:
        r"""
        Serialize ``matrix`` to ``destination``.

        Returns
        -------
        bool
            ``True`` on success. ``False`` if the file could not be opened or
            written; the failure is logged and never raised.
        """
        path = Path(destination)
        try:
            with path.open("w", encoding="utf-8", newline="\n") as fh:
                for i, row in enumerate(matrix, start=1):
                    fh.write(_format_row(i, row))
        except OSError as e:
            logger.error("Could not write paths to %s: %s", path, e)
            return False
        logger.info("Wrote %d paths to %s", matrix.n_paths, path)
        return True


def read_paths(source: PathLike) -> PathMatrix:
    r"""
    Parse a file written by :meth:`PathWriter.write`.

    Raises
    ------
    PathFormatError
        If a line has a non-numeric field, rows differ in width, or the
        indices do not run ``1, 2, ..., n``.
    OSError
        If ``source`` cannot be read.
    """
    rows: list[list[float]] = []
    with Path(source).open("r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            fields = line.split(",")
            if len(fields) < 2:
                raise PathFormatError(f"line {lineno}: expected an index and at least one price")
            try:
                index = int(fields[0])
                prices = [float(v) for v in fields[1:]]
            except ValueError as e:
                raise PathFormatError(f"line {lineno}: {e}") from e
            if index != len(rows) + 1:
                raise PathFormatError(f"line {lineno}: expected path index {len(rows) + 1}, got {index}")
            if rows and len(prices) != len(rows[0]):
                raise PathFormatError(
                    f"line {lineno}: expected {len(rows[0])} prices, got {len(prices)}"
                )
            rows.append(prices)

    if not rows:
        raise PathFormatError(f"{source}: no paths found")
    return PathMatrix(np.asarray(rows, dtype=float), copy=False)
