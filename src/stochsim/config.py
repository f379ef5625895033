r"""
Run configuration for the two simulation pipelines.

This module defines:

- :class:`SimulationParameters`: immutable, validated GBM inputs.
- :class:`RunConfig`: everything the driver needs for one run.
- :data:`DEFAULT_PARAMETERS`, :data:`DEFAULT_SAMPLE_SIZES` and
  :data:`DEFAULT_OUTPUT_FILE`: the reference configuration.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional, Sequence

from .exceptions import InvalidArgumentError

__all__ = [
    "SimulationParameters",
    "RunConfig",
    "DEFAULT_PARAMETERS",
    "DEFAULT_SAMPLE_SIZES",
    "DEFAULT_OUTPUT_FILE",
    "VALID_BACKENDS",
    "require_positive_int",
]

DEFAULT_SAMPLE_SIZES: tuple[int, ...] = (1_000, 10_000, 100_000, 1_000_000, 10_000_000)
DEFAULT_OUTPUT_FILE = "stockPrices.csv"
VALID_BACKENDS = ("sequential", "thread", "process", "auto")


def require_positive_int(value: Any, name: str) -> int:
    """Return ``value`` as an ``int`` or raise :class:`InvalidArgumentError`."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidArgumentError(f"{name} must be positive, got {value}")
    return int(value)


def _require_finite(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidArgumentError(f"{name} must be finite, got {value}")
    return value


@dataclass(frozen=True)
class SimulationParameters:
    r"""
    Inputs of a geometric Brownian motion run.

    Attributes
    ----------
    initial_price : float, default 100.0
        Starting level :math:`S_0 > 0` shared by every path.
    drift : float, default 0.05
        Annualised drift :math:`\mu`.
    volatility : float, default 0.20
        Annualised volatility :math:`\sigma \ge 0`.
    horizon_years : float, default 1.0
        Horizon :math:`T > 0` in years.
    step_count : int, default 252
        Number of uniform time steps (daily steps for one trading year).
    path_count : int, default 1000
        Number of independent paths.

    Notes
    -----
    Fields are validated on construction, so an instance that exists is always
    usable. Use :meth:`with_overrides` to derive a modified copy.

    Examples
    --------
    >>> p = SimulationParameters(step_count=10, path_count=5)
    >>> p.dt
    0.1
    """

    initial_price: float = 100.0
    drift: float = 0.05
    volatility: float = 0.20
    horizon_years: float = 1.0
    step_count: int = 252
    path_count: int = 1000

    def __post_init__(self) -> None:
        initial_price = _require_finite(self.initial_price, "initial_price")
        if initial_price <= 0:
            raise InvalidArgumentError(f"initial_price must be positive, got {initial_price}")
        drift = _require_finite(self.drift, "drift")
        volatility = _require_finite(self.volatility, "volatility")
        if volatility < 0:
            raise InvalidArgumentError(f"volatility must be non-negative, got {volatility}")
        horizon = _require_finite(self.horizon_years, "horizon_years")
        if horizon <= 0:
            raise InvalidArgumentError(f"horizon_years must be positive, got {horizon}")
        step_count = require_positive_int(self.step_count, "step_count")
        path_count = require_positive_int(self.path_count, "path_count")

        object.__setattr__(self, "initial_price", initial_price)
        object.__setattr__(self, "drift", drift)
        object.__setattr__(self, "volatility", volatility)
        object.__setattr__(self, "horizon_years", horizon)
        object.__setattr__(self, "step_count", step_count)
        object.__setattr__(self, "path_count", path_count)

    @property
    def dt(self) -> float:
        """Length of one time step, ``horizon_years / step_count``."""
        return self.horizon_years / self.step_count

    @property
    def sqrt_dt(self) -> float:
        return math.sqrt(self.dt)

    def with_overrides(self, **changes) -> "SimulationParameters":
        """Return a validated copy with selected fields replaced."""
        return replace(self, **changes)


DEFAULT_PARAMETERS = SimulationParameters()


@dataclass
class RunConfig:
    r"""
    Configuration of one driver run.

    Attributes
    ----------
    parameters : SimulationParameters
        GBM inputs for the path pipeline.
    sample_sizes : tuple of int
        Point counts for the :math:`\pi` pipeline, evaluated in ascending order.
    output_path : str
        Destination of the persisted paths.
    backend : {"sequential", "thread", "process", "auto"}, default "sequential"
        Execution backend shared by both pipelines.
    n_workers : int, optional
        Worker count for parallel backends. Defaults to the CPU count.
    seed : int, optional
        Root seed. ``None`` draws entropy from the OS.
    """

    parameters: SimulationParameters = field(default_factory=SimulationParameters)
    sample_sizes: tuple[int, ...] = DEFAULT_SAMPLE_SIZES
    output_path: str = DEFAULT_OUTPUT_FILE
    backend: str = "sequential"
    n_workers: Optional[int] = None
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.backend not in VALID_BACKENDS:
            raise InvalidArgumentError(
                f"backend must be one of {VALID_BACKENDS}, got '{self.backend}'"
            )
        if self.n_workers is not None:
            require_positive_int(self.n_workers, "n_workers")
        self.sample_sizes = tuple(sorted(self.sample_sizes))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RunConfig":
        """
        Build a :class:`RunConfig` from plain data (e.g. a parsed TOML table).

        ``parameters`` may itself be a mapping of :class:`SimulationParameters`
        fields. Unknown keys are rejected.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidArgumentError(f"Unknown configuration keys: {sorted(unknown)}")

        values = dict(data)
        params = values.get("parameters")
        if isinstance(params, Mapping):
            param_fields = {f.name for f in fields(SimulationParameters)}
            bad = set(params) - param_fields
            if bad:
                raise InvalidArgumentError(f"Unknown simulation parameters: {sorted(bad)}")
            values["parameters"] = SimulationParameters(**params)
        if "sample_sizes" in values:
            values["sample_sizes"] = _as_sizes(values["sample_sizes"])
        return cls(**values)


def _as_sizes(sizes: Sequence[Any]) -> tuple[int, ...]:
    return tuple(require_positive_int(n, "sample size") for n in sizes)
