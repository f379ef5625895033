r"""
stochsim.stats_engine
=====================
Statistical metrics and the engine that evaluates them.

This module defines:

- :class:`StatsContext`: a typed, explicit configuration object shared by all metrics.
- :class:`FnMetric`: a frozen adapter that names a metric function.
- :class:`StatsEngine`: an orchestrator that evaluates one or more metrics.

Metrics are :func:`mean`, :func:`variance`, :func:`std`, :func:`minimum`,
:func:`maximum` and the confidence interval :func:`ci_mean`.

Variance follows the accumulate-sums form

.. math::
   \widehat{\sigma}^2 = \frac{1}{n}\sum_i x_i^2 - \bar X^2,

i.e. the population (divide-by-:math:`n`) estimator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Generic, Iterable, Optional, Protocol, Sequence, TypeVar

import numpy as np
from scipy.stats import norm
from scipy.stats import t as student_t

logger = logging.getLogger(__name__)

_CI_METHODS = ("auto", "z", "t")


@dataclass(slots=True)
class StatsContext:
    r"""
    Shared, explicit configuration for statistic and CI computations.

    Attributes
    ----------
    n : int
        Declared sample size.
    confidence : float, default 0.95
        Confidence level in :math:`(0, 1)`.
    ci_method : {"auto", "z", "t"}, default "auto"
        Strategy for :func:`ci_mean`. ``"auto"`` uses Student-t when
        :math:`n < 30`, otherwise normal z.

    Examples
    --------
    >>> ctx = StatsContext(n=5000, confidence=0.95)
    >>> round(ctx.alpha, 2)
    0.05
    """

    n: int
    confidence: float = 0.95
    ci_method: str = "auto"

    def with_overrides(self, **changes) -> "StatsContext":
        """Return a shallow copy with selected fields replaced."""
        return replace(self, **changes)

    @property
    def alpha(self) -> float:
        return 1.0 - self.confidence

    def __post_init__(self) -> None:
        if not (0.0 < self.confidence < 1.0):
            raise ValueError("confidence must be in (0,1)")
        if self.n < 0:
            raise ValueError("n must be >= 0")
        if self.ci_method not in _CI_METHODS:
            raise ValueError(f"ci_method must be one of {_CI_METHODS}, got '{self.ci_method}'")


class Metric(Protocol):
    r"""
    Protocol for metric callables used by :class:`StatsEngine`.

    ``metric(x: numpy.ndarray, ctx: StatsContext) -> Any`` with a ``name``
    attribute giving the key of its result.
    """

    name: str

    def __call__(self, x: np.ndarray, ctx: StatsContext, /) -> Any: ...


T = TypeVar("T")


@dataclass(frozen=True)
class FnMetric(Generic[T]):
    r"""
    Lightweight adapter that binds a human-readable ``name`` to a metric function.

    Parameters
    ----------
    name : str
        Key under which the metric result is stored in :meth:`StatsEngine.compute`.
    fn : callable
        Function with signature ``fn(x: ndarray, ctx: StatsContext) -> T``.
    doc : str, optional
        Short description.

    Examples
    --------
    >>> m = FnMetric("mean", lambda a, ctx: float(np.mean(a)))
    >>> m(np.array([1, 2, 3]), StatsContext(n=3))
    2.0
    """

    name: str
    fn: Callable[[np.ndarray, StatsContext], T]
    doc: str = ""

    def __call__(self, x: np.ndarray, ctx: StatsContext) -> T:
        return self.fn(x, ctx)


class StatsEngine:
    r"""
    Orchestrator that evaluates a set of metrics over an input array.

    Parameters
    ----------
    metrics : iterable of Metric
        Callables with a ``name`` and signature ``metric(x, ctx)``.

    Notes
    -----
    A metric that raises is logged and left out of the result; callers check
    for the keys they require.

    Examples
    --------
    >>> eng = StatsEngine([FnMetric("mean", mean), FnMetric("std", std)])
    >>> sorted(eng.compute(np.array([1., 2., 3.])))
    ['mean', 'std']
    """

    def __init__(self, metrics: Iterable[Metric]):
        self._metrics = list(metrics)

    def available(self) -> tuple[str, ...]:
        return tuple(m.name for m in self._metrics)

    def compute(
        self,
        x: np.ndarray,
        ctx: Optional[StatsContext] = None,
        select: Sequence[str] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        r"""
        Evaluate all registered metrics on ``x``.

        Parameters
        ----------
        x : ndarray
            Sample values.
        ctx : StatsContext, optional
            Context parameters. If None, one is built from ``**kwargs`` with
            ``n`` defaulting to ``x.size``.
        select : sequence of str, optional
            If given, compute only the metrics with these names.

        Returns
        -------
        dict
            Mapping from metric name to computed value.
        """
        x = np.asarray(x, dtype=float)
        if ctx is None:
            base = dict(kwargs)
            base.setdefault("n", int(x.size))
            ctx = StatsContext(**base)

        metrics_to_compute = (
            self._metrics if select is None else [m for m in self._metrics if m.name in set(select)]
        )

        out: dict[str, Any] = {}
        for m in metrics_to_compute:
            try:
                out[m.name] = m(x, ctx)
            except Exception:
                logger.exception("Error computing metric %s", m.name)
                continue
        return out


def critical_value(confidence: float, n: int, method: str = "auto") -> tuple[float, str]:
    r"""
    Two-sided critical value for a ``confidence`` interval.

    Returns
    -------
    tuple
        ``(crit, kind)`` where ``kind`` is ``"z"`` or ``"t"``.

    Examples
    --------
    >>> round(critical_value(0.95, 1000, "z")[0], 4)
    1.96
    """
    q = 0.5 + confidence / 2.0
    if method == "t" or (method == "auto" and n < 30):
        return float(student_t.ppf(q, df=max(1, n - 1))), "t"
    return float(norm.ppf(q)), "z"


def mean(x: np.ndarray, ctx: StatsContext | None = None) -> float:
    r""":math:`\bar X = \frac{1}{n}\sum_i x_i`; NaN for an empty sample."""
    if x.size == 0:
        return float("nan")
    return float(np.sum(x) / x.size)


def variance(x: np.ndarray, ctx: StatsContext | None = None) -> float:
    r"""
    Population variance :math:`\frac{1}{n}\sum_i x_i^2 - \bar X^2`.

    May come out marginally negative through cancellation when all values are
    (nearly) equal; :func:`std` clamps at zero.
    """
    if x.size == 0:
        return float("nan")
    mu = np.sum(x) / x.size
    return float(np.sum(x * x) / x.size - mu * mu)


def std(x: np.ndarray, ctx: StatsContext | None = None) -> float:
    r""":math:`\sqrt{\max(\widehat{\sigma}^2, 0)}`."""
    var = variance(x, ctx)
    if np.isnan(var):
        return var
    return float(np.sqrt(max(var, 0.0)))


def minimum(x: np.ndarray, ctx: StatsContext | None = None) -> float:
    return float(np.min(x)) if x.size else float("nan")


def maximum(x: np.ndarray, ctx: StatsContext | None = None) -> float:
    return float(np.max(x)) if x.size else float("nan")


def ci_mean(x: np.ndarray, ctx: StatsContext) -> dict[str, float | str]:
    r"""
    Parametric CI for :math:`\mathbb{E}[X]` using z/t critical values.

    With :math:`SE = s/\sqrt{n}` and :math:`s` the sample standard deviation
    (``ddof=1``) the interval is :math:`\bar X \pm c \cdot SE`.

    Returns
    -------
    dict[str, float | str]
        ``confidence``, ``method``, ``se``, ``crit``, ``low`` and ``high``. For
        fewer than two observations ``se`` is 0 and the interval collapses to
        the mean.
    """
    n = int(x.size)
    mu = mean(x, ctx)
    if n < 2:
        return {
            "confidence": ctx.confidence,
            "method": ctx.ci_method,
            "se": 0.0,
            "crit": float("nan"),
            "low": mu,
            "high": mu,
        }

    s = float(np.std(x, ddof=1))
    se = s / np.sqrt(n)
    crit, method = critical_value(ctx.confidence, n, ctx.ci_method)
    return {
        "confidence": ctx.confidence,
        "method": method,
        "se": float(se),
        "crit": crit,
        "low": float(mu - crit * se),
        "high": float(mu + crit * se),
    }


def build_default_engine() -> StatsEngine:
    """Construct the :class:`StatsEngine` used by :func:`stochsim.statistics.summarize`."""
    metrics: list[Metric] = [
        FnMetric[float]("mean", mean, "Sample mean"),
        FnMetric[float]("variance", variance, "Population variance"),
        FnMetric[float]("std", std, "Population standard deviation"),
        FnMetric[float]("min", minimum, "Smallest value"),
        FnMetric[float]("max", maximum, "Largest value"),
        FnMetric[dict[str, float | str]]("ci_mean", ci_mean, "z/t CI for the mean"),
    ]
    return StatsEngine(metrics)


DEFAULT_ENGINE = build_default_engine()

__all__ = [
    "StatsContext",
    "Metric",
    "FnMetric",
    "StatsEngine",
    "critical_value",
    "mean",
    "variance",
    "std",
    "minimum",
    "maximum",
    "ci_mean",
    "build_default_engine",
    "DEFAULT_ENGINE",
]
