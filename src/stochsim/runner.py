r"""
Driver for the two independent pipelines.

1. :math:`\pi` estimation over :data:`~stochsim.config.DEFAULT_SAMPLE_SIZES`.
2. GBM simulation, then summary statistics, then persistence of the paths.

Reports go to stdout; diagnostics go through :mod:`logging`. An invalid
argument or a numeric anomaly aborts only the pipeline it occurs in, and a
failed write is logged without stopping the run.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .config import RunConfig, SimulationParameters
from .exceptions import InvalidArgumentError, NumericAnomalyError
from .paths import PathSimulator
from .pi import PiEstimate, PiEstimator
from .sampler import RandomSampler
from .statistics import Statistics, summarize
from .writer import PathWriter

logger = logging.getLogger(__name__)

_pkg_logger = logging.getLogger("stochsim")
if not _pkg_logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    _pkg_logger.addHandler(handler)
    _pkg_logger.setLevel(logging.INFO)

__all__ = ["run_pi_pipeline", "run_gbm_pipeline", "main"]


def run_pi_pipeline(
    sample_sizes: Iterable[int],
    estimator: Optional[PiEstimator] = None,
) -> Optional[list[PiEstimate]]:
    r"""
    Estimate :math:`\pi` for each sample size and print one line per size.

    Returns
    -------
    list of PiEstimate or None
        ``None`` if a sample size was invalid; estimates already printed stay
        printed.
    """
    estimator = estimator or PiEstimator()
    print("Monte Carlo Pi Estimation")
    print("----------------")
    out = []
    for n in sample_sizes:
        try:
            est = PiEstimate(n_points=n, estimate=estimator.estimate(n))
        except InvalidArgumentError as e:
            logger.error("Pi estimation aborted: %s", e)
            return None
        print(est.result_to_string())
        out.append(est)
    return out


def run_gbm_pipeline(
    params: SimulationParameters,
    output_path: Optional[str],
    simulator: Optional[PathSimulator] = None,
    writer: Optional[PathWriter] = None,
) -> Optional[Statistics]:
    r"""
    Simulate, summarise and persist GBM paths.

    Parameters
    ----------
    params : SimulationParameters
        Inputs of the run.
    output_path : str or None
        File to write the paths to. ``None`` skips persistence.
    simulator, writer : optional
        Injected collaborators; fresh ones are created when omitted.

    Returns
    -------
    Statistics or None
        ``None`` if the run was aborted by an invalid argument or a numeric
        anomaly. A failed write does not change the return value.
    """
    simulator = simulator or PathSimulator()
    writer = writer or PathWriter()
    print("Stock price simulation using geometric brownian motion")
    print("---------------------")
    try:
        matrix = simulator.simulate(params)
        stats = summarize(matrix, params)
    except InvalidArgumentError as e:
        logger.error("GBM simulation aborted: %s", e)
        return None
    except NumericAnomalyError as e:
        logger.error("GBM simulation produced corrupted prices, statistics withheld: %s", e)
        return None

    print(stats.result_to_string())
    if output_path is not None and writer.write(matrix, output_path):
        print(f"Simulation results saved to {output_path}")
    return stats


def main(config: Optional[RunConfig] = None) -> int:
    r"""
    Run both pipelines with ``config`` (the reference defaults if omitted).

    Returns
    -------
    int
        Process exit status: ``0`` when both pipelines completed, ``1`` when
        either was aborted.
    """
    config = config or RunConfig()
    # Independent child streams so neither pipeline's draws depend on the other's
    pi_sampler, gbm_sampler = RandomSampler(config.seed).spawn(2)
    opts = {"backend": config.backend, "n_workers": config.n_workers}

    estimates = run_pi_pipeline(config.sample_sizes, PiEstimator(pi_sampler, **opts))
    print()
    stats = run_gbm_pipeline(
        config.parameters,
        config.output_path,
        PathSimulator(gbm_sampler, **opts),
    )
    return 0 if estimates is not None and stats is not None else 1
