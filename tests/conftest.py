import multiprocessing as mp

import pytest

from stochsim import PathMatrix, RandomSampler, SimulationParameters


@pytest.fixture(scope="session", autouse=True)
def _set_spawn_start_method():
    try:
        mp.set_start_method("spawn")
    except RuntimeError:
        pass  # already set


@pytest.fixture
def sampler():
    """Seeded sampler for reproducible draws."""
    return RandomSampler(42)


@pytest.fixture
def small_params():
    """Small but non-degenerate GBM inputs."""
    return SimulationParameters(
        initial_price=100.0,
        drift=0.05,
        volatility=0.20,
        horizon_years=1.0,
        step_count=20,
        path_count=50,
    )


@pytest.fixture
def flat_params():
    """Zero drift and zero volatility: every price stays at the initial price."""
    return SimulationParameters(
        initial_price=100.0,
        drift=0.0,
        volatility=0.0,
        horizon_years=1.0,
        step_count=10,
        path_count=5,
    )


@pytest.fixture
def tiny_matrix():
    """Three hand-written paths of two steps."""
    return PathMatrix(
        [
            [100.0, 101.5, 103.25],
            [100.0, 98.0, 96.5],
            [100.0, 100.125, 0.1 + 0.2],
        ]
    )
