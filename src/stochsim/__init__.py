"""stochsim package public API."""

from .config import (
    DEFAULT_OUTPUT_FILE,
    DEFAULT_PARAMETERS,
    DEFAULT_SAMPLE_SIZES,
    RunConfig,
    SimulationParameters,
)
from .exceptions import InvalidArgumentError, NumericAnomalyError, PathFormatError
from .paths import PathMatrix, PathSimulator
from .pi import PiEstimate, PiEstimator
from .runner import main
from .sampler import RandomSampler
from .statistics import Statistics, summarize, theoretical_mean
from .writer import PathWriter, read_paths

__all__ = [
    "RandomSampler",
    "PiEstimator",
    "PiEstimate",
    "PathMatrix",
    "PathSimulator",
    "Statistics",
    "summarize",
    "theoretical_mean",
    "PathWriter",
    "read_paths",
    "SimulationParameters",
    "RunConfig",
    "DEFAULT_PARAMETERS",
    "DEFAULT_SAMPLE_SIZES",
    "DEFAULT_OUTPUT_FILE",
    "InvalidArgumentError",
    "NumericAnomalyError",
    "PathFormatError",
    "main",
]

__version__ = "0.1.0"
