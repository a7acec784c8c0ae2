"""arcwalk package public API."""

from .arcsine import (
    ARCSINE_MEAN,
    ARCSINE_VARIANCE,
    KSResult,
    arcsine_cdf,
    arcsine_pdf,
    discrete_arcsine_pmf,
    discrete_ks_statistic,
    discrete_last_max_pmf,
    ks_test_arcsine,
)
from .config import WalkConfig
from .core import MonteCarloTable, SimulationResult, run_monte_carlo
from .exceptions import ArcwalkError, InvalidParameterError
from .path import Trajectory, build_trajectory, generate_path
from .path_stats import PathStatisticPair, compute_gamma, compute_statistics, compute_tau
from .simulation import MonteCarloSimulation
from .sims import RandomWalkSimulation
from .stats_engine import (
    DEFAULT_ENGINE,
    FnMetric,
    StatsContext,
    StatsEngine,
)
from .steps import sample_steps
from .utils import autocrit, t_crit, z_crit

__all__ = [
    "sample_steps",
    "Trajectory",
    "build_trajectory",
    "generate_path",
    "PathStatisticPair",
    "compute_tau",
    "compute_gamma",
    "compute_statistics",
    "SimulationResult",
    "MonteCarloTable",
    "run_monte_carlo",
    "MonteCarloSimulation",
    "RandomWalkSimulation",
    "WalkConfig",
    "ArcwalkError",
    "InvalidParameterError",
    "ARCSINE_MEAN",
    "ARCSINE_VARIANCE",
    "KSResult",
    "arcsine_pdf",
    "arcsine_cdf",
    "discrete_arcsine_pmf",
    "discrete_last_max_pmf",
    "discrete_ks_statistic",
    "ks_test_arcsine",
    "StatsEngine",
    "StatsContext",
    "FnMetric",
    "DEFAULT_ENGINE",
    "z_crit",
    "t_crit",
    "autocrit",
]

__version__ = "0.1.0"
