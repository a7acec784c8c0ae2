import multiprocessing as mp

import matplotlib
import numpy as np
import pytest

from arcwalk.core import run_monte_carlo
from arcwalk.simulation import MonteCarloSimulation

matplotlib.use("Agg")


class DiceSim(MonteCarloSimulation):
    """Sum of two dice drawn from the simulation RNG (not the global)."""

    output_fields = ("total",)
    result_dtype = np.int64

    def single_simulation(self, _rng=None, **kwargs):
        rng = self._rng(_rng, self.rng)
        return (int(rng.integers(1, 7, size=2).sum()),)


class CountingSim(MonteCarloSimulation):
    """Deterministic simulation that returns incrementing integers."""

    output_fields = ("count",)

    def __init__(self):
        super().__init__("CountingSim")
        self.counter = 0

    def single_simulation(self, _rng=None, **kwargs):
        self.counter += 1
        return (float(self.counter),)


@pytest.fixture(autouse=True)
def _stable_seed():
    # Nothing in arcwalk touches np.random.*, keep it stable anyway
    np.random.seed(42)


@pytest.fixture(scope="session", autouse=True)
def _set_spawn_start_method():
    try:
        mp.set_start_method("spawn")
    except RuntimeError:
        pass  # already set


@pytest.fixture
def dice_simulation():
    """Provide a simple stochastic simulation instance."""
    return DiceSim(name="Dice")


@pytest.fixture
def counting_simulation():
    """Provide a deterministic simulation instance."""
    return CountingSim()


@pytest.fixture(scope="session")
def reference_table():
    """The 10,000 x 222 symmetric walk study, computed once per session."""
    return run_monte_carlo(10_000, 222, 0.5, 0, rng=20240501)


@pytest.fixture
def arcsine_sample():
    """Exact arcsine draws via sin^2(pi U / 2)."""
    u = np.random.default_rng(11).random(5000)
    return np.sin(np.pi * u / 2.0) ** 2


@pytest.fixture
def sample_data():
    """Fixture providing sample data for testing"""
    return np.random.default_rng(42).normal(5.0, 2.0, 1000)
