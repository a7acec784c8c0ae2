r"""

arcwalk.core
============

Monte Carlo driver for the last-maximum and last-return times of a random walk.

This module provides:

* :class:`~arcwalk.core.SimulationResult` – raw stacked trial outputs of any simulation.
* :class:`~arcwalk.core.MonteCarloTable` – the ``(tau, gamma, tau/n, gamma/n)`` table.
* :func:`~arcwalk.core.run_monte_carlo` – run :math:`m` independent trials.

Reference scenario
------------------

``run_monte_carlo(m=10_000, n=222, p=0.5, s0=0)`` collects ten thousand
independent walks of 222 steps. As n grows, both normalized columns of the
symmetric walk converge in law to the arcsine distribution

.. math::

   f(x) = \frac{1}{\pi\sqrt{x(1-x)}}, \qquad 0 < x < 1.

At ``n = 222`` the last-maximum column is still visibly biased (mean about
0.525); :meth:`MonteCarloTable.exact_law` gives the finite-``n`` laws.

Reproducibility
---------------

``rng`` may be an integer seed, a :class:`numpy.random.SeedSequence` or a
:class:`numpy.random.Generator`. With the default ``backend="sequential"``
row :math:`i` is exactly the :math:`i`-th walk drawn from that stream, so

>>> g1, g2 = np.random.default_rng(3), np.random.default_rng(3)
>>> table = run_monte_carlo(5, 10, rng=g1)
>>> from arcwalk.path import generate_path
>>> from arcwalk.path_stats import compute_tau
>>> [compute_tau(generate_path(n=10, rng=g2)) for _ in range(5)] == table.tau.tolist()
True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

import numpy as np

from .arcsine import (
    KSResult,
    discrete_arcsine_pmf,
    discrete_ks_statistic,
    discrete_last_max_pmf,
    ks_test_arcsine,
)
from .config import BACKENDS
from .exceptions import InvalidParameterError
from .sims.random_walk import RandomWalkSimulation
from .stats_engine import DEFAULT_ENGINE, StatsContext, StatsEngine
from .utils import RandomSource, as_generator, check_int, check_positive_int, check_probability

logger = logging.getLogger(__name__)

# One handler on the package logger serves every arcwalk.* module
_package_logger = logging.getLogger("arcwalk")  # pragma: no cover
if not _package_logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    _package_logger.addHandler(handler)
    _package_logger.setLevel(logging.INFO)

COLUMNS = ("tau", "gamma", "tau_norm", "gamma_norm")


@dataclass
class SimulationResult:
    r"""
    Container for the raw outcome of a Monte Carlo run.

    Attributes
    ----------
    results : ndarray
        Shape ``(n_simulations, len(fields))``; row :math:`i` is trial :math:`i`.
    fields : tuple of str
        Column names, from :attr:`MonteCarloSimulation.output_fields`.
    n_simulations : int
        Number of trials performed.
    execution_time : float
        Wall-clock time in seconds.
    metadata : dict
        Includes ``"simulation_name"``, ``"timestamp"``, ``"n"``, ``"backend"``
        and ``"seed_entropy"``.
    """

    results: np.ndarray
    fields: tuple[str, ...]
    n_simulations: int
    execution_time: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def column(self, name: str) -> np.ndarray:
        """Return the column called ``name``."""
        try:
            idx = self.fields.index(name)
        except ValueError:
            raise KeyError(f"Unknown field '{name}', expected one of {self.fields}") from None
        return self.results[:, idx]


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, copy=True)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class MonteCarloTable:
    r"""
    Per-trial ``(tau, gamma, tau_norm, gamma_norm)`` rows sharing one ``n``, ``p`` and ``s0``.

    Attributes
    ----------
    tau : ndarray of int64
        Last-maximum index of each trial.
    gamma : ndarray of int64
        Last return-to-start index of each trial.
    n : int
        Steps per walk.
    p : float
        Up-step probability.
    s0 : int
        Starting value.
    execution_time : float
        Wall-clock time of the run in seconds.
    metadata : dict
        Run metadata forwarded from :class:`SimulationResult`.

    Notes
    -----
    Columns are read-only copies; the normalized columns are derived as
    ``tau / n`` and ``gamma / n``. Row order is trial order.
    """

    tau: np.ndarray
    gamma: np.ndarray
    n: int
    p: float = 0.5
    s0: int = 0
    execution_time: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        tau = _readonly(np.asarray(self.tau, dtype=np.int64).ravel())
        gamma = _readonly(np.asarray(self.gamma, dtype=np.int64).ravel())
        if tau.size != gamma.size:
            raise ValueError("tau and gamma must have the same length")
        object.__setattr__(self, "tau", tau)
        object.__setattr__(self, "gamma", gamma)

    @classmethod
    def from_result(cls, result: SimulationResult, n: int, p: float, s0: int) -> "MonteCarloTable":
        """Build a table from the raw output of a :class:`RandomWalkSimulation` run."""
        return cls(
            tau=result.column("tau"),
            gamma=result.column("gamma"),
            n=n,
            p=p,
            s0=s0,
            execution_time=result.execution_time,
            metadata=dict(result.metadata),
        )

    @property
    def tau_norm(self) -> np.ndarray:
        r""":math:`\tau / n` as float."""
        return self.tau / self.n

    @property
    def gamma_norm(self) -> np.ndarray:
        r""":math:`\gamma / n` as float."""
        return self.gamma / self.n

    def __len__(self) -> int:
        return int(self.tau.size)

    def column(self, name: str) -> np.ndarray:
        """Return one of :data:`COLUMNS` by name."""
        if name not in COLUMNS:
            raise KeyError(f"Unknown column '{name}', expected one of {COLUMNS}")
        return getattr(self, name)

    def rows(self) -> Iterator[dict[str, float]]:
        """Yield ``{"tau", "gamma", "tau_norm", "gamma_norm"}`` mappings in trial order."""
        for t, g in zip(self.tau.tolist(), self.gamma.tolist()):
            yield {"tau": t, "gamma": g, "tau_norm": t / self.n, "gamma_norm": g / self.n}

    def as_array(self) -> np.ndarray:
        """Return a float array of shape ``(m, 4)`` with columns in :data:`COLUMNS` order."""
        return np.column_stack([self.tau, self.gamma, self.tau_norm, self.gamma_norm]).astype(float)

    def lattice(self, name: str) -> float:
        r"""
        Spacing of the normalized column ``name``.

        :math:`\tau / n` moves in steps of :math:`1/n`; :math:`\gamma` is always even,
        so :math:`\gamma / n` moves in steps of :math:`2/n`.
        """
        if name in ("tau", "tau_norm"):
            return 1.0 / self.n
        if name in ("gamma", "gamma_norm"):
            return 2.0 / self.n
        raise KeyError(f"Unknown column '{name}', expected one of {COLUMNS}")

    def ks_test(self, name: str, rng: RandomSource = None) -> KSResult:
        """Lattice-corrected KS test of a normalized column against the arcsine law."""
        key = name if name.endswith("_norm") else f"{name}_norm"
        return ks_test_arcsine(self.column(key), lattice=self.lattice(key), rng=rng)

    def exact_law(self, name: str) -> tuple[np.ndarray, np.ndarray]:
        r"""
        Exact finite-``n`` law ``(support, pmf)`` of the raw column ``tau`` or ``gamma``.

        Raises
        ------
        ValueError
            If the walk is not symmetric (``p != 0.5``).
        """
        if self.p != 0.5:
            raise ValueError(f"exact laws are only available for p = 0.5, got p={self.p}")
        key = name.removesuffix("_norm")
        if key == "tau":
            return discrete_last_max_pmf(self.n)
        if key == "gamma":
            return discrete_arcsine_pmf(self.n)
        raise KeyError(f"Unknown column '{name}', expected one of {COLUMNS}")

    def exact_ks_statistic(self, name: str) -> float:
        """Kolmogorov distance between a raw column and its exact finite-``n`` law."""
        support, pmf = self.exact_law(name)
        return discrete_ks_statistic(self.column(name.removesuffix("_norm")), support, pmf)

    def summary(
        self,
        stats_engine: Optional[StatsEngine] = None,
        confidence: float = 0.95,
        rng: RandomSource = None,
    ) -> dict[str, dict[str, Any]]:
        r"""
        Run the stats engine over both normalized columns.

        Parameters
        ----------
        stats_engine : StatsEngine, optional
            Defaults to :data:`arcwalk.stats_engine.DEFAULT_ENGINE`.
        confidence : float, default ``0.95``
            Confidence level for CI metrics.
        rng : None, int, SeedSequence or Generator, optional
            Random source for the KS lattice jitter.

        Returns
        -------
        dict
            ``{"tau_norm": {...}, "gamma_norm": {...}}``.
        """
        eng = stats_engine or DEFAULT_ENGINE
        gen = as_generator(rng)
        out: dict[str, dict[str, Any]] = {}
        for name in ("tau_norm", "gamma_norm"):
            ctx = StatsContext(confidence=confidence, lattice=self.lattice(name), rng=gen)
            out[name] = eng.compute(self.column(name), ctx)
        return out

    def to_string(self, confidence: float = 0.95, rng: RandomSource = None) -> str:
        """Human-readable summary of the run."""
        lines = [
            "=" * 20 + " RANDOM WALK MONTE CARLO " + "=" * 20,
            f"  Trials: {len(self)}   Steps: {self.n}   p: {self.p}   S0: {self.s0}",
            f"  Execution time: {self.execution_time:.2f} seconds",
        ]
        if backend := self.metadata.get("backend"):
            lines.append(f"  Backend: {backend}")
        for name, stats in self.summary(confidence=confidence, rng=rng).items():
            lines.append(f"  {name}:")
            if "mean" in stats:
                lines.append(f"    Mean: {stats['mean']:.5f}   Std Dev: {stats.get('std', float('nan')):.5f}")
            ci = stats.get("ci_mean")
            if isinstance(ci, dict) and "se" in ci:
                lines.append(
                    f"    {int(confidence * 100)}% {ci['method']}-CI: [{ci['low']:.5f}, {ci['high']:.5f}]"
                )
            ks = stats.get("ks_arcsine")
            if isinstance(ks, dict):
                lines.append(f"    KS vs arcsine: D={ks['statistic']:.5f}  p={ks['pvalue']:.4g}")
            if self.p == 0.5:
                lines.append(f"    Distance to exact n={self.n} law: D={self.exact_ks_statistic(name):.5f}")
        lines.append("=" * 20 + " END " + "=" * 20)
        return "\n".join(lines)


def run_monte_carlo(
    m: int = 10_000,
    n: int = 222,
    p: float = 0.5,
    s0: int = 0,
    rng: RandomSource = None,
    *,
    backend: str = "sequential",
    n_workers: Optional[int] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> MonteCarloTable:
    r"""
    Run ``m`` independent random walk trials and tabulate ``(tau, gamma)``.

    Parameters
    ----------
    m : int, default ``10_000``
        Number of trials.
    n : int, default ``222``
        Steps per walk.
    p : float, default ``0.5``
        Up-step probability in :math:`(0, 1)`.
    s0 : int, default ``0``
        Starting value.
    rng : None, int, SeedSequence or Generator, optional
        Random stream for the whole run.
    backend : {"sequential", "thread", "process", "vectorized", "auto"}, default ``"sequential"``
        Execution backend, see :class:`~arcwalk.simulation.MonteCarloSimulation`.
    n_workers : int, optional
        Worker count for the thread/process backends.
    progress_callback : callable, optional
        ``f(completed, total)``.

    Returns
    -------
    MonteCarloTable
        Populated only after all ``m`` trials complete.

    Raises
    ------
    InvalidParameterError
        If ``m`` or ``n`` is not a positive integer, ``p`` is outside :math:`(0, 1)`,
        ``s0`` is not an integer, or the backend/worker settings are invalid.
    """
    m = check_positive_int("m", m)
    n = check_positive_int("n", n)
    p = check_probability("p", p)
    s0 = check_int("s0", s0)
    if n_workers is not None:
        check_positive_int("n_workers", n_workers)
    if backend not in BACKENDS:
        raise InvalidParameterError("backend", backend, f"must be one of {BACKENDS}")

    sim = RandomWalkSimulation(n=n, p=p, s0=s0)
    sim.set_rng(rng)
    result = sim.run(m, backend=backend, n_workers=n_workers, progress_callback=progress_callback)
    table = MonteCarloTable.from_result(result, n=n, p=p, s0=s0)
    logger.info("Collected %d trials of n=%d in %.2f seconds", len(table), n, table.execution_time)
    return table


__all__ = [
    "COLUMNS",
    "SimulationResult",
    "MonteCarloTable",
    "run_monte_carlo",
]
