r"""
Base class for simulations whose trials each produce a fixed tuple of integers
or floats.

A subclass names its outputs in :attr:`MonteCarloSimulation.output_fields` and
implements :meth:`~MonteCarloSimulation.single_simulation`;
:meth:`~MonteCarloSimulation.run` hands the trials to one of the backends in
:mod:`arcwalk.backends` and packs the stacked ``(n_simulations, len(output_fields))``
array into a :class:`~arcwalk.core.SimulationResult`.

Example
-------
>>> from arcwalk.simulation import MonteCarloSimulation
>>> class DiceSim(MonteCarloSimulation):
...     output_fields = ("total",)
...     result_dtype = int
...     def single_simulation(self, _rng=None):
...         rng = self._rng(_rng, self.rng)
...         return (int(rng.integers(1, 7, size=2).sum()),)
>>> sim = DiceSim(name="2d6")
>>> sim.set_seed(42)
>>> result = sim.run(10_000)  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from .backends import (
    ProcessBackend,
    SequentialBackend,
    ThreadBackend,
    VectorizedBackend,
    is_windows_platform,
)
from .config import BACKENDS
from .exceptions import InvalidParameterError
from .utils import RandomSource, as_seed_sequence, check_positive_int

if TYPE_CHECKING:
    from .core import SimulationResult

logger = logging.getLogger(__name__)

__all__ = ["MonteCarloSimulation"]


class MonteCarloSimulation(ABC):
    r"""
    A named simulation with its own random stream.

    Notes
    -----
    ``"sequential"`` consumes :attr:`rng` trial after trial, so a caller that
    passes in a generator gets the same rows as drawing the paths by hand.
    ``"thread"`` and ``"process"`` split the trials into blocks, each with a
    child of the root seed sequence. ``"vectorized"`` calls
    :meth:`batch_simulation` on one Philox stream. ``"auto"`` stays sequential
    below :attr:`_PARALLEL_THRESHOLD` trials.
    """

    _PARALLEL_THRESHOLD = 20_000
    _CHUNKS_PER_WORKER = 8
    _VALID_BACKENDS = BACKENDS

    #: Names of the values returned by one trial.
    output_fields: tuple[str, ...] = ("value",)
    #: dtype of the stacked results.
    result_dtype: Any = float
    #: Whether :meth:`batch_simulation` is implemented.
    supports_batch: bool = False

    @staticmethod
    def _rng(
        rng: np.random.Generator | None,
        default: np.random.Generator | None = None,
    ) -> np.random.Generator:
        """Generator handed in by a backend, else ``default``."""
        return rng if rng is not None else default  # type: ignore[return-value]

    def __init__(self, name: str = "Simulation"):
        self.name = name
        self.seed_seq: np.random.SeedSequence | None = None
        self.rng = np.random.default_rng()
        self.backend: str = "auto"

    def __getstate__(self):
        # Process workers build their generators from spawned seeds.
        state = self.__dict__.copy()
        state["rng"] = None
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        self.rng = np.random.default_rng(self.seed_seq)

    @abstractmethod
    def single_simulation(self, *args, **kwargs) -> tuple:
        r"""
        Run one trial and return one value per entry of :attr:`output_fields`.

        Implementations take a ``_rng`` keyword; when a backend passes a
        generator there, every draw must come from it.
        """
        raise NotImplementedError  # pragma: no cover

    def batch_simulation(self, count: int, *, rng: np.random.Generator, **kwargs) -> np.ndarray:
        """
        Run ``count`` trials at once and return a ``(count, len(output_fields))`` array.

        Only called by the ``"vectorized"`` backend, which requires
        ``supports_batch = True``.
        """
        raise NotImplementedError

    def set_seed(self, seed: int | None) -> None:
        r"""
        Reset :attr:`rng` from ``seed`` (``None`` draws OS entropy).

        The same seed reproduces every backend's table, provided the worker and
        block layout is unchanged for the pooled backends.
        """
        self.seed_seq = as_seed_sequence(seed)
        self.rng = np.random.default_rng(self.seed_seq)

    def set_rng(self, rng: RandomSource) -> None:
        r"""
        Use ``rng`` as the random source.

        A :class:`~numpy.random.Generator` is kept by reference; anything else
        is treated as a seed.
        """
        if isinstance(rng, np.random.Generator):
            self.rng = rng
            self.seed_seq = None
        else:
            self.set_seed(rng)  # type: ignore[arg-type]

    def _spawn_root(self) -> np.random.SeedSequence:
        """Root seed sequence for the block backends, drawn from :attr:`rng` if no seed was set."""
        if self.seed_seq is not None:
            return self.seed_seq
        return np.random.SeedSequence(self.rng.integers(2**32, size=4, dtype=np.uint32).tolist())

    def _validate_run_params(self, n_simulations: int, n_workers: int | None, backend: str) -> None:
        check_positive_int("n_simulations", n_simulations)
        if n_workers is not None:
            check_positive_int("n_workers", n_workers)
        if backend not in self._VALID_BACKENDS:
            raise InvalidParameterError("backend", backend, f"must be one of {self._VALID_BACKENDS}")
        if backend == "vectorized" and not self.supports_batch:
            raise InvalidParameterError("backend", backend, f"is not supported by simulation '{self.name}'")

    def run(
        self,
        n_simulations: int,
        *,
        backend: str | None = None,
        n_workers: int | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
        **simulation_kwargs: Any,
    ) -> "SimulationResult":
        r"""
        Run ``n_simulations`` trials.

        Parameters
        ----------
        n_simulations : int
            Number of trials, at least 1.
        backend : str, optional
            One of :data:`arcwalk.config.BACKENDS`; :attr:`backend` when omitted.
        n_workers : int, optional
            Pool size for ``"thread"``, ``"process"`` and ``"auto"``; the CPU
            count when omitted.
        progress_callback : callable, optional
            Called as ``f(done, total)`` while trials complete.
        **simulation_kwargs
            Passed through to :meth:`single_simulation` or :meth:`batch_simulation`.

        Returns
        -------
        SimulationResult

        Raises
        ------
        InvalidParameterError
            For a count below 1, an unknown backend, or ``"vectorized"`` on a
            simulation without a batch path.
        """
        backend = backend or self.backend
        self._validate_run_params(n_simulations, n_workers, backend)

        t0 = time.time()
        results, backend_used = self._execute_with_backend(
            backend, n_simulations, n_workers, progress_callback, **simulation_kwargs
        )
        return self._create_result(results, n_simulations, time.time() - t0, backend_used)

    def _resolve_backend_type(self, backend: str, n_simulations: int, n_workers: int) -> str:
        """Concrete backend for ``backend``; only ``"auto"`` is rewritten."""
        if backend != "auto":
            return backend
        if n_workers <= 1 or n_simulations < self._PARALLEL_THRESHOLD:
            return "sequential"
        if is_windows_platform():
            logger.info("Parallel backend 'auto' resolved to 'process' on Windows platform.")
            return "process"
        return "thread"

    def _create_backend(self, backend: str, n_workers: int):
        if backend == "sequential":
            return SequentialBackend()
        if backend == "vectorized":
            return VectorizedBackend()
        pool = ThreadBackend if backend == "thread" else ProcessBackend
        return pool(n_workers=n_workers, chunks_per_worker=self._CHUNKS_PER_WORKER)

    def _execute_with_backend(
        self,
        backend: str,
        n_simulations: int,
        n_workers: int | None,
        progress_callback: Callable[[int, int], None] | None,
        **simulation_kwargs: Any,
    ) -> tuple[np.ndarray, str]:
        """Run the trials and return the stacked results with the backend actually used."""
        if n_workers is None:
            n_workers = mp.cpu_count()
        backend = self._resolve_backend_type(backend, n_simulations, n_workers)

        if backend == "sequential":
            logger.info("Computing %d trials sequentially...", n_simulations)
            seed_seq = self.seed_seq
        elif backend == "vectorized":
            logger.info("Computing %d trials in vectorized batches...", n_simulations)
            seed_seq = self._spawn_root()
        else:
            logger.info(
                "Computing %d trials in parallel using %s backend with %d workers...",
                n_simulations, backend, n_workers
            )
            seed_seq = self._spawn_root()

        runner = self._create_backend(backend, n_workers)
        results = runner.run(self, n_simulations, seed_seq, progress_callback, **simulation_kwargs)
        return results, backend

    def _create_result(
        self,
        results: np.ndarray,
        n_simulations: int,
        execution_time: float,
        backend: str,
    ) -> "SimulationResult":
        # core imports this module
        from .core import SimulationResult  # pylint: disable=import-outside-toplevel

        meta = {
            "simulation_name": self.name,
            "timestamp": time.time(),
            "n": n_simulations,
            "backend": backend,
            "seed_entropy": self.seed_seq.entropy if self.seed_seq else None,
        }
        return SimulationResult(
            results=results,
            fields=tuple(self.output_fields),
            n_simulations=n_simulations,
            execution_time=execution_time,
            metadata=meta,
        )
