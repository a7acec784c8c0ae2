r"""
Vectorized NumPy execution backend.

Runs many trials at once through a simulation's :meth:`batch_simulation`,
in chunks of at most ``batch_size`` trials to bound peak memory (one chunk
of random walks of length :math:`n` holds ``batch_size * (n + 1)`` integers).

Notes
-----
**RNG discipline.** Draws come from a single :class:`numpy.random.Philox`
stream built from the run's :class:`~numpy.random.SeedSequence`, so a fixed
seed and ``batch_size`` reproduce the same table.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from .base import allocate_results, make_blocks

if TYPE_CHECKING:
    from ..simulation import MonteCarloSimulation

logger = logging.getLogger(__name__)

__all__ = ["VectorizedBackend"]


class VectorizedBackend:
    r"""
    Batch execution backend.

    Requires simulations to set ``supports_batch = True`` and implement
    :meth:`~arcwalk.simulation.MonteCarloSimulation.batch_simulation`.

    Parameters
    ----------
    batch_size : int, default 2_000
        Maximum number of trials materialized at once.

    Examples
    --------
    >>> backend = VectorizedBackend(batch_size=500)
    >>> results = backend.run(sim, n_simulations=10_000, seed_seq=seed_seq, progress_callback=None)  # doctest: +SKIP
    """

    def __init__(self, batch_size: int = 2_000):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.batch_size = batch_size

    def run(
        self,
        sim: "MonteCarloSimulation",
        n_simulations: int,
        seed_seq: np.random.SeedSequence | None,
        progress_callback: Callable[[int, int], None] | None = None,
        **simulation_kwargs: Any,
    ) -> np.ndarray:
        r"""
        Run trials in vectorized batches.

        Returns
        -------
        np.ndarray
            Array of shape ``(n_simulations, len(sim.output_fields))``.

        Raises
        ------
        ValueError
            If the simulation does not support batch execution.
        """
        if not getattr(sim, "supports_batch", False):
            raise ValueError(
                f"Simulation '{sim.name}' does not support batch execution. "
                "Set supports_batch = True and implement batch_simulation()."
            )

        if seed_seq is None:
            seed_seq = np.random.SeedSequence()
        rng = np.random.Generator(np.random.Philox(seed_seq))
        results = allocate_results(sim, n_simulations)

        for i, j in make_blocks(n_simulations, self.batch_size):
            results[i:j] = sim.batch_simulation(j - i, rng=rng, **simulation_kwargs)
            logger.debug("Batch [%d, %d) done", i, j)
            if progress_callback:
                progress_callback(j, n_simulations)

        return results
