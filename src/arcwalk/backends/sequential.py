"""In-order execution on the simulation's own generator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from .base import allocate_results

if TYPE_CHECKING:
    from ..simulation import MonteCarloSimulation

__all__ = ["SequentialBackend"]


class SequentialBackend:
    r"""
    Fill the table row by row from ``sim.rng``.

    Row :math:`i` is the :math:`i`-th trial drawn from that stream, so a run
    started from a caller's generator leaves the generator exactly where drawing
    the same trials by hand would.
    """

    def run(
        self,
        sim: "MonteCarloSimulation",
        n_simulations: int,
        _seed_seq: np.random.SeedSequence | None,
        progress_callback: Callable[[int, int], None] | None,
        **simulation_kwargs: Any,
    ) -> np.ndarray:
        results = allocate_results(sim, n_simulations)
        # progress roughly every 1%
        step = max(1, n_simulations // 100)

        for i in range(n_simulations):
            results[i] = sim.single_simulation(**simulation_kwargs)
            done = i + 1
            if progress_callback and (done % step == 0 or done == n_simulations):
                progress_callback(done, n_simulations)

        return results
