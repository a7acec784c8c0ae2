r"""
Pool-based backends.

:class:`ThreadBackend` and :class:`ProcessBackend` differ only in the executor
they open. Both cut the trials with :func:`~arcwalk.backends.base.make_blocks`,
seed every block with its own child of the run's seed sequence, and copy each
finished block into its slice of the table. The output therefore depends on
the seed and the block layout, never on completion order.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from .base import allocate_results, make_blocks, worker_run_chunk

if TYPE_CHECKING:
    from ..simulation import MonteCarloSimulation

logger = logging.getLogger(__name__)

__all__ = [
    "ThreadBackend",
    "ProcessBackend",
]

_CHUNKS_PER_WORKER = 8


class _PooledBackend:
    """
    Run blocks of trials on an executor opened by :meth:`_executor`.

    Parameters
    ----------
    n_workers : int
        Pool size.
    chunks_per_worker : int, default 8
        Blocks per worker; more blocks even out uneven trial costs.
    """

    def __init__(self, n_workers: int, chunks_per_worker: int = _CHUNKS_PER_WORKER):
        if n_workers <= 0:
            raise ValueError("n_workers must be positive")
        if chunks_per_worker <= 0:
            raise ValueError("chunks_per_worker must be positive")
        self.n_workers = n_workers
        self.chunks_per_worker = chunks_per_worker

    def _executor(self, max_workers: int) -> Executor:
        raise NotImplementedError

    def _prepare_blocks(
        self, n_simulations: int, seed_seq: np.random.SeedSequence | None
    ) -> tuple[list[tuple[int, int]], list[np.random.SeedSequence]]:
        block_size = max(1, n_simulations // (self.n_workers * self.chunks_per_worker))
        blocks = make_blocks(n_simulations, block_size)
        root = seed_seq if seed_seq is not None else np.random.SeedSequence()
        return blocks, root.spawn(len(blocks))

    def run(
        self,
        sim: "MonteCarloSimulation",
        n_simulations: int,
        seed_seq: np.random.SeedSequence | None,
        progress_callback: Callable[[int, int], None] | None,
        **simulation_kwargs: Any,
    ) -> np.ndarray:
        blocks, child_seqs = self._prepare_blocks(n_simulations, seed_seq)
        results = allocate_results(sim, n_simulations)
        completed = 0

        with self._executor(min(self.n_workers, len(blocks))) as ex:
            futs = {
                ex.submit(worker_run_chunk, sim, j - i, ss, dict(simulation_kwargs)): (i, j)
                for (i, j), ss in zip(blocks, child_seqs)
            }
            try:
                for f in as_completed(futs):
                    i, j = futs[f]
                    results[i:j] = f.result()
                    completed += j - i
                    if progress_callback:
                        progress_callback(completed, n_simulations)
            except KeyboardInterrupt:  # pragma: no cover
                for f in futs:
                    f.cancel()
                raise

        logger.debug("%s finished %d blocks", type(self).__name__, len(blocks))
        return results


class ThreadBackend(_PooledBackend):
    """
    Blocks on a :class:`~concurrent.futures.ThreadPoolExecutor`.

    NumPy drops the GIL inside the step draws and prefix sums, which is where a
    walk trial spends its time.
    """

    def _executor(self, max_workers: int) -> Executor:
        return ThreadPoolExecutor(max_workers=max_workers)


class ProcessBackend(_PooledBackend):
    """
    Blocks on a :class:`~concurrent.futures.ProcessPoolExecutor` with the ``spawn`` context.

    The simulation is pickled into every worker; its generator is rebuilt there.
    """

    def _executor(self, max_workers: int) -> Executor:
        return ProcessPoolExecutor(max_workers=max_workers, mp_context=mp.get_context("spawn"))
