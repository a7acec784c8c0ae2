r"""
Pieces shared by the execution backends: block partitioning, the worker
entry point used by both pools, and the :class:`ExecutionBackend` protocol.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any, Callable, Protocol

import numpy as np

if TYPE_CHECKING:
    from ..simulation import MonteCarloSimulation

__all__ = [
    "ExecutionBackend",
    "make_blocks",
    "worker_run_chunk",
    "allocate_results",
    "is_windows_platform",
]


def is_windows_platform() -> bool:
    return sys.platform.startswith("win") or (sys.platform == "cli")


def make_blocks(n: int, block_size: int = 10_000) -> list[tuple[int, int]]:
    r"""
    Cut :math:`[0, n)` into consecutive ``(start, stop)`` pairs of at most ``block_size``.

    Examples
    --------
    >>> make_blocks(5, block_size=2)
    [(0, 2), (2, 4), (4, 5)]
    """
    if block_size <= 0:
        raise ValueError("block_size must be positive")
    return [(i, min(i + block_size, n)) for i in range(0, n, block_size)]


def allocate_results(sim: "MonteCarloSimulation", n_simulations: int) -> np.ndarray:
    """Empty ``(n_simulations, len(sim.output_fields))`` buffer in ``sim.result_dtype``."""
    return np.empty((n_simulations, len(sim.output_fields)), dtype=sim.result_dtype)


def worker_run_chunk(
    sim: "MonteCarloSimulation",
    chunk_size: int,
    seed_seq: np.random.SeedSequence,
    simulation_kwargs: dict[str, Any],
) -> np.ndarray:
    r"""
    Run ``chunk_size`` trials on a Philox generator seeded by ``seed_seq``.

    Module-level so a process pool can pickle it; ``sim`` must then be
    picklable too.
    """
    local_rng = np.random.Generator(np.random.Philox(seed_seq))
    out = allocate_results(sim, chunk_size)
    for k in range(chunk_size):
        out[k] = sim.single_simulation(_rng=local_rng, **simulation_kwargs)
    return out


class ExecutionBackend(Protocol):
    """Anything with a ``run`` that fills the ``(n_simulations, n_fields)`` table."""

    def run(
        self,
        sim: "MonteCarloSimulation",
        n_simulations: int,
        seed_seq: np.random.SeedSequence | None,
        progress_callback: Callable[[int, int], None] | None,
        **simulation_kwargs: Any,
    ) -> np.ndarray:
        ...
