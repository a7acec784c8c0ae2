"""
Execution backends for Monte Carlo trials.

:class:`SequentialBackend` runs in order on the simulation's generator,
:class:`ThreadBackend` and :class:`ProcessBackend` run seeded blocks on a pool,
and :class:`VectorizedBackend` calls the simulation's batch path.
"""

from .base import ExecutionBackend, allocate_results, is_windows_platform, make_blocks, worker_run_chunk
from .parallel import ProcessBackend, ThreadBackend
from .sequential import SequentialBackend
from .vectorized import VectorizedBackend

__all__ = [
    "ExecutionBackend",
    "SequentialBackend",
    "ThreadBackend",
    "ProcessBackend",
    "VectorizedBackend",
    "make_blocks",
    "worker_run_chunk",
    "allocate_results",
    "is_windows_platform",
]
