r"""
Path functionals of a random walk.

Two statistics are extracted from a trajectory :math:`S_0, \dots, S_n`:

.. math::
   \tau = \max\{k : S_k = \max_j S_j\}, \qquad
   \gamma = \max\{k : S_k = S_0\}.

Both take the **last** matching index. Switching to the first occurrence
changes the distribution of :math:`\tau` for walks with repeated maxima, so
the tie-break is part of the contract.

The ``*_batch`` variants apply the same definitions row-wise to a 2-D array of
paths and back the vectorized execution backend.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from .path import Trajectory

__all__ = [
    "PathStatisticPair",
    "compute_tau",
    "compute_gamma",
    "compute_statistics",
    "compute_tau_batch",
    "compute_gamma_batch",
]


class PathStatisticPair(NamedTuple):
    """``(tau, gamma)`` for one trajectory."""

    tau: int
    gamma: int


def _last_index(mask: np.ndarray) -> int:
    # mask is non-empty and has at least one True entry
    return int(mask.size - 1 - np.argmax(mask[::-1]))


def compute_tau(trajectory: Trajectory) -> int:
    r"""
    Last time the trajectory attains its maximum.

    Parameters
    ----------
    trajectory : Trajectory

    Returns
    -------
    int
        Index in ``[0, n]``. ``0`` when the maximum is attained only at the start.

    Examples
    --------
    >>> from arcwalk.path import build_trajectory
    >>> compute_tau(build_trajectory([1, -1, 1, -1]))
    3
    """
    values = trajectory.values
    return _last_index(values == values.max())


def compute_gamma(trajectory: Trajectory) -> int:
    r"""
    Last time the trajectory equals its own starting value :math:`S_0`.

    Index ``0`` always qualifies, so the result is well defined.

    Parameters
    ----------
    trajectory : Trajectory

    Returns
    -------
    int
        Index in ``[0, n]``.

    Examples
    --------
    >>> from arcwalk.path import build_trajectory
    >>> compute_gamma(build_trajectory([1, -1, 1, 1], s0=5))
    2
    """
    values = trajectory.values
    return _last_index(values == values[0])


def compute_statistics(trajectory: Trajectory) -> PathStatisticPair:
    """Compute ``(tau, gamma)`` for one trajectory."""
    return PathStatisticPair(compute_tau(trajectory), compute_gamma(trajectory))


def _last_index_rows(mask: np.ndarray) -> np.ndarray:
    width = mask.shape[1]
    return (width - 1 - np.argmax(mask[:, ::-1], axis=1)).astype(np.int64)


def compute_tau_batch(paths: np.ndarray) -> np.ndarray:
    r"""
    Row-wise :func:`compute_tau` for an array of shape ``(n_paths, n + 1)``.

    Returns
    -------
    ndarray of int64
        Shape ``(n_paths,)``.
    """
    paths = np.atleast_2d(np.asarray(paths))
    return _last_index_rows(paths == paths.max(axis=1, keepdims=True))


def compute_gamma_batch(paths: np.ndarray) -> np.ndarray:
    """Row-wise :func:`compute_gamma` for an array of shape ``(n_paths, n + 1)``."""
    paths = np.atleast_2d(np.asarray(paths))
    return _last_index_rows(paths == paths[:, :1])
